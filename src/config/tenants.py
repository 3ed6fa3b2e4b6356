# src/config/tenants.py - v1
"""Tenant store connections and their resolution.

The registry file maps each tenant to one document-store connection per
analysis module:

    {
      "acme": {
        "observatory": {"base_url": "https://acme.firebaseio.com", "credential": "..."},
        "commercial": {"base_url": "https://acme-sales.firebaseio.com", "credential": "..."}
      }
    }

Connections are resolved explicitly and passed to every store call; nothing
in the store layer reads tenant configuration on its own.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, Field, ValidationError

from convocache.config.settings import ConfigurationError
from convocache.core.models import validate_module

logger = logging.getLogger(__name__)


class StoreConnection(BaseModel):
    """Resolved connection to a tenant's remote document store."""

    tenant_id: str
    base_url: str = ""
    credential: str = ""

    @property
    def is_complete(self) -> bool:
        """True when both base URL and credential are set."""
        return bool(self.base_url.strip()) and bool(self.credential.strip())

    @property
    def root_url(self) -> str:
        """Base URL without trailing slash."""
        return self.base_url.strip().rstrip("/")


class ModuleConnection(BaseModel):
    """Per-module connection settings as stored in the registry file."""

    base_url: str = ""
    credential: str = ""


class TenantConfig(BaseModel):
    """Connections configured for one tenant, keyed by module."""

    modules: dict[str, ModuleConnection] = Field(default_factory=dict)


class ConnectionResolver(Protocol):
    """Anything that turns (tenant, module) into a StoreConnection."""

    def resolve(self, tenant_id: str, module: str) -> StoreConnection: ...


def parse_registry(data: dict) -> dict[str, TenantConfig]:
    """Parse raw registry JSON into TenantConfig models.

    Raises:
        ConfigurationError: If the structure is invalid.
    """
    if not isinstance(data, dict):
        raise ConfigurationError("Tenant registry must be a JSON object")
    registry: dict[str, TenantConfig] = {}
    for tenant_id, modules in data.items():
        try:
            registry[tenant_id] = TenantConfig(modules=modules)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid tenant registry entry for {tenant_id!r}: {e}"
            ) from e
    return registry


def load_tenant_registry(path: Path) -> dict[str, TenantConfig]:
    """Load the tenant registry file.

    A missing file is an empty registry.

    Raises:
        ConfigurationError: If the file is not valid JSON or has a bad shape.
    """
    path = Path(path).expanduser()
    if not path.exists():
        logger.debug("Tenant registry %s not found", path)
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Tenant registry {path} is not valid JSON: {e}") from e
    return parse_registry(data)


def resolve_connection(
    registry: dict[str, TenantConfig], tenant_id: str, module: str
) -> StoreConnection:
    """Resolve the store connection for a tenant and module.

    Raises:
        ConfigurationError: If the tenant has no complete connection for module.
    """
    validate_module(module)
    tenant = registry.get(tenant_id)
    if tenant is None:
        raise ConfigurationError(f"No store connection configured for tenant {tenant_id!r}")
    conn = tenant.modules.get(module)
    if conn is None:
        raise ConfigurationError(
            f"No store connection configured for tenant {tenant_id!r}, module {module!r}"
        )
    resolved = StoreConnection(
        tenant_id=tenant_id, base_url=conn.base_url, credential=conn.credential
    )
    if not resolved.is_complete:
        raise ConfigurationError(
            f"Store connection for tenant {tenant_id!r}, module {module!r} "
            "requires both base_url and credential"
        )
    return resolved


class FileConnectionResolver:
    """Resolve connections from the registry file, re-reading it on every call.

    Credential rotation in the file takes effect on the next resolve.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path).expanduser()

    def resolve(self, tenant_id: str, module: str) -> StoreConnection:
        registry = load_tenant_registry(self._path)
        return resolve_connection(registry, tenant_id, module)


class StaticConnectionResolver:
    """Resolve connections from an in-memory registry."""

    def __init__(self, registry: dict[str, TenantConfig]) -> None:
        self._registry = registry

    def resolve(self, tenant_id: str, module: str) -> StoreConnection:
        return resolve_connection(self._registry, tenant_id, module)
