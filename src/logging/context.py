# src/logging/context.py - v2
"""Contextual logging support: attach tenant_id, module, run_id, step to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per orchestration run.
_tenant_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "tenant_id", default=None
)
_module: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "module", default=None
)
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_step: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "step", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    tenant_id: str | None = None
    module: str | None = None
    run_id: str | None = None
    step: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        tenant_id=_tenant_id.get(),
        module=_module.get(),
        run_id=_run_id.get(),
        step=_step.get(),
    )


def set_run_context(tenant_id: str, module: str, run_id: str) -> None:
    """Set run-level context (called once per orchestration run)."""
    _tenant_id.set(tenant_id)
    _module.set(module)
    _run_id.set(run_id)


def set_step_context(step: str | None) -> None:
    """Set the current orchestration step."""
    _step.set(step)


def clear_context() -> None:
    """Reset all context variables."""
    _tenant_id.set(None)
    _module.set(None)
    _run_id.set(None)
    _step.set(None)
