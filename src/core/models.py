# src/core/models.py - v2
"""Shared domain primitives used across cache, conversations and analysis."""

from __future__ import annotations

from typing import Any, Literal, get_args

# Dashboard modules owning an independent cache document.
AnalysisModule = Literal["observatory", "commercial"]

ANALYSIS_MODULES: tuple[str, ...] = get_args(AnalysisModule)

# Opaque output of the analysis function. Stored verbatim in cache entries.
AnalysisResult = dict[str, Any]


def validate_module(module: str) -> str:
    """Return module if it is a known analysis module.

    Raises:
        ValueError: If module is not one of ANALYSIS_MODULES.
    """
    if module not in ANALYSIS_MODULES:
        raise ValueError(
            f"Unknown analysis module: {module!r} (expected one of {', '.join(ANALYSIS_MODULES)})"
        )
    return module
