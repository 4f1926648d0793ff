"""Observability helpers for armkit."""

from armkit.observability.logging import (
    HumanReadableFormatter,
    SensitiveDataFilter,
    StructuredFormatter,
    configure_logging,
    get_context,
    log_context,
)

__all__ = [
    "HumanReadableFormatter",
    "SensitiveDataFilter",
    "StructuredFormatter",
    "configure_logging",
    "get_context",
    "log_context",
]
