"""Core module - configuration, logging, and shared models."""

from colhist.core.config import Settings, get_settings
from colhist.core.models import (
    ErrorPolicy,
    MissingPolicy,
    Precision,
    Result,
    RowError,
    RowErrorKind,
    RowResult,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Models - enums
    "ErrorPolicy",
    "MissingPolicy",
    "Precision",
    "RowErrorKind",
    # Models - results
    "Result",
    "RowError",
    "RowResult",
]
