r"""Utility functions for the retry engine.

This package provides parameter validation and structured logging
helpers.
"""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "log_structured",
    "validate_backoff_params",
    "validate_failure_types",
    "validate_max_attempts",
]

from aretry.utils.structured_logging import StructuredFormatter, log_structured
from aretry.utils.validation import (
    validate_backoff_params,
    validate_failure_types,
    validate_max_attempts,
)
