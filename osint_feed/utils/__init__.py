"""
Shared utility functions.

This package contains logging and date helpers used across multiple
pipeline stages.
"""

from .dates import parse_timestamp, recency_key
from .logging import (
    JsonlFormatter,
    log_event,
    redact_text,
    setup_llm_logger,
    setup_logging,
    truncate_text,
)

__all__ = [
    "parse_timestamp",
    "recency_key",
    "setup_logging",
    "setup_llm_logger",
    "log_event",
    "redact_text",
    "truncate_text",
    "JsonlFormatter",
]
