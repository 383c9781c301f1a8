"""Observability module.

This module provides:
- Structured logging with claim number and actor context
- Lifecycle event logging helpers
"""

from claim_tracker.observability.logger import (
    ClaimLogger,
    get_logger,
    claim_context,
    log_claim_event,
)

__all__ = [
    "ClaimLogger",
    "get_logger",
    "claim_context",
    "log_claim_event",
]
