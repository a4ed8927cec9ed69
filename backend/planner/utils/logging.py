"""Structured logging for collaborator calls."""

import logging
from typing import Any

from backend.planner.collaborators.executor import CallContext

logger = logging.getLogger(__name__)


class StructuredCallLogger:
    """Structured logger for collaborator calls."""

    def log_attempt(
        self,
        ctx: CallContext,
        attempt: int,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log a collaborator call attempt with structured data."""
        log_data: dict[str, Any] = {
            "collaborator": ctx.collaborator,
            "operation": ctx.operation,
            "attempt": attempt,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Collaborator call: {ctx.collaborator}.{ctx.operation} - {outcome}"

        if outcome == "success":
            logger.debug(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
