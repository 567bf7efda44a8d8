"""Structured logging for trip operations."""

import logging
from typing import Any
from uuid import UUID

logger = logging.getLogger(__name__)


class StructuredTripLogger:
    """Structured logger for trip planning operations."""

    def log_operation(
        self,
        action: str,
        user_id: UUID,
        trip_id: UUID,
        outcome: str,
        new_trip_id: UUID | None = None,
        counts: dict[str, int] | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log a trip operation with structured data."""
        log_data: dict[str, Any] = {
            "action": action,
            "user_id": str(user_id),
            "trip_id": str(trip_id),
            "outcome": outcome,
        }

        if new_trip_id is not None:
            log_data["new_trip_id"] = str(new_trip_id)
        if counts:
            log_data.update(counts)
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Trip operation: {action} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
