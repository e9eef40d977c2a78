"""Structured logging for external API calls."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class StructuredEngineLogger:
    """Structured logger for searches, loads, and saves."""

    def log_call(
        self,
        operation: str,
        outcome: str,
        latency_ms: float,
        itinerary_id: str | None = None,
        error_reason: str | None = None,
        **fields: Any,
    ) -> None:
        """Log an outbound call with structured data."""
        log_data: dict[str, Any] = {
            "operation": operation,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if itinerary_id:
            log_data["itinerary_id"] = itinerary_id
        if error_reason:
            log_data["error_reason"] = error_reason
        log_data.update(fields)

        log_msg = f"Itinerary API: {operation} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once at service start-up."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
