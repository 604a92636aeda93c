"""Structured logging for the API gateway."""

import json
import logging
from datetime import datetime, timezone
from typing import Any

from backend.app.db.context import RequestContext

logger = logging.getLogger(__name__)


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        structured = record.__dict__.get("structured")
        if isinstance(structured, dict):
            log.update(structured)
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Configure root logging once on startup.

    Args:
        level: Log level name
        fmt: "json" for structured output, anything else for plain text
    """
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s"))

    root = logging.getLogger()
    # Replace handlers installed by a previous call (app factory may run more than once)
    for existing in list(root.handlers):
        if getattr(existing, "_gateway_handler", False):
            root.removeHandler(existing)
    handler._gateway_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


class StructuredGatewayLogger:
    """Structured logger for gateway authorization decisions."""

    def log_decision(
        self,
        route: str,
        outcome: str,
        ctx: RequestContext | None = None,
        reason: str | None = None,
    ) -> None:
        """Log a gateway decision with structured data."""
        log_data: dict[str, Any] = {
            "route": route,
            "outcome": outcome,
        }

        if ctx is not None:
            log_data["user_id"] = str(ctx.user_id)
            log_data["org_id"] = str(ctx.org_id) if ctx.org_id else None
            log_data["roles"] = sorted(role.value for role in ctx.roles)

        if reason:
            log_data["reason"] = reason

        log_msg = f"Gateway decision: {route} - {outcome}"

        if outcome == "allowed":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
