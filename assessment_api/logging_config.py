"""
Logging setup for the relay.

Every line is a JSON object carrying the request ID (set per request by the
middleware in main.py) plus whichever relay fields the call passed in `extra`.
"""

import json
import logging
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

# Keys callers may attach with logger.info(..., extra={...})
RELAY_FIELDS = ("provider", "model", "used_fallback", "lead_score", "webhook_status", "status_code")


def bind_request_id(header_value: str | None) -> str:
    """Use the caller's X-Correlation-ID if present, else mint one."""
    rid = header_value or uuid.uuid4().hex
    request_id_ctx.set(rid)
    return rid


class RelayJsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "request_id": request_id_ctx.get(),
            "msg": record.getMessage(),
        }
        entry.update(
            (field, getattr(record, field)) for field in RELAY_FIELDS if hasattr(record, field)
        )
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(
        RelayJsonFormatter() if json_output
        else logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level.upper())

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
