from __future__ import annotations

import contextvars
import json
import logging
import os
import sys
import time
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any

LOG_FORMATS = ("text", "json")


@dataclass(frozen=True)
class RequestContext:
    request_id: str = "-"
    route: str = "-"
    method: str = "-"


EMPTY_CONTEXT = RequestContext()
_request_context: contextvars.ContextVar[RequestContext] = contextvars.ContextVar(
    "tonal_flow_request_context", default=EMPTY_CONTEXT
)

# Attributes every LogRecord carries; anything else on a record came from ``extra``.
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
    }


class RequestContextFilter(logging.Filter):
    """Stamp each record with the current request context and an event name."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in asdict(_request_context.get()).items():
            if not hasattr(record, key):
                setattr(record, key, value)
        if not hasattr(record, "event"):
            record.event = record.msg if isinstance(record.msg, str) else "log"
        return True


class StructuredFormatter(logging.Formatter):
    """Render records as one JSON object or one ``key=value`` line per event."""

    def __init__(self, json_output: bool) -> None:
        super().__init__()
        self.json_output = json_output

    def build_payload(self, record: logging.LogRecord) -> dict[str, Any]:
        event = getattr(record, "event", "log")
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "event": event,
            "logger": record.name,
        }
        for key in asdict(EMPTY_CONTEXT):
            payload[key] = getattr(record, key, "-")

        message = record.getMessage()
        if message and message != event:
            payload["message"] = message
        for key, value in _extra_fields(record).items():
            payload.setdefault(key, value)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return payload

    def format(self, record: logging.LogRecord) -> str:
        payload = self.build_payload(record)
        if self.json_output:
            return json.dumps(payload, default=str)
        return " ".join(f"{key}={value}" for key, value in payload.items())


def configure_logging() -> None:
    root = logging.getLogger()
    if getattr(root, "_tonal_flow_logging_configured", False):
        return

    level = os.getenv("LOG_LEVEL", "INFO").upper()
    log_format = os.getenv("LOG_FORMAT", "text").lower()
    if log_format not in LOG_FORMATS:
        log_format = "text"

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter(json_output=log_format == "json"))
    handler.addFilter(RequestContextFilter())

    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    root._tonal_flow_logging_configured = True  # type: ignore[attr-defined]


def set_request_context(*, request_id: str, route: str, method: str) -> None:
    _request_context.set(RequestContext(request_id=request_id, route=route, method=method))


def clear_request_context() -> None:
    _request_context.set(EMPTY_CONTEXT)


def current_request_context() -> RequestContext:
    return _request_context.get()


def current_request_id() -> str:
    return _request_context.get().request_id


def new_request_id() -> str:
    return uuid.uuid4().hex


def log_event(logger: logging.Logger, event: str, level: int = logging.INFO, **fields: Any) -> None:
    logger.log(level, event, extra={"event": event, **fields})


def request_elapsed_ms(start_time: float) -> int:
    return round((time.perf_counter() - start_time) * 1000)
