"""
Structured logging for the shop core.

Engine and route loggers attach context through ``extra=`` (product_id,
postal_code, ...). The request id is not passed by callers: the middleware
stores it in ``request_id_ctx`` and RequestContextFilter copies it onto every
record emitted while that request is being handled.
"""
import logging
import json
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

request_id_ctx: ContextVar[Optional[str]] = ContextVar("simshop_request_id", default=None)

# Context attributes included in JSON output when present on the record
_EXTRA_FIELDS = (
    "request_id",
    "duration_ms",
    "product_id",
    "postal_code",
    "http_method",
    "http_path",
    "http_status",
)

_NOISY_LOGGERS = ("uvicorn.access", "httpcore", "httpx", "multipart")


class RequestContextFilter(logging.Filter):
    """Stamps the current request id on records that do not carry one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_ctx.get()
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        for name in _EXTRA_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_entry[name] = value
        # default=str keeps Decimal money exact ("12.30", not 12.3)
        return json.dumps(log_entry, default=str, ensure_ascii=False)


def setup_logging(level: str = "INFO", json_output: bool = True):
    """Configure root logging; ``json_output=False`` gives a one-line text format for local runs."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(name)s] %(levelname)s [%(request_id)s]: %(message)s"
        ))

    root.handlers = [handler]

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
