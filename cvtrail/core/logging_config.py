"""Logging setup for the cvtrail API.

One stdout handler on the root logger. Records carry the request ID set by
the request context middleware, in both the JSON format (deployments) and the
text format (local runs and tests). Messages are redacted after argument
interpolation, since model and storage errors are usually logged as ``%s``
arguments and may echo provider keys or signed artifact URLs.
"""

import contextvars
import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Optional


request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"

# Chatty libraries and the level they are held at
_QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,  # replaced by the request context access log
    "sqlalchemy.engine": logging.WARNING,
    "httpx": logging.WARNING,
    "LiteLLM": logging.WARNING,
    "botocore": logging.WARNING,
    "boto3": logging.WARNING,
    "pypdf": logging.ERROR,  # malformed-PDF chatter; extraction failures surface as ValidationError
}


class _RequestIdFilter(logging.Filter):
    """Stamp ``record.request_id`` from the current request context ("-" outside one)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("") or "-"
        return True


class _SecretFilter(logging.Filter):
    """Mask provider keys, AWS credentials and URL signatures in the final message."""

    _PATTERNS = [
        re.compile(r'\bsk-[a-zA-Z0-9_\-]{20,}'),
        re.compile(r'\bAKIA[A-Z0-9]{16}\b'),
        # presigned artifact URLs from S3 or GCS
        re.compile(r'(?i)((?:X-Amz-Signature|X-Amz-Credential|X-Amz-Security-Token|X-Goog-Signature)=)[^&\s]+'),
        re.compile(r'(?i)((?:api_key|secret|password|token)[=:]\s*)[^\s,\'"]{8,}'),
    ]
    MASK = "***REDACTED***"

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self.redact(record.getMessage())
        record.args = None
        if record.exc_info and not record.exc_text:
            record.exc_text = logging.Formatter().formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = self.redact(record.exc_text)
        return True

    @classmethod
    def redact(cls, text: str) -> str:
        for pattern in cls._PATTERNS:
            text = pattern.sub(lambda m: (m.group(1) if m.lastindex else "") + cls.MASK, text)
        return text


class _JsonFormatter(logging.Formatter):
    """One JSON object per line; ``extra`` fields are merged at the top level."""

    _RESERVED = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
        "request_id", "message", "asctime",
    }

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        rid = getattr(record, "request_id", "") or request_id_var.get("")
        if rid and rid != "-":
            payload["request_id"] = rid

        payload.update(
            (key, value) for key, value in record.__dict__.items()
            if key not in self._RESERVED and key not in payload
        )

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            payload["exception"] = record.exc_text
        return json.dumps(payload, default=str)


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Install the cvtrail handler on the root logger.

    ``log_format`` is ``"json"`` (default) or ``"text"``.
    """
    level = (log_level or "INFO").upper()
    fmt = (log_format or "json").lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(_RequestIdFilter())
    handler.addFilter(_SecretFilter())
    if fmt == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)

    logging.getLogger(__name__).info("Logging configured", extra={"level": level, "format": fmt})
