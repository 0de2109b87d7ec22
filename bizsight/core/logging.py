"""Structured JSON logging with PII masking and analysis-run correlation.

Provides JSON-formatted logs with customer contact masking and run ID tracking.
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
import time
import uuid
from collections.abc import Mapping
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from typing import Any

from bizsight.core.config import Settings, get_settings

# Analysis run correlation (one id per snapshot evaluation)
_run_id: ContextVar[str] = ContextVar("run_id", default="")


def set_run_id(value: str | None = None) -> str:
    """Set current run_id (or generate new). Returns active id."""
    rid = value or str(uuid.uuid4())
    _run_id.set(rid)
    return rid


def get_run_id() -> str:
    """Get current run_id for contextual logging."""
    return _run_id.get()


# --- Customer contact masking patterns ---
_PATTERNS = [
    # E-mail addresses
    (re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"), "***@***"),
    # Phone numbers: +country code form, or a bare 10-digit mobile number
    (re.compile(r"\+\d{1,3}[ -]?\d[\d -]{6,}\d\b"), "+***"),
    (re.compile(r"(?<![\d.])\b\d{10}\b(?!\.\d)"), "+***"),
]

_SENSITIVE_KEYS = {
    "email",
    "phone",
    "mobile",
    "contact",
    "address",
}

_RESERVED_ATTRS = frozenset(
    (
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
    )
)


def _mask_value(v: Any) -> Any:
    """Recursively mask customer contact data in any structure."""
    if v is None:
        return v
    if isinstance(v, (int, float, bool)):
        return v
    if isinstance(v, Mapping):
        return {
            k: ("***" if str(k).lower() in _SENSITIVE_KEYS else _mask_value(val))
            for k, val in v.items()
        }
    if isinstance(v, (list, tuple, set)):
        t = type(v)
        return t(_mask_value(i) for i in v)
    s = str(v)
    for rx, repl in _PATTERNS:
        s = rx.sub(repl, s)
    return s


class JsonFormatter(logging.Formatter):
    """JSON log formatter with automatic contact masking."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON with masked contacts."""
        payload: dict[str, Any] = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int((record.created - int(record.created)) * 1000):03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "msg": _mask_value(record.getMessage()),
            "module": record.module,
            "func": record.funcName,
            "line": record.lineno,
            "run_id": get_run_id() or None,
        }

        extras = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}
        if extras:
            payload["extra"] = _mask_value(extras)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def _ensure_dir(path: str) -> None:
    """Ensure directory exists for log file."""
    d = os.path.dirname(path)
    if d and not os.path.exists(d):
        os.makedirs(d, exist_ok=True)


def setup_logging(
    level: str | int = "INFO",
    to_stdout: bool = True,
    file_path: str | None = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Initialize structured JSON logging.

    Args:
        level: Log level (INFO, DEBUG, WARNING, ERROR)
        to_stdout: Enable stdout logging
        file_path: Path to JSON log file (None to disable file logging)
        max_bytes: Max log file size before rotation (default: 5MB)
        backup_count: Number of backup files to keep (default: 5)

    """
    root = logging.getLogger()
    root.setLevel(logging.getLevelName(level) if isinstance(level, str) else level)

    # Remove old handlers to avoid duplicates
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = JsonFormatter()

    if to_stdout:
        sh = logging.StreamHandler(sys.stdout)
        sh.setFormatter(fmt)
        root.addHandler(sh)

    if file_path:
        _ensure_dir(file_path)
        fh = RotatingFileHandler(
            file_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        fh.setFormatter(fmt)
        root.addHandler(fh)


def configure_logging(settings: Settings | None = None) -> None:
    """Apply LOG_LEVEL and LOG_FILE from settings."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, file_path=settings.log_file)


__all__ = [
    "setup_logging",
    "configure_logging",
    "set_run_id",
    "get_run_id",
    "JsonFormatter",
]
