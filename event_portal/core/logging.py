"""Logging configuration for event-portal.

TWO OUTPUT MODES
------------------
  _ContainerFormatter: one human-readable line per record, for local dev
    and `docker compose logs`.  WARNING and above get a [file:line] suffix
    so a rejected login or a denied delete can be traced to the guard
    that raised it.

  _JsonFormatter: one JSON object per line (LOG_JSON=true), for log
    aggregation.  Request context injected by RequestContextMiddleware
    (request_id, method, path, status_code, duration_ms) and the
    authenticated admin_id become top-level keys, so a query like

      admin_id == "..." AND level == "WARNING"

    finds every refused refresh or ownership denial for one account.

WHAT NEVER GETS LOGGED
------------------------
Passwords, password hashes, access tokens and refresh tokens.  Auth code
logs identities (admin id, email) and outcomes only; tests/api/
test_log_secrets.py holds the line.  As a backstop the stdout handler
carries _SecretScrubber, which masks anything shaped like a JWT or an
argon2 hash before either formatter sees it.
"""

from __future__ import annotations

import json
import logging
import re
import sys

# Compact JWS (header.payload.signature, header always starts "eyJ")
_JWT_RE = re.compile(r"eyJ[\w-]+\.[\w-]+\.[\w-]+")
_ARGON2_RE = re.compile(r"\$argon2(?:id|i|d)\$\S+")

REDACTED_TOKEN = "<token>"
REDACTED_HASH = "<argon2-hash>"


def redact_secrets(text: str) -> str:
    text = _JWT_RE.sub(REDACTED_TOKEN, text)
    return _ARGON2_RE.sub(REDACTED_HASH, text)


class _SecretScrubber(logging.Filter):
    """Rewrites the rendered message with tokens and hashes masked.

    Runs on the handler, so records from third-party loggers (httpx
    request lines, SQLAlchemy parameter dumps) are covered too.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        scrubbed = redact_secrets(message)
        if scrubbed != message:
            record.msg = scrubbed
            record.args = None
        return True


class _ContainerFormatter(logging.Formatter):
    """Single-line formatter tuned for container stdout.

    - Always: ISO-8601 timestamp, level, logger name, message
    - WARNING+: appends [filename:lineno]
    - ERROR/CRITICAL: stack trace included when exc_info is present
    """

    _BASE_FMT = "%(asctime)s %(levelname)-8s %(name)s  %(message)s"
    _LOC_SUFFIX = "  [%(filename)s:%(lineno)d]"

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        base = super().formatTime(record, datefmt)
        ms = int(record.msecs)
        # Insert .NNN before the timezone offset (last 5 chars: +0000)
        return f"{base[:-5]}.{ms:03d}{base[-5:]}"

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            self._style._fmt = self._BASE_FMT + self._LOC_SUFFIX
        else:
            self._style._fmt = self._BASE_FMT
        return super().format(record)

    def formatException(self, ei) -> str:
        return redact_secrets(super().formatException(ei))


class _JsonFormatter(logging.Formatter):
    """JSON Lines formatter for machine-parseable log output."""

    # Fields that middleware or auth code may attach to LogRecords.
    _CONTEXT_FIELDS = (
        "request_id",
        "method",
        "path",
        "admin_id",
        "status_code",
        "duration_ms",
    )

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, object] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in self._CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None and value != "-":
                log_entry[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = redact_secrets(self.formatException(record.exc_info))

        return json.dumps(log_entry, default=str)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Configure the root logger for container environments.

    Args:
        level_name: Log level string (debug/info/warning/error)
        json_format: If True, emit JSON lines. If False, human-readable.
                     Controlled by LOG_JSON in Settings.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ContainerFormatter())
    handler.addFilter(_SecretScrubber())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # Keep third-party loggers from flooding at DEBUG
    for name in (
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "httpcore",
        "httpx",
        "sqlalchemy.engine",
        "aiosqlite",
    ):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
