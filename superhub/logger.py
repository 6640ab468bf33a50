"""
Structured JSON Logging Module.

Every component of the client receives a :class:`StructuredLogger`
through its constructor.  Records are rendered as one JSON object per
line, both on stdout and in a size-rotated log file, so the session
audit trail can be filtered by ``extra.event`` with ordinary tooling.

Credentials never reach a handler: extra fields named like a secret
(``password``, ``otp``, ``token``...) are masked, and a bearer token
embedded in a message is cut down to its scheme.
"""

import json
import logging
import re
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional, TextIO

REDACTED: str = "[REDACTED]"

_SECRET_KEY_RE: re.Pattern[str] = re.compile(
    r"(password|otp|token|authorization|secret)", re.IGNORECASE,
)
_BEARER_RE: re.Pattern[str] = re.compile(r"(Bearer\s+)\S+", re.IGNORECASE)

_JsonScalar = (str, int, float, bool, type(None))


def redact_message(message: str) -> str:
    """Mask bearer credentials inside free text."""
    return _BEARER_RE.sub(rf"\g<1>{REDACTED}", message)


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Keys: ``timestamp`` (UTC ISO-8601), ``level``, ``logger_name``,
    ``message``, plus ``extra`` for caller-supplied fields and
    ``exception`` when a traceback is attached.  Scalar extras keep
    their JSON type; anything else is stringified.
    """

    _STANDARD_ATTRS: frozenset[str] = frozenset(
        logging.LogRecord(
            name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
        ).__dict__.keys()
    ) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "message": redact_message(record.getMessage()),
        }

        extra = {
            key: self._render_extra(key, value)
            for key, value in record.__dict__.items()
            if key not in self._STANDARD_ATTRS
        }
        if extra:
            entry["extra"] = extra

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exception"] = redact_message(record.exc_text)

        return json.dumps(entry, ensure_ascii=False)

    @staticmethod
    def _render_extra(key: str, value: Any) -> Any:
        # Audit ids such as "user_id" or "event" are not secrets.
        if _SECRET_KEY_RE.search(key) and value is not None:
            return REDACTED
        if isinstance(value, _JsonScalar):
            return value
        return str(value)


class StructuredLogger:
    """Injectable logger wrapper.

    The underlying ``logging.Logger`` is exposed as ``.logger`` (for
    ``exception()`` and handler access); the usual level methods are
    delegated.

    Usage::

        log = StructuredLogger(name="superhub.auth")
        log.info("Session restored", extra={"event": "SESSION_RESTORED"})

    Parameters
    ----------
    name:
        Logger name.  Handlers are attached only the first time a name
        is used, so constructing several wrappers for one name is safe.
    level:
        Threshold for the logger and both handlers.
    stream:
        Console destination, stdout by default.
    log_file, max_bytes, backup_count:
        Rotation settings; ``None`` falls back to ``AppConfig``.
    """

    def __init__(
        self,
        name: str = "superhub",
        level: int = logging.INFO,
        stream: Optional[TextIO] = None,
        log_file: Optional[str] = None,
        max_bytes: Optional[int] = None,
        backup_count: Optional[int] = None,
    ) -> None:
        self._logger: logging.Logger = logging.getLogger(name)
        self._logger.setLevel(level)

        if self._logger.handlers:
            return

        # Lazy import: config logs through stdlib logging at load time.
        from superhub.config import get_config
        cfg = get_config()

        formatter = JSONFormatter()
        console = logging.StreamHandler(stream or sys.stdout)
        console.setLevel(level)
        console.setFormatter(formatter)
        self._logger.addHandler(console)

        target = Path(log_file or cfg.LOG_FILE)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            rotating = RotatingFileHandler(
                filename=str(target),
                maxBytes=max_bytes if max_bytes is not None else cfg.LOG_MAX_BYTES,
                backupCount=backup_count if backup_count is not None else cfg.LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        except OSError as exc:
            self._logger.warning(
                "Log file '%s' unavailable (%s); logging to console only.",
                target, exc,
            )
            return
        rotating.setLevel(level)
        rotating.setFormatter(formatter)
        self._logger.addHandler(rotating)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def debug(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.critical(msg, *args, **kwargs)


def get_logger(name: str = "superhub") -> StructuredLogger:
    return StructuredLogger(name=name)
