"""Logging helpers for gslock.

Diagnostics go to stderr only; stdout belongs to the guarded command.
"""

import atexit
import contextlib
import json
import logging
import os
import re
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler

from gslock.core.config import LogConfig
from gslock.core.constants import LOG_LEVEL_ENV_VAR

_LOG_RECORD_RESERVED_FIELDS = set(logging.makeLogRecord({}).__dict__.keys()) | {"message", "asctime"}
_REDACTED_VALUE = "[REDACTED]"
_SENSITIVE_FIELD_PARTS = {"password", "secret", "token", "credential", "credentials", "authorization"}
_SENSITIVE_KEY_REGEX = r"client[_-]?secret|access[_-]?token|refresh[_-]?token|private[_-]?key|password|secret|token"
_SENSITIVE_KEY_VALUE_PATTERN = re.compile(
    rf"""(?ix)
    (?P<key>["']?(?<![A-Za-z0-9_])(?:{_SENSITIVE_KEY_REGEX})(?![A-Za-z0-9_])["']?)
    (?P<separator>\s*[:=]\s*)
    (?P<value>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*'|[^,\s;}}\]]+)
    """
)
_BEARER_PATTERN = re.compile(r"(?i)\b(bearer)\s+([A-Za-z0-9._~+/=-]+)")

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
VALID_LOG_FORMATS = ("text", "json")


def _safe_record_message(record: logging.LogRecord) -> str:
    try:
        return record.getMessage()
    except Exception:
        # Keep logging resilient when message formatting fails.
        return f"{record.msg} [log-message-format-error]"


def _is_sensitive_field(name: str) -> bool:
    parts = [part for part in re.split(r"[^a-z0-9]+", name.lower()) if part]
    if any(part in _SENSITIVE_FIELD_PARTS for part in parts):
        return True
    return parts[-2:] == ["private", "key"]


def _redact_key_value_match(match: re.Match[str]) -> str:
    value = match.group("value")
    if len(value) >= 2 and value[0] in {"'", '"'} and value[-1] == value[0]:
        redacted = f"{value[0]}{_REDACTED_VALUE}{value[0]}"
    else:
        redacted = _REDACTED_VALUE
    return f"{match.group('key')}{match.group('separator')}{redacted}"


def redact_message(message: str) -> str:
    """Mask credential-looking values in a free-form message."""
    redacted = _SENSITIVE_KEY_VALUE_PATTERN.sub(_redact_key_value_match, message)
    return _BEARER_PATTERN.sub(lambda m: f"{m.group(1)} {_REDACTED_VALUE}", redacted)


def _extra_fields(record: logging.LogRecord) -> dict[str, object]:
    fields: dict[str, object] = {}
    for key, value in record.__dict__.items():
        if key in _LOG_RECORD_RESERVED_FIELDS or key.startswith("_"):
            continue
        fields[key] = _REDACTED_VALUE if _is_sensitive_field(key) else value
    return fields


class SensitiveDataFilter(logging.Filter):
    """Best-effort redaction for sensitive values in log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = redact_message(_safe_record_message(record))
        record.args = ()
        for key in list(record.__dict__):
            if key in _LOG_RECORD_RESERVED_FIELDS or key.startswith("_"):
                continue
            if _is_sensitive_field(key):
                record.__dict__[key] = _REDACTED_VALUE
        return True


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging output.

    Each log record is a single JSON object on one line.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": redact_message(_safe_record_message(record)),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process": record.process,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        log_entry.update(_extra_fields(record))
        return json.dumps(log_entry, default=str)


class ContextLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges contextual fields into record extras."""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        merged_extra = dict(self.extra)
        extra = kwargs.get("extra")
        if isinstance(extra, dict):
            merged_extra.update(extra)
        kwargs["extra"] = merged_extra
        return msg, kwargs


def with_log_context(
    logger: logging.Logger | logging.LoggerAdapter, **context: object
) -> logging.Logger | logging.LoggerAdapter:
    """Return a logger enriched with persistent contextual fields."""
    if not isinstance(logger, (logging.Logger, logging.LoggerAdapter)):
        # Preserve test doubles that do not satisfy logging interfaces.
        return logger

    existing_context: dict[str, object] = {}
    base_logger = logger
    if isinstance(logger, logging.LoggerAdapter):
        existing_context = dict(logger.extra or {})
        base_logger = logger.logger

    existing_context.update({k: v for k, v in context.items() if v is not None})
    return ContextLoggerAdapter(base_logger, existing_context)


def resolve_log_level(log_level: str | None) -> str:
    """Pick the effective level: explicit value > LOG_LEVEL env var > default."""
    if log_level is None:
        log_level = os.environ.get(LOG_LEVEL_ENV_VAR) or LogConfig.level
    if log_level.upper() not in VALID_LOG_LEVELS:
        print(f"Warning: Invalid log level '{log_level}', using {LogConfig.level}", file=sys.stderr)
        return LogConfig.level
    return log_level.upper()


_atexit_registered = False


def setup_logging(config: LogConfig | None = None) -> logging.Logger:
    """Configure root logging for a gslock run.

    Args:
        config: Logging configuration. When omitted, the level comes from
            the LOG_LEVEL environment variable.

    Returns:
        The package logger
    """
    global _atexit_registered

    config = config or LogConfig(level=resolve_log_level(None))

    if not _atexit_registered:
        atexit.register(logging.shutdown)
        _atexit_registered = True

    numeric_level = getattr(logging, resolve_log_level(config.level))

    for handler in logging.root.handlers[:]:
        handler.close()
        logging.root.removeHandler(handler)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file is not None:
        try:
            config.log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(
                RotatingFileHandler(
                    config.log_file,
                    maxBytes=config.file_max_bytes,
                    backupCount=config.file_backup_count,
                )
            )
        except OSError as e:
            print(f"Warning: Cannot open log file {config.log_file}: {e}. Logging to stderr only.", file=sys.stderr)

    if config.log_format.lower() == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(numeric_level)
        handler.addFilter(SensitiveDataFilter())
        logging.root.addHandler(handler)

    logging.root.setLevel(numeric_level)

    logger = logging.getLogger("gslock")
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    return logger


def flush_logging_handlers() -> None:
    """Flush root handlers before handing the exit code back to the shell."""
    for handler in logging.root.handlers:
        with contextlib.suppress(Exception):
            handler.flush()
