"""Structured logging configuration for caught.

Configures structlog for the library's own diagnostic events. As a library,
caught stays quiet by default: the level is WARNING and nothing is written to
disk unless file logging is switched on.

Event naming convention:
- dot.notation, domain.entity.verb_past_tense
  (e.g., "outcome.classification.matched", "async_outcome.settled")
- Only type names of payloads are logged, never the payload values.

Usage:
    from caught.observability import configure_logging, get_logger, LoggingConfig

    configure_logging(LoggingConfig(log_level="DEBUG"))
    log = get_logger(__name__)
    log.debug("outcome.failure.captured", payload_type="KeyError")
"""

from __future__ import annotations

from enum import Enum
import logging
from logging.handlers import TimedRotatingFileHandler
import os
from pathlib import Path
import sys
from typing import Any

from pydantic import BaseModel, Field
import structlog

LOG_MODE_ENV = "CAUGHT_LOG_MODE"
LOG_LEVEL_ENV = "CAUGHT_LOG_LEVEL"


class LogMode(str, Enum):
    """Logging output mode."""

    DEV = "dev"
    PROD = "prod"


class LoggingConfig(BaseModel):
    """Configuration for structured logging.

    Attributes:
        mode: Output mode (dev for human-readable, prod for JSON).
        log_level: Minimum log level to output.
        log_dir: Directory for log files. Defaults to ~/.caught/logs/.
        max_log_days: Number of days to retain log files. Defaults to 7.
        enable_file_logging: Whether to write logs to files.
    """

    mode: LogMode = Field(default=LogMode.DEV)
    log_level: str = Field(default="WARNING")
    log_dir: Path = Field(default_factory=lambda: Path.home() / ".caught" / "logs")
    max_log_days: int = Field(default=7, ge=1, le=365)
    enable_file_logging: bool = Field(default=False)

    model_config = {"frozen": True}


_configured: bool = False
_current_config: LoggingConfig | None = None
_console_logging_enabled: bool = True

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _get_mode_from_env() -> LogMode:
    """Get logging mode from CAUGHT_LOG_MODE, defaulting to DEV."""
    if os.environ.get(LOG_MODE_ENV, "dev").lower() == "prod":
        return LogMode.PROD
    return LogMode.DEV


def _get_log_level(level_str: str) -> int:
    """Convert log level string to logging constant.

    Args:
        level_str: Log level as string (e.g., "INFO", "DEBUG").

    Returns:
        Logging constant, WARNING for unknown names.
    """
    return _LEVELS.get(level_str.upper(), logging.WARNING)


def _setup_file_handler(config: LoggingConfig) -> TimedRotatingFileHandler | None:
    """Set up a daily rotating file handler, or None if file logging is off."""
    if not config.enable_file_logging:
        return None

    config.log_dir.mkdir(parents=True, exist_ok=True)

    handler = TimedRotatingFileHandler(
        filename=str(config.log_dir / "caught.log"),
        when="midnight",
        interval=1,
        backupCount=config.max_log_days,
        encoding="utf-8",
        utc=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(_get_log_level(config.log_level))
    return handler


def _get_processors(mode: LogMode) -> list[Any]:
    """Build the structlog processor chain for the given mode."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if mode == LogMode.DEV:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    else:
        processors.append(structlog.processors.JSONRenderer())
    return processors


def set_console_logging(enabled: bool) -> None:
    """Enable or disable console (stderr) log output."""
    global _console_logging_enabled
    _console_logging_enabled = enabled


def is_console_logging_enabled() -> bool:
    """Check if console logging is enabled."""
    return _console_logging_enabled


class _FileWritingPrintLogger:
    """Print logger that writes to stderr and, optionally, a file handler."""

    def __init__(self, file_handler: TimedRotatingFileHandler | None = None) -> None:
        self._file_handler = file_handler

    def _log(self, message: str, level: int = logging.INFO) -> None:
        if _console_logging_enabled:
            print(message, file=sys.stderr)

        if self._file_handler:
            record = logging.LogRecord(
                name="caught",
                level=level,
                pathname="",
                lineno=0,
                msg=message,
                args=(),
                exc_info=None,
            )
            self._file_handler.emit(record)

    def msg(self, message: str) -> None:
        self._log(message, logging.INFO)

    def debug(self, message: str) -> None:
        self._log(message, logging.DEBUG)

    def info(self, message: str) -> None:
        self._log(message, logging.INFO)

    def warning(self, message: str) -> None:
        self._log(message, logging.WARNING)

    def error(self, message: str) -> None:
        self._log(message, logging.ERROR)

    def critical(self, message: str) -> None:
        self._log(message, logging.CRITICAL)

    warn = warning
    exception = error
    fatal = critical


class _FileWritingPrintLoggerFactory:
    """Factory for creating file-writing print loggers."""

    def __init__(self, file_handler: TimedRotatingFileHandler | None = None) -> None:
        self._file_handler = file_handler

    def __call__(self, *_args: Any) -> _FileWritingPrintLogger:
        return _FileWritingPrintLogger(self._file_handler)


def configure_logging(config: LoggingConfig | None = None) -> None:
    """Configure structlog for caught.

    Args:
        config: Logging configuration. If None, uses defaults with mode and
               level taken from CAUGHT_LOG_MODE / CAUGHT_LOG_LEVEL.

    Example:
        configure_logging(LoggingConfig(mode=LogMode.PROD, log_level="DEBUG"))
    """
    global _configured, _current_config

    if config is None:
        config = LoggingConfig(
            mode=_get_mode_from_env(),
            log_level=os.environ.get(LOG_LEVEL_ENV, "WARNING"),
        )

    _current_config = config
    log_level = _get_log_level(config.log_level)

    file_handler = _setup_file_handler(config)

    structlog.configure(
        processors=_get_processors(config.mode),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=_FileWritingPrintLoggerFactory(file_handler),
        cache_logger_on_first_use=True,
    )

    _configured = True


def _discard(*_args: Any, **_kwargs: Any) -> None:
    return None


class _LibraryLogger:
    """Logger handle that never configures structlog itself.

    Each call is forwarded to ``structlog.get_logger(name)`` while structlog is
    configured, by the host application or by configure_logging. Until then
    events are discarded, so importing caught leaves the process untouched.
    """

    __slots__ = ("_name",)

    def __init__(self, name: str | None) -> None:
        self._name = name

    def __getattr__(self, method_name: str) -> Any:
        if not structlog.is_configured():
            return _discard
        return getattr(structlog.get_logger(self._name), method_name)


def get_logger(name: str | None = None) -> Any:
    """Get a logger for caught's diagnostic events.

    Nothing is configured here; call configure_logging (or configure structlog
    in the host application) to see the events.

    Args:
        name: Optional logger name, usually the calling module's __name__.

    Returns:
        A logger with the structlog method surface (debug, info, ...).
    """
    return _LibraryLogger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables included in all subsequent log entries
    within the same async context.

    Example:
        bind_context(request_id="req_123")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove context variables from the logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


def get_current_config() -> LoggingConfig | None:
    """Get the current logging configuration, or None if not configured."""
    return _current_config


def is_configured() -> bool:
    """Check if configure_logging has been called."""
    return _configured


def reset_logging() -> None:
    """Reset logging configuration state.

    This is primarily for testing purposes.
    """
    global _configured, _current_config
    _configured = False
    _current_config = None
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
