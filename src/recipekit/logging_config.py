"""Structured logging configuration for recipekit."""

import json
import logging
import os
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any

# Context variables for request/recipe tracking
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
recipe_id_ctx: ContextVar[str | None] = ContextVar("recipe_id", default=None)

_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    "request_id": request_id_ctx,
    "recipe_id": recipe_id_ctx,
}

# Short labels used by the text formatter
_SHORT_NAMES = {"request_id": "req", "recipe_id": "recipe"}


def current_context() -> dict[str, str]:
    """Context variables that are currently set."""
    return {name: value for name, var in _CONTEXT_VARS.items() if (value := var.get())}


class StructuredJsonFormatter(logging.Formatter):
    """JSON formatter for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **current_context(),
        }

        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data["location"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        # Non-ASCII ingredient names are written as-is
        return json.dumps(log_data, ensure_ascii=False)


class ContextualFormatter(logging.Formatter):
    """Human-readable formatter with context for development."""

    def format(self, record: logging.LogRecord) -> str:
        context = ", ".join(
            f"{_SHORT_NAMES[name]}={value[:8]}" for name, value in current_context().items()
        )
        context_str = f" [{context}]" if context else ""

        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        formatted = (
            f"{timestamp} | {record.levelname.ljust(8)} | {record.name}{context_str} | "
            f"{record.getMessage()}"
        )

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that automatically includes context variables."""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        kwargs["extra"] = {**kwargs.get("extra", {}), **current_context()}
        return msg, kwargs


def get_logger(name: str) -> ContextLogger:
    """Get a context-aware logger for the given module name."""
    return ContextLogger(logging.getLogger(name), {})


def _use_json(json_format: bool | None) -> bool:
    if json_format is not None:
        return json_format
    if os.getenv("LOG_FORMAT", "").lower() == "json":
        return True
    # Non-interactive production processes log JSON
    return not sys.stdout.isatty() and os.getenv("ENVIRONMENT", "development") == "production"


def configure_logging(
    log_level: str = "INFO",
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format for logs. If None, auto-detect based on environment.
        log_file: Optional file path to write logs to.
    """
    use_json = _use_json(json_format)
    level_str = os.getenv("LOG_LEVEL", log_level).upper()
    level = getattr(logging, level_str, logging.INFO)

    formatter = StructuredJsonFormatter() if use_json else ContextualFormatter()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        root_logger.addHandler(handler)

    logging.getLogger("recipekit").setLevel(level)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    get_logger(__name__).info(
        f"Logging configured: level={level_str}, format={'json' if use_json else 'text'}"
    )


class LoggingContext:
    """Context manager for setting logging context."""

    def __init__(self, request_id: str | None = None, recipe_id: str | None = None):
        self.values = {"request_id": request_id, "recipe_id": recipe_id}
        self._tokens: list[tuple[ContextVar[str | None], Token]] = []

    def __enter__(self) -> "LoggingContext":
        for name, value in self.values.items():
            if value is not None:
                var = _CONTEXT_VARS[name]
                self._tokens.append((var, var.set(value)))
        return self

    def __exit__(self, *args: Any) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()
