"""
Logging configuration for the fleet diagnostics service.

Every module logs through ``get_logger(__name__)``, which places it under the
``fleet_diagnostics`` logger configured by ``setup_logging``.
"""

import json
import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional, Tuple

ROOT_LOGGER = "fleet_diagnostics"

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, with any context under ``extra``."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        context = getattr(record, "extra_data", None)
        if context:
            payload["extra"] = context
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ColoredFormatter(logging.Formatter):
    """Console formatter that wraps the level name in an ANSI color."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        plain = record.levelname
        color = self.COLORS.get(plain)
        if color:
            record.levelname = f"{color}{plain}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


def _file_handler(path: Path, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_to_file: bool = False,
    log_to_console: bool = True,
    structured: bool = False,
    colored: bool = True,
    log_dir: Optional[Path] = None
) -> logging.Logger:
    """
    Configure the application logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_to_file: Also write a daily log and a daily errors-only log
        log_to_console: Write to stdout
        structured: JSON lines on the console instead of text
        colored: Color level names on the console (text mode only)
        log_dir: Directory for log files (default: ./logs)

    Returns:
        The ``fleet_diagnostics`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    logger.handlers.clear()

    if log_to_console:
        if structured:
            formatter = StructuredFormatter()
        elif colored:
            formatter = ColoredFormatter(CONSOLE_FORMAT, datefmt="%H:%M:%S")
        else:
            formatter = logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S")
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(formatter)
        logger.addHandler(console)

    if log_to_file:
        log_dir = log_dir or Path.cwd() / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        day = datetime.now().strftime("%Y%m%d")
        logger.addHandler(_file_handler(log_dir / f"{ROOT_LOGGER}_{day}.log", logging.DEBUG))
        logger.addHandler(_file_handler(log_dir / f"{ROOT_LOGGER}_errors_{day}.log", logging.ERROR))

    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """
    Logger for a module, placed under ``fleet_diagnostics``.

    Names outside the package hierarchy keep only their last component.
    """
    if not name or name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name or ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{name.rsplit('.', 1)[-1]}")


class ContextAdapter(logging.LoggerAdapter):
    """Attaches a fixed context dict to each record as ``extra_data``."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra["extra_data"] = {**self.extra, **extra.get("extra_data", {})}
        kwargs["extra"] = extra
        return msg, kwargs


def log_with_context(logger: logging.Logger, **context) -> ContextAdapter:
    """
    Wrap a logger so every record carries ``context``.

    Example:
        log_with_context(logger, vehicle_id=1234).info("Stats requested")
    """
    return ContextAdapter(logger, context)


@contextmanager
def log_performance(logger: logging.Logger, operation: str, **context):
    """Log how long the wrapped block took, or how long it ran before failing."""
    ctx = log_with_context(logger, operation=operation, **context)
    started = time.perf_counter()
    ctx.debug(f"Starting {operation}")
    try:
        yield ctx
    except Exception as e:
        ctx.error(f"Failed {operation} after {time.perf_counter() - started:.3f}s: {e}")
        raise
    ctx.info(f"Completed {operation} in {time.perf_counter() - started:.3f}s")
