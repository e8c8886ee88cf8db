"""Centralized logging configuration using Loguru with Pino-compatible output.

Usage:
    from sqlaudit.utils.logging import logger
    logger.info("Message")
    logger.debug("Debug message")  # Only shows if SQLAUDIT_LOG_LEVEL=DEBUG

Environment Variables:
    SQLAUDIT_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: INFO)
    SQLAUDIT_LOG_JSON: 0|1 (default: 0, human-readable)
    SQLAUDIT_LOG_FILE: path to log file (optional)
    SQLAUDIT_REQUEST_ID: correlation ID for a single audit run
"""

import json
import os
import sys
import uuid
from pathlib import Path

from loguru import logger

from .constants import ENV_LOG_FILE, ENV_LOG_JSON, ENV_LOG_LEVEL, ENV_REQUEST_ID

# Remove default handler
logger.remove()

# Pino-compatible numeric levels
PINO_LEVELS = {
    "TRACE": 10,
    "DEBUG": 20,
    "INFO": 30,
    "SUCCESS": 30,
    "WARNING": 40,
    "ERROR": 50,
    "CRITICAL": 60,
}

_log_level = os.environ.get(ENV_LOG_LEVEL, "INFO").upper()
_json_mode = os.environ.get(ENV_LOG_JSON, "0") == "1"
_log_file = os.environ.get(ENV_LOG_FILE)
_request_id = os.environ.get(ENV_REQUEST_ID) or str(uuid.uuid4())


def _pino_record(message) -> dict:
    """Build a Pino-shaped dict from a loguru message."""
    record = message.record

    pino_log = {
        "level": PINO_LEVELS.get(record["level"].name, 30),
        "time": int(record["time"].timestamp() * 1000),
        "msg": record["message"],
        "pid": record["process"].id,
        "request_id": record["extra"].get("request_id", _request_id),
    }

    for key, value in record["extra"].items():
        if key != "request_id":
            pino_log[key] = value

    if record["exception"]:
        pino_log["err"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else "Error",
            "message": str(record["exception"].value) if record["exception"].value else "",
        }

    return pino_log


def pino_compatible_sink(message):
    """Format log records as Pino-compatible NDJSON on stderr.

    stdout is reserved for reports piped with --stdout.

    {"level":30,"time":1715629847123,"msg":"...","pid":12345,"request_id":"..."}
    """
    # Never call logger.* inside a sink - causes infinite recursion
    sys.stderr.write(json.dumps(_pino_record(message), default=str) + "\n")
    sys.stderr.flush()


_human_format = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - "
    "<level>{message}</level>"
)

logger.level("DEBUG", color="<blue>")
logger.level("INFO", color="<white>")
logger.level("WARNING", color="<yellow>")
logger.level("ERROR", color="<red>")

if _json_mode:
    logger.add(
        pino_compatible_sink,
        level=_log_level,
        colorize=False,
    )
else:
    logger.add(
        sys.stderr,
        level=_log_level,
        format=_human_format,
        colorize=None,  # colors if TTY, plain if piped
    )

if _log_file:

    def _file_pino_sink(message):
        """Append Pino-format JSON to the configured log file."""
        with open(_log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(_pino_record(message), default=str) + "\n")

    logger.add(
        _file_pino_sink,
        level="DEBUG",  # File always captures everything
    )


def configure_file_logging(log_dir: Path, level: str = "DEBUG") -> int:
    """Add rotating file handler for persistent logs.

    Args:
        log_dir: Directory for log files (e.g., Path(".sqlaudit"))
        level: Minimum log level for file output

    Returns:
        The loguru handler id, so callers can remove it again.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "sqlaudit.log"

    return logger.add(
        log_file,
        rotation="10 MB",
        retention="7 days",
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
    )


__all__ = [
    "logger",
    "configure_file_logging",
]
