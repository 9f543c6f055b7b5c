"""Advanced logging with Loguru."""

import contextvars
import logging
import sys
from pathlib import Path
from types import FrameType
from typing import Any, Dict, Optional

from loguru import logger

# Context variable for request correlation ID
correlation_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id", default=None
)

__all__ = ["correlation_id_ctx", "setup_structured_logging", "InterceptHandler"]


class InterceptHandler(logging.Handler):
    """Route stdlib logging records (uvicorn, apscheduler, aiohttp) into Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding Loguru level if it exists
        try:
            level: Any = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame: Optional[FrameType] = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _correlation_patcher(record: Dict[str, Any]) -> None:
    """
    Patch log records with correlation_id from context.

    This function is called by Loguru for each log record to inject
    the correlation_id from the ContextVar into the log's extra fields.
    """
    corr_id = correlation_id_ctx.get()
    if corr_id:
        record["extra"]["correlation_id"] = corr_id


def setup_structured_logging(
    level: str = "INFO", json_format: bool = False, log_dir: Optional[str] = "logs"
) -> None:
    """
    Setup Loguru logging with structured output.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: Use JSON format for the file sink (True for production)
        log_dir: Directory for log files, or None/empty to log to stdout only
    """
    # Remove default handler
    logger.remove()

    # Configure logger to use correlation_id patcher
    logger.configure(patcher=_correlation_patcher)

    # Console handler - human readable
    console_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>"
    )
    logger.add(
        sys.stdout,
        format=console_format,
        level=level,
        colorize=True,
    )

    if log_dir:
        logs_dir = Path(log_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)

        # File handler - JSON for production or text for development
        if json_format:
            logger.add(
                logs_dir / "tempmail.jsonl",
                format="{message}",
                level=level,
                rotation="10 MB",  # Rotate when file reaches 10MB
                retention="30 days",  # Keep for 30 days
                compression="zip",  # Compress old logs
                serialize=True,  # JSON format
            )
        else:
            text_format = (
                "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | " "{name}:{function}:{line} - {message}"
            )
            logger.add(
                logs_dir / "tempmail.log",
                format=text_format,
                level=level,
                rotation="10 MB",
                retention="30 days",
                compression="zip",
            )

        # Error file - separate error logs
        logger.add(
            logs_dir / "errors_{time:YYYY-MM-DD}.log",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} - {message}",
            level="ERROR",
            rotation="10 MB",
            retention="90 days",  # Keep errors longer
            backtrace=True,
            diagnose=False,
        )

    logger.info(f"Logging initialized (level={level}, json={json_format})")

    # Intercept all standard logging
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # Set the root logger level to match the configured level
    logging.root.setLevel(getattr(logging, level))
