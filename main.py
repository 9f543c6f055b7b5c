#!/usr/bin/env python3
"""
TempMail relay - disposable inbox polling with realtime OTP notifications.

Main entry point for the application.
"""

import argparse
import sys
from typing import List, Optional

from loguru import logger
from pydantic import ValidationError as SettingsValidationError

from src.core.config import Settings, get_settings
from src.core.exceptions import ConfigurationError
from src.core.logger import setup_structured_logging


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="TempMail relay server")
    parser.add_argument("--host", help="Bind address (overrides HOST)")
    parser.add_argument("--port", type=int, help="Port (overrides PORT)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Log level (overrides LOG_LEVEL)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the relay under uvicorn until SIGINT/SIGTERM."""
    args = parse_args(argv)

    overrides = {
        key: value
        for key, value in (("host", args.host), ("port", args.port), ("log_level", args.log_level))
        if value is not None
    }

    try:
        settings = get_settings()
        if overrides:
            # Re-validate so CLI values obey the same bounds as the environment.
            settings = Settings(**{**settings.model_dump(), **overrides})
    except SettingsValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    setup_structured_logging(
        level=settings.log_level, json_format=settings.log_json, log_dir=settings.log_dir or None
    )

    import uvicorn

    from web.app import create_app

    try:
        app = create_app(settings)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e.message}")
        return 1

    logger.info(f"Starting TempMail relay on {settings.host}:{settings.port} ({settings.env})")
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
