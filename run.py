"""
Main entrypoint for the Coin Gateway application.
Usage: python run.py [api]
"""

import asyncio
import logging
import os
import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))


def setup_logging() -> None:
    """
    Set up consistent logging configuration for the application.
    Uses environment variables for configuration.
    """
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    log_format = os.getenv(
        "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    log_file = os.getenv("LOG_FILE", "coin_gateway.log")
    log_to_file = os.getenv("LOG_TO_FILE", "false").lower() == "true"

    numeric_level = getattr(logging, log_level, logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_to_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        level=numeric_level,
        format=log_format,
        handlers=handlers,
        force=True,  # Override any existing configuration
    )


logger = logging.getLogger(__name__)


def print_usage() -> None:
    print("Usage: python run.py [api]")
    print("  api - Start the Coin Gateway API (default)")


async def main():
    if len(sys.argv) > 2:
        print_usage()
        sys.exit(1)

    command = sys.argv[1].lower() if len(sys.argv) == 2 else "api"

    if command != "api":
        print(f"Unknown command: {command}")
        print_usage()
        sys.exit(1)

    setup_logging()

    from coin_gateway.api.service import main as run_service

    logger.info("Starting API service...")
    await run_service()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nShutdown requested by user")
        sys.exit(0)
    except Exception as e:
        print(f"Application failed: {e}")
        sys.exit(1)
