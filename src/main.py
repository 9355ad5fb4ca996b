"""Main application entry point for tripreel."""

import logging
import sys

import uvicorn

from server import create_app
from trip_planner import TripPlanner
from utils.config import setup_logging, load_config

logger = logging.getLogger(__name__)


def main():
    """Main entry point."""
    config = load_config()
    setup_logging(config.get("log_level", "INFO"))
    logger.info("Starting tripreel...")

    try:
        planner = TripPlanner(config)
    except Exception as e:
        logger.error(f"Failed to start application: {e}")
        sys.exit(1)

    app = create_app(planner)

    try:
        uvicorn.run(
            app,
            host=config.get("host", "127.0.0.1"),
            port=config.get("port", 8000),
            log_config=None,
        )
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
        sys.exit(0)


if __name__ == "__main__":
    main()
