"""Main entry point for the Timeshift Service.

Starts the FastAPI health/metrics/status app with uvicorn.
"""

import logging
import os

import uvicorn

from timeshift_service.main import app

logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point for the Timeshift Service."""
    port = int(os.getenv("PORT", "8000"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting Timeshift Service on {host}:{port}")

    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
        access_log=True,
    )

    server = uvicorn.Server(config)
    server.run()


if __name__ == "__main__":
    main()
