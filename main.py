"""
Booking store entry point.

Serves the HTTP API with uvicorn, or runs the offline console demo.

Usage:
    API server:   python main.py serve
    Console mode: python main.py console
"""

import logging
import sys

from fieldservice.config import settings

logger = logging.getLogger(__name__)


def _run_api_mode() -> None:
    """Serve the booking API on the configured host and port."""
    import uvicorn

    from fieldservice.api import create_app

    app = create_app()
    logger.info("Serving on %s:%d (store: %s)", settings.api.host, settings.api.port, settings.store.backend)
    uvicorn.run(app, host=settings.api.host, port=settings.api.port, log_level=settings.log_level.lower())


def _run_console_mode() -> None:
    """Start the offline console demo."""
    from console_demo import ConsoleSession

    session = ConsoleSession()
    session.run()


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode()
    else:
        _run_api_mode()
