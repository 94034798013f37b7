#!/usr/bin/env python3
"""Start the API with Logfire capturing startup errors."""

import sys

import logfire
import uvicorn

from saver.config import Settings, validate_settings
from saver.util.logging import setup_logging
from saver.util.observability import configure_logfire


def main() -> int:
    """Validate configuration, then serve the app until shutdown."""
    settings = Settings()

    # Configure Logfire early to catch startup errors
    configure_logfire(settings)
    setup_logging(settings)

    try:
        # Refuse to start unsigned
        validate_settings(settings)

        logfire.info("Starting Article Saver API", port=settings.port)

        uvicorn.run(
            "saver.interface.api.app:create_app",
            factory=True,
            host="0.0.0.0",
            port=settings.port,
            log_level="debug" if settings.debug else "info",
        )

        return 0

    except Exception as e:
        logfire.error(
            "Application startup failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        raise


if __name__ == "__main__":
    sys.exit(main())
