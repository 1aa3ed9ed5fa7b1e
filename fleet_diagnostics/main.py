#!/usr/bin/env python3
"""
Fleet Diagnostics - Main Application Entry Point

Ingests vehicle diagnostic logs and serves them over a small HTTP API.
"""

import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def main():
    """Main application entry point."""
    # Import after path setup
    from fleet_diagnostics.config.settings import get_settings
    from fleet_diagnostics.config.logging_config import setup_logging
    from fleet_diagnostics.api import create_app

    # Setup logging
    settings = get_settings()
    logger = setup_logging(settings.log_level)
    logger.info("Starting fleet diagnostics service")

    # Validate configuration
    is_valid, errors = settings.validate()
    if not is_valid:
        logger.warning(f"Configuration warnings: {errors}")

    app = create_app(settings)

    logger.info(f"Listening on http://{settings.host}:{settings.port}{settings.api_prefix}")
    app.run(host=settings.host, port=settings.port, debug=settings.app_debug)

    logger.info("Server stopped")


if __name__ == "__main__":
    main()
