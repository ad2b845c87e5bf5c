# app_registry/run_api.py
"""Run the app registry HTTP API."""

import logging
from typing import Optional

import uvicorn

from app_registry.api.config import ApiSettings
from app_registry.api.main import app

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def main(settings: Optional[ApiSettings] = None):
    """Main entry point."""
    settings = settings or ApiSettings()

    logger.info(f"Starting App Registry API on {settings.host}:{settings.port}")

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level
    )


if __name__ == "__main__":
    main()
