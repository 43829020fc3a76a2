#!/usr/bin/env python3
"""
Startup script for the AI Travel Advisor API
"""

import uvicorn
import logging
from travel_advisor.utils.config import get_settings, missing_critical_keys

def main():
    """Main startup function"""

    settings = get_settings()

    # Configure logging
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format=settings.LOG_FORMAT
    )
    logger = logging.getLogger(__name__)

    try:
        missing = missing_critical_keys(settings)
        if missing and not settings.MOCK_MODE and not settings.CONFIG_FILE:
            logger.error(f"Invalid configuration: {missing}")
            logger.error("Set AMAP_API_KEY and LLM_API_KEY, point CONFIG_FILE at a config.json, or set MOCK_MODE=true")
            return 1

        logger.info("Starting AI Travel Advisor...")
        logger.info(f"API Version: {settings.API_VERSION}")
        logger.info(f"Mock Mode: {settings.MOCK_MODE}")
        logger.info(f"Host: {settings.API_HOST}:{settings.API_PORT}")

        # Start the server
        uvicorn.run(
            "travel_advisor.api.main:app",
            host=settings.API_HOST,
            port=settings.API_PORT,
            reload=settings.DEBUG_MODE,
            log_level=settings.LOG_LEVEL.lower(),
            access_log=True
        )

    except KeyboardInterrupt:
        logger.info("Shutting down gracefully...")
        return 0
    except Exception as e:
        logger.error(f"Failed to start server: {str(e)}")
        return 1

if __name__ == "__main__":
    exit(main())
