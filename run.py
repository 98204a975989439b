#!/usr/bin/env python3
"""Entry point for the storefront affiliate backend."""

import asyncio
import logging

from dotenv import load_dotenv

# Load environment variables before importing settings
load_dotenv()

from config import settings
from database.connection import Database
from services.affiliate_service import AffiliateService
from services.cod_settings_service import CODSettingsService


# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)


async def main():
    """Create the schema and materialize the settings singletons."""
    logger.info("Initializing storefront database...")

    db = Database(
        settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
    )
    await db.initialize()
    logger.info("Database initialized")

    try:
        cod_settings = await CODSettingsService(db).get_cod_settings()
        logger.info(
            f"COD surcharge: {cod_settings.surcharge_amount} "
            f"({'enabled' if cod_settings.is_enabled else 'disabled'})"
        )

        program_settings = await AffiliateService(db).get_affiliate_settings()
        logger.info(
            f"Affiliate commission rate: {program_settings.default_commission_rate}%, "
            f"minimum payout: {program_settings.min_payout_amount}"
        )
    finally:
        await db.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    except Exception as e:
        logger.error(f"Initialization failed: {e}")
        raise
