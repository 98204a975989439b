"""COD surcharge settings service."""

import logging
from typing import Any, Dict

from database.connection import Database
from database.models import CODSettings
from database.repositories import SettingsRepository
from database.repositories.settings_repo import COD_UPDATABLE_FIELDS
from utils.validators import validate_amount

logger = logging.getLogger(__name__)


class CODSettingsService:
    """Reads and updates the COD surcharge singleton."""

    def __init__(self, db: Database):
        self.db = db
        self.settings_repo = SettingsRepository(db)

    async def get_cod_settings(self) -> CODSettings:
        """
        Get COD settings, creating the default document on first read.

        Never raises: if the store is unreachable the hardcoded default is
        returned so checkout pricing stays available.
        """
        try:
            cod_settings = await self.settings_repo.get_cod_settings()
            if cod_settings is None:
                logger.info("COD settings not found, creating default")
                cod_settings = await self.settings_repo.create_cod_settings(CODSettings.default())
            return cod_settings

        except Exception as e:
            logger.error(f"Error getting COD settings, using default: {e}")
            return CODSettings.default()

    async def update_cod_settings(self, updates: Dict[str, Any]) -> None:
        """
        Merge fields into the COD settings (admin only).

        Args:
            updates: Any of surcharge_amount, is_enabled, description

        Raises:
            ValueError: Unknown field
            Exception: Store errors are propagated to the admin
        """
        unknown = set(updates) - set(COD_UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown COD settings fields: {', '.join(sorted(unknown))}")

        updates = dict(updates)
        if "surcharge_amount" in updates:
            surcharge = validate_amount(updates["surcharge_amount"])
            if surcharge is None:
                raise ValueError("COD surcharge must be a non-negative number")
            updates["surcharge_amount"] = surcharge
        if "is_enabled" in updates and not isinstance(updates["is_enabled"], bool):
            raise ValueError("is_enabled must be a boolean")

        try:
            # Make sure there is a document to merge into
            if await self.settings_repo.get_cod_settings() is None:
                await self.settings_repo.create_cod_settings(CODSettings.default())
            await self.settings_repo.update_cod_settings(updates)
            logger.info(f"COD settings updated: {updates}")
        except Exception as e:
            logger.error(f"Error updating COD settings: {e}")
            raise
