"""Repository for singleton settings documents (COD surcharge, affiliate program)."""

from typing import Optional, Dict, Any
from datetime import datetime
import json

from database.connection import Database
from database.models import CODSettings, AffiliateSettings
from config.constants import DEFAULT_SETTINGS_ID

COD_UPDATABLE_FIELDS = ("surcharge_amount", "is_enabled", "description")
AFFILIATE_UPDATABLE_FIELDS = (
    "default_commission_rate",
    "min_payout_amount",
    "payout_methods",
    "terms_and_conditions",
)


def build_update_clause(
    updates: Dict[str, Any],
    allowed: tuple,
    first_param: int = 1,
) -> tuple:
    """
    Build the SET clause for a partial update.

    Args:
        updates: Field -> new value
        allowed: Field names that may be written
        first_param: Index of the first positional parameter

    Returns:
        (clause, values) where clause looks like "a = $1, b = $2"

    Raises:
        ValueError: If an unknown field is given
    """
    unknown = set(updates) - set(allowed)
    if unknown:
        raise ValueError(f"Unknown settings fields: {', '.join(sorted(unknown))}")

    parts = []
    values = []
    for offset, (field, value) in enumerate(updates.items()):
        parts.append(f"{field} = ${first_param + offset}")
        values.append(value)
    return ", ".join(parts), values


class SettingsRepository:
    """Repository for settings singletons keyed by a fixed id."""

    def __init__(self, db: Database):
        self.db = db

    # ==================== COD settings ====================

    async def get_cod_settings(self) -> Optional[CODSettings]:
        """Get the COD settings singleton, or None if not created yet."""
        conn = await self.db.get_connection()
        try:
            row = await conn.fetchrow(
                "SELECT * FROM cod_settings WHERE id = $1",
                DEFAULT_SETTINGS_ID,
            )
            if row:
                return CODSettings.from_row(row)
            return None
        finally:
            await self.db.release_connection(conn)

    async def create_cod_settings(self, defaults: CODSettings) -> CODSettings:
        """
        Materialize the COD singleton if missing and return the stored row.

        Concurrent first reads all insert under the same id; only one insert
        lands and every caller reads back that row.
        """
        conn = await self.db.get_connection()
        try:
            await conn.execute(
                """
                INSERT INTO cod_settings
                (id, surcharge_amount, is_enabled, description, created_at, updated_at)
                VALUES ($1, $2, $3, $4, $5, $6)
                ON CONFLICT (id) DO NOTHING
                """,
                DEFAULT_SETTINGS_ID, defaults.surcharge_amount, defaults.is_enabled,
                defaults.description, defaults.created_at, defaults.updated_at,
            )
            row = await conn.fetchrow(
                "SELECT * FROM cod_settings WHERE id = $1",
                DEFAULT_SETTINGS_ID,
            )
            return CODSettings.from_row(row)
        finally:
            await self.db.release_connection(conn)

    async def update_cod_settings(self, updates: Dict[str, Any]) -> None:
        """Merge fields into the COD singleton and stamp updated_at."""
        clause, values = build_update_clause(updates, COD_UPDATABLE_FIELDS, first_param=2)
        now_param = len(values) + 2
        set_clause = f"{clause}, updated_at = ${now_param}" if clause else f"updated_at = ${now_param}"

        conn = await self.db.get_connection()
        try:
            await conn.execute(
                f"UPDATE cod_settings SET {set_clause} WHERE id = $1",
                DEFAULT_SETTINGS_ID, *values, datetime.utcnow(),
            )
        finally:
            await self.db.release_connection(conn)

    # ==================== Affiliate settings ====================

    async def get_affiliate_settings(self) -> Optional[AffiliateSettings]:
        """Get the affiliate program settings singleton, or None."""
        conn = await self.db.get_connection()
        try:
            row = await conn.fetchrow(
                "SELECT * FROM affiliate_settings WHERE id = $1",
                DEFAULT_SETTINGS_ID,
            )
            if row:
                return AffiliateSettings.from_row(row)
            return None
        finally:
            await self.db.release_connection(conn)

    async def create_affiliate_settings(self, defaults: AffiliateSettings) -> AffiliateSettings:
        """Materialize the affiliate settings singleton if missing."""
        conn = await self.db.get_connection()
        try:
            await conn.execute(
                """
                INSERT INTO affiliate_settings
                (id, default_commission_rate, min_payout_amount, payout_methods,
                 terms_and_conditions, created_at, updated_at)
                VALUES ($1, $2, $3, $4, $5, $6, $7)
                ON CONFLICT (id) DO NOTHING
                """,
                DEFAULT_SETTINGS_ID, defaults.default_commission_rate,
                defaults.min_payout_amount, json.dumps(defaults.payout_methods),
                defaults.terms_and_conditions, defaults.created_at, defaults.updated_at,
            )
            row = await conn.fetchrow(
                "SELECT * FROM affiliate_settings WHERE id = $1",
                DEFAULT_SETTINGS_ID,
            )
            return AffiliateSettings.from_row(row)
        finally:
            await self.db.release_connection(conn)

    async def update_affiliate_settings(self, updates: Dict[str, Any]) -> None:
        """Merge fields into the affiliate settings singleton."""
        updates = dict(updates)
        if "payout_methods" in updates:
            updates["payout_methods"] = json.dumps(updates["payout_methods"])

        clause, values = build_update_clause(updates, AFFILIATE_UPDATABLE_FIELDS, first_param=2)
        now_param = len(values) + 2
        set_clause = f"{clause}, updated_at = ${now_param}" if clause else f"updated_at = ${now_param}"

        conn = await self.db.get_connection()
        try:
            await conn.execute(
                f"UPDATE affiliate_settings SET {set_clause} WHERE id = $1",
                DEFAULT_SETTINGS_ID, *values, datetime.utcnow(),
            )
        finally:
            await self.db.release_connection(conn)
