"""Affiliate service for managing the referral program."""

import logging
import math
import secrets
import string
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from config import settings
from config.constants import (
    DEFAULT_COMMISSION_RATE,
    REFERRAL_CLICKED,
    REFERRAL_REGISTERED,
    REFERRAL_ORDERED,
    REFERRAL_APPROVED,
    REFERRAL_REJECTED,
    COMMISSION_PENDING,
    COMMISSION_APPROVED,
    COMMISSION_PAID,
    COMMISSION_REJECTED,
    PAYOUT_PENDING,
    PAYOUT_PROCESSING,
    PAYOUT_COMPLETED,
    PAYOUT_PAID,
    PAYOUT_REJECTED,
    REFERRAL_CODE_PREFIX_LEN,
    REFERRAL_CODE_RANDOM_LEN,
    REFERRAL_CODE_SUFFIX_LEN,
)
from database.connection import Database
from database.models import Affiliate, AffiliateSettings, Commission, Follower, Payout, Referral
from database.repositories import (
    AffiliateRepository,
    ReferralRepository,
    CommissionRepository,
    PayoutRepository,
    SettingsRepository,
)
from database.repositories.settings_repo import AFFILIATE_UPDATABLE_FIELDS
from services.commission_ledger import (
    DisplayTotals,
    compute_affiliate_totals,
    conversion_rate,
    derive_followers,
)
from services.exceptions import (
    AffiliateNotFoundError,
    CommissionNotFoundError,
    PayoutNotFoundError,
    InvalidStatusTransitionError,
    PayoutRequestError,
)
from utils.formatters import format_currency, format_conversion_note
from utils.validators import validate_amount, validate_percentage, validate_referral_code

logger = logging.getLogger(__name__)

# Payout status -> statuses it may be reached from
PAYOUT_TRANSITIONS = {
    PAYOUT_PROCESSING: {PAYOUT_PENDING},
    PAYOUT_COMPLETED: {PAYOUT_PROCESSING},
    PAYOUT_PAID: {PAYOUT_PROCESSING, PAYOUT_COMPLETED},
    PAYOUT_REJECTED: {PAYOUT_PENDING, PAYOUT_PROCESSING},
}

# Payouts that claim part of the approved balance (every non-rejected one)
CLAIMED_PAYOUT_STATUSES = {PAYOUT_PENDING, PAYOUT_PROCESSING, PAYOUT_COMPLETED, PAYOUT_PAID}


@dataclass
class AffiliateDashboard:
    """Everything the affiliate dashboard shows."""
    affiliate: Affiliate
    totals: DisplayTotals
    conversion_rate: float
    referral_link: str
    referrals: List[Referral]
    commissions: List[Commission]


def calculate_commission_amount(order_total: float, commission_rate: float) -> int:
    """Commission in whole currency units, rounded down."""
    return math.floor(order_total * (commission_rate / 100))


class AffiliateService:
    """Service for affiliate program operations."""

    def __init__(self, db: Database):
        self.db = db
        self.affiliate_repo = AffiliateRepository(db)
        self.referral_repo = ReferralRepository(db)
        self.commission_repo = CommissionRepository(db)
        self.payout_repo = PayoutRepository(db)
        self.settings_repo = SettingsRepository(db)

    # ==================== Enrollment ====================

    async def generate_referral_code(self, user_id: str, name: str) -> str:
        """
        Generate a unique referral code.

        Format: first 3 letters of the name, 3 random characters, last 4
        characters of the user id (e.g., 'BUDX7Q9a1f').
        """
        chars = string.ascii_uppercase + string.digits
        prefix = "".join(c for c in name if c.isalnum())[:REFERRAL_CODE_PREFIX_LEN].upper()
        suffix = user_id[-REFERRAL_CODE_SUFFIX_LEN:]
        while True:
            random_part = "".join(secrets.choice(chars) for _ in range(REFERRAL_CODE_RANDOM_LEN))
            code = f"{prefix}{random_part}{suffix}"
            existing = await self.affiliate_repo.get_by_referral_code(code)
            if not existing:
                return code

    async def join_affiliate(self, user_id: str, email: str, display_name: str) -> Affiliate:
        """
        Enroll a user in the affiliate program, or refresh their contact details.

        Args:
            user_id: Owning user id (also the affiliate id)
            email: Contact email
            display_name: Name used for the referral code prefix

        Returns:
            The affiliate record
        """
        existing = await self.affiliate_repo.get_by_id(user_id)
        if existing:
            await self.affiliate_repo.update_profile(user_id, email, display_name)
            existing.email = email
            existing.display_name = display_name
            logger.info(f"Updated affiliate {user_id}")
            return existing

        referral_code = await self.generate_referral_code(user_id, display_name)
        affiliate = await self.affiliate_repo.create(
            user_id=user_id,
            email=email,
            display_name=display_name,
            referral_code=referral_code,
        )
        logger.info(f"User {user_id} joined affiliate program with code {referral_code}")
        return affiliate

    async def get_affiliate(self, affiliate_id: str) -> Optional[Affiliate]:
        return await self.affiliate_repo.get_by_id(affiliate_id)

    async def update_bank_info(self, affiliate_id: str, bank_info: Dict[str, Any]) -> None:
        """Store payout bank details for an affiliate."""
        affiliate = await self.affiliate_repo.get_by_id(affiliate_id)
        if not affiliate:
            raise AffiliateNotFoundError(f"Affiliate {affiliate_id} not found")
        await self.affiliate_repo.update_bank_info(affiliate_id, bank_info)

    def get_referral_link(self, affiliate: Affiliate, base_url: Optional[str] = None) -> str:
        """Shareable storefront link carrying the referral code."""
        base = (base_url or settings.storefront_base_url).rstrip("/")
        return f"{base}/?ref={affiliate.referral_code}"

    # ==================== Attribution ====================

    async def track_referral_click(self, referral_code: str, visitor_id: str) -> Optional[str]:
        """
        Record a visitor clicking an affiliate link.

        A visitor clicking the same code again reuses the earlier referral.
        Failures are logged and never surface to the visitor.

        Returns:
            Referral id, or None if the code is unknown or tracking failed
        """
        if not validate_referral_code(referral_code):
            logger.warning(f"[TRACK_CLICK] Malformed referral code: {referral_code!r}")
            return None

        try:
            affiliate = await self.affiliate_repo.get_by_referral_code(referral_code)
            if not affiliate:
                logger.warning(f"[TRACK_CLICK] Invalid referral code: {referral_code}")
                return None

            existing = await self.referral_repo.get_by_code_and_visitor(referral_code, visitor_id)
            if existing:
                return existing.id

            referral = await self.referral_repo.create(
                referral_code=referral_code,
                referrer_id=affiliate.id,
                status=REFERRAL_CLICKED,
                visitor_id=visitor_id,
            )
            await self.affiliate_repo.increment_counters(affiliate.id, clicks=1)

            logger.info(f"[TRACK_CLICK] Visitor {visitor_id} clicked {referral_code}")
            return referral.id

        except Exception as e:
            logger.error(f"[TRACK_CLICK] Failed to track referral click: {e}")
            return None

    async def register_with_referral(
        self,
        referral_code: str,
        user_id: str,
        email: str,
        display_name: str,
    ) -> bool:
        """
        Attribute a new registration to the affiliate behind a referral code.

        Upgrades the most recent clicked referral of the code, or creates a
        registered referral when no click was tracked.

        Returns:
            True if attributed, False otherwise (registration is never blocked)
        """
        if not validate_referral_code(referral_code):
            logger.warning(f"[REGISTER] Malformed referral code: {referral_code!r}")
            return False

        try:
            affiliate = await self.affiliate_repo.get_by_referral_code(referral_code)
            if not affiliate:
                logger.warning(f"[REGISTER] Invalid referral code during registration: {referral_code}")
                return False

            clicked = await self.referral_repo.get_latest_by_code(
                referral_code,
                status=REFERRAL_CLICKED,
            )
            if clicked:
                await self.referral_repo.mark_registered(clicked.id, user_id, email, display_name)
                logger.info(f"[REGISTER] Updated referral {clicked.id} with user {user_id}")
            else:
                await self.referral_repo.create(
                    referral_code=referral_code,
                    referrer_id=affiliate.id,
                    status=REFERRAL_REGISTERED,
                    referred_user_id=user_id,
                    referred_user_email=email,
                    referred_user_name=display_name,
                )
                logger.info(f"[REGISTER] No click found for {referral_code}, created referral")

            await self.affiliate_repo.increment_counters(affiliate.id, referrals=1)
            return True

        except Exception as e:
            logger.error(f"[REGISTER] Failed to register with referral: {e}")
            return False

    async def _get_commission_rate(self) -> float:
        """Commission rate in percent, falling back to the default."""
        try:
            program_settings = await self.settings_repo.get_affiliate_settings()
            if program_settings:
                return program_settings.default_commission_rate
            logger.warning("Affiliate settings not found, using default commission rate")
        except Exception as e:
            logger.error(f"Error getting affiliate settings: {e}")
        return DEFAULT_COMMISSION_RATE

    async def create_order_with_referral(
        self,
        user_id: str,
        order_id: str,
        order_total: float,
        referral_code: Optional[str] = None,
        user_email: Optional[str] = None,
        user_name: Optional[str] = None,
    ) -> Optional[Commission]:
        """
        Create the pending commission for a referred order.

        Without an explicit code the user's most recent referral decides the
        affiliate. Order placement never fails because of attribution.

        Args:
            user_id: Buyer
            order_id: Placed order
            order_total: Final order total (after shipping and surcharge)
            referral_code: Code from the current session, if any

        Returns:
            The commission, or None if the order is not attributable
        """
        try:
            if not referral_code:
                previous = await self.referral_repo.get_latest_for_user(user_id)
                if not previous:
                    logger.info(f"[ORDER_REFERRAL] No referral found for user {user_id}")
                    return None
                referral_code = previous.referral_code

            affiliate = await self.affiliate_repo.get_by_referral_code(referral_code)
            if not affiliate:
                logger.warning(f"[ORDER_REFERRAL] Invalid referral code: {referral_code}")
                return None

            rate = await self._get_commission_rate()
            commission_amount = calculate_commission_amount(order_total, rate)
            logger.info(
                f"[ORDER_REFERRAL] Commission {commission_amount} "
                f"({rate}% of {order_total}) for order {order_id}"
            )

            commission = await self.commission_repo.create(
                affiliate_id=affiliate.id,
                order_id=order_id,
                order_total=order_total,
                commission_amount=commission_amount,
            )

            referral = await self.referral_repo.get_latest_by_code(
                referral_code,
                referred_user_id=user_id,
            )
            if not referral:
                referral = await self.referral_repo.get_latest_by_code(referral_code)

            if referral:
                await self.referral_repo.mark_ordered(
                    referral.id,
                    user_id=user_id,
                    order_id=order_id,
                    order_total=order_total,
                    commission_amount=commission_amount,
                    email=user_email,
                    name=user_name,
                )
                referral_id = referral.id
            else:
                created = await self.referral_repo.create(
                    referral_code=referral_code,
                    referrer_id=affiliate.id,
                    status=REFERRAL_ORDERED,
                    referred_user_id=user_id,
                    referred_user_email=user_email,
                    referred_user_name=user_name,
                    order_id=order_id,
                    order_total=order_total,
                    commission_amount=commission_amount,
                )
                referral_id = created.id

            await self.commission_repo.link_referral(commission.id, referral_id)
            commission.referral_id = referral_id

            await self.affiliate_repo.adjust_commission_totals(
                affiliate.id,
                total=commission_amount,
                pending=commission_amount,
            )
            return commission

        except Exception as e:
            logger.error(f"[ORDER_REFERRAL] Failed to create order with referral: {e}")
            return None

    # ==================== Commission review (admin) ====================

    async def _get_commission_for_transition(
        self,
        commission_id: str,
        allowed_from: Tuple[str, ...],
        requested: str,
    ) -> Commission:
        commission = await self.commission_repo.get_by_id(commission_id)
        if not commission:
            raise CommissionNotFoundError(f"Commission {commission_id} not found")
        if commission.status not in allowed_from:
            raise InvalidStatusTransitionError("Commission", commission.status, requested)
        return commission

    async def approve_commission(self, commission_id: str, admin_id: str) -> Commission:
        """Approve a pending commission, making it withdrawable."""
        commission = await self._get_commission_for_transition(
            commission_id, (COMMISSION_PENDING,), COMMISSION_APPROVED,
        )

        if not await self.commission_repo.approve(commission_id, admin_id):
            raise InvalidStatusTransitionError("Commission", commission.status, COMMISSION_APPROVED)
        if commission.referral_id:
            await self.referral_repo.update_status(commission.referral_id, REFERRAL_APPROVED)
        await self.affiliate_repo.adjust_commission_totals(
            commission.affiliate_id,
            pending=-commission.commission_amount,
        )

        logger.info(
            f"Commission {commission_id} approved by {admin_id}: "
            f"{commission.commission_amount} for affiliate {commission.affiliate_id}"
        )
        commission.status = COMMISSION_APPROVED
        commission.approved_by = admin_id
        return commission

    async def reject_commission(self, commission_id: str, admin_id: str, reason: str) -> Commission:
        """Reject a pending commission."""
        commission = await self._get_commission_for_transition(
            commission_id, (COMMISSION_PENDING,), COMMISSION_REJECTED,
        )

        if not await self.commission_repo.reject(commission_id, admin_id, reason):
            raise InvalidStatusTransitionError("Commission", commission.status, COMMISSION_REJECTED)
        if commission.referral_id:
            await self.referral_repo.update_status(commission.referral_id, REFERRAL_REJECTED)
        await self.affiliate_repo.adjust_commission_totals(
            commission.affiliate_id,
            pending=-commission.commission_amount,
        )

        logger.info(f"Commission {commission_id} rejected by {admin_id}: {reason}")
        commission.status = COMMISSION_REJECTED
        commission.rejected_by = admin_id
        commission.notes = reason
        return commission

    async def mark_commission_paid(self, commission_id: str, admin_id: str) -> Commission:
        """Mark an approved commission as paid out."""
        commission = await self._get_commission_for_transition(
            commission_id, (COMMISSION_APPROVED,), COMMISSION_PAID,
        )

        if not await self.commission_repo.mark_paid(commission_id):
            raise InvalidStatusTransitionError("Commission", commission.status, COMMISSION_PAID)
        logger.info(f"Commission {commission_id} marked paid by {admin_id}")
        commission.status = COMMISSION_PAID
        return commission

    # ==================== Payouts ====================

    async def get_affiliate_settings(self) -> AffiliateSettings:
        """Get affiliate program settings, creating defaults on first read."""
        program_settings = await self.settings_repo.get_affiliate_settings()
        if program_settings is None:
            logger.info("Affiliate settings not found, creating default")
            program_settings = await self.settings_repo.create_affiliate_settings(
                AffiliateSettings.default()
            )
        return program_settings

    async def update_affiliate_settings(self, updates: Dict[str, Any]) -> None:
        """Merge fields into the affiliate program settings (admin only)."""
        unknown = set(updates) - set(AFFILIATE_UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown affiliate settings fields: {', '.join(sorted(unknown))}")

        updates = dict(updates)
        if "default_commission_rate" in updates:
            rate = validate_percentage(updates["default_commission_rate"])
            if rate is None:
                raise ValueError("Commission rate must be between 0 and 100")
            updates["default_commission_rate"] = rate
        if "min_payout_amount" in updates:
            minimum = validate_amount(updates["min_payout_amount"])
            if minimum is None:
                raise ValueError("Minimum payout amount must be a non-negative number")
            updates["min_payout_amount"] = minimum

        await self.get_affiliate_settings()
        await self.settings_repo.update_affiliate_settings(updates)
        logger.info(f"Affiliate settings updated: {updates}")

    async def get_available_commission(self, affiliate: Affiliate) -> float:
        """Approved commission not already claimed by a requested or paid-out payout."""
        referrals, commissions = await self.load_snapshot(affiliate.id)
        totals = compute_affiliate_totals(affiliate, referrals, commissions)

        payouts = await self.payout_repo.get_by_affiliate(affiliate.id)
        claimed = sum(p.amount for p in payouts if p.status in CLAIMED_PAYOUT_STATUSES)
        return totals.available_commission - claimed

    async def request_payout(
        self,
        affiliate_id: str,
        amount: float,
        method: str,
        bank_info: Optional[Dict[str, Any]] = None,
    ) -> Payout:
        """
        Request a payout of approved commission.

        Args:
            affiliate_id: Requesting affiliate
            amount: Amount to withdraw
            method: Payout method (e.g., 'Bank Transfer')
            bank_info: Destination account; may carry currency/conversion info

        Returns:
            The pending payout

        Raises:
            AffiliateNotFoundError: Unknown affiliate
            PayoutRequestError: Below minimum or above available commission
        """
        program_settings = await self.get_affiliate_settings()
        if amount < program_settings.min_payout_amount:
            raise PayoutRequestError(
                f"Minimum payout amount is {format_currency(program_settings.min_payout_amount)}"
            )

        affiliate = await self.affiliate_repo.get_by_id(affiliate_id)
        if not affiliate:
            raise AffiliateNotFoundError(f"Affiliate {affiliate_id} not found")

        available = await self.get_available_commission(affiliate)
        if available < amount:
            raise PayoutRequestError(
                "Insufficient available commission. Only approved commissions can be withdrawn."
            )

        notes = None
        if bank_info and bank_info.get("currency") == "IDR":
            notes = format_conversion_note(
                amount,
                bank_info.get("estimated_amount") or 0,
                bank_info.get("conversion_rate"),
            )

        # Balance is rechecked under a per-affiliate lock
        payout = await self.payout_repo.create_within_balance(
            affiliate_id=affiliate_id,
            amount=amount,
            method=method,
            bank_info=bank_info,
            notes=notes,
        )
        if payout is None:
            raise PayoutRequestError(
                "Insufficient available commission. Only approved commissions can be withdrawn."
            )
        await self.affiliate_repo.adjust_commission_totals(affiliate_id, pending=amount)

        logger.info(f"Payout {payout.id} requested by {affiliate_id}: {amount} via {method}")
        return payout

    async def process_payout(
        self,
        payout_id: str,
        admin_id: str,
        status: str,
        notes: Optional[str] = None,
    ) -> Payout:
        """
        Advance a payout through processing -> completed/paid, or reject it.

        Raises:
            PayoutNotFoundError: Unknown payout
            InvalidStatusTransitionError: Status not reachable from the current one
        """
        if status not in PAYOUT_TRANSITIONS:
            raise ValueError(f"Unknown payout status: {status}")

        payout = await self.payout_repo.get_by_id(payout_id)
        if not payout:
            raise PayoutNotFoundError(f"Payout {payout_id} not found")
        if payout.status not in PAYOUT_TRANSITIONS[status]:
            raise InvalidStatusTransitionError("Payout", payout.status, status)

        updated = await self.payout_repo.update_status(
            payout_id, status, admin_id, expected_status=payout.status, notes=notes,
        )
        if not updated:
            # Another admin moved it first
            raise InvalidStatusTransitionError("Payout", payout.status, status)

        if status == PAYOUT_PAID and payout.status == PAYOUT_COMPLETED:
            # Already counted as paid when it completed
            pass
        elif status in (PAYOUT_COMPLETED, PAYOUT_PAID):
            await self.affiliate_repo.adjust_commission_totals(payout.affiliate_id, paid=payout.amount)
        elif status == PAYOUT_REJECTED:
            # Give the held amount back
            await self.affiliate_repo.adjust_commission_totals(payout.affiliate_id, pending=-payout.amount)

        logger.info(f"Payout {payout_id} moved {payout.status} -> {status} by {admin_id}")

        payout.status = status
        if notes is not None:
            payout.notes = notes
        return payout

    async def get_payouts(self, affiliate_id: str) -> List[Payout]:
        """Payout history for an affiliate."""
        return await self.payout_repo.get_by_affiliate(affiliate_id)

    # ==================== Admin listings ====================

    async def list_affiliates(self) -> List[Affiliate]:
        return await self.affiliate_repo.get_all()

    async def list_commissions(self, status: str = COMMISSION_PENDING) -> List[Commission]:
        """Commissions awaiting review (or in any other status)."""
        return await self.commission_repo.get_by_status(status)

    async def list_payouts(self) -> List[Payout]:
        return await self.payout_repo.get_all()

    # ==================== Dashboard ====================

    async def load_snapshot(self, affiliate_id: str) -> Tuple[List[Referral], List[Commission]]:
        """
        Load the complete referral and commission snapshot for an affiliate.

        A failed read degrades to an empty list so dashboards still render.
        """
        try:
            referrals = await self.referral_repo.get_by_affiliate(affiliate_id)
        except Exception as e:
            logger.error(f"Error loading referrals for affiliate {affiliate_id}: {e}")
            referrals = []

        try:
            commissions = await self.commission_repo.get_by_affiliate(affiliate_id)
        except Exception as e:
            logger.error(f"Error loading commissions for affiliate {affiliate_id}: {e}")
            commissions = []

        return referrals, commissions

    async def get_dashboard(self, affiliate_id: str) -> Optional[AffiliateDashboard]:
        """
        Build the affiliate dashboard from a fresh snapshot.

        Returns:
            AffiliateDashboard, or None if the user is not an affiliate
        """
        affiliate = await self.affiliate_repo.get_by_id(affiliate_id)
        if not affiliate:
            logger.info(f"No affiliate found for {affiliate_id}")
            return None

        referrals, commissions = await self.load_snapshot(affiliate_id)
        totals = compute_affiliate_totals(affiliate, referrals, commissions)

        return AffiliateDashboard(
            affiliate=affiliate,
            totals=totals,
            conversion_rate=conversion_rate(totals.display_clicks, totals.display_referrals),
            referral_link=self.get_referral_link(affiliate),
            referrals=referrals,
            commissions=commissions,
        )

    async def get_followers(self, affiliate_id: str) -> List[Follower]:
        """Registered users brought in by an affiliate."""
        referrals, _ = await self.load_snapshot(affiliate_id)
        return derive_followers(referrals)
