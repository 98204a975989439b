"""Read-time projection of an affiliate's referral/commission log into display totals."""

from dataclasses import dataclass
from typing import Iterable, List

from database.models import Affiliate, Referral, Commission, Follower
from config.constants import (
    CLICK_STATUSES,
    CONVERTED_STATUSES,
    FOLLOWER_STATUSES,
    REFERRAL_ORDERED,
    REFERRAL_APPROVED,
    COMMISSION_PENDING,
    COMMISSION_APPROVED,
    COMMISSION_PAID,
)


@dataclass
class DisplayTotals:
    """Reconciled affiliate dashboard totals."""
    display_clicks: int
    display_referrals: int
    pending_total: float
    approved_total: float
    paid_total: float
    total_commission: float
    actual_clicks: int = 0
    actual_referrals: int = 0

    @property
    def available_commission(self) -> float:
        """Only approved commissions can be withdrawn."""
        return self.approved_total


def compute_affiliate_totals(
    affiliate: Affiliate,
    referrals: Iterable[Referral],
    commissions: Iterable[Commission],
) -> DisplayTotals:
    """
    Derive display totals from the complete referral and commission snapshot.

    The event log is the source of truth. The affiliate's stored counters are
    used only as a floor, so a display value never drops below them.
    Nothing is written back.

    Args:
        affiliate: Affiliate whose stored counters act as the floor
        referrals: Every referral record of this affiliate
        commissions: Every commission record of this affiliate

    Returns:
        DisplayTotals
    """
    pending_total = 0.0
    approved_total = 0.0
    paid_total = 0.0

    for commission in commissions:
        if commission.status == COMMISSION_PENDING:
            pending_total += commission.commission_amount
        elif commission.status == COMMISSION_APPROVED:
            approved_total += commission.commission_amount
        elif commission.status == COMMISSION_PAID:
            paid_total += commission.commission_amount

    actual_clicks = 0
    actual_referrals = 0
    for referral in referrals:
        # Status is the current stage only, so membership stands in for history
        if referral.status in CLICK_STATUSES:
            actual_clicks += 1
        if referral.status in CONVERTED_STATUSES:
            actual_referrals += 1

    return DisplayTotals(
        display_clicks=max(actual_clicks, affiliate.total_clicks),
        display_referrals=max(actual_referrals, affiliate.total_referrals),
        pending_total=pending_total,
        approved_total=approved_total,
        paid_total=paid_total,
        total_commission=pending_total + approved_total + paid_total,
        actual_clicks=actual_clicks,
        actual_referrals=actual_referrals,
    )


def conversion_rate(clicks: int, referrals: int) -> float:
    """Referral conversion as a percentage with one decimal (0.0 without clicks)."""
    if clicks <= 0:
        return 0.0
    return round(referrals / clicks * 100, 1)


def derive_followers(referrals: Iterable[Referral]) -> List[Follower]:
    """Registered users brought in by the affiliate, one per converted referral."""
    followers = []
    for referral in referrals:
        if referral.status not in FOLLOWER_STATUSES or not referral.referred_user_id:
            continue
        followers.append(Follower(
            user_id=referral.referred_user_id,
            name=referral.referred_user_name,
            email=referral.referred_user_email,
            registered_at=referral.registered_at or referral.created_at,
            total_orders=1 if referral.status in (REFERRAL_ORDERED, REFERRAL_APPROVED) else 0,
        ))
    return followers
