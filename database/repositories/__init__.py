from .affiliate_repo import AffiliateRepository
from .referral_repo import ReferralRepository
from .commission_repo import CommissionRepository
from .payout_repo import PayoutRepository
from .settings_repo import SettingsRepository

__all__ = [
    "AffiliateRepository",
    "ReferralRepository",
    "CommissionRepository",
    "PayoutRepository",
    "SettingsRepository",
]
