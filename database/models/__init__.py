from .affiliate import Affiliate
from .referral import Referral, Follower
from .commission import Commission
from .payout import Payout
from .settings import CODSettings, AffiliateSettings

__all__ = [
    "Affiliate",
    "Referral",
    "Follower",
    "Commission",
    "Payout",
    "CODSettings",
    "AffiliateSettings",
]
