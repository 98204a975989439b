from .affiliate_service import AffiliateService
from .cod_settings_service import CODSettingsService
from .commission_ledger import DisplayTotals, compute_affiliate_totals
from .pricing_service import PricingBreakdown, calculate_total_with_cod, price_order

__all__ = [
    "AffiliateService",
    "CODSettingsService",
    "DisplayTotals",
    "compute_affiliate_totals",
    "PricingBreakdown",
    "calculate_total_with_cod",
    "price_order",
]
