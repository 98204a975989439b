"""Checkout pricing with the cash-on-delivery surcharge."""

from dataclasses import dataclass
from typing import Iterable, Mapping

from database.models import CODSettings
from config.constants import COD_PAYMENT_METHOD


@dataclass
class PricingBreakdown:
    """Result of order total calculation."""
    subtotal: float
    shipping_fee: float
    cod_surcharge: float  # applied amount, 0 when not paying COD
    total: float


def calculate_subtotal(items: Iterable[Mapping]) -> float:
    """Sum price * quantity over cart line items."""
    return sum(item["price"] * item["quantity"] for item in items)


def calculate_total_with_cod(
    subtotal: float,
    shipping_fee: float,
    payment_method: str,
    cod_surcharge: float,
) -> PricingBreakdown:
    """
    Calculate order total, adding the COD surcharge for COD payments only.

    The surcharge passed in must already be zero when COD surcharges are
    disabled; this function does not look at the enable flag.

    Args:
        subtotal: Sum of line items
        shipping_fee: Shipping cost
        payment_method: Selected payment method label (exact match)
        cod_surcharge: Currently configured surcharge

    Returns:
        PricingBreakdown
    """
    is_cod = payment_method == COD_PAYMENT_METHOD
    applied = cod_surcharge if is_cod else 0

    return PricingBreakdown(
        subtotal=subtotal,
        shipping_fee=shipping_fee,
        cod_surcharge=applied,
        total=subtotal + shipping_fee + applied,
    )


def resolve_cod_surcharge(cod_settings: CODSettings) -> float:
    """Surcharge to charge under the given settings (0 when disabled)."""
    if not cod_settings.is_enabled:
        return 0
    return cod_settings.surcharge_amount


def price_order(
    subtotal: float,
    shipping_fee: float,
    payment_method: str,
    cod_settings: CODSettings,
) -> PricingBreakdown:
    """Price an order straight from the COD settings, honoring is_enabled."""
    return calculate_total_with_cod(
        subtotal,
        shipping_fee,
        payment_method,
        resolve_cod_surcharge(cod_settings),
    )
