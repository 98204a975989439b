"""Formatting utilities for storefront amounts and rates."""


def format_currency(amount: float, symbol: str = "¥") -> str:
    """Format whole-unit currency with thousands separators."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.0f}"


def format_rupiah(amount: float) -> str:
    """Format an Indonesian Rupiah estimate."""
    return f"Rp{amount:,.0f}".replace(",", ".")


def format_percentage(value: float) -> str:
    """Format as percentage with one decimal."""
    return f"{value:.1f}%"


def format_conversion_note(amount: float, estimated_amount: float, conversion_rate: float) -> str:
    """Payout note for transfers converted to Rupiah."""
    return (
        f"Konversi ke Rupiah: {format_currency(amount)} ≈ {format_rupiah(estimated_amount)} "
        f"(kurs: {conversion_rate})"
    )
