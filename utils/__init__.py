from .formatters import format_currency, format_percentage, format_conversion_note
from .validators import validate_amount, validate_percentage, validate_referral_code
from .short_id import generate_document_id

__all__ = [
    "format_currency",
    "format_percentage",
    "format_conversion_note",
    "validate_amount",
    "validate_percentage",
    "validate_referral_code",
    "generate_document_id",
]
