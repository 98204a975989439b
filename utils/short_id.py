"""Document ID generation."""

import secrets
import string

ID_ALPHABET = string.ascii_letters + string.digits


def generate_document_id(length: int = 20) -> str:
    """
    Generate a random URL-safe document ID.

    Args:
        length: Number of characters (default 20)

    Returns:
        Alphanumeric ID string (e.g., "Qx3f9Kk2p1Lm0aZt7YbC")
    """
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))
