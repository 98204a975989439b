"""Tests for document id generation."""

from utils.short_id import ID_ALPHABET, generate_document_id


def test_default_length():
    """Test ids are 20 characters by default."""
    assert len(generate_document_id()) == 20


def test_alphanumeric_only():
    """Test ids use letters and digits only."""
    assert set(generate_document_id(200)) <= set(ID_ALPHABET)


def test_ids_differ():
    """Test consecutive ids are distinct."""
    assert generate_document_id() != generate_document_id()
