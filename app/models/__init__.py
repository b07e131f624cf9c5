"""Database models."""

from app.models.accounts import accounts, metadata

__all__ = [
    "accounts",
    "metadata",
]
