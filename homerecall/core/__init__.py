"""
Core package initializer.

This package provides the error taxonomy and security helpers for bearer
tokens and public showing links.
"""

from .security import (
    generate_public_token,
    create_access_token,
    decode_token,
    owner_id_from_token,
)

__all__ = [
    "generate_public_token",
    "create_access_token",
    "decode_token",
    "owner_id_from_token",
]
