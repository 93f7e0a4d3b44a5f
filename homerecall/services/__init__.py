"""
Services package initializer.

Re-exports important service classes so callers can import from
`homerecall.services` instead of deep module paths.
"""

from .messaging import SmsService

__all__ = [
    "SmsService",
]
