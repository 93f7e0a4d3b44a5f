"""
Messaging package initializer.

Provides the SMS service used to text public feedback links.
"""

from .sms_service import SmsService

__all__ = [
    "SmsService",
]
