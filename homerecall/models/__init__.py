"""Import all models for Alembic."""
from .base import TimestampMixin, SoftDeleteMixin
from .enums import (
    FeedbackStatus,
    PhotoState,
    NEW_LOG_TYPES,
    LOG_DETAIL_TYPES,
)
from .recall_case import RecallCase
from .recall_log import RecallLog
from .recall_photo import RecallPhoto
from .showing import Showing
from .showing_photo import ShowingPhoto

__all__ = [
    "TimestampMixin",
    "SoftDeleteMixin",
    "FeedbackStatus",
    "PhotoState",
    "NEW_LOG_TYPES",
    "LOG_DETAIL_TYPES",
    "RecallCase",
    "RecallLog",
    "RecallPhoto",
    "Showing",
    "ShowingPhoto",
]
