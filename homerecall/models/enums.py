"""Enums and closed value sets for database models."""
import enum


class FeedbackStatus(str, enum.Enum):
    """Buyer feedback on a showing."""
    INTERESTED = "INTERESTED"
    MAYBE = "MAYBE"
    NOT_FOR_US = "NOT_FOR_US"


class PhotoState(str, enum.Enum):
    """Lifecycle of a photo record.

    ACTIVE -> CLIENT_TRASHED -> ACTIVE (restore)
    CLIENT_TRASHED -> DESTROYED (empty trash)
    ACTIVE -> DESTROYED (direct delete)
    """
    ACTIVE = "active"
    CLIENT_TRASHED = "client_trashed"
    DESTROYED = "destroyed"


# Log types differ between the log creation form and the log detail editor.
# Both sets are kept; each call site passes the one it accepts.
NEW_LOG_TYPES = frozenset({
    "Before", "During", "After", "Issue", "Resolution", "Call", "Visit", "General",
})

LOG_DETAIL_TYPES = frozenset({
    "Before", "During", "After", "Issue", "Resolution", "Call", "Visit", "Invoice",
})

DEFAULT_NEW_LOG_TYPE = "General"
