# homerecall/utils/validators.py

from dataclasses import dataclass
from typing import Optional, FrozenSet

from homerecall.core.exceptions import ValidationError

# ---------------------------------------------------------------------
# Upload policies
# ---------------------------------------------------------------------

SHOWING_MIME_TYPES = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
})


@dataclass(frozen=True)
class UploadPolicy:
    """Limits applied to every file stored in one bucket.

    ``allowed_types`` of None accepts any ``image/*`` content type.
    """
    name: str
    max_bytes: int
    max_files: int
    signed_url_ttl: int
    allowed_types: Optional[FrozenSet[str]] = None

    @property
    def max_megabytes(self) -> int:
        return self.max_bytes // (1024 * 1024)


def recall_policy(settings) -> UploadPolicy:
    return UploadPolicy(
        name="recall",
        max_bytes=settings.RECALL_MAX_PHOTO_BYTES,
        max_files=settings.RECALL_MAX_PHOTOS_PER_LOG,
        signed_url_ttl=settings.RECALL_SIGNED_URL_TTL,
    )


def showing_policy(settings) -> UploadPolicy:
    return UploadPolicy(
        name="showing",
        max_bytes=settings.SHOWING_MAX_PHOTO_BYTES,
        max_files=settings.SHOWING_MAX_PHOTOS,
        signed_url_ttl=settings.SHOWING_SIGNED_URL_TTL,
        allowed_types=SHOWING_MIME_TYPES,
    )


# ---------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------

def validate_upload_file(
    filename: str,
    size: int,
    content_type: Optional[str],
    policy: UploadPolicy
) -> None:
    """
    Check one file against a policy before any network call.

    Args:
        filename: Original filename, used in messages only
        size: Size in bytes
        content_type: Declared MIME type
        policy: Upload policy of the target bucket

    Raises:
        ValidationError
    """
    content_type = (content_type or "").lower()

    if not content_type.startswith("image/"):
        raise ValidationError(f"{filename} is not an image file")

    if size is None or size <= 0:
        raise ValidationError(f"{filename} is empty")

    if size > policy.max_bytes:
        raise ValidationError(f"{filename} is too large (max {policy.max_megabytes}MB)")

    if policy.allowed_types is not None and content_type not in policy.allowed_types:
        raise ValidationError(f"{filename} must be JPG or PNG format")


def validate_batch_size(count: int, policy: UploadPolicy, existing: int = 0) -> None:
    """Reject a batch that would push the target past its photo cap."""
    if count + existing > policy.max_files:
        if existing:
            raise ValidationError(
                f"Maximum {policy.max_files} photos allowed (you have {existing} already)"
            )
        raise ValidationError(f"Maximum {policy.max_files} photos allowed")


def validate_log_type(log_type: str, allowed: FrozenSet[str]) -> str:
    """Check a log type against the closed set accepted at the call site."""
    if log_type not in allowed:
        raise ValidationError(
            f"Invalid log type: {log_type}. Expected one of: {', '.join(sorted(allowed))}"
        )
    return log_type
