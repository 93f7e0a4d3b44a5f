"""Security utilities for bearer authentication and public tokens."""
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from uuid import UUID
import uuid
import logging

from jose import JWTError, jwt

from homerecall.app.config import settings

logger = logging.getLogger(__name__)


def generate_public_token() -> str:
    """Generate an unguessable token for public showing links."""
    return str(uuid.uuid4())


def create_access_token(owner_id: UUID, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token for an owner."""
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {"sub": str(owner_id), "exp": expire, "type": "access"}
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and validate JWT token."""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.debug(f"Rejected token: {e}")
        return None


def owner_id_from_token(token: str) -> Optional[UUID]:
    """Return the owner UUID carried by an access token, or None."""
    payload = decode_token(token)
    if payload is None or payload.get("type") != "access":
        return None

    subject = payload.get("sub")
    if not subject:
        return None

    try:
        return UUID(subject)
    except ValueError:
        return None
