"""Dependencies for API endpoints."""
from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from homerecall.app.config import Settings, get_settings
from homerecall.core.exceptions import AuthError
from homerecall.core.security import owner_id_from_token
from homerecall.db.base import get_db
from homerecall.services.lifecycle import TrashSessions
from homerecall.services.messaging.sms_service import SmsService
from homerecall.services.storage.object_store import ObjectStoreGateway
from homerecall.utils.validators import recall_policy, showing_policy

__all__ = [
    "get_db",
    "get_settings",
    "get_current_owner",
    "get_s3_client",
    "get_recall_gateway",
    "get_showing_gateway",
    "get_trash_sessions",
    "get_sms_service",
]

security = HTTPBearer(auto_error=False)


async def get_current_owner(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> UUID:
    """Owner id carried by the bearer token."""
    if credentials is None or not credentials.credentials:
        raise AuthError("No authorization header")

    owner_id = owner_id_from_token(credentials.credentials)
    if owner_id is None:
        raise AuthError("Invalid authentication")

    return owner_id


def get_s3_client(request: Request):
    """Process-wide S3 client created at application startup."""
    return request.app.state.s3_client


def get_recall_gateway(
    client=Depends(get_s3_client),
    settings: Settings = Depends(get_settings)
) -> ObjectStoreGateway:
    return ObjectStoreGateway(client, settings.RECALL_BUCKET, recall_policy(settings))


def get_showing_gateway(
    client=Depends(get_s3_client),
    settings: Settings = Depends(get_settings)
) -> ObjectStoreGateway:
    return ObjectStoreGateway(client, settings.SHOWING_PHOTOS_BUCKET, showing_policy(settings))


def get_trash_sessions(request: Request) -> TrashSessions:
    return request.app.state.trash_sessions


def get_sms_service(settings: Settings = Depends(get_settings)) -> SmsService:
    return SmsService(settings)
