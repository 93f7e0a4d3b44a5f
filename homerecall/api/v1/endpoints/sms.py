"""SMS dispatch of public feedback links."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from homerecall.api.deps import get_current_owner, get_db, get_settings, get_sms_service
from homerecall.app.config import Settings
from homerecall.core.exceptions import NotFoundError, SmsError
from homerecall.repositories.showing_repo import ShowingRepository
from homerecall.schemas.showing import SmsSendRequest, SmsSendResponse
from homerecall.services.messaging.sms_service import (
    NOT_CONFIGURED_MESSAGE,
    SmsService,
    default_feedback_message,
)

router = APIRouter()


@router.post('/send', response_model=SmsSendResponse)
async def send_feedback_link(
    request: SmsSendRequest,
    agent_id: UUID = Depends(get_current_owner),
    db: Session = Depends(get_db),
    sms_service: SmsService = Depends(get_sms_service),
    settings: Settings = Depends(get_settings)
):
    """Text the showing's public link to its buyer, or a custom message if given."""
    if not sms_service.configured:
        raise SmsError(NOT_CONFIGURED_MESSAGE)

    showing = ShowingRepository(db).get_owned(agent_id, request.showing_id)
    if not showing:
        raise NotFoundError('Showing not found or access denied')

    public_url = settings.public_feedback_url(showing.public_token)
    body = request.message or default_feedback_message(showing.buyer_name, showing.address, public_url)

    result = await sms_service.send(showing.buyer_phone, body)
    return SmsSendResponse(success=True, message_sid=result.message_sid, to=result.to)
