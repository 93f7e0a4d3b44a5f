from fastapi import APIRouter
from homerecall.api.v1.endpoints import showings, sms, cases, logs, photos, feedback


api_router = APIRouter()

api_router.include_router(showings.router, prefix="/showings", tags=["showings"])
api_router.include_router(sms.router, prefix="/sms", tags=["sms"])
api_router.include_router(cases.router, prefix="/recall/cases", tags=["recall"])
api_router.include_router(logs.router, prefix="/recall/logs", tags=["recall"])
api_router.include_router(photos.router, prefix="/recall/photos", tags=["recall"])

# Buyer-facing links live outside the versioned API: /r/{token}
public_router = APIRouter()
public_router.include_router(feedback.router, prefix="/r", tags=["feedback"])
