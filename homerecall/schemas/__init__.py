"""
Schemas package.

Request/response models for showings, public feedback, SMS dispatch and the
recall case, log and photo endpoints.
"""

from .showing import (
    ShowingCreate,
    ShowingResponse,
    ShowingCreateResponse,
    ShowingDetailResponse,
    PublicShowingResponse,
    FeedbackRequest,
    SmsSendRequest,
    SmsSendResponse,
)
from .case import (
    CaseCreate,
    CaseUpdate,
    CaseResponse,
    CaseSummaryResponse,
    CaseDetailResponse,
    LogCreate,
    LogUpdate,
    LogResponse,
    LogDetailResponse,
    PhotoResponse,
)

__all__ = [
    "ShowingCreate",
    "ShowingResponse",
    "ShowingCreateResponse",
    "ShowingDetailResponse",
    "PublicShowingResponse",
    "FeedbackRequest",
    "SmsSendRequest",
    "SmsSendResponse",
    "CaseCreate",
    "CaseUpdate",
    "CaseResponse",
    "CaseSummaryResponse",
    "CaseDetailResponse",
    "LogCreate",
    "LogUpdate",
    "LogResponse",
    "LogDetailResponse",
    "PhotoResponse",
]
