"""Pydantic schemas for request/response validation."""
from meetpoll.schemas.auth import AdminLoginRequest
from meetpoll.schemas.availability import AvailabilityResponse, SuggestedSlotOut
from meetpoll.schemas.ballot import (
    BallotParticipant,
    BallotPoll,
    BallotView,
    ResponseSubmission,
    SubmissionResult,
)
from meetpoll.schemas.common import ErrorResponse, SuccessResponse
from meetpoll.schemas.poll import (
    FinalizationResponse,
    InvitationResult,
    ParticipantCreate,
    ParticipantDetail,
    PollCreate,
    PollCreated,
    PollDetail,
    SlotCreate,
    SlotDetail,
    VotingLink,
)
from meetpoll.schemas.webhook import PollStatusEvent, PollStatusRecord, WebhookResult

__all__ = [
    "AdminLoginRequest",
    "AvailabilityResponse",
    "SuggestedSlotOut",
    "BallotParticipant",
    "BallotPoll",
    "BallotView",
    "ResponseSubmission",
    "SubmissionResult",
    "SlotCreate",
    "ParticipantCreate",
    "PollCreate",
    "PollCreated",
    "PollDetail",
    "SlotDetail",
    "ParticipantDetail",
    "VotingLink",
    "InvitationResult",
    "FinalizationResponse",
    "PollStatusEvent",
    "PollStatusRecord",
    "WebhookResult",
    "SuccessResponse",
    "ErrorResponse",
]
