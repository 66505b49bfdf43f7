"""Participant ballot and response schemas."""
from typing import Dict, List, Optional

from pydantic import BaseModel, field_validator

from meetpoll.core.sanitization import validate_token_format
from meetpoll.schemas.poll import SlotDetail


class ResponseSubmission(BaseModel):
    """Availability answers keyed by slot id; omitted slots count as unavailable."""
    token: str
    responses: Dict[int, bool] = {}

    @field_validator('token')
    @classmethod
    def validate_token(cls, v: str) -> str:
        return validate_token_format(v)


class SubmissionResult(BaseModel):
    success: bool = True
    all_responded: bool
    status: str


class BallotPoll(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    duration_minutes: int
    modality: str
    status: str
    selected_slot_id: Optional[int] = None
    video_join_url: Optional[str] = None


class BallotParticipant(BaseModel):
    name: str
    has_responded: bool


class BallotView(BaseModel):
    poll: BallotPoll
    participant: BallotParticipant
    slots: List[SlotDetail]
    responses: Dict[int, bool]
