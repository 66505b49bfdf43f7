"""Poll schemas."""
from datetime import datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from meetpoll.core import config
from meetpoll.core.constants import DEFAULT_DURATION_MINUTES, MODALITY_VIDEO
from meetpoll.core.sanitization import (
    normalize_email,
    sanitize_description,
    sanitize_participant_name,
    sanitize_title,
)
from meetpoll.core.utils import to_utc
from meetpoll.services.scoring import score


class SlotCreate(BaseModel):
    start_time: datetime
    end_time: datetime

    @field_validator('start_time', 'end_time')
    @classmethod
    def localize_naive_times(cls, v: datetime) -> datetime:
        """Times without an offset are wall-clock times in the configured zone."""
        if v.tzinfo is None:
            return v.replace(tzinfo=ZoneInfo(config.settings.TIMEZONE))
        return v


class ParticipantCreate(BaseModel):
    name: str
    email: str

    @field_validator('name')
    @classmethod
    def sanitize_name_field(cls, v: str) -> str:
        return sanitize_participant_name(v)

    @field_validator('email')
    @classmethod
    def normalize_email_field(cls, v: str) -> str:
        return normalize_email(v)


class PollCreate(BaseModel):
    title: str
    description: Optional[str] = None
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    modality: str = MODALITY_VIDEO
    slots: List[SlotCreate] = Field(default_factory=list)
    participants: List[ParticipantCreate] = Field(default_factory=list)
    created_by: Optional[str] = None

    @field_validator('title')
    @classmethod
    def sanitize_title_field(cls, v: str) -> str:
        """Sanitize the title; emptiness is reported by poll validation."""
        return sanitize_title(v)

    @field_validator('description')
    @classmethod
    def sanitize_description_field(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_description(v)


class VotingLink(BaseModel):
    name: str
    email: str
    url: str


class InvitationResult(BaseModel):
    email: str
    sent: bool
    reason: Optional[str] = None


class PollCreated(BaseModel):
    poll_id: int
    status: str
    voting_links: List[VotingLink]
    emails: List[InvitationResult]


class SlotDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    start_time: datetime
    end_time: datetime
    available_count: int
    total_responses: int

    @field_validator('start_time', 'end_time')
    @classmethod
    def as_utc(cls, v: datetime) -> datetime:
        return to_utc(v)

    @computed_field
    @property
    def score(self) -> int:
        return score(self.available_count, self.total_responses)


class ParticipantDetail(BaseModel):
    id: int
    name: str
    email: str
    has_responded: bool
    responded_at: Optional[datetime] = None
    voting_url: str


class PollDetail(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    duration_minutes: int
    modality: str
    status: str
    created_by: Optional[str] = None
    selected_slot_id: Optional[int] = None
    video_join_url: Optional[str] = None
    video_meeting_id: Optional[str] = None
    calendar_event_id: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None
    finalized_at: Optional[datetime] = None
    time_slots: List[SlotDetail]
    participants: List[ParticipantDetail]


class FinalizationResponse(BaseModel):
    poll_id: int
    selected_slot_id: int
    video_join_url: Optional[str] = None
    video_meeting_id: Optional[str] = None
    calendar_event_id: Optional[str] = None
    emails: List[InvitationResult]
