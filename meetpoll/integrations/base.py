"""Collaborator contracts consumed by the scheduling engine."""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol, Sequence


@dataclass(frozen=True)
class MeetingBooking:
    join_url: str
    meeting_id: str


@dataclass(frozen=True)
class BusyInterval:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class NotificationMessage:
    subject: str
    html: str
    to_name: Optional[str] = None


class BookingProvider(Protocol):
    async def create_meeting(
        self,
        topic: str,
        start: datetime,
        duration_minutes: int,
        invitee_emails: Sequence[str],
    ) -> MeetingBooking:
        ...


class CalendarProvider(Protocol):
    async def create_event(
        self,
        summary: str,
        description: str,
        start: datetime,
        end: datetime,
        attendee_emails: Sequence[str],
        location_link: Optional[str] = None,
    ) -> str:
        ...

    async def get_busy_times(self, start: datetime, end: datetime) -> List[BusyInterval]:
        ...


class Notifier(Protocol):
    async def send(self, to_email: str, message: NotificationMessage) -> bool:
        ...
