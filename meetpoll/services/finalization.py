"""Best-effort side effects once a poll has a selected slot."""
import asyncio
from dataclasses import dataclass, field
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo

from meetpoll.core.config import FinalizationConfig
from meetpoll.core.constants import EMAIL_TYPE_CONFIRMATION, MODALITY_VIDEO, POLL_STATUS_COMPLETED
from meetpoll.core.exceptions import InvalidState, NotFound
from meetpoll.core.logging_config import get_logger
from meetpoll.db.models import Participant, Poll, TimeSlot
from meetpoll.integrations.base import BookingProvider, CalendarProvider, Notifier
from meetpoll.services.email_templates import confirmation_email
from meetpoll.services.notifications import DeliveryResult, deliver
from meetpoll.services.repository import PollRepository

logger = get_logger(__name__)


@dataclass
class FinalizationResult:
    poll_id: int
    selected_slot_id: int
    video_join_url: Optional[str] = None
    video_meeting_id: Optional[str] = None
    calendar_event_id: Optional[str] = None
    notifications: List[DeliveryResult] = field(default_factory=list)


class FinalizationCoordinator:
    """Books the meeting, creates the calendar event and notifies participants.

    The selected slot is already committed when this runs, so every step
    is isolated: a failure is logged and the next step still runs.
    """

    def __init__(
        self,
        repository: PollRepository,
        config: FinalizationConfig,
        tz: ZoneInfo,
        booking: Optional[BookingProvider] = None,
        calendar: Optional[CalendarProvider] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.repository = repository
        self.config = config
        self.tz = tz
        self.booking = booking if config.video_booking_enabled else None
        self.calendar = calendar if config.calendar_enabled else None
        self.notifier = notifier if config.notifications_enabled else None

    async def finalize_poll(self, poll_id: int, force: bool = False) -> FinalizationResult:
        """Load a completed poll and finalize it once.

        Raises:
            NotFound: Unknown poll
            InvalidState: Poll not completed, or already finalized and not forced
        """
        repo = self.repository

        poll = await repo.refresh_poll(poll_id)
        if poll is None:
            raise NotFound("Poll not found")
        if poll.status != POLL_STATUS_COMPLETED or poll.selected_slot_id is None:
            raise InvalidState("Poll not yet completed", poll.status)

        if not force:
            claimed = await repo.claim_finalization(poll_id)
            await repo.commit()
            if not claimed:
                raise InvalidState("Poll already finalized", poll.status)

        slot = await repo.get_slot(poll_id, poll.selected_slot_id)
        if slot is None:
            raise NotFound("Selected slot not found")
        participants = await repo.get_participants(poll_id)

        return await self.finalize(poll, slot, participants)

    async def finalize(
        self,
        poll: Poll,
        selected_slot: TimeSlot,
        participants: Sequence[Participant],
    ) -> FinalizationResult:
        """Run booking, calendar and notification steps for a completed poll."""
        # Plain values only from here on; a rollback expires ORM instances
        poll_id = poll.id
        title = poll.title
        description = poll.description or ""
        modality = poll.modality
        duration_minutes = poll.duration_minutes
        slot_id = selected_slot.id
        start = selected_slot.start_time
        end = selected_slot.end_time
        recipients = [(p.id, p.name, p.email) for p in participants]
        emails = [email for _, _, email in recipients]

        result = FinalizationResult(poll_id=poll_id, selected_slot_id=slot_id)

        if self.booking is not None and modality == MODALITY_VIDEO:
            try:
                booking = await self._call(
                    self.booking.create_meeting(title, start, duration_minutes, emails)
                )
                result.video_join_url = booking.join_url
                result.video_meeting_id = booking.meeting_id
            except Exception as exc:
                logger.warning("video_booking_failed", poll_id=poll_id, error=str(exc))

        if self.calendar is not None:
            try:
                result.calendar_event_id = await self._call(
                    self.calendar.create_event(
                        title, description, start, end, emails, location_link=result.video_join_url
                    )
                )
            except Exception as exc:
                logger.warning("calendar_event_failed", poll_id=poll_id, error=str(exc))

        try:
            await self.repository.save_booking_refs(
                poll_id,
                video_join_url=result.video_join_url,
                video_meeting_id=result.video_meeting_id,
                calendar_event_id=result.calendar_event_id,
            )
            await self.repository.commit()
        except Exception as exc:
            await self.repository.rollback()
            logger.error("booking_refs_not_saved", poll_id=poll_id, error=str(exc))

        if self.notifier is not None:
            for participant_id, name, email in recipients:
                message = confirmation_email(
                    name,
                    title,
                    start,
                    end,
                    self.tz,
                    video_join_url=result.video_join_url,
                    calendar_invite_sent=result.calendar_event_id is not None,
                )
                try:
                    delivery = await deliver(
                        self.repository, self.notifier, poll_id, participant_id, email,
                        EMAIL_TYPE_CONFIRMATION, message, self.config.timeout_seconds,
                    )
                    await self.repository.commit()
                except Exception as exc:
                    await self.repository.rollback()
                    logger.error(
                        "notification_not_logged",
                        poll_id=poll_id,
                        participant_id=participant_id,
                        error=str(exc),
                    )
                    delivery = DeliveryResult(email=email, sent=False, reason=str(exc))
                result.notifications.append(delivery)

        logger.info(
            "poll_finalized",
            poll_id=poll_id,
            selected_slot_id=slot_id,
            video=result.video_join_url is not None,
            calendar=result.calendar_event_id is not None,
            notified=sum(1 for n in result.notifications if n.sent),
        )
        return result

    async def _call(self, awaitable):
        return await asyncio.wait_for(awaitable, timeout=self.config.timeout_seconds)
