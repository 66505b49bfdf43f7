"""Poll lifecycle: creation, completion, cancellation and expiry."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from meetpoll.core.constants import (
    DEFAULT_DURATION_MINUTES,
    MAX_DURATION_MINUTES,
    MODALITIES,
    MODALITY_VIDEO,
    POLL_STATUS_ACTIVE,
    POLL_STATUS_CANCELLED,
    POLL_STATUS_COMPLETED,
    POLL_STATUS_EXPIRED,
)
from meetpoll.core.exceptions import InvalidState, NotFound, ValidationError
from meetpoll.core.logging_config import get_logger
from meetpoll.core.security import generate_participant_token
from meetpoll.core.utils import to_utc
from meetpoll.db.models import Participant, Poll, TimeSlot
from meetpoll.services.repository import PollRepository

logger = get_logger(__name__)


@dataclass
class SlotInput:
    start_time: datetime
    end_time: datetime


@dataclass
class ParticipantInput:
    name: str
    email: str


@dataclass
class PollDraft:
    title: str
    slots: List[SlotInput]
    participants: List[ParticipantInput]
    description: Optional[str] = None
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    modality: str = MODALITY_VIDEO
    created_by: Optional[str] = None


@dataclass
class CreatedPoll:
    poll: Poll
    slots: List[TimeSlot] = field(default_factory=list)
    participants: List[Participant] = field(default_factory=list)


@dataclass(frozen=True)
class FinalizeIntent:
    """Emitted once per poll when it is completed."""

    poll_id: int
    selected_slot_id: int


def validate_draft(draft: PollDraft) -> List[str]:
    """Collect every violated creation constraint."""
    errors = []

    if not draft.title or not draft.title.strip():
        errors.append("Title cannot be empty")

    if not isinstance(draft.duration_minutes, int) or not 0 < draft.duration_minutes <= MAX_DURATION_MINUTES:
        errors.append(f"Duration must be between 1 and {MAX_DURATION_MINUTES} minutes")

    if draft.modality not in MODALITIES:
        errors.append(f"Modality must be one of: {', '.join(MODALITIES)}")

    if not draft.slots:
        errors.append("At least one time slot is required")
    for index, slot in enumerate(draft.slots, start=1):
        if to_utc(slot.end_time) <= to_utc(slot.start_time):
            errors.append(f"Time slot {index}: end time must be after start time")

    if not draft.participants:
        errors.append("At least one participant is required")
    seen = set()
    for participant in draft.participants:
        email = participant.email.strip().lower()
        if email in seen:
            errors.append(f"Duplicate participant email: {email}")
        seen.add(email)

    return errors


def select_winning_slot(slots: Sequence[TimeSlot]) -> TimeSlot:
    """Pick the slot with the most availability, earliest start on ties.

    A winner is always chosen, even when nobody is available for any slot.
    """
    if not slots:
        raise ValueError("Cannot select a winner from an empty slot list")
    return min(slots, key=lambda slot: (-slot.available_count, to_utc(slot.start_time), slot.id))


class PollStateMachine:
    """Owns every poll status transition.

    draft -> active -> completed | cancelled | expired; terminal states
    never change again.
    """

    def __init__(self, repository: PollRepository):
        self.repository = repository

    async def create(self, draft: PollDraft) -> CreatedPoll:
        """Create an active poll with its slots and participants in one transaction.

        Raises:
            ValidationError: Listing every violated constraint
        """
        errors = validate_draft(draft)
        if errors:
            raise ValidationError(errors)

        poll = Poll(
            title=draft.title.strip(),
            description=draft.description,
            duration_minutes=draft.duration_minutes,
            modality=draft.modality,
            status=POLL_STATUS_ACTIVE,
            created_by=draft.created_by,
        )
        slots = [
            TimeSlot(start_time=to_utc(s.start_time), end_time=to_utc(s.end_time))
            for s in draft.slots
        ]
        participants = [
            Participant(
                name=p.name.strip(),
                email=p.email.strip().lower(),
                token=generate_participant_token(),
                has_responded=False,
            )
            for p in draft.participants
        ]

        try:
            await self.repository.add_poll(poll, slots, participants)
            await self.repository.commit()
        except SQLAlchemyError:
            await self.repository.rollback()
            logger.exception("poll_creation_failed", title=draft.title)
            raise

        logger.info(
            "poll_created",
            poll_id=poll.id,
            slots=len(slots),
            participants=len(participants),
            modality=poll.modality,
        )
        slots.sort(key=lambda slot: (slot.start_time, slot.id))
        return CreatedPoll(poll=poll, slots=slots, participants=participants)

    async def on_all_responded(self, poll_id: int) -> Optional[FinalizeIntent]:
        """Complete the poll and emit a finalize intent, exactly once.

        Returns None when the poll is no longer active, when someone is
        still missing a response, or when a concurrent caller won the
        completion.
        """
        repo = self.repository

        poll = await repo.lock_poll(poll_id)
        if poll is None:
            raise NotFound("Poll not found")
        status = poll.status
        if status != POLL_STATUS_ACTIVE:
            await repo.commit()
            logger.info("completion_skipped", poll_id=poll_id, status=status)
            return None

        if await repo.count_unresponded(poll_id) > 0:
            await repo.commit()
            logger.info("completion_skipped", poll_id=poll_id, reason="responses_outstanding")
            return None

        # Rank on a fresh recount of the response rows
        slots = await repo.get_slots(poll_id)
        await repo.store_tallies(slots, await repo.tally_responses(poll_id))
        winner = select_winning_slot(slots)

        claimed = await repo.transition_status(
            poll_id, POLL_STATUS_ACTIVE, POLL_STATUS_COMPLETED, selected_slot_id=winner.id
        )
        await repo.commit()

        if not claimed:
            logger.info("completion_already_claimed", poll_id=poll_id)
            return None

        await repo.refresh_poll(poll_id)
        logger.info(
            "poll_completed",
            poll_id=poll_id,
            selected_slot_id=winner.id,
            available_count=winner.available_count,
        )
        return FinalizeIntent(poll_id=poll_id, selected_slot_id=winner.id)

    async def cancel(self, poll_id: int) -> Poll:
        return await self._close(poll_id, POLL_STATUS_CANCELLED)

    async def expire(self, poll_id: int) -> Poll:
        return await self._close(poll_id, POLL_STATUS_EXPIRED)

    async def _close(self, poll_id: int, to_status: str) -> Poll:
        repo = self.repository

        poll = await repo.get_poll(poll_id)
        if poll is None:
            raise NotFound("Poll not found")
        if poll.status != POLL_STATUS_ACTIVE:
            raise InvalidState(f"Poll is {poll.status}; only active polls can be {to_status}", poll.status)

        changed = await repo.transition_status(poll_id, POLL_STATUS_ACTIVE, to_status)
        await repo.commit()

        poll = await repo.refresh_poll(poll_id)
        if not changed:
            raise InvalidState(f"Poll is {poll.status}; only active polls can be {to_status}", poll.status)

        logger.info("poll_closed", poll_id=poll_id, status=to_status)
        return poll
