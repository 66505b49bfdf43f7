"""Poll repository - database operations used by the scheduling engine."""
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from meetpoll.core.utils import utcnow
from meetpoll.db.models import EmailLog, Participant, Poll, SlotResponse, TimeSlot


class PollRepository:
    """Repository for poll, slot, participant and response rows.

    Methods flush but never commit; the caller owns the transaction
    through ``commit()`` / ``rollback()``.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()

    # Polls

    async def add_poll(self, poll: Poll, slots: List[TimeSlot], participants: List[Participant]) -> Poll:
        """Stage a poll with its slots and participants in the current transaction."""
        self.db.add(poll)
        await self.db.flush()
        for slot in slots:
            slot.poll_id = poll.id
        for participant in participants:
            participant.poll_id = poll.id
        self.db.add_all(slots)
        self.db.add_all(participants)
        await self.db.flush()
        return poll

    async def get_poll(self, poll_id: int) -> Optional[Poll]:
        return await self.db.get(Poll, poll_id)

    async def lock_poll(self, poll_id: int) -> Optional[Poll]:
        """Re-read a poll row and lock it until the current transaction ends.

        Submissions to the same poll queue behind each other, so tally
        recounts and the unresponded count see every committed answer.
        """
        result = await self.db.execute(
            select(Poll)
            .where(Poll.id == poll_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def refresh_poll(self, poll_id: int) -> Optional[Poll]:
        """Re-read a poll row, discarding any state cached in the session."""
        result = await self.db.execute(
            select(Poll).where(Poll.id == poll_id).execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def list_polls(self) -> List[Poll]:
        result = await self.db.execute(select(Poll).order_by(Poll.created_at.desc(), Poll.id.desc()))
        return list(result.scalars().all())

    async def transition_status(
        self,
        poll_id: int,
        from_status: str,
        to_status: str,
        selected_slot_id: Optional[int] = None,
    ) -> bool:
        """Compare-and-swap the poll status.

        Returns True only if the row still had ``from_status`` and was changed
        by this call.
        """
        values = {"status": to_status, "updated_at": utcnow()}
        if selected_slot_id is not None:
            values.update(selected_slot_id=selected_slot_id, completed_at=utcnow())
        result = await self.db.execute(
            update(Poll)
            .where(Poll.id == poll_id, Poll.status == from_status)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def claim_finalization(self, poll_id: int) -> bool:
        """Mark finalization as started; False if another caller already did."""
        result = await self.db.execute(
            update(Poll)
            .where(Poll.id == poll_id, Poll.finalized_at.is_(None))
            .values(finalized_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def save_booking_refs(
        self,
        poll_id: int,
        video_join_url: Optional[str],
        video_meeting_id: Optional[str],
        calendar_event_id: Optional[str],
    ) -> None:
        await self.db.execute(
            update(Poll)
            .where(Poll.id == poll_id)
            .values(
                video_join_url=video_join_url,
                video_meeting_id=video_meeting_id,
                calendar_event_id=calendar_event_id,
                finalized_at=utcnow(),
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )

    # Slots

    async def get_slots(self, poll_id: int) -> List[TimeSlot]:
        """Slots of a poll ordered by start time."""
        result = await self.db.execute(
            select(TimeSlot)
            .where(TimeSlot.poll_id == poll_id)
            .order_by(TimeSlot.start_time, TimeSlot.id)
        )
        return list(result.scalars().all())

    async def get_slots_for_polls(self, poll_ids: Iterable[int]) -> Dict[int, List[TimeSlot]]:
        ids = list(poll_ids)
        grouped: Dict[int, List[TimeSlot]] = {poll_id: [] for poll_id in ids}
        if not ids:
            return grouped
        result = await self.db.execute(
            select(TimeSlot)
            .where(TimeSlot.poll_id.in_(ids))
            .order_by(TimeSlot.start_time, TimeSlot.id)
        )
        for slot in result.scalars().all():
            grouped[slot.poll_id].append(slot)
        return grouped

    async def get_slot(self, poll_id: int, slot_id: int) -> Optional[TimeSlot]:
        result = await self.db.execute(
            select(TimeSlot).where(TimeSlot.id == slot_id, TimeSlot.poll_id == poll_id)
        )
        return result.scalars().first()

    # Participants

    async def get_participant_by_token(self, poll_id: int, token: str) -> Optional[Participant]:
        result = await self.db.execute(
            select(Participant).where(Participant.poll_id == poll_id, Participant.token == token)
        )
        return result.scalars().first()

    async def get_participants(self, poll_id: int) -> List[Participant]:
        result = await self.db.execute(
            select(Participant).where(Participant.poll_id == poll_id).order_by(Participant.id)
        )
        return list(result.scalars().all())

    async def get_participants_for_polls(self, poll_ids: Iterable[int]) -> Dict[int, List[Participant]]:
        ids = list(poll_ids)
        grouped: Dict[int, List[Participant]] = {poll_id: [] for poll_id in ids}
        if not ids:
            return grouped
        result = await self.db.execute(
            select(Participant).where(Participant.poll_id.in_(ids)).order_by(Participant.id)
        )
        for participant in result.scalars().all():
            grouped[participant.poll_id].append(participant)
        return grouped

    async def mark_responded(self, participant: Participant, responded_at: datetime) -> None:
        participant.has_responded = True
        participant.responded_at = responded_at
        await self.db.flush()

    async def count_unresponded(self, poll_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Participant.id)).where(
                Participant.poll_id == poll_id,
                Participant.has_responded.is_(False),
            )
        )
        return int(result.scalar_one())

    # Responses

    async def get_answers(self, participant_id: int) -> Dict[int, bool]:
        """Current answers of one participant, keyed by slot id."""
        result = await self.db.execute(
            select(SlotResponse.slot_id, SlotResponse.is_available).where(
                SlotResponse.participant_id == participant_id
            )
        )
        return {slot_id: bool(is_available) for slot_id, is_available in result.all()}

    async def upsert_responses(self, poll_id: int, participant_id: int, answers: Dict[int, bool]) -> None:
        """Insert or overwrite one row per (participant, slot)."""
        result = await self.db.execute(
            select(SlotResponse).where(SlotResponse.participant_id == participant_id)
        )
        existing = {row.slot_id: row for row in result.scalars().all()}
        now = utcnow()

        for slot_id, is_available in answers.items():
            row = existing.get(slot_id)
            if row is not None:
                row.is_available = is_available
                row.updated_at = now
            else:
                self.db.add(
                    SlotResponse(
                        poll_id=poll_id,
                        participant_id=participant_id,
                        slot_id=slot_id,
                        is_available=is_available,
                        updated_at=now,
                    )
                )
        await self.db.flush()

    async def tally_responses(self, poll_id: int) -> Dict[int, Tuple[int, int]]:
        """Aggregate response rows per slot: slot_id -> (available_count, total_responses)."""
        available = func.sum(case((SlotResponse.is_available.is_(True), 1), else_=0))
        result = await self.db.execute(
            select(SlotResponse.slot_id, available, func.count(SlotResponse.id))
            .where(SlotResponse.poll_id == poll_id)
            .group_by(SlotResponse.slot_id)
        )
        return {slot_id: (int(avail or 0), int(total)) for slot_id, avail, total in result.all()}

    async def store_tallies(self, slots: List[TimeSlot], tallies: Dict[int, Tuple[int, int]]) -> None:
        for slot in slots:
            slot.available_count, slot.total_responses = tallies.get(slot.id, (0, 0))
        await self.db.flush()

    # Notification ledger

    async def log_email(
        self,
        poll_id: int,
        participant_id: Optional[int],
        email_type: str,
        to_email: str,
        subject: str,
        status: str,
        error: Optional[str] = None,
    ) -> EmailLog:
        entry = EmailLog(
            poll_id=poll_id,
            participant_id=participant_id,
            email_type=email_type,
            to_email=to_email,
            subject=subject[:300],
            status=status,
            error=error,
        )
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def get_email_log(self, poll_id: int) -> List[EmailLog]:
        result = await self.db.execute(
            select(EmailLog).where(EmailLog.poll_id == poll_id).order_by(EmailLog.id)
        )
        return list(result.scalars().all())

