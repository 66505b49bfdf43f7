"""Request-level flows that wire the scheduling engine together."""
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.exc import SQLAlchemyError

from meetpoll.core.constants import POLL_STATUS_COMPLETED
from meetpoll.core.exceptions import InvalidState, NotFound
from meetpoll.core.logging_config import get_logger
from meetpoll.db.models import Participant, Poll, TimeSlot
from meetpoll.services.aggregation import AggregationResult, ResponseAggregator
from meetpoll.services.finalization import FinalizationCoordinator, FinalizationResult
from meetpoll.services.notifications import DeliveryResult, send_invitations
from meetpoll.services.repository import PollRepository
from meetpoll.services.state_machine import CreatedPoll, FinalizeIntent, PollDraft, PollStateMachine

logger = get_logger(__name__)


@dataclass
class SubmissionOutcome:
    aggregation: AggregationResult
    status: str
    intent: Optional[FinalizeIntent] = None
    finalization: Optional[FinalizationResult] = None


@dataclass
class Ballot:
    poll: Poll
    participant: Participant
    slots: List[TimeSlot]
    answers: Dict[int, bool]


@dataclass
class CreationOutcome:
    created: CreatedPoll
    invitations: List[DeliveryResult] = field(default_factory=list)


class SchedulingService:
    """Creation, response submission and finalization for one request."""

    def __init__(
        self,
        repository: PollRepository,
        coordinator: FinalizationCoordinator,
        base_url: str,
        tz: ZoneInfo,
        finalize_inline: bool = True,
    ):
        self.repository = repository
        self.coordinator = coordinator
        self.base_url = base_url
        self.tz = tz
        self.finalize_inline = finalize_inline
        self.state_machine = PollStateMachine(repository)
        self.aggregator = ResponseAggregator(repository)

    async def create_poll(self, draft: PollDraft) -> CreationOutcome:
        """Create the poll, then invite participants best-effort."""
        created = await self.state_machine.create(draft)
        invitations = await send_invitations(
            self.repository,
            self.coordinator.notifier,
            created.poll,
            created.slots,
            created.participants,
            self.base_url,
            self.tz,
            self.coordinator.config.timeout_seconds,
        )
        return CreationOutcome(created=created, invitations=invitations)

    async def submit_responses(self, poll_id: int, token: str, answers: Mapping[int, bool]) -> SubmissionOutcome:
        """Record answers; complete and finalize the poll when everyone has answered."""
        aggregation = await self.aggregator.record_response(poll_id, token, answers)

        # Re-checked in its own transaction after every commit, so the last of
        # two concurrent responders still completes the poll
        intent = await self.state_machine.on_all_responded(poll_id)

        finalization = None
        if intent is not None and self.finalize_inline:
            finalization = await self.finalize(intent.poll_id)

        poll = await self.repository.refresh_poll(poll_id)
        if poll.status == POLL_STATUS_COMPLETED:
            aggregation.all_responded = True
        return SubmissionOutcome(
            aggregation=aggregation,
            status=poll.status,
            intent=intent,
            finalization=finalization,
        )

    async def finalize(self, poll_id: int, force: bool = False) -> Optional[FinalizationResult]:
        """Run finalization, treating a concurrent or earlier run as a no-op.

        The selected slot is already committed, so storage errors here are
        logged rather than surfaced to the participant.
        """
        try:
            return await self.coordinator.finalize_poll(poll_id, force=force)
        except InvalidState as exc:
            logger.info("finalization_skipped", poll_id=poll_id, reason=str(exc))
        except SQLAlchemyError:
            await self.repository.rollback()
            logger.exception("finalization_failed", poll_id=poll_id)
        return None

    async def ballot(self, poll_id: int, token: str) -> Ballot:
        """Poll, participant, slots and own answers for a voting link.

        Raises:
            NotFound: If the token is not a participant of this poll
        """
        participant = await self.repository.get_participant_by_token(poll_id, token)
        if participant is None:
            raise NotFound("Invalid participant")
        poll = await self.repository.get_poll(poll_id)
        if poll is None:
            raise NotFound("Invalid participant")
        slots = await self.repository.get_slots(poll_id)
        answers = await self.repository.get_answers(participant.id)
        return Ballot(poll=poll, participant=participant, slots=slots, answers=answers)
