"""Response ingestion and tally aggregation."""
from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from meetpoll.core.constants import POLL_STATUS_ACTIVE
from meetpoll.core.exceptions import InvalidState, NotFound
from meetpoll.core.logging_config import get_logger
from meetpoll.core.utils import utcnow
from meetpoll.services.repository import PollRepository
from meetpoll.services.scoring import score

logger = get_logger(__name__)


@dataclass
class SlotTally:
    slot_id: int
    available_count: int
    total_responses: int

    @property
    def score(self) -> int:
        return score(self.available_count, self.total_responses)


@dataclass
class AggregationResult:
    poll_id: int
    participant_id: int
    first_response: bool
    all_responded: bool
    tallies: List[SlotTally] = field(default_factory=list)


def resolve_answers(slot_ids: List[int], answers: Mapping[int, bool]) -> Dict[int, bool]:
    """Map every slot of the poll to an explicit answer.

    Missing slots default to unavailable; ids that are not slots of the
    poll are ignored.
    """
    return {slot_id: bool(answers.get(slot_id, False)) for slot_id in slot_ids}


class ResponseAggregator:
    """Records a participant's answers and keeps slot tallies in sync."""

    def __init__(self, repository: PollRepository):
        self.repository = repository

    async def record_response(
        self, poll_id: int, token: str, answers: Mapping[int, bool]
    ) -> AggregationResult:
        """Upsert the participant's answers for every slot and recompute tallies.

        Resubmission is allowed while the poll is active and overwrites the
        previous answers and response timestamp.

        Raises:
            NotFound: If the token is not a participant of this poll
            InvalidState: If the poll no longer accepts responses
        """
        repo = self.repository

        # Held until commit: one submission per poll at a time
        poll = await repo.lock_poll(poll_id)
        if poll is None:
            raise NotFound("Invalid participant")

        participant = await repo.get_participant_by_token(poll_id, token)
        if participant is None:
            await repo.commit()
            raise NotFound("Invalid participant")
        status = poll.status
        if status != POLL_STATUS_ACTIVE:
            await repo.commit()
            raise InvalidState(f"Poll is {status} and no longer accepts responses", status)

        slots = await repo.get_slots(poll_id)
        resolved = resolve_answers([slot.id for slot in slots], answers)

        ignored = set(answers) - set(resolved)
        if ignored:
            logger.info("unknown_slots_ignored", poll_id=poll_id, slot_ids=sorted(ignored))

        first_response = not participant.has_responded

        await repo.upsert_responses(poll_id, participant.id, resolved)
        await repo.mark_responded(participant, utcnow())

        # Recount from the response rows; cached counters are never trusted
        tallies = await repo.tally_responses(poll_id)
        await repo.store_tallies(slots, tallies)

        all_responded = await repo.count_unresponded(poll_id) == 0
        await repo.commit()

        logger.info(
            "responses_recorded",
            poll_id=poll_id,
            participant_id=participant.id,
            first_response=first_response,
            all_responded=all_responded,
        )

        return AggregationResult(
            poll_id=poll_id,
            participant_id=participant.id,
            first_response=first_response,
            all_responded=all_responded,
            tallies=[
                SlotTally(slot.id, slot.available_count, slot.total_responses) for slot in slots
            ],
        )
