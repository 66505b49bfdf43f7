from .aggregation import AggregationResult, ResponseAggregator, SlotTally
from .availability import SuggestedSlot, suggest_default_slots, suggest_free_slots, suggest_slots
from .finalization import FinalizationCoordinator, FinalizationResult
from .repository import PollRepository
from .scheduling import Ballot, CreationOutcome, SchedulingService, SubmissionOutcome
from .scoring import score
from .state_machine import (
    CreatedPoll,
    FinalizeIntent,
    ParticipantInput,
    PollDraft,
    PollStateMachine,
    SlotInput,
    select_winning_slot,
)

__all__ = [
    # engine
    "score",
    "SlotTally",
    "AggregationResult",
    "ResponseAggregator",
    "PollStateMachine",
    "PollDraft",
    "SlotInput",
    "ParticipantInput",
    "CreatedPoll",
    "FinalizeIntent",
    "select_winning_slot",
    "FinalizationCoordinator",
    "FinalizationResult",
    # request flows
    "SchedulingService",
    "SubmissionOutcome",
    "CreationOutcome",
    "Ballot",
    "PollRepository",
    # availability
    "SuggestedSlot",
    "suggest_default_slots",
    "suggest_free_slots",
    "suggest_slots",
]
