"""Unit tests for response aggregation."""
import pytest
from sqlalchemy import func, select

from meetpoll.core.exceptions import InvalidState, NotFound
from meetpoll.db.models import SlotResponse
from meetpoll.services.aggregation import ResponseAggregator, resolve_answers
from meetpoll.services.state_machine import PollStateMachine


async def _count_rows(db_session, participant_id):
    result = await db_session.execute(
        select(func.count(SlotResponse.id)).where(SlotResponse.participant_id == participant_id)
    )
    return result.scalar_one()


@pytest.mark.unit
class TestResolveAnswers:
    """Test answer resolution against the poll's slots."""

    def test_missing_slots_default_to_unavailable(self):
        assert resolve_answers([1, 2, 3], {2: True}) == {1: False, 2: True, 3: False}

    def test_unknown_slot_ids_ignored(self):
        assert resolve_answers([1, 2], {1: True, 99: True}) == {1: True, 2: False}

    def test_empty_answers(self):
        assert resolve_answers([5], {}) == {5: False}


@pytest.mark.unit
class TestRecordResponse:
    """Test response ingestion and tally recomputation."""

    @pytest.mark.asyncio
    async def test_kickoff_example_tallies(self, make_poll, repository):
        """Alice: both slots; Bob: only 10:00 -> 1/2 (50) and 2/2 (100)."""
        created = await make_poll()
        nine, ten = created.slots
        alice, bob = created.participants
        aggregator = ResponseAggregator(repository)

        first = await aggregator.record_response(created.poll.id, alice.token, {nine.id: True, ten.id: True})
        assert first.first_response is True
        assert first.all_responded is False

        second = await aggregator.record_response(created.poll.id, bob.token, {ten.id: True})
        assert second.all_responded is True

        tallies = {t.slot_id: t for t in second.tallies}
        assert (tallies[nine.id].available_count, tallies[nine.id].total_responses) == (1, 2)
        assert (tallies[ten.id].available_count, tallies[ten.id].total_responses) == (2, 2)
        assert tallies[nine.id].score == 50
        assert tallies[ten.id].score == 100

        slots = await repository.get_slots(created.poll.id)
        assert [(s.available_count, s.total_responses) for s in slots] == [(1, 2), (2, 2)]

    @pytest.mark.asyncio
    async def test_every_slot_gets_a_row(self, make_poll, repository, db_session):
        """A partial answer map still writes one row per slot."""
        created = await make_poll()
        alice = created.participants[0]

        await ResponseAggregator(repository).record_response(created.poll.id, alice.token, {})

        assert await _count_rows(db_session, alice.id) == 2
        slots = await repository.get_slots(created.poll.id)
        assert all(s.total_responses == 1 and s.available_count == 0 for s in slots)

    @pytest.mark.asyncio
    async def test_resubmission_overwrites_without_double_counting(self, make_poll, repository, db_session):
        created = await make_poll()
        nine, ten = created.slots
        alice = created.participants[0]
        aggregator = ResponseAggregator(repository)

        await aggregator.record_response(created.poll.id, alice.token, {nine.id: True, ten.id: False})
        result = await aggregator.record_response(created.poll.id, alice.token, {nine.id: False, ten.id: True})

        assert result.first_response is False
        assert await _count_rows(db_session, alice.id) == 2
        assert await repository.get_answers(alice.id) == {nine.id: False, ten.id: True}

        tallies = {t.slot_id: (t.available_count, t.total_responses) for t in result.tallies}
        assert tallies == {nine.id: (0, 1), ten.id: (1, 1)}

    @pytest.mark.asyncio
    async def test_marks_participant_responded(self, make_poll, repository):
        created = await make_poll()
        alice = created.participants[0]

        await ResponseAggregator(repository).record_response(created.poll.id, alice.token, {})

        participants = await repository.get_participants(created.poll.id)
        responded = {p.email: p for p in participants}
        assert responded["alice@example.com"].has_responded is True
        assert responded["alice@example.com"].responded_at is not None
        assert responded["bob@example.com"].has_responded is False

    @pytest.mark.asyncio
    async def test_unknown_slot_ids_are_not_stored(self, make_poll, repository, db_session):
        created = await make_poll()
        alice = created.participants[0]

        await ResponseAggregator(repository).record_response(created.poll.id, alice.token, {987654: True})

        answers = await repository.get_answers(alice.id)
        assert 987654 not in answers
        assert set(answers) == {s.id for s in created.slots}

    @pytest.mark.asyncio
    async def test_unknown_token(self, make_poll, repository):
        created = await make_poll()
        with pytest.raises(NotFound):
            await ResponseAggregator(repository).record_response(created.poll.id, "not-a-real-token", {})

    @pytest.mark.asyncio
    async def test_token_from_another_poll(self, make_poll, repository):
        """A token only works for the poll it was issued for."""
        first = await make_poll(title="First")
        second = await make_poll(title="Second")
        with pytest.raises(NotFound):
            await ResponseAggregator(repository).record_response(
                second.poll.id, first.participants[0].token, {}
            )

    @pytest.mark.asyncio
    async def test_rejected_once_poll_is_closed(self, make_poll, repository):
        created = await make_poll()
        await PollStateMachine(repository).expire(created.poll.id)

        with pytest.raises(InvalidState) as exc_info:
            await ResponseAggregator(repository).record_response(
                created.poll.id, created.participants[0].token, {}
            )
        assert exc_info.value.status == "expired"
