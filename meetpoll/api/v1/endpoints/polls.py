"""Coordinator poll endpoints."""
from datetime import datetime
from typing import List, Optional, Sequence

from fastapi import APIRouter, Depends, Query, Request

from meetpoll.api.deps import get_scheduling_service, verify_admin_token
from meetpoll.api.errors import to_http_exception
from meetpoll.core import config
from meetpoll.core.exceptions import NotFound, SchedulingError
from meetpoll.core.rate_limit import limiter, RATE_LIMITS
from meetpoll.core.utils import to_utc
from meetpoll.db.models import Participant, Poll, TimeSlot
from meetpoll.schemas import (
    FinalizationResponse,
    InvitationResult,
    ParticipantDetail,
    PollCreate,
    PollCreated,
    PollDetail,
    SlotDetail,
    VotingLink,
)
from meetpoll.services.notifications import build_voting_url
from meetpoll.services.scheduling import SchedulingService
from meetpoll.services.state_machine import ParticipantInput, PollDraft, SlotInput

router = APIRouter(dependencies=[Depends(verify_admin_token)])


def _utc(dt: Optional[datetime]) -> Optional[datetime]:
    return to_utc(dt) if dt is not None else None


def build_poll_detail(poll: Poll, slots: Sequence[TimeSlot], participants: Sequence[Participant]) -> PollDetail:
    """Poll detail with tallies, scores and each participant's voting link."""
    base_url = config.settings.PUBLIC_BASE_URL
    return PollDetail(
        id=poll.id,
        title=poll.title,
        description=poll.description,
        duration_minutes=poll.duration_minutes,
        modality=poll.modality,
        status=poll.status,
        created_by=poll.created_by,
        selected_slot_id=poll.selected_slot_id,
        video_join_url=poll.video_join_url,
        video_meeting_id=poll.video_meeting_id,
        calendar_event_id=poll.calendar_event_id,
        created_at=_utc(poll.created_at),
        completed_at=_utc(poll.completed_at),
        finalized_at=_utc(poll.finalized_at),
        time_slots=[SlotDetail.model_validate(slot) for slot in slots],
        participants=[
            ParticipantDetail(
                id=p.id,
                name=p.name,
                email=p.email,
                has_responded=p.has_responded,
                responded_at=_utc(p.responded_at),
                voting_url=build_voting_url(base_url, poll.id, p.token),
            )
            for p in participants
        ],
    )


async def _load_detail(service: SchedulingService, poll_id: int) -> PollDetail:
    repo = service.repository
    poll = await repo.refresh_poll(poll_id)
    if poll is None:
        raise NotFound("Poll not found")
    slots = await repo.get_slots(poll_id)
    participants = await repo.get_participants(poll_id)
    return build_poll_detail(poll, slots, participants)


@router.post("/polls", response_model=PollCreated, status_code=201)
@limiter.limit(RATE_LIMITS["admin_write"])
async def create_poll_endpoint(
    request: Request,
    payload: PollCreate,
    service: SchedulingService = Depends(get_scheduling_service),
) -> PollCreated:
    """
    Create an active poll with its candidate slots and participants (admin only).

    The poll, slots and participants are committed together; if any part
    fails nothing is stored. Each participant then gets an invitation with
    their personal voting link. Invitation failures are reported per email
    and never undo the poll.

    Raises:
        HTTPException: 400 with the list of violated constraints
        HTTPException: 401 if not authenticated as admin

    Example:
        Request:
            POST /api/v1/polls
            Cookie: admin_token=eyJhbGc...
            {
                "title": "Project kickoff",
                "duration_minutes": 30,
                "modality": "video",
                "slots": [
                    {"start_time": "2024-01-08T09:00:00", "end_time": "2024-01-08T09:30:00"},
                    {"start_time": "2024-01-08T10:00:00", "end_time": "2024-01-08T10:30:00"}
                ],
                "participants": [
                    {"name": "Alice", "email": "alice@example.com"},
                    {"name": "Bob", "email": "bob@example.com"}
                ]
            }

        Response (201):
            {
                "poll_id": 7,
                "status": "active",
                "voting_links": [
                    {"name": "Alice", "email": "alice@example.com",
                     "url": "https://meet.example.com/poll/7?token=Yb3..."}
                ],
                "emails": [{"email": "alice@example.com", "sent": true, "reason": null}]
            }

        Response (400):
            {
                "detail": ["At least one time slot is required"]
            }

    Note:
        Slot times without an offset are read as wall-clock times in the
        configured TIMEZONE.
    """
    draft = PollDraft(
        title=payload.title,
        description=payload.description,
        duration_minutes=payload.duration_minutes,
        modality=payload.modality,
        slots=[SlotInput(start_time=s.start_time, end_time=s.end_time) for s in payload.slots],
        participants=[ParticipantInput(name=p.name, email=p.email) for p in payload.participants],
        created_by=payload.created_by,
    )
    try:
        outcome = await service.create_poll(draft)
    except SchedulingError as e:
        raise to_http_exception(e)

    created = outcome.created
    return PollCreated(
        poll_id=created.poll.id,
        status=created.poll.status,
        voting_links=[
            VotingLink(
                name=p.name,
                email=p.email,
                url=build_voting_url(config.settings.PUBLIC_BASE_URL, created.poll.id, p.token),
            )
            for p in created.participants
        ],
        emails=[
            InvitationResult(email=r.email, sent=r.sent, reason=r.reason) for r in outcome.invitations
        ],
    )


@router.get("/polls", response_model=List[PollDetail])
@limiter.limit(RATE_LIMITS["admin_read"])
async def list_polls_endpoint(
    request: Request,
    service: SchedulingService = Depends(get_scheduling_service),
) -> List[PollDetail]:
    """
    List every poll, newest first (admin only).

    Slots are ordered by start time and carry their live tallies and score;
    participants carry their voting links.
    """
    repo = service.repository
    polls = await repo.list_polls()
    poll_ids = [poll.id for poll in polls]
    slots = await repo.get_slots_for_polls(poll_ids)
    participants = await repo.get_participants_for_polls(poll_ids)
    return [build_poll_detail(poll, slots[poll.id], participants[poll.id]) for poll in polls]


@router.get("/polls/{poll_id}", response_model=PollDetail)
@limiter.limit(RATE_LIMITS["admin_read"])
async def get_poll_endpoint(
    request: Request,
    poll_id: int,
    service: SchedulingService = Depends(get_scheduling_service),
) -> PollDetail:
    """
    Get one poll with slots, tallies and participants (admin only).

    Raises:
        HTTPException: 404 if the poll does not exist
    """
    try:
        return await _load_detail(service, poll_id)
    except SchedulingError as e:
        raise to_http_exception(e)


@router.post("/polls/{poll_id}/cancel", response_model=PollDetail)
@limiter.limit(RATE_LIMITS["admin_write"])
async def cancel_poll_endpoint(
    request: Request,
    poll_id: int,
    service: SchedulingService = Depends(get_scheduling_service),
) -> PollDetail:
    """
    Cancel an active poll (admin only).

    Raises:
        HTTPException: 404 if the poll does not exist
        HTTPException: 409 if the poll is no longer active
    """
    try:
        await service.state_machine.cancel(poll_id)
        return await _load_detail(service, poll_id)
    except SchedulingError as e:
        raise to_http_exception(e)


@router.post("/polls/{poll_id}/expire", response_model=PollDetail)
@limiter.limit(RATE_LIMITS["admin_write"])
async def expire_poll_endpoint(
    request: Request,
    poll_id: int,
    service: SchedulingService = Depends(get_scheduling_service),
) -> PollDetail:
    """
    Expire an active poll that will not collect any more responses (admin only).

    Raises:
        HTTPException: 404 if the poll does not exist
        HTTPException: 409 if the poll is no longer active
    """
    try:
        await service.state_machine.expire(poll_id)
        return await _load_detail(service, poll_id)
    except SchedulingError as e:
        raise to_http_exception(e)


@router.post("/polls/{poll_id}/finalize", response_model=FinalizationResponse)
@limiter.limit(RATE_LIMITS["admin_write"])
async def finalize_poll_endpoint(
    request: Request,
    poll_id: int,
    force: bool = Query(False, description="Run again even if finalization already ran"),
    service: SchedulingService = Depends(get_scheduling_service),
) -> FinalizationResponse:
    """
    Book, add to the calendar and confirm a completed poll (admin only).

    Finalization normally runs by itself when the last participant responds.
    Use this when it was skipped, or with force=true when the first attempt
    produced no video link or calendar event.

    Raises:
        HTTPException: 404 if the poll does not exist
        HTTPException: 409 if the poll is not completed, or already finalized without force

    Example:
        Request:
            POST /api/v1/polls/7/finalize?force=true

        Response (200):
            {
                "poll_id": 7,
                "selected_slot_id": 14,
                "video_join_url": "https://zoom.us/j/123",
                "video_meeting_id": "123",
                "calendar_event_id": "evt_abc",
                "emails": [{"email": "alice@example.com", "sent": true, "reason": null}]
            }
    """
    try:
        result = await service.coordinator.finalize_poll(poll_id, force=force)
    except SchedulingError as e:
        raise to_http_exception(e)

    return FinalizationResponse(
        poll_id=result.poll_id,
        selected_slot_id=result.selected_slot_id,
        video_join_url=result.video_join_url,
        video_meeting_id=result.video_meeting_id,
        calendar_event_id=result.calendar_event_id,
        emails=[
            InvitationResult(email=n.email, sent=n.sent, reason=n.reason) for n in result.notifications
        ],
    )
