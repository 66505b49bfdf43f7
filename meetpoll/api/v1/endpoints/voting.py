"""Participant endpoints, authorized by the voting link token."""
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from meetpoll.api.deps import get_scheduling_service
from meetpoll.api.errors import to_http_exception
from meetpoll.core.exceptions import SchedulingError
from meetpoll.core.rate_limit import limiter, RATE_LIMITS
from meetpoll.core.sanitization import validate_token_format
from meetpoll.schemas import (
    BallotParticipant,
    BallotPoll,
    BallotView,
    ResponseSubmission,
    SlotDetail,
    SubmissionResult,
)
from meetpoll.services.scheduling import SchedulingService

router = APIRouter()


@router.get("/polls/{poll_id}/ballot", response_model=BallotView)
@limiter.limit(RATE_LIMITS["ballot"])
async def get_ballot_endpoint(
    request: Request,
    poll_id: int,
    token: str = Query(...),
    service: SchedulingService = Depends(get_scheduling_service),
) -> BallotView:
    """
    Show a participant the poll, its slots and their own current answers.

    Raises:
        HTTPException: 404 if the token is not a participant of this poll

    Example:
        Request:
            GET /api/v1/polls/7/ballot?token=Yb3...

        Response (200):
            {
                "poll": {"id": 7, "title": "Project kickoff", "status": "active", ...},
                "participant": {"name": "Alice", "has_responded": false},
                "slots": [
                    {"id": 14, "start_time": "2024-01-08T14:00:00Z", "end_time": "2024-01-08T14:30:00Z",
                     "available_count": 1, "total_responses": 1, "score": 100}
                ],
                "responses": {}
            }

    Security:
        - The token only grants access to this participant's own answers
        - Other participants' names, emails and tokens are never returned
    """
    try:
        token = validate_token_format(token)
    except ValueError:
        raise HTTPException(status_code=404, detail="Invalid participant")

    try:
        ballot = await service.ballot(poll_id, token)
    except SchedulingError as e:
        raise to_http_exception(e)

    poll = ballot.poll
    return BallotView(
        poll=BallotPoll(
            id=poll.id,
            title=poll.title,
            description=poll.description,
            duration_minutes=poll.duration_minutes,
            modality=poll.modality,
            status=poll.status,
            selected_slot_id=poll.selected_slot_id,
            video_join_url=poll.video_join_url,
        ),
        participant=BallotParticipant(
            name=ballot.participant.name,
            has_responded=ballot.participant.has_responded,
        ),
        slots=[SlotDetail.model_validate(slot) for slot in ballot.slots],
        responses=ballot.answers,
    )


@router.post("/polls/{poll_id}/responses", response_model=SubmissionResult)
@limiter.limit(RATE_LIMITS["submit"])
async def submit_responses_endpoint(
    request: Request,
    poll_id: int,
    submission: ResponseSubmission,
    service: SchedulingService = Depends(get_scheduling_service),
) -> SubmissionResult:
    """
    Submit or revise a participant's availability.

    Every slot of the poll gets an answer: slots missing from the body count
    as unavailable and unknown slot ids are ignored. Resubmitting overwrites
    the previous answers while the poll is active. When this submission
    completes the set of responses, the winning slot is selected and the
    poll moves to completed.

    Raises:
        HTTPException: 404 if the token is not a participant of this poll
        HTTPException: 409 if the poll no longer accepts responses
        HTTPException: 422 if the token is malformed

    Example:
        Request:
            POST /api/v1/polls/7/responses
            {
                "token": "Yb3...",
                "responses": {"14": true, "15": false}
            }

        Response (200):
            {
                "success": true,
                "all_responded": true,
                "status": "completed"
            }

        Response (409):
            {
                "detail": "Poll is completed and no longer accepts responses"
            }
    """
    try:
        outcome = await service.submit_responses(poll_id, submission.token, submission.responses)
    except SchedulingError as e:
        raise to_http_exception(e)

    return SubmissionResult(
        success=True,
        all_responded=outcome.aggregation.all_responded,
        status=outcome.status,
    )
