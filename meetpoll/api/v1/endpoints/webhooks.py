"""Database webhook: finalize polls that moved to completed."""
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from meetpoll.api.deps import get_scheduling_service
from meetpoll.core.constants import POLL_STATUS_COMPLETED
from meetpoll.core.exceptions import NotFound
from meetpoll.core.logging_config import get_logger
from meetpoll.core.rate_limit import limiter, RATE_LIMITS
from meetpoll.core.security import verify_webhook_secret
from meetpoll.schemas import PollStatusEvent, WebhookResult
from meetpoll.services.scheduling import SchedulingService

logger = get_logger(__name__)
router = APIRouter()


@router.post("/poll-status", response_model=WebhookResult)
@limiter.limit(RATE_LIMITS["webhook"])
async def poll_status_webhook(
    request: Request,
    event: PollStatusEvent,
    x_webhook_secret: Optional[str] = Header(None),
    service: SchedulingService = Depends(get_scheduling_service),
) -> WebhookResult:
    """
    Run finalization when a poll row changes to completed.

    Used when FINALIZE_INLINE is off: the database sends row updates here
    and finalization runs outside the participant's request. Finalization
    is claimed once per poll, so a poll finalized inline is skipped.

    Raises:
        HTTPException: 401 if the x-webhook-secret header does not match

    Example:
        Request:
            POST /api/v1/webhooks/poll-status
            x-webhook-secret: s3cret
            {
                "type": "UPDATE",
                "table": "polls",
                "record": {"id": 7, "status": "completed"},
                "old_record": {"id": 7, "status": "active"}
            }

        Response (200):
            {
                "processed": true,
                "reason": null,
                "finalized": true
            }
    """
    if not verify_webhook_secret(x_webhook_secret):
        raise HTTPException(status_code=401, detail="Unauthorized")

    old_status = event.old_record.status if event.old_record else None
    if event.record.status != POLL_STATUS_COMPLETED or old_status == POLL_STATUS_COMPLETED:
        return WebhookResult(processed=False, reason="Not a completion event")
    if event.record.id is None:
        return WebhookResult(processed=False, reason="Missing poll id")

    logger.info("completion_event_received", poll_id=event.record.id)
    try:
        result = await service.finalize(event.record.id)
    except NotFound as e:
        return WebhookResult(processed=False, reason=str(e))
    return WebhookResult(processed=True, finalized=result is not None)
