"""Participant notices: invitations, voting links and the email ledger."""
import asyncio
from dataclasses import dataclass
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo

from meetpoll.core.constants import EMAIL_STATUS_FAILED, EMAIL_STATUS_SENT, EMAIL_TYPE_INVITE
from meetpoll.core.logging_config import get_logger
from meetpoll.db.models import Participant, Poll, TimeSlot
from meetpoll.integrations.base import NotificationMessage, Notifier
from meetpoll.services.email_templates import invite_email
from meetpoll.services.repository import PollRepository

logger = get_logger(__name__)


@dataclass
class DeliveryResult:
    email: str
    sent: bool
    reason: Optional[str] = None


def build_voting_url(base_url: str, poll_id: int, token: str) -> str:
    """Voting link carrying the participant's capability token."""
    return f"{base_url.rstrip('/')}/poll/{poll_id}?token={token}"


async def deliver(
    repository: PollRepository,
    notifier: Notifier,
    poll_id: int,
    participant_id: int,
    to_email: str,
    email_type: str,
    message: NotificationMessage,
    timeout_seconds: float,
) -> DeliveryResult:
    """Send one notice and append the attempt to the email log.

    Never raises for delivery problems; the outcome is returned and logged.
    """
    reason = None
    try:
        sent = await asyncio.wait_for(notifier.send(to_email, message), timeout=timeout_seconds)
        if not sent:
            reason = "rejected by provider"
    except asyncio.TimeoutError:
        sent, reason = False, "timed out"
    except Exception as exc:
        sent, reason = False, str(exc)

    if not sent:
        logger.warning(
            "notification_failed",
            poll_id=poll_id,
            participant_id=participant_id,
            email_type=email_type,
            reason=reason,
        )

    await repository.log_email(
        poll_id=poll_id,
        participant_id=participant_id,
        email_type=email_type,
        to_email=to_email,
        subject=message.subject,
        status=EMAIL_STATUS_SENT if sent else EMAIL_STATUS_FAILED,
        error=reason,
    )
    return DeliveryResult(email=to_email, sent=sent, reason=reason)


async def send_invitations(
    repository: PollRepository,
    notifier: Optional[Notifier],
    poll: Poll,
    slots: Sequence[TimeSlot],
    participants: Sequence[Participant],
    base_url: str,
    tz: ZoneInfo,
    timeout_seconds: float,
) -> List[DeliveryResult]:
    """Email every participant their voting link.

    Runs after the poll is committed; a failed invite never undoes creation.
    """
    if notifier is None:
        return [DeliveryResult(email=p.email, sent=False, reason="notifications disabled") for p in participants]

    slot_times = [(slot.start_time, slot.end_time) for slot in slots]
    results = []
    for participant in participants:
        message = invite_email(
            participant.name,
            poll.title,
            poll.description,
            build_voting_url(base_url, poll.id, participant.token),
            slot_times,
            tz,
        )
        results.append(
            await deliver(
                repository, notifier, poll.id, participant.id, participant.email,
                EMAIL_TYPE_INVITE, message, timeout_seconds,
            )
        )

    await repository.commit()
    logger.info(
        "invitations_sent",
        poll_id=poll.id,
        sent=sum(1 for r in results if r.sent),
        failed=sum(1 for r in results if not r.sent),
    )
    return results
