"""Database webhook payloads."""
from typing import Optional

from pydantic import BaseModel


class PollStatusRecord(BaseModel):
    id: Optional[int] = None
    status: Optional[str] = None


class PollStatusEvent(BaseModel):
    """Row-change event sent when a poll row is updated."""
    type: str = "UPDATE"
    table: Optional[str] = None
    record: PollStatusRecord
    old_record: Optional[PollStatusRecord] = None


class WebhookResult(BaseModel):
    processed: bool
    reason: Optional[str] = None
    finalized: bool = False
