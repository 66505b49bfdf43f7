"""Availability suggestion schemas."""
from datetime import datetime
from typing import List

from pydantic import BaseModel


class SuggestedSlotOut(BaseModel):
    start_time: datetime
    end_time: datetime


class AvailabilityResponse(BaseModel):
    slots: List[SuggestedSlotOut]
    source: str
