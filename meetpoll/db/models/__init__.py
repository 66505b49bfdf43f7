"""Database models."""
from meetpoll.db.models.poll import Poll
from meetpoll.db.models.time_slot import TimeSlot
from meetpoll.db.models.participant import Participant
from meetpoll.db.models.slot_response import SlotResponse
from meetpoll.db.models.email_log import EmailLog

__all__ = ["Poll", "TimeSlot", "Participant", "SlotResponse", "EmailLog"]
