"""SlotResponse model: one participant's availability for one slot."""
from datetime import datetime, timezone as tz
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from meetpoll.db.base import Base


class SlotResponse(Base):
    __tablename__ = "slot_responses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    poll_id = Column(Integer, ForeignKey("polls.id", ondelete="CASCADE"), nullable=False)
    participant_id = Column(Integer, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    slot_id = Column(Integer, ForeignKey("time_slots.id", ondelete="CASCADE"), nullable=False)
    is_available = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    # Relationships
    participant = relationship("Participant", back_populates="responses")
    slot = relationship("TimeSlot", back_populates="responses")

    __table_args__ = (
        Index("idx_slot_responses_slot", "slot_id"),
        Index("idx_slot_responses_poll", "poll_id"),
        UniqueConstraint("participant_id", "slot_id", name="uq_participant_slot"),
    )
