"""TimeSlot model."""
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import relationship

from meetpoll.db.base import Base


class TimeSlot(Base):
    __tablename__ = "time_slots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    poll_id = Column(Integer, ForeignKey("polls.id", ondelete="CASCADE"), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)

    # Cached tallies, recomputed from slot_responses after every submission
    available_count = Column(Integer, nullable=False, default=0)
    total_responses = Column(Integer, nullable=False, default=0)

    # Relationships
    poll = relationship("Poll", back_populates="time_slots")
    responses = relationship("SlotResponse", back_populates="slot", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_time_slots_poll_start", "poll_id", "start_time"),
        CheckConstraint("end_time > start_time", name="ck_time_slots_range"),
    )
