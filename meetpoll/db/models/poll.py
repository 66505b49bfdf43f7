"""Poll model."""
from datetime import datetime, timezone as tz
from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship

from meetpoll.core.constants import POLL_STATUS_ACTIVE
from meetpoll.db.base import Base


class Poll(Base):
    __tablename__ = "polls"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    duration_minutes = Column(Integer, nullable=False, default=30)
    modality = Column(String(20), nullable=False, default="video")
    status = Column(String(20), nullable=False, default=POLL_STATUS_ACTIVE, index=True)
    created_by = Column(String(254), nullable=True)

    # Set together with status=completed; the slot row is owned by this poll
    selected_slot_id = Column(Integer, nullable=True)

    # Finalization results (each optional, saved even when other steps fail)
    video_join_url = Column(String(500), nullable=True)
    video_meeting_id = Column(String(100), nullable=True)
    calendar_event_id = Column(String(200), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=lambda: datetime.now(tz.utc))
    completed_at = Column(DateTime(timezone=True), nullable=True)
    finalized_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    time_slots = relationship(
        "TimeSlot", back_populates="poll", cascade="all, delete-orphan", order_by="TimeSlot.start_time"
    )
    participants = relationship(
        "Participant", back_populates="poll", cascade="all, delete-orphan", order_by="Participant.id"
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'active', 'completed', 'cancelled', 'expired')",
            name="ck_polls_status",
        ),
        CheckConstraint("duration_minutes > 0", name="ck_polls_duration"),
    )
