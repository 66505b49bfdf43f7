"""Participant model."""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from meetpoll.db.base import Base


class Participant(Base):
    __tablename__ = "participants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    poll_id = Column(Integer, ForeignKey("polls.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(120), nullable=False)
    email = Column(String(254), nullable=False)
    token = Column(String(64), nullable=False, unique=True)  # capability token, never regenerated
    has_responded = Column(Boolean, nullable=False, default=False)
    responded_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    poll = relationship("Poll", back_populates="participants")
    responses = relationship("SlotResponse", back_populates="participant", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_participants_poll", "poll_id"),
        UniqueConstraint("poll_id", "email", name="uq_poll_participant_email"),
    )
