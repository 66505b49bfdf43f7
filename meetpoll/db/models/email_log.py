"""EmailLog model: append-only ledger of notification attempts."""
from datetime import datetime, timezone as tz
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text

from meetpoll.db.base import Base


class EmailLog(Base):
    __tablename__ = "email_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    poll_id = Column(Integer, ForeignKey("polls.id", ondelete="CASCADE"), nullable=False)
    participant_id = Column(Integer, ForeignKey("participants.id", ondelete="CASCADE"), nullable=True)
    email_type = Column(String(20), nullable=False)  # invite, confirmation
    to_email = Column(String(254), nullable=False)
    subject = Column(String(300), nullable=False)
    status = Column(String(20), nullable=False)  # sent, failed
    error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    __table_args__ = (Index("idx_email_log_poll", "poll_id"),)
