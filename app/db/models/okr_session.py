"""OkrSession model — a time period (quarter, sprint) grouping objectives."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Text, Uuid

from app.db.base import Base


class OkrSession(Base):
    __tablename__ = "sessions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id"), nullable=False, index=True)
    parent_session_id = Column(Uuid, ForeignKey("sessions.id"), nullable=True)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(50), nullable=False, default="open")  # open, in_progress, archived
    color = Column(String(20), nullable=False, default="#3B82F6")
    cadence = Column(String(50), nullable=False, default="weekly")  # weekly, every_two_weeks, monthly

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
