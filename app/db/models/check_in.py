"""CheckIn model — append-only value reports for a key result."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship

from app.db.base import Base


class CheckIn(Base):
    __tablename__ = "check_ins"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id"), nullable=False, index=True)
    key_result_id = Column(Uuid, ForeignKey("key_results.id"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False)

    value = Column(Float, nullable=False)
    notes = Column(Text, nullable=True)

    # No updated_at: rows are never modified after insert
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    user = relationship("Profile")
