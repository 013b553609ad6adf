"""KeyResult model — measurable target under an objective.

current_value is only written by check-in recording; edits never touch it.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, Date, DateTime, Float, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.db.base import Base


class KeyResult(Base):
    __tablename__ = "key_results"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id"), nullable=False, index=True)
    objective_id = Column(Uuid, ForeignKey("objectives.id"), nullable=False, index=True)
    owner_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    key_result_type = Column(String(50), nullable=False, default="should_increase_to")
    initial_value = Column(Float, nullable=False, default=0)
    current_value = Column(Float, nullable=False, default=0)
    target_value = Column(Float, nullable=False)
    unit = Column(String(50), nullable=False, default="number")  # number, percentage, usd, gbp, eur
    confidence_level = Column(String(20), nullable=False, default="medium")  # low, medium, high
    deadline = Column(Date, nullable=True)
    tags = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    objective = relationship("Objective", back_populates="key_results")
    owner = relationship("Profile")
