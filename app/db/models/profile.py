"""Profile model — platform user mirrored into the app schema."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid

from app.db.base import Base


class Profile(Base):
    __tablename__ = "profiles"

    # Same id as the auth platform's user (JWT sub claim)
    id = Column(Uuid, primary_key=True)
    organization_id = Column(Uuid, ForeignKey("organizations.id"), nullable=True, index=True)

    email = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)
    role = Column(String(50), nullable=False, default="member")  # admin, member

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
