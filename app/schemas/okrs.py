"""Pydantic schemas for objective, key result and check-in payloads.

progress_percentage is always computed by app.domain.progress, never read
from storage. List fields default to empty arrays (never null).
"""

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from app.domain.key_results import ConfidenceLevel, KeyResultType


class PersonSummary(BaseModel):
    """Owner or check-in author."""

    id: str
    full_name: str | None = None
    email: str


class SessionSummary(BaseModel):
    id: str
    name: str
    color: str
    status: str


class ObjectiveSummary(BaseModel):
    """Parent objective reference embedded in key result payloads."""

    id: str
    title: str
    session_id: str | None = None


class KeyResultResponse(BaseModel):
    id: str
    objective_id: str
    title: str
    description: str | None = None
    key_result_type: str = Field(..., description="Wire value, e.g. should_increase_to")
    key_result_type_label: str | None = Field(None, description="Human label; null for unknown types")
    initial_value: float
    current_value: float
    target_value: float
    unit: str
    confidence_level: str
    deadline: date | None = None
    tags: list[str] = Field(default_factory=list)
    owner: PersonSummary | None = None
    objective: ObjectiveSummary | None = None
    progress_percentage: int = Field(..., ge=0, le=100, description="Key result completion (0-100)")
    created_at: datetime
    updated_at: datetime


class ObjectiveResponse(BaseModel):
    id: str
    title: str
    description: str | None = None
    status: str
    start_date: date | None = None
    end_date: date | None = None
    tags: list[str] = Field(default_factory=list)
    owner: PersonSummary | None = None
    session: SessionSummary | None = None
    key_results: list[KeyResultResponse] = Field(default_factory=list)
    progress_percentage: int = Field(..., ge=0, le=100, description="Mean of key result progress (0-100)")
    created_at: datetime
    updated_at: datetime


class ObjectiveListResponse(BaseModel):
    objectives: list[ObjectiveResponse] = Field(default_factory=list)


class ObjectiveDetailResponse(BaseModel):
    objective: ObjectiveResponse


class KeyResultListResponse(BaseModel):
    key_results: list[KeyResultResponse] = Field(default_factory=list)


class KeyResultDetailResponse(BaseModel):
    key_result: KeyResultResponse


class KeyResultUpdate(BaseModel):
    """Explicit edit of a key result.

    current_value is deliberately absent: it only moves through check-ins.
    """

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    key_result_type: KeyResultType | None = None
    target_value: float | None = Field(None, allow_inf_nan=False)
    unit: str | None = Field(None, min_length=1, max_length=50)
    confidence_level: ConfidenceLevel | None = None
    deadline: date | None = None
    tags: list[str] | None = None

    @field_validator("title", "key_result_type", "target_value", "unit", "confidence_level", "tags", mode="before")
    @classmethod
    def reject_null(cls, v):
        """Omit a field to leave it unchanged; these columns cannot be cleared."""
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class CheckInCreate(BaseModel):
    value: float = Field(..., allow_inf_nan=False)
    notes: str | None = None
    confidence_level: ConfidenceLevel = ConfidenceLevel.MEDIUM


class CheckInResponse(BaseModel):
    id: str
    key_result_id: str
    value: float
    notes: str | None = None
    user: PersonSummary | None = None
    created_at: datetime


class CheckInListResponse(BaseModel):
    check_ins: list[CheckInResponse] = Field(default_factory=list)


class CheckInCreatedResponse(BaseModel):
    check_in: CheckInResponse
    key_result: KeyResultResponse
