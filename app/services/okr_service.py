"""OkrService — objective, key result and check-in read models and writes.

Every payload that carries a progress_percentage gets it from
app.domain.progress. All lookups are scoped to the caller's organization;
rows from other organizations are reported as 404, same as missing rows.
"""

import uuid
from datetime import UTC, datetime

import structlog
from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from app.db.models.check_in import CheckIn
from app.db.models.key_result import KeyResult
from app.db.models.objective import Objective
from app.domain.key_results import ConfidenceLevel, KeyResultType
from app.domain.progress import (
    compute_key_result_progress,
    compute_objective_progress,
    round_half_up,
)
from app.schemas.okrs import (
    CheckInResponse,
    KeyResultResponse,
    KeyResultUpdate,
    ObjectiveResponse,
    ObjectiveSummary,
    PersonSummary,
    SessionSummary,
)

logger = structlog.get_logger(__name__)


def _parse_id(value: str, label: str) -> uuid.UUID:
    """Parse a path/query id; malformed ids are indistinguishable from missing ones."""
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise HTTPException(status_code=404, detail=f"{label} not found")


def _person(profile) -> PersonSummary | None:
    if profile is None:
        return None
    return PersonSummary(id=str(profile.id), full_name=profile.full_name, email=profile.email)


def _key_result_response(kr: KeyResult, include_objective: bool = False) -> KeyResultResponse:
    kind = KeyResultType.parse(kr.key_result_type)
    objective = None
    if include_objective and kr.objective is not None:
        objective = ObjectiveSummary(
            id=str(kr.objective.id),
            title=kr.objective.title,
            session_id=str(kr.objective.session_id) if kr.objective.session_id else None,
        )

    return KeyResultResponse(
        id=str(kr.id),
        objective_id=str(kr.objective_id),
        title=kr.title,
        description=kr.description,
        key_result_type=kr.key_result_type,
        key_result_type_label=kind.label if kind else None,
        initial_value=kr.initial_value,
        current_value=kr.current_value,
        target_value=kr.target_value,
        unit=kr.unit,
        confidence_level=kr.confidence_level,
        deadline=kr.deadline,
        tags=kr.tags or [],
        owner=_person(kr.owner),
        objective=objective,
        progress_percentage=round_half_up(compute_key_result_progress(kr)),
        created_at=kr.created_at,
        updated_at=kr.updated_at,
    )


def _objective_response(objective: Objective) -> ObjectiveResponse:
    session = None
    if objective.session is not None:
        session = SessionSummary(
            id=str(objective.session.id),
            name=objective.session.name,
            color=objective.session.color,
            status=objective.session.status,
        )

    return ObjectiveResponse(
        id=str(objective.id),
        title=objective.title,
        description=objective.description,
        status=objective.status,
        start_date=objective.start_date,
        end_date=objective.end_date,
        tags=objective.tags or [],
        owner=_person(objective.owner),
        session=session,
        key_results=[_key_result_response(kr) for kr in objective.key_results],
        progress_percentage=compute_objective_progress(objective.key_results),
        created_at=objective.created_at,
        updated_at=objective.updated_at,
    )


def _check_in_response(check_in: CheckIn) -> CheckInResponse:
    return CheckInResponse(
        id=str(check_in.id),
        key_result_id=str(check_in.key_result_id),
        value=check_in.value,
        notes=check_in.notes,
        user=_person(check_in.user),
        created_at=check_in.created_at,
    )


def _objective_query():
    return select(Objective).options(
        selectinload(Objective.owner),
        selectinload(Objective.session),
        selectinload(Objective.key_results).selectinload(KeyResult.owner),
    )


def _key_result_query():
    return select(KeyResult).options(
        selectinload(KeyResult.owner),
        selectinload(KeyResult.objective),
    )


class OkrService:
    """Service layer for objectives, key results and check-ins.

    Pure orchestration: progress rules live in app.domain.progress.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def list_objectives(
        self,
        organization_id: uuid.UUID,
        session_id: str | None = None,
    ) -> list[ObjectiveResponse]:
        """List the organization's objectives, newest first, with progress."""
        query = _objective_query().where(Objective.organization_id == organization_id)
        if session_id is not None:
            query = query.where(Objective.session_id == _parse_id(session_id, "Session"))

        async with self.session_factory() as session:
            result = await session.execute(query.order_by(Objective.created_at.desc()))
            return [_objective_response(o) for o in result.scalars().all()]

    async def get_objective(self, organization_id: uuid.UUID, objective_id: str) -> ObjectiveResponse:
        """Objective detail with owned key results and aggregate progress.

        Raises:
            HTTPException(404): Objective missing or owned by another organization
        """
        async with self.session_factory() as session:
            result = await session.execute(
                _objective_query().where(
                    Objective.id == _parse_id(objective_id, "Objective"),
                    Objective.organization_id == organization_id,
                )
            )
            objective = result.scalar_one_or_none()
            if objective is None:
                raise HTTPException(status_code=404, detail="Objective not found")

            return _objective_response(objective)

    async def list_key_results(
        self,
        organization_id: uuid.UUID,
        objective_id: str | None = None,
    ) -> list[KeyResultResponse]:
        """List the organization's key results, newest first, optionally for one objective."""
        query = _key_result_query().where(KeyResult.organization_id == organization_id)
        if objective_id is not None:
            query = query.where(KeyResult.objective_id == _parse_id(objective_id, "Objective"))

        async with self.session_factory() as session:
            result = await session.execute(query.order_by(KeyResult.created_at.desc()))
            return [_key_result_response(kr, include_objective=True) for kr in result.scalars().all()]

    async def _load_key_result(
        self,
        session: AsyncSession,
        organization_id: uuid.UUID,
        key_result_id: str,
    ) -> KeyResult:
        result = await session.execute(
            _key_result_query().where(
                KeyResult.id == _parse_id(key_result_id, "Key result"),
                KeyResult.organization_id == organization_id,
            ).execution_options(populate_existing=True)
        )
        kr = result.scalar_one_or_none()
        if kr is None:
            raise HTTPException(status_code=404, detail="Key result not found")
        return kr

    async def get_key_result(self, organization_id: uuid.UUID, key_result_id: str) -> KeyResultResponse:
        async with self.session_factory() as session:
            kr = await self._load_key_result(session, organization_id, key_result_id)
            return _key_result_response(kr, include_objective=True)

    async def update_key_result(
        self,
        organization_id: uuid.UUID,
        key_result_id: str,
        changes: KeyResultUpdate,
    ) -> KeyResultResponse:
        """Apply an explicit edit.

        Only supplied fields change. current_value and check-in history are
        never touched, so progress moves only through the new target/type.
        """
        fields = changes.model_dump(exclude_unset=True)

        async with self.session_factory() as session:
            kr = await self._load_key_result(session, organization_id, key_result_id)
            for name, value in fields.items():
                if isinstance(value, (KeyResultType, ConfidenceLevel)):
                    value = value.value
                setattr(kr, name, value)
            kr.updated_at = datetime.now(UTC)

            await session.commit()
            kr = await self._load_key_result(session, organization_id, key_result_id)

            logger.info(
                "key_result_updated",
                key_result_id=str(kr.id),
                organization_id=str(organization_id),
                fields=sorted(fields),
            )
            return _key_result_response(kr, include_objective=True)

    async def record_check_in(
        self,
        organization_id: uuid.UUID,
        key_result_id: str,
        user_id: uuid.UUID,
        value: float,
        notes: str | None = None,
        confidence_level: ConfidenceLevel = ConfidenceLevel.MEDIUM,
    ) -> tuple[CheckInResponse, KeyResultResponse]:
        """Append a check-in and move the key result's current value to it.

        The insert and the current_value update commit together.

        Returns:
            (check_in, key_result) with the key result's recomputed progress

        Raises:
            HTTPException(404): Key result missing or owned by another organization
        """
        async with self.session_factory() as session:
            kr = await self._load_key_result(session, organization_id, key_result_id)
            previous_value = kr.current_value

            check_in = CheckIn(
                organization_id=organization_id,
                key_result_id=kr.id,
                user_id=user_id,
                value=value,
                notes=notes or None,
            )
            session.add(check_in)

            kr.current_value = value
            kr.confidence_level = ConfidenceLevel(confidence_level).value
            kr.updated_at = datetime.now(UTC)

            await session.commit()

            result = await session.execute(
                select(CheckIn)
                .options(selectinload(CheckIn.user))
                .where(CheckIn.id == check_in.id)
                .execution_options(populate_existing=True)
            )
            check_in = result.scalar_one()
            kr = await self._load_key_result(session, organization_id, key_result_id)
            kr_response = _key_result_response(kr, include_objective=True)

            logger.info(
                "check_in_recorded",
                key_result_id=str(kr.id),
                check_in_id=str(check_in.id),
                previous_value=previous_value,
                value=value,
                progress_percentage=kr_response.progress_percentage,
            )
            return _check_in_response(check_in), kr_response

    async def list_check_ins(self, organization_id: uuid.UUID, key_result_id: str) -> list[CheckInResponse]:
        """Check-in history for a key result, newest first."""
        async with self.session_factory() as session:
            kr = await self._load_key_result(session, organization_id, key_result_id)
            result = await session.execute(
                select(CheckIn)
                .options(selectinload(CheckIn.user))
                .where(
                    CheckIn.key_result_id == kr.id,
                    CheckIn.organization_id == organization_id,
                )
                .order_by(CheckIn.created_at.desc())
            )
            return [_check_in_response(c) for c in result.scalars().all()]
