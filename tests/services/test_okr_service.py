"""Tests for OkrService read models, edits and check-in recording."""

from uuid import uuid4

import pytest
from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy import select

from app.db.models import CheckIn, KeyResult
from app.domain.key_results import ConfidenceLevel, KeyResultType
from app.domain.progress import compute_objective_progress
from app.schemas.okrs import KeyResultUpdate
from app.services.okr_service import OkrService

pytestmark = pytest.mark.integration


@pytest.fixture
def service(session_factory) -> OkrService:
    return OkrService(session_factory)


class TestObjectiveReads:
    async def test_objective_detail_includes_progress(self, service, seeded):
        objective = await service.get_objective(seeded["org_a"].id, str(seeded["objective"].id))

        assert objective.title == "Grow the user base"
        assert [kr.title for kr in objective.key_results] == ["Weekly signups", "Uptime", "Monthly churn"]
        assert [kr.progress_percentage for kr in objective.key_results] == [50, 100, 0]
        assert objective.progress_percentage == 50
        assert objective.session.name == "Q3"
        assert objective.owner.email == "alice@acme.test"

    async def test_objective_progress_matches_engine(self, service, seeded):
        objective = await service.get_objective(seeded["org_a"].id, str(seeded["objective"].id))
        expected = compute_objective_progress(
            [seeded["signups"], seeded["uptime"], seeded["churn"]]
        )
        assert objective.progress_percentage == expected

    async def test_foreign_objective_is_not_found(self, service, seeded):
        with pytest.raises(HTTPException) as exc_info:
            await service.get_objective(seeded["org_a"].id, str(seeded["foreign_objective"].id))
        assert exc_info.value.status_code == 404

    async def test_malformed_id_is_not_found(self, service, seeded):
        with pytest.raises(HTTPException) as exc_info:
            await service.get_objective(seeded["org_a"].id, "not-a-uuid")
        assert exc_info.value.status_code == 404

    async def test_list_is_scoped_to_organization(self, service, seeded):
        objectives = await service.list_objectives(seeded["org_a"].id)
        assert [o.id for o in objectives] == [str(seeded["objective"].id)]

    async def test_list_filters_by_session(self, service, seeded):
        in_session = await service.list_objectives(seeded["org_a"].id, session_id=str(seeded["session"].id))
        other_session = await service.list_objectives(seeded["org_a"].id, session_id=str(uuid4()))
        assert len(in_session) == 1
        assert other_session == []


class TestKeyResultReads:
    async def test_list_newest_first(self, service, seeded):
        key_results = await service.list_key_results(seeded["org_a"].id)
        assert [kr.title for kr in key_results] == ["Monthly churn", "Uptime", "Weekly signups"]

    async def test_list_filters_by_objective(self, service, seeded):
        key_results = await service.list_key_results(
            seeded["org_b"].id, objective_id=str(seeded["foreign_objective"].id)
        )
        assert [kr.title for kr in key_results] == ["Volcano lairs"]

    async def test_detail_carries_objective_and_label(self, service, seeded):
        kr = await service.get_key_result(seeded["org_a"].id, str(seeded["uptime"].id))
        assert kr.key_result_type_label == "Should stay above"
        assert kr.objective.title == "Grow the user base"
        assert kr.progress_percentage == 100

    async def test_unknown_stored_type_reads_as_zero(self, service, seeded, db_session):
        row = await db_session.get(KeyResult, seeded["signups"].id)
        row.key_result_type = "legacy_metric"
        await db_session.commit()

        kr = await service.get_key_result(seeded["org_a"].id, str(seeded["signups"].id))
        assert kr.progress_percentage == 0
        assert kr.key_result_type_label is None


class TestRecordCheckIn:
    async def test_check_in_moves_current_value(self, service, seeded):
        check_in, kr = await service.record_check_in(
            seeded["org_a"].id,
            str(seeded["signups"].id),
            user_id=seeded["alice"].id,
            value=75,
            notes="Campaign landed",
            confidence_level=ConfidenceLevel.HIGH,
        )

        assert check_in.value == 75
        assert check_in.notes == "Campaign landed"
        assert check_in.user.full_name == "Alice"
        assert kr.current_value == 75
        assert kr.confidence_level == "high"
        assert kr.progress_percentage == 75

    async def test_objective_progress_follows_check_in(self, service, seeded):
        await service.record_check_in(
            seeded["org_a"].id, str(seeded["churn"].id), user_id=seeded["alice"].id, value=4
        )
        objective = await service.get_objective(seeded["org_a"].id, str(seeded["objective"].id))
        # 50 + 100 + 100 = 250 / 3 = 83.33
        assert objective.progress_percentage == 83

    async def test_history_is_append_only(self, service, seeded, db_session):
        kr_id = str(seeded["signups"].id)
        first, _ = await service.record_check_in(seeded["org_a"].id, kr_id, user_id=seeded["alice"].id, value=60)
        await service.record_check_in(seeded["org_a"].id, kr_id, user_id=seeded["alice"].id, value=70)

        history = await service.list_check_ins(seeded["org_a"].id, kr_id)
        assert [c.value for c in history] == [70, 60]
        assert history[1].id == first.id

        count = len((await db_session.execute(select(CheckIn))).scalars().all())
        assert count == 2

    async def test_empty_notes_stored_as_null(self, service, seeded):
        check_in, _ = await service.record_check_in(
            seeded["org_a"].id, str(seeded["signups"].id), user_id=seeded["alice"].id, value=1, notes=""
        )
        assert check_in.notes is None

    async def test_foreign_key_result_rejected(self, service, seeded):
        with pytest.raises(HTTPException) as exc_info:
            await service.record_check_in(
                seeded["org_a"].id, str(seeded["foreign_kr"].id), user_id=seeded["alice"].id, value=1
            )
        assert exc_info.value.status_code == 404


class TestUpdateKeyResult:
    async def test_target_edit_changes_progress_not_history(self, service, seeded):
        kr_id = str(seeded["signups"].id)
        await service.record_check_in(seeded["org_a"].id, kr_id, user_id=seeded["alice"].id, value=50)

        kr = await service.update_key_result(seeded["org_a"].id, kr_id, KeyResultUpdate(target_value=200))

        assert kr.target_value == 200
        assert kr.current_value == 50
        assert kr.progress_percentage == 25
        history = await service.list_check_ins(seeded["org_a"].id, kr_id)
        assert [c.value for c in history] == [50]

    async def test_type_edit(self, service, seeded):
        kr = await service.update_key_result(
            seeded["org_a"].id,
            str(seeded["signups"].id),
            KeyResultUpdate(key_result_type=KeyResultType.ACHIEVED_OR_NOT, target_value=50),
        )
        assert kr.key_result_type == "achieved_or_not"
        assert kr.progress_percentage == 100

    async def test_nullable_fields_can_be_cleared(self, service, seeded):
        kr = await service.update_key_result(
            seeded["org_a"].id,
            str(seeded["signups"].id),
            KeyResultUpdate(description=None, deadline=None, unit="usd"),
        )
        assert kr.title == "Weekly signups"
        assert kr.description is None
        assert kr.deadline is None
        assert kr.unit == "usd"


class TestKeyResultUpdateSchema:
    @pytest.mark.parametrize("field", ["title", "key_result_type", "target_value", "unit", "confidence_level", "tags"])
    def test_null_for_required_column_rejected(self, field):
        with pytest.raises(ValidationError):
            KeyResultUpdate(**{field: None})

    def test_omitted_fields_are_unset(self):
        assert KeyResultUpdate(target_value=5).model_dump(exclude_unset=True) == {"target_value": 5}
