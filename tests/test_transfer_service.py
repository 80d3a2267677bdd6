"""Tests for the data IO service (export, import, delete)."""
import json
from datetime import datetime

import pytest

from motioncore.core.errors import (
    AccessDeniedError,
    DecodingError,
    NoDataToExportError,
    UnsupportedVersionError,
)
from motioncore.models import CardioSession, ExerciseSet, OutdoorSession, StrengthSession, TrainingPlan
from motioncore.models.types import OutdoorActivity, WorkoutType
from motioncore.services.store import SessionStore
from motioncore.services.transfer import DataIOService, TransferKind


@pytest.fixture
def service(db, test_settings):
    return DataIOService(db, settings=test_settings)


def _package(version=1, items=None) -> bytes:
    return json.dumps({
        "version": version,
        "exportedAt": "2025-03-12T10:00:00Z",
        "items": items if items is not None else [{"date": "2025-03-01T08:00:00Z", "calories": 250}],
    }).encode("utf-8")


class TestExport:

    @pytest.mark.asyncio
    async def test_export_writes_sorted_pretty_json(self, db, service, tmp_path):
        store = SessionStore(db)
        await store.add(CardioSession(date=datetime(2025, 3, 1, 8), calories=300, duration=30))
        await store.add(CardioSession(date=datetime(2025, 3, 2, 8), calories=400, duration=40))

        result = await service.export(TransferKind.CARDIO, timestamp=1741777200)

        assert result.count == 2
        assert result.path == tmp_path / "MotionCore-Export-1741777200.json"
        text = result.path.read_text(encoding="utf-8")
        data = json.loads(text)
        assert data["version"] == 1
        assert len(data["items"]) == 2
        assert text == json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False) + "\n"
        assert list(tmp_path.glob("*.tmp")) == []

    @pytest.mark.asyncio
    async def test_export_filename_per_kind(self, db, service):
        await SessionStore(db).add(OutdoorSession(date=datetime(2025, 3, 1)))
        result = await service.export(TransferKind.OUTDOOR, timestamp=1)
        assert result.path.name == "MotionCore-Outdoor-1.json"

    @pytest.mark.asyncio
    async def test_export_without_data(self, service):
        with pytest.raises(NoDataToExportError):
            await service.export(TransferKind.CARDIO)


class TestImport:

    @pytest.mark.asyncio
    async def test_import_inserts_every_item(self, db, service):
        items = [
            {"date": "2025-03-01T08:00:00Z", "calories": 250},
            {"date": "2025-03-02T08:00:00Z", "heartRate": None},
        ]
        result = await service.import_bytes(TransferKind.CARDIO, _package(items=items))

        assert result.imported == 2
        assert result.warnings == []
        assert await SessionStore(db).count(WorkoutType.CARDIO) == 2

    @pytest.mark.asyncio
    async def test_duplicate_import_is_not_merged(self, db, service):
        await service.import_bytes(TransferKind.CARDIO, _package())
        await service.import_bytes(TransferKind.CARDIO, _package())
        assert await SessionStore(db).count(WorkoutType.CARDIO) == 2

    @pytest.mark.asyncio
    async def test_unsupported_version_inserts_nothing(self, db, service):
        with pytest.raises(UnsupportedVersionError) as exc_info:
            await service.import_bytes(TransferKind.CARDIO, _package(version=2))
        assert exc_info.value.version == 2
        assert await SessionStore(db).count(WorkoutType.CARDIO) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("version", ["1", True, 1.0])
    async def test_version_must_be_an_integer(self, db, service, version):
        with pytest.raises(DecodingError):
            await service.import_bytes(TransferKind.CARDIO, _package(version=version))
        assert await SessionStore(db).count(WorkoutType.CARDIO) == 0

    @pytest.mark.asyncio
    async def test_invalid_json(self, service):
        with pytest.raises(DecodingError):
            await service.import_bytes(TransferKind.CARDIO, b"{not json")

    @pytest.mark.asyncio
    async def test_missing_required_field(self, db, service):
        raw = _package(items=[{"date": "2025-03-01T08:00:00Z"}])  # outdoorActivity missing
        with pytest.raises(DecodingError):
            await service.import_bytes(TransferKind.OUTDOOR, raw)
        assert await SessionStore(db).count(WorkoutType.OUTDOOR) == 0

    @pytest.mark.asyncio
    async def test_missing_version(self, service):
        raw = json.dumps({"exportedAt": "2025-03-12T10:00:00Z", "items": []})
        with pytest.raises(DecodingError):
            await service.import_bytes(TransferKind.CARDIO, raw)

    @pytest.mark.asyncio
    async def test_unknown_activity_is_imported_with_warning(self, db, service):
        raw = _package(items=[{"date": "2025-03-01T08:00:00Z", "outdoorActivity": "skydiving"}])
        result = await service.import_bytes(TransferKind.OUTDOOR, raw)

        assert result.imported == 1
        assert result.to_dict()["warnings"][0]["field"] == "outdoorActivity"
        sessions = await SessionStore(db).list(WorkoutType.OUTDOOR)
        assert sessions[0].outdoor_activity == OutdoorActivity.CYCLING

    @pytest.mark.asyncio
    async def test_missing_file(self, service, tmp_path):
        with pytest.raises(AccessDeniedError):
            await service.import_file(TransferKind.CARDIO, tmp_path / "missing.json")

    @pytest.mark.asyncio
    async def test_export_then_import_file(self, db, service):
        session = StrengthSession(date=datetime(2025, 3, 1, 18), duration=60, is_completed=True)
        session.exercise_sets = [ExerciseSet(exercise_name="Klimmzug", set_number=1, reps=8)]
        await SessionStore(db).add(session)

        exported = await service.export(TransferKind.STRENGTH)
        result = await service.import_file(TransferKind.STRENGTH, exported.path)

        assert result.imported == 1
        sessions = await SessionStore(db).list(WorkoutType.STRENGTH)
        assert len(sessions) == 2
        assert all(len(s.exercise_sets) == 1 for s in sessions)


class TestDeleteAll:

    @pytest.mark.asyncio
    async def test_delete_all_sessions_of_kind(self, db, service):
        store = SessionStore(db)
        await store.add(CardioSession(date=datetime(2025, 3, 1)))
        await store.add(CardioSession(date=datetime(2025, 3, 2)))
        await store.add(OutdoorSession(date=datetime(2025, 3, 2)))

        assert await service.delete_all(TransferKind.CARDIO) == 2
        assert await store.count(WorkoutType.CARDIO) == 0
        assert await store.count(WorkoutType.OUTDOOR) == 1

    @pytest.mark.asyncio
    async def test_delete_all_plans_keeps_sessions(self, db, service):
        store = SessionStore(db)
        plan = await store.add_plan(TrainingPlan(title="Plan"))
        await store.add(StrengthSession(date=datetime(2025, 3, 1), source_training_plan=plan))

        assert await service.delete_all(TransferKind.PLANS) == 1
        sessions = await store.list(WorkoutType.STRENGTH)
        assert len(sessions) == 1
        assert sessions[0].source_training_plan_id is None
