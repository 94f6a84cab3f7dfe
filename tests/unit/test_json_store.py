"""
Unit tests for the JSON file repositories.
"""

import json
from uuid import UUID

import pytest

from kpi_tracker.core.exceptions import InfrastructureError
from kpi_tracker.infrastructure.local.json_store import (
    JsonDataStore,
    JsonKpiRepository,
    JsonUserRepository,
)
from kpi_tracker.models.decimal_value import DecimalValue
from kpi_tracker.models.enums import KpiInterval
from kpi_tracker.models.period import Period

KPI_ID = "6f1c2a3e-0000-4000-8000-000000000001"


def _write(tmp_path, data) -> str:
    path = tmp_path / "kpis.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


@pytest.fixture
def data_file(tmp_path):
    return _write(
        tmp_path,
        {
            "users": [
                {"id": "u1", "email": "owner@example.com"},
                {"id": "a1", "email": "admin@example.com", "is_admin": True},
            ],
            "kpis": [
                {
                    "id": KPI_ID,
                    "name": "Umsatz",
                    "user_id": "u1",
                    "interval": "Monthly",
                    "created_at": "2024-01-01T00:00:00",
                    "values": [{"period": "2024-8", "value": "1234,5"}],
                },
                {
                    "id": "6f1c2a3e-0000-4000-8000-000000000002",
                    "name": "Legacy",
                    "user_id": "u1",
                    "interval": "daily",
                    "created_at": "2024-01-01T00:00:00",
                },
                {
                    "id": "6f1c2a3e-0000-4000-8000-000000000003",
                    "name": "Broken",
                    "user_id": "u1",
                    "interval": "weekly",
                    "created_at": "2024-01-01T00:00:00",
                    "values": [{"period": "2024-13", "value": "1"}],
                },
            ],
        },
    )


@pytest.fixture
def store(data_file):
    return JsonDataStore(data_file)


class TestJsonDataStore:
    def test_loads_and_normalizes_kpis(self, store):
        kpi = store.kpis[0]
        assert kpi.id == UUID(KPI_ID)
        assert kpi.interval is KpiInterval.MONTHLY
        assert kpi.values[0].period == Period("2024-08")
        assert kpi.values[0].value == DecimalValue("1234.50")

    def test_unknown_interval_is_kept_as_missing(self, store):
        legacy = next(kpi for kpi in store.kpis if kpi.name == "Legacy")
        assert legacy.interval is None

    def test_invalid_entries_are_skipped_and_recorded(self, store):
        assert [kpi.name for kpi in store.kpis] == ["Umsatz", "Legacy"]
        assert len(store.load_errors) == 1
        assert "000000000003" in store.load_errors[0]

    def test_missing_file(self, tmp_path):
        with pytest.raises(InfrastructureError, match="Cannot read"):
            JsonDataStore(tmp_path / "missing.json").kpis

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "kpis.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(InfrastructureError, match="not valid JSON"):
            JsonDataStore(path).users

    def test_top_level_must_be_object(self, tmp_path):
        with pytest.raises(InfrastructureError, match="JSON object"):
            JsonDataStore(_write(tmp_path, [])).kpis

    def test_reload_reads_file_again(self, tmp_path):
        path = _write(tmp_path, {"users": [], "kpis": []})
        store = JsonDataStore(path)
        assert store.users == []

        _write(tmp_path, {"users": [{"id": "u1", "email": "a@example.com"}]})
        assert store.users == []
        store.reload()
        assert [user.id for user in store.users] == ["u1"]


class TestJsonRepositories:
    @pytest.mark.asyncio
    async def test_kpi_repository(self, store):
        repo = JsonKpiRepository(store)

        assert len(await repo.list_for_reminder()) == 2
        assert (await repo.get(UUID(KPI_ID))).name == "Umsatz"
        assert await repo.get(UUID(int=0)) is None
        assert await repo.has_value_for_period(UUID(KPI_ID), Period("2024-08")) is True
        assert await repo.has_value_for_period(UUID(KPI_ID), Period("2024-09")) is False
        assert await repo.has_value_for_period(UUID(int=0), Period("2024-08")) is False

    @pytest.mark.asyncio
    async def test_user_repository(self, store):
        repo = JsonUserRepository(store)

        assert len(await repo.list_all()) == 2
        assert [user.id for user in await repo.list_admins()] == ["a1"]
        assert (await repo.get("u1")).email == "owner@example.com"
        assert await repo.get("nobody") is None
