"""
JSON file implementation of the KPI and user repositories.

The data file holds two lists::

    {
      "users": [{"id": "u1", "email": "a@example.com", "is_admin": true}],
      "kpis": [
        {
          "id": "6f1c...", "name": "Umsatz", "user_id": "u1",
          "interval": "monthly", "created_at": "2024-01-01T00:00:00",
          "values": [{"period": "2024-08", "value": "1234,50"}]
        }
      ]
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Union
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from kpi_tracker.core.config import get_settings
from kpi_tracker.core.exceptions import InfrastructureError
from kpi_tracker.core.logger import setup_logger
from kpi_tracker.interfaces.kpi_repository import IKpiRepository
from kpi_tracker.interfaces.user_repository import IUserRepository
from kpi_tracker.models.enums import KpiInterval
from kpi_tracker.models.kpi import KPI
from kpi_tracker.models.period import Period
from kpi_tracker.models.user import User

logger = setup_logger(__name__)


class JsonDataStore:
    """Loads KPIs and users from a JSON file, once, on first access."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path or get_settings().DATA_FILE)
        self._kpis: Optional[list[KPI]] = None
        self._users: Optional[list[User]] = None
        self.load_errors: list[str] = []

    def reload(self) -> None:
        """Drop cached data so the next access reads the file again."""
        self._kpis = None
        self._users = None
        self.load_errors = []

    @property
    def kpis(self) -> list[KPI]:
        if self._kpis is None:
            self._load()
        return self._kpis

    @property
    def users(self) -> list[User]:
        if self._users is None:
            self._load()
        return self._users

    def _read(self) -> dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise InfrastructureError(
                f"Cannot read data file {self.path}: {e}", details={"path": str(self.path)}
            ) from e
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InfrastructureError(
                f"Data file {self.path} is not valid JSON: {e}", details={"path": str(self.path)}
            ) from e
        if not isinstance(data, dict):
            raise InfrastructureError(
                f"Data file {self.path} must contain a JSON object",
                details={"path": str(self.path)},
            )
        return data

    def _load(self) -> None:
        data = self._read()
        self.load_errors = []

        users: list[User] = []
        for entry in data.get("users", []):
            try:
                users.append(User.model_validate(entry))
            except PydanticValidationError as e:
                self._record_error(f"Skipping invalid user entry {entry!r}: {e}")

        kpis: list[KPI] = []
        for entry in data.get("kpis", []):
            try:
                kpis.append(self._parse_kpi(entry))
            except (ValueError, TypeError) as e:
                self._record_error(f"Skipping invalid KPI entry {_entry_id(entry)}: {e}")

        self._users = users
        self._kpis = kpis
        logger.info(f"Loaded {len(kpis)} KPIs and {len(users)} users from {self.path}")

    def _parse_kpi(self, entry: dict[str, Any]) -> KPI:
        """Build a KPI, keeping an unknown interval as missing."""
        entry = dict(entry)
        raw_interval = entry.get("interval")
        interval = KpiInterval.try_parse(raw_interval)
        if interval is None and raw_interval is not None:
            logger.warning(
                f"KPI {_entry_id(entry)} has unknown interval {raw_interval!r}, "
                "treating it as missing"
            )
        entry["interval"] = interval
        return KPI.model_validate(entry)

    def _record_error(self, message: str) -> None:
        logger.warning(message)
        self.load_errors.append(message)


class JsonKpiRepository(IKpiRepository):
    """JSON file implementation of KPI repository."""

    def __init__(self, store: JsonDataStore):
        self._store = store

    async def get(self, kpi_id: UUID) -> Optional[KPI]:
        for kpi in self._store.kpis:
            if kpi.id == kpi_id:
                return kpi
        return None

    async def list_for_reminder(self) -> list[KPI]:
        return list(self._store.kpis)

    async def has_value_for_period(self, kpi_id: UUID, period: Period) -> bool:
        kpi = await self.get(kpi_id)
        return kpi is not None and kpi.has_value_for_period(period)


class JsonUserRepository(IUserRepository):
    """JSON file implementation of user repository."""

    def __init__(self, store: JsonDataStore):
        self._store = store

    async def get(self, user_id: str) -> Optional[User]:
        for user in self._store.users:
            if user.id == user_id:
                return user
        return None

    async def list_all(self) -> list[User]:
        return list(self._store.users)

    async def list_admins(self) -> list[User]:
        return [user for user in self._store.users if user.is_admin]


def _entry_id(entry: Any) -> str:
    if isinstance(entry, dict):
        return str(entry.get("id", "<no id>"))
    return "<no id>"
