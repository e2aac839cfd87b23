"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from gate_entry.adapters.local_visitor_repository import KeyValueStore
from gate_entry.config import Settings
from gate_entry.containers import AppContainer
from gate_entry.domain.visitors import RecordShape
from gate_entry.services.visitors import VisitorRepository, VisitorService

FIXED_NOW = datetime(2024, 3, 5, 9, 30, tzinfo=UTC)

SAMPLE_PHOTO = "data:image/jpeg;base64,AAAA"


@dataclass
class InMemoryVisitorRepository(VisitorRepository):
    """In-memory visitor repository for tests."""

    record_shape: RecordShape = RecordShape.STORAGE
    rows: dict[str, dict[str, object]] = field(default_factory=dict)
    created: list[dict[str, object]] = field(default_factory=list)

    def create(self, record: dict[str, object]) -> dict[str, object]:
        self.created.append(dict(record))
        row = dict(record)
        row.setdefault("id", str(uuid4()))
        self.rows[str(row["id"])] = row
        return dict(row)

    def get_by_id(self, visitor_id: str) -> dict[str, object] | None:
        row = self.rows.get(visitor_id)
        return dict(row) if row is not None else None

    def update(
        self, visitor_id: str, changes: dict[str, object]
    ) -> dict[str, object] | None:
        if visitor_id not in self.rows:
            return None
        self.rows[visitor_id] = {**self.rows[visitor_id], **changes}
        return dict(self.rows[visitor_id])

    def list_visitors(
        self, society_id: str | None = None, resident_id: str | None = None
    ) -> list[dict[str, object]]:
        storage = self.record_shape is RecordShape.STORAGE
        society_key = "societyid" if storage else "societyId"
        resident_key = "residentid" if storage else "residentId"
        return [
            dict(row)
            for row in self.rows.values()
            if (society_id is None or row.get(society_key) == society_id)
            and (resident_id is None or row.get(resident_key) == resident_id)
        ]


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed key-value store for tests."""

    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


def visitor_payload(**overrides: object) -> dict[str, object]:
    """Return a complete security-desk visitor form."""
    payload: dict[str, object] = {
        "name": "Ravi Kumar",
        "gender": "male",
        "idProofDescription": "Aadhaar ending 4821",
        "comingFrom": "Andheri",
        "purpose": "Delivery",
        "contactNumber": "9876543210",
        "residentId": "r1",
        "societyId": "s1",
        "createdBy": "guard-7",
        "photo": SAMPLE_PHOTO,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        supabase_url=None,
        supabase_service_key=None,
        local_store_path=str(tmp_path / "store.json"),
    )


@pytest.fixture
def visitor_repository() -> InMemoryVisitorRepository:
    return InMemoryVisitorRepository()


@pytest.fixture
def visitor_service(visitor_repository: InMemoryVisitorRepository) -> VisitorService:
    return VisitorService(repository=visitor_repository, clock=lambda: FIXED_NOW)


@pytest.fixture
def container(
    settings: Settings,
    visitor_repository: InMemoryVisitorRepository,
    visitor_service: VisitorService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        visitor_repository=visitor_repository,
        visitor_service=visitor_service,
        close_resources=close_resources,
    )
