"""Tests for the Supabase visitor repository."""

from dataclasses import dataclass, field

import httpx
import pytest
from postgrest.exceptions import APIError

from gate_entry.adapters.supabase_visitor_repository import SupabaseVisitorRepository
from gate_entry.domain.errors import (
    RepositoryError,
    RepositoryFailure,
    SchemaMismatchError,
)
from gate_entry.domain.visitors import RecordShape


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": [], "update": []}
    )
    failures: list[Exception] = field(default_factory=list)
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    last_order: tuple[str, bool] | None = None

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, column: str, desc: bool = False) -> "FakeTable":
        self.last_order = (column, desc)
        return self

    def execute(self) -> FakeResponse:
        if self.failures:
            raise self.failures.pop(0)
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _repository() -> tuple[SupabaseVisitorRepository, FakeTable]:
    client = FakeSupabaseClient()
    return SupabaseVisitorRepository(client), client.table("visitors")  # type: ignore[arg-type]


def test_create_inserts_storage_row_with_generated_id() -> None:
    repository, table = _repository()
    table.queue("insert", [{"id": "v-1", "name": "Asha", "residentid": "r1"}])

    row = repository.create({"name": "Asha", "residentid": "r1"})

    assert repository.record_shape is RecordShape.STORAGE
    assert row["id"] == "v-1"
    assert isinstance(table.last_payload, dict)
    assert table.last_payload["residentid"] == "r1"
    assert isinstance(table.last_payload["id"], str)


def test_create_keeps_existing_id() -> None:
    repository, table = _repository()
    table.queue("insert", [{"id": "given"}])

    repository.create({"id": "given", "name": "Asha"})

    assert isinstance(table.last_payload, dict)
    assert table.last_payload["id"] == "given"


def test_create_without_returned_row_fails() -> None:
    repository, _ = _repository()

    with pytest.raises(RepositoryError):
        repository.create({"name": "Asha"})


def test_get_by_id() -> None:
    repository, table = _repository()
    table.queue("select", [{"id": "v-1", "name": "Asha"}])

    assert repository.get_by_id("v-1") == {"id": "v-1", "name": "Asha"}
    assert ("id", "v-1") in table.last_filters
    assert repository.get_by_id("v-2") is None


def test_update_returns_row_or_none() -> None:
    repository, table = _repository()
    table.queue("update", [{"id": "v-1", "status": "approved"}])

    assert repository.update("v-1", {"status": "approved"}) == {
        "id": "v-1",
        "status": "approved",
    }
    assert table.last_payload == {"status": "approved"}
    assert repository.update("v-1", {"status": "approved"}) is None


def test_list_visitors_filters_on_storage_columns() -> None:
    repository, table = _repository()
    table.queue("select", [{"id": "v-1"}])

    rows = repository.list_visitors(society_id="s1", resident_id="r1")

    assert rows == [{"id": "v-1"}]
    assert table.last_filters == [("societyid", "s1"), ("residentid", "r1")]
    assert table.last_order == ("entrytime", True)


@pytest.mark.parametrize(
    "error",
    [
        {"message": 'column "createdby" does not exist', "code": "42703"},
        {
            "message": "Could not find the 'photo' column of 'visitors'",
            "code": "PGRST204",
        },
    ],
)
def test_missing_column_is_schema_mismatch(error: dict[str, str]) -> None:
    repository, table = _repository()
    table.failures.append(APIError(error))

    with pytest.raises(SchemaMismatchError) as excinfo:
        repository.create({"name": "Asha"})

    assert excinfo.value.reason is RepositoryFailure.SCHEMA_MISMATCH


@pytest.mark.parametrize(
    ("error", "reason"),
    [
        (
            {"message": "Payload Too Large", "code": "413"},
            RepositoryFailure.PAYLOAD_TOO_LARGE,
        ),
        (
            {"message": "duplicate key value violates unique constraint", "code": "23505"},
            RepositoryFailure.CONSTRAINT_VIOLATION,
        ),
        ({"message": "permission denied", "code": "42501"}, RepositoryFailure.UNKNOWN),
    ],
)
def test_backend_errors_are_wrapped(
    error: dict[str, str], reason: RepositoryFailure
) -> None:
    repository, table = _repository()
    table.failures.append(APIError(error))

    with pytest.raises(RepositoryError) as excinfo:
        repository.create({"name": "Asha"})

    assert not isinstance(excinfo.value, SchemaMismatchError)
    assert excinfo.value.reason is reason


def test_transport_errors_are_connectivity_failures() -> None:
    repository, table = _repository()
    table.failures.append(httpx.ConnectError("connection refused"))

    with pytest.raises(RepositoryError) as excinfo:
        repository.get_by_id("v-1")

    assert excinfo.value.reason is RepositoryFailure.CONNECTIVITY


def test_missing_columns_from_sample_row() -> None:
    repository, table = _repository()
    table.queue(
        "select",
        [
            {
                "id": "v-1",
                "name": "Asha",
                "residentid": "r1",
                "societyid": "s1",
                "status": "pending",
                "entrytime": "t",
            }
        ],
    )

    missing = repository.missing_columns()

    assert "photo" in missing
    assert "createdby" in missing
    assert "residentid" not in missing
    assert {"blockedby", "unblockrequestedby", "unblockapprovedby"} <= set(missing)
    assert repository.missing_columns() == []
