"""Supabase-backed visitor repository."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from gate_entry.domain.errors import (
    RepositoryError,
    RepositoryFailure,
    SchemaMismatchError,
)
from gate_entry.domain.visitors import RecordShape
from gate_entry.services.visitors import VisitorRepository

logger = logging.getLogger(__name__)

VISITORS_TABLE = "visitors"

VISITOR_COLUMNS = (
    "id",
    "name",
    "gender",
    "contactnumber",
    "idproof",
    "comingfrom",
    "purpose",
    "residentid",
    "societyid",
    "status",
    "entrytime",
    "exittime",
    "photo",
    "createdby",
    "createdat",
)

# Written by block and unblock transitions.
LIFECYCLE_COLUMNS = (
    "blockedby",
    "unblockrequestedby",
    "unblockapprovedby",
)

# Postgres undefined_column and PostgREST schema-cache miss.
_SCHEMA_CODES = {"42703", "PGRST204"}


@dataclass
class SupabaseVisitorRepository(VisitorRepository):
    """Supabase implementation for visitor persistence (storage-shape rows)."""

    client: Client

    record_shape = RecordShape.STORAGE

    def create(self, record: dict[str, object]) -> dict[str, object]:
        """Insert a visitor row and return it."""
        payload = dict(record)
        payload.setdefault("id", str(uuid4()))
        response = self._execute(
            lambda: self.client.table(VISITORS_TABLE).insert(payload).execute()
        )
        if not response.data:
            raise RepositoryError("Failed to create visitor")
        return response.data[0]

    def get_by_id(self, visitor_id: str) -> dict[str, object] | None:
        """Return the visitor row for an id, if present."""
        response = self._execute(
            lambda: self.client.table(VISITORS_TABLE)
            .select("*")
            .eq("id", visitor_id)
            .limit(1)
            .execute()
        )
        if response.data:
            return response.data[0]
        return None

    def update(
        self, visitor_id: str, changes: dict[str, object]
    ) -> dict[str, object] | None:
        """Update a visitor row and return it, if present."""
        response = self._execute(
            lambda: self.client.table(VISITORS_TABLE)
            .update(changes)
            .eq("id", visitor_id)
            .execute()
        )
        if response.data:
            return response.data[0]
        return None

    def list_visitors(
        self, society_id: str | None = None, resident_id: str | None = None
    ) -> list[dict[str, object]]:
        """Return visitor rows, newest entry first."""

        def query() -> Any:
            builder = self.client.table(VISITORS_TABLE).select("*")
            if society_id is not None:
                builder = builder.eq("societyid", society_id)
            if resident_id is not None:
                builder = builder.eq("residentid", resident_id)
            return builder.order("entrytime", desc=True).execute()

        response = self._execute(query)
        return list(response.data or [])

    def missing_columns(self) -> list[str]:
        """Return expected columns absent from a sample visitor row.

        An empty table gives no sample, so nothing is reported.
        """
        response = self._execute(
            lambda: self.client.table(VISITORS_TABLE).select("*").limit(1).execute()
        )
        if not response.data:
            return []
        present = set(response.data[0])
        expected = (*VISITOR_COLUMNS, *LIFECYCLE_COLUMNS)
        return [column for column in expected if column not in present]

    def _execute(self, call: Callable[[], Any]) -> Any:
        try:
            return call()
        except APIError as exc:
            error = _translate_api_error(exc)
            logger.error("Supabase visitors error (%s): %s", error.reason.value, error)
            raise error from exc
        except httpx.HTTPError as exc:
            logger.error("Supabase unreachable: %s", exc)
            raise RepositoryError(
                "Could not reach the database", RepositoryFailure.CONNECTIVITY
            ) from exc


def _translate_api_error(exc: APIError) -> RepositoryError:
    code = str(exc.code or "")
    message = exc.message or str(exc)
    lowered = message.lower()
    if code in _SCHEMA_CODES or ("column" in lowered and "does not exist" in lowered):
        return SchemaMismatchError(f"Database schema error: {message}")
    if code == "413" or "too large" in lowered:
        return RepositoryError(
            f"Database rejected the payload as too large: {message}",
            RepositoryFailure.PAYLOAD_TOO_LARGE,
        )
    if code.startswith("23"):
        return RepositoryError(
            f"Database constraint error: {message}",
            RepositoryFailure.CONSTRAINT_VIOLATION,
        )
    return RepositoryError(f"Database error: {message}")
