"""Visitor registration pipeline and lifecycle transitions."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from gate_entry.domain.errors import InvalidTransition, ValidationError, VisitorNotFound
from gate_entry.domain.field_mapping import to_domain, to_storage
from gate_entry.domain.visitors import (
    PHOTO_FIELD,
    SELF_REGISTERED,
    RecordShape,
    VisitorStatus,
)
from gate_entry.services.photos import MAX_PHOTO_CHARS, check_photo
from gate_entry.services.validation import ValidationResult, validate_visitor

logger = logging.getLogger(__name__)


class VisitorRepository(Protocol):
    """Persistence interface for visitor records.

    ``record_shape`` tells callers which key naming the repository reads and
    writes; the service maps keys only for storage-shaped repositories.
    """

    record_shape: RecordShape

    def create(self, record: dict[str, object]) -> dict[str, object]:
        """Persist a new visitor and return the stored record."""

    def get_by_id(self, visitor_id: str) -> dict[str, object] | None:
        """Return the stored visitor for an id, if present."""

    def update(
        self, visitor_id: str, changes: dict[str, object]
    ) -> dict[str, object] | None:
        """Apply changes to a visitor and return the stored record, if present."""

    def list_visitors(
        self, society_id: str | None = None, resident_id: str | None = None
    ) -> list[dict[str, object]]:
        """Return visitors, optionally filtered by society and resident."""


@dataclass(frozen=True)
class VisitorRegistration:
    """A created visitor and the non-blocking warnings raised on the way."""

    visitor: dict[str, object]
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class _Transition:
    allowed_from: frozenset[VisitorStatus]
    target: VisitorStatus


_TRANSITIONS = {
    "approve": _Transition(
        frozenset({VisitorStatus.PENDING}),
        VisitorStatus.APPROVED,
    ),
    "reject": _Transition(
        frozenset({VisitorStatus.PENDING}),
        VisitorStatus.REJECTED,
    ),
    "block": _Transition(
        frozenset(
            {
                VisitorStatus.PENDING,
                VisitorStatus.APPROVED,
                VisitorStatus.REJECTED,
            }
        ),
        VisitorStatus.BLOCKED,
    ),
    "request_unblock": _Transition(
        frozenset({VisitorStatus.BLOCKED}),
        VisitorStatus.PENDING_UNBLOCK,
    ),
    # Administrator decisions on an unblock request.
    "approve_unblock": _Transition(
        frozenset({VisitorStatus.PENDING_UNBLOCK}),
        VisitorStatus.PENDING,
    ),
    "reject_unblock": _Transition(
        frozenset({VisitorStatus.PENDING_UNBLOCK}),
        VisitorStatus.BLOCKED,
    ),
}


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class VisitorService:
    """Application service for visitor entries."""

    repository: VisitorRepository
    max_photo_chars: int = MAX_PHOTO_CHARS
    clock: Callable[[], datetime] = _utcnow

    def register_visitor(self, payload: Mapping[str, object]) -> VisitorRegistration:
        """Guard, validate, stamp and persist a visitor entry."""
        return self._register(payload, require_photo=False)

    def register_guest(self, payload: Mapping[str, object]) -> VisitorRegistration:
        """Register a walk-in guest who filled the form themselves."""
        record = dict(payload)
        record["createdBy"] = SELF_REGISTERED
        return self._register(record, require_photo=True)

    def get_visitor(self, visitor_id: str) -> dict[str, object] | None:
        """Return a visitor in domain shape, if present."""
        row = self.repository.get_by_id(visitor_id)
        return self._from_backend(row) if row is not None else None

    def list_visitors(
        self, society_id: str | None = None, resident_id: str | None = None
    ) -> list[dict[str, object]]:
        """Return visitors in domain shape."""
        rows = self.repository.list_visitors(
            society_id=society_id, resident_id=resident_id
        )
        return [self._from_backend(row) for row in rows]

    def approve(self, visitor_id: str) -> dict[str, object]:
        """Approve a pending visit."""
        return self._transition(visitor_id, "approve", {})

    def reject(self, visitor_id: str) -> dict[str, object]:
        """Reject a pending visit."""
        return self._transition(visitor_id, "reject", {})

    def block(self, visitor_id: str, blocked_by: str) -> dict[str, object]:
        """Block a visitor on behalf of a resident."""
        return self._transition(visitor_id, "block", {"blockedBy": blocked_by})

    def request_unblock(self, visitor_id: str, requested_by: str) -> dict[str, object]:
        """Ask an administrator to lift a block."""
        return self._transition(
            visitor_id, "request_unblock", {"unblockRequestedBy": requested_by}
        )

    def approve_unblock(self, visitor_id: str, approved_by: str) -> dict[str, object]:
        """Lift a block; the visit goes back to the resident as pending."""
        return self._transition(
            visitor_id, "approve_unblock", {"unblockApprovedBy": approved_by}
        )

    def reject_unblock(self, visitor_id: str) -> dict[str, object]:
        """Turn down an unblock request; the visitor stays blocked."""
        return self._transition(visitor_id, "reject_unblock", {})

    def record_exit(self, visitor_id: str) -> dict[str, object]:
        """Stamp the exit time of an approved visitor still inside."""
        visitor = self._require(visitor_id)
        status = visitor.get("status")
        if status != VisitorStatus.APPROVED.value or visitor.get("exitTime"):
            raise InvalidTransition(visitor_id, str(status), "record_exit")
        return self._update(visitor_id, {"exitTime": self.clock().isoformat()})

    def _register(
        self, payload: Mapping[str, object], require_photo: bool
    ) -> VisitorRegistration:
        record = {key: value for key, value in payload.items() if value is not None}
        photo_check = check_photo(record.get(PHOTO_FIELD), self.max_photo_chars)
        if not photo_check.attached:
            record.pop(PHOTO_FIELD, None)
            if require_photo:
                raise ValidationError(
                    ValidationResult(
                        is_valid=False,
                        errors=["photo is required for self-registration"],
                    )
                )
        result = validate_visitor(record)
        if not result.is_valid:
            logger.info("Rejected visitor record: %s", "; ".join(result.errors))
            raise ValidationError(result)

        record["status"] = VisitorStatus.PENDING.value
        record["entryTime"] = self.clock().isoformat()
        record.pop("exitTime", None)
        logger.info(
            "Registering visitor for society %s (photo: %s chars)",
            record["societyId"],
            len(str(record.get(PHOTO_FIELD, ""))),
        )
        stored = self._from_backend(self.repository.create(self._to_backend(record)))
        warnings = [*result.warnings, *(str(item) for item in photo_check.warnings)]
        return VisitorRegistration(visitor=stored, warnings=warnings)

    def _transition(
        self, visitor_id: str, action: str, changes: dict[str, object]
    ) -> dict[str, object]:
        transition = _TRANSITIONS[action]
        visitor = self._require(visitor_id)
        current = str(visitor.get("status"))
        allowed = {status.value for status in transition.allowed_from}
        if current not in allowed:
            raise InvalidTransition(visitor_id, current, action)
        return self._update(
            visitor_id, {**changes, "status": transition.target.value}
        )

    def _require(self, visitor_id: str) -> dict[str, object]:
        visitor = self.get_visitor(visitor_id)
        if visitor is None:
            raise VisitorNotFound(visitor_id)
        return visitor

    def _update(self, visitor_id: str, changes: dict[str, object]) -> dict[str, object]:
        row = self.repository.update(visitor_id, self._to_backend(changes))
        if row is None:
            raise VisitorNotFound(visitor_id)
        logger.info("Visitor %s updated: %s", visitor_id, sorted(changes))
        return self._from_backend(row)

    def _to_backend(self, record: dict[str, object]) -> dict[str, object]:
        if self.repository.record_shape is RecordShape.STORAGE:
            return to_storage(record)
        return dict(record)

    def _from_backend(self, row: Mapping[str, object]) -> dict[str, object]:
        if self.repository.record_shape is RecordShape.STORAGE:
            return to_domain(row)
        return dict(row)
