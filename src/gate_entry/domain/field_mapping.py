"""Translation between domain-shape and storage-shape visitor keys.

The ``visitors`` table was created with unquoted identifiers, so Postgres
folded every column name to lowercase. Application code keeps camelCase keys.
``VisitorField`` is the single table of keys whose storage name cannot be
recovered by lowercasing alone; every other key is lowercased on the way out
and passed through untouched on the way back.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from gate_entry.domain.errors import MappingError
from gate_entry.domain.visitors import PHOTO_FIELD


@dataclass(frozen=True)
class FieldMapping:
    """Domain key paired with its storage column."""

    domain: str
    storage: str


class VisitorField(Enum):
    """Irregular visitor fields (single source of truth)."""

    RESIDENT_ID = FieldMapping("residentId", "residentid")
    CONTACT_NUMBER = FieldMapping("contactNumber", "contactnumber")
    ID_PROOF = FieldMapping("idProofDescription", "idproof")
    COMING_FROM = FieldMapping("comingFrom", "comingfrom")
    ENTRY_TIME = FieldMapping("entryTime", "entrytime")
    EXIT_TIME = FieldMapping("exitTime", "exittime")
    CREATED_BY = FieldMapping("createdBy", "createdby")
    CREATED_AT = FieldMapping("createdAt", "createdat")
    SOCIETY_ID = FieldMapping("societyId", "societyid")
    BLOCKED_BY = FieldMapping("blockedBy", "blockedby")
    UNBLOCK_REQUESTED_BY = FieldMapping("unblockRequestedBy", "unblockrequestedby")
    UNBLOCK_APPROVED_BY = FieldMapping("unblockApprovedBy", "unblockapprovedby")


class MappingDirection(Enum):
    """Which way a record is being translated."""

    TO_STORAGE = "to_storage"
    TO_DOMAIN = "to_domain"


_DOMAIN_TO_STORAGE = {entry.value.domain: entry.value.storage for entry in VisitorField}
_STORAGE_TO_DOMAIN = {entry.value.storage: entry.value.domain for entry in VisitorField}


def storage_key(key: str) -> str:
    """Return the storage column for a domain key."""
    return _DOMAIN_TO_STORAGE.get(key, key.lower())


def domain_key(key: str) -> str:
    """Return the domain key for a storage column."""
    return _STORAGE_TO_DOMAIN.get(key, key)


def to_storage(record: Mapping[str, object]) -> dict[str, object]:
    """Translate a domain-shape record into storage shape."""
    return map_record(record, MappingDirection.TO_STORAGE)


def to_domain(row: Mapping[str, object]) -> dict[str, object]:
    """Translate a storage-shape row back into domain shape."""
    return map_record(row, MappingDirection.TO_DOMAIN)


def map_record(
    record: Mapping[str, object], direction: MappingDirection
) -> dict[str, object]:
    """Translate every key of a flat record in the given direction."""
    if not isinstance(record, Mapping):
        raise MappingError(
            f"Expected a key-value record, got {type(record).__name__}"
        )
    translate = storage_key if direction is MappingDirection.TO_STORAGE else domain_key
    mapped: dict[str, object] = {}
    for key, value in record.items():
        if not isinstance(key, str):
            raise MappingError(f"Record keys must be strings, got {key!r}")
        if key != PHOTO_FIELD and isinstance(value, Mapping | list | tuple):
            raise MappingError(f"Field {key!r} holds a nested value")
        target = translate(key)
        if target in mapped:
            raise MappingError(f"Fields collide on {target!r}")
        mapped[target] = value
    return mapped
