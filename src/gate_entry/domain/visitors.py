"""Domain vocabulary for visitor records."""

from enum import Enum

SELF_REGISTERED = "Self-Registered"

PHOTO_FIELD = "photo"

REQUIRED_FIELDS = ("name", "residentId", "societyId")

DESCRIPTIVE_FIELDS = (
    "gender",
    "idProofDescription",
    "comingFrom",
    "purpose",
    "contactNumber",
)


class Gender(Enum):
    """Visitor gender as captured by entry forms."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class VisitorStatus(Enum):
    """Approval lifecycle of a visit."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    BLOCKED = "blocked"
    PENDING_UNBLOCK = "pending_unblock"


class RecordShape(Enum):
    """Key naming a repository persists records in."""

    DOMAIN = "domain"
    STORAGE = "storage"
