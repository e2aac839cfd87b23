"""Validation of domain-shape visitor records before persistence."""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from gate_entry.domain.visitors import DESCRIPTIVE_FIELDS, REQUIRED_FIELDS, Gender

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"[^0-9]")
_CONTACT_DIGITS = 10
_GENDERS = {gender.value for gender in Gender}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a visitor record.

    Errors block persistence; warnings never do.
    """

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def validate_visitor(record: Mapping[str, object]) -> ValidationResult:
    """Check required identity fields and descriptive field formats."""
    for name in REQUIRED_FIELDS:
        if not _has_text(record.get(name)):
            return ValidationResult(is_valid=False, errors=[f"{name} is required"])

    warnings: list[str] = []
    if not _has_text(record.get("createdBy")):
        warnings.append("createdBy is missing")
    for name in DESCRIPTIVE_FIELDS:
        if not _has_text(record.get(name)):
            warnings.append(f"{name} is not provided")

    contact = record.get("contactNumber")
    if _has_text(contact) and not is_valid_contact_number(str(contact)):
        warnings.append("contactNumber should contain exactly 10 digits")

    gender = record.get("gender")
    if _has_text(gender) and str(gender) not in _GENDERS:
        warnings.append("gender should be one of male, female, other")

    for warning in warnings:
        logger.warning("Visitor record warning: %s", warning)
    return ValidationResult(is_valid=True, warnings=warnings)


def is_valid_contact_number(value: str) -> bool:
    """Return True when the value has exactly 10 digits once formatting is removed."""
    return len(_NON_DIGITS.sub("", value)) == _CONTACT_DIGITS


def _has_text(value: object) -> bool:
    if value is None:
        return False
    return bool(str(value).strip())
