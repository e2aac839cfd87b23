"""Tests for visitor validation."""

import pytest

from gate_entry.services.validation import is_valid_contact_number, validate_visitor
from tests.conftest import visitor_payload


def test_complete_record_is_valid_without_warnings() -> None:
    result = validate_visitor(visitor_payload())

    assert result.is_valid
    assert result.errors == []
    assert result.warnings == []


@pytest.mark.parametrize("missing", ["name", "residentId", "societyId"])
def test_missing_required_field_is_an_error(missing: str) -> None:
    payload = visitor_payload()
    del payload[missing]

    result = validate_visitor(payload)

    assert not result.is_valid
    assert result.errors == [f"{missing} is required"]


def test_blank_name_is_an_error() -> None:
    result = validate_visitor(visitor_payload(name="   "))

    assert not result.is_valid
    assert result.errors == ["name is required"]


def test_errors_stop_at_first_violation() -> None:
    result = validate_visitor({"societyId": "s1"})

    assert result.errors == ["name is required"]


def test_bad_contact_number_is_only_a_warning() -> None:
    result = validate_visitor(visitor_payload(contactNumber="12345"))

    assert result.is_valid
    assert result.warnings == ["contactNumber should contain exactly 10 digits"]


def test_formatted_contact_number_is_accepted() -> None:
    assert is_valid_contact_number("+91 98765-43210") is False
    assert is_valid_contact_number("98765 43210") is True
    assert validate_visitor(visitor_payload(contactNumber="(987) 654-3210")).warnings == []


def test_missing_descriptive_fields_are_warnings() -> None:
    result = validate_visitor(
        {"name": "Ravi Kumar", "residentId": "r1", "societyId": "s1"}
    )

    assert result.is_valid
    assert result.warnings == [
        "createdBy is missing",
        "gender is not provided",
        "idProofDescription is not provided",
        "comingFrom is not provided",
        "purpose is not provided",
        "contactNumber is not provided",
    ]


def test_unknown_gender_is_a_warning() -> None:
    result = validate_visitor(visitor_payload(gender="unknown"))

    assert result.is_valid
    assert result.warnings == ["gender should be one of male, female, other"]
