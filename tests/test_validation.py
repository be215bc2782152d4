"""Tests for draft validation rules."""

import pytest

from master_portal import validation
from master_portal.errors import ValidationError
from master_portal.validation import (
    IntegerRange,
    MinLength,
    OptionalPositiveInteger,
    Pattern,
    PositiveNumber,
    Required,
    validate,
    validate_search_id,
)


def valid_journey() -> dict:
    return {
        "journey_id": None,
        "journey_name": "Onboarding",
        "journey_description": "Onboarding process for new joiners",
        "destination": "Pune",
        "duration_in_days": 10,
        "budget": 1500,
    }


def test_valid_journey_passes() -> None:
    """Test that a complete journey draft passes."""
    validate(valid_journey(), validation.JOURNEY_RULES)


def test_first_failure_wins() -> None:
    """Test that the name is reported before the later bad fields."""
    draft = {
        "journey_name": "Ab",
        "journey_description": "short",
        "destination": "X",
        "duration_in_days": 400,
        "budget": 10,
    }
    with pytest.raises(ValidationError) as exc_info:
        validate(draft, validation.JOURNEY_RULES)
    assert exc_info.value.field == "journey_name"
    assert "at least 3 characters" in str(exc_info.value)


def test_journey_duration_upper_bound() -> None:
    """Test that durations above 365 days are rejected."""
    draft = valid_journey() | {"duration_in_days": 366}
    with pytest.raises(ValidationError, match="between 1 and 365"):
        validate(draft, validation.JOURNEY_RULES)
    validate(valid_journey() | {"duration_in_days": 365}, validation.JOURNEY_RULES)


@pytest.mark.parametrize("duration", ["12.5", 12.5, 0, "0"])
def test_journey_duration_must_be_whole_days(duration: object) -> None:
    """Test that fractional or zero durations are rejected."""
    with pytest.raises(ValidationError, match="between 1 and 365") as exc_info:
        validate(valid_journey() | {"duration_in_days": duration}, validation.JOURNEY_RULES)
    assert exc_info.value.field == "duration_in_days"
    validate(valid_journey() | {"duration_in_days": "12.0"}, validation.JOURNEY_RULES)


def test_whitespace_does_not_count_towards_length() -> None:
    """Test that text is stripped before measuring length."""
    assert not MinLength("name", "msg", length=3).passes("  ab  ")
    assert MinLength("name", "msg", length=3).passes(" abc ")


@pytest.mark.parametrize("value", [None, "", "   "])
def test_required_rejects_empty(value: object) -> None:
    """Test that blank values fail Required."""
    assert not Required("name", "msg").passes(value)


@pytest.mark.parametrize(("value", "expected"), [(1, True), ("2.5", True), (0, False), (-3, False), ("abc", False), (None, False), (True, False)])
def test_positive_number(value: object, expected: bool) -> None:
    """Test PositiveNumber with numbers and numeric text."""
    assert PositiveNumber("budget", "msg").passes(value) is expected


@pytest.mark.parametrize(("value", "expected"), [(1900, True), (2100, True), ("2024", True), (1899, False), (2101, False), ("2024-25", False), (2024.5, False)])
def test_financial_year_range(value: object, expected: bool) -> None:
    """Test the four-digit financial year representation."""
    assert IntegerRange("financial_year", "msg", minimum=1900, maximum=2100).passes(value) is expected


@pytest.mark.parametrize(
    ("email", "expected"),
    [
        ("john.doe@test.com", True),
        ("a@b.io", True),
        ("john doe@test.com", False),
        ("john@test", False),
        ("john@test.c", False),
        ("@test.com", False),
    ],
)
def test_email_pattern(email: str, expected: bool) -> None:
    """Test the email address pattern."""
    assert Pattern("email", "msg", pattern=validation.EMAIL_PATTERN).passes(email) is expected


@pytest.mark.parametrize(("value", "expected"), [(None, True), ("", True), ("  ", True), (0, False), ("0", False), (5, True), ("7", True), (-1, False), (1.5, False)])
def test_optional_identifier(value: object, expected: bool) -> None:
    """Test that an ID may be omitted but must be a positive integer when given."""
    assert OptionalPositiveInteger("id", "msg").passes(value) is expected


def test_employee_email_required_before_format() -> None:
    """Test that a missing email reports the required message."""
    draft = {"name": "John Doe", "email": "", "department": "Engineering", "designation": "Developer"}
    with pytest.raises(ValidationError, match="Email is required"):
        validate(draft, validation.EMPLOYEE_RULES)


def test_budget_category_rules() -> None:
    """Test a budget category draft through to the financial year."""
    draft = {"category_type": "Travel", "budget_amount": 100, "financial_year": 2024}
    validate(draft, validation.BUDGET_CATEGORY_RULES)
    with pytest.raises(ValidationError) as exc_info:
        validate(draft | {"financial_year": "2024-25"}, validation.BUDGET_CATEGORY_RULES)
    assert exc_info.value.field == "financial_year"


@pytest.mark.parametrize("entity_id", [0, -5, None, "", "abc", 2.5])
def test_search_id_rejects_invalid(entity_id: object) -> None:
    """Test that non-positive or non-integer search IDs are rejected."""
    with pytest.raises(ValidationError, match="valid positive ID"):
        validate_search_id(entity_id)


def test_search_id_accepts_text() -> None:
    """Test that numeric text is accepted as a search ID."""
    assert validate_search_id("42") == 42
