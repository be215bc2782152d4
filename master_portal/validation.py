"""Client-side validation rules for entity drafts.

Rules run in declaration order and the first failure wins, so a draft with
several bad fields only ever reports one message.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from master_portal.errors import ValidationError

logger = structlog.get_logger()

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[A-Za-z]{2,}$"


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return None


def _as_integer(value: Any) -> int | None:
    number = _as_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


@dataclass(frozen=True)
class Rule:
    """A single field constraint."""

    field: str
    message: str

    def passes(self, value: Any) -> bool:
        raise NotImplementedError

    def check(self, draft: Mapping[str, Any]) -> None:
        if not self.passes(draft.get(self.field)):
            raise ValidationError(self.message, field=self.field)


@dataclass(frozen=True)
class Required(Rule):
    def passes(self, value: Any) -> bool:
        if isinstance(value, str):
            return bool(value.strip())
        return value is not None


@dataclass(frozen=True)
class MinLength(Rule):
    length: int = 1

    def passes(self, value: Any) -> bool:
        return isinstance(value, str) and len(value.strip()) >= self.length


@dataclass(frozen=True)
class PositiveNumber(Rule):
    maximum: float | None = None

    def passes(self, value: Any) -> bool:
        number = _as_number(value)
        if number is None or number <= 0:
            return False
        return self.maximum is None or number <= self.maximum


@dataclass(frozen=True)
class IntegerRange(Rule):
    minimum: int = 0
    maximum: int = 0

    def passes(self, value: Any) -> bool:
        number = _as_integer(value)
        return number is not None and self.minimum <= number <= self.maximum


@dataclass(frozen=True)
class Pattern(Rule):
    pattern: str = ".*"

    def passes(self, value: Any) -> bool:
        return isinstance(value, str) and re.match(self.pattern, value.strip()) is not None


@dataclass(frozen=True)
class OptionalPositiveInteger(Rule):
    """Identifier rule: may be left empty for the backend to assign."""

    def passes(self, value: Any) -> bool:
        if value is None or (isinstance(value, str) and not value.strip()):
            return True
        number = _as_integer(value)
        return number is not None and number > 0


def validate(draft: Mapping[str, Any], rules: Iterable[Rule]) -> None:
    """Check a draft against rules, raising on the first failure.

    Args:
        draft: Field values keyed by attribute name
        rules: Rules in evaluation order

    Raises:
        ValidationError: Naming the first failing field
    """
    for rule in rules:
        try:
            rule.check(draft)
        except ValidationError:
            logger.debug("Validation failed", field=rule.field, rule=type(rule).__name__)
            raise


def validate_search_id(entity_id: Any) -> int:
    """Return the search id as a positive integer or raise ValidationError."""
    number = _as_integer(entity_id)
    if number is None or number <= 0:
        raise ValidationError("Please enter a valid positive ID", field="id")
    return number


def identifier_rule(field: str, label: str) -> Rule:
    return OptionalPositiveInteger(field, f"{label} ID must be a positive number")


EMPLOYEE_RULES: tuple[Rule, ...] = (
    identifier_rule("employee_id", "Employee"),
    MinLength("name", "Name must be at least 2 characters long", length=2),
    Required("email", "Email is required"),
    Pattern("email", "Please enter a valid email address", pattern=EMAIL_PATTERN),
    MinLength("department", "Department must be at least 2 characters long", length=2),
    MinLength("designation", "Designation must be at least 2 characters long", length=2),
)

BUDGET_CATEGORY_RULES: tuple[Rule, ...] = (
    identifier_rule("id", "Budget category"),
    MinLength("category_type", "Category type must be at least 3 characters long", length=3),
    PositiveNumber("budget_amount", "Please enter a valid budget amount greater than 0"),
    IntegerRange(
        "financial_year",
        "Financial year must be a year between 1900 and 2100",
        minimum=1900,
        maximum=2100,
    ),
)

JOURNEY_RULES: tuple[Rule, ...] = (
    identifier_rule("journey_id", "Journey"),
    MinLength("journey_name", "Please enter a valid journey name (at least 3 characters)", length=3),
    MinLength(
        "journey_description",
        "Please enter a valid journey description (at least 10 characters)",
        length=10,
    ),
    MinLength("destination", "Please enter a valid destination (at least 2 characters)", length=2),
    IntegerRange("duration_in_days", "Please enter a valid duration between 1 and 365 days", minimum=1, maximum=365),
    PositiveNumber("budget", "Please enter a valid budget amount greater than 0"),
)

GRADE_RULES: tuple[Rule, ...] = (
    identifier_rule("grade_id", "Grade"),
    MinLength("grade_level", "Grade level must be at least 3 characters long", length=3),
    MinLength("grade_description", "Description must be at least 5 characters long", length=5),
)

ROLE_RULES: tuple[Rule, ...] = (
    identifier_rule("role_id", "Role"),
    MinLength("role_title", "Role title must be at least 3 characters long", length=3),
    MinLength("project_name", "Project name must be at least 3 characters long", length=3),
)

TECHNOLOGY_RULES: tuple[Rule, ...] = (
    identifier_rule("id", "Technology"),
    MinLength("technology_stack", "Technology stack must be at least 3 characters long", length=3),
)
