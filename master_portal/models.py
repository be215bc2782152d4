"""Data models for the master portal."""

import math
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Generic, TypeVar, get_args, get_type_hints


def wire(name: str, default: Any = None) -> Any:
    """Declare a dataclass field with its name in the REST payload."""
    return field(default=default, metadata={"wire": name})


@dataclass
class Entity:
    """Base class for reference-data records.

    Subclasses name their identifier attribute in ``id_field``; every field
    carries its payload key in the ``wire`` metadata entry.
    """

    id_field: ClassVar[str] = "id"

    @property
    def identifier(self) -> int | str | None:
        return getattr(self, self.id_field)

    @classmethod
    def field_names(cls, include_id: bool = True) -> list[str]:
        return [f.name for f in fields(cls) if include_id or f.name != cls.id_field]

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Entity":
        """Build an entity from a REST payload, ignoring unknown keys.

        Raises:
            TypeError: If the payload is not a JSON object
        """
        if not isinstance(payload, dict):
            raise TypeError(f"{cls.__name__} payload must be an object, got {type(payload).__name__}")
        values = {}
        for f in fields(cls):
            key = f.metadata.get("wire", f.name)
            if key in payload:
                values[f.name] = payload[key]
        return cls(**values)

    def to_payload(self, include_id: bool = True) -> dict[str, Any]:
        """Serialize to the REST payload shape."""
        payload = {}
        for f in fields(self):
            if f.name == self.id_field and (not include_id or getattr(self, f.name) is None):
                continue
            payload[f.metadata.get("wire", f.name)] = getattr(self, f.name)
        return payload


@dataclass
class Employee(Entity):
    id_field: ClassVar[str] = "employee_id"

    employee_id: int | None = wire("employee_Id")
    name: str = wire("name", "")
    email: str = wire("email", "")
    department: str = wire("department", "")
    designation: str = wire("designation", "")


@dataclass
class BudgetCategory(Entity):
    id: int | None = wire("id")
    category_type: str = wire("categoryType", "")
    budget_amount: float | None = wire("budgetAmount")
    financial_year: int | None = wire("financialYear")


@dataclass
class Journey(Entity):
    id_field: ClassVar[str] = "journey_id"

    journey_id: int | None = wire("journeyId")
    journey_name: str = wire("journeyName", "")
    journey_description: str = wire("journeyDescription", "")
    destination: str = wire("destination", "")
    duration_in_days: int | None = wire("durationInDays")
    budget: float | None = wire("budget")


@dataclass
class Grade(Entity):
    id_field: ClassVar[str] = "grade_id"

    grade_id: int | None = wire("gradeId")
    grade_level: str = wire("gradeLevel", "")
    grade_description: str = wire("gradeDescription", "")


@dataclass
class Role(Entity):
    id_field: ClassVar[str] = "role_id"

    role_id: int | None = wire("role_Id")
    role_title: str = wire("role_Title", "")
    project_name: str = wire("project_Name", "")


@dataclass
class Technology(Entity):
    id: int | None = wire("id")
    technology_stack: str = wire("technologyStack", "")


E = TypeVar("E", bound=Entity)


@dataclass
class PagedResult(Generic[E]):
    """One page of a collection plus its pagination metadata."""

    items: list[E]
    total_count: int
    page: int
    page_size: int
    total_pages: int = 0

    @classmethod
    def from_envelope(cls, envelope: dict[str, Any], model: type[E]) -> "PagedResult[E]":
        """Decode a ``{items, totalCount, page, pageSize, totalPages?}`` envelope."""
        page_size = int(envelope.get("pageSize") or 0)
        total_count = int(envelope.get("totalCount") or 0)
        total_pages = envelope.get("totalPages")
        if total_pages is None:
            total_pages = math.ceil(total_count / page_size) if page_size > 0 else 0
        return cls(
            items=[model.from_payload(item) for item in envelope.get("items") or []],
            total_count=total_count,
            page=int(envelope.get("page") or 1),
            page_size=page_size,
            total_pages=int(total_pages),
        )


def _coerce(value: Any, hint: Any) -> Any:
    targets = [t for t in (get_args(hint) or (hint,)) if t is not type(None)]
    target = targets[0] if targets else str
    if value is None:
        return None
    if target is str:
        return str(value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    if target is int:
        number = float(value)
        if not number.is_integer():
            raise ValueError(f"Expected a whole number, got {value!r}")
        return int(number)
    if target is float:
        return float(value)
    return value


def entity_from_fields(model: type[E], values: dict[str, Any]) -> E:
    """Build an entity from attribute-keyed values, converting text input to the field types."""
    hints = get_type_hints(model)
    known = {f.name for f in fields(model)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(f"Unknown field(s) for {model.__name__}: {', '.join(sorted(unknown))}")
    return model(**{name: _coerce(value, hints[name]) for name, value in values.items()})
