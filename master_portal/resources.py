"""Registry of the reference-data entities managed by the portal."""

from dataclasses import dataclass

from master_portal import validation
from master_portal.models import BudgetCategory, Employee, Entity, Grade, Journey, Role, Technology
from master_portal.validation import Rule


@dataclass(frozen=True)
class EntitySpec:
    """Everything needed to manage one entity type.

    Attributes:
        name: Command-line name (kebab-case)
        label: Human-readable singular used in notifications
        model: Entity dataclass
        resource: REST resource path, relative to the base URL
        rules: Validation rules in evaluation order
        paged_path: List path that accepts page/pageSize, if the resource is paged
    """

    name: str
    label: str
    model: type[Entity]
    resource: str
    rules: tuple[Rule, ...]
    paged_path: str | None = None

    @property
    def paged(self) -> bool:
        return self.paged_path is not None

    def item_path(self, entity_id: int | str) -> str:
        return f"{self.resource}/{entity_id}"


EMPLOYEE = EntitySpec(
    name="employee",
    label="employee",
    model=Employee,
    resource="Employee",
    rules=validation.EMPLOYEE_RULES,
    paged_path="employee/paged",
)
BUDGET_CATEGORY = EntitySpec(
    name="budget-category",
    label="budget category",
    model=BudgetCategory,
    resource="BudgetCategory",
    rules=validation.BUDGET_CATEGORY_RULES,
)
JOURNEY = EntitySpec(
    name="journey",
    label="journey",
    model=Journey,
    resource="Journey",
    rules=validation.JOURNEY_RULES,
)
GRADE = EntitySpec(
    name="grade",
    label="grade",
    model=Grade,
    resource="Grade",
    rules=validation.GRADE_RULES,
)
ROLE = EntitySpec(
    name="role",
    label="role",
    model=Role,
    resource="Role",
    rules=validation.ROLE_RULES,
)
TECHNOLOGY = EntitySpec(
    name="technology",
    label="technology",
    model=Technology,
    resource="Technologies",
    rules=validation.TECHNOLOGY_RULES,
)

ENTITY_SPECS: dict[str, EntitySpec] = {
    spec.name: spec for spec in (EMPLOYEE, BUDGET_CATEGORY, JOURNEY, GRADE, ROLE, TECHNOLOGY)
}


def get_spec(name: str) -> EntitySpec:
    """Look up an entity spec by its command-line name."""
    try:
        return ENTITY_SPECS[name]
    except KeyError:
        raise ValueError(f"Unknown entity: {name}. Choose from: {', '.join(ENTITY_SPECS)}") from None
