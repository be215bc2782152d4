"""Generic list/search/edit/delete workflow for one entity type."""

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import asdict
from enum import Enum
from typing import Any

import structlog

from master_portal.backend import Backend
from master_portal.errors import DuplicateError, PortalError, ValidationError
from master_portal.models import Entity, PagedResult, entity_from_fields
from master_portal.notifications import Notification, Notifier
from master_portal.pagination import PaginationState
from master_portal.resources import EntitySpec
from master_portal.validation import validate, validate_search_id

logger = structlog.get_logger()

DUPLICATE_MESSAGE = "Duplicate entry detected. Please use a unique value."

Confirm = Callable[[str], bool | Awaitable[bool]]


class Mode(str, Enum):
    ADD = "add"
    EDIT = "edit"


class EntityManager:
    """Owns the collection view, draft, pagination and notification of one entity type.

    The collection view is never patched locally: every successful mutation
    reloads it from the backend. Concurrent loads are not deduplicated and
    the last response to resolve wins, unless ``discard_stale_loads`` is set,
    in which case responses to superseded load/search calls are dropped.
    """

    def __init__(
        self,
        spec: EntitySpec,
        backend: Backend,
        notifier: Notifier | None = None,
        page_size: int = 10,
        max_visible_pages: int = 5,
        discard_stale_loads: bool = False,
    ) -> None:
        """Initialize entity manager.

        Args:
            spec: Entity spec (model, label, validation rules)
            backend: Backend serving this entity type
            notifier: Notification channel, a fresh one by default
            page_size: Items per page for paged resources
            max_visible_pages: Width of the page-number window
            discard_stale_loads: Drop responses from superseded loads
        """
        self.spec = spec
        self.backend = backend
        self.notifier = notifier or Notifier()
        self.max_visible_pages = max_visible_pages
        self.discard_stale_loads = discard_stale_loads

        self._items: list[Entity] = []
        self._pagination = PaginationState(page_size=page_size)
        self._draft: dict[str, Any] | None = None
        self._mode: Mode | None = None
        self._editing_id: int | str | None = None
        self._search_id: int | None = None
        self._search_result: Entity | None = None
        self._generation = 0
        self._pending_loads = 0

    # State (read-only)

    @property
    def items(self) -> list[Entity]:
        return list(self._items)

    @property
    def pagination(self) -> PaginationState:
        return PaginationState(**asdict(self._pagination))

    @property
    def page_window(self) -> list[int]:
        return self._pagination.window(self.max_visible_pages)

    @property
    def draft(self) -> dict[str, Any] | None:
        return dict(self._draft) if self._draft is not None else None

    @property
    def mode(self) -> Mode | None:
        return self._mode

    @property
    def modal_open(self) -> bool:
        return self._mode is not None

    @property
    def search_id(self) -> int | None:
        return self._search_id

    @property
    def search_result(self) -> Entity | None:
        return self._search_result

    @property
    def notification(self) -> Notification:
        return self.notifier.current

    @property
    def is_loading(self) -> bool:
        return self._pending_loads > 0

    # Loading and search

    def _begin_fetch(self) -> int:
        self._generation += 1
        self._pending_loads += 1
        return self._generation

    def _is_stale(self, generation: int) -> bool:
        if self.discard_stale_loads and generation != self._generation:
            logger.debug("Discarding stale response", entity=self.spec.name, generation=generation)
            return True
        return False

    async def load(self, page: int | None = None) -> None:
        """Fetch the collection and replace the collection view.

        On failure the view is cleared and an error notification is shown.
        """
        target = max(page if page is not None else self._pagination.current_page, 1)
        generation = self._begin_fetch()
        logger.debug("Loading collection", entity=self.spec.name, page=target, generation=generation)
        try:
            if self.spec.paged:
                result = await self.backend.list_entities(page=target, page_size=self._pagination.page_size)
            else:
                result = await self.backend.list_entities()
        except PortalError as e:
            if self._is_stale(generation):
                return
            self._items = []
            self._pagination.update(0)
            self._notify_failure(e, "load")
            return
        finally:
            self._pending_loads -= 1

        if self._is_stale(generation):
            return

        if isinstance(result, PagedResult):
            self._items = list(result.items)
            self._pagination.update(result.total_count, current_page=result.page, total_pages=result.total_pages)
        else:
            self._items = list(result)
            self._pagination.update(len(self._items), current_page=1, total_pages=1 if self._items else 0)
        logger.debug(
            "Collection loaded",
            entity=self.spec.name,
            count=len(self._items),
            page=self._pagination.current_page,
            total_pages=self._pagination.total_pages,
        )

    async def search(self, entity_id: Any) -> Entity | None:
        """Show only the entity with the given ID.

        An invalid ID is rejected without a request. When the ID is not
        found the error is shown and the unfiltered collection is reloaded.
        """
        try:
            entity_id = validate_search_id(entity_id)
        except ValidationError as e:
            self.notifier.error(str(e))
            return None

        self._search_id = entity_id
        generation = self._begin_fetch()
        logger.debug("Searching", entity=self.spec.name, entity_id=entity_id)
        try:
            entity = await self.backend.read(entity_id)
        except PortalError as e:
            if self._is_stale(generation):
                return None
            self._search_result = None
            self._notify_failure(e, "search")
            await self.load()
            return None
        finally:
            self._pending_loads -= 1

        if self._is_stale(generation):
            return None

        self._search_result = entity
        self._items = [entity]
        self._pagination.collapse(1)
        return entity

    async def clear_search(self) -> None:
        """Forget the search and reload the unfiltered collection."""
        self._search_id = None
        self._search_result = None
        await self.load()

    async def go_to_page(self, page: int) -> None:
        await self.load(self._pagination.clamp(page))

    async def next_page(self) -> None:
        if self._pagination.has_next:
            await self.load(self._pagination.current_page + 1)

    async def previous_page(self) -> None:
        if self._pagination.has_previous:
            await self.load(self._pagination.current_page - 1)

    # Draft editing

    def open_add(self) -> None:
        """Open the form with an empty draft."""
        self._draft = asdict(self.spec.model())
        self._mode = Mode.ADD
        self._editing_id = None
        logger.debug("Opened add form", entity=self.spec.name)

    def open_edit(self, entity: Entity) -> None:
        """Open the form with a copy of an existing entity."""
        self._draft = asdict(entity)
        self._mode = Mode.EDIT
        self._editing_id = entity.identifier
        logger.debug("Opened edit form", entity=self.spec.name, entity_id=self._editing_id)

    def update_draft(self, **values: Any) -> None:
        """Set draft fields by attribute name."""
        if self._draft is None:
            raise RuntimeError("No form is open")
        unknown = set(values) - set(self._draft)
        if unknown:
            raise ValueError(f"Unknown field(s) for {self.spec.label}: {', '.join(sorted(unknown))}")
        self._draft.update(values)

    def close_modal(self) -> None:
        """Close the form and discard unsaved input."""
        self._draft = None
        self._mode = None
        self._editing_id = None

    async def save(self) -> bool:
        """Validate the draft and create or update it.

        Returns:
            True when the backend accepted the change. On failure the form
            stays open so the input can be corrected.
        """
        if self._draft is None or self._mode is None:
            raise RuntimeError("No form is open")

        try:
            validate(self._draft, self.spec.rules)
        except ValidationError as e:
            self.notifier.error(str(e))
            return False

        values = dict(self._draft)
        if self._mode is Mode.EDIT:
            values[self.spec.model.id_field] = self._editing_id
        try:
            entity = entity_from_fields(self.spec.model, values)
        except ValueError as e:
            logger.warning("Draft conversion failed", entity=self.spec.name, error=str(e))
            self.notifier.error(f"Please check the {self.spec.label} details: {e}")
            return False

        action = "update" if self._mode is Mode.EDIT else "add"
        try:
            if self._mode is Mode.EDIT:
                await self.backend.update(entity)
            else:
                await self.backend.create(entity)
        except PortalError as e:
            self._notify_failure(e, action)
            return False

        self.close_modal()
        self.notifier.success(f"{self._title} {'updated' if action == 'update' else 'added'} successfully")
        await self.load()
        return True

    async def remove(self, entity_id: int | str, confirm: Confirm) -> bool:
        """Delete an entity after the user confirms.

        Args:
            entity_id: ID of the entity to delete
            confirm: Called with a yes/no question; may be a coroutine function

        Returns:
            True when the entity was deleted
        """
        answer = confirm(f"Are you sure you want to delete this {self.spec.label}?")
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            logger.debug("Delete cancelled", entity=self.spec.name, entity_id=entity_id)
            return False

        try:
            await self.backend.delete(entity_id)
        except PortalError as e:
            self._notify_failure(e, "delete")
            return False

        if self._search_result is not None and self._search_result.identifier == entity_id:
            self._search_id = None
            self._search_result = None
        self.notifier.success(f"{self._title} deleted successfully")
        await self.load()
        return True

    # Helpers

    @property
    def _title(self) -> str:
        return self.spec.label[:1].upper() + self.spec.label[1:]

    def _notify_failure(self, error: PortalError, action: str) -> None:
        logger.warning(
            "Operation failed",
            entity=self.spec.name,
            action=action,
            error_type=type(error).__name__,
            error=str(error),
        )
        if isinstance(error, DuplicateError):
            self.notifier.error(DUPLICATE_MESSAGE)
        else:
            self.notifier.error(f"Failed to {action} {self.spec.label}. Please try again.")
