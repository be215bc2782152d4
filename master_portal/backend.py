"""Backend interface for reference-data access."""

from abc import ABC, abstractmethod

from master_portal.models import Entity, PagedResult


class Backend(ABC):
    """Abstract base class for entity backends.

    One backend instance serves a single entity type. All operations are
    coroutines and raise :mod:`master_portal.errors` types on failure.
    """

    @abstractmethod
    async def list_entities(
        self,
        page: int | None = None,
        page_size: int | None = None,
    ) -> list[Entity] | PagedResult[Entity]:
        """List entities, returning a page envelope when paging is requested."""
        pass

    @abstractmethod
    async def read(self, entity_id: int | str) -> Entity:
        """Read an entity by ID."""
        pass

    @abstractmethod
    async def create(self, entity: Entity) -> Entity:
        """Create a new entity and return the persisted record."""
        pass

    @abstractmethod
    async def update(self, entity: Entity) -> Entity:
        """Update an existing entity and return the persisted record."""
        pass

    @abstractmethod
    async def delete(self, entity_id: int | str) -> None:
        """Delete an entity."""
        pass
