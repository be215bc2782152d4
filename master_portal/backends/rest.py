"""REST backend implementation using httpx."""

from collections.abc import Callable
from typing import Any, TypeVar

import httpx
import structlog

from master_portal.backend import Backend
from master_portal.errors import DuplicateError, NotFoundError, ServerError, ValidationError
from master_portal.models import Entity, PagedResult
from master_portal.resources import EntitySpec

logger = structlog.get_logger()

T = TypeVar("T")


def create_client(base_url: str, timeout: float = 10.0) -> httpx.AsyncClient:
    """Create the HTTP client shared by every entity backend."""
    if not base_url:
        raise ValueError("API base URL required")
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/") + "/",
        timeout=timeout,
        headers={"Accept": "application/json"},
    )


def _error_text(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        for key in ("message", "error", "title", "detail"):
            if isinstance(body.get(key), str):
                return body[key]
    return response.text


def _json(response: httpx.Response) -> Any:
    """Decode a success body, treating anything but JSON as a backend fault."""
    try:
        return response.json()
    except ValueError as e:
        logger.warning(
            "Backend returned an invalid body",
            url=str(response.request.url),
            content_type=response.headers.get("content-type"),
        )
        raise ServerError("Backend returned an invalid body") from e


def _raise_for_status(response: httpx.Response, entity_id: int | str | None = None) -> None:
    """Translate an HTTP error response into a portal error."""
    if response.is_success:
        return

    status = response.status_code
    text = _error_text(response)
    logger.debug("Backend returned error", status=status, url=str(response.request.url), body=text)

    if status == 404:
        raise NotFoundError(f"Entity {entity_id} not found" if entity_id is not None else "Resource not found")
    if status == 409 or (400 <= status < 500 and "duplicate" in text.lower()):
        raise DuplicateError(text or "Duplicate entry")
    if 400 <= status < 500:
        raise ValidationError(text or f"Request rejected with status {status}")
    raise ServerError(f"Backend error {status}: {text}")


class RestBackend(Backend):
    """Backend that talks to the portal's REST API for a single entity type."""

    def __init__(self, spec: EntitySpec, client: httpx.AsyncClient) -> None:
        """Initialize REST backend.

        Args:
            spec: Entity spec naming the model and resource paths
            client: Shared HTTP client configured with the base URL
        """
        self.spec = spec
        self.client = client
        logger.debug("REST backend initialized", entity=spec.name, resource=spec.resource)

    async def _request(
        self,
        method: str,
        path: str,
        entity_id: int | str | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.warning("Backend unreachable", method=method, path=path, error=str(e))
            raise ServerError(f"Could not reach backend: {e}") from e
        _raise_for_status(response, entity_id)
        return response

    def _decode(self, decoder: Callable[[Any], T], body: Any) -> T:
        """Apply a payload decoder, mapping shape errors to ServerError."""
        try:
            return decoder(body)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Backend returned an unexpected payload", entity=self.spec.name, error=str(e))
            raise ServerError("Backend returned an invalid body") from e

    def _to_entity(self, response: httpx.Response, fallback: Entity | None = None) -> Entity:
        if not response.content:
            if fallback is None:
                raise ServerError("Backend returned an empty body")
            return fallback
        return self._decode(self.spec.model.from_payload, _json(response))

    def _to_entities(self, body: Any) -> list[Entity]:
        if body is None:
            return []
        if not isinstance(body, list):
            raise TypeError(f"expected a list, got {type(body).__name__}")
        return [self.spec.model.from_payload(item) for item in body]

    def _to_page(self, body: Any) -> PagedResult[Entity]:
        if not isinstance(body, dict):
            raise TypeError(f"expected an object, got {type(body).__name__}")
        return PagedResult.from_envelope(body, self.spec.model)

    async def list_entities(
        self,
        page: int | None = None,
        page_size: int | None = None,
    ) -> list[Entity] | PagedResult[Entity]:
        """List entities, paged when the resource supports it and a page is given."""
        if page is not None and self.spec.paged_path:
            logger.info("Listing entities", entity=self.spec.name, page=page, page_size=page_size)
            params = {"page": page, "pageSize": page_size or 10}
            response = await self._request("GET", self.spec.paged_path, params=params)
            result = self._decode(self._to_page, _json(response))
            logger.info("Listed entity page", entity=self.spec.name, count=len(result.items), total=result.total_count)
            return result

        logger.info("Listing entities", entity=self.spec.name)
        response = await self._request("GET", self.spec.resource)
        entities = self._decode(self._to_entities, _json(response))
        logger.info("Listed entities", entity=self.spec.name, count=len(entities))
        return entities

    async def read(self, entity_id: int | str) -> Entity:
        """Read an entity by ID."""
        logger.info("Reading entity", entity=self.spec.name, entity_id=entity_id)
        response = await self._request("GET", self.spec.item_path(entity_id), entity_id=entity_id)
        return self._to_entity(response)

    async def create(self, entity: Entity) -> Entity:
        """Create a new entity."""
        logger.info("Creating entity", entity=self.spec.name)
        response = await self._request("POST", self.spec.resource, json=entity.to_payload())
        created = self._to_entity(response, fallback=entity)
        logger.info("Entity created", entity=self.spec.name, entity_id=created.identifier)
        return created

    async def update(self, entity: Entity) -> Entity:
        """Update an existing entity."""
        entity_id = entity.identifier
        if entity_id is None:
            raise ValidationError("Cannot update an entity without an ID")
        logger.info("Updating entity", entity=self.spec.name, entity_id=entity_id)
        response = await self._request(
            "PUT",
            self.spec.item_path(entity_id),
            entity_id=entity_id,
            json=entity.to_payload(),
        )
        updated = self._to_entity(response, fallback=entity)
        logger.info("Entity updated", entity=self.spec.name, entity_id=entity_id)
        return updated

    async def delete(self, entity_id: int | str) -> None:
        """Delete an entity; an unknown ID raises NotFoundError."""
        logger.info("Deleting entity", entity=self.spec.name, entity_id=entity_id)
        await self._request("DELETE", self.spec.item_path(entity_id), entity_id=entity_id)
        logger.info("Entity deleted", entity=self.spec.name, entity_id=entity_id)
