"""Master Portal - reference-data management over a REST API."""

from master_portal.manager import EntityManager, Mode
from master_portal.pagination import PaginationState, window_of
from master_portal.resources import ENTITY_SPECS, get_spec

__all__ = ["ENTITY_SPECS", "EntityManager", "Mode", "PaginationState", "get_spec", "window_of"]
