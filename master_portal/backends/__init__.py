"""Backend implementations for the master portal."""

from master_portal.backends.rest import RestBackend, create_client

__all__ = ["RestBackend", "create_client"]
