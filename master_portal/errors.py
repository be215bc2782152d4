"""Error taxonomy for the master portal.

Remote failures are raised by backends as one of these types so the entity
manager can pick a notification by type instead of inspecting message text.
"""


class PortalError(Exception):
    """Base class for all portal errors."""


class ValidationError(PortalError):
    """Input was rejected, either client-side before any request or by the backend (4xx)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(PortalError):
    """The target identifier does not exist on the backend."""


class DuplicateError(PortalError):
    """The backend reported a uniqueness conflict."""


class ServerError(PortalError):
    """The backend failed (5xx) or could not be reached."""
