"""Error taxonomy shared by services and translated to HTTP responses in main."""


class PortalError(Exception):
    """Base class for errors reported to API callers."""

    status_code = 500
    default_message = "Unexpected error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PortalError):
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(PortalError):
    status_code = 401
    default_message = "Authentication required"


class Forbidden(PortalError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(PortalError):
    status_code = 404
    default_message = "Not found"


class Conflict(PortalError):
    status_code = 409
    default_message = "Conflict"


class DependencyFailure(PortalError):
    """A collaborator (content store, mail server) could not be reached."""

    status_code = 503
    default_message = "Service temporarily unavailable"
