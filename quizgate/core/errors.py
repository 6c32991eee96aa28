"""Error taxonomy shared by the services and rendered by the app's exception handlers."""


class GateError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class UpstreamUnavailable(GateError):
    """Vault or notification channel unreachable, or answered with a non-success status."""

    status_code = 500
    default_message = "Upstream service unavailable"


class Unauthorized(GateError):
    status_code = 401
    default_message = "Unauthorized"


class NotConfigured(GateError):
    """A required store or secret is missing from the configuration."""

    status_code = 500
    default_message = "Service not configured"


class MalformedRequest(GateError):
    status_code = 400
    default_message = "Malformed request"


class NotFound(GateError):
    status_code = 404
    default_message = "Not Found"
