"""Exceptions raised by the client layers."""


class MoodPlacesError(Exception):
    pass


class PlaceValidationError(MoodPlacesError):
    """Search input rejected before any remote call."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class ServiceError(MoodPlacesError):
    """A remote service call did not produce a usable response."""


class TransportError(ServiceError):
    """Connection failure, timeout or other transport-level error."""


class ServiceResponseError(ServiceError):
    """The service answered, but with an error status or a body that does not validate."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitedError(ServiceError):
    """HTTP 429: callers must not retry within the window."""
