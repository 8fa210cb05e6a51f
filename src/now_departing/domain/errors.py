"""Errors raised while loading stations or fetching arrivals."""

from now_departing.domain.models.error_details import ErrorDetails, ErrorKind

_STATUS_REASONS = {
    429: "Rate limit exceeded",
    502: "Bad gateway (server error)",
    503: "Service unavailable",
    504: "Gateway timeout",
}

CATALOG_UNAVAILABLE_MESSAGE = (
    "Unable to load station data. Please check your internet connection."
)
NO_TIMES_MESSAGE = "No times found"


class ArrivalError(Exception):
    """Base class for arrival lookup failures."""

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(self, message: str, reason: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason


class TransportError(ArrivalError):
    """The request never produced an HTTP response (DNS, connect, timeout)."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, timed_out: bool = False) -> None:
        super().__init__(
            message, reason="Request timed out" if timed_out else "Cannot connect to server"
        )
        self.timed_out = timed_out


class ServerError(ArrivalError):
    """The upstream answered with a non-2xx status."""

    kind = ErrorKind.SERVER

    def __init__(self, status_code: int, message: str | None = None) -> None:
        super().__init__(
            message or f"Upstream returned status {status_code}",
            reason=_STATUS_REASONS.get(status_code, f"Server error ({status_code})"),
        )
        self.status_code = status_code


class DecodeError(ArrivalError):
    """The response body was not valid JSON or not in the expected shape."""

    kind = ErrorKind.DECODE

    def __init__(self, message: str) -> None:
        super().__init__(message, reason="Failed to process data")


class NotFoundError(ArrivalError):
    """The requested station was not present in the response."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str) -> None:
        super().__init__(message, reason=NO_TIMES_MESSAGE)


class EmptyResultError(ArrivalError):
    """A well-formed response with nothing in it. Not a failure for display purposes."""

    kind = ErrorKind.EMPTY_RESULT

    def __init__(self, message: str = "No results") -> None:
        super().__init__(message, reason=message)


class CatalogUnavailableError(ArrivalError):
    """Every station catalog source failed and nothing is loaded."""

    kind = ErrorKind.CATALOG_UNAVAILABLE

    def __init__(self, message: str = CATALOG_UNAVAILABLE_MESSAGE) -> None:
        super().__init__(message, reason=CATALOG_UNAVAILABLE_MESSAGE)


def describe_error(error: Exception) -> ErrorDetails:
    """Map an exception to a short, user-visible description."""
    if isinstance(error, ArrivalError):
        status_code = error.status_code if isinstance(error, ServerError) else None
        return ErrorDetails(
            kind=error.kind,
            status_code=status_code,
            reason=error.reason or str(error),
        )
    return ErrorDetails(kind=ErrorKind.TRANSPORT, reason="Unknown error")
