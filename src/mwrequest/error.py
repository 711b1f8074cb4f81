import enum


@enum.unique
class FailureKind(enum.Enum):
    """Enumeration of the ways a request can fail."""

    NO_RESPONSE = "no_response"
    TRANSPORT_ERROR = "transport_error"
    HTTP_ERROR = "http_error"
    DECODING_ERROR = "decoding_error"
    UNKNOWN = "unknown"

    def __repr__(self):
        return self.name

    def __str__(self):
        return self.name


class RequestError(Exception):
    """Base class for request failures."""

    kind = FailureKind.UNKNOWN


class NoResponseError(RequestError):
    """The exchange completed without producing a status code."""

    kind = FailureKind.NO_RESPONSE

    def __init__(self):
        super().__init__("No response")


class TransportError(RequestError):
    """The transport failed before a response was available (DNS, connection,
    TLS, cancellation, ...)."""

    kind = FailureKind.TRANSPORT_ERROR

    def __init__(self, cause: BaseException):
        super().__init__(str(cause) or cause.__class__.__name__)
        self.cause = cause

    def __repr__(self):
        return f"TransportError(cause={self.cause!r})"


class HTTPError(RequestError):
    """The server responded with a status code of 400 or above.

    The response body is kept so that callers can inspect error payloads
    returned by the server.
    """

    kind = FailureKind.HTTP_ERROR

    def __init__(self, status_code: int, reason: str, body: bytes = b""):
        super().__init__(reason)
        self.status_code = status_code
        self.reason = reason
        self.body = body

    def __repr__(self):
        return (
            f"HTTPError(status_code={self.status_code}, "
            f"reason={self.reason!r}, body={self.body!r})"
        )

    def __eq__(self, other):
        return (
            isinstance(other, HTTPError)
            and self.status_code == other.status_code
            and self.reason == other.reason
            and self.body == other.body
        )

    __hash__ = Exception.__hash__


class DecodingError(RequestError):
    """The response payload did not match the requested output type."""

    kind = FailureKind.DECODING_ERROR

    def __init__(self, cause: BaseException):
        super().__init__(str(cause) or cause.__class__.__name__)
        self.cause = cause

    def __repr__(self):
        return f"DecodingError(cause={self.cause!r})"


class UnknownError(RequestError):
    """A request ended without producing any result. Seeing this error means
    there is a bug in a transport or in this package."""

    kind = FailureKind.UNKNOWN

    def __init__(self):
        super().__init__("Unknown error")


class CancelledError(Exception):
    """Cause of the TransportError delivered when a request is cancelled
    before it completed."""

    def __init__(self):
        super().__init__("request cancelled")
