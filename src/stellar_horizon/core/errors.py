"""
Error taxonomy shared by one-shot requests and event streams.

Every failure raised by the client derives from ``HorizonError``. Failures
that come from talking to the service derive from ``ServiceError`` and carry
an ``ErrorKind`` tag so callers can branch on ``err.kind`` without matching
on messages. The quota snapshot of the failed response is always attached.
"""

from enum import Enum
from typing import Any, Optional

from .rate_limit import RateLimit


class ErrorKind(Enum):
    """Service error categories."""
    NOT_FOUND = "not_found"
    BAD_REQUEST = "bad_request"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    TRANSPORT_FAILURE = "transport_failure"
    DECODE_FAILURE = "decode_failure"


class HorizonError(Exception):
    """Base class for all client errors."""


class NotStreamableError(HorizonError):
    """Raised before any I/O when a request has no server-push feed."""

    def __init__(self, kind: Any):
        self.request_kind = kind
        super().__init__(f"{kind} does not support streaming")


class ServiceError(HorizonError):
    """
    A failed exchange with the service.

    Attributes:
        kind: Error category
        status: HTTP status code, None for transport and pre-response failures
        rate_limit: Quota snapshot of the failed response
        problem_type: Problem ``type`` URL or slug, if the body had one
        title: Problem title
        detail: Problem detail
        extras: Problem ``extras`` mapping
        body: Raw body text (or prefix of it) for diagnostics
    """

    kind: ErrorKind = ErrorKind.SERVER_ERROR

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        rate_limit: RateLimit = RateLimit.UNKNOWN,
        problem_type: Optional[str] = None,
        title: Optional[str] = None,
        detail: Optional[str] = None,
        extras: Optional[dict[str, Any]] = None,
        body: str = "",
        kind: Optional[ErrorKind] = None,
    ):
        super().__init__(message)
        if kind is not None:
            self.kind = kind
        self.status = status
        self.rate_limit = rate_limit
        self.problem_type = problem_type
        self.title = title
        self.detail = detail
        self.extras = extras or {}
        self.body = body


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND


class BadRequestError(ServiceError):
    """The service rejected the request. The caller must change it."""
    kind = ErrorKind.BAD_REQUEST


class RateLimitedError(ServiceError):
    """
    HTTP 429.

    Attributes:
        retry_after: Seconds from the Retry-After header, if present
    """

    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str, retry_after: Optional[float] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServerError(ServiceError):
    kind = ErrorKind.SERVER_ERROR


class TransportError(ServiceError):
    """Connection, DNS, TLS or timeout failure before a response arrived."""
    kind = ErrorKind.TRANSPORT_FAILURE


class DecodeError(ServiceError):
    """The body could not be decoded into the expected shape."""
    kind = ErrorKind.DECODE_FAILURE
