"""Core engines and types: requests, decoding, pagination and streaming."""

from stellar_horizon.core.clock import FakeTimeProvider, SystemTimeProvider, TimeProvider
from stellar_horizon.core.config import (
    BackoffConfig,
    ClientConfig,
    ConfigError,
    HeaderConfig,
    load_config,
    validate_config,
)
from stellar_horizon.core.decoder import Problem, Response, decode
from stellar_horizon.core.page import Link, Page, PageLinks
from stellar_horizon.core.pagination import Paginator, paginate
from stellar_horizon.core.rate_limit import RateLimit, read_rate_limit
from stellar_horizon.core.request import Order, Request, RequestKind, RequestSpec, Shape
from stellar_horizon.core.resource import Resource
from stellar_horizon.core.stream import EventStream, StreamPhase, StreamState, StreamWarning
from stellar_horizon.core.submission import SubmissionFailure, SubmissionResult
from stellar_horizon.core.transport import AiohttpTransport, Transport, TransportResponse

__all__ = [
    # clock
    "FakeTimeProvider",
    "SystemTimeProvider",
    "TimeProvider",
    # config
    "BackoffConfig",
    "ClientConfig",
    "ConfigError",
    "HeaderConfig",
    "load_config",
    "validate_config",
    # decoding
    "Problem",
    "Response",
    "decode",
    "RateLimit",
    "read_rate_limit",
    # requests and pages
    "Order",
    "Request",
    "RequestKind",
    "RequestSpec",
    "Shape",
    "Resource",
    "Link",
    "Page",
    "PageLinks",
    "Paginator",
    "paginate",
    # streaming
    "EventStream",
    "StreamPhase",
    "StreamState",
    "StreamWarning",
    # submission
    "SubmissionFailure",
    "SubmissionResult",
    # transport
    "AiohttpTransport",
    "Transport",
    "TransportResponse",
]
