"""Async client for the Stellar Horizon API."""

__version__ = "0.1.0"

from stellar_horizon import api
from stellar_horizon.client import HorizonClient
from stellar_horizon.core.config import ClientConfig, load_config
from stellar_horizon.core.errors import (
    BadRequestError,
    DecodeError,
    ErrorKind,
    HorizonError,
    NotFoundError,
    NotStreamableError,
    RateLimitedError,
    ServerError,
    ServiceError,
    TransportError,
)

__all__ = [
    "__version__",
    "api",
    "HorizonClient",
    "ClientConfig",
    "load_config",
    "BadRequestError",
    "DecodeError",
    "ErrorKind",
    "HorizonError",
    "NotFoundError",
    "NotStreamableError",
    "RateLimitedError",
    "ServerError",
    "ServiceError",
    "TransportError",
]
