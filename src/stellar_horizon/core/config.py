"""
Configuration module for the Horizon client.

This module provides configuration loading and validation for the client:
service location, default headers, transport timeouts, the wire names of the
rate-limit and resume headers, and the stream reconnection policy.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml

DEFAULT_BASE_URL = "https://horizon.stellar.org"
DEFAULT_CLIENT_NAME = "stellar-horizon-py"


class ConfigError(ValueError):
    """Raised when configuration values are invalid."""


@dataclass(frozen=True)
class HeaderConfig:
    """Wire names of the headers the client reads or writes."""

    limit: str = "X-Ratelimit-Limit"
    remaining: str = "X-Ratelimit-Remaining"
    reset: str = "X-Ratelimit-Reset"
    retry_after: str = "Retry-After"
    resume: str = "Last-Event-ID"


@dataclass(frozen=True)
class BackoffConfig:
    """
    Reconnection policy for event streams.

    Attributes:
        initial_delay: Delay before the first reconnect, in seconds
        max_delay: Upper bound for the doubled delay
        jitter: Whether to spread delays by +/-25%
        max_reconnects: Consecutive failed reconnects tolerated before the
            stream gives up. None means retry forever.
    """

    initial_delay: float = 1.0
    max_delay: float = 60.0
    jitter: bool = True
    max_reconnects: int | None = None


@dataclass(frozen=True)
class ClientConfig:
    """Immutable configuration shared by every operation of one client."""

    base_url: str = DEFAULT_BASE_URL
    client_name: str = DEFAULT_CLIENT_NAME
    client_version: str = ""
    extra_headers: dict[str, str] = field(default_factory=dict)
    connect_timeout: float = 60.0
    read_timeout: float = 60.0
    headers: HeaderConfig = field(default_factory=HeaderConfig)
    backoff: BackoffConfig = field(default_factory=BackoffConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClientConfig":
        """Create ClientConfig from dictionary."""
        headers_data = data.get("headers", {})
        headers = HeaderConfig(**headers_data) if headers_data else HeaderConfig()

        backoff_data = data.get("backoff", {})
        backoff = BackoffConfig(**backoff_data) if backoff_data else BackoffConfig()

        return cls(
            base_url=data.get("base_url", DEFAULT_BASE_URL),
            client_name=data.get("client_name", DEFAULT_CLIENT_NAME),
            client_version=str(data.get("client_version", "")),
            extra_headers=dict(data.get("extra_headers", {})),
            connect_timeout=data.get("connect_timeout", 60.0),
            read_timeout=data.get("read_timeout", 60.0),
            headers=headers,
            backoff=backoff,
        )

    def with_base_url(self, base_url: str) -> "ClientConfig":
        """Return a copy pointing at another Horizon instance."""
        return replace(self, base_url=base_url)


def load_config(config_path: str | Path | None = None) -> ClientConfig:
    """
    Load client configuration from YAML file.

    The file holds a single top-level ``horizon:`` mapping.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        ClientConfig built from the file, or defaults when it is absent

    Raises:
        yaml.YAMLError: If config file is invalid YAML
        ConfigError: If config validation fails
    """
    if config_path is None:
        config_path = Path.cwd() / "config" / "horizon.yml"
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        return ClientConfig()

    with open(config_path, "r") as f:
        data = yaml.safe_load(f)

    if not data:
        return ClientConfig()

    section = data.get("horizon", {})
    if not isinstance(section, dict):
        raise ConfigError("'horizon' section must be a mapping")

    try:
        config = ClientConfig.from_dict(section)
    except TypeError as e:
        raise ConfigError(f"Unknown configuration key: {e}") from e
    validate_config(config)
    return config


def validate_config(config: ClientConfig) -> None:
    """
    Validate configuration.

    Args:
        config: Configuration to validate

    Raises:
        ConfigError: If configuration is invalid
    """
    parsed = urlparse(config.base_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"Invalid base_url: {config.base_url!r}")

    if config.connect_timeout <= 0:
        raise ConfigError("connect_timeout must be positive")

    if config.read_timeout <= 0:
        raise ConfigError("read_timeout must be positive")

    backoff = config.backoff
    if backoff.initial_delay <= 0:
        raise ConfigError("backoff initial_delay must be positive")

    if backoff.max_delay < backoff.initial_delay:
        raise ConfigError("backoff max_delay must be >= initial_delay")

    if backoff.max_reconnects is not None and backoff.max_reconnects < 0:
        raise ConfigError("backoff max_reconnects must be >= 0")

    for name in ("limit", "remaining", "reset", "retry_after", "resume"):
        if not getattr(config.headers, name):
            raise ConfigError(f"Header name for {name} must not be empty")
