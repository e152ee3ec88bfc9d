"""
Structured telemetry for client requests and event streams.

This module provides structured logging capabilities for understanding:
- Request volume, latency and status codes
- Quota headers seen on responses
- Stream reconnects and the backoff applied before each one
- Stream frames that were skipped because they could not be decoded

A ``TelemetryRecorder`` is owned by a client; there is no process-wide
recorder.
"""

import json
import logging
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class TelemetryLevel(Enum):
    """Telemetry verbosity levels."""
    INFO = "info"
    DEBUG = "debug"


class TelemetryAction(Enum):
    """What the client did."""
    REQUEST = "request"              # One-shot request completed
    REQUEST_FAILED = "request_failed"  # One-shot request raised
    STREAM_CONNECT = "stream_connect"  # Stream connection opened
    STREAM_BACKOFF = "stream_backoff"  # Waiting before reconnecting
    FRAME_SKIPPED = "frame_skipped"  # Malformed frame dropped
    STREAM_CLOSED = "stream_closed"  # Stream terminated by the consumer


# Actions logged at INFO even when the recorder level is INFO
_NOTABLE_ACTIONS = frozenset({
    TelemetryAction.REQUEST_FAILED.value,
    TelemetryAction.STREAM_BACKOFF.value,
    TelemetryAction.FRAME_SKIPPED.value,
})


@dataclass
class TelemetryEvent:
    """
    A single telemetry event.

    Attributes:
        timestamp: ISO 8601 timestamp of event
        host: Horizon host
        endpoint: URL path being accessed
        status: HTTP status code (None when no response was received)
        elapsed_ms: Request duration in milliseconds
        action: What happened (see TelemetryAction)
        sleep_s: Backoff delay before the next attempt
        headers_seen: Rate limit headers from the response
        attempt: Reconnect attempt number (0 for first attempt)
        cursor: Last seen paging token of a stream
        detail: Error or diagnostic text
    """
    timestamp: str
    host: str
    endpoint: str
    status: Optional[int]
    elapsed_ms: float
    action: str
    sleep_s: float = 0.0
    headers_seen: Dict[str, str] = field(default_factory=dict)
    attempt: int = 0
    cursor: Optional[str] = None
    detail: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for logging."""
        return {k: v for k, v in asdict(self).items() if v is not None or k == "status"}

    def to_json(self) -> str:
        """Convert event to JSON string."""
        return json.dumps(self.to_dict(), default=str)

    def to_keyvalue(self) -> str:
        """Convert event to key=value format."""
        pairs = []
        for key, value in self.to_dict().items():
            if isinstance(value, dict):
                # Flatten nested dicts
                for subkey, subval in value.items():
                    pairs.append(f"{key}.{subkey}={subval}")
            else:
                pairs.append(f"{key}={value}")
        return " ".join(pairs)


@dataclass
class TelemetryStats:
    """
    Aggregated statistics for telemetry analysis.

    Useful for tests and runtime monitoring.
    """
    total_requests: int = 0
    total_reconnects: int = 0
    total_sleep_time: float = 0.0
    total_elapsed_time: float = 0.0
    frames_skipped: int = 0
    actions_by_type: Dict[str, int] = field(default_factory=dict)
    status_codes: Dict[int, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert stats to dictionary."""
        avg_latency = (
            self.total_elapsed_time / self.total_requests
            if self.total_requests > 0
            else 0.0
        )

        return {
            "total_requests": self.total_requests,
            "total_reconnects": self.total_reconnects,
            "total_sleep_time": self.total_sleep_time,
            "avg_latency_ms": round(avg_latency, 2),
            "frames_skipped": self.frames_skipped,
            "actions_by_type": self.actions_by_type,
            "status_codes": self.status_codes,
        }


class TelemetryRecorder:
    """
    Records and emits structured telemetry for client operations.

    Features:
    - Structured logging in JSON or key=value format
    - Configurable verbosity (info/debug)
    - Optional in-memory statistics collection
    - Bounded event history for inspection in tests
    """

    def __init__(
        self,
        level: TelemetryLevel = TelemetryLevel.INFO,
        format_json: bool = True,
        collect_stats: bool = False,
        max_events: int = 1000,
    ):
        """
        Initialize telemetry recorder.

        Args:
            level: Logging verbosity level
            format_json: If True, log as JSON; otherwise use key=value
            collect_stats: If True, collect in-memory statistics
            max_events: Number of most recent events kept in history
        """
        self.level = level
        self.format_json = format_json
        self.collect_stats = collect_stats
        self.max_events = max_events

        self._stats = TelemetryStats()
        self._events: List[TelemetryEvent] = []
        self._lock = threading.Lock()

    def record(self, event: TelemetryEvent) -> None:
        """
        Record a telemetry event.

        Args:
            event: Event to record
        """
        if self.format_json:
            log_message = event.to_json()
        else:
            log_message = event.to_keyvalue()

        if self.level == TelemetryLevel.DEBUG:
            logger.debug(log_message)
        elif event.action in _NOTABLE_ACTIONS or (event.status and event.status >= 400):
            logger.info(log_message)
        else:
            logger.debug(log_message)

        with self._lock:
            if self.collect_stats:
                self._update_stats(event)
            self._events.append(event)
            if len(self._events) > self.max_events:
                del self._events[: len(self._events) - self.max_events]

    def _update_stats(self, event: TelemetryEvent) -> None:
        stats = self._stats
        if event.action in (TelemetryAction.REQUEST.value, TelemetryAction.REQUEST_FAILED.value):
            stats.total_requests += 1
            stats.total_elapsed_time += event.elapsed_ms
        elif event.action == TelemetryAction.STREAM_BACKOFF.value:
            stats.total_reconnects += 1
            stats.total_sleep_time += event.sleep_s
        elif event.action == TelemetryAction.FRAME_SKIPPED.value:
            stats.frames_skipped += 1

        stats.actions_by_type[event.action] = stats.actions_by_type.get(event.action, 0) + 1

        if event.status:
            stats.status_codes[event.status] = stats.status_codes.get(event.status, 0) + 1

    def get_stats(self) -> TelemetryStats:
        """Get current statistics snapshot."""
        with self._lock:
            return TelemetryStats(
                total_requests=self._stats.total_requests,
                total_reconnects=self._stats.total_reconnects,
                total_sleep_time=self._stats.total_sleep_time,
                total_elapsed_time=self._stats.total_elapsed_time,
                frames_skipped=self._stats.frames_skipped,
                actions_by_type=self._stats.actions_by_type.copy(),
                status_codes=self._stats.status_codes.copy(),
            )

    def reset_stats(self) -> None:
        """Reset statistics."""
        with self._lock:
            self._stats = TelemetryStats()

    def get_events(self, action: Optional[TelemetryAction] = None) -> List[TelemetryEvent]:
        """Get recorded events, optionally only those of one action."""
        with self._lock:
            if action is None:
                return self._events.copy()
            return [event for event in self._events if event.action == action.value]

    def clear_events(self) -> None:
        """Clear event history."""
        with self._lock:
            self._events.clear()


def create_event(
    host: str,
    endpoint: str,
    action: TelemetryAction,
    status: Optional[int] = None,
    elapsed_ms: float = 0.0,
    sleep_s: float = 0.0,
    headers_seen: Optional[Dict[str, str]] = None,
    attempt: int = 0,
    cursor: Optional[str] = None,
    detail: str = "",
) -> TelemetryEvent:
    """
    Helper to create a telemetry event with current timestamp.

    Args:
        host: Horizon host
        endpoint: URL path
        action: What happened
        status: HTTP status code
        elapsed_ms: Request duration in milliseconds
        sleep_s: Backoff delay
        headers_seen: Relevant rate limit headers
        attempt: Reconnect attempt number
        cursor: Last seen paging token
        detail: Error or diagnostic text

    Returns:
        TelemetryEvent ready for recording
    """
    return TelemetryEvent(
        timestamp=datetime.now(timezone.utc).isoformat(),
        host=host,
        endpoint=endpoint,
        status=status,
        elapsed_ms=elapsed_ms,
        action=action.value,
        sleep_s=sleep_s,
        headers_seen=headers_seen or {},
        attempt=attempt,
        cursor=cursor,
        detail=detail,
    )


def relevant_headers(headers: Dict[str, str], names: List[str]) -> Dict[str, str]:
    """
    Extract relevant rate limit headers for telemetry.

    Args:
        headers: Full response headers
        names: Header names of interest

    Returns:
        Dict of the headers present, keyed by the configured name
    """
    lowered = {key.lower(): value for key, value in headers.items()}
    return {name: lowered[name.lower()] for name in names if name.lower() in lowered}
