"""
Horizon client facade.

``HorizonClient`` binds a configuration, a transport, a clock and a telemetry
recorder, and exposes the four ways of talking to Horizon:

- ``fetch``: one request, one decoded Response
- ``page``: lazy forward pagination over a collection
- ``stream``: a reconnecting event stream over a streamable collection
- ``submit``: post a signed transaction envelope
"""

import logging
import time
from collections.abc import AsyncIterator
from typing import Any, Optional, Union
from urllib.parse import urlencode, urlsplit

from stellar_horizon import __version__
from stellar_horizon.core.clock import SystemTimeProvider, TimeProvider
from stellar_horizon.core.config import ClientConfig
from stellar_horizon.core.decoder import Response, decode
from stellar_horizon.core.errors import NotStreamableError, ServiceError
from stellar_horizon.core.page import Page
from stellar_horizon.core.pagination import Paginator, paginate
from stellar_horizon.core.request import Request, RequestSpec, join_url
from stellar_horizon.core.resource import Resource
from stellar_horizon.core.stream import EventStream, WarningHandler
from stellar_horizon.core.submission import SubmissionResult, decode_submission
from stellar_horizon.core.telemetry import (
    TelemetryAction,
    TelemetryRecorder,
    create_event,
    relevant_headers,
)
from stellar_horizon.core.transport import AiohttpTransport, Transport, TransportResponse

logger = logging.getLogger(__name__)

SUBMIT_PATH = "transactions"


class HorizonClient:
    """
    Async client for a Horizon instance.

    Args:
        config: Client configuration. Defaults to the public network.
        transport: HTTP capability. Defaults to an AiohttpTransport that the
            client owns and closes.
        recorder: Telemetry sink. Each client gets its own by default.
        time_provider: Clock used by stream backoff

    Example:
        async with HorizonClient() as client:
            response = await client.fetch(api.ledgers.single(1))
            async for page in client.page(api.ledgers.all().with_limit(200)):
                ...
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[Transport] = None,
        recorder: Optional[TelemetryRecorder] = None,
        time_provider: Optional[TimeProvider] = None,
    ):
        self.config = config or ClientConfig()
        self._owns_transport = transport is None
        self._transport = transport or AiohttpTransport(
            connect_timeout=self.config.connect_timeout,
            read_timeout=self.config.read_timeout,
        )
        self.recorder = recorder or TelemetryRecorder()
        self._time = time_provider or SystemTimeProvider()
        self._host = urlsplit(self.config.base_url).netloc

    def default_headers(self) -> dict[str, str]:
        """Headers sent with every request and stream connection."""
        headers = {
            "X-Client-Name": self.config.client_name,
            "X-Client-Version": self.config.client_version or __version__,
        }
        headers.update(self.config.extra_headers)
        return headers

    def prepare_request(self, request: Request) -> RequestSpec:
        """
        Prepare the HTTP request for ``request``.

        Returns:
            A RequestSpec with the rendered URL and default headers
        """
        headers = self.default_headers()
        headers["Accept"] = "application/hal+json, application/json"
        return RequestSpec(url=request.url(self.config.base_url), headers=headers)

    async def fetch(self, request: Request) -> Response:
        """
        Perform one request and decode the response.

        Args:
            request: Any request

        Returns:
            Response whose ``value`` is the resource, or a Page for collections

        Raises:
            ServiceError: Matching subclass for the failure
        """
        spec = self.prepare_request(request)
        raw = await self._send(spec)
        return decode(raw.status, raw.headers, raw.body, request, self.config.headers)

    def page(self, request: Request, paginator: Optional[Paginator] = None) -> AsyncIterator[Page]:
        """
        Iterate lazily through the pages of a collection.

        Args:
            request: Paged collection request
            paginator: Optional callback to control pagination.
                       Called with (current_page, total_records_fetched).
                       Return False to stop pagination.

        Raises:
            ValueError: If the request is not a paged collection
        """
        return paginate(self.fetch, request, paginator)

    def stream(self, request: Request, on_warning: Optional[WarningHandler] = None) -> EventStream:
        """
        Open a reconnecting event stream.

        Nothing is sent until the stream is first iterated. Start from
        ``request.with_cursor("now")`` to receive only new events.

        Args:
            request: Streamable request
            on_warning: Called for every frame skipped as malformed

        Raises:
            NotStreamableError: If the request kind has no event stream
        """
        if not request.streamable:
            raise NotStreamableError(request.kind.value)
        return EventStream(
            self._transport,
            request,
            self.config,
            headers=self.default_headers(),
            time_provider=self._time,
            recorder=self.recorder,
            on_warning=on_warning,
        )

    async def submit(self, envelope: Union[str, bytes], resource: Any = Resource) -> SubmissionResult:
        """
        Submit a signed transaction envelope.

        Args:
            envelope: Base64 encoded TransactionEnvelope XDR
            resource: Type the resulting transaction record is decoded into

        Returns:
            SubmissionResult; a rejected transaction is not raised but
            returned with its result codes

        Raises:
            ValueError: If a bytes envelope is not ASCII
            ServiceError: For failures other than a rejected transaction
        """
        if isinstance(envelope, bytes):
            try:
                envelope = envelope.decode("ascii")
            except UnicodeDecodeError as e:
                raise ValueError("Transaction envelope must be base64 encoded ASCII") from e
        headers = self.default_headers()
        headers["Content-Type"] = "application/x-www-form-urlencoded"
        spec = RequestSpec(
            url=join_url(self.config.base_url, (SUBMIT_PATH,)),
            method="POST",
            headers=headers,
            body=urlencode({"tx": envelope}).encode("ascii"),
        )
        raw = await self._send(spec)
        result = decode_submission(raw.status, raw.headers, raw.body, resource, self.config.headers)
        if not result.successful:
            failure = result.failure
            logger.warning(
                f"Transaction rejected: {failure.transaction_code} "
                f"operations={list(failure.operation_codes)}"
            )
        return result

    async def _send(self, spec: RequestSpec) -> TransportResponse:
        endpoint = urlsplit(spec.url).path
        start = time.monotonic()
        try:
            raw = await self._transport.send(spec.method, spec.url, spec.headers, spec.body)
        except ServiceError as e:
            self._record(TelemetryAction.REQUEST_FAILED, endpoint, start, detail=str(e))
            raise

        self._record(
            TelemetryAction.REQUEST,
            endpoint,
            start,
            status=raw.status,
            headers_seen=relevant_headers(
                raw.headers,
                [self.config.headers.limit, self.config.headers.remaining, self.config.headers.reset],
            ),
        )
        return raw

    def _record(self, action: TelemetryAction, endpoint: str, start: float, **fields: Any) -> None:
        elapsed_ms = (time.monotonic() - start) * 1000
        self.recorder.record(
            create_event(host=self._host, endpoint=endpoint, action=action, elapsed_ms=elapsed_ms, **fields)
        )

    async def close(self) -> None:
        """Close the transport if the client created it."""
        if self._owns_transport:
            await self._transport.close()

    async def __aenter__(self) -> "HorizonClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
