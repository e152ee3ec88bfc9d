"""
End-to-end test: a full client session against the stub Horizon server.

The session is configured from a YAML file and walks through what a wallet
backend does on start-up:
- Fetch the root document
- Page through an account's payments until caught up
- Stream new payments, surviving a dropped connection and a 5xx
- Submit a transaction and read the result codes of a rejected one

Telemetry is captured to check what the client did along the way.
"""
import json
import logging

import pytest
import yaml

from stellar_horizon import HorizonClient, api, load_config
from stellar_horizon.core.clock import FakeTimeProvider
from stellar_horizon.core.telemetry import TelemetryAction, TelemetryRecorder
from tests.integration.stub_server import (
    StubResponse,
    StubServer,
    StubStream,
    page_response,
    problem_response,
    quota_headers,
    record,
)

logger = logging.getLogger(__name__)

ACCOUNT = "GAYOLLLUIZE4DZMBB2ZBKGBUBZLIOYU6XFLW37GBP2VZD3ABNXCW4BVA"


@pytest.fixture
async def stub_server():
    server = StubServer()
    await server.start()
    yield server
    await server.stop()


@pytest.fixture
def config_file(tmp_path, stub_server):
    path = tmp_path / "horizon.yml"
    path.write_text(yaml.safe_dump({
        "horizon": {
            "base_url": stub_server.get_url("/"),
            "client_name": "e2e-wallet",
            "read_timeout": 5,
            "backoff": {"initial_delay": 0.5, "max_delay": 4.0, "jitter": False},
        }
    }))
    return path


async def test_wallet_session(stub_server, config_file):
    config = load_config(config_file)
    recorder = TelemetryRecorder(collect_stats=True)
    clock = FakeTimeProvider()

    payments_url = stub_server.get_url(f"/accounts/{ACCOUNT}/payments")
    stub_server.enqueue_responses([
        # root
        StubResponse(headers=quota_headers(), body=json.dumps({"horizon_version": "2.30.0", "core_latest_ledger": 50})),
        # history: two pages, then an empty page meaning "caught up"
        page_response([record(1), record(2)], next_href=f"{payments_url}?cursor=2&limit=2&order=asc"),
        page_response([record(3)], next_href=f"{payments_url}?cursor=3&limit=2&order=asc"),
        page_response([], next_href=f"{payments_url}?cursor=3&limit=2&order=asc"),
        # live: drop after 4, server error, then resume
        StubStream(events=[record(4)]),
        problem_response(503, "Service Unavailable"),
        StubStream(events=[record(4), record(5)], hold_open=True),
        # submission rejected
        problem_response(
            400,
            "Transaction Failed",
            problem_type="https://stellar.org/horizon-errors/transaction_failed",
            extras={"result_codes": {"transaction": "tx_failed", "operations": ["op_success", "op_underfunded"]}},
        ),
    ])

    async with HorizonClient(config, recorder=recorder, time_provider=clock) as client:
        root = await client.fetch(api.root.root())
        assert root.value["horizon_version"] == "2.30.0"

        history = []
        last_cursor = None
        async for current in client.page(api.payments.for_account(ACCOUNT).with_limit(2)):
            if current.is_empty:
                break
            history.extend(r.paging_token for r in current)
            last_cursor = current.records[-1].paging_token
        assert history == ["1", "2", "3"]

        live = []
        async with client.stream(api.payments.for_account(ACCOUNT).with_cursor(last_cursor)) as stream:
            async for payment in stream:
                live.append(payment.paging_token)
                if len(live) == 2:
                    break
        assert live == ["4", "5"]

        result = await client.submit("AAAAAgAAAAA=")
        assert not result.successful
        assert result.failure.operation_codes == ("op_success", "op_underfunded")

    # closed by service (retry 0), then 503 (retry 1)
    assert clock.sleep_history == [0.5, 1.0]

    stream_requests = stub_server.request_history[4:7]
    assert stream_requests[0]["query"] == {"cursor": "3"}
    assert stream_requests[2]["headers"]["Last-Event-ID"] == "4"
    assert all(r["headers"]["X-Client-Name"] == "e2e-wallet" for r in stub_server.request_history)

    stats = recorder.get_stats()
    assert stats.total_requests == 5
    assert stats.total_reconnects == 2
    assert len(recorder.get_events(TelemetryAction.STREAM_CONNECT)) == 2
    logger.info(f"Session telemetry: {stats.to_dict()}")
