"""
Unit tests for the response decoder and the error taxonomy.

Every error path must carry the quota snapshot of the response.
"""
import json

import pytest

from stellar_horizon import api
from stellar_horizon.core.decoder import Problem, decode, raise_for_status
from stellar_horizon.core.errors import (
    BadRequestError,
    DecodeError,
    ErrorKind,
    NotFoundError,
    RateLimitedError,
    ServerError,
    ServiceError,
)
from stellar_horizon.core.page import Page
from stellar_horizon.core.rate_limit import RateLimit
from stellar_horizon.core.resource import Resource

QUOTA = {
    "X-Ratelimit-Limit": "100",
    "X-Ratelimit-Remaining": "0",
    "X-Ratelimit-Reset": "1700000000",
}


def problem(status, title, **extra):
    body = {"type": "https://stellar.org/horizon-errors/x", "title": title, "status": status}
    body.update(extra)
    return json.dumps(body).encode()


def page_body(records, next_href=None):
    links = {"self": {"href": "https://horizon.stellar.org/ledgers?cursor=&limit=10&order=asc"}}
    if next_href:
        links["next"] = {"href": next_href}
    return json.dumps({"_links": links, "_embedded": {"records": records}}).encode()


class TestSuccess:
    def test_single_resource(self):
        body = json.dumps({"id": "abc", "paging_token": "42", "sequence": 7}).encode()

        response = decode(200, QUOTA, body, api.ledgers.single(7))

        assert isinstance(response.value, Resource)
        assert response.value["sequence"] == 7
        assert response.value.paging_token == "42"
        assert response.rate_limit == RateLimit(100, 0, 1700000000)

    def test_page(self):
        body = page_body(
            [{"id": "1", "paging_token": "1"}, {"id": "2", "paging_token": "2"}],
            next_href="https://horizon.stellar.org/ledgers?cursor=2&limit=10&order=asc",
        )

        response = decode(200, {}, body, api.ledgers.all())

        page = response.value
        assert isinstance(page, Page)
        assert [r.id for r in page] == ["1", "2"]
        assert page.next_request().cursor == "2"
        assert page.previous_request() is None
        assert response.rate_limit is RateLimit.UNKNOWN

        again = page.self_request()
        assert again.kind is page.request.kind
        assert again.cursor == ""
        assert again.limit == 10
        assert again.url("https://horizon.stellar.org") == "https://horizon.stellar.org/ledgers?cursor=&limit=10&order=asc"

    def test_empty_page(self):
        response = decode(200, {}, page_body([]), api.ledgers.all())

        assert response.value.is_empty
        assert len(response.value) == 0

    def test_custom_resource_type(self):
        class Ledger:
            def __init__(self, sequence):
                self.sequence = sequence

            @classmethod
            def from_dict(cls, data):
                return cls(data["sequence"])

        body = json.dumps({"sequence": 9}).encode()

        response = decode(200, {}, body, api.ledgers.single(9).with_resource(Ledger))

        assert response.value.sequence == 9


class TestErrors:
    def test_rate_limited(self):
        with pytest.raises(RateLimitedError) as excinfo:
            decode(429, dict(QUOTA, **{"Retry-After": "5"}), problem(429, "Rate Limit Exceeded"), api.ledgers.all())

        error = excinfo.value
        assert error.kind is ErrorKind.RATE_LIMITED
        assert error.status == 429
        assert error.rate_limit == RateLimit(limit=100, remaining=0, reset=1700000000)
        assert error.retry_after == 5.0
        assert error.title == "Rate Limit Exceeded"

    def test_not_found(self):
        with pytest.raises(NotFoundError) as excinfo:
            decode(404, {}, problem(404, "Resource Missing"), api.accounts.single("GABC"))

        assert excinfo.value.kind is ErrorKind.NOT_FOUND
        assert excinfo.value.rate_limit is RateLimit.UNKNOWN

    def test_bad_request_keeps_problem(self):
        body = problem(400, "Bad Request", detail="invalid cursor", extras={"invalid_field": "cursor"})

        with pytest.raises(BadRequestError) as excinfo:
            decode(400, QUOTA, body, api.ledgers.all())

        error = excinfo.value
        assert error.detail == "invalid cursor"
        assert error.extras == {"invalid_field": "cursor"}
        assert error.problem_type == "https://stellar.org/horizon-errors/x"

    def test_unparseable_error_body(self):
        with pytest.raises(BadRequestError) as excinfo:
            decode(400, QUOTA, b"<html>nope</html>", api.ledgers.all())

        error = excinfo.value
        assert error.title is None
        assert error.body == "<html>nope</html>"
        assert error.rate_limit.limit == 100

    @pytest.mark.parametrize("status", [500, 503, 504])
    def test_server_error(self, status):
        with pytest.raises(ServerError) as excinfo:
            decode(status, {}, b"", api.ledgers.all())

        assert excinfo.value.kind is ErrorKind.SERVER_ERROR
        assert excinfo.value.status == status

    def test_other_client_status(self):
        with pytest.raises(ServiceError) as excinfo:
            decode(403, {}, problem(403, "Forbidden"), api.ledgers.all())

        assert excinfo.value.kind is ErrorKind.BAD_REQUEST
        assert not isinstance(excinfo.value, BadRequestError)

    def test_invalid_json(self):
        with pytest.raises(DecodeError) as excinfo:
            decode(200, QUOTA, b"{not json", api.ledgers.single(1))

        error = excinfo.value
        assert error.kind is ErrorKind.DECODE_FAILURE
        assert error.status == 200
        assert error.rate_limit.remaining == 0
        assert error.body.startswith("{not json")

    def test_page_without_records(self):
        with pytest.raises(DecodeError, match="_embedded"):
            decode(200, {}, b'{"_links": {}}', api.ledgers.all())

    def test_record_of_wrong_type(self):
        with pytest.raises(DecodeError):
            decode(200, {}, page_body([1, 2]), api.ledgers.all())

    def test_long_body_is_truncated(self):
        with pytest.raises(ServerError) as excinfo:
            decode(500, {}, b"x" * 10_000, api.ledgers.all())

        assert len(excinfo.value.body) == 256


class TestProblem:
    def test_parse(self):
        parsed = Problem.parse(problem(400, "Bad", detail="d", extras={"k": 1}))

        assert parsed.title == "Bad"
        assert parsed.status == 400
        assert parsed.extras == {"k": 1}

    @pytest.mark.parametrize("body", [b"", b"[]", b'{"error": "x"}', b"\xff"])
    def test_not_a_problem(self, body):
        assert Problem.parse(body) is None

    def test_raise_for_status_returns_quota_on_success(self):
        assert raise_for_status(204, QUOTA, b"") == RateLimit(100, 0, 1700000000)
