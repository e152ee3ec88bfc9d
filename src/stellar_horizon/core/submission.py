"""
Transaction submission results.

A rejected transaction is not a generic bad request: Horizon answers with a
``transaction_failed`` problem whose ``extras.result_codes`` holds one code
for the transaction and one per operation. Those responses decode into a
``SubmissionResult`` with ``successful=False``; every other failure raises
the usual ServiceError.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from .config import HeaderConfig
from .decoder import Problem, decode_json, decode_record, raise_for_status
from .errors import DecodeError
from .rate_limit import RateLimit, read_rate_limit
from .resource import Resource


@dataclass(frozen=True)
class SubmissionFailure:
    """
    Why the network rejected a transaction.

    Attributes:
        transaction_code: Transaction result code, e.g. "tx_failed"
        operation_codes: One result code per operation, in order, verbatim
        inner_transaction_code: Result code of the inner transaction of a
            fee bump, if any
        result_xdr: Base64 TransactionResult XDR
        envelope_xdr: Base64 envelope that was submitted
        hash: Transaction hash
        title: Problem title
        detail: Problem detail
        problem_type: Problem type
        extras: All problem extras, untouched
    """
    transaction_code: Optional[str]
    operation_codes: tuple[str, ...] = ()
    inner_transaction_code: Optional[str] = None
    result_xdr: Optional[str] = None
    envelope_xdr: Optional[str] = None
    hash: Optional[str] = None
    title: Optional[str] = None
    detail: Optional[str] = None
    problem_type: Optional[str] = None
    extras: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_problem(cls, problem: Problem) -> "SubmissionFailure":
        extras = problem.extras
        codes = extras.get("result_codes") or {}
        operations = codes.get("operations") or []
        return cls(
            transaction_code=codes.get("transaction"),
            operation_codes=tuple(str(code) for code in operations),
            inner_transaction_code=codes.get("inner_transaction"),
            result_xdr=extras.get("result_xdr"),
            envelope_xdr=extras.get("envelope_xdr"),
            hash=extras.get("hash"),
            title=problem.title,
            detail=problem.detail,
            problem_type=problem.type,
            extras=extras,
        )


@dataclass
class SubmissionResult:
    """
    Outcome of a transaction submission.

    Attributes:
        successful: Whether the transaction was included in a ledger
        status: HTTP status code
        transaction: The resulting transaction record, when successful
        failure: Result codes, when rejected
        rate_limit: Quota snapshot
    """
    successful: bool
    status: int
    transaction: Any = None
    failure: Optional[SubmissionFailure] = None
    rate_limit: RateLimit = field(default=RateLimit.UNKNOWN)


def is_transaction_failure(status: int, problem: Optional[Problem]) -> bool:
    if status != 400 or problem is None:
        return False
    if problem.type and problem.type.rstrip("/").endswith("transaction_failed"):
        return True
    return isinstance(problem.extras.get("result_codes"), dict)


def decode_submission(
    status: int,
    headers: Mapping[str, str],
    body: bytes,
    resource: Any = Resource,
    names: Optional[HeaderConfig] = None,
) -> SubmissionResult:
    """
    Decode the response to a transaction submission.

    Returns:
        SubmissionResult, successful or carrying the result codes

    Raises:
        ServiceError: For every failure that is not a transaction rejection
    """
    if 200 <= status < 300:
        rate_limit = read_rate_limit(headers, names)
        try:
            transaction = decode_record(decode_json(body), resource)
        except DecodeError as e:
            e.status = status
            e.rate_limit = rate_limit
            raise
        return SubmissionResult(
            successful=True,
            status=status,
            transaction=transaction,
            rate_limit=rate_limit,
        )

    problem = Problem.parse(body)
    if is_transaction_failure(status, problem):
        return SubmissionResult(
            successful=False,
            status=status,
            failure=SubmissionFailure.from_problem(problem),
            rate_limit=read_rate_limit(headers, names),
        )

    raise_for_status(status, headers, body, names)
    # raise_for_status only returns for 2xx, handled above
    raise AssertionError(f"unreachable for status {status}")
