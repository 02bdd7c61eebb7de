"""Closed set of verification failure reasons.

Failure reasons travel as plain strings on stored claims (``failReason``), e.g.
``fetch_failed:404`` or ``dns_status:3``. In code they are ``FailReason`` values
so call sites can match exhaustively on ``FailureCode``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Self


class FailureCode(StrEnum):
    # transport / DNS
    TIMEOUT = "timeout"
    FETCH_ERROR = "fetch_error"
    DOH_STATUS = "doh_status"
    DNS_STATUS = "dns_status"
    NO_TXT_RECORDS = "no_txt_records"
    DNS_QUERY_FAILED = "dns_query_failed"
    # proof mismatch
    FETCH_FAILED = "fetch_failed"
    PROOF_NOT_FOUND = "proof_not_found"
    UNSAFE_URL = "unsafe_url"
    # configuration / contract violations
    INVALID_PROOF_KIND = "invalid_proof_kind"
    INVALID_EXPECTED_TOKEN = "invalid_expected_token"
    UNKNOWN_CLAIM_TYPE = "unknown_claim_type"
    KV_NOT_AVAILABLE = "kv_not_available"
    # unexpected
    VERIFY_ERROR = "verify_error"


PARAMETERIZED_CODES: frozenset[FailureCode] = frozenset(
    {
        FailureCode.FETCH_ERROR,
        FailureCode.DOH_STATUS,
        FailureCode.DNS_STATUS,
        FailureCode.FETCH_FAILED,
        FailureCode.UNSAFE_URL,
        FailureCode.VERIFY_ERROR,
    }
)

# DNS failures that describe the published state rather than the path to it
_AUTHORITATIVE_DNS_CODES = frozenset({FailureCode.DNS_STATUS, FailureCode.NO_TXT_RECORDS})


@dataclass(frozen=True, slots=True)
class FailReason:
    code: FailureCode
    detail: str | None = None

    def __str__(self) -> str:
        if self.detail is None:
            return str(self.code)
        return f"{self.code}:{self.detail}"

    @classmethod
    def parse(cls, value: str) -> Self:
        """Parse the wire form; the detail keeps any further colons verbatim."""

        head, sep, detail = value.partition(":")
        try:
            code = FailureCode(head)
        except ValueError as exc:
            raise ValueError(f"Unknown failure reason: {value!r}") from exc
        return cls(code=code, detail=detail if sep else None)

    @property
    def is_transient(self) -> bool:
        return self.code not in _AUTHORITATIVE_DNS_CODES


def timeout() -> FailReason:
    return FailReason(FailureCode.TIMEOUT)


def fetch_error(detail: str) -> FailReason:
    return FailReason(FailureCode.FETCH_ERROR, detail)


def fetch_failed(status: int) -> FailReason:
    return FailReason(FailureCode.FETCH_FAILED, str(status))


def doh_status(status: int) -> FailReason:
    return FailReason(FailureCode.DOH_STATUS, str(status))


def dns_status(status: int) -> FailReason:
    return FailReason(FailureCode.DNS_STATUS, str(status))


def unsafe_url(reason: str) -> FailReason:
    return FailReason(FailureCode.UNSAFE_URL, reason)


def verify_error(message: str) -> FailReason:
    return FailReason(FailureCode.VERIFY_ERROR, message)
