"""Ports for reaching the external resources named by proofs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from anchorid.domain.model import FailReason


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Outcome of fetching a proof document as plain text.

    ``status`` is the final HTTP status when a response arrived; ``error`` is set
    when no usable response arrived at all (network error, blocked hop).
    """

    ok: bool
    status: int | None = None
    text: str = ""
    error: FailReason | None = None


@dataclass(frozen=True, slots=True)
class TxtLookupResult:
    ok: bool
    txt_values: list[str] = field(default_factory=list)
    error: FailReason | None = None
    ttl: int | None = None


@runtime_checkable
class ProofFetcher(Protocol):
    """Fetch a proof URL as text without following unchecked redirects."""

    async def fetch_text(self, url: str) -> FetchResult: ...


@runtime_checkable
class TxtResolver(Protocol):
    """Resolve TXT records for a name (one bounded attempt plus bounded retry)."""

    async def query_txt(self, qname: str) -> TxtLookupResult: ...


@runtime_checkable
class TxtLookup(Protocol):
    """TXT resolution as seen by verification, usually backed by a cache."""

    async def lookup(self, qname: str, *, bypass_cache: bool = False) -> TxtLookupResult: ...


__all__ = ["FetchResult", "ProofFetcher", "TxtLookup", "TxtLookupResult", "TxtResolver"]
