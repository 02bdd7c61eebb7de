"""Proof variants: where to look and what must be found there."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .enums import ProofKind


@dataclass(frozen=True, slots=True)
class WellKnownProof:
    KIND: ClassVar[ProofKind] = ProofKind.WELL_KNOWN

    url: str
    must_contain: str


@dataclass(frozen=True, slots=True)
class CodeHostReadmeProof:
    KIND: ClassVar[ProofKind] = ProofKind.CODE_HOST_README

    url: str
    must_contain: str


@dataclass(frozen=True, slots=True)
class ProfilePageProof:
    KIND: ClassVar[ProofKind] = ProofKind.PROFILE_PAGE

    url: str
    must_contain: str


@dataclass(frozen=True, slots=True)
class DnsTxtProof:
    KIND: ClassVar[ProofKind] = ProofKind.DNS_TXT

    qname: str
    expected_token: str


@dataclass(frozen=True, slots=True)
class UnsupportedProof:
    """A stored proof whose ``kind`` this engine does not know how to check."""

    kind: str
    payload: dict[str, object]


type HttpProof = WellKnownProof | CodeHostReadmeProof | ProfilePageProof
type Proof = HttpProof | DnsTxtProof | UnsupportedProof


def proof_to_dict(proof: Proof) -> dict[str, object]:
    match proof:
        case WellKnownProof() | CodeHostReadmeProof() | ProfilePageProof():
            return {"kind": str(proof.KIND), "url": proof.url, "mustContain": proof.must_contain}
        case DnsTxtProof():
            return {
                "kind": str(proof.KIND),
                "qname": proof.qname,
                "expectedToken": proof.expected_token,
            }
        case UnsupportedProof():
            return {**proof.payload, "kind": proof.kind}


def proof_from_dict(payload: dict[str, object]) -> Proof:
    kind = str(payload.get("kind", ""))
    match kind:
        case ProofKind.WELL_KNOWN:
            return WellKnownProof(
                url=_text(payload, "url"), must_contain=_text(payload, "mustContain")
            )
        case ProofKind.CODE_HOST_README:
            return CodeHostReadmeProof(
                url=_text(payload, "url"), must_contain=_text(payload, "mustContain")
            )
        case ProofKind.PROFILE_PAGE:
            return ProfilePageProof(
                url=_text(payload, "url"), must_contain=_text(payload, "mustContain")
            )
        case ProofKind.DNS_TXT:
            return DnsTxtProof(
                qname=_text(payload, "qname"), expected_token=_text(payload, "expectedToken")
            )
        case _:
            rest = {key: value for key, value in payload.items() if key != "kind"}
            return UnsupportedProof(kind=kind, payload=rest)


def _text(payload: dict[str, object], key: str) -> str:
    value = payload.get(key)
    return value if isinstance(value, str) else ""
