"""Claim aggregate and its stored JSON shape."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .enums import ClaimStatus, ClaimType
from .failures import FailReason
from .proofs import Proof, proof_from_dict, proof_to_dict
from .timestamps import format_timestamp, parse_timestamp

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, slots=True, kw_only=True)
class Claim:
    """An assertion that a subject controls an external resource.

    ``id`` is derived from the claim type and the normalized target, so
    re-submitting the same target replaces the stored claim instead of adding one.
    """

    id: str
    type: ClaimType
    url: str
    status: ClaimStatus
    proof: Proof
    created_at: datetime
    updated_at: datetime
    last_checked_at: datetime | None = None
    verified_at: datetime | None = None
    fail_reason: FailReason | None = None

    @property
    def is_verified(self) -> bool:
        return self.status is ClaimStatus.VERIFIED

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": str(self.type),
            "url": self.url,
            "status": str(self.status),
            "proof": proof_to_dict(self.proof),
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }
        if self.last_checked_at is not None:
            data["lastCheckedAt"] = format_timestamp(self.last_checked_at)
        if self.verified_at is not None:
            data["verifiedAt"] = format_timestamp(self.verified_at)
        if self.fail_reason is not None:
            data["failReason"] = str(self.fail_reason)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Claim:
        proof_payload = data.get("proof")
        if not isinstance(proof_payload, dict):
            raise ValueError(f"Claim {data.get('id')!r} has no proof object")
        fail_reason = data.get("failReason")
        return cls(
            id=str(data["id"]),
            type=ClaimType(data["type"]),
            url=str(data.get("url", "")),
            status=ClaimStatus(data["status"]),
            proof=proof_from_dict(proof_payload),
            created_at=parse_timestamp(data["createdAt"]),
            updated_at=parse_timestamp(data["updatedAt"]),
            last_checked_at=_optional_timestamp(data.get("lastCheckedAt")),
            verified_at=_optional_timestamp(data.get("verifiedAt")),
            fail_reason=FailReason.parse(fail_reason) if fail_reason else None,
        )


def _optional_timestamp(value: object) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    return parse_timestamp(value)
