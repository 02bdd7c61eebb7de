"""Per-subject claim lists over the shared key-value store."""

from __future__ import annotations

import dataclasses
import json
from logging import getLogger
from typing import TYPE_CHECKING, Any

from .errors import ClaimNotFoundError, InvalidClaimIdError, InvalidSubjectIdError
from .model import Claim
from .urls import is_uuid

if TYPE_CHECKING:
    from .ports import KeyValueStore

log = getLogger(__name__)

CLAIMS_KEY_PREFIX = "claims:"


def claims_key(subject_id: str) -> str:
    return f"{CLAIMS_KEY_PREFIX}{require_subject_id(subject_id)}"


def require_subject_id(subject_id: str) -> str:
    candidate = subject_id.strip() if isinstance(subject_id, str) else ""
    if not is_uuid(candidate):
        raise InvalidSubjectIdError(f"Not a UUID: {subject_id!r}")
    return candidate.lower()


def require_claim_id(claim_id: str) -> str:
    candidate = claim_id.strip() if isinstance(claim_id, str) else ""
    kind, sep, key = candidate.partition(":")
    if not kind or not sep or not key:
        raise InvalidClaimIdError(f"Malformed claim id: {claim_id!r}")
    return candidate


class ClaimRepository:
    """Append/replace list of claims per subject, stored as one JSON array.

    Entries that do not parse as a ``Claim`` are skipped on read but written
    back unchanged by every mutation, so an older or unknown wire form is never
    lost because another claim of the same subject changed.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def load(self, subject_id: str) -> list[Claim]:
        claims: list[Claim] = []
        for item in self._load_entries(subject_id):
            claim = _parse_entry(item)
            if claim is None:
                log.warning("Skipping unreadable claim for %s: %r", subject_id, item)
                continue
            claims.append(claim)
        return claims

    def save(self, subject_id: str, claims: list[Claim]) -> None:
        self._save_entries(subject_id, [claim.to_dict() for claim in claims])

    def find(self, subject_id: str, claim_id: str) -> Claim | None:
        wanted = require_claim_id(claim_id)
        return next((claim for claim in self.load(subject_id) if claim.id == wanted), None)

    def get(self, subject_id: str, claim_id: str) -> Claim:
        claim = self.find(subject_id, claim_id)
        if claim is None:
            raise ClaimNotFoundError(f"No claim {claim_id!r} for subject {subject_id!r}")
        return claim

    def upsert(self, subject_id: str, claim: Claim) -> Claim:
        """Insert ``claim`` or replace the one with the same id.

        A replaced claim keeps its stored ``createdAt``. When the proof is
        unchanged it also keeps the stored verification state, so re-submitting
        a target never moves a checked claim back to ``self_asserted``.
        """

        entries = self._load_entries(subject_id)
        for index, item in enumerate(entries):
            if _entry_id(item) != claim.id:
                continue
            existing = _parse_entry(item)
            if existing is not None:
                claim = _carry_over(existing, claim)
            entries[index] = claim.to_dict()
            break
        else:
            entries.append(claim.to_dict())
        self._save_entries(subject_id, entries)
        return claim

    def replace(self, subject_id: str, claim: Claim) -> Claim:
        """Store an updated version of an existing claim."""

        entries = self._load_entries(subject_id)
        for index, item in enumerate(entries):
            if _entry_id(item) == claim.id:
                entries[index] = claim.to_dict()
                self._save_entries(subject_id, entries)
                return claim
        raise ClaimNotFoundError(f"No claim {claim.id!r} for subject {subject_id!r}")

    def remove(self, subject_id: str, claim_id: str) -> bool:
        wanted = require_claim_id(claim_id)
        entries = self._load_entries(subject_id)
        remaining = [item for item in entries if _entry_id(item) != wanted]
        if len(remaining) == len(entries):
            return False
        self._save_entries(subject_id, remaining)
        return True

    def verified_urls(self, subject_id: str) -> list[str]:
        return [claim.url for claim in self.load(subject_id) if claim.is_verified]

    def _load_entries(self, subject_id: str) -> list[Any]:
        raw = self._store.get(claims_key(subject_id))
        if not raw:
            return []
        payload = json.loads(raw)
        if not isinstance(payload, list):
            log.warning("Ignoring non-list claim payload for %s", subject_id)
            return []
        return payload

    def _save_entries(self, subject_id: str, entries: list[Any]) -> None:
        self._store.put(claims_key(subject_id), json.dumps(entries, separators=(",", ":")))


def _entry_id(item: object) -> object:
    return item.get("id") if isinstance(item, dict) else None


def _parse_entry(item: object) -> Claim | None:
    if not isinstance(item, dict):
        return None
    try:
        return Claim.from_dict(item)
    except (KeyError, TypeError, ValueError):
        return None


def _carry_over(existing: Claim, submitted: Claim) -> Claim:
    if existing.proof != submitted.proof:
        return dataclasses.replace(submitted, created_at=existing.created_at)
    return dataclasses.replace(
        submitted,
        status=existing.status,
        created_at=existing.created_at,
        last_checked_at=existing.last_checked_at,
        verified_at=existing.verified_at,
        fail_reason=existing.fail_reason,
    )
