"""Verification dispatcher: check a claim's proof and record the result.

Verification is demand-driven and idempotent. Every failure, including
unexpected exceptions from the network layer, comes back as a ``failed``
outcome with a reason; nothing raises past ``ClaimVerifier.verify``.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .dns_tokens import extract_uuid, txt_values_match
from .model import (
    AnchorSite,
    ClaimStatus,
    ClaimType,
    CodeHostReadmeProof,
    DnsTxtProof,
    FailReason,
    FailureCode,
    ProfilePageProof,
    UnsupportedProof,
    WellKnownProof,
    utc_now,
)
from .model import failures as fail

if TYPE_CHECKING:
    from datetime import datetime

    from .model import Claim, HttpProof
    from .ports import ProofFetcher, TxtLookup

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VerificationOutcome:
    status: ClaimStatus
    fail_reason: FailReason | None = None

    @classmethod
    def verified(cls) -> VerificationOutcome:
        return cls(status=ClaimStatus.VERIFIED)

    @classmethod
    def failed(cls, reason: FailReason) -> VerificationOutcome:
        return cls(status=ClaimStatus.FAILED, fail_reason=reason)


class ClaimVerifier:
    """Perform the type-appropriate check for a claim.

    ``txt_lookup`` is optional: without a store-backed lookup DNS claims fail
    with ``kv_not_available`` while HTTP-style claims still verify.
    """

    def __init__(
        self,
        *,
        fetcher: ProofFetcher,
        txt_lookup: TxtLookup | None = None,
        site: AnchorSite | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._txt_lookup = txt_lookup
        self._site = site or AnchorSite()

    async def verify(self, claim: Claim, *, bypass_cache: bool = False) -> VerificationOutcome:
        try:
            outcome = await self._dispatch(claim, bypass_cache=bypass_cache)
        except Exception as exc:  # noqa: BLE001
            log.warning("Verification of %s raised", claim.id, exc_info=True)
            outcome = VerificationOutcome.failed(fail.verify_error(str(exc) or type(exc).__name__))
        log.info(
            "Verified claim %s: status=%s reason=%s",
            claim.id,
            outcome.status,
            outcome.fail_reason,
        )
        return outcome

    async def _dispatch(self, claim: Claim, *, bypass_cache: bool) -> VerificationOutcome:
        if claim.type is ClaimType.DNS:
            if self._txt_lookup is None:
                return VerificationOutcome.failed(FailReason(FailureCode.KV_NOT_AVAILABLE))
            match claim.proof:
                case DnsTxtProof() as proof:
                    return await self._verify_dns(proof, self._txt_lookup, bypass_cache)
                case _:
                    return VerificationOutcome.failed(FailReason(FailureCode.INVALID_PROOF_KIND))

        match claim.proof:
            case WellKnownProof() | CodeHostReadmeProof() | ProfilePageProof() as proof:
                return await self._verify_http(proof)
            case DnsTxtProof() | UnsupportedProof():
                return VerificationOutcome.failed(FailReason(FailureCode.UNKNOWN_CLAIM_TYPE))

    async def _verify_http(self, proof: HttpProof) -> VerificationOutcome:
        result = await self._fetcher.fetch_text(proof.url)
        if not result.ok:
            if result.error is not None:
                return VerificationOutcome.failed(result.error)
            if result.status is not None:
                return VerificationOutcome.failed(fail.fetch_failed(result.status))
            return VerificationOutcome.failed(fail.fetch_error("no_response"))
        if proof.must_contain in result.text:
            return VerificationOutcome.verified()
        return VerificationOutcome.failed(FailReason(FailureCode.PROOF_NOT_FOUND))

    async def _verify_dns(
        self,
        proof: DnsTxtProof,
        txt_lookup: TxtLookup,
        bypass_cache: bool,
    ) -> VerificationOutcome:
        resolve_prefix = self._site.resolve_prefix
        expected_uuid = extract_uuid(proof.expected_token, resolve_prefix)
        if expected_uuid is None:
            return VerificationOutcome.failed(FailReason(FailureCode.INVALID_EXPECTED_TOKEN))

        result = await txt_lookup.lookup(proof.qname, bypass_cache=bypass_cache)
        if not result.ok:
            return VerificationOutcome.failed(
                result.error or FailReason(FailureCode.DNS_QUERY_FAILED)
            )

        if txt_values_match(result.txt_values, expected_uuid, resolve_prefix):
            return VerificationOutcome.verified()
        return VerificationOutcome.failed(FailReason(FailureCode.PROOF_NOT_FOUND))


def record_outcome(
    claim: Claim,
    outcome: VerificationOutcome,
    *,
    now: datetime | None = None,
) -> Claim:
    """Apply a verification outcome to a claim.

    ``lastCheckedAt`` and ``updatedAt`` always move to ``now``. ``verifiedAt`` is
    stamped only on the transition into ``verified`` and cleared for any other
    status. A successful re-check of an already verified claim does not re-stamp
    it, so ``verifiedAt`` is the first confirmation and ``lastCheckedAt`` the
    latest one.
    """

    timestamp = now or utc_now()
    if outcome.status is ClaimStatus.VERIFIED:
        verified_at = claim.verified_at if claim.is_verified and claim.verified_at else timestamp
        fail_reason = None
    else:
        verified_at = None
        fail_reason = outcome.fail_reason or FailReason(FailureCode.VERIFY_ERROR, "no_reason")

    return dataclasses.replace(
        claim,
        status=outcome.status,
        last_checked_at=timestamp,
        updated_at=timestamp,
        verified_at=verified_at,
        fail_reason=fail_reason,
    )
