"""Domain model: claims, proofs, failure reasons and the anchoring site."""

from __future__ import annotations

from .claims import Claim
from .enums import ClaimStatus, ClaimType, EntityType, ProofKind
from .failures import FailReason, FailureCode
from .proofs import (
    CodeHostReadmeProof,
    DnsTxtProof,
    HttpProof,
    ProfilePageProof,
    Proof,
    UnsupportedProof,
    WellKnownProof,
    proof_from_dict,
    proof_to_dict,
)
from .site import AnchorSite
from .timestamps import format_timestamp, parse_timestamp, utc_now

__all__ = [
    "AnchorSite",
    "Claim",
    "ClaimStatus",
    "ClaimType",
    "CodeHostReadmeProof",
    "DnsTxtProof",
    "EntityType",
    "FailReason",
    "FailureCode",
    "HttpProof",
    "ProfilePageProof",
    "Proof",
    "ProofKind",
    "UnsupportedProof",
    "WellKnownProof",
    "format_timestamp",
    "parse_timestamp",
    "proof_from_dict",
    "proof_to_dict",
    "utc_now",
]
