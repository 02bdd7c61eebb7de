"""Build checkable proofs and claim ids for each claim type."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Final
from urllib.parse import urlsplit

from .errors import InvalidSubjectIdError, InvalidTargetError, UnsafeUrlError
from .model import (
    AnchorSite,
    Claim,
    ClaimStatus,
    ClaimType,
    CodeHostReadmeProof,
    DnsTxtProof,
    ProfilePageProof,
    Proof,
    WellKnownProof,
    utc_now,
)
from .ssrf import check_url
from .urls import is_uuid, normalize_identity_url, normalize_url

if TYPE_CHECKING:
    from datetime import datetime

log = logging.getLogger(__name__)

DNS_PROOF_LABEL: Final[str] = "_anchor"
DNS_TOKEN_PREFIX: Final[str] = "anchor="

_HANDLE_RE = re.compile(r"^@?([^@\s]+)@([^@\s]+)$")


def parse_profile_handle(value: str) -> str | None:
    """Expand ``@user@host`` (or ``user@host``) into ``https://host/@user``."""

    if "://" in value:
        return None
    match = _HANDLE_RE.match(value.strip())
    if match is None:
        return None
    username, instance = match.groups()
    if "/" in instance:
        return None
    return f"https://{instance}/@{username}"


def _hostname(target: str) -> str:
    host = target.strip()
    if "://" in host:
        try:
            host = urlsplit(host).hostname or ""
        except ValueError:
            host = ""
    return host.lower()


def _first_path_segment(url: str) -> str:
    try:
        path = urlsplit(url).path
    except ValueError:
        return ""
    segments = [segment for segment in path.split("/") if segment]
    return segments[0].lower() if segments else ""


def dns_qname_for(target: str) -> str:
    qname = _hostname(normalize_identity_url(target)).rstrip(".")
    if qname.startswith(f"{DNS_PROOF_LABEL}."):
        return qname
    return f"{DNS_PROOF_LABEL}.{qname}"


def dns_token_for(subject_id: str) -> str:
    return f"{DNS_TOKEN_PREFIX}urn:uuid:{subject_id.lower()}"


# ----------------------------------------------------------------------
# claim ids
# ----------------------------------------------------------------------


def claim_id_for_website(url: str) -> str:
    host = _hostname(url)
    return f"{ClaimType.WEBSITE}:{host or url}"


def claim_id_for_code_host(url: str) -> str:
    user = _first_path_segment(url)
    return f"{ClaimType.CODE_HOST}:{user or url}"


def claim_id_for_dns(qname: str) -> str:
    return f"{ClaimType.DNS}:{qname.lower()}"


def claim_id_for_public_profile(url: str) -> str:
    try:
        parts = urlsplit(url)
    except ValueError:
        return f"{ClaimType.PUBLIC_PROFILE}:{url}"
    if not parts.hostname:
        return f"{ClaimType.PUBLIC_PROFILE}:{url}"
    return f"{ClaimType.PUBLIC_PROFILE}:{parts.hostname.lower()}{parts.path.rstrip('/')}"


# ----------------------------------------------------------------------
# proofs
# ----------------------------------------------------------------------


def build_well_known_proof(target: str, site: AnchorSite, subject_url: str) -> WellKnownProof:
    return WellKnownProof(url=site.well_known_url(_hostname(target)), must_contain=subject_url)


def build_code_host_readme_proof(
    profile_url: str, site: AnchorSite, subject_url: str
) -> CodeHostReadmeProof:
    user = _first_path_segment(profile_url)
    url = site.code_host_readme_url(user) if user else profile_url
    return CodeHostReadmeProof(url=url, must_contain=subject_url)


def build_dns_proof(target: str, subject_id: str) -> DnsTxtProof:
    return DnsTxtProof(qname=dns_qname_for(target), expected_token=dns_token_for(subject_id))


def build_profile_page_proof(url: str, subject_url: str) -> ProfilePageProof:
    check = check_url(url)
    if not check.ok:
        reason = str(check.reason)
        log.warning("Rejected profile target %s: %s", url, reason)
        raise UnsafeUrlError(url, reason)
    return ProfilePageProof(url=url, must_contain=subject_url)


def build_claim(
    subject_id: str,
    claim_type: ClaimType | str,
    target: str,
    *,
    site: AnchorSite | None = None,
    now: datetime | None = None,
) -> Claim:
    """Build a fresh ``self_asserted`` claim for ``target``.

    The claim url is the canonical form of the target (for DNS claims, the
    ``https`` URL of the domain) and the id is ``<type>:<normalized key>``.
    """

    if not is_uuid(subject_id.strip()):
        raise InvalidSubjectIdError(f"Not a UUID: {subject_id!r}")
    subject_id = subject_id.strip().lower()
    try:
        kind = ClaimType(claim_type)
    except ValueError as exc:
        raise InvalidTargetError(f"Unsupported claim type: {claim_type!r}") from exc
    if not target or not target.strip():
        raise InvalidTargetError("Claim target is empty")

    active_site = site or AnchorSite()
    subject_url = active_site.resolve_url(subject_id)
    claim_id, url, proof = _claim_parts(kind, target, active_site, subject_id, subject_url)

    timestamp = now or utc_now()
    return Claim(
        id=claim_id,
        type=kind,
        url=url,
        status=ClaimStatus.SELF_ASSERTED,
        proof=proof,
        created_at=timestamp,
        updated_at=timestamp,
    )


def _claim_parts(
    kind: ClaimType,
    target: str,
    site: AnchorSite,
    subject_id: str,
    subject_url: str,
) -> tuple[str, str, Proof]:
    match kind:
        case ClaimType.WEBSITE:
            url = _canonical_target(target)
            return claim_id_for_website(url), url, build_well_known_proof(url, site, subject_url)
        case ClaimType.CODE_HOST:
            url = _canonical_target(target)
            proof = build_code_host_readme_proof(url, site, subject_url)
            return claim_id_for_code_host(url), url, proof
        case ClaimType.DNS:
            proof = build_dns_proof(target, subject_id)
            domain = proof.qname.removeprefix(f"{DNS_PROOF_LABEL}.")
            if not domain or domain == DNS_PROOF_LABEL:
                raise InvalidTargetError(f"Not a domain: {target!r}")
            return claim_id_for_dns(proof.qname), f"https://{domain}", proof
        case ClaimType.PUBLIC_PROFILE:
            profile_url = parse_profile_handle(target) or target.strip()
            proof = build_profile_page_proof(profile_url, subject_url)
            url = _canonical_target(profile_url)
            return claim_id_for_public_profile(url), url, proof


def _canonical_target(target: str) -> str:
    canonical = normalize_url(normalize_identity_url(target))
    if canonical is None:
        raise InvalidTargetError(f"Not a URL or domain: {target!r}")
    return canonical
