"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ClaimType(StrEnum):
    WEBSITE = "website"
    DNS = "dns"
    CODE_HOST = "code_host"
    PUBLIC_PROFILE = "public_profile"


class ClaimStatus(StrEnum):
    SELF_ASSERTED = "self_asserted"
    VERIFIED = "verified"
    FAILED = "failed"


class ProofKind(StrEnum):
    WELL_KNOWN = "well_known"
    CODE_HOST_README = "code_host_readme"
    DNS_TXT = "dns_txt"
    PROFILE_PAGE = "profile_page"


class EntityType(StrEnum):
    """JSON-LD ``@type`` of an identity record; fixed on first write."""

    PERSON = "Person"
    ORGANIZATION = "Organization"
