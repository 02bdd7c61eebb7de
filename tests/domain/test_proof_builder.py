from __future__ import annotations

import pytest

from anchorid.domain.errors import InvalidSubjectIdError, InvalidTargetError, UnsafeUrlError
from anchorid.domain.model import (
    AnchorSite,
    ClaimStatus,
    ClaimType,
    CodeHostReadmeProof,
    DnsTxtProof,
    ProfilePageProof,
    WellKnownProof,
)
from anchorid.domain.proof_builder import (
    build_claim,
    dns_qname_for,
    dns_token_for,
    parse_profile_handle,
)
from tests.support.fakes import FIXED_NOW, SUBJECT_ID, SUBJECT_URL


def test_website_claim_points_at_well_known_file() -> None:
    claim = build_claim(SUBJECT_ID, ClaimType.WEBSITE, "https://Example.com/", now=FIXED_NOW)

    assert claim.id == "website:example.com"
    assert claim.type is ClaimType.WEBSITE
    assert claim.url == "https://example.com"
    assert claim.status is ClaimStatus.SELF_ASSERTED
    assert claim.proof == WellKnownProof(
        url="https://example.com/.well-known/anchor.txt",
        must_contain=SUBJECT_URL,
    )
    assert claim.created_at == claim.updated_at == FIXED_NOW
    assert claim.verified_at is None
    assert claim.fail_reason is None


@pytest.mark.parametrize(
    ("claim_type", "first", "second"),
    [
        (ClaimType.WEBSITE, "Example.com/", "https://example.com"),
        (ClaimType.WEBSITE, "http://example.com:443/", "https://EXAMPLE.com/#top"),
        (ClaimType.DNS, "Example.com", "https://example.com/"),
        (ClaimType.DNS, "_anchor.example.com", "example.com"),
        (ClaimType.CODE_HOST, "github.com/Alice", "https://github.com/alice/"),
        (ClaimType.PUBLIC_PROFILE, "@alice@mastodon.social", "https://mastodon.social/@alice/"),
    ],
)
def test_equivalent_targets_share_a_claim_id(
    claim_type: ClaimType, first: str, second: str
) -> None:
    first_claim = build_claim(SUBJECT_ID, claim_type, first)
    second_claim = build_claim(SUBJECT_ID, claim_type, second)

    assert first_claim.id == second_claim.id


def test_dns_claim_uses_anchor_label_and_urn_token() -> None:
    claim = build_claim(SUBJECT_ID.upper(), "dns", "Example.com")

    assert claim.id == "dns:_anchor.example.com"
    assert claim.url == "https://example.com"
    assert claim.proof == DnsTxtProof(
        qname="_anchor.example.com",
        expected_token=f"anchor=urn:uuid:{SUBJECT_ID}",
    )


def test_dns_qname_keeps_explicit_anchor_label() -> None:
    assert dns_qname_for("_anchor.example.com") == "_anchor.example.com"
    assert dns_qname_for("https://www.example.com/about") == "_anchor.www.example.com"


def test_dns_token_lowercases_subject() -> None:
    assert dns_token_for(SUBJECT_ID.upper()) == f"anchor=urn:uuid:{SUBJECT_ID}"


def test_code_host_claim_reads_profile_readme() -> None:
    claim = build_claim(SUBJECT_ID, ClaimType.CODE_HOST, "https://github.com/SomeUser")

    assert claim.id == "code_host:someuser"
    assert claim.url == "https://github.com/SomeUser"
    assert claim.proof == CodeHostReadmeProof(
        url="https://raw.githubusercontent.com/someuser/someuser/main/README.md",
        must_contain=SUBJECT_URL,
    )


def test_public_profile_claim_expands_handle() -> None:
    claim = build_claim(SUBJECT_ID, ClaimType.PUBLIC_PROFILE, "@alice@mastodon.social")

    assert claim.id == "public_profile:mastodon.social/@alice"
    assert claim.url == "https://mastodon.social/@alice"
    assert claim.proof == ProfilePageProof(
        url="https://mastodon.social/@alice",
        must_contain=SUBJECT_URL,
    )


def test_public_profile_claim_rejects_private_targets() -> None:
    with pytest.raises(UnsafeUrlError) as exc:
        build_claim(SUBJECT_ID, ClaimType.PUBLIC_PROFILE, "https://10.0.0.5/profile")

    assert exc.value.reason == "blocked_private_ip"
    assert isinstance(exc.value, InvalidTargetError)



def test_public_profile_claim_rejects_plain_http() -> None:
    with pytest.raises(UnsafeUrlError) as exc:
        build_claim(SUBJECT_ID, ClaimType.PUBLIC_PROFILE, "http://social.example/@me")

    assert exc.value.reason == "must_be_https"


def test_public_profile_proof_uses_the_target_as_given() -> None:
    claim = build_claim(
        SUBJECT_ID, ClaimType.PUBLIC_PROFILE, "  https://Social.Example/@Me/#about "
    )

    assert claim.proof == ProfilePageProof(
        url="https://Social.Example/@Me/#about",
        must_contain=SUBJECT_URL,
    )
    assert claim.id == "public_profile:social.example/@Me"


def test_claim_honours_custom_site() -> None:
    site = AnchorSite(site_url="https://id.example.org/", proof_filename="id.txt")

    claim = build_claim(SUBJECT_ID, ClaimType.WEBSITE, "example.com", site=site)

    assert claim.proof == WellKnownProof(
        url="https://example.com/.well-known/id.txt",
        must_contain=f"https://id.example.org/resolve/{SUBJECT_ID}",
    )


@pytest.mark.parametrize(
    ("handle", "expected"),
    [
        ("@alice@mastodon.social", "https://mastodon.social/@alice"),
        ("alice@mastodon.social", "https://mastodon.social/@alice"),
        ("https://user@host.example", None),
        ("alice", None),
        ("@alice@host/path", None),
    ],
)
def test_parse_profile_handle(handle: str, expected: str | None) -> None:
    assert parse_profile_handle(handle) == expected


def test_build_claim_rejects_bad_subject() -> None:
    with pytest.raises(InvalidSubjectIdError):
        build_claim("not-a-uuid", ClaimType.WEBSITE, "example.com")


@pytest.mark.parametrize(
    ("claim_type", "target"),
    [
        (ClaimType.WEBSITE, ""),
        (ClaimType.WEBSITE, "   "),
        (ClaimType.WEBSITE, "https://"),
        ("email", "alice@example.com"),
    ],
)
def test_build_claim_rejects_bad_targets(claim_type: str, target: str) -> None:
    with pytest.raises(InvalidTargetError):
        build_claim(SUBJECT_ID, claim_type, target)
