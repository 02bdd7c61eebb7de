from __future__ import annotations

import pytest

from anchorid.domain.ssrf import GuardReason, check_url, is_safe_url


@pytest.mark.parametrize(
    ("url", "reason"),
    [
        ("https://169.254.169.254/", GuardReason.BLOCKED_METADATA_ENDPOINT),
        ("https://169.254.1.1/latest", GuardReason.BLOCKED_METADATA_ENDPOINT),
        ("https://10.1.2.3/", GuardReason.BLOCKED_PRIVATE_IP),
        ("https://192.168.0.5/", GuardReason.BLOCKED_PRIVATE_IP),
        ("https://172.16.0.1/", GuardReason.BLOCKED_PRIVATE_IP),
        ("https://172.31.255.255/", GuardReason.BLOCKED_PRIVATE_IP),
        ("https://127.0.0.1/", GuardReason.BLOCKED_LOOPBACK),
        ("https://127.9.9.9:8443/x", GuardReason.BLOCKED_LOOPBACK),
        ("https://localhost/", GuardReason.BLOCKED_LOCALHOST),
        ("https://LOCALHOST./", GuardReason.BLOCKED_LOCALHOST),
        ("https://0.0.0.0/", GuardReason.BLOCKED_LOCALHOST),
        ("http://example.com/", GuardReason.MUST_BE_HTTPS),
        ("ftp://example.com/", GuardReason.MUST_BE_HTTPS),
        ("https:///no-host", GuardReason.INVALID_URL),
        ("not a url", GuardReason.INVALID_URL),
    ],
)
def test_check_url_rejects_blocked_targets(url: str, reason: GuardReason) -> None:
    result = check_url(url)

    assert not result.ok
    assert result.reason is reason


@pytest.mark.parametrize(
    ("url", "reason"),
    [
        ("https://2130706433/", GuardReason.BLOCKED_LOOPBACK),
        ("https://0x7f000001/", GuardReason.BLOCKED_LOOPBACK),
        ("https://127.1/", GuardReason.BLOCKED_LOOPBACK),
        ("https://[::1]/", GuardReason.BLOCKED_LOOPBACK),
        ("https://[fe80::1]/", GuardReason.BLOCKED_METADATA_ENDPOINT),
        ("https://[fd00::1]/", GuardReason.BLOCKED_PRIVATE_IP),
        ("https://[::ffff:10.0.0.1]/", GuardReason.BLOCKED_PRIVATE_IP),
    ],
)
def test_check_url_rejects_alternate_address_spellings(url: str, reason: GuardReason) -> None:
    assert check_url(url).reason is reason


@pytest.mark.parametrize(
    "url",
    [
        "https://example.com/",
        "https://172.15.0.1/",
        "https://172.32.0.1/",
        "https://8.8.8.8/",
        "https://[2606:4700:4700::1111]/",
        "https://10.example.com/",
    ],
)
def test_check_url_accepts_public_targets(url: str) -> None:
    result = check_url(url)

    assert result.ok
    assert result.reason is None
    assert is_safe_url(url)
