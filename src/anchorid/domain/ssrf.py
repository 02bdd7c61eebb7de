"""Guard for URLs the engine is about to fetch.

Only ``https`` is accepted, and hosts that resolve to loopback, link-local
(including cloud metadata at ``169.254.169.254``) or private address space are
rejected by literal address. Hostnames are not resolved here.
"""

from __future__ import annotations

import ipaddress
import logging
import re
import socket
from dataclasses import dataclass
from enum import StrEnum
from urllib.parse import SplitResult, urlsplit

log = logging.getLogger(__name__)

type IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


class GuardReason(StrEnum):
    INVALID_URL = "invalid_url"
    MUST_BE_HTTPS = "must_be_https"
    BLOCKED_LOCALHOST = "blocked_localhost"
    BLOCKED_LOOPBACK = "blocked_loopback"
    BLOCKED_METADATA_ENDPOINT = "blocked_metadata_endpoint"
    BLOCKED_PRIVATE_IP = "blocked_private_ip"


_LOCAL_HOSTNAMES = frozenset({"localhost", "0.0.0.0"})  # noqa: S104

_BLOCKED_NETWORKS: tuple[tuple[ipaddress.IPv4Network | ipaddress.IPv6Network, GuardReason], ...] = (
    (ipaddress.ip_network("127.0.0.0/8"), GuardReason.BLOCKED_LOOPBACK),
    (ipaddress.ip_network("::1/128"), GuardReason.BLOCKED_LOOPBACK),
    (ipaddress.ip_network("169.254.0.0/16"), GuardReason.BLOCKED_METADATA_ENDPOINT),
    (ipaddress.ip_network("fe80::/10"), GuardReason.BLOCKED_METADATA_ENDPOINT),
    (ipaddress.ip_network("10.0.0.0/8"), GuardReason.BLOCKED_PRIVATE_IP),
    (ipaddress.ip_network("192.168.0.0/16"), GuardReason.BLOCKED_PRIVATE_IP),
    (ipaddress.ip_network("172.16.0.0/12"), GuardReason.BLOCKED_PRIVATE_IP),
    (ipaddress.ip_network("fc00::/7"), GuardReason.BLOCKED_PRIVATE_IP),
)

# digits, hex and dots only: candidates for inet_aton's legacy IPv4 spellings
_LEGACY_IPV4_RE = re.compile(r"^(0x[0-9a-f]+|[0-9]+)(\.(0x[0-9a-f]+|[0-9]+)){0,3}$")


@dataclass(frozen=True, slots=True)
class UrlCheck:
    ok: bool
    reason: GuardReason | None = None
    parts: SplitResult | None = None


def check_url(url: str) -> UrlCheck:
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return UrlCheck(ok=False, reason=GuardReason.INVALID_URL)
    if not parts.scheme or not parts.hostname:
        return UrlCheck(ok=False, reason=GuardReason.INVALID_URL)

    if parts.scheme.lower() != "https":
        return UrlCheck(ok=False, reason=GuardReason.MUST_BE_HTTPS)

    hostname = parts.hostname.lower().rstrip(".")
    if hostname in _LOCAL_HOSTNAMES:
        return UrlCheck(ok=False, reason=GuardReason.BLOCKED_LOCALHOST)

    address = _literal_address(hostname)
    if address is not None:
        if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
            address = address.ipv4_mapped
        if address.is_unspecified:
            return UrlCheck(ok=False, reason=GuardReason.BLOCKED_LOCALHOST)
        for network, reason in _BLOCKED_NETWORKS:
            if address.version == network.version and address in network:
                return UrlCheck(ok=False, reason=reason)

    return UrlCheck(ok=True, parts=parts)


def is_safe_url(url: str) -> bool:
    return check_url(url).ok


def _literal_address(hostname: str) -> IPAddress | None:
    try:
        return ipaddress.ip_address(hostname)
    except ValueError:
        pass
    if _LEGACY_IPV4_RE.match(hostname):
        try:
            return ipaddress.IPv4Address(socket.inet_aton(hostname))
        except OSError:
            log.debug("Host %s looks numeric but is not an IPv4 address", hostname)
    return None
