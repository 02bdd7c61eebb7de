"""DNS-over-HTTPS configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import env_or_default
from .http_resilience import NO_RETRY, RateLimit, ResilienceConfig

DEFAULT_DOH_ENDPOINT = "https://cloudflare-dns.com/dns-query"
DOH_TIMEOUT_SECONDS = 2.5
DOH_ACCEPT = "application/dns-json"
DOH_RATE_LIMIT = RateLimit(max_calls=10, per_seconds=1.0)


@dataclass(frozen=True, slots=True)
class DnsCachePolicy:
    success_ttl_cap_seconds: int = 900
    failure_ttl_seconds: int = 120
    key_prefix: str = "dnscache:"


@dataclass(frozen=True, slots=True)
class DohConfig:
    """DoH resolver settings.

    Retries are handled by the resolver itself (one retry of transient failures),
    so the transport-level retry policy is disabled.
    """

    endpoint: str = DEFAULT_DOH_ENDPOINT
    timeout_seconds: float = DOH_TIMEOUT_SECONDS
    max_retries: int = 1
    retry_backoff_seconds: float = 0.1
    resilience: ResilienceConfig = field(
        default_factory=lambda: _doh_resilience(DOH_TIMEOUT_SECONDS)
    )


def _doh_resilience(timeout_seconds: float) -> ResilienceConfig:
    return ResilienceConfig(
        name="doh",
        timeout_seconds=timeout_seconds,
        retry=NO_RETRY,
        ratelimit=DOH_RATE_LIMIT,
        default_headers={"Accept": DOH_ACCEPT},
    )


def get_doh_config(*, resilience: ResilienceConfig | None = None) -> DohConfig:
    return DohConfig(
        endpoint=env_or_default("ANCHORID_DOH_ENDPOINT", DEFAULT_DOH_ENDPOINT),
        resilience=resilience or _doh_resilience(DOH_TIMEOUT_SECONDS),
    )
