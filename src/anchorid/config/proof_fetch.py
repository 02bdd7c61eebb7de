"""Proof fetch configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import env_or_default
from .http_resilience import ResilienceConfig, RetryPolicy

DEFAULT_USER_AGENT = "AnchorID-ClaimVerifier/1.0"
PROOF_ACCEPT = "text/plain,text/*;q=0.9,*/*;q=0.1"
PROOF_TIMEOUT_SECONDS = 10.0
MAX_REDIRECTS = 5


def _proof_resilience(user_agent: str) -> ResilienceConfig:
    return ResilienceConfig(
        name="proof_fetch",
        timeout_seconds=PROOF_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=2),
        default_headers={"User-Agent": user_agent, "Accept": PROOF_ACCEPT},
    )


@dataclass(frozen=True, slots=True)
class ProofFetchConfig:
    resilience: ResilienceConfig = field(
        default_factory=lambda: _proof_resilience(DEFAULT_USER_AGENT)
    )
    max_redirects: int = MAX_REDIRECTS


def get_proof_fetch_config(*, resilience: ResilienceConfig | None = None) -> ProofFetchConfig:
    user_agent = env_or_default("ANCHORID_USER_AGENT", DEFAULT_USER_AGENT)
    return ProofFetchConfig(resilience=resilience or _proof_resilience(user_agent))
