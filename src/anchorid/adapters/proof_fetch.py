"""SSRF-guarded plain-text fetcher for HTTP proof documents."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import urljoin

import httpx

from anchorid.adapters.http_resilience import ResilientClient
from anchorid.config.proof_fetch import ProofFetchConfig
from anchorid.domain.model import failures as fail
from anchorid.domain.ports import FetchResult, ProofFetcher
from anchorid.domain.ssrf import check_url

if TYPE_CHECKING:
    from collections.abc import Callable

    from anchorid.config.http_resilience import ResilienceConfig

log = getLogger(__name__)


class HttpProofFetcher:
    """Fetch proof URLs as text, following redirects one checked hop at a time.

    The HTTP client never follows redirects itself. Each ``Location`` is resolved
    against the current URL and passed through the SSRF guard before it is
    requested, so a proof URL cannot bounce the fetch into a private network.
    """

    def __init__(
        self,
        *,
        config: ProofFetchConfig | None = None,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config or ProofFetchConfig()
        self._client_factory = client_factory or ResilientClient

    async def fetch_text(self, url: str) -> FetchResult:
        async with self._client_factory(self._config.resilience) as client:
            try:
                return await self._follow(client, url)
            except httpx.TimeoutException:
                log.info("Proof fetch timed out: %s", url)
                return FetchResult(ok=False, error=fail.timeout())
            except httpx.HTTPError as exc:
                log.info("Proof fetch failed for %s: %s", url, type(exc).__name__)
                return FetchResult(ok=False, error=fail.fetch_error(type(exc).__name__))

    async def _follow(self, client: ResilientClient, url: str) -> FetchResult:
        current = url
        for _ in range(self._config.max_redirects + 1):
            check = check_url(current)
            if not check.ok:
                log.warning("Refusing to fetch %s: %s", current, check.reason)
                return FetchResult(ok=False, error=fail.unsafe_url(str(check.reason)))

            response = await client.get(current, follow_redirects=False)
            if response.is_redirect:
                current = urljoin(current, response.headers["location"])
                log.debug("Following redirect to %s", current)
                continue

            if not response.is_success:
                return FetchResult(ok=False, status=response.status_code)
            return FetchResult(ok=True, status=response.status_code, text=response.text)

        return FetchResult(ok=False, error=fail.fetch_error("too_many_redirects"))


if TYPE_CHECKING:
    _fetcher_check: ProofFetcher = HttpProofFetcher()
