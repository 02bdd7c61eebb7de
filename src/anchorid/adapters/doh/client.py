"""DNS-over-HTTPS TXT resolver."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from anchorid.adapters.http_resilience import ResilientClient
from anchorid.config.doh import DohConfig
from anchorid.domain.model import FailReason, FailureCode
from anchorid.domain.model import failures as fail
from anchorid.domain.ports import TxtLookupResult, TxtResolver

from .schema import DohResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from anchorid.config.http_resilience import ResilienceConfig

log = getLogger(__name__)


class DohClient:
    """Resolve TXT records through a DoH JSON endpoint.

    One bounded attempt, plus ``max_retries`` further attempts for transient
    failures only. NXDOMAIN-style answers and empty TXT sets are final.
    """

    def __init__(
        self,
        *,
        config: DohConfig | None = None,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config or DohConfig()
        self._client_factory = client_factory or ResilientClient

    async def query_txt(self, qname: str) -> TxtLookupResult:
        attempts = 1 + max(self._config.max_retries, 0)
        result = TxtLookupResult(ok=False, error=FailReason(FailureCode.DNS_QUERY_FAILED))
        async with self._client_factory(self._config.resilience) as client:
            for attempt in range(attempts):
                if attempt:
                    await asyncio.sleep(self._config.retry_backoff_seconds)
                result = await self._query_once(client, qname)
                if result.ok or result.error is None or not result.error.is_transient:
                    return result
                log.debug("Transient DoH failure for %s: %s", qname, result.error)
        return result

    async def _query_once(self, client: ResilientClient, qname: str) -> TxtLookupResult:
        try:
            async with asyncio.timeout(self._config.timeout_seconds):
                response = await client.get(
                    self._config.endpoint,
                    params={"name": qname, "type": "TXT"},
                )
        except (TimeoutError, httpx.TimeoutException):
            return TxtLookupResult(ok=False, error=fail.timeout())
        except httpx.HTTPError as exc:
            return TxtLookupResult(ok=False, error=fail.fetch_error(type(exc).__name__))

        if not response.is_success:
            return TxtLookupResult(ok=False, error=fail.doh_status(response.status_code))

        try:
            payload = DohResponse.model_validate_json(response.content)
        except ValidationError:
            log.warning("Malformed DoH response for %s", qname)
            return TxtLookupResult(ok=False, error=fail.fetch_error("invalid_response"))

        if payload.status != 0:
            return TxtLookupResult(ok=False, error=fail.dns_status(payload.status))

        answers = payload.txt_answers()
        txt_values = [answer.data for answer in answers if answer.data]
        if not txt_values:
            return TxtLookupResult(ok=False, error=FailReason(FailureCode.NO_TXT_RECORDS))

        ttls = [answer.ttl for answer in answers if answer.ttl is not None and answer.ttl > 0]
        return TxtLookupResult(ok=True, txt_values=txt_values, ttl=min(ttls) if ttls else None)


if TYPE_CHECKING:
    _resolver_check: TxtResolver = DohClient()
