from __future__ import annotations

import asyncio

import httpx

from anchorid.adapters.http_resilience import ResilientClient, build_retry
from anchorid.config import NO_RETRY, RateLimit, ResilienceConfig, RetryPolicy


def test_build_retry_maps_policy() -> None:
    retry = build_retry(RetryPolicy(total=3, backoff_factor=0.5))

    assert retry.total == 3
    assert retry.backoff_factor == 0.5


def test_no_retry_policy_has_zero_budget() -> None:
    assert build_retry(NO_RETRY).total == 0


def test_client_sends_default_headers_through_rate_limiter() -> None:
    seen: list[httpx.Request] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text="ok")

    config = ResilienceConfig(
        name="test",
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        default_headers={"User-Agent": "anchorid-test"},
    )

    async def run() -> list[str]:
        async with ResilientClient(config) as client:
            client._client = httpx.AsyncClient(
                transport=httpx.MockTransport(handler),
                headers=dict(config.default_headers or {}),
            )
            responses = [await client.get("https://example.com/a") for _ in range(3)]
        return [response.text for response in responses]

    assert asyncio.run(run()) == ["ok", "ok", "ok"]
    assert len(seen) == 3
    assert all(request.headers["User-Agent"] == "anchorid-test" for request in seen)
