"""Tests for single-flight de-duplication of cache-miss reads."""

import asyncio

import httpx
import pytest

from dashboard.services.container import build_container
from dashboard.services.deduplicator import RequestDeduplicator
from dashboard.settings import Settings


@pytest.mark.asyncio
class TestRequestDeduplicator:
    async def test_concurrent_callers_share_one_call(self) -> None:
        dedup = RequestDeduplicator()
        calls = 0
        release = asyncio.Event()

        async def fetch() -> str:
            nonlocal calls
            calls += 1
            await release.wait()
            return "value"

        waiters = [asyncio.create_task(dedup.dedupe("k", fetch)) for _ in range(3)]
        await asyncio.sleep(0)
        assert dedup.get_in_flight_count() == 1

        release.set()
        assert await asyncio.gather(*waiters) == ["value"] * 3
        assert calls == 1
        assert dedup.get_stats().deduplicated == 2
        assert dedup.get_in_flight_count() == 0

    async def test_errors_reach_every_waiter(self) -> None:
        dedup = RequestDeduplicator()

        async def fetch() -> str:
            await asyncio.sleep(0)
            raise RuntimeError("boom")

        results = await asyncio.gather(
            dedup.dedupe("k", fetch), dedup.dedupe("k", fetch), return_exceptions=True
        )
        assert all(isinstance(r, RuntimeError) for r in results)

    async def test_sequential_calls_run_again(self) -> None:
        dedup = RequestDeduplicator()
        calls = 0

        async def fetch() -> int:
            nonlocal calls
            calls += 1
            return calls

        assert await dedup.dedupe("k", fetch) == 1
        assert await dedup.dedupe("k", fetch) == 2


@pytest.mark.asyncio
async def test_single_flight_roles_listing(api) -> None:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(api.handler))
    settings = Settings(API_URL="http://api.test", RETRY_BASE_DELAY=0, SINGLE_FLIGHT=True)
    container = build_container(settings, http_client=http_client)

    pages = await asyncio.gather(
        *(container.role_service.get_roles(1, {}) for _ in range(4))
    )

    assert all(p == pages[0] for p in pages)
    assert api.count("GET", "/roles") == 1
    await http_client.aclose()



@pytest.mark.asyncio
async def test_container_close_cancels_in_flight_reads(api) -> None:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(api.handler))
    settings = Settings(API_URL="http://api.test", SINGLE_FLIGHT=True)
    container = build_container(settings, http_client=http_client)
    assert container.deduplicator is not None

    never = asyncio.Event()
    waiter = asyncio.create_task(container.deduplicator.dedupe("k", never.wait))
    await asyncio.sleep(0)
    assert container.deduplicator.get_in_flight_count() == 1

    await container.aclose()

    with pytest.raises(asyncio.CancelledError):
        await waiter
    assert container.deduplicator.get_in_flight_count() == 0
    await http_client.aclose()


def test_no_deduplicator_without_single_flight(settings) -> None:
    assert build_container(settings).deduplicator is None
