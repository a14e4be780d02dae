import asyncio

import pytest

from pricewatch.core.listing import ListingCoordinator, ListingSuperseded


def test_run_returns_result():
    coordinator = ListingCoordinator()

    async def fetch():
        return {"items": [1]}

    assert asyncio.run(coordinator.run("s1", fetch)) == {"items": [1]}


def test_newer_fetch_supersedes_older():
    async def scenario():
        coordinator = ListingCoordinator()
        release = asyncio.Event()

        async def slow():
            await release.wait()
            return "old"

        async def fast():
            return "new"

        first = asyncio.ensure_future(coordinator.run("s1", slow))
        await asyncio.sleep(0)
        second = await coordinator.run("s1", fast)
        release.set()
        with pytest.raises(ListingSuperseded):
            await first
        return second

    assert asyncio.run(scenario()) == "new"


def test_state_change_discards_late_result():
    async def scenario():
        coordinator = ListingCoordinator()
        started = asyncio.Event()

        async def fetch():
            started.set()
            await asyncio.sleep(0.01)
            return "stale"

        pending = asyncio.ensure_future(coordinator.run("s1", fetch))
        await started.wait()
        coordinator.invalidate("s1")
        with pytest.raises(ListingSuperseded):
            await pending

    asyncio.run(scenario())


def test_inputs_read_under_old_version_are_rejected():
    async def scenario():
        coordinator = ListingCoordinator()
        version = coordinator.version("s1")
        coordinator.invalidate("s1")

        async def fetch():
            return "never"

        with pytest.raises(ListingSuperseded):
            await coordinator.run("s1", fetch, version=version)

    asyncio.run(scenario())


def test_cancel_on_teardown():
    async def scenario():
        coordinator = ListingCoordinator()
        started = asyncio.Event()

        async def fetch():
            started.set()
            await asyncio.sleep(10)

        pending = asyncio.ensure_future(coordinator.run("s1", fetch))
        await started.wait()
        coordinator.cancel("s1")
        with pytest.raises(ListingSuperseded):
            await pending
        assert coordinator.version("s1") == 0

    asyncio.run(scenario())


def test_sessions_are_independent():
    async def scenario():
        coordinator = ListingCoordinator()
        coordinator.invalidate("other")

        async def fetch():
            return "ok"

        return await coordinator.run("s1", fetch)

    assert asyncio.run(scenario()) == "ok"
