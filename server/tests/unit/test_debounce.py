from __future__ import annotations

import asyncio

import pytest

from storefront.services.debounce import Debouncer


@pytest.mark.asyncio
async def test_only_last_scheduled_call_runs_after_quiet_period():
    debouncer = Debouncer(0.02)
    calls: list[str] = []

    def make(term: str):
        async def run() -> str:
            calls.append(term)
            return term

        return run

    first = debouncer.schedule("search-box", make("l"))
    second = debouncer.schedule("search-box", make("li"))
    third = debouncer.schedule("search-box", make("lis"))

    assert await third == "lis"
    await asyncio.sleep(0)
    assert first.cancelled()
    assert second.cancelled()
    assert calls == ["lis"]


@pytest.mark.asyncio
async def test_streams_are_debounced_independently():
    debouncer = Debouncer(0.01)

    async def header() -> str:
        return "header"

    async def page() -> str:
        return "page"

    header_task = debouncer.schedule("header", header)
    page_task = debouncer.schedule("page", page)

    assert await asyncio.gather(header_task, page_task) == ["header", "page"]


@pytest.mark.asyncio
async def test_running_task_is_not_cancelled_by_new_schedule():
    debouncer = Debouncer(0)
    release = asyncio.Event()
    started = asyncio.Event()

    async def slow_fetch() -> str:
        started.set()
        await release.wait()
        return "slow"

    async def fast() -> str:
        return "fast"

    running = debouncer.schedule("search-box", slow_fetch)
    await started.wait()

    assert not debouncer.pending("search-box")
    follow_up = debouncer.schedule("search-box", fast)
    release.set()

    assert await running == "slow"
    assert await follow_up == "fast"


@pytest.mark.asyncio
async def test_cancel_and_cancel_all():
    debouncer = Debouncer(1)

    async def never() -> None:
        return None

    task_a = debouncer.schedule("a", never)
    task_b = debouncer.schedule("b", never)

    assert debouncer.pending("a")
    assert debouncer.cancel("a") is True
    assert debouncer.cancel("a") is False
    assert debouncer.cancel_all() == 1

    await asyncio.sleep(0)
    assert task_a.cancelled()
    assert task_b.cancelled()
    assert not debouncer.pending("b")


def test_from_milliseconds():
    assert Debouncer.from_milliseconds(300).delay_seconds == pytest.approx(0.3)
    assert Debouncer(-5).delay_seconds == 0.0
