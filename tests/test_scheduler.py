"""Tests for trigger coalescing."""

import asyncio

import pytest

from glossa_core.dom import SoupDocument
from glossa_core.scheduler import PendingTrigger, ReactiveScheduler

pytestmark = pytest.mark.asyncio


class TestPendingTrigger:

    async def test_burst_fires_once(self):
        calls = []

        async def callback():
            calls.append(1)

        trigger = PendingTrigger("test", 0.1, callback)
        for _ in range(10):
            trigger.trigger()
            await asyncio.sleep(0.01)
        await trigger.wait()

        assert calls == [1]
        assert trigger.fired == 1
        assert not trigger.pending

    async def test_retrigger_moves_deadline(self):
        calls = []

        async def callback():
            calls.append(1)

        trigger = PendingTrigger("test", 0.2, callback)
        trigger.trigger()
        await asyncio.sleep(0.1)
        trigger.trigger()
        await asyncio.sleep(0.15)
        assert calls == []

        await trigger.wait()
        assert calls == [1]

    async def test_trigger_during_callback_runs_again(self):
        calls = []

        async def callback():
            calls.append(1)
            if len(calls) == 1:
                trigger.trigger()

        trigger = PendingTrigger("test", 0.01, callback)
        trigger.trigger()
        await trigger.wait()

        assert trigger.fired == 2

    async def test_failing_callback_does_not_break_trigger(self):
        calls = []

        async def callback():
            calls.append(1)
            raise RuntimeError("boom")

        trigger = PendingTrigger("test", 0.01, callback)
        trigger.trigger()
        await trigger.wait()
        trigger.trigger()
        await trigger.wait()

        assert len(calls) == 2

    async def test_close_cancels_pending_run(self):
        calls = []

        async def callback():
            calls.append(1)

        trigger = PendingTrigger("test", 0.05, callback)
        trigger.trigger()
        trigger.close()
        await asyncio.sleep(0.1)

        assert calls == []
        assert not trigger.pending


class TestReactiveScheduler:

    async def test_mutation_burst_runs_one_pass(self):
        document = SoupDocument("<main></main>")
        calls = []

        async def run_pass():
            calls.append(1)

        scheduler = ReactiveScheduler(document, run_pass, mutation_delay=0.05, click_delay=0.05)
        scheduler.start()
        for i in range(5):
            document.append_html(document.soup.main, f"<p>{i}</p>")
        await scheduler.wait_idle()

        assert calls == [1]
        assert scheduler.mutation.fired == 1
        assert scheduler.click.fired == 0
        scheduler.close()

    async def test_click_schedules_deferred_pass(self):
        document = SoupDocument("<main></main>")
        calls = []

        async def run_pass():
            calls.append(1)

        scheduler = ReactiveScheduler(document, run_pass, mutation_delay=0.05, click_delay=0.05)
        scheduler.start()
        document.click()
        assert calls == []

        await scheduler.wait_idle()
        assert calls == [1]
        scheduler.close()

    async def test_close_unsubscribes(self):
        document = SoupDocument("<main></main>")

        async def run_pass():
            pass

        scheduler = ReactiveScheduler(document, run_pass)
        scheduler.start()
        assert scheduler.started
        scheduler.close()
        document.append_html(document.soup.main, "<p>late</p>")

        assert not scheduler.started
        assert not scheduler.mutation.pending
