"""
Reactive Scheduler - coalesce page churn into annotation passes

The page mutates in bursts (a tooltip renders dozens of nodes, a tab
switch rebuilds a whole section). Each trigger source owns one
PendingTrigger: a single slot holding a monotonic deadline. A new trigger
overwrites the deadline; one runner task sleeps until the deadline
elapses, empties the slot and runs the callback. N triggers inside the
quiet window therefore produce exactly one run after the burst settles.

Usage:
    trigger = PendingTrigger("mutation", 0.2, engine.run_pass)
    document.on_mutation(trigger.trigger)
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional

logger = logging.getLogger(__name__)

Callback = Callable[[], Awaitable[Any]]


class PendingTrigger:
    """Single-slot trailing-edge debounce with a monotonic deadline."""

    def __init__(self, name: str, delay: float, callback: Callback):
        self.name = name
        self.delay = delay
        self.callback = callback
        self.fired = 0
        self._deadline: Optional[float] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    def trigger(self, delay: Optional[float] = None) -> None:
        """
        Arm (or re-arm) the slot; must be called from the event loop.

        A trigger arriving while the callback runs re-arms the slot and the
        same runner fires again once the new deadline passes.
        """
        loop = asyncio.get_running_loop()
        self._deadline = loop.time() + (self.delay if delay is None else delay)
        if self._task is None or self._task.done():
            self._task = loop.create_task(self._run())

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        while self._deadline is not None:
            remaining = self._deadline - loop.time()
            if remaining > 0:
                await asyncio.sleep(remaining)
                continue
            self._deadline = None
            self.fired += 1
            try:
                await self.callback()
            except Exception as e:
                logger.warning(f"{self.name} trigger callback failed: {e}")

    async def wait(self) -> None:
        """Wait until the slot is empty and no run is in flight."""
        while self._task is not None and not self._task.done():
            await asyncio.shield(self._task)

    def close(self) -> None:
        self._deadline = None
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None


class ReactiveScheduler:
    """
    Re-run the annotation pass in response to page activity.

    Subtree mutations are debounced (the pass runs once the page has been
    quiet for `mutation_delay`); clicks schedule a deferred pass because
    the content they reveal renders asynchronously after the click.
    """

    def __init__(self, document, run_pass: Callback, mutation_delay: float = 0.2, click_delay: float = 0.3):
        self.document = document
        self.mutation = PendingTrigger("mutation", mutation_delay, run_pass)
        self.click = PendingTrigger("click", click_delay, run_pass)
        self._unsubscribe: List[Callable[[], None]] = []

    @property
    def started(self) -> bool:
        return bool(self._unsubscribe)

    def start(self) -> None:
        if self._unsubscribe:
            return
        self._unsubscribe = [
            self.document.on_mutation(self.mutation.trigger),
            self.document.on_click(self.click.trigger),
        ]
        logger.debug("Reactive scheduler observing mutations and clicks")

    async def wait_idle(self) -> None:
        while True:
            await self.mutation.wait()
            await self.click.wait()
            if not (self.mutation.pending or self.click.pending):
                return

    def close(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
        self.mutation.close()
        self.click.close()
