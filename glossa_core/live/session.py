"""
LiveSession - keep a Playwright page annotated for as long as it is open.

Usage:
    session = await attach(page, store)
    await session.wait_closed()
"""

import asyncio
import logging
from typing import Optional, Set

from ..dictionary import DictionaryStore
from ..engine import AnnotationEngine, EngineSettings
from ..errors import BridgeError
from ..page_profile import PageProfile
from .bridge import LiveDocument
from .page_ready import ensure_page_ready

logger = logging.getLogger(__name__)


class LiveSession:

    def __init__(
        self,
        page,
        store: DictionaryStore,
        profile: Optional[PageProfile] = None,
        settings: Optional[EngineSettings] = None,
        ready_timeout_ms: int = 5000,
    ):
        self.page = page
        self.store = store
        self.profile = profile or PageProfile()
        self.settings = settings or EngineSettings()
        self.ready_timeout_ms = ready_timeout_ms
        self.document = LiveDocument(page)
        self.engine: Optional[AnnotationEngine] = None
        self._closed = asyncio.Event()
        self._tasks: Set[asyncio.Task] = set()

    async def start(self) -> None:
        await self.document.install()
        await self._start_engine()
        self.page.on("load", self._on_load)
        self.page.on("close", lambda _page: self._closed.set())

    async def _start_engine(self) -> None:
        if self.engine is not None:
            self.engine.close()
        self.document.reset()
        await ensure_page_ready(self.page, wait_ms=self.ready_timeout_ms)
        if not await self.document.start_observing():
            logger.warning("Page has no body yet; relying on the next load event")
        self.engine = AnnotationEngine(self.document, self.store, self.profile, self.settings)
        report = await self.engine.start()
        logger.info(f"Annotating {self.page.url} (initial pass: {report.total} node(s))")

    def _on_load(self, _page) -> None:
        # a new document: marks and observers from the old one are gone
        task = asyncio.ensure_future(self._restart())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _restart(self) -> None:
        try:
            await self.document.install()
            await self._start_engine()
        except BridgeError as e:
            logger.warning(f"Could not re-attach after navigation: {e}")

    async def wait_closed(self) -> None:
        await self._closed.wait()

    def close(self) -> None:
        if self.engine is not None:
            self.engine.close()
        for task in list(self._tasks):
            task.cancel()
        self._closed.set()


async def attach(
    page,
    store: DictionaryStore,
    profile: Optional[PageProfile] = None,
    settings: Optional[EngineSettings] = None,
    ready_timeout_ms: int = 5000,
) -> LiveSession:
    """Install the bridge on `page`, run the initial pass and keep reacting."""
    session = LiveSession(page, store, profile, settings, ready_timeout_ms)
    await session.start()
    return session
