"""
Annotation Engine - incremental bilingual annotation of a live document

One full pass runs the matching strategies in priority order:

    1. exact phrases on the configured selector targets
    2. numeric templates on list items
    3. whole-word substrings inside sentences
    4. tooltip layer
    5. exhaustive text-node fallback

then rescans for disclosure icons to watch. Every strategy consults the
mark sets before writing and updates them after, so passes can be
re-triggered any number of times without double annotation. Passes hold a
lock and never interleave.

Usage:
    engine = AnnotationEngine(document, store)
    await engine.start()          # initial pass, then react to page churn
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .config import Config
from .dictionary import DictionaryStore
from .expansion import ExpansionWatcher
from .page_profile import PageProfile
from .scheduler import ReactiveScheduler
from .strategies import (
    AnnotationContext,
    AnnotationStrategy,
    DisclosureRowStrategy,
    ExactPhraseStrategy,
    FallbackWalkStrategy,
    ListItemTemplateStrategy,
    SubstringReplacer,
    SubstringStrategy,
    TooltipStrategy,
)
from .templates import compile_templates
from .tracker import AnnotationTracker, MarkKind

logger = logging.getLogger(__name__)


@dataclass
class EngineSettings:
    """Timings in seconds."""
    mutation_debounce: float = 0.2
    click_delay: float = 0.3
    expansion_delay: float = 0.1

    @classmethod
    def from_config(cls, cfg: Config) -> "EngineSettings":
        return cls(
            mutation_debounce=cfg.mutation_debounce_ms / 1000,
            click_delay=cfg.click_delay_ms / 1000,
            expansion_delay=cfg.expansion_delay_ms / 1000,
        )


@dataclass
class PassReport:
    kind: str
    counts: Dict[str, int] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    duration: float = 0.0

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def record(self, strategy: str, count: int) -> None:
        self.counts[strategy] = self.counts.get(strategy, 0) + count


class AnnotationEngine:

    def __init__(
        self,
        document,
        store: DictionaryStore,
        profile: Optional[PageProfile] = None,
        settings: Optional[EngineSettings] = None,
    ):
        self.document = document
        self.store = store
        self.profile = profile or PageProfile()
        self.settings = settings or EngineSettings()

        self.context = AnnotationContext(
            document=document,
            store=store,
            profile=self.profile,
            elements=AnnotationTracker(document, MarkKind.ELEMENT),
            text_nodes=AnnotationTracker(document, MarkKind.TEXT),
            matchers=compile_templates(store.templates),
            replacer=SubstringReplacer(store.substring_entries),
        )
        self.fallback = FallbackWalkStrategy()
        self.rows = DisclosureRowStrategy()
        self.strategies: List[AnnotationStrategy] = [
            ExactPhraseStrategy(),
            ListItemTemplateStrategy(),
            SubstringStrategy(),
            TooltipStrategy(),
            self.fallback,
        ]

        self.watcher = ExpansionWatcher(
            document, self.profile, self.run_scoped_pass, delay=self.settings.expansion_delay
        )
        self.scheduler = ReactiveScheduler(
            document,
            self.run_pass,
            mutation_delay=self.settings.mutation_debounce,
            click_delay=self.settings.click_delay,
        )
        self.passes = 0
        self._lock = asyncio.Lock()

    async def _run_strategy(self, strategy: AnnotationStrategy, report: PassReport, **kwargs) -> None:
        try:
            report.record(strategy.name, await strategy.apply(self.context, **kwargs))
        except Exception as e:
            # one broken strategy must not stop the rest of the pass
            logger.warning(f"Strategy {strategy.name} failed: {e}")
            logger.debug("Strategy failure details", exc_info=True)
            report.errors.append(f"{strategy.name}: {e}")

    async def run_pass(self) -> PassReport:
        """Run every strategy once against the current document state."""
        report = PassReport(kind="full")
        async with self._lock:
            started = time.monotonic()
            for strategy in self.strategies:
                await self._run_strategy(strategy, report)
            try:
                await self.watcher.scan()
            except Exception as e:
                logger.warning(f"Disclosure icon scan failed: {e}")
                report.errors.append(f"scan: {e}")
            report.duration = time.monotonic() - started
            self.passes += 1

        self._log_report(report)
        return report

    async def run_scoped_pass(self, icons: Sequence[Any]) -> PassReport:
        """
        Annotate what the given disclosure icons just revealed.

        Runs the disclosure-row strategy, then every matching strategy
        limited to each icon's region. An icon whose region cannot be
        found is skipped.
        """
        report = PassReport(kind="scoped")
        async with self._lock:
            started = time.monotonic()
            await self._run_strategy(self.rows, report)
            for icon in icons:
                try:
                    region = await self.document.closest(icon, self.profile.region_selector)
                except Exception as e:
                    logger.debug(f"Disclosure region lookup failed: {e}")
                    region = None
                if region is None:
                    logger.debug("Disclosure icon has no enclosing region; skipped")
                    continue
                for strategy in self.strategies:
                    await self._run_strategy(strategy, report, root=region)
            report.duration = time.monotonic() - started

        self._log_report(report)
        return report

    def _log_report(self, report: PassReport) -> None:
        if report.total:
            logger.info(
                f"{report.kind} pass annotated {report.total} node(s) "
                f"{report.counts} in {report.duration * 1000:.0f}ms"
            )
        else:
            logger.debug(f"{report.kind} pass: nothing to annotate ({report.duration * 1000:.0f}ms)")

    async def start(self) -> PassReport:
        """Initial pass for a loaded page, then start reacting to page activity."""
        report = await self.run_pass()
        self.scheduler.start()
        return report

    async def wait_idle(self) -> None:
        """Wait until no re-annotation is pending or running."""
        while True:
            await self.scheduler.wait_idle()
            await self.watcher.trigger.wait()
            if not (self.scheduler.mutation.pending or self.scheduler.click.pending
                    or self.watcher.trigger.pending):
                return

    def close(self) -> None:
        self.scheduler.close()
        self.watcher.close()
