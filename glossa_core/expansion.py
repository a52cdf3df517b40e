"""
Expansion Watcher - follow-up passes for lazily disclosed content

Some panels reveal their rows only when a disclosure icon is clicked; the
icon's artwork flips (e.g. triangle-down.svg -> triangle-up.svg) and the
rows render while the animation runs. A full pass scheduled by the click
can miss them, so each icon gets its own attribute observer and, once it
shows the expanded state, a short deferred pass scoped to what it opened.

Per icon: unobserved -> observing, exactly once (guarded by the ICON mark
set). An observed icon stays observed for its lifetime.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List

from .page_profile import PageProfile
from .scheduler import PendingTrigger
from .tracker import AnnotationTracker, MarkKind

logger = logging.getLogger(__name__)


class ExpansionWatcher:

    def __init__(
        self,
        document,
        profile: PageProfile,
        on_expanded: Callable[[List[Any]], Awaitable[Any]],
        delay: float = 0.1,
    ):
        self.document = document
        self.profile = profile
        self.on_expanded = on_expanded
        self.icons = AnnotationTracker(document, MarkKind.ICON)
        self.trigger = PendingTrigger("expansion", delay, self._fire)
        self._expanded: List[Any] = []

    async def scan(self) -> int:
        """Start observing icons not yet observed; returns how many were added."""
        icons = await self.document.query_all(self.profile.disclosure_icon_selector)
        icons = await self.document.filter_nodes(icons, unmarked=MarkKind.ICON)
        for icon in icons:
            await self.document.observe_attributes(
                icon, self.profile.disclosure_attributes, self._on_attributes
            )
            await self.icons.mark(icon)
        if icons:
            logger.debug(f"Observing {len(icons)} new disclosure icon(s)")
        return len(icons)

    def is_expanded(self, attributes: Dict[str, str]) -> bool:
        marker = self.profile.expanded_marker
        return any(marker in (value or "") for value in attributes.values())

    def _on_attributes(self, icon: Any, attributes: Dict[str, str]) -> None:
        if not self.is_expanded(attributes):
            return
        if not any(seen is icon for seen in self._expanded):
            self._expanded.append(icon)
        self.trigger.trigger()

    async def _fire(self) -> None:
        icons, self._expanded = self._expanded, []
        if icons:
            await self.on_expanded(icons)

    def close(self) -> None:
        self.trigger.close()
        self._expanded = []
