"""
Substring (fixed-phrase) annotation.

Replaces standalone words and phrases inside larger sentences, e.g. with
{"Str": "力量"} the text "Requires Str 10" becomes "Requires 力量 10" while
"Strength 10" stays untouched. Word boundaries are ASCII-based, matching
the browser's `\\b`, so CJK text next to a key still counts as a boundary.
"""

import logging
import re
from typing import Any, Iterable, List, Optional, Pattern, Tuple

from ..tracker import MarkKind
from .base import AnnotationContext, AnnotationStrategy

logger = logging.getLogger(__name__)


class SubstringReplacer:
    """Whole-word replacement rules compiled once per dictionary."""

    def __init__(self, entries: Iterable[Tuple[str, str]]):
        self.rules: List[Tuple[Pattern[str], str]] = [
            (re.compile(rf"\b{re.escape(source)}\b", re.ASCII), target)
            for source, target in entries
        ]

    def __bool__(self) -> bool:
        return bool(self.rules)

    def matches(self, text: str) -> bool:
        return any(pattern.search(text) for pattern, _ in self.rules)

    def replace(self, text: str) -> Tuple[str, int]:
        """
        Apply every rule, in dictionary order, to every occurrence.

        Returns:
            (new text, number of substitutions made)
        """
        total = 0
        for pattern, target in self.rules:
            text, count = pattern.subn(lambda _m, target=target: target, text)
            total += count
        return text, total


class SubstringStrategy(AnnotationStrategy):
    """
    Substitute whole-word keys throughout each eligible element.

    Every descendant text node is rewritten, so keys inside inline markup
    (`<p>Requires <b>Str</b> 10</p>`) are covered. Rewritten nodes carry a
    text mark, which keeps nested eligible elements from processing them
    again. A descendant whose whole text is an exact key is left for the
    exact-phrase forms.
    """

    name = "substring"

    async def apply(self, ctx: AnnotationContext, root: Optional[Any] = None) -> int:
        replacer = ctx.replacer
        if not replacer:
            return 0

        document = ctx.document
        exclude = ctx.profile.editor_selector
        elements = await document.query_all(ctx.profile.substring_selector, root=root)
        elements = await document.filter_nodes(elements, exclude=exclude, unmarked=MarkKind.ELEMENT)

        count = 0
        for element in elements:
            full_text = (await document.text_content(element)).strip()
            # whole-phrase translation always wins over partial substitution
            if not full_text or ctx.store.exact(full_text):
                continue
            if not replacer.matches(full_text):
                continue

            changed = 0
            nodes = await document.walk_text_nodes(element, exclude=exclude, unmarked=MarkKind.TEXT)
            for node in nodes:
                value = await document.node_value(node)
                if ctx.store.exact(value.strip()):
                    continue
                value, substitutions = replacer.replace(value)
                if substitutions and await self._rewrite_text_node(ctx, node, value):
                    changed += 1

            if changed:
                await ctx.elements.mark(element)
                count += changed
        return count
