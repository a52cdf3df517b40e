"""
Exact-phrase annotation for the configured selector targets.

Text targets keep their child elements: each direct text child whose
trimmed value is a dictionary key becomes "{translation} ({original})".
Attribute targets (e.g. an image's alt label) get the same composed
string written back into the attribute.
"""

import logging
from typing import Any, Optional

from ..selectors import AnnotationTarget, resolve
from ..tracker import MarkKind
from .base import AnnotationContext, AnnotationStrategy, bilingual

logger = logging.getLogger(__name__)


class ExactPhraseStrategy(AnnotationStrategy):
    name = "exact"

    async def apply(self, ctx: AnnotationContext, root: Optional[Any] = None) -> int:
        count = 0
        for target in ctx.profile.targets:
            count += await self.annotate_target(ctx, target, root=root)
        return count

    async def annotate_target(
        self, ctx: AnnotationContext, target: AnnotationTarget, root: Optional[Any] = None
    ) -> int:
        elements = await resolve(
            ctx.document,
            target.group,
            exclude=ctx.profile.editor_selector,
            unmarked=MarkKind.ELEMENT,
            root=root,
        )
        count = 0
        for element in elements:
            if target.attribute:
                annotated = await self._annotate_attribute(ctx, element, target.attribute)
            else:
                annotated = await self._annotate_text(ctx, element)
            if annotated:
                await ctx.elements.mark(element)
                count += annotated
        return count

    async def _annotate_text(self, ctx: AnnotationContext, element: Any) -> int:
        document = ctx.document
        children = await document.child_text_nodes(element)
        children = await document.filter_nodes(children, unmarked=MarkKind.TEXT)

        annotated = 0
        for child in children:
            value = await document.node_value(child)
            original = value.strip()
            if not original:
                continue
            translation = ctx.store.exact(original)
            # already applied by an earlier pass that ran before the page settled
            if not translation or translation in value:
                continue
            if await self._rewrite_text_node(ctx, child, bilingual(translation, original)):
                annotated += 1
        return annotated

    async def _annotate_attribute(self, ctx: AnnotationContext, element: Any, attribute: str) -> int:
        value = await ctx.document.get_attribute(element, attribute)
        original = (value or "").strip()
        if not original:
            return 0
        translation = ctx.store.exact(original)
        if not translation or translation in original:
            return 0
        await ctx.document.set_attribute(element, attribute, bilingual(translation, original))
        return 1
