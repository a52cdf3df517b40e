"""
Exhaustive fallback: a text-node walk over the whole body.

Selector-scoped strategies miss content whenever the page's markup drifts;
this walk guarantees eventual coverage for exact keys at the cost of a
full-tree scan, which is why it runs last.
"""

import logging
from typing import Any, Optional

from ..tracker import MarkKind
from .base import AnnotationContext, AnnotationStrategy, bilingual

logger = logging.getLogger(__name__)


class FallbackWalkStrategy(AnnotationStrategy):
    name = "fallback"

    async def apply(self, ctx: AnnotationContext, root: Optional[Any] = None) -> int:
        document = ctx.document
        nodes = await document.walk_text_nodes(
            root, exclude=ctx.profile.editor_selector, unmarked=MarkKind.TEXT
        )

        count = 0
        for node in nodes:
            value = await document.node_value(node)
            original = value.strip()
            if not original:
                continue
            translation = ctx.store.exact(original)
            if not translation or translation in value:
                continue
            if await self._rewrite_text_node(ctx, node, bilingual(translation, original)):
                count += 1

        if count:
            logger.debug(f"Fallback walk annotated {count} of {len(nodes)} text node(s)")
        return count
