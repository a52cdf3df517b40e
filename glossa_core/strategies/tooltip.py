import logging
from typing import Any, Optional

from ..tracker import MarkKind
from .base import AnnotationContext, AnnotationStrategy, bilingual

logger = logging.getLogger(__name__)


class TooltipStrategy(AnnotationStrategy):
    """
    Annotate elements inside the floating tooltip layer.

    Tooltips are re-rendered from scratch on every hover, so this runs on
    each pass; marks keep it a no-op for tooltips already handled. Exact
    keys get the append form, otherwise a text that is itself a substring
    key is replaced whole. Replacing an outer element drops its children,
    so matches detached by an earlier write in the same run are skipped.
    """

    name = "tooltip"

    async def apply(self, ctx: AnnotationContext, root: Optional[Any] = None) -> int:
        document = ctx.document
        elements = await document.query_all(ctx.profile.tooltip_selector, root=root)
        elements = await document.filter_nodes(
            elements, exclude=ctx.profile.editor_selector, unmarked=MarkKind.ELEMENT
        )

        count = 0
        replaced = False
        for element in elements:
            if replaced and not await document.is_connected(element):
                logger.debug("Tooltip element detached by an outer rewrite; skipped")
                continue
            text = (await document.text_content(element)).strip()
            if not text:
                continue
            translation = ctx.store.exact(text)
            if translation:
                replacement = bilingual(translation, text)
            else:
                replacement = ctx.store.substring(text)
            if not replacement:
                continue
            await self._replace_element_text(ctx, element, replacement)
            replaced = True
            count += 1
        return count
