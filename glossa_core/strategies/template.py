import logging
from typing import Any, Optional

from ..templates import match_first
from ..tracker import MarkKind
from .base import AnnotationContext, AnnotationStrategy

logger = logging.getLogger(__name__)


class ListItemTemplateStrategy(AnnotationStrategy):
    """Replace list items matching a numeric template ("+25 to Life" -> "+25 生命")."""

    name = "template"

    async def apply(self, ctx: AnnotationContext, root: Optional[Any] = None) -> int:
        if not ctx.matchers:
            return 0

        document = ctx.document
        items = await document.query_all(ctx.profile.list_item_selector, root=root)
        items = await document.filter_nodes(
            items, exclude=ctx.profile.editor_selector, unmarked=MarkKind.ELEMENT
        )

        count = 0
        for item in items:
            text = (await document.text_content(item)).strip()
            if not text:
                continue
            translated = match_first(ctx.matchers, text)
            if translated is None:
                continue
            await self._replace_element_text(ctx, item, translated)
            count += 1
        return count
