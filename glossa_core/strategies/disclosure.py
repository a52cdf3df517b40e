import logging
from typing import Any, Optional

from .base import AnnotationContext, AnnotationStrategy

logger = logging.getLogger(__name__)


class DisclosureRowStrategy(AnnotationStrategy):
    """
    Annotate icon rows revealed by a disclosure widget.

    Each row is found from its icon: the icon's closest row container
    holds a label element whose text is looked up in the exact map. The
    label is rendered as two lines, the translation and then the original
    in parentheses. A row or label that cannot be found is skipped.
    """

    name = "disclosure"

    async def apply(self, ctx: AnnotationContext, root: Optional[Any] = None) -> int:
        document = ctx.document
        profile = ctx.profile
        icons = await document.query_all(profile.row_icon_selector, root=root)
        icons = await document.filter_nodes(icons, exclude=profile.editor_selector)

        count = 0
        for icon in icons:
            row = await document.closest(icon, profile.row_selector)
            if row is None:
                continue
            label = await document.query_first(profile.row_label_selector, root=row)
            if label is None or await ctx.elements.is_marked(label):
                continue
            original = (await document.text_content(label)).strip()
            translation = ctx.store.exact(original) if original else None
            if not translation:
                continue
            lines = await document.replace_with_lines(label, [translation, f"({original})"])
            await ctx.elements.mark(label)
            for line in lines:
                await ctx.text_nodes.mark(line)
            count += 1
        return count
