import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Optional

from ..dictionary import DictionaryStore
from ..dom.base import PageDocument
from ..page_profile import PageProfile
from ..templates import TemplateMatcher
from ..tracker import AnnotationTracker

if TYPE_CHECKING:
    from .substring import SubstringReplacer

logger = logging.getLogger(__name__)


def bilingual(translation: str, original: str) -> str:
    """Append form: translated label with the original kept in parentheses."""
    return f"{translation} ({original})"


@dataclass
class AnnotationContext:
    """Everything a strategy reads or writes during a pass."""
    document: PageDocument
    store: DictionaryStore
    profile: PageProfile
    elements: AnnotationTracker
    text_nodes: AnnotationTracker
    matchers: List[TemplateMatcher] = field(default_factory=list)
    replacer: Optional["SubstringReplacer"] = None


class AnnotationStrategy(ABC):
    name: str = "strategy"

    @abstractmethod
    async def apply(self, ctx: AnnotationContext, root: Optional[Any] = None) -> int:
        """
        Annotate what this strategy covers; returns the number of annotations made.

        With `root`, only nodes inside that element are considered.
        """

    async def _rewrite_text_node(self, ctx: AnnotationContext, node: Any, value: str) -> bool:
        """Rewrite a text node and mark the result at text granularity."""
        written = await ctx.document.set_node_value(node, value)
        if written is None:
            return False
        await ctx.text_nodes.mark(written)
        return True

    async def _replace_element_text(self, ctx: AnnotationContext, element: Any, text: str) -> None:
        written = await ctx.document.set_text_content(element, text)
        await ctx.elements.mark(element)
        if written is not None:
            await ctx.text_nodes.mark(written)

    def __repr__(self):
        return f"{type(self).__name__}()"
