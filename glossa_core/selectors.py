"""
Selector Resolution - defensive lookups against unstable markup

The target page uses generated class names that can change without
notice, so each semantic target is described by a SelectorGroup: an
ordered list of alternative selectors, stable attribute-based ones first
and generated-class ones last. Resolution stops at the first selector
that matches anything.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .tracker import MarkKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectorGroup:
    selectors: Tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, "selectors", tuple(self.selectors))

    @classmethod
    def of(cls, *selectors: str) -> "SelectorGroup":
        return cls(selectors)


@dataclass(frozen=True)
class AnnotationTarget:
    """A selector group plus the property to annotate (None = rendered text)."""
    group: SelectorGroup
    attribute: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnnotationTarget":
        selectors = data.get("selectors") or []
        if isinstance(selectors, str):
            selectors = [selectors]
        return cls(group=SelectorGroup(tuple(selectors)), attribute=data.get("attribute"))


async def resolve(
    document,
    group: SelectorGroup,
    exclude: Optional[str] = None,
    unmarked: Optional[MarkKind] = None,
    root: Any = None,
) -> List[Any]:
    """
    Resolve a selector group against the current tree.

    Args:
        document: PageDocument adapter
        group: Ordered alternative selectors
        exclude: Drop nodes inside regions matching this selector
        unmarked: Drop nodes already carrying this mark kind
        root: Only search under this element (default: whole document)

    Returns:
        Nodes matched by the first selector yielding at least one node,
        or an empty list when no selector matches. The exclude/unmarked
        filters apply after resolution: a selector whose matches are all
        already marked still wins over the later alternatives.
    """
    for selector in group.selectors:
        nodes = await document.query_all(selector, root=root)
        if nodes:
            logger.debug(f"Selector {selector!r} resolved {len(nodes)} node(s)")
            if exclude or unmarked:
                nodes = await document.filter_nodes(nodes, exclude=exclude, unmarked=unmarked)
            return nodes
    return []
