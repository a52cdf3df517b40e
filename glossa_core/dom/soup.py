"""
SoupDocument - PageDocument over an in-process BeautifulSoup tree.

Used by the offline `annotate` command and by the test-suite. Page-side
changes (content arriving, attributes flipping, clicks) are simulated
through append_html / remove / set_attribute / click, which raise the same
signals a browser would.
"""

import logging
import weakref
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from ..tracker import MarkKind, WeakMarkSet
from .base import AttributeListener, PageDocument

logger = logging.getLogger(__name__)

# Text inside these never renders as page text
NON_TEXT_PARENTS = {"script", "style", "noscript", "template", "textarea"}


def is_text_node(node: Any) -> bool:
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


class SoupDocument(PageDocument):

    def __init__(self, markup: Union[str, BeautifulSoup], parser: str = "html.parser"):
        super().__init__()
        self.soup = markup if isinstance(markup, BeautifulSoup) else BeautifulSoup(markup, parser)
        self._marks = {kind: WeakMarkSet(kind.value) for kind in MarkKind}
        self._observers: Dict[int, List[Tuple[weakref.ref, Tuple[str, ...], AttributeListener]]] = {}

    @property
    def body(self) -> Tag:
        return self.soup.body or self.soup

    def html(self) -> str:
        return str(self.soup)

    @staticmethod
    def _element_of(node: Any) -> Optional[Tag]:
        return node if isinstance(node, Tag) else node.parent

    # -- queries ---------------------------------------------------------

    async def query_all(self, selector: str, root: Any = None) -> List[Any]:
        return (root if root is not None else self.soup).select(selector)

    async def filter_nodes(self, nodes, exclude=None, unmarked=None) -> List[Any]:
        kept = []
        for node in nodes:
            if unmarked is not None and node in self._marks[unmarked]:
                continue
            if exclude:
                element = self._element_of(node)
                if element is not None and element.css.closest(exclude) is not None:
                    continue
            kept.append(node)
        return kept

    async def closest(self, node: Any, selector: str) -> Optional[Any]:
        element = self._element_of(node)
        if element is None:
            return None
        return element.css.closest(selector)

    async def is_connected(self, node: Any) -> bool:
        return node is self.soup or any(parent is self.soup for parent in node.parents)

    async def text_content(self, node: Any) -> str:
        if isinstance(node, Tag):
            return node.get_text()
        return str(node)

    async def child_text_nodes(self, node: Any) -> List[Any]:
        return [child for child in node.contents if is_text_node(child)]

    async def walk_text_nodes(self, root=None, exclude=None, unmarked=None) -> List[Any]:
        base = root if root is not None else self.body
        nodes = [
            node for node in base.descendants
            if is_text_node(node) and node.parent is not None
            and node.parent.name not in NON_TEXT_PARENTS
        ]
        if exclude or unmarked:
            nodes = await self.filter_nodes(nodes, exclude=exclude, unmarked=unmarked)
        return nodes

    async def node_value(self, text_node: Any) -> str:
        return str(text_node)

    async def get_attribute(self, node: Any, name: str) -> Optional[str]:
        value = node.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    # -- writes ----------------------------------------------------------

    async def set_node_value(self, text_node: Any, value: str) -> Any:
        if text_node.parent is None:
            logger.debug("Text node detached before it could be rewritten")
            return None
        replacement = NavigableString(value)
        text_node.replace_with(replacement)
        return replacement

    async def set_text_content(self, node: Any, text: str) -> Any:
        node.clear()
        replacement = NavigableString(text)
        node.append(replacement)
        return replacement

    async def set_attribute(self, node: Any, name: str, value: str) -> None:
        node[name] = value
        self._notify_attribute(node, name)

    async def replace_with_lines(self, node: Any, lines: Sequence[str]) -> List[Any]:
        node.clear()
        created = []
        for index, line in enumerate(lines):
            if index:
                node.append(self.soup.new_tag("br"))
            text = NavigableString(line)
            node.append(text)
            created.append(text)
        return created

    # -- marks -----------------------------------------------------------

    async def is_marked(self, node: Any, kind: MarkKind) -> bool:
        return node in self._marks[kind]

    async def mark(self, node: Any, kind: MarkKind) -> None:
        self._marks[kind].add(node)

    # -- change notification ---------------------------------------------

    async def observe_attributes(self, node, names, callback) -> None:
        entries = self._observers.setdefault(id(node), [])
        entries[:] = [entry for entry in entries if entry[0]() is not None]
        entries.append((weakref.ref(node), tuple(names), callback))

    def _notify_attribute(self, node: Any, name: str) -> None:
        for ref, names, callback in list(self._observers.get(id(node), [])):
            if ref() is not node or name not in names:
                continue
            attributes = {n: self._attribute_text(node, n) for n in names}
            try:
                callback(node, attributes)
            except Exception as e:
                logger.warning(f"Attribute observer failed: {e}")

    @staticmethod
    def _attribute_text(node: Tag, name: str) -> str:
        value = node.get(name) or ""
        return " ".join(value) if isinstance(value, list) else value

    # -- page-side simulation --------------------------------------------

    def append_html(self, parent: Optional[Tag], markup: str, notify: bool = True) -> List[Any]:
        """Insert rendered content the way the page would, raising a mutation unless `notify` is off."""
        target = parent if parent is not None else self.body
        fragment = BeautifulSoup(markup, "html.parser")
        added = []
        for child in list(fragment.contents):
            added.append(child.extract())
            target.append(added[-1])
        if notify:
            self.emit_mutation()
        return added

    def remove(self, node: Any) -> None:
        node.extract()
        self.emit_mutation()

    def click(self) -> None:
        self.emit_click()
