"""
PageDocument - the narrow DOM surface the annotation engine needs.

Adapters:
    SoupDocument  in-process BeautifulSoup tree (tests, offline annotate)
    LiveDocument  a Playwright page, through an injected bridge script

Node handles are opaque to the engine; it only passes them back to the
adapter that produced them. Marks (see tracker.MarkKind) are stored by the
adapter so their lifetime follows the node's.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..tracker import MarkKind

logger = logging.getLogger(__name__)

Listener = Callable[[], None]
AttributeListener = Callable[[Any, Dict[str, str]], None]


class PageDocument(ABC):

    def __init__(self):
        self._mutation_listeners: List[Listener] = []
        self._click_listeners: List[Listener] = []

    # -- queries ---------------------------------------------------------

    @abstractmethod
    async def query_all(self, selector: str, root: Any = None) -> List[Any]:
        """Elements matching `selector` under `root` (default: document), document order."""

    @abstractmethod
    async def filter_nodes(
        self,
        nodes: Sequence[Any],
        exclude: Optional[str] = None,
        unmarked: Optional[MarkKind] = None,
    ) -> List[Any]:
        """Drop nodes inside `exclude` regions and nodes already marked `unmarked`."""

    async def query_first(self, selector: str, root: Any = None) -> Optional[Any]:
        nodes = await self.query_all(selector, root=root)
        return nodes[0] if nodes else None

    @abstractmethod
    async def closest(self, node: Any, selector: str) -> Optional[Any]:
        """Nearest inclusive ancestor matching `selector`."""

    @abstractmethod
    async def is_connected(self, node: Any) -> bool:
        """False once the node has been removed from the document."""

    @abstractmethod
    async def text_content(self, node: Any) -> str: ...

    @abstractmethod
    async def child_text_nodes(self, node: Any) -> List[Any]:
        """Direct text-node children of an element."""

    @abstractmethod
    async def walk_text_nodes(
        self,
        root: Any = None,
        exclude: Optional[str] = None,
        unmarked: Optional[MarkKind] = None,
    ) -> List[Any]:
        """Every text node under `root` (default: body), depth-first document order."""

    @abstractmethod
    async def node_value(self, text_node: Any) -> str: ...

    @abstractmethod
    async def get_attribute(self, node: Any, name: str) -> Optional[str]: ...

    # -- writes ----------------------------------------------------------

    @abstractmethod
    async def set_node_value(self, text_node: Any, value: str) -> Any:
        """Rewrite a text node; returns the handle of the node now holding `value`."""

    @abstractmethod
    async def set_text_content(self, node: Any, text: str) -> Any:
        """Replace an element's children with one text node; returns that node."""

    @abstractmethod
    async def set_attribute(self, node: Any, name: str, value: str) -> None: ...

    @abstractmethod
    async def replace_with_lines(self, node: Any, lines: Sequence[str]) -> List[Any]:
        """
        Replace an element's children with text lines separated by line breaks.

        Returns the created text nodes, one per line.
        """

    # -- marks -----------------------------------------------------------

    @abstractmethod
    async def is_marked(self, node: Any, kind: MarkKind) -> bool: ...

    @abstractmethod
    async def mark(self, node: Any, kind: MarkKind) -> None: ...

    # -- change notification ---------------------------------------------

    @abstractmethod
    async def observe_attributes(
        self, node: Any, names: Sequence[str], callback: AttributeListener
    ) -> None:
        """Call `callback(node, attributes)` whenever one of `names` changes on `node`."""

    def on_mutation(self, callback: Listener) -> Listener:
        """Subscribe to subtree changes; returns an unsubscribe callable."""
        self._mutation_listeners.append(callback)
        return lambda: self._discard(self._mutation_listeners, callback)

    def on_click(self, callback: Listener) -> Listener:
        self._click_listeners.append(callback)
        return lambda: self._discard(self._click_listeners, callback)

    @staticmethod
    def _discard(listeners: List[Listener], callback: Listener) -> None:
        if callback in listeners:
            listeners.remove(callback)

    def _emit(self, listeners: List[Listener], signal: str) -> None:
        for callback in list(listeners):
            try:
                callback()
            except Exception as e:
                logger.warning(f"{signal} listener failed: {e}")

    def emit_mutation(self) -> None:
        self._emit(self._mutation_listeners, "mutation")

    def emit_click(self) -> None:
        self._emit(self._click_listeners, "click")
