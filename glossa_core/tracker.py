"""
Annotation Tracker - "already annotated" bookkeeping

Marks are ephemeral: a mark lives exactly as long as the node it marks and
never keeps that node alive. Separate mark kinds exist because strategies
work at different granularities (whole elements vs. single text nodes) and
must not block each other; the expansion watcher keeps its own kind for
the icons it already observes.

The storage itself belongs to the document adapter: an in-process tree
keeps a WeakMarkSet per kind, a live browser page keeps a JS WeakSet per
kind inside the page.
"""

import itertools
import weakref
from enum import Enum
from typing import Any, Callable, Dict


class MarkKind(str, Enum):
    ELEMENT = "element"
    TEXT = "text"
    ICON = "icon"


_generation = itertools.count(1)


class WeakMarkSet:
    """
    Identity-keyed weak set of nodes.

    Membership is by identity, not equality (parsed HTML elements compare
    equal when their markup is equal). Nodes that cannot be weakly
    referenced (text nodes are str subclasses) carry a private
    generation-tagged attribute instead, which disappears with the node.
    """

    def __init__(self, name: str):
        self.name = name
        self._attr = f"_glossa_{name}_{next(_generation)}"
        self._refs: Dict[int, weakref.ref] = {}

    def _forget(self, key: int) -> Callable[[weakref.ref], None]:
        def callback(ref: weakref.ref) -> None:
            if self._refs.get(key) is ref:
                del self._refs[key]
        return callback

    def add(self, node: Any) -> None:
        key = id(node)
        try:
            self._refs[key] = weakref.ref(node, self._forget(key))
        except TypeError:
            node.__dict__[self._attr] = True

    def __contains__(self, node: Any) -> bool:
        ref = self._refs.get(id(node))
        if ref is not None and ref() is node:
            return True
        return bool(getattr(node, "__dict__", {}).get(self._attr))

    def __len__(self) -> int:
        """Number of live weakly-referenced members."""
        return sum(1 for ref in self._refs.values() if ref() is not None)


class AnnotationTracker:
    """Consult-before-write, mark-after-write view over one mark kind."""

    def __init__(self, document, kind: MarkKind):
        self.document = document
        self.kind = kind

    async def is_marked(self, node) -> bool:
        return await self.document.is_marked(node, self.kind)

    async def mark(self, node) -> None:
        await self.document.mark(node, self.kind)

    def __repr__(self):
        return f"AnnotationTracker(kind={self.kind.value!r})"
