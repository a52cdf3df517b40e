"""
LiveDocument - PageDocument over a Playwright page

An injected bridge script owns everything that must live inside the page:

- stable node ids (WeakMap node -> id, Map id -> WeakRef, entries pruned by
  a FinalizationRegistry once the node is collected)
- one WeakSet per mark kind, so marks die with their nodes
- a body MutationObserver, a capturing click listener and per-icon
  attribute observers, all reporting to Python through an exposed binding

Reads are answered from the snapshot taken when a node handle was
produced (text / value), so a walk over thousands of text nodes costs one
round trip. Writes go through the bridge and are no-ops for nodes that are
gone.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from playwright.async_api import Error as PlaywrightError

from ..dom.base import AttributeListener, PageDocument
from ..errors import BridgeError
from ..tracker import MarkKind

logger = logging.getLogger(__name__)

BINDING_NAME = "__glossaNotify"

BRIDGE_SCRIPT = r"""
(() => {
  if (window.__glossa) return;

  const ids = new WeakMap();
  const refs = new Map();
  const observed = new Set();
  const marks = {};
  const SKIP = new Set(['SCRIPT', 'STYLE', 'NOSCRIPT', 'TEMPLATE', 'TEXTAREA']);
  let nextId = 1;
  let bodyObserver = null;

  const notify = (...args) => {
    const binding = window.__glossaNotify;
    if (typeof binding === 'function') {
      Promise.resolve(binding(...args)).catch(() => {});
    }
  };

  const registry = new FinalizationRegistry(id => {
    refs.delete(id);
    if (observed.delete(id)) notify('released', id);
  });

  const idOf = node => {
    let id = ids.get(node);
    if (id === undefined) {
      id = nextId++;
      ids.set(node, id);
      refs.set(id, new WeakRef(node));
      registry.register(node, id);
    }
    return id;
  };
  const nodeOf = id => {
    const ref = refs.get(id);
    return ref ? ref.deref() : undefined;
  };
  const markSet = kind => marks[kind] || (marks[kind] = new WeakSet());
  const elementOf = node => node.nodeType === Node.TEXT_NODE ? node.parentElement : node;
  const describe = node => node.nodeType === Node.TEXT_NODE
    ? { id: idOf(node), tag: '#text', text: node.nodeValue || '' }
    : { id: idOf(node), tag: node.tagName.toLowerCase(), text: node.textContent || '' };
  const keep = (node, exclude, unmarked) => {
    if (unmarked && markSet(unmarked).has(node)) return false;
    if (exclude) {
      const el = elementOf(node);
      if (el && el.closest(exclude)) return false;
    }
    return true;
  };

  window.__glossa = {
    queryAll(selector, rootId) {
      const root = rootId == null ? document : nodeOf(rootId);
      if (!root) return [];
      return Array.from(root.querySelectorAll(selector), describe);
    },
    filter(idList, exclude, unmarked) {
      return idList.filter(id => {
        const node = nodeOf(id);
        return !!node && keep(node, exclude, unmarked);
      });
    },
    closest(id, selector) {
      const node = nodeOf(id);
      const el = node && elementOf(node);
      const found = el && el.closest(selector);
      return found ? describe(found) : null;
    },
    isConnected(id) {
      const node = nodeOf(id);
      return !!node && node.isConnected;
    },
    childTextNodes(id) {
      const node = nodeOf(id);
      if (!node) return [];
      return Array.from(node.childNodes)
        .filter(child => child.nodeType === Node.TEXT_NODE)
        .map(describe);
    },
    walkTextNodes(rootId, exclude, unmarked) {
      const root = rootId == null ? document.body : nodeOf(rootId);
      if (!root) return [];
      const walker = document.createTreeWalker(root, NodeFilter.SHOW_TEXT);
      const out = [];
      let node;
      while ((node = walker.nextNode())) {
        if (node.parentElement && SKIP.has(node.parentElement.tagName)) continue;
        if (keep(node, exclude, unmarked)) out.push(describe(node));
      }
      return out;
    },
    getAttribute(id, name) {
      const node = nodeOf(id);
      return node && node.getAttribute ? node.getAttribute(name) : null;
    },
    setNodeValue(id, value) {
      const node = nodeOf(id);
      if (!node || !node.isConnected) return false;
      node.nodeValue = value;
      return true;
    },
    setTextContent(id, text) {
      const node = nodeOf(id);
      if (!node) return null;
      node.textContent = text;
      return node.firstChild ? describe(node.firstChild) : null;
    },
    setAttribute(id, name, value) {
      const node = nodeOf(id);
      if (!node) return false;
      node.setAttribute(name, value);
      return true;
    },
    replaceWithLines(id, lines) {
      const node = nodeOf(id);
      if (!node) return [];
      const frag = document.createDocumentFragment();
      const created = lines.map((line, i) => {
        if (i) frag.append(document.createElement('br'));
        const text = document.createTextNode(line);
        frag.append(text);
        return text;
      });
      node.replaceChildren(frag);
      return created.map(describe);
    },
    isMarked(id, kind) {
      const node = nodeOf(id);
      return !!node && markSet(kind).has(node);
    },
    mark(id, kind) {
      const node = nodeOf(id);
      if (node) markSet(kind).add(node);
      return !!node;
    },
    observeAttributes(id, names) {
      const node = nodeOf(id);
      if (!node) return false;
      const mo = new MutationObserver(() => {
        const attrs = {};
        names.forEach(name => { attrs[name] = node.getAttribute(name) || ''; });
        notify('attributes', id, attrs);
      });
      mo.observe(node, { attributes: true, attributeFilter: names });
      observed.add(id);
      return true;
    },
    start() {
      if (bodyObserver) return true;
      if (!document.body) return false;
      bodyObserver = new MutationObserver(() => notify('mutation'));
      bodyObserver.observe(document.body, { childList: true, subtree: true });
      document.addEventListener('click', () => notify('click'), true);
      return true;
    },
  };
})();
"""


@dataclass(frozen=True, eq=False)
class LiveNode:
    """Handle on a page node: bridge id plus the text seen when it was fetched."""
    id: int
    tag: str
    text: str = ""

    @property
    def is_text(self) -> bool:
        return self.tag == "#text"

    def __eq__(self, other):
        return isinstance(other, LiveNode) and other.id == self.id

    def __hash__(self):
        return hash(self.id)


class LiveDocument(PageDocument):

    def __init__(self, page):
        super().__init__()
        self.page = page
        self._binding_installed = False
        self._attribute_listeners: Dict[int, List[Tuple[LiveNode, AttributeListener]]] = {}

    async def install(self) -> None:
        """Expose the notification binding and inject the bridge (idempotent)."""
        try:
            if not self._binding_installed:
                await self.page.expose_binding(BINDING_NAME, self._on_binding)
                await self.page.add_init_script(BRIDGE_SCRIPT)
                self._binding_installed = True
            await self.page.evaluate(BRIDGE_SCRIPT)
        except PlaywrightError as e:
            raise BridgeError(f"Could not install page bridge: {e}") from e

    async def start_observing(self) -> bool:
        """Attach the body mutation observer and click listener in the page."""
        return bool(await self._call("start"))

    def reset(self) -> None:
        """Forget per-page state after a navigation (node ids restart)."""
        self._attribute_listeners.clear()

    async def _call(self, method: str, *args: Any) -> Any:
        try:
            return await self.page.evaluate(
                f"args => window.__glossa.{method}(...args)", list(args)
            )
        except PlaywrightError as e:
            raise BridgeError(f"Bridge call {method} failed: {e}") from e

    @staticmethod
    def _node(data: Optional[Dict[str, Any]]) -> Optional[LiveNode]:
        if not data:
            return None
        return LiveNode(id=data["id"], tag=data["tag"], text=data.get("text") or "")

    def _nodes(self, items: Optional[List[Dict[str, Any]]]) -> List[LiveNode]:
        return [self._node(item) for item in items or []]

    # -- page -> python ----------------------------------------------------

    def _on_binding(self, source: Dict[str, Any], kind: str, node_id: Optional[int] = None,
                    attributes: Optional[Dict[str, str]] = None) -> None:
        if kind == "mutation":
            self.emit_mutation()
        elif kind == "click":
            self.emit_click()
        elif kind == "attributes":
            for node, callback in list(self._attribute_listeners.get(node_id, [])):
                try:
                    callback(node, attributes or {})
                except Exception as e:
                    logger.warning(f"Attribute observer failed: {e}")
        elif kind == "released":
            self._attribute_listeners.pop(node_id, None)
        else:
            logger.debug(f"Unknown bridge notification: {kind}")

    # -- queries ---------------------------------------------------------

    async def query_all(self, selector: str, root: Any = None) -> List[Any]:
        return self._nodes(await self._call("queryAll", selector, root.id if root is not None else None))

    async def filter_nodes(self, nodes, exclude=None, unmarked=None) -> List[Any]:
        if not nodes:
            return []
        kept = set(await self._call(
            "filter", [n.id for n in nodes], exclude, unmarked.value if unmarked else None
        ))
        return [n for n in nodes if n.id in kept]

    async def closest(self, node: Any, selector: str) -> Optional[Any]:
        return self._node(await self._call("closest", node.id, selector))

    async def is_connected(self, node: Any) -> bool:
        return bool(await self._call("isConnected", node.id))

    async def text_content(self, node: Any) -> str:
        return node.text

    async def child_text_nodes(self, node: Any) -> List[Any]:
        return self._nodes(await self._call("childTextNodes", node.id))

    async def walk_text_nodes(self, root=None, exclude=None, unmarked=None) -> List[Any]:
        return self._nodes(await self._call(
            "walkTextNodes", root.id if root is not None else None, exclude, unmarked.value if unmarked else None
        ))

    async def node_value(self, text_node: Any) -> str:
        return text_node.text

    async def get_attribute(self, node: Any, name: str) -> Optional[str]:
        return await self._call("getAttribute", node.id, name)

    # -- writes ----------------------------------------------------------

    async def set_node_value(self, text_node: Any, value: str) -> Any:
        if not await self._call("setNodeValue", text_node.id, value):
            return None
        return LiveNode(id=text_node.id, tag=text_node.tag, text=value)

    async def set_text_content(self, node: Any, text: str) -> Any:
        return self._node(await self._call("setTextContent", node.id, text))

    async def set_attribute(self, node: Any, name: str, value: str) -> None:
        await self._call("setAttribute", node.id, name, value)

    async def replace_with_lines(self, node: Any, lines: Sequence[str]) -> List[Any]:
        return self._nodes(await self._call("replaceWithLines", node.id, list(lines)))

    # -- marks -----------------------------------------------------------

    async def is_marked(self, node: Any, kind: MarkKind) -> bool:
        return bool(await self._call("isMarked", node.id, kind.value))

    async def mark(self, node: Any, kind: MarkKind) -> None:
        await self._call("mark", node.id, kind.value)

    async def observe_attributes(self, node, names, callback) -> None:
        self._attribute_listeners.setdefault(node.id, []).append((node, callback))
        await self._call("observeAttributes", node.id, list(names))
