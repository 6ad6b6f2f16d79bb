from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from playwright.sync_api import Error as PlaywrightError

from .css_escape import css_escape
from .tree import SelectorQueryError, ShadowMode, TargetNotFoundError
from .validation import resolve_locator

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle, JSHandle, Page

SCRIPTS = {
    "document": "() => document",
    "tag_name": "(el) => (el.localName || el.tagName || '').toLowerCase()",
    "get_attribute": "(el, name) => el.getAttribute(name)",
    "attributes": "(el) => Array.from(el.attributes || []).map((attr) => [attr.name, attr.value])",
    "class_tokens": "(el) => Array.from(el.classList || [])",
    "text_content": "(el) => el.textContent || ''",
    "parent_element": "(el) => el.parentElement",
    "root_of": "(el) => el.getRootNode()",
    "element_children": "(container) => Array.from(container.children || [])",
    "shadow_host": "(root) => (root instanceof ShadowRoot ? root.host : null)",
    "shadow_mode": "(root) => (root instanceof ShadowRoot ? root.mode : null)",
    "open_shadow_root": "(host) => host.shadowRoot",
    "same_node": "(left, right) => left === right",
    "query_all": "(root, locator) => Array.from(root.querySelectorAll(locator))",
    "matches": "(el, locator) => el.matches(locator)",
    "css_escape": "(value) => (globalThis.CSS && typeof CSS.escape === 'function') ? CSS.escape(value) : null",
}


class PlaywrightTree:
    """Live view over a page driven through Playwright's sync API.

    Every read is one ``evaluate`` round trip, so results reflect the page at
    the moment of the call. Queries run ``querySelectorAll`` on the
    containing root and never pierce shadow roots on their own. Element
    handles handed out by the tree stay alive until ``release_handles``.
    """

    def __init__(self, page: Page) -> None:
        self.page = page
        self._handles: list[ElementHandle] = []

    @classmethod
    def from_page(cls, page: Page) -> PlaywrightTree:
        return cls(page)

    def document_root(self) -> ElementHandle:
        handle = self.page.evaluate_handle(SCRIPTS["document"])
        element = self._as_element(handle)
        if element is None:
            raise RuntimeError("Page did not expose a document node.")
        return element

    def tag_name(self, node: ElementHandle) -> str:
        return str(node.evaluate(SCRIPTS["tag_name"]) or "")

    def get_attribute(self, node: ElementHandle, name: str) -> str | None:
        value = node.evaluate(SCRIPTS["get_attribute"], name)
        if value is None:
            return None
        return str(value)

    def attributes(self, node: ElementHandle) -> list[tuple[str, str]]:
        payload = node.evaluate(SCRIPTS["attributes"]) or []
        return [(str(name), str(value)) for name, value in payload]

    def class_tokens(self, node: ElementHandle) -> list[str]:
        return [str(token) for token in node.evaluate(SCRIPTS["class_tokens"]) or []]

    def text_content(self, node: ElementHandle) -> str:
        return str(node.evaluate(SCRIPTS["text_content"]) or "")

    def parent_element(self, node: ElementHandle) -> ElementHandle | None:
        return self._as_element(node.evaluate_handle(SCRIPTS["parent_element"]))

    def root_of(self, node: ElementHandle) -> ElementHandle:
        root = self._as_element(node.evaluate_handle(SCRIPTS["root_of"]))
        return root if root is not None else node

    def element_children(self, container: ElementHandle) -> list[ElementHandle]:
        return self._element_list(container.evaluate_handle(SCRIPTS["element_children"]))

    def shadow_host(self, root: ElementHandle) -> ElementHandle | None:
        return self._as_element(root.evaluate_handle(SCRIPTS["shadow_host"]))

    def shadow_mode(self, root: ElementHandle) -> ShadowMode | None:
        mode = root.evaluate(SCRIPTS["shadow_mode"])
        if mode in ("open", "closed"):
            return mode
        return None

    def open_shadow_root(self, host: ElementHandle) -> ElementHandle | None:
        return self._as_element(host.evaluate_handle(SCRIPTS["open_shadow_root"]))

    def same_node(self, left: Any, right: Any) -> bool:
        if left is right:
            return True
        if left is None or right is None:
            return False
        return bool(left.evaluate(SCRIPTS["same_node"], right))

    def query_all(self, root: ElementHandle, locator: str) -> list[ElementHandle]:
        try:
            return self._element_list(root.evaluate_handle(SCRIPTS["query_all"], locator))
        except PlaywrightError as exc:
            raise SelectorQueryError(locator, str(exc)) from exc

    def matches(self, node: ElementHandle, locator: str) -> bool:
        try:
            return bool(node.evaluate(SCRIPTS["matches"], locator))
        except PlaywrightError as exc:
            raise SelectorQueryError(locator, str(exc)) from exc

    def escape_identifier(self, value: str) -> str:
        escaped = self.page.evaluate(SCRIPTS["css_escape"], value)
        if escaped is None:
            return css_escape(value)
        return str(escaped)

    def select_target(self, locator: str) -> ElementHandle:
        found = resolve_locator(self, locator)
        if len(found) != 1:
            raise TargetNotFoundError(locator, len(found))
        return found[0]

    def release_handles(self, keep: Sequence[Any] = ()) -> int:
        """Dispose every element handle handed out so far, except ``keep``."""
        pending = list({id(handle): handle for handle in self._handles}.values())
        self._handles = []
        released = 0
        for handle in pending:
            if any(handle is kept for kept in keep):
                self._handles.append(handle)
                continue
            handle.dispose()
            released += 1
        return released

    def _as_element(self, handle: JSHandle) -> ElementHandle | None:
        element = handle.as_element()
        if element is None:
            handle.dispose()
            return None
        self._handles.append(element)
        return element

    def _element_list(self, handle: JSHandle) -> list[ElementHandle]:
        try:
            properties = handle.get_properties()
            indexed: list[tuple[int, ElementHandle]] = []
            for key, item in properties.items():
                if not str(key).isdigit():
                    item.dispose()
                    continue
                element = item.as_element()
                if element is not None:
                    indexed.append((int(key), element))
            indexed.sort(key=lambda pair: pair[0])
            elements = [element for _, element in indexed]
            self._handles.extend(elements)
            return elements
        finally:
            handle.dispose()
