from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from cssselect import HTMLTranslator, SelectorError
from lxml import etree, html

from .css_escape import css_escape
from .tree import SelectorQueryError, ShadowMode, TargetNotFoundError
from .validation import resolve_locator

_TRANSLATOR = HTMLTranslator()


@dataclass(slots=True)
class _ShadowRootRecord:
    host: html.HtmlElement
    fragment: html.HtmlElement
    mode: ShadowMode


class HtmlTree:
    """Point-in-time snapshot of an HTML document parsed with lxml.

    Declarative shadow DOM is honoured: the first
    ``<template shadowrootmode="open|closed">`` child of an element is
    detached from the document and becomes that element's shadow root, so
    document queries never see shadow content and queries against a shadow
    root stay inside it. Selectors are translated to XPath by cssselect.
    """

    def __init__(self, root: html.HtmlElement) -> None:
        self.document = root.getroottree()
        self.root = self.document.getroot()
        self._shadow_by_host: dict[int, _ShadowRootRecord] = {}
        self._shadow_by_fragment: dict[int, _ShadowRootRecord] = {}
        self._attach_declarative_shadow_roots()

    @classmethod
    def from_html(cls, markup: str) -> HtmlTree:
        return cls(html.document_fromstring(markup))

    def _attach_declarative_shadow_roots(self) -> None:
        for template in list(self.root.iter("template")):
            mode = str(template.get("shadowrootmode") or "").strip().lower()
            if mode not in {"open", "closed"}:
                continue
            host = template.getparent()
            if host is None or id(host) in self._shadow_by_host:
                continue

            template.drop_tree()
            template.tail = None
            record = _ShadowRootRecord(host=host, fragment=template, mode=mode)  # type: ignore[arg-type]
            self._shadow_by_host[id(host)] = record
            self._shadow_by_fragment[id(template)] = record

    def _fragment_record(self, node: Any) -> _ShadowRootRecord | None:
        record = self._shadow_by_fragment.get(id(node))
        if record is None or record.fragment is not node:
            return None
        return record

    def document_root(self) -> etree._ElementTree:
        return self.document

    def tag_name(self, node: html.HtmlElement) -> str:
        return str(node.tag).lower()

    def get_attribute(self, node: html.HtmlElement, name: str) -> str | None:
        return node.get(name)

    def attributes(self, node: html.HtmlElement) -> list[tuple[str, str]]:
        return [(str(name), str(value)) for name, value in node.attrib.items()]

    def class_tokens(self, node: html.HtmlElement) -> list[str]:
        return (node.get("class") or "").split()

    def text_content(self, node: html.HtmlElement) -> str:
        return node.text_content()

    def parent_element(self, node: html.HtmlElement) -> html.HtmlElement | None:
        parent = node.getparent()
        if parent is None or self._fragment_record(parent) is not None:
            return None
        return parent

    def root_of(self, node: html.HtmlElement) -> Any:
        current = node
        while True:
            parent = current.getparent()
            if parent is None:
                break
            current = parent
        if current is self.root:
            return self.document
        return current

    def element_children(self, container: Any) -> list[html.HtmlElement]:
        if container is self.document:
            return [self.root]
        return [child for child in container if isinstance(child.tag, str)]

    def shadow_host(self, root: Any) -> html.HtmlElement | None:
        record = self._fragment_record(root)
        return record.host if record is not None else None

    def shadow_mode(self, root: Any) -> ShadowMode | None:
        record = self._fragment_record(root)
        return record.mode if record is not None else None

    def open_shadow_root(self, host: html.HtmlElement) -> html.HtmlElement | None:
        record = self._shadow_by_host.get(id(host))
        if record is None or record.host is not host or record.mode != "open":
            return None
        return record.fragment

    def same_node(self, left: Any, right: Any) -> bool:
        return left is right

    def query_all(self, root: Any, locator: str) -> list[html.HtmlElement]:
        return self._select(root, locator)

    def matches(self, node: html.HtmlElement, locator: str) -> bool:
        return any(item is node for item in self._select(self.root_of(node), locator, include_root=True))

    def escape_identifier(self, value: str) -> str:
        return css_escape(value)

    def release_handles(self, keep: Sequence[Any] = ()) -> int:
        # snapshot nodes hold no remote resources
        return 0

    def select_target(self, locator: str) -> html.HtmlElement:
        found = resolve_locator(self, locator)
        if len(found) != 1:
            raise TargetNotFoundError(locator, len(found))
        return found[0]

    def _select(self, root: Any, locator: str, include_root: bool = False) -> list[html.HtmlElement]:
        if root is self.document:
            context, prefix = self.root, "descendant-or-self::"
        else:
            # querySelectorAll on a shadow root never returns the root itself
            context = root
            prefix = "descendant-or-self::" if include_root else "descendant::"
        try:
            expression = etree.XPath(_TRANSLATOR.css_to_xpath(locator, prefix=prefix))
            found = expression(context)
        except (SelectorError, etree.XPathError) as exc:
            raise SelectorQueryError(locator, str(exc)) from exc
        return [item for item in found if isinstance(getattr(item, "tag", None), str)]
