from __future__ import annotations

from typing import Any, Literal, Protocol, Sequence

ShadowMode = Literal["open", "closed"]


class SelectorQueryError(Exception):
    """The host query facility rejected a locator (bad syntax or host failure)."""

    def __init__(self, locator: str, reason: str) -> None:
        super().__init__(f"Query failed for {locator!r}: {reason}")
        self.locator = locator
        self.reason = reason


class TargetNotFoundError(LookupError):
    def __init__(self, locator: str, match_count: int) -> None:
        super().__init__(f"Target locator {locator!r} matched {match_count} node(s), expected exactly one.")
        self.locator = locator
        self.match_count = match_count


class DocumentTree(Protocol):
    """Read-only view over a document tree.

    Nodes and roots are opaque handles owned by the implementation. A *root*
    is either the document or a shadow root; a *container* is an element or
    a root, i.e. anything with element children. Implementations never
    mutate the underlying tree.
    """

    def document_root(self) -> Any: ...

    def tag_name(self, node: Any) -> str: ...

    def get_attribute(self, node: Any, name: str) -> str | None: ...

    def attributes(self, node: Any) -> list[tuple[str, str]]: ...

    def class_tokens(self, node: Any) -> list[str]: ...

    def text_content(self, node: Any) -> str: ...

    def parent_element(self, node: Any) -> Any | None: ...

    def root_of(self, node: Any) -> Any: ...

    def element_children(self, container: Any) -> list[Any]: ...

    def shadow_host(self, root: Any) -> Any | None: ...

    def shadow_mode(self, root: Any) -> ShadowMode | None: ...

    def open_shadow_root(self, host: Any) -> Any | None: ...

    def same_node(self, left: Any, right: Any) -> bool: ...

    def query_all(self, root: Any, locator: str) -> list[Any]: ...

    def matches(self, node: Any, locator: str) -> bool: ...

    def escape_identifier(self, value: str) -> str: ...

    def release_handles(self, keep: Sequence[Any] = ()) -> int: ...


def identifier_of(tree: DocumentTree, node: Any) -> str | None:
    value = tree.get_attribute(node, "id")
    return value or None


def container_of(tree: DocumentTree, node: Any) -> Any:
    parent = tree.parent_element(node)
    if parent is not None:
        return parent
    return tree.root_of(node)


def previous_element_sibling(tree: DocumentTree, node: Any) -> Any | None:
    previous = None
    for child in tree.element_children(container_of(tree, node)):
        if tree.same_node(child, node):
            return previous
        previous = child
    return None
