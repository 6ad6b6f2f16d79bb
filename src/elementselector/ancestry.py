from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .css_escape import css_escape
from .selector_rules import DEFAULT_CLASS_POLICY, ClassPolicy
from .structural_path import walk_ancestors
from .tree import DocumentTree, identifier_of

MAX_TREE_CLASSES = 2
MAX_TREE_DATA_ATTRS = 2
DATA_VALUE_LIMIT = 12
TEXT_PREVIEW_LIMIT = 15
LOCATOR_DISPLAY_LIMIT = 60


@dataclass(slots=True)
class AncestryEntry:
    tag: str
    id: str | None = None
    classes: list[str] = field(default_factory=list)
    role: str | None = None
    data_attributes: list[tuple[str, str]] = field(default_factory=list)
    text: str | None = None

    def label(self) -> str:
        parts = [self.tag]
        if self.id:
            parts.append(f"#{css_escape(self.id)}")
        if self.classes:
            parts.append("." + ".".join(self.classes))
        if self.role:
            parts.append(f"[role={self.role}]")
        for name, value in self.data_attributes:
            parts.append(f'[{name}="{value}"]')
        if self.text is not None:
            parts.append(f'"{self.text}"')
        return " ".join(parts)


def describe_ancestry(
    tree: DocumentTree,
    node: Any,
    policy: ClassPolicy = DEFAULT_CLASS_POLICY,
) -> list[AncestryEntry]:
    """Return the ancestor trail of ``node``, outermost first.

    The trail ends at the nearest identified ancestor, or just below the
    document ``<body>``, and never leaves the node's tree scope.
    """
    chain = walk_ancestors(tree, node, stop=lambda item: identifier_of(tree, item) is not None)
    entries: list[AncestryEntry] = []
    for item in chain:
        if _is_document_body(tree, item):
            break
        entries.append(_entry_for(tree, item, policy))
    entries.reverse()
    return entries


def render_ancestry_tree(entries: list[AncestryEntry], locator: str | None = None) -> str:
    lines: list[str] = []
    last_index = len(entries) - 1
    for index, entry in enumerate(entries):
        prefix = ""
        if index > 0:
            prefix = "│ " * (index - 1) + ("└─ " if index == last_index else "├─ ")
        lines.append(prefix + entry.label())

    if locator:
        last_line = entries[-1].label() if entries else ""
        if locator not in last_line:
            lines.append(shorten_locator(locator))
    return "\n".join(lines)


def shorten_locator(locator: str, limit: int = LOCATOR_DISPLAY_LIMIT) -> str:
    if len(locator) <= limit:
        return locator
    return locator[: max(0, limit - 3)] + "..."


def _entry_for(tree: DocumentTree, node: Any, policy: ClassPolicy) -> AncestryEntry:
    data_attributes: list[tuple[str, str]] = []
    for name, value in tree.attributes(node):
        if not name.startswith("data-"):
            continue
        if len(value) > DATA_VALUE_LIMIT:
            value = value[:10] + ".."
        data_attributes.append((name, value))
        if len(data_attributes) == MAX_TREE_DATA_ATTRS:
            break

    text: str | None = None
    content = tree.text_content(node).strip()
    if content and not tree.element_children(node):
        text = content[:TEXT_PREVIEW_LIMIT] + ("..." if len(content) > TEXT_PREVIEW_LIMIT else "")

    return AncestryEntry(
        tag=tree.tag_name(node),
        id=identifier_of(tree, node),
        classes=policy.stable_classes(tree.class_tokens(node))[:MAX_TREE_CLASSES],
        role=tree.get_attribute(node, "role") or None,
        data_attributes=data_attributes,
        text=text,
    )


def _is_document_body(tree: DocumentTree, node: Any) -> bool:
    if tree.tag_name(node) != "body":
        return False
    return tree.shadow_host(tree.root_of(node)) is None
