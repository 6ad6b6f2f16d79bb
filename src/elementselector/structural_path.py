from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from .models import StructuralPath
from .selector_rules import DEFAULT_CLASS_POLICY, ClassPolicy
from .tree import DocumentTree, SelectorQueryError, identifier_of
from .validation import SCOPE_ANCHOR, SHADOW_BOUNDARY

SEGMENT_JOINER = " > "

logger = logging.getLogger("elementselector.structural")


def walk_ancestors(tree: DocumentTree, node: Any, stop: Callable[[Any], bool]) -> list[Any]:
    """Return ``node`` and its parent elements, innermost first.

    The walk ends at the first node satisfying ``stop`` (included) or at the
    top of the node's tree scope. Shadow boundaries are never crossed here.
    """
    chain: list[Any] = []
    current = node
    while current is not None:
        chain.append(current)
        if stop(current):
            break
        current = tree.parent_element(current)
    return chain


def build_structural_path(
    tree: DocumentTree,
    node: Any,
    *,
    policy: ClassPolicy = DEFAULT_CLASS_POLICY,
    deep_shadow_traversal: bool = True,
) -> StructuralPath:
    """Build a positional path that resolves to exactly ``node``.

    Every segment is disambiguated against its container's element children
    only, so no whole-tree query is needed. Identifiers are scope-local: an
    identified ancestor ends the walk inside its tree scope. With deep
    traversal the walk continues from the shadow host of each open root and
    scopes are joined with ``" >>> "``; a shadow scope not headed by an
    identifier starts with ``:scope >`` so its head only matches a direct
    child of the shadow root. Otherwise, or at a closed root, the host's
    tag is prepended and the path is only meaningful in a light-DOM reading
    of the tree.
    """
    scopes: list[list[str]] = []
    pinned: list[bool] = []
    light_dom_only = False
    current = node

    while True:
        chain = walk_ancestors(tree, current, stop=lambda item: identifier_of(tree, item) is not None)
        top = chain[-1]
        top_id = identifier_of(tree, top)

        segments: list[str] = []
        for item in reversed(chain):
            if item is top and top_id:
                segments.append(f"#{tree.escape_identifier(top_id)}")
            else:
                segments.append(_segment_for(tree, item, policy))
        scopes.insert(0, segments)
        pinned.insert(0, False)

        root = tree.root_of(top)
        host = tree.shadow_host(root)
        if host is None:
            break
        if deep_shadow_traversal and tree.shadow_mode(root) == "open":
            pinned[0] = not top_id
            current = host
            continue
        if not top_id:
            segments.insert(0, tree.escape_identifier(tree.tag_name(host)))
            light_dom_only = True
        break

    locator = SHADOW_BOUNDARY.join(_join_scope(scope, head) for scope, head in zip(scopes, pinned))
    anchored = bool(scopes and scopes[0] and scopes[0][0].startswith("#"))
    return StructuralPath(
        locator=locator,
        scopes=scopes,
        anchored_on_id=anchored,
        light_dom_only=light_dom_only,
    )


def _join_scope(segments: Sequence[str], pinned: bool) -> str:
    joined = SEGMENT_JOINER.join(segments)
    if pinned:
        return f"{SCOPE_ANCHOR}{SEGMENT_JOINER}{joined}"
    return joined


def _segment_for(tree: DocumentTree, node: Any, policy: ClassPolicy) -> str:
    tag = tree.escape_identifier(tree.tag_name(node))
    parent = tree.parent_element(node)
    container = parent if parent is not None else tree.root_of(node)
    if tree.same_node(container, node):
        return tag

    siblings = tree.element_children(container)
    if parent is None and tree.shadow_host(container) is None and len(siblings) == 1:
        return tag

    stable = policy.stable_classes(tree.class_tokens(node))
    if stable:
        compound = tag + "".join(f".{tree.escape_identifier(token)}" for token in stable)
        if _is_locally_unique(tree, compound, siblings, node):
            return compound

    return f"{tag}:nth-of-type({_same_tag_position(tree, node, siblings)})"


def _is_locally_unique(tree: DocumentTree, compound: str, siblings: Sequence[Any], node: Any) -> bool:
    matched: Any | None = None
    for sibling in siblings:
        try:
            hit = tree.matches(sibling, compound)
        except SelectorQueryError as exc:
            logger.debug("Local class compound rejected: %s", exc)
            return False
        if not hit:
            continue
        if matched is not None:
            return False
        matched = sibling
    return matched is not None and tree.same_node(matched, node)


def _same_tag_position(tree: DocumentTree, node: Any, siblings: Sequence[Any]) -> int:
    tag = tree.tag_name(node)
    position = 0
    for sibling in siblings:
        if tree.tag_name(sibling) == tag:
            position += 1
        if tree.same_node(sibling, node):
            return max(1, position)
    return max(1, position)
