from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from .tree import DocumentTree, SelectorQueryError, container_of

SHADOW_BOUNDARY = " >>> "
SCOPE_ANCHOR = ":scope"
COMBINATORS = frozenset({">", "+", "~"})

logger = logging.getLogger("elementselector.validation")


@dataclass(frozen=True, slots=True)
class LocatorValidation:
    unique: bool
    match_count: int
    resolves_to_target: bool
    message: str


def query_locator(tree: DocumentTree, locator: str, root: Any | None = None) -> list[Any] | None:
    """Run ``locator`` inside ``root`` (the document by default).

    A locator headed by ``:scope`` is matched step by step from the root's
    own element children, since a shadow root cannot act as ``:scope`` in
    the host query facility. Returns ``None`` when the locator is rejected.
    """
    text = str(locator or "").strip()
    if not text:
        return None
    scope = root if root is not None else tree.document_root()
    try:
        if text.startswith(SCOPE_ANCHOR):
            steps = split_compounds(text)
            if steps[0] == ("", SCOPE_ANCHOR):
                return _query_from_scope(tree, steps[1:], scope)
        return tree.query_all(scope, text)
    except SelectorQueryError as exc:
        logger.debug("Locator rejected by query facility: %s", exc)
        return None


def count_locator_matches(tree: DocumentTree, locator: str, root: Any | None = None) -> int:
    matches = query_locator(tree, locator, root)
    if matches is None:
        return 0
    return len(matches)


def is_unique_locator(tree: DocumentTree, locator: str, root: Any | None = None) -> bool:
    return count_locator_matches(tree, locator, root) == 1


def locator_resolves_to(tree: DocumentTree, locator: str, root: Any | None, node: Any) -> bool:
    scope = root if root is not None else tree.document_root()
    verdict = validate_locator_candidate(tree, locator, node, root=scope)
    if not verdict.resolves_to_target:
        logger.debug("Candidate %s rejected: %s", locator, verdict.message)
    return verdict.resolves_to_target


def validate_locator_candidate(
    tree: DocumentTree,
    locator: str,
    node: Any,
    root: Any | None = None,
) -> LocatorValidation:
    scope = root if root is not None else tree.root_of(node)
    matches = query_locator(tree, locator, scope)
    if matches is None:
        return LocatorValidation(False, 0, False, "Locator rejected by query facility.")

    match_count = len(matches)
    resolves = match_count == 1 and tree.same_node(matches[0], node)
    if match_count == 0:
        return LocatorValidation(False, 0, False, "Locator matches nothing.")
    if match_count > 1:
        return LocatorValidation(False, match_count, False, "Locator is not unique in its tree.")
    if not resolves:
        return LocatorValidation(True, 1, False, "Locator matches a different node.")
    return LocatorValidation(True, 1, True, "Locator is unique and resolves to the target.")


def resolve_locator(tree: DocumentTree, locator: str, root: Any | None = None) -> list[Any]:
    """Evaluate ``locator`` and return every matching node.

    Each ``" >>> "`` boundary enters the open shadow root of every node
    matched so far; the remaining part is queried inside it. Closed roots
    cannot be entered from their host, so they contribute no matches.
    """
    parts = split_shadow_boundaries(str(locator or ""))
    if not parts or any(not part for part in parts):
        return []

    scopes = [root if root is not None else tree.document_root()]
    matched: list[Any] = []
    for index, part in enumerate(parts):
        matched = []
        for scope in scopes:
            found = query_locator(tree, part, scope)
            if found:
                matched.extend(found)
        if index == len(parts) - 1:
            break
        scopes = []
        for host in matched:
            shadow_root = tree.open_shadow_root(host)
            if shadow_root is not None:
                scopes.append(shadow_root)
        if not scopes:
            return []
    return matched


def split_shadow_boundaries(locator: str) -> list[str]:
    marker = SHADOW_BOUNDARY.strip()
    parts: list[str] = []
    in_quote: str | None = None
    bracket_depth = 0
    paren_depth = 0
    start = 0
    index = 0

    while index < len(locator):
        char = locator[index]
        if in_quote:
            if char == "\\":
                index += 2
                continue
            if char == in_quote:
                in_quote = None
            index += 1
            continue
        if char == "\\":
            index += 2
            continue
        if char in {"'", '"'}:
            in_quote = char
        elif char == "[":
            bracket_depth += 1
        elif char == "]":
            bracket_depth = max(0, bracket_depth - 1)
        elif char == "(":
            paren_depth += 1
        elif char == ")":
            paren_depth = max(0, paren_depth - 1)
        elif bracket_depth == 0 and paren_depth == 0 and locator.startswith(marker, index):
            parts.append(locator[start:index].strip())
            index += len(marker)
            start = index
            continue
        index += 1

    parts.append(locator[start:].strip())
    return parts


def split_compounds(selector: str) -> list[tuple[str, str]]:
    """Split ``selector`` into ``(combinator, compound)`` steps.

    The first step carries an empty combinator and descendant combinators
    are reported as ``" "``. Quoted strings, attribute brackets and
    functional arguments are never split.
    """
    steps: list[tuple[str, str]] = []
    combinator = ""
    buffer: list[str] = []
    in_quote: str | None = None
    bracket_depth = 0
    paren_depth = 0
    index = 0

    while index < len(selector):
        char = selector[index]
        if char == "\\":
            end = _escape_end(selector, index)
            buffer.append(selector[index:end])
            index = end
            continue
        if in_quote:
            if char == in_quote:
                in_quote = None
            buffer.append(char)
            index += 1
            continue
        if bracket_depth == 0 and paren_depth == 0 and (char.isspace() or char in COMBINATORS):
            if buffer:
                steps.append((combinator, "".join(buffer)))
                buffer = []
                combinator = " "
            if char in COMBINATORS:
                if combinator.strip():
                    raise SelectorQueryError(selector, f"unexpected combinator {char!r}")
                combinator = char
            index += 1
            continue
        if char in {"'", '"'}:
            in_quote = char
        elif char == "[":
            bracket_depth += 1
        elif char == "]":
            bracket_depth = max(0, bracket_depth - 1)
        elif char == "(":
            paren_depth += 1
        elif char == ")":
            paren_depth = max(0, paren_depth - 1)
        buffer.append(char)
        index += 1

    if buffer:
        steps.append((combinator, "".join(buffer)))
    elif combinator.strip():
        raise SelectorQueryError(selector, "dangling combinator")
    if not steps:
        raise SelectorQueryError(selector, "empty selector")
    return steps


def _query_from_scope(tree: DocumentTree, steps: list[tuple[str, str]], scope: Any) -> list[Any]:
    if not steps or steps[0][0] not in {">", " "}:
        return []
    current = [scope]
    for combinator, compound in steps:
        candidates: list[Any] = []
        for base in current:
            candidates.extend(_related_nodes(tree, base, combinator, is_scope=base is scope))
        if combinator in {" ", "~"}:
            candidates = _distinct(tree, candidates)
        current = [candidate for candidate in candidates if tree.matches(candidate, compound)]
        if not current:
            break
    return current


def _related_nodes(tree: DocumentTree, base: Any, combinator: str, *, is_scope: bool) -> list[Any]:
    if combinator == ">":
        return tree.element_children(base)
    if combinator == " ":
        return tree.query_all(base, "*")
    if is_scope:
        return []
    following: list[Any] = []
    seen_base = False
    for sibling in tree.element_children(container_of(tree, base)):
        if seen_base:
            following.append(sibling)
            if combinator == "+":
                break
        elif tree.same_node(sibling, base):
            seen_base = True
    return following


def _distinct(tree: DocumentTree, nodes: list[Any]) -> list[Any]:
    unique: list[Any] = []
    for node in nodes:
        if not any(tree.same_node(node, kept) for kept in unique):
            unique.append(node)
    return unique


def _escape_end(text: str, index: int) -> int:
    # a hex escape swallows one trailing whitespace character
    end = index + 1
    while end < len(text) and end - index <= 6 and text[end] in "0123456789abcdefABCDEF":
        end += 1
    if end == index + 1:
        return min(len(text), index + 2)
    if end < len(text) and text[end] in " \t\n":
        end += 1
    return end
