from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Protocol, Sequence

from .css_escape import escape_attribute_value
from .models import Candidate, SynthesisResult
from .selector_rules import ClassPolicy, is_form_control, pick_test_attribute
from .settings import SynthesisSettings
from .shadow_path import describe_shadow_path
from .structural_path import build_structural_path
from .tree import DocumentTree, SelectorQueryError, identifier_of, previous_element_sibling
from .validation import SCOPE_ANCHOR, locator_resolves_to

logger = logging.getLogger("elementselector.synthesis")


@dataclass(slots=True)
class SynthesisContext:
    tree: DocumentTree
    settings: SynthesisSettings
    policy: ClassPolicy
    root: Any

    def ident(self, value: str) -> str:
        return self.tree.escape_identifier(value)

    def attr_selector(self, name: str, value: str, tag: str = "") -> str:
        prefix = self.ident(tag) if tag else ""
        return f'{prefix}[{self.ident(name)}="{escape_attribute_value(value)}"]'

    def confirms(self, locator: str, node: Any) -> bool:
        return locator_resolves_to(self.tree, locator, self.root, node)


class LocatorStrategy(Protocol):
    name: str

    def attempt(self, node: Any, context: SynthesisContext) -> Candidate | None: ...


@dataclass(frozen=True, slots=True)
class IdentifierStrategy:
    name: str = "identifier"

    def attempt(self, node: Any, context: SynthesisContext) -> Candidate | None:
        value = identifier_of(context.tree, node)
        if not value:
            return None
        return Candidate(
            locator=f"#{context.ident(value)}",
            strategy="identifier",
            rationale="id attribute",
            confirmed=False,
            metadata={"source_attr": "id", "source_value": value},
        )


@dataclass(frozen=True, slots=True)
class DataAttributeStrategy:
    name: str = "test_attribute"

    def attempt(self, node: Any, context: SynthesisContext) -> Candidate | None:
        picked = pick_test_attribute(
            context.tree.attributes(node),
            prefix=context.settings.test_attribute_prefix,
            tokens=context.settings.test_attribute_tokens,
        )
        if picked is None:
            return None
        attr, value = picked
        return Candidate(
            locator=context.attr_selector(attr, value),
            strategy="test_attribute",
            rationale=f"{attr} attribute",
            confirmed=False,
            metadata={"source_attr": attr, "source_value": value},
        )


@dataclass(frozen=True, slots=True)
class StableClassStrategy:
    name: str = "stable_classes"

    def attempt(self, node: Any, context: SynthesisContext) -> Candidate | None:
        tokens = context.tree.class_tokens(node)
        stable = context.policy.stable_classes(tokens)
        if not stable:
            return None
        tag = context.ident(context.tree.tag_name(node))
        locator = tag + "".join(f".{context.ident(token)}" for token in stable)
        if not context.confirms(locator, node):
            logger.debug("Class combination %s is not unique; falling through.", locator)
            return None
        return Candidate(
            locator=locator,
            strategy="stable_classes",
            rationale="unique class combination",
            confirmed=True,
            metadata={"stable_classes": stable, "dropped_classes": len(tokens) - len(stable)},
        )


@dataclass(frozen=True, slots=True)
class AccessibilityStrategy:
    name: str = "accessibility"

    def attempt(self, node: Any, context: SynthesisContext) -> Candidate | None:
        for attr in ("role", "aria-label"):
            value = context.tree.get_attribute(node, attr)
            if not value:
                continue
            return Candidate(
                locator=context.attr_selector(attr, value),
                strategy="accessibility",
                rationale=f"{attr} attribute",
                confirmed=False,
                metadata={"source_attr": attr, "source_value": value},
            )
        return None


@dataclass(frozen=True, slots=True)
class FormControlStrategy:
    name: str = "form_control"

    def attempt(self, node: Any, context: SynthesisContext) -> Candidate | None:
        tag = context.tree.tag_name(node)
        if not is_form_control(tag):
            return None
        for attr in ("name", "type"):
            value = context.tree.get_attribute(node, attr)
            if not value:
                continue
            return Candidate(
                locator=context.attr_selector(attr, value, tag=tag),
                strategy="form_control",
                rationale=f"{tag} {attr} attribute",
                confirmed=False,
                metadata={"source_attr": attr, "source_value": value},
            )
        return None


@dataclass(frozen=True, slots=True)
class LabelAnchorStrategy:
    """Anchor an id-less node on the identified ``<label>`` right before it.

    A ``<label for=...>`` pointing at the node would need the node to carry
    an id, which the identifier strategy already handles, so only the
    adjacent-sibling association is considered here.
    """

    name: str = "label_anchor"

    def attempt(self, node: Any, context: SynthesisContext) -> Candidate | None:
        tree = context.tree
        label = previous_element_sibling(tree, node)
        if label is None or tree.tag_name(label) != "label":
            return None
        label_id = identifier_of(tree, label)
        if not label_id:
            return None

        tag = context.ident(tree.tag_name(node))
        anchor = f"#{context.ident(label_id)}"
        locator = f"{anchor} + {tag}"
        if not context.confirms(locator, node):
            return None

        parent = tree.parent_element(node)
        scope = context.ident(tree.tag_name(parent)) if parent is not None else SCOPE_ANCHOR
        return Candidate(
            locator=locator,
            strategy="label_anchor",
            rationale="label sibling",
            confirmed=True,
            alternate=f"{scope} > {locator}",
            metadata={"label_id": label_id},
        )


@dataclass(frozen=True, slots=True)
class StructuralPathStrategy:
    name: str = "structural_path"

    def attempt(self, node: Any, context: SynthesisContext) -> Candidate:
        path = build_structural_path(
            context.tree,
            node,
            policy=context.policy,
            deep_shadow_traversal=context.settings.deep_shadow_traversal,
        )
        return Candidate(
            locator=path.locator,
            strategy="structural_path",
            rationale="structural path",
            confirmed=True,
            metadata={
                "segments": path.segment_count,
                "anchored_on_id": path.anchored_on_id,
                "light_dom_only": path.light_dom_only,
            },
        )


DEFAULT_LADDER: tuple[LocatorStrategy, ...] = (
    IdentifierStrategy(),
    DataAttributeStrategy(),
    StableClassStrategy(),
    AccessibilityStrategy(),
    FormControlStrategy(),
    LabelAnchorStrategy(),
)


@dataclass(slots=True)
class SelectorSynthesizer:
    """Walk the strategy ladder and return the first accepted locator.

    The structural path always runs last and always succeeds, so every call
    returns a usable locator.
    """

    tree: DocumentTree
    settings: SynthesisSettings = field(default_factory=SynthesisSettings)
    strategies: Sequence[LocatorStrategy] = DEFAULT_LADDER
    fallback: StructuralPathStrategy = field(default_factory=StructuralPathStrategy)

    def synthesize(self, node: Any) -> SynthesisResult:
        context = SynthesisContext(
            tree=self.tree,
            settings=self.settings,
            policy=self.settings.class_policy(),
            root=self.tree.root_of(node),
        )

        candidate: Candidate | None = None
        for strategy in self.strategies:
            try:
                candidate = strategy.attempt(node, context)
            except SelectorQueryError as exc:
                logger.debug("Strategy %s rejected after query failure: %s", strategy.name, exc)
                candidate = None
            if candidate is not None:
                break
        if candidate is None:
            candidate = self.fallback.attempt(node, context)

        logger.info("Selector %s chosen by %s.", candidate.locator, candidate.strategy)
        return SynthesisResult(
            primary_locator=candidate.locator,
            alternate_locator=candidate.alternate,
            rationale=candidate.rationale,
            strategy=candidate.strategy,
            confirmed=candidate.confirmed,
            shadow_path=describe_shadow_path(self.tree, node),
            metadata=dict(candidate.metadata),
        )


def synthesize_selector(
    tree: DocumentTree,
    node: Any,
    settings: SynthesisSettings | None = None,
) -> SynthesisResult:
    return SelectorSynthesizer(tree=tree, settings=settings or SynthesisSettings()).synthesize(node)
