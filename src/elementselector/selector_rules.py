from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Sequence

CUSTOM_DATA_PREFIX = "data-"

TEST_ATTR_TOKENS = ("test", "id", "name", "cy", "qa", "tid")

TRANSIENT_CLASSES = ("active", "hover", "focus", "disabled", "selected", "open", "closed")

GENERATED_CLASS_PATTERNS = (
    r"^(ng|css)-",
    r"^jss\d+$",
    r"^sc-[a-z0-9]+$",
    r"^[a-f0-9]{8,}$",
    r"^[a-z]+__[a-z]+___[a-z0-9]{5,}$",
    # css-module style hash suffix, e.g. btn-primary_a1b2c3
    r"_(?=[a-z0-9]*\d)(?=[a-z0-9]*[a-z])[a-z0-9]{5,}$",
    r"^(?=.*\d).{19,}$",
    r"^(?=.*\d)(?:[^-]*-){3,}",
)

FORM_CONTROL_TAGS = ("button", "input", "select", "textarea")


def normalize_classes(raw: Sequence[str] | str | None) -> list[str]:
    if not raw:
        return []
    if isinstance(raw, str):
        items = raw.split()
    else:
        items = [item for item in raw if isinstance(item, str)]

    seen: set[str] = set()
    normalized: list[str] = []
    for item in items:
        clean = item.strip()
        if not clean or clean in seen:
            continue
        seen.add(clean)
        normalized.append(clean)
    return normalized


@dataclass(frozen=True, slots=True)
class ClassPolicy:
    """Decides which class tokens are stable enough to put in a locator.

    The defaults are heuristics, not a correctness requirement: they exclude
    state classes and tokens that look framework-generated, and both lists
    can be replaced through the settings file.
    """

    transient_classes: frozenset[str]
    generated_patterns: tuple[re.Pattern[str], ...]

    @classmethod
    def from_rules(
        cls,
        transient_classes: Iterable[str] = TRANSIENT_CLASSES,
        generated_patterns: Iterable[str] = GENERATED_CLASS_PATTERNS,
    ) -> ClassPolicy:
        return cls(
            transient_classes=frozenset(item.strip().lower() for item in transient_classes if item.strip()),
            generated_patterns=tuple(re.compile(pattern, re.IGNORECASE) for pattern in generated_patterns),
        )

    def is_transient_class(self, token: str) -> bool:
        value = token.strip()
        if not value:
            return True
        if value.lower() in self.transient_classes:
            return True
        return any(pattern.search(value) for pattern in self.generated_patterns)

    def stable_classes(self, tokens: Sequence[str]) -> list[str]:
        return [token for token in normalize_classes(tokens) if not self.is_transient_class(token)]


DEFAULT_CLASS_POLICY = ClassPolicy.from_rules()


def is_transient_class(token: str) -> bool:
    return DEFAULT_CLASS_POLICY.is_transient_class(token)


def pick_test_attribute(
    attributes: Sequence[tuple[str, str]],
    *,
    prefix: str = CUSTOM_DATA_PREFIX,
    tokens: Sequence[str] = TEST_ATTR_TOKENS,
) -> tuple[str, str] | None:
    prefix_lower = prefix.lower()
    custom = [(name, value) for name, value in attributes if name.lower().startswith(prefix_lower)]
    if not custom:
        return None

    lowered_tokens = [token.lower() for token in tokens if token]
    for name, value in custom:
        lowered = name.lower()
        if any(token in lowered for token in lowered_tokens):
            return name, value
    return custom[0]


def is_form_control(tag: str) -> bool:
    return tag.strip().lower() in FORM_CONTROL_TAGS
