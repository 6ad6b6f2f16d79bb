from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

StrategyName = Literal[
    "identifier",
    "test_attribute",
    "stable_classes",
    "accessibility",
    "form_control",
    "label_anchor",
    "structural_path",
]


@dataclass(slots=True)
class Candidate:
    locator: str
    strategy: StrategyName
    rationale: str
    confirmed: bool
    alternate: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ShadowHost:
    tag: str
    id: str | None
    mode: str

    def label(self) -> str:
        if self.id:
            return f"{self.tag}#{self.id}"
        return self.tag


@dataclass(slots=True)
class ShadowPath:
    hosts: list[ShadowHost] = field(default_factory=list)
    any_closed: bool = False

    def host_labels(self) -> list[str]:
        return [host.label() for host in self.hosts]

    @property
    def in_shadow_tree(self) -> bool:
        return bool(self.hosts)


@dataclass(slots=True)
class StructuralPath:
    locator: str
    scopes: list[list[str]]
    anchored_on_id: bool
    light_dom_only: bool

    @property
    def segment_count(self) -> int:
        return sum(len(scope) for scope in self.scopes)


@dataclass(slots=True)
class SynthesisResult:
    primary_locator: str
    alternate_locator: str | None
    rationale: str
    strategy: StrategyName
    confirmed: bool
    shadow_path: ShadowPath
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "primaryLocator": self.primary_locator,
            "alternateLocator": self.alternate_locator,
            "rationale": self.rationale,
            "shadowPath": {
                "hosts": self.shadow_path.host_labels(),
                "anyClosed": self.shadow_path.any_closed,
            },
        }
