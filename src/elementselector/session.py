from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any

from .ancestry import AncestryEntry, describe_ancestry
from .locator_generator import SelectorSynthesizer
from .models import SynthesisResult
from .settings import SynthesisSettings
from .tree import DocumentTree

logger = logging.getLogger("elementselector.session")


@dataclass(slots=True)
class InspectSession:
    """Per-activation state: the node under inspection and its last result."""

    synthesizer: SelectorSynthesizer
    current: Any | None = None
    last_result: SynthesisResult | None = None
    ancestry: list[AncestryEntry] = field(default_factory=list)
    closed: bool = False

    def hover(self, node: Any) -> SynthesisResult | None:
        """Synthesize for ``node``; a closed session ignores hovers."""
        if self.closed:
            logger.debug("Hover ignored on a closed inspect session.")
            return None
        tree = self.synthesizer.tree
        try:
            result = self.synthesizer.synthesize(node)
            ancestry = describe_ancestry(tree, node, self.synthesizer.settings.class_policy())
        finally:
            released = tree.release_handles(keep=(node,))
            if released:
                logger.debug("Released %s node handle(s) after synthesis.", released)
        self.current = node
        self.last_result = result
        self.ancestry = ancestry
        return result

    def clear(self) -> None:
        self.current = None
        self.last_result = None
        self.ancestry = []

    def close(self) -> None:
        self.clear()
        self.closed = True


@dataclass(slots=True)
class SessionController:
    tree: DocumentTree
    settings: SynthesisSettings = field(default_factory=SynthesisSettings)
    session: InspectSession | None = None

    @property
    def active(self) -> bool:
        return self.session is not None

    def activate(self) -> InspectSession:
        if self.session is None:
            self.session = InspectSession(SelectorSynthesizer(tree=self.tree, settings=self.settings))
            logger.info("Inspect session started.")
        return self.session

    def deactivate(self) -> None:
        if self.session is None:
            return
        self.session.close()
        self.session = None
        logger.info("Inspect session ended.")

    def toggle(self) -> bool:
        if self.active:
            self.deactivate()
        else:
            self.activate()
        return self.active
