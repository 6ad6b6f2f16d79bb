"""CSS selector synthesis for elements in light and shadow DOM trees."""

from __future__ import annotations

from .locator_generator import SelectorSynthesizer, synthesize_selector
from .models import ShadowHost, ShadowPath, SynthesisResult
from .settings import SynthesisSettings, load_settings, save_settings
from .tree import DocumentTree, SelectorQueryError, TargetNotFoundError

__version__ = "0.1.0"

__all__ = [
    "DocumentTree",
    "SelectorQueryError",
    "SelectorSynthesizer",
    "ShadowHost",
    "ShadowPath",
    "SynthesisResult",
    "SynthesisSettings",
    "TargetNotFoundError",
    "load_settings",
    "save_settings",
    "synthesize_selector",
]
