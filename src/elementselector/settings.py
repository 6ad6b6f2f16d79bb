from __future__ import annotations

from dataclasses import asdict, dataclass
import json
from pathlib import Path
import re
import tempfile
from typing import Any

from .selector_rules import (
    CUSTOM_DATA_PREFIX,
    GENERATED_CLASS_PATTERNS,
    TEST_ATTR_TOKENS,
    TRANSIENT_CLASSES,
    ClassPolicy,
)

CONFIG_DIR = Path.home() / ".elementselector"
CONFIG_PATH = CONFIG_DIR / "config.json"


@dataclass(slots=True)
class SynthesisSettings:
    deep_shadow_traversal: bool = True
    test_attribute_prefix: str = CUSTOM_DATA_PREFIX
    test_attribute_tokens: tuple[str, ...] = TEST_ATTR_TOKENS
    transient_classes: tuple[str, ...] = TRANSIENT_CLASSES
    generated_class_patterns: tuple[str, ...] = GENERATED_CLASS_PATTERNS

    def class_policy(self) -> ClassPolicy:
        return ClassPolicy.from_rules(self.transient_classes, self.generated_class_patterns)


def load_settings(config_path: Path | None = None) -> SynthesisSettings:
    path = config_path or CONFIG_PATH
    if not path.exists() or not path.is_file():
        return SynthesisSettings()

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError):
        return SynthesisSettings()

    if not isinstance(payload, dict):
        return SynthesisSettings()

    defaults = SynthesisSettings()
    prefix = payload.get("test_attribute_prefix")
    return SynthesisSettings(
        deep_shadow_traversal=_as_bool(payload.get("deep_shadow_traversal"), defaults.deep_shadow_traversal),
        test_attribute_prefix=prefix.strip() if isinstance(prefix, str) and prefix.strip() else defaults.test_attribute_prefix,
        test_attribute_tokens=_as_str_tuple(payload.get("test_attribute_tokens"), defaults.test_attribute_tokens),
        transient_classes=_as_str_tuple(payload.get("transient_classes"), defaults.transient_classes),
        generated_class_patterns=_as_pattern_tuple(
            payload.get("generated_class_patterns"),
            defaults.generated_class_patterns,
        ),
    )


def save_settings(settings: SynthesisSettings, config_path: Path | None = None) -> tuple[bool, str | None]:
    path = config_path or CONFIG_PATH

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        return False, f"Could not create config folder: {exc}"

    payload = json.dumps(asdict(settings), ensure_ascii=True, indent=2, sort_keys=True)
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            handle.write(payload)
            handle.flush()
            temp_path = Path(handle.name)

        temp_path.replace(path)
    except OSError as exc:
        if temp_path and temp_path.exists():
            temp_path.unlink(missing_ok=True)
        return False, f"Could not write settings: {exc}"

    return True, None


def _as_bool(raw: Any, default: bool) -> bool:
    if isinstance(raw, bool):
        return raw
    return default


def _as_str_tuple(raw: Any, default: tuple[str, ...]) -> tuple[str, ...]:
    if not isinstance(raw, list):
        return default
    return tuple(str(item).strip() for item in raw if isinstance(item, str) and item.strip())


def _as_pattern_tuple(raw: Any, default: tuple[str, ...]) -> tuple[str, ...]:
    values = _as_str_tuple(raw, default)
    if values is default:
        return default
    valid: list[str] = []
    for pattern in values:
        try:
            re.compile(pattern)
        except re.error:
            continue
        valid.append(pattern)
    return tuple(valid)
