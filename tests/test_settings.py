import json
from pathlib import Path

from elementselector.settings import SynthesisSettings, load_settings, save_settings


def test_settings_roundtrip(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    original = SynthesisSettings(
        deep_shadow_traversal=False,
        test_attribute_prefix="qa-",
        test_attribute_tokens=("hook",),
        transient_classes=("is-busy",),
        generated_class_patterns=(r"^tw-",),
    )
    ok, error = save_settings(original, config_path)
    assert ok and error is None
    assert load_settings(config_path) == original
    assert not list(tmp_path.glob("*.tmp"))


def test_settings_load_fallbacks(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    assert load_settings(config_path) == SynthesisSettings()
    config_path.write_text("{invalid", encoding="utf-8")
    assert load_settings(config_path) == SynthesisSettings()
    config_path.write_text("[1, 2]", encoding="utf-8")
    assert load_settings(config_path) == SynthesisSettings()


def test_settings_ignore_wrongly_typed_fields(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    payload = {
        "deep_shadow_traversal": "no",
        "test_attribute_prefix": 3,
        "transient_classes": "active",
        "test_attribute_tokens": ["qa", 7, " "],
        "generated_class_patterns": ["^ok-", "(unclosed"],
    }
    config_path.write_text(json.dumps(payload), encoding="utf-8")

    loaded = load_settings(config_path)
    defaults = SynthesisSettings()
    assert loaded.deep_shadow_traversal is True
    assert loaded.test_attribute_prefix == defaults.test_attribute_prefix
    assert loaded.transient_classes == defaults.transient_classes
    assert loaded.test_attribute_tokens == ("qa",)
    assert loaded.generated_class_patterns == ("^ok-",)


def test_settings_feed_the_class_policy() -> None:
    policy = SynthesisSettings(transient_classes=("card",), generated_class_patterns=()).class_policy()
    assert policy.stable_classes(["card", "css-1a", "active"]) == ["css-1a", "active"]


def test_save_settings_reports_unwritable_folder(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    ok, error = save_settings(SynthesisSettings(), blocker / "config.json")
    assert not ok
    assert error is not None and error.startswith("Could not create config folder")
