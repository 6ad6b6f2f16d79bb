from elementselector.selector_rules import (
    ClassPolicy,
    is_form_control,
    is_transient_class,
    normalize_classes,
    pick_test_attribute,
)


def test_normalize_classes_deduplicates_and_trims() -> None:
    assert normalize_classes([" btn ", "btn", "btn-primary", "", "  "]) == ["btn", "btn-primary"]
    assert normalize_classes("btn btn  btn-primary") == ["btn", "btn-primary"]
    assert normalize_classes(None) == []


def test_transient_and_generated_class_detection() -> None:
    assert is_transient_class("css-12ab9c")
    assert is_transient_class("ng-star-inserted")
    assert is_transient_class("jss123")
    assert is_transient_class("sc-aBc123")
    assert is_transient_class("a1b2c3d4e5f6")
    assert is_transient_class("Active")
    assert is_transient_class("btn-primary_a1b2c3")

    assert not is_transient_class("btn-primary")
    assert not is_transient_class("card")
    assert not is_transient_class("toolbar__item")


def test_class_policy_is_configurable() -> None:
    policy = ClassPolicy.from_rules(transient_classes=("is-busy",), generated_patterns=(r"^tw-",))
    assert policy.stable_classes(["is-busy", "tw-flex", "active", "card"]) == ["active", "card"]

    permissive = ClassPolicy.from_rules(transient_classes=(), generated_patterns=())
    assert permissive.stable_classes(["deadbeef42", "card"]) == ["deadbeef42", "card"]


def test_pick_test_attribute_prefers_test_like_names() -> None:
    attributes = [("class", "row"), ("data-row", "3"), ("data-testid", "save"), ("data-qa", "other")]
    assert pick_test_attribute(attributes) == ("data-testid", "save")


def test_pick_test_attribute_falls_back_to_first_custom_attribute() -> None:
    assert pick_test_attribute([("data-row", "3"), ("data-col", "1")]) == ("data-row", "3")
    assert pick_test_attribute([("class", "row"), ("aria-label", "x")]) is None


def test_pick_test_attribute_honours_custom_prefix() -> None:
    attributes = [("data-testid", "a"), ("qa-hook", "b")]
    assert pick_test_attribute(attributes, prefix="qa-", tokens=("hook",)) == ("qa-hook", "b")


def test_form_control_tags() -> None:
    assert is_form_control("INPUT")
    assert is_form_control("textarea")
    assert not is_form_control("div")
