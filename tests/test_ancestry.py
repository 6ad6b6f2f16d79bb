from elementselector.ancestry import AncestryEntry, describe_ancestry, render_ancestry_tree, shorten_locator
from elementselector.html_tree import HtmlTree

MARKUP = """
<body>
  <div id="page">
    <ul class="list ng-star">
      <li class="item active" role="option" data-index="3" data-long-identifier="abcdefghijklmnop" data-x="1">A very long item label</li>
    </ul>
  </div>
</body>
"""


def test_ancestry_stops_at_nearest_identified_ancestor() -> None:
    tree = HtmlTree.from_html(MARKUP)
    entries = describe_ancestry(tree, tree.select_target("li"))

    assert [entry.tag for entry in entries] == ["div", "ul", "li"]
    assert entries[0].id == "page"
    assert entries[1].classes == ["list"]

    leaf = entries[2]
    assert leaf.classes == ["item"]
    assert leaf.role == "option"
    assert leaf.data_attributes == [("data-index", "3"), ("data-long-identifier", "abcdefghij..")]
    assert leaf.text == "A very long ite..."


def test_ancestry_never_includes_the_document_body() -> None:
    tree = HtmlTree.from_html("<html><body><main><p>short</p></main></body></html>")
    entries = describe_ancestry(tree, tree.select_target("p"))
    assert [entry.tag for entry in entries] == ["main", "p"]
    assert entries[0].text is None
    assert entries[1].text == "short"


def test_render_ancestry_tree_draws_connectors() -> None:
    tree = HtmlTree.from_html(MARKUP)
    entries = describe_ancestry(tree, tree.select_target("li"))

    rendered = render_ancestry_tree(entries)
    assert rendered.splitlines() == [
        "div #page",
        "├─ ul .list",
        '│ └─ li .item [role=option] [data-index="3"] [data-long-identifier="abcdefghij.."] "A very long ite..."',
    ]


def test_render_ancestry_tree_appends_locator_only_when_not_shown() -> None:
    entries = [AncestryEntry(tag="button", id="go")]
    assert render_ancestry_tree(entries, "#go") == "button #go"
    assert render_ancestry_tree(entries, "button.primary") == "button #go\nbutton.primary"


def test_entry_label_escapes_unsafe_ids() -> None:
    assert AncestryEntry(tag="p", id="1st").label() == "p #\\31 st"


def test_shorten_locator() -> None:
    assert shorten_locator("#toolbar") == "#toolbar"
    assert shorten_locator("a" * 60) == "a" * 60
    shortened = shorten_locator("a" * 61)
    assert shortened == "a" * 57 + "..."
    assert len(shortened) == 60
