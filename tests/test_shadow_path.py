from lxml import html

from elementselector.html_tree import HtmlTree
from elementselector.shadow_path import describe_shadow_path

MARKUP = (
    '<outer-shell id="shell"><template shadowrootmode="open">'
    '<inner-panel><template shadowrootmode="closed"><button>Deep</button></template></inner-panel>'
    "<p>open only</p>"
    "</template></outer-shell>"
    "<h1>light</h1>"
)


def _tree() -> tuple[HtmlTree, dict[str, html.HtmlElement]]:
    document = html.document_fromstring(MARKUP)
    nodes = {name: document.cssselect(name)[0] for name in ("button", "p", "h1")}
    return HtmlTree(document), nodes


def test_light_dom_node_has_empty_shadow_path() -> None:
    tree, nodes = _tree()
    path = describe_shadow_path(tree, nodes["h1"])
    assert path.hosts == []
    assert not path.any_closed
    assert not path.in_shadow_tree


def test_hosts_are_listed_outermost_first() -> None:
    tree, nodes = _tree()
    path = describe_shadow_path(tree, nodes["button"])
    assert path.host_labels() == ["outer-shell#shell", "inner-panel"]
    assert [host.mode for host in path.hosts] == ["open", "closed"]
    assert path.any_closed
    assert path.in_shadow_tree


def test_open_only_path_is_not_flagged_closed() -> None:
    tree, nodes = _tree()
    path = describe_shadow_path(tree, nodes["p"])
    assert path.host_labels() == ["outer-shell#shell"]
    assert not path.any_closed
