from __future__ import annotations

from typing import Any

from .models import ShadowHost, ShadowPath
from .tree import DocumentTree, identifier_of


def describe_shadow_path(tree: DocumentTree, node: Any) -> ShadowPath:
    """Describe the shadow hosts enclosing ``node``, outermost first.

    A closed root still yields a host record because the host is visible
    from outside; ``any_closed`` only says that one of the traversed
    boundaries was closed, not that nothing else is hidden elsewhere.
    """
    hosts: list[ShadowHost] = []
    any_closed = False
    current = node
    while True:
        root = tree.root_of(current)
        host = tree.shadow_host(root)
        if host is None:
            break
        mode = tree.shadow_mode(root) or "closed"
        if mode != "open":
            any_closed = True
        hosts.append(ShadowHost(tag=tree.tag_name(host), id=identifier_of(tree, host), mode=mode))
        current = host
    hosts.reverse()
    return ShadowPath(hosts=hosts, any_closed=any_closed)
