from typing import Iterator, List, Optional

import tree_sitter as ts


def get_node_text(node) -> str:
    """
    Get text of the tree sitter node
    """
    if not node or not node.text:
        return ""

    return node.text.decode("utf-8")


def get_node_line(node) -> int:
    return node.start_point[0] + 1


def string_value(node) -> str:
    """Value of a `string` literal node without its quotes."""
    return get_node_text(node)[1:-1]


def code_children(node: ts.Node) -> List[ts.Node]:
    """Named children of *node*, comments excluded."""
    return [c for c in node.named_children if c.type != "comment"]


def first_code_child(node: ts.Node) -> Optional[ts.Node]:
    children = code_children(node)
    return children[0] if children else None


def iter_errors(node: ts.Node) -> Iterator[ts.Node]:
    """Yield `ERROR` and missing nodes below *node*, in source order."""
    stack = [node]
    while stack:
        cur = stack.pop()
        if cur.type == "ERROR" or cur.is_missing:
            yield cur
            continue
        if cur.has_error:
            stack.extend(reversed(cur.children))
