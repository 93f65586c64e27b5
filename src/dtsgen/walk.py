from contextlib import contextmanager
from typing import Callable, Iterator, List, Mapping, TypeVar

import tree_sitter as ts

from dtsgen.errors import UnhandledNodeKind
from dtsgen.logger import logger

T = TypeVar("T")


class WalkPath:
    """
    Trail of node kinds visited by the current traversal. One instance is
    created per top-level statement and passed explicitly into every dispatch.
    """

    def __init__(self) -> None:
        self._stack: List[str] = []

    @contextmanager
    def enter(self, kind: str) -> Iterator[None]:
        self._stack.append(kind)
        try:
            yield
        finally:
            self._stack.pop()

    @property
    def kinds(self) -> List[str]:
        return list(self._stack)

    def __len__(self) -> int:
        return len(self._stack)

    def __str__(self) -> str:
        return " -> ".join(self._stack)


Handler = Callable[[ts.Node, WalkPath], T]


def walk(node: ts.Node, path: WalkPath, handlers: Mapping[str, Handler[T]]) -> T:
    """
    Invoke the handler registered for the kind of *node* and return its result.
    Raises `UnhandledNodeKind` with the full traversal path when no handler is
    registered for the kind.
    """
    with path.enter(node.type):
        handler = handlers.get(node.type)
        if handler is None:
            logger.debug(
                "No handler for node",
                node_type=node.type,
                path=str(path),
                line=node.start_point[0] + 1,
            )
            raise UnhandledNodeKind(node.type, path.kinds, line=node.start_point[0] + 1)
        return handler(node, path)
