"""
Composition and traversal of node-type keyed visitors.

A visitor maps a node type (`"ClassDeclaration"`) or an exit event
(`"Program:exit"`) to a handler taking the node. Independent checks each
provide their own visitor; `VisitorBuilder` collects them in registration
order and compiles a single dispatch table, so the AST is walked once no
matter how many checks are active. Keys may name several node types
separated by commas.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Tuple

Node = Dict[str, Any]
Handler = Callable[[Node], None]
Visitor = Mapping[str, Handler]

EXIT_SUFFIX = ":exit"

_SKIPPED_KEYS = frozenset({"type", "loc", "range", "errors", "comments", "tokens"})


def _split_key(key: str) -> List[str]:
    return [part.strip() for part in key.split(",") if part.strip()]


def _multiplex(handlers: Tuple[Handler, ...]) -> Handler:
    def dispatch(node: Node) -> None:
        for handler in handlers:
            handler(node)

    dispatch.handlers = handlers  # type: ignore[attr-defined]
    return dispatch


class VisitorBuilder:
    """Accumulates handlers per node type, preserving registration order."""

    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = {}

    def merge(self, visitor: Visitor) -> "VisitorBuilder":
        for key, handler in visitor.items():
            for node_type in _split_key(key):
                self._handlers.setdefault(node_type, []).append(handler)
        return self

    def handler_count(self, node_type: str) -> int:
        return len(self._handlers.get(node_type, ()))

    def compile(self) -> Dict[str, Handler]:
        """Freeze the collected handlers into a dispatch table."""
        table: Dict[str, Handler] = {}
        for node_type, handlers in self._handlers.items():
            if len(handlers) == 1:
                table[node_type] = handlers[0]
            else:
                table[node_type] = _multiplex(tuple(handlers))
        return table


def merge_visitors(*visitors: Visitor) -> Dict[str, Handler]:
    builder = VisitorBuilder()
    for visitor in visitors:
        builder.merge(visitor)
    return builder.compile()


def traverse(ast: Node, dispatch: Mapping[str, Handler]) -> None:
    """
    Walk `ast` depth-first in source order, calling `dispatch[type]` when a
    node is entered and `dispatch[type + ":exit"]` when it is left.
    """
    # Explicit stack of (node, exiting) pairs; deep ASTs would overflow recursion.
    stack: List[Tuple[Node, bool]] = [(ast, False)]
    while stack:
        node, exiting = stack.pop()
        node_type = node.get("type")
        if exiting:
            handler = dispatch.get(f"{node_type}{EXIT_SUFFIX}")
            if handler is not None:
                handler(node)
            continue

        handler = dispatch.get(node_type)
        if handler is not None:
            handler(node)
        stack.append((node, True))

        children: List[Node] = []
        for key, value in node.items():
            if key in _SKIPPED_KEYS:
                continue
            if isinstance(value, dict) and "type" in value:
                children.append(value)
            elif isinstance(value, list):
                children.extend(item for item in value if isinstance(item, dict) and "type" in item)
        stack.extend((child, False) for child in reversed(children))


__all__ = [
    "EXIT_SUFFIX",
    "Handler",
    "Visitor",
    "VisitorBuilder",
    "merge_visitors",
    "traverse",
]
