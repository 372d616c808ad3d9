"""Lookup of the innermost lexical scope enclosing a source offset."""

from __future__ import annotations

from typing import Optional

from .scope_tracker import Scope, ScopeTree


def get_innermost_scope(tree: ScopeTree, offset: int, start: Optional[Scope] = None) -> Scope:
    """
    Return the innermost scope whose range contains `offset`.

    The search descends from `start` (the root scope by default) into the
    child containing the offset until no child does. Sibling ranges never
    overlap, so the first matching child is the only one.

    Raises:
        ValueError: If `offset` lies outside the starting scope.
    """
    scope = start if start is not None else tree.root
    if not scope.contains(offset):
        raise ValueError(
            f"Offset {offset} is outside scope {scope.scope_id} range {scope.range}."
        )

    while True:
        for child in tree.children_of(scope):
            if child.contains(offset):
                scope = child
                break
        else:
            return scope


__all__ = ["get_innermost_scope"]
