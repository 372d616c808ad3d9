"""
Tracked surfaces: which global paths the reference tracer watches.

A surface is a tree of `TraceNode`s. Each node says which usage kinds are of
interest at its own depth and which properties lead further down; interest at
one depth is independent of deeper interest, so `Number` may be tracked for
reads while `Number.isNaN` is tracked too. Surfaces are usually written as
nested dict literals keyed by property names plus the `READ` / `CALL` /
`CONSTRUCT` markers, and compiled once with `build_trace_map`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple


class ReferenceKind(str, Enum):
    READ = "read"
    CALL = "call"
    CONSTRUCT = "construct"


READ = ReferenceKind.READ
CALL = ReferenceKind.CALL
CONSTRUCT = ReferenceKind.CONSTRUCT

# Marker keys that are not usage kinds.
SUBCLASS = "__subclass__"
ESM = "__esm__"


@dataclass(frozen=True)
class TraceNode:
    """One depth of a tracked surface."""

    kinds: Mapping[ReferenceKind, Any] = field(default_factory=lambda: MappingProxyType({}))
    children: Mapping[str, "TraceNode"] = field(default_factory=lambda: MappingProxyType({}))
    subclass: bool = False
    esm: bool = False

    def child(self, name: Optional[str]) -> Optional["TraceNode"]:
        if name is None:
            return None
        return self.children.get(name)

    def info(self, kind: ReferenceKind) -> Any:
        return self.kinds.get(kind)

    def wants(self, kind: ReferenceKind) -> bool:
        return bool(self.kinds.get(kind))

    def with_children(self, extra: Mapping[str, "TraceNode"]) -> "TraceNode":
        merged: Dict[str, TraceNode] = dict(self.children)
        merged.update(extra)
        return TraceNode(
            kinds=self.kinds,
            children=MappingProxyType(merged),
            subclass=self.subclass,
            esm=self.esm,
        )


def build_trace_map(spec: Mapping[Any, Any]) -> TraceNode:
    """
    Compile a nested dict literal into a `TraceNode` tree.

    Keys that are `ReferenceKind`s carry the info payload for that usage
    kind; `SUBCLASS` and `ESM` keys set the respective flags; any other key
    is a property name mapping to a nested spec.
    """
    kinds: Dict[ReferenceKind, Any] = {}
    children: Dict[str, TraceNode] = {}
    subclass = False
    esm = False
    for key, value in spec.items():
        if isinstance(key, ReferenceKind):
            kinds[key] = value
        elif key == SUBCLASS:
            subclass = bool(value)
        elif key == ESM:
            esm = bool(value)
        else:
            if not isinstance(value, Mapping):
                raise TypeError(f"Trace map entry {key!r} must be a mapping, got {type(value).__name__}")
            children[str(key)] = build_trace_map(value)
    return TraceNode(
        kinds=MappingProxyType(kinds),
        children=MappingProxyType(children),
        subclass=subclass,
        esm=esm,
    )


@dataclass(frozen=True)
class TraceEvent:
    """A use of a tracked path found by the tracer."""

    node: Dict[str, Any]
    path: Tuple[str, ...]
    kind: ReferenceKind
    info: Any = None
    subclass: bool = False

    @property
    def key(self) -> str:
        return ".".join(self.path)

    @property
    def root(self) -> str:
        return self.path[0] if self.path else ""

    @property
    def start(self) -> int:
        return int((self.node.get("range") or (0, 0))[0])


__all__ = [
    "CALL",
    "CONSTRUCT",
    "ESM",
    "READ",
    "ReferenceKind",
    "SUBCLASS",
    "TraceEvent",
    "TraceNode",
    "build_trace_map",
]
