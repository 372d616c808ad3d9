"""Tracked surfaces and the reference tracer that walks them."""

from .reference_tracer import GLOBAL_OBJECT_NAMES, ReferenceTracer, property_name, static_string
from .trace_map import (
    CALL,
    CONSTRUCT,
    ESM,
    READ,
    SUBCLASS,
    ReferenceKind,
    TraceEvent,
    TraceNode,
    build_trace_map,
)

__all__ = [
    "CALL",
    "CONSTRUCT",
    "ESM",
    "GLOBAL_OBJECT_NAMES",
    "READ",
    "ReferenceKind",
    "ReferenceTracer",
    "SUBCLASS",
    "TraceEvent",
    "TraceNode",
    "build_trace_map",
    "property_name",
    "static_string",
]
