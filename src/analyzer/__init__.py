"""Semantic analysis helpers for JavaScript: scopes, bindings and references."""

from .scope_locator import get_innermost_scope
from .scope_tracker import (
    AnalysisResult,
    Binding,
    BindingKind,
    Reference,
    Scope,
    ScopeTree,
    ScopeType,
    SourcePosition,
    Variable,
    analyze_bindings,
    build_parent_index,
)

__all__ = [
    "AnalysisResult",
    "Binding",
    "BindingKind",
    "Reference",
    "Scope",
    "ScopeTree",
    "ScopeType",
    "SourcePosition",
    "Variable",
    "analyze_bindings",
    "build_parent_index",
    "get_innermost_scope",
]
