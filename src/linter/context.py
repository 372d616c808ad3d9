"""Per-file rule context and the diagnostics rules produce."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from analyzer import AnalysisResult, Scope, get_innermost_scope
from parser import SourceType

Node = Dict[str, Any]


@dataclass(frozen=True)
class Diagnostic:
    rule_id: str
    message: str
    line: Optional[int]
    column: Optional[int]
    start: int
    end: int
    node_type: Optional[str] = None
    suggestion: Optional[str] = None

    def format(self, source_name: str) -> str:
        loc = ""
        if self.line is not None:
            loc = f":{self.line}" if self.column is None else f":{self.line}:{self.column}"
        return f"{source_name}{loc}: {self.message} ({self.rule_id})"


@dataclass
class RuleContext:
    """
    Everything a rule may consult while the AST is walked.

    A rule receives its own context carrying its id and options; reported
    diagnostics are collected in the shared `diagnostics` list.
    """

    rule_id: str
    source: str
    source_name: str
    source_type: SourceType
    analysis: AnalysisResult
    options: Any = None
    filename: Optional[str] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def for_rule(self, rule_id: str, options: Any) -> "RuleContext":
        return RuleContext(
            rule_id=rule_id,
            source=self.source,
            source_name=self.source_name,
            source_type=self.source_type,
            analysis=self.analysis,
            options=options,
            filename=self.filename,
            diagnostics=self.diagnostics,
        )

    def parent_of(self, node: Node) -> Optional[Node]:
        return self.analysis.parent_of(node)

    def scope_at(self, node: Node) -> Scope:
        start = (node.get("range") or (0, 0))[0]
        return get_innermost_scope(self.analysis.scopes, start)

    def is_strict(self, node: Node) -> bool:
        """
        Whether `node` appears in strict code.

        A node that opens a scope of its own (a class or function) is judged
        by the scope it is written in, not by the scope it creates.
        """
        scope = self.scope_at(node)
        if scope.node is node and scope.parent is not None:
            scope = self.analysis.scopes.get(scope.parent)
        return scope.strict

    def report(self, node: Node, message: str, *, suggestion: Optional[str] = None) -> Diagnostic:
        start, end = node.get("range") or (0, 0)
        loc = (node.get("loc") or {}).get("start") or {}
        diagnostic = Diagnostic(
            rule_id=self.rule_id,
            message=message,
            line=loc.get("line"),
            column=loc.get("column"),
            start=start,
            end=end,
            node_type=node.get("type"),
            suggestion=suggestion,
        )
        self.diagnostics.append(diagnostic)
        return diagnostic


__all__ = ["Diagnostic", "RuleContext"]
