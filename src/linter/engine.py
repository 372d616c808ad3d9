"""
Lint engine: one parse, one scope analysis and one traversal per file.

Rule options are validated before anything is parsed. Each enabled rule
contributes a visitor; the visitors are merged in rule order and driven over
the AST in a single pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

from frontend import run_frontend
from parser import ParseError, SourceType

from .context import Diagnostic, RuleContext
from .rules import RULES, get_rule
from .visitor import VisitorBuilder, traverse

logger = logging.getLogger(__name__)


class LintError(RuntimeError):
    """Raised when a file cannot be analysed at all."""

    def __init__(self, message: str, errors: Optional[List[ParseError]] = None):
        super().__init__(message)
        self.errors = errors or []


@dataclass(frozen=True)
class LintResult:
    source_name: str
    diagnostics: List[Diagnostic] = field(default_factory=list)
    parse_errors: List[ParseError] = field(default_factory=list)

    @property
    def has_problems(self) -> bool:
        return bool(self.diagnostics)


def lint_source(
    source: str,
    *,
    source_name: str = "<input>",
    filename: Optional[Union[str, Path]] = None,
    source_type: Union[SourceType, str] = SourceType.SCRIPT,
    rules: Optional[Mapping[str, Any]] = None,
    tolerant: bool = True,
) -> LintResult:
    """
    Lint JavaScript source text.

    Args:
        source: Raw JavaScript source.
        source_name: Label used in diagnostics.
        filename: Path of the file on disk; enables the package.json lookup
            for the default target version.
        source_type: `"script"` or `"module"`.
        rules: Mapping of rule id to raw options (None for defaults). All
            rules run with default options when omitted.
        tolerant: Forwarded to the parser.

    Returns:
        LintResult with diagnostics ordered by source position.

    Raises:
        ConfigurationError: If rule options are invalid.
        KeyError: If an unknown rule id is requested.
        LintError: If the source cannot be parsed.
    """
    selected = dict(rules) if rules is not None else {rule_id: None for rule_id in RULES}
    parsed_options = {rule_id: get_rule(rule_id).parse_options(raw) for rule_id, raw in selected.items()}

    frontend_result = run_frontend(
        source,
        source_name=source_name,
        tolerant=tolerant,
        source_type=source_type,
    )
    if not frontend_result.has_ast:
        raise LintError(f"Parsing failed for {source_name}; no AST produced.", frontend_result.diagnostics)

    base = RuleContext(
        rule_id="",
        source=source,
        source_name=source_name,
        source_type=frontend_result.parse.source_type,
        analysis=frontend_result.analysis,
        filename=str(filename) if filename is not None else None,
    )
    builder = VisitorBuilder()
    for rule_id, options in parsed_options.items():
        builder.merge(get_rule(rule_id).create(base.for_rule(rule_id, options)))
    logger.debug("Running %d rules on %s", len(parsed_options), source_name)

    traverse(frontend_result.parse.ast, builder.compile())

    diagnostics = sorted(base.diagnostics, key=lambda d: (d.start, d.rule_id, d.message))
    return LintResult(
        source_name=source_name,
        diagnostics=diagnostics,
        parse_errors=frontend_result.diagnostics,
    )


def lint_file(
    path: Union[str, Path],
    *,
    source_type: Union[SourceType, str] = SourceType.SCRIPT,
    rules: Optional[Mapping[str, Any]] = None,
    tolerant: bool = True,
) -> LintResult:
    """Read and lint a file; see `lint_source`."""
    file_path = Path(path)
    source = file_path.read_text(encoding="utf-8")
    return lint_source(
        source,
        source_name=str(file_path),
        filename=file_path,
        source_type=source_type,
        rules=rules,
        tolerant=tolerant,
    )


__all__ = ["LintError", "LintResult", "lint_file", "lint_source"]
