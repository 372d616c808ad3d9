"""Rule-based linting of JavaScript for Node.js compatibility."""

from .context import Diagnostic, RuleContext
from .engine import LintError, LintResult, lint_file, lint_source
from .rules import RULES, Rule, get_rule
from .visitor import VisitorBuilder, merge_visitors, traverse

__all__ = [
    "Diagnostic",
    "LintError",
    "LintResult",
    "RULES",
    "Rule",
    "RuleContext",
    "VisitorBuilder",
    "get_rule",
    "lint_file",
    "lint_source",
    "merge_visitors",
    "traverse",
]
