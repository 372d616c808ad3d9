"""
JavaScript parsing utilities built on top of the Python `esprima` port.

`parse_js` returns the JSON-compatible ESTree dictionary along with metadata
about the parse run. Every node carries `range` and `loc` so that later phases
can map diagnostics back to source positions and locate enclosing scopes by
offset. Script and module source types are supported; modules are always
strict and unlock `import` / `export`.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

import esprima


class SourceType(str, Enum):
    SCRIPT = "script"
    MODULE = "module"


@dataclass(frozen=True)
class ParseError:
    """Represents a recoverable parsing issue detected by esprima."""

    description: str
    line: Optional[int]
    column: Optional[int]

    @classmethod
    def from_exception(cls, exc: Exception) -> "ParseError":
        return cls(
            description=getattr(exc, "description", None) or str(exc),
            line=getattr(exc, "lineNumber", None),
            column=getattr(exc, "column", None),
        )


@dataclass(frozen=True)
class ParseResult:
    """Aggregate of the output AST plus metadata about the parse run."""

    ast: Any
    source: str
    source_name: str
    source_type: SourceType
    errors: List[ParseError] = field(default_factory=list)

    @property
    def source_hash(self) -> str:
        """Deterministic digest of the source, used as a cache key."""
        return hashlib.sha256(self.source.encode("utf-8")).hexdigest()

    def to_json(self) -> str:
        payload = {
            "ast": self.ast,
            "errors": [error.__dict__ for error in self.errors],
            "source_hash": self.source_hash,
            "source_name": self.source_name,
            "source_type": self.source_type.value,
        }
        return json.dumps(payload, ensure_ascii=False, indent=2, default=repr)


def parse_js(
    source: str,
    *,
    source_name: str = "<input>",
    tolerant: bool = True,
    source_type: SourceType | str = SourceType.SCRIPT,
) -> ParseResult:
    """
    Parse JavaScript source text into an ESTree dictionary.

    Args:
        source: Raw JavaScript source code.
        source_name: Label used for diagnostics (defaults to `<input>`).
        tolerant: When True, esprima performs error recovery instead of raising.
        source_type: `"script"` or `"module"`.

    Returns:
        ParseResult containing the AST (or None when parsing failed), any
        recoverable errors, and metadata.

    Raises:
        esprima.Error: If parsing fails and `tolerant` is False.
    """
    source_type = SourceType(source_type)
    options = dict(loc=True, range=True, tolerant=tolerant)
    parser = esprima.parseModule if source_type is SourceType.MODULE else esprima.parseScript
    try:
        ast = parser(source, **options)
    except esprima.Error as exc:
        if not tolerant:
            raise
        return ParseResult(
            ast=None,
            source=source,
            source_name=source_name,
            source_type=source_type,
            errors=[ParseError.from_exception(exc)],
        )

    raw_ast = ast.toDict() if hasattr(ast, "toDict") else ast

    errors: List[ParseError] = []
    if tolerant and isinstance(raw_ast, dict):
        # Recoverable errors are attached to the Program node in tolerant mode.
        for error in raw_ast.get("errors") or []:
            errors.append(
                ParseError(
                    description=error.get("description"),
                    line=error.get("lineNumber"),
                    column=error.get("column"),
                )
            )

    return ParseResult(
        ast=raw_ast,
        source=source,
        source_name=source_name,
        source_type=source_type,
        errors=errors,
    )


__all__ = ["ParseError", "ParseResult", "SourceType", "parse_js"]
