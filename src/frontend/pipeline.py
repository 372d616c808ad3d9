"""
Parse-and-bind stage run once per file.

`run_frontend` parses the source, builds the scope tree for the resulting AST
and optionally writes the parse output to a cache directory. Every rule then
works from the same AST and scopes. Syntax errors never escape as exceptions:
a source esprima gives up on comes back as a result without an AST, carrying
the error next to any recoverable ones.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

import esprima

from analyzer import AnalysisResult, analyze_bindings
from parser import ParseError, ParseResult, SourceType, parse_js

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrontEndResult:
    parse: ParseResult
    analysis: Optional[AnalysisResult]

    @property
    def has_ast(self) -> bool:
        return self.parse.ast is not None and self.analysis is not None

    @property
    def diagnostics(self) -> List[ParseError]:
        return list(self.parse.errors)


def _parse(source: str, source_name: str, tolerant: bool, source_type: SourceType) -> ParseResult:
    try:
        return parse_js(source, source_name=source_name, tolerant=tolerant, source_type=source_type)
    except esprima.Error as exc:
        logger.debug("Parsing %s aborted: %s", source_name, exc)
        return ParseResult(
            ast=None,
            source=source,
            source_name=source_name,
            source_type=source_type,
            errors=[ParseError.from_exception(exc)],
        )


def run_frontend(
    source: str,
    *,
    source_name: str = "<input>",
    tolerant: bool = True,
    analyze: bool = True,
    source_type: Union[SourceType, str] = SourceType.SCRIPT,
    cache_dir: Optional[Union[str, Path]] = None,
) -> FrontEndResult:
    """
    Parse JavaScript source and bind its scopes.

    Args:
        source: Raw JavaScript source text.
        source_name: Label used in diagnostics, usually the file path.
        tolerant: Let esprima recover from minor errors instead of stopping
            at the first one.
        analyze: Build the scope tree; turned off when only the AST is needed.
        source_type: `"script"` or `"module"`.
        cache_dir: Directory receiving `<sha256>.json` parse dumps, or None.

    Returns:
        FrontEndResult; `has_ast` is False when the source could not be parsed.
    """
    parse_result = _parse(source, source_name, tolerant, SourceType(source_type))

    analysis_result: Optional[AnalysisResult] = None
    if analyze and parse_result.ast is not None:
        analysis_result = analyze_bindings(
            parse_result.ast,
            source_name=source_name,
            source_type=parse_result.source_type,
        )
        logger.debug("Bound %s: %d scopes, %d implicit globals", source_name, len(analysis_result.scopes),
                     len(analysis_result.through))

    if cache_dir is not None and parse_result.ast is not None:
        _write_cache(Path(cache_dir), parse_result)

    return FrontEndResult(parse=parse_result, analysis=analysis_result)


def _write_cache(cache_dir: Path, parse_result: ParseResult) -> None:
    cache_dir.mkdir(parents=True, exist_ok=True)
    (cache_dir / f"{parse_result.source_hash}.json").write_text(parse_result.to_json(), encoding="utf-8")


__all__ = ["FrontEndResult", "run_frontend"]
