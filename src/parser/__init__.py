"""Interfaces for parsing JavaScript source code."""

from .es_parser import ParseError, ParseResult, SourceType, parse_js

__all__ = ["ParseError", "ParseResult", "SourceType", "parse_js"]
