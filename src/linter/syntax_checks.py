"""
Detectors for individual ECMAScript syntax constructs.

Every check is a function `check(context, emit) -> visitor`. It recognises
one construct and calls `emit(node)` for each occurrence; deciding whether
the occurrence is a problem is left to whoever supplied `emit`. The checks
are independent of each other and are combined into one traversal with
`VisitorBuilder`.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .context import RuleContext
from .visitor import Visitor

Node = Dict[str, Any]
Emit = Callable[[Node], None]
Check = Callable[[RuleContext, Emit], Visitor]

FUNCTION_TYPES = ("FunctionDeclaration", "FunctionExpression", "ArrowFunctionExpression")
_FUNCTIONS_KEY = ", ".join(FUNCTION_TYPES)
_PATTERN_TYPES = ("ObjectPattern", "ArrayPattern")

_BINARY_LITERAL = re.compile(r"^0[bB]")
_OCTAL_LITERAL = re.compile(r"^0[oO]")
_CODEPOINT_ESCAPE = re.compile(r"(?<!\\)(?:\\\\)*\\u\{")
_LOOKBEHIND = re.compile(r"(?<!\\)(?:\\\\)*\(\?<[=!]")
_NAMED_GROUP = re.compile(r"(?<!\\)(?:\\\\)*\(\?<[A-Za-z_$]")
_PROPERTY_ESCAPE = re.compile(r"(?<!\\)(?:\\\\)*\\[pP]\{")
_COMMENTS = re.compile(r"/\*.*?\*/|//[^\n]*", re.DOTALL)
_LEADING_CLOSERS = re.compile(r"^[\s)]*")


# ------------------------------------------------------------------ helpers


def is_async(node: Node) -> bool:
    return bool(node.get("async") or node.get("isAsync"))


def _is_function(node: Optional[Node]) -> bool:
    return bool(node) and node.get("type") in FUNCTION_TYPES


def _is_param(context: RuleContext, node: Node) -> bool:
    parent = context.parent_of(node)
    return _is_function(parent) and any(param is node for param in parent.get("params", []))


def _static_text(node: Optional[Node]) -> Optional[str]:
    if not isinstance(node, dict):
        return None
    if node.get("type") == "Literal" and isinstance(node.get("value"), str):
        return node["value"]
    if node.get("type") == "TemplateLiteral" and not node.get("expressions"):
        quasis = node.get("quasis") or []
        return (quasis[0].get("value") or {}).get("cooked") if len(quasis) == 1 else None
    return None


def regexp_sources(context: RuleContext, node: Node) -> Optional[Tuple[str, str]]:
    """`(pattern, flags)` of a regular expression literal or a `RegExp` call with constant arguments."""
    regex = node.get("regex")
    if node.get("type") == "Literal" and isinstance(regex, dict):
        return regex.get("pattern") or "", regex.get("flags") or ""
    if node.get("type") in ("NewExpression", "CallExpression"):
        callee = node.get("callee") or {}
        if callee.get("type") != "Identifier" or callee.get("name") != "RegExp":
            return None
        if context.analysis.variable_for(callee) is not None:
            return None
        arguments = node.get("arguments") or []
        pattern = _static_text(arguments[0]) if arguments else None
        flags = _static_text(arguments[1]) if len(arguments) > 1 else ""
        if pattern is None or flags is None:
            return None
        return pattern, flags
    return None


def _has_trailing_comma(source: str, start: int, stop: int) -> bool:
    # A parenthesized element ends before its closing parentheses.
    segment = _COMMENTS.sub("", source[start:stop])
    return _LEADING_CLOSERS.sub("", segment, count=1).startswith(",")


# ------------------------------------------------------------------- ES2015


def check_arrow_functions(context: RuleContext, emit: Emit) -> Visitor:
    return {"ArrowFunctionExpression": emit}


def check_binary_numeric_literals(context: RuleContext, emit: Emit) -> Visitor:
    def on_literal(node: Node) -> None:
        if isinstance(node.get("value"), (int, float)) and _BINARY_LITERAL.match(node.get("raw", "")):
            emit(node)

    return {"Literal": on_literal}


def check_block_scoped_functions(context: RuleContext, emit: Emit) -> Visitor:
    def on_function(node: Node) -> None:
        parent = context.parent_of(node) or {}
        if parent.get("type") == "SwitchCase":
            emit(node)
        elif parent.get("type") == "BlockStatement" and not _is_function(context.parent_of(parent)):
            emit(node)

    return {"FunctionDeclaration": on_function}


def check_block_scoped_variables(context: RuleContext, emit: Emit) -> Visitor:
    def on_declaration(node: Node) -> None:
        if node.get("kind") in ("let", "const"):
            emit(node)

    return {"VariableDeclaration": on_declaration}


def check_classes(context: RuleContext, emit: Emit) -> Visitor:
    return {"ClassDeclaration, ClassExpression": emit}


def check_computed_properties(context: RuleContext, emit: Emit) -> Visitor:
    def on_property(node: Node) -> None:
        if node.get("computed"):
            emit(node)

    return {"Property, MethodDefinition": on_property}


def check_default_parameters(context: RuleContext, emit: Emit) -> Visitor:
    def on_pattern(node: Node) -> None:
        if _is_param(context, node):
            emit(node)

    return {"AssignmentPattern": on_pattern}


def check_destructuring(context: RuleContext, emit: Emit) -> Visitor:
    def on_pattern(node: Node) -> None:
        parent = context.parent_of(node)
        while parent is not None and parent.get("type") in ("Property", "AssignmentPattern", "RestElement"):
            parent = context.parent_of(parent)
        if parent is None or parent.get("type") not in _PATTERN_TYPES:
            emit(node)

    return {"ObjectPattern, ArrayPattern": on_pattern}


def check_for_of_loops(context: RuleContext, emit: Emit) -> Visitor:
    def on_for_of(node: Node) -> None:
        if not node.get("await"):
            emit(node)

    return {"ForOfStatement": on_for_of}


def check_generators(context: RuleContext, emit: Emit) -> Visitor:
    def on_function(node: Node) -> None:
        if node.get("generator") and not is_async(node):
            emit(node)

    return {_FUNCTIONS_KEY: on_function}


def check_modules(context: RuleContext, emit: Emit) -> Visitor:
    return {
        "ImportDeclaration, ExportNamedDeclaration, ExportDefaultDeclaration, ExportAllDeclaration": emit,
    }


def check_new_target(context: RuleContext, emit: Emit) -> Visitor:
    def on_meta_property(node: Node) -> None:
        meta = node.get("meta") or {}
        prop = node.get("property") or {}
        if meta.get("name") == "new" and prop.get("name") == "target":
            emit(node)

    return {"MetaProperty": on_meta_property}


def check_octal_numeric_literals(context: RuleContext, emit: Emit) -> Visitor:
    def on_literal(node: Node) -> None:
        if isinstance(node.get("value"), (int, float)) and _OCTAL_LITERAL.match(node.get("raw", "")):
            emit(node)

    return {"Literal": on_literal}


def check_property_shorthands(context: RuleContext, emit: Emit) -> Visitor:
    def on_property(node: Node) -> None:
        parent = context.parent_of(node) or {}
        if parent.get("type") != "ObjectExpression":
            return
        if node.get("shorthand") or node.get("method"):
            emit(node)

    return {"Property": on_property}


def _regexp_check(test: Callable[[str, str], bool]) -> Check:
    def check(context: RuleContext, emit: Emit) -> Visitor:
        def on_node(node: Node) -> None:
            sources = regexp_sources(context, node)
            if sources is not None and test(*sources):
                emit(node)

        return {"Literal, NewExpression, CallExpression": on_node}

    return check


check_regexp_u_flag = _regexp_check(lambda pattern, flags: "u" in flags)
check_regexp_y_flag = _regexp_check(lambda pattern, flags: "y" in flags)


def check_rest_parameters(context: RuleContext, emit: Emit) -> Visitor:
    def on_rest(node: Node) -> None:
        if _is_param(context, node):
            emit(node)

    return {"RestElement": on_rest}


def check_spread_elements(context: RuleContext, emit: Emit) -> Visitor:
    def on_spread(node: Node) -> None:
        parent = context.parent_of(node) or {}
        if parent.get("type") in ("ArrayExpression", "CallExpression", "NewExpression"):
            emit(node)

    return {"SpreadElement": on_spread}


def check_template_literals(context: RuleContext, emit: Emit) -> Visitor:
    def on_template(node: Node) -> None:
        parent = context.parent_of(node) or {}
        if parent.get("type") != "TaggedTemplateExpression":
            emit(node)

    return {"TemplateLiteral": on_template, "TaggedTemplateExpression": emit}


def check_unicode_codepoint_escapes(context: RuleContext, emit: Emit) -> Visitor:
    def on_literal(node: Node) -> None:
        if isinstance(node.get("value"), str) and _CODEPOINT_ESCAPE.search(node.get("raw", "")):
            emit(node)

    def on_template_element(node: Node) -> None:
        if _CODEPOINT_ESCAPE.search((node.get("value") or {}).get("raw") or ""):
            emit(node)

    return {"Literal": on_literal, "TemplateElement": on_template_element}


# --------------------------------------------------------------- ES2016-2018


def check_exponential_operators(context: RuleContext, emit: Emit) -> Visitor:
    def on_binary(node: Node) -> None:
        if node.get("operator") == "**":
            emit(node)

    def on_assignment(node: Node) -> None:
        if node.get("operator") == "**=":
            emit(node)

    return {"BinaryExpression": on_binary, "AssignmentExpression": on_assignment}


def check_async_functions(context: RuleContext, emit: Emit) -> Visitor:
    def on_function(node: Node) -> None:
        if is_async(node) and not node.get("generator"):
            emit(node)

    return {_FUNCTIONS_KEY: on_function}


def check_trailing_function_commas(context: RuleContext, emit: Emit) -> Visitor:
    def on_function(node: Node) -> None:
        params = node.get("params") or []
        body = node.get("body") or {}
        if params and _has_trailing_comma(context.source, params[-1]["range"][1], body["range"][0]):
            emit(node)

    def on_call(node: Node) -> None:
        arguments = node.get("arguments") or []
        if arguments and _has_trailing_comma(context.source, arguments[-1]["range"][1], node["range"][1]):
            emit(node)

    return {_FUNCTIONS_KEY: on_function, "CallExpression, NewExpression": on_call}


def check_async_iteration(context: RuleContext, emit: Emit) -> Visitor:
    def on_function(node: Node) -> None:
        if is_async(node) and node.get("generator"):
            emit(node)

    def on_for_of(node: Node) -> None:
        if node.get("await"):
            emit(node)

    return {_FUNCTIONS_KEY: on_function, "ForOfStatement": on_for_of}


def check_malformed_template_literals(context: RuleContext, emit: Emit) -> Visitor:
    def on_tagged(node: Node) -> None:
        quasi = node.get("quasi") or {}
        for element in quasi.get("quasis", []):
            if (element.get("value") or {}).get("cooked") is None:
                emit(quasi)
                return

    return {"TaggedTemplateExpression": on_tagged}


check_regexp_lookbehind_assertions = _regexp_check(lambda pattern, flags: bool(_LOOKBEHIND.search(pattern)))
check_regexp_named_capture_groups = _regexp_check(lambda pattern, flags: bool(_NAMED_GROUP.search(pattern)))
check_regexp_s_flag = _regexp_check(lambda pattern, flags: "s" in flags)
check_regexp_unicode_property_escapes = _regexp_check(
    lambda pattern, flags: "u" in flags and bool(_PROPERTY_ESCAPE.search(pattern))
)


def check_rest_spread_properties(context: RuleContext, emit: Emit) -> Visitor:
    def on_rest(node: Node) -> None:
        parent = context.parent_of(node) or {}
        if parent.get("type") == "ObjectPattern":
            emit(node)

    def on_spread(node: Node) -> None:
        parent = context.parent_of(node) or {}
        if parent.get("type") == "ObjectExpression":
            emit(node)

    return {
        "RestElement": on_rest,
        "SpreadElement": on_spread,
        "ExperimentalRestProperty": emit,
        "ExperimentalSpreadProperty": emit,
    }


SYNTAX_CHECKS: Mapping[str, Check] = {
    # ES2015
    "no-arrow-functions": check_arrow_functions,
    "no-binary-numeric-literals": check_binary_numeric_literals,
    "no-block-scoped-functions": check_block_scoped_functions,
    "no-block-scoped-variables": check_block_scoped_variables,
    "no-classes": check_classes,
    "no-computed-properties": check_computed_properties,
    "no-default-parameters": check_default_parameters,
    "no-destructuring": check_destructuring,
    "no-for-of-loops": check_for_of_loops,
    "no-generators": check_generators,
    "no-modules": check_modules,
    "no-new-target": check_new_target,
    "no-octal-numeric-literals": check_octal_numeric_literals,
    "no-property-shorthands": check_property_shorthands,
    "no-regexp-u-flag": check_regexp_u_flag,
    "no-regexp-y-flag": check_regexp_y_flag,
    "no-rest-parameters": check_rest_parameters,
    "no-spread-elements": check_spread_elements,
    "no-template-literals": check_template_literals,
    "no-unicode-codepoint-escapes": check_unicode_codepoint_escapes,
    # ES2016
    "no-exponential-operators": check_exponential_operators,
    # ES2017
    "no-async-functions": check_async_functions,
    "no-trailing-function-commas": check_trailing_function_commas,
    # ES2018
    "no-async-iteration": check_async_iteration,
    "no-malformed-template-literals": check_malformed_template_literals,
    "no-regexp-lookbehind-assertions": check_regexp_lookbehind_assertions,
    "no-regexp-named-capture-groups": check_regexp_named_capture_groups,
    "no-regexp-s-flag": check_regexp_s_flag,
    "no-regexp-unicode-property-escapes": check_regexp_unicode_property_escapes,
    "no-rest-spread-properties": check_rest_spread_properties,
}


__all__ = [
    "Check",
    "Emit",
    "SYNTAX_CHECKS",
    "is_async",
    "regexp_sources",
]
