"""
Rule: report ECMAScript syntax and built-ins the target Node.js lacks.

Every syntax check is wired to a feature key through a `FeaturePolicy`; when
a check fires, the policy picks the key and the reporter consults the
support table resolved for this file. Built-in globals are found once, at
the end of the traversal, by tracing the `UNSUPPORTED_GLOBALS` surface.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, Iterable, Optional, Set, Tuple, Union

from features import (
    FeatureOptions,
    SUBCLASSING_TARGETS,
    SupportInfo,
    build_support_table,
    find_engines_range,
    parse_feature_options,
    resolve_version_config,
)
from tracer import READ, SUBCLASS, ReferenceTracer, TraceEvent, build_trace_map

from ..context import RuleContext
from ..syntax_checks import SYNTAX_CHECKS
from ..visitor import Visitor, VisitorBuilder

logger = logging.getLogger(__name__)

RULE_ID = "no-unsupported-features"
DESCRIPTION = "disallow unsupported ECMAScript features on the specified version"

Node = Dict[str, Any]
FeatureKey = Union[str, Callable[[Node], str]]

_MESSAGE = "{feature} {be} not supported yet on target {version}."


def _read_all(*names: str) -> Dict[str, Any]:
    return {name: {READ: True} for name in names}


def _global(*members: str, read: bool = False) -> Dict[Any, Any]:
    entry: Dict[Any, Any] = _read_all(*members)
    if read:
        entry[READ] = True
    return entry


_UNSUPPORTED_GLOBALS_SURFACE: Dict[str, Dict[Any, Any]] = {
    "Object": _global(
        "assign", "is", "getOwnPropertySymbols", "setPrototypeOf", "values", "entries",
        "getOwnPropertyDescriptors",
    ),
    "Boolean": _global(),
    "Number": _global(
        "isFinite", "isInteger", "isSafeInteger", "isNaN", "EPSILON", "MIN_SAFE_INTEGER",
        "MAX_SAFE_INTEGER",
    ),
    "String": _global("raw", "fromCodePoint"),
    "Array": _global("from", "of"),
    "Function": _global(),
    "RegExp": _global(),
    "Math": _global(
        "clz32", "imul", "sign", "log10", "log2", "log1p", "expm1", "cosh", "sinh", "tanh",
        "acosh", "asinh", "atanh", "trunc", "fround", "cbrt", "hypot",
    ),
    **{
        name: _global(read=True)
        for name in (
            "Int8Array", "Uint8Array", "Uint8ClampedArray", "Int16Array", "Uint16Array",
            "Int32Array", "Uint32Array", "Float32Array", "Float64Array", "DataView",
            "Map", "Set", "WeakMap", "WeakSet", "Proxy", "Reflect", "Promise",
            "SharedArrayBuffer",
        )
    },
    "Symbol": _global(
        "hasInstance", "isConcatSpreadable", "iterator", "species", "replace", "search",
        "split", "match", "toPrimitive", "toStringTag", "unscopables", read=True,
    ),
    "Atomics": _global(
        "add", "and", "compareExchange", "exchange", "wait", "wake", "isLockFree", "load",
        "or", "store", "sub", "xor", read=True,
    ),
}
for _name in SUBCLASSING_TARGETS:
    _UNSUPPORTED_GLOBALS_SURFACE[_name][SUBCLASS] = True

UNSUPPORTED_GLOBALS = build_trace_map(_UNSUPPORTED_GLOBALS_SURFACE)


@dataclass(frozen=True)
class FeaturePolicy:
    """Binds a syntax check to the feature key its findings are judged against."""

    check: str
    key: FeatureKey

    def resolve(self, node: Node) -> str:
        return self.key(node) if callable(self.key) else self.key


def _property_shorthand_key(node: Node) -> str:
    key = node.get("key") or {}
    if node.get("shorthand") and key.get("name") in ("get", "set"):
        return "objectPropertyShorthandOfGetSet"
    return "objectLiteralExtensions"


FEATURE_POLICIES: Tuple[FeaturePolicy, ...] = (
    # ES2015
    FeaturePolicy("no-arrow-functions", "arrowFunctions"),
    FeaturePolicy("no-binary-numeric-literals", "binaryNumberLiterals"),
    FeaturePolicy("no-block-scoped-functions", "blockScopedFunctions"),
    FeaturePolicy("no-block-scoped-variables", lambda node: node["kind"]),
    FeaturePolicy("no-classes", "classes"),
    FeaturePolicy("no-computed-properties", "objectLiteralExtensions"),
    FeaturePolicy("no-default-parameters", "defaultParameters"),
    FeaturePolicy("no-destructuring", "destructuring"),
    FeaturePolicy("no-for-of-loops", "forOf"),
    FeaturePolicy("no-generators", "generatorFunctions"),
    FeaturePolicy("no-modules", "modules"),
    FeaturePolicy("no-new-target", "new.target"),
    FeaturePolicy("no-octal-numeric-literals", "octalNumberLiterals"),
    FeaturePolicy("no-property-shorthands", _property_shorthand_key),
    FeaturePolicy("no-regexp-u-flag", "regexpU"),
    FeaturePolicy("no-regexp-y-flag", "regexpY"),
    FeaturePolicy("no-rest-parameters", "restParameters"),
    FeaturePolicy("no-spread-elements", "spreadOperators"),
    FeaturePolicy("no-template-literals", "templateStrings"),
    FeaturePolicy("no-unicode-codepoint-escapes", "unicodeCodePointEscapes"),
    # ES2016
    FeaturePolicy("no-exponential-operators", "exponentialOperators"),
    # ES2017
    FeaturePolicy("no-async-functions", "asyncAwait"),
    FeaturePolicy("no-trailing-function-commas", "trailingCommasInFunctions"),
    # ES2018
    FeaturePolicy(
        "no-async-iteration",
        lambda node: "forAwaitOf" if node["type"] == "ForOfStatement" else "asyncGenerators",
    ),
    FeaturePolicy("no-malformed-template-literals", "templateLiteralRevision"),
    FeaturePolicy("no-regexp-lookbehind-assertions", "regexpLookbehind"),
    FeaturePolicy("no-regexp-named-capture-groups", "regexpNamedCaptureGroups"),
    FeaturePolicy("no-regexp-s-flag", "regexpS"),
    FeaturePolicy("no-regexp-unicode-property-escapes", "regexpUnicodeProperties"),
    FeaturePolicy(
        "no-rest-spread-properties",
        lambda node: "restProperties" if "Rest" in node["type"] else "spreadProperties",
    ),
)


def extends_null(node: Node) -> bool:
    superclass = node.get("superClass")
    return (
        isinstance(superclass, dict)
        and superclass.get("type") == "Literal"
        and superclass.get("value") is None
        and superclass.get("raw") == "null"
    )


class FeatureReporter:
    """Turns feature uses into diagnostics according to a support table."""

    def __init__(self, context: RuleContext, support: SupportInfo) -> None:
        self._context = context
        self._support = support

    @property
    def support(self) -> SupportInfo:
        return self._support

    def report(self, node: Node, key: str) -> None:
        feature = self._support[key]
        if feature.supported:
            return

        be = "is" if feature.singular else "are"
        if not feature.supported_in_strict:
            name = feature.name
        elif not self._context.is_strict(node):
            name = f"{feature.name} in non-strict mode"
        else:
            return
        self._context.report(node, _MESSAGE.format(feature=name, be=be, version=self._support.version))

    def report_policy(self, policy: FeaturePolicy, node: Node) -> None:
        self.report(node, policy.resolve(node))

    def report_global_events(self, events: Iterable[TraceEvent]) -> None:
        """
        Report traced built-ins, most specific path first.

        Events are visited in reverse discovery order; a use site is
        identified by its root name and start offset and reported once.
        """
        seen: Set[Tuple[str, int]] = set()
        for event in reversed(list(events)):
            if event.subclass:
                subclass_key = f"extends{event.key}"
                if subclass_key in self._support:
                    self.report(event.node, subclass_key)
                continue
            site = (event.root, event.start)
            if event.key in self._support and site not in seen:
                seen.add(site)
                self.report(event.node, event.key)


def parse_options(raw: Any) -> FeatureOptions:
    return parse_feature_options(raw)


def create_support_table(context: RuleContext) -> SupportInfo:
    options: FeatureOptions = context.options or FeatureOptions()
    default_version: Optional[str] = None
    if options.version is None and context.filename:
        default_version = find_engines_range(context.filename)
    return build_support_table(resolve_version_config(options, default_version))


def create(context: RuleContext) -> Visitor:
    reporter = FeatureReporter(context, create_support_table(context))

    builder = VisitorBuilder()
    for policy in FEATURE_POLICIES:
        check = SYNTAX_CHECKS[policy.check]
        builder.merge(check(context, partial(reporter.report_policy, policy)))

    def on_class(node: Node) -> None:
        if extends_null(node):
            reporter.report(node, "extendsNull")

    def on_program_exit(node: Node) -> None:
        tracer = ReferenceTracer(context.analysis)
        events = list(tracer.iterate_global_references(UNSUPPORTED_GLOBALS))
        logger.debug("%s: %d built-in references traced", context.source_name, len(events))
        reporter.report_global_events(events)

    builder.merge({"ClassDeclaration, ClassExpression": on_class, "Program:exit": on_program_exit})
    return builder.compile()


__all__ = [
    "DESCRIPTION",
    "FEATURE_POLICIES",
    "FeaturePolicy",
    "FeatureReporter",
    "RULE_ID",
    "UNSUPPORTED_GLOBALS",
    "create",
    "create_support_table",
    "extends_null",
    "parse_options",
]
