"""
Rule: report references to deprecated Node.js APIs.

Deprecated members are found by tracing module loads (`require()` and
`import`) against `DEPRECATED_MODULES` and global names against
`DEPRECATED_GLOBALS`. Deprecation does not depend on the target version:
once an API has been deprecated every use is reported.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, FrozenSet, Iterable

from features import DeprecatedApiOptions, parse_deprecated_api_options
from tracer import CALL, CONSTRUCT, READ, ReferenceTracer, TraceEvent

from ..context import RuleContext
from ..visitor import Visitor
from .deprecated_apis import DEPRECATED_GLOBALS, DEPRECATED_MODULES, DeprecationInfo

logger = logging.getLogger(__name__)

RULE_ID = "no-deprecated-api"
DESCRIPTION = "disallow deprecated Node.js APIs"

Node = Dict[str, Any]


def item_name(event: TraceEvent) -> str:
    """Name of a traced API as written in ignore lists, e.g. `new buffer.Buffer()`."""
    name = event.key
    if event.kind is CALL:
        return f"{name}()"
    if event.kind is CONSTRUCT:
        return f"new {name}()"
    return name


def format_message(event: TraceEvent, *, module: bool) -> str:
    info: DeprecationInfo = event.info
    if module and event.kind is READ and len(event.path) == 1:
        subject = f"'{event.key}' module"
    else:
        subject = f"'{item_name(event)}'"
    message = f"{subject} was deprecated since v{info.since}."
    if info.replaced_by:
        message = f"{message} Use {info.replaced_by} instead."
    return message


def parse_options(raw: Any) -> DeprecatedApiOptions:
    return parse_deprecated_api_options(raw)


def _report_all(
    context: RuleContext,
    events: Iterable[TraceEvent],
    ignored: FrozenSet[str],
    *,
    module: bool,
) -> None:
    for event in events:
        if item_name(event) in ignored:
            continue
        info: DeprecationInfo = event.info
        context.report(event.node, format_message(event, module=module), suggestion=info.replaced_by)


def create(context: RuleContext) -> Visitor:
    options: DeprecatedApiOptions = context.options or DeprecatedApiOptions()
    ignored_modules = frozenset(options.ignore_module_items)
    ignored_globals = frozenset(options.ignore_global_items)

    def on_program_exit(node: Node) -> None:
        tracer = ReferenceTracer(context.analysis, mode="legacy")
        _report_all(context, tracer.iterate_cjs_references(DEPRECATED_MODULES), ignored_modules, module=True)
        _report_all(context, tracer.iterate_esm_references(DEPRECATED_MODULES), ignored_modules, module=True)
        _report_all(context, tracer.iterate_global_references(DEPRECATED_GLOBALS), ignored_globals, module=False)

    return {"Program:exit": on_program_exit}


__all__ = ["DESCRIPTION", "RULE_ID", "create", "format_message", "item_name", "parse_options"]
