"""
Reference tracing over the scope tree.

`ReferenceTracer` follows tracked global names (and modules loaded through
`require` or `import`) to every place they are read, called or constructed.
Starting from each seed reference it climbs the AST through member chains,
and whenever the tracked value is stored into a new binding (variable
initialiser, assignment, default value, object destructuring) it continues
from that binding's own references. Anything whose provenance cannot be
stated statically (rest elements, spreads, computed keys that are not
constants) ends the trail: missing a use is preferred to inventing one.

The tracer yields events lazily and keeps per-run state, so a fresh tracer
(or at least a fresh iteration) is needed for every analysis.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from analyzer import AnalysisResult, Variable

from .trace_map import CALL, CONSTRUCT, READ, TraceEvent, TraceNode, build_trace_map

logger = logging.getLogger(__name__)

Node = Dict[str, Any]
Path = Tuple[str, ...]

GLOBAL_OBJECT_NAMES = ("global", "self", "window")

_REQUIRE_CALL = build_trace_map({"require": {CALL: True}})
_IMPORT_TYPES = frozenset({"ImportDeclaration", "ExportNamedDeclaration", "ExportAllDeclaration"})
_CLASS_TYPES = frozenset({"ClassDeclaration", "ClassExpression"})


def static_string(node: Optional[Node]) -> Optional[str]:
    """The string value of a constant key expression, if it has one."""
    if not isinstance(node, dict):
        return None
    node_type = node.get("type")
    if node_type == "Literal" and not node.get("regex"):
        value = node.get("value")
        if isinstance(value, bool) or value is None:
            return None if value is None else str(value).lower()
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        if isinstance(value, (str, int, float)):
            return str(value)
        return None
    if node_type == "TemplateLiteral" and not node.get("expressions"):
        quasis = node.get("quasis") or []
        if len(quasis) == 1:
            return ((quasis[0].get("value") or {}).get("cooked"))
    return None


def property_name(node: Node) -> Optional[str]:
    """Name of the property a member expression or object property addresses."""
    key = node.get("property") if node.get("type") == "MemberExpression" else node.get("key")
    if node.get("computed"):
        return static_string(key)
    if not isinstance(key, dict):
        return None
    if key.get("type") == "Identifier":
        return key.get("name")
    return static_string(key)


class ReferenceTracer:
    """
    Finds uses of tracked paths in one analysed file.

    Args:
        analysis: Scope analysis of the file.
        mode: `"strict"` or `"legacy"`. In legacy mode a CommonJS module
            imported with `import` is also treated as its own default export.
        global_object_names: Names of the global object (`global.Map` is
            the same as `Map`).
    """

    def __init__(
        self,
        analysis: AnalysisResult,
        *,
        mode: str = "strict",
        global_object_names: Sequence[str] = GLOBAL_OBJECT_NAMES,
    ) -> None:
        if mode not in ("strict", "legacy"):
            raise ValueError(f"Unknown tracer mode: {mode!r}")
        self._analysis = analysis
        self._mode = mode
        self._global_object_names = tuple(global_object_names)
        self._variable_stack: List[Variable] = []

    # ---------------------------------------------------------------- entry points

    def iterate_global_references(self, trace_map: TraceNode) -> Iterator[TraceEvent]:
        """Yield uses of the global names at the top level of `trace_map`."""
        for name, next_map in trace_map.children.items():
            if self._is_modified_global(name):
                logger.debug("Skipping global %s: reassigned in %s", name, self._analysis.source_name)
                continue
            yield from self._iterate_global_name(name, (name,), next_map, should_report=True)

        for name in self._global_object_names:
            if self._is_modified_global(name):
                continue
            yield from self._iterate_global_name(name, (), trace_map, should_report=False)

    def iterate_cjs_references(self, trace_map: TraceNode) -> Iterator[TraceEvent]:
        """Yield uses of modules loaded with `require("<id>")`."""
        for event in self.iterate_global_references(_REQUIRE_CALL):
            call = event.node
            arguments = call.get("arguments") or []
            module_id = static_string(arguments[0]) if arguments else None
            next_map = trace_map.child(module_id)
            if next_map is None:
                continue
            path = (module_id,)
            if next_map.wants(READ):
                yield TraceEvent(call, path, READ, next_map.info(READ))
            yield from self._iterate_property_references(call, path, next_map)

    def iterate_esm_references(self, trace_map: TraceNode) -> Iterator[TraceEvent]:
        """Yield uses of modules loaded with `import` or re-exported with `export ... from`."""
        program = self._analysis.root_scope.node
        for node in program.get("body", []):
            if node.get("type") not in _IMPORT_TYPES or node.get("source") is None:
                continue
            module_id = node["source"].get("value")
            next_map = trace_map.child(module_id if isinstance(module_id, str) else None)
            if next_map is None:
                continue
            path = (module_id,)
            if next_map.wants(READ):
                yield TraceEvent(node, path, READ, next_map.info(READ))

            if node.get("type") == "ExportAllDeclaration":
                for key, export_map in next_map.children.items():
                    if export_map.wants(READ):
                        yield TraceEvent(node, path + (key,), READ, export_map.info(READ))
                continue

            for specifier in node.get("specifiers", []):
                if next_map.esm:
                    yield from self._iterate_import_references(specifier, path, next_map)
                    continue
                yield from self._iterate_cjs_interop(specifier, path, next_map)

    # ------------------------------------------------------------------- helpers

    def _parent(self, node: Node) -> Optional[Node]:
        return self._analysis.parent_of(node)

    def _is_modified_global(self, name: str) -> bool:
        return any(reference.write for reference in self._analysis.through if reference.name == name)

    def _iterate_global_name(
        self, name: str, path: Path, trace_map: TraceNode, *, should_report: bool
    ) -> Iterator[TraceEvent]:
        for reference in list(self._analysis.through):
            if reference.name != name or not reference.read:
                continue
            node = reference.identifier
            if should_report and trace_map.wants(READ):
                yield TraceEvent(node, path, READ, trace_map.info(READ))
            yield from self._iterate_property_references(node, path, trace_map)

    def _iterate_variable_references(
        self, variable: Variable, path: Path, trace_map: TraceNode, *, should_report: bool
    ) -> Iterator[TraceEvent]:
        if any(active is variable for active in self._variable_stack):
            return
        self._variable_stack.append(variable)
        try:
            for reference in list(variable.references):
                if not reference.read:
                    continue
                node = reference.identifier
                if should_report and trace_map.wants(READ):
                    yield TraceEvent(node, path, READ, trace_map.info(READ))
                yield from self._iterate_property_references(node, path, trace_map)
        finally:
            self._variable_stack.pop()

    def _is_pass_through(self, node: Node) -> bool:
        parent = self._parent(node)
        parent_type = parent.get("type") if parent else None
        if parent_type == "ConditionalExpression":
            return parent.get("consequent") is node or parent.get("alternate") is node
        if parent_type in ("LogicalExpression", "ChainExpression"):
            return True
        if parent_type == "SequenceExpression":
            expressions = parent.get("expressions") or []
            return bool(expressions) and expressions[-1] is node
        return False

    def _iterate_property_references(self, root: Node, path: Path, trace_map: TraceNode) -> Iterator[TraceEvent]:
        node = root
        while self._is_pass_through(node):
            node = self._parent(node)
        parent = self._parent(node)
        if parent is None:
            return
        parent_type = parent.get("type")

        if parent_type == "MemberExpression":
            if parent.get("object") is node:
                key = property_name(parent)
                next_map = trace_map.child(key)
                if next_map is None:
                    return
                next_path = path + (key,)
                if next_map.wants(READ):
                    yield TraceEvent(parent, next_path, READ, next_map.info(READ))
                yield from self._iterate_property_references(parent, next_path, next_map)
            return

        if parent_type == "CallExpression":
            if parent.get("callee") is node and trace_map.wants(CALL):
                yield TraceEvent(parent, path, CALL, trace_map.info(CALL))
            return

        if parent_type == "NewExpression":
            if parent.get("callee") is node and trace_map.wants(CONSTRUCT):
                yield TraceEvent(parent, path, CONSTRUCT, trace_map.info(CONSTRUCT))
            return

        if parent_type in _CLASS_TYPES:
            if parent.get("superClass") is node and trace_map.subclass:
                yield TraceEvent(node, path, CONSTRUCT, trace_map.info(CONSTRUCT), subclass=True)
            return

        if parent_type == "AssignmentExpression":
            if parent.get("right") is node:
                yield from self._iterate_lhs_references(parent.get("left"), path, trace_map)
                yield from self._iterate_property_references(parent, path, trace_map)
            return

        if parent_type == "AssignmentPattern":
            if parent.get("right") is node:
                yield from self._iterate_lhs_references(parent.get("left"), path, trace_map)
            return

        if parent_type == "VariableDeclarator":
            if parent.get("init") is node:
                yield from self._iterate_lhs_references(parent.get("id"), path, trace_map)

    def _iterate_lhs_references(self, pattern: Optional[Node], path: Path, trace_map: TraceNode) -> Iterator[TraceEvent]:
        if not isinstance(pattern, dict):
            return
        pattern_type = pattern.get("type")

        if pattern_type == "Identifier":
            variable = self._analysis.variable_for(pattern)
            if variable is not None:
                yield from self._iterate_variable_references(variable, path, trace_map, should_report=False)
            return

        if pattern_type == "ObjectPattern":
            for prop in pattern.get("properties", []):
                # Rest elements collect an unknown set of keys.
                if prop.get("type") != "Property":
                    continue
                key = property_name(prop)
                next_map = trace_map.child(key)
                if next_map is None:
                    continue
                next_path = path + (key,)
                if next_map.wants(READ):
                    yield TraceEvent(prop, next_path, READ, next_map.info(READ))
                yield from self._iterate_lhs_references(prop.get("value"), next_path, next_map)
            return

        if pattern_type == "AssignmentPattern":
            yield from self._iterate_lhs_references(pattern.get("left"), path, trace_map)

    def _iterate_cjs_interop(self, specifier: Node, path: Path, module_map: TraceNode) -> Iterator[TraceEvent]:
        if self._mode == "legacy":
            wrapped = module_map.with_children({"default": module_map})
        else:
            wrapped = build_trace_map({}).with_children({"default": module_map})
        for event in self._iterate_import_references(specifier, path, wrapped):
            trimmed = tuple(part for index, part in enumerate(event.path) if not (index == 1 and part == "default"))
            if len(trimmed) >= 2 or event.kind is not READ:
                yield replace(event, path=trimmed)

    def _iterate_import_references(self, specifier: Node, path: Path, trace_map: TraceNode) -> Iterator[TraceEvent]:
        specifier_type = specifier.get("type")

        if specifier_type in ("ImportSpecifier", "ImportDefaultSpecifier"):
            if specifier_type == "ImportDefaultSpecifier":
                key = "default"
            else:
                key = (specifier.get("imported") or {}).get("name")
            next_map = trace_map.child(key)
            if next_map is None:
                return
            next_path = path + (key,)
            if next_map.wants(READ):
                yield TraceEvent(specifier, next_path, READ, next_map.info(READ))
            variable = self._analysis.variable_for(specifier.get("local") or {})
            if variable is not None:
                yield from self._iterate_variable_references(variable, next_path, next_map, should_report=False)
            return

        if specifier_type == "ImportNamespaceSpecifier":
            variable = self._analysis.variable_for(specifier.get("local") or {})
            if variable is not None:
                yield from self._iterate_variable_references(variable, path, trace_map, should_report=False)
            return

        if specifier_type == "ExportSpecifier":
            key = (specifier.get("local") or {}).get("name")
            next_map = trace_map.child(key)
            if next_map is None:
                return
            next_path = path + (key,)
            if next_map.wants(READ):
                yield TraceEvent(specifier, next_path, READ, next_map.info(READ))


__all__ = [
    "GLOBAL_OBJECT_NAMES",
    "ReferenceTracer",
    "property_name",
    "static_string",
]
