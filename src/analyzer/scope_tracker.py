"""
Scope analysis for JavaScript ASTs.

The analyzer walks an esprima-compatible AST and builds a tree of lexical
scopes. Declarations introduced by `var`, `let`, `const`, `function`, `class`,
parameters, catch clauses and imports become variables of the scope they bind
in, and every identifier read or written in expression position becomes a
reference. References are resolved once the walk has finished, so hoisted
declarations are visible from anywhere in their scope; references that find
no declaration are left on the root scope's `through` list and denote implicit
globals.

Scopes live in an arena (`ScopeTree`) and point at each other by integer id.
Parent links of AST nodes are kept in a side index keyed by node identity, so
the AST dictionaries themselves are never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

Node = Dict[str, Any]

_SKIPPED_KEYS = frozenset({"type", "loc", "range", "errors", "comments", "tokens"})


class ScopeType(str, Enum):
    GLOBAL = "global"
    MODULE = "module"
    FUNCTION = "function"
    BLOCK = "block"
    CATCH = "catch"
    CLASS = "class"
    FOR = "for"
    SWITCH = "switch"


class BindingKind(str, Enum):
    VAR = "var"
    LET = "let"
    CONST = "const"
    FUNCTION = "function"
    CLASS = "class"
    PARAMETER = "parameter"
    CATCH_PARAMETER = "catch_parameter"
    IMPORT = "import"
    IMPLICIT = "implicit"


@dataclass(frozen=True)
class SourcePosition:
    line: Optional[int]
    column: Optional[int]


@dataclass(frozen=True)
class Binding:
    """A single declaration of a name."""

    name: str
    kind: BindingKind
    loc: SourcePosition
    node: Optional[Node]


@dataclass(eq=False)
class Reference:
    """An identifier occurrence in expression position."""

    identifier: Node
    scope_id: int
    read: bool = True
    write: bool = False
    resolved: Optional["Variable"] = None

    @property
    def name(self) -> str:
        return self.identifier.get("name")


@dataclass(eq=False)
class Variable:
    """A name declared in one scope, with all its declarations and references."""

    name: str
    scope_id: int
    bindings: List[Binding] = field(default_factory=list)
    references: List[Reference] = field(default_factory=list)


@dataclass(eq=False)
class Scope:
    """A lexical scope. Relatives are addressed by id through the owning tree."""

    scope_id: int
    scope_type: ScopeType
    node: Node
    range: Tuple[int, int]
    strict: bool
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)
    variables: Dict[str, Variable] = field(default_factory=dict)
    references: List[Reference] = field(default_factory=list)
    through: List[Reference] = field(default_factory=list)

    @property
    def is_function_boundary(self) -> bool:
        return self.scope_type in (ScopeType.GLOBAL, ScopeType.MODULE, ScopeType.FUNCTION)

    def contains(self, offset: int) -> bool:
        return self.range[0] <= offset < self.range[1]


class ScopeTree:
    """Arena of scopes indexed by id. Scope 0 is always the global scope."""

    def __init__(self) -> None:
        self.scopes: List[Scope] = []

    @property
    def root(self) -> Scope:
        return self.scopes[0]

    def __len__(self) -> int:
        return len(self.scopes)

    def get(self, scope_id: int) -> Scope:
        return self.scopes[scope_id]

    def add(
        self,
        scope_type: ScopeType,
        node: Node,
        parent: Optional[Scope],
        *,
        strict: bool,
    ) -> Scope:
        scope = Scope(
            scope_id=len(self.scopes),
            scope_type=scope_type,
            node=node,
            range=_node_range(node),
            strict=strict,
            parent=parent.scope_id if parent is not None else None,
        )
        self.scopes.append(scope)
        if parent is not None:
            parent.children.append(scope.scope_id)
        return scope

    def parent_of(self, scope: Scope) -> Optional[Scope]:
        return self.scopes[scope.parent] if scope.parent is not None else None

    def children_of(self, scope: Scope) -> List[Scope]:
        return [self.scopes[child] for child in scope.children]

    def ancestors(self, scope: Scope) -> Iterator[Scope]:
        """Yield `scope` and then each enclosing scope up to the root."""
        current: Optional[Scope] = scope
        while current is not None:
            yield current
            current = self.parent_of(current)

    def find_variable(self, scope: Scope, name: str) -> Optional[Variable]:
        for candidate in self.ancestors(scope):
            variable = candidate.variables.get(name)
            if variable is not None:
                return variable
        return None


@dataclass(frozen=True)
class AnalysisResult:
    source_name: str
    scopes: ScopeTree
    parents: Dict[int, Node]
    declarations: Dict[int, Variable]
    identifier_references: Dict[int, Reference]

    @property
    def root_scope(self) -> Scope:
        return self.scopes.root

    @property
    def through(self) -> List[Reference]:
        """References that resolve to no declaration anywhere in the file."""
        return self.scopes.root.through

    def parent_of(self, node: Node) -> Optional[Node]:
        return self.parents.get(id(node))

    def variable_for(self, identifier: Node) -> Optional[Variable]:
        """Variable a declaring or referencing identifier node stands for."""
        variable = self.declarations.get(id(identifier))
        if variable is not None:
            return variable
        reference = self.identifier_references.get(id(identifier))
        return reference.resolved if reference is not None else None


def _node_range(node: Node) -> Tuple[int, int]:
    start, end = node.get("range") or (0, 0)
    return int(start), int(end)


def _has_use_strict(statements: Iterable[Any]) -> bool:
    for statement in statements:
        if not isinstance(statement, dict) or statement.get("type") != "ExpressionStatement":
            return False
        directive = statement.get("directive")
        if directive is None:
            expression = statement.get("expression") or {}
            if expression.get("type") != "Literal" or not isinstance(expression.get("value"), str):
                return False
            directive = expression.get("raw", "")[1:-1]
        if directive == "use strict":
            return True
    return False


def build_parent_index(ast: Node) -> Dict[int, Node]:
    """Map `id(node)` of every AST node to its parent node."""
    parents: Dict[int, Node] = {}
    stack: List[Node] = [ast]
    while stack:
        node = stack.pop()
        for key, value in node.items():
            if key in _SKIPPED_KEYS:
                continue
            if isinstance(value, dict) and "type" in value:
                parents[id(value)] = node
                stack.append(value)
            elif isinstance(value, list):
                for element in value:
                    if isinstance(element, dict) and "type" in element:
                        parents[id(element)] = node
                        stack.append(element)
    return parents


class _BindingAnalyzer:
    def __init__(self, source_name: str, source_type: str) -> None:
        self._source_name = source_name
        self._module = source_type == "module"
        self._tree = ScopeTree()
        self._pending: List[Reference] = []
        self._declarations: Dict[int, Variable] = {}
        self._identifier_references: Dict[int, Reference] = {}

    def analyze(self, ast: Node) -> AnalysisResult:
        body = ast.get("body", [])
        root = self._tree.add(
            ScopeType.GLOBAL,
            ast,
            parent=None,
            strict=self._module or _has_use_strict(body),
        )
        scope = root
        if self._module:
            scope = self._tree.add(ScopeType.MODULE, ast, parent=root, strict=True)
        self._visit(body, scope)
        self._resolve_references()
        return AnalysisResult(
            source_name=self._source_name,
            scopes=self._tree,
            parents=build_parent_index(ast),
            declarations=self._declarations,
            identifier_references=self._identifier_references,
        )

    # ------------------------------------------------------------------ helpers

    @staticmethod
    def _source_position(node: Node) -> SourcePosition:
        loc = node.get("loc") or {}
        start = loc.get("start") or {}
        return SourcePosition(line=start.get("line"), column=start.get("column"))

    def _new_scope(self, scope_type: ScopeType, node: Node, parent: Scope, strict: bool = False) -> Scope:
        return self._tree.add(scope_type, node, parent, strict=parent.strict or strict)

    def _variable_scope(self, scope: Scope) -> Scope:
        for candidate in self._tree.ancestors(scope):
            if candidate.is_function_boundary:
                return candidate
        return self._tree.root

    def _declare(self, scope: Scope, identifier: Node, kind: BindingKind) -> Variable:
        name = identifier.get("name")
        variable = scope.variables.get(name)
        if variable is None:
            variable = Variable(name=name, scope_id=scope.scope_id)
            scope.variables[name] = variable
        variable.bindings.append(
            Binding(name=name, kind=kind, loc=self._source_position(identifier), node=identifier)
        )
        self._declarations[id(identifier)] = variable
        return variable

    def _declare_implicit(self, scope: Scope, name: str) -> None:
        if name not in scope.variables:
            scope.variables[name] = Variable(
                name=name,
                scope_id=scope.scope_id,
                bindings=[Binding(name=name, kind=BindingKind.IMPLICIT, loc=SourcePosition(None, None), node=None)],
            )

    def _reference(self, identifier: Node, scope: Scope, *, read: bool = True, write: bool = False) -> None:
        reference = Reference(identifier=identifier, scope_id=scope.scope_id, read=read, write=write)
        scope.references.append(reference)
        self._pending.append(reference)
        self._identifier_references[id(identifier)] = reference

    def _resolve_references(self) -> None:
        root = self._tree.root
        for reference in self._pending:
            scope = self._tree.get(reference.scope_id)
            variable = self._tree.find_variable(scope, reference.name)
            if variable is None:
                root.through.append(reference)
                continue
            reference.resolved = variable
            variable.references.append(reference)

    def _visit(self, node: Any, scope: Scope) -> None:
        if node is None:
            return
        if isinstance(node, list):
            for element in node:
                self._visit(element, scope)
            return
        if not isinstance(node, dict):
            return

        handler = getattr(self, f"_visit_{node.get('type')}", None)
        if handler:
            handler(node, scope)
        else:
            self._generic_visit(node, scope)

    def _generic_visit(self, node: Node, scope: Scope) -> None:
        for key, value in node.items():
            if key in _SKIPPED_KEYS:
                continue
            self._visit(value, scope)

    # ----------------------------------------------------------------- patterns

    def _visit_pattern(
        self,
        pattern: Any,
        scope: Scope,
        *,
        kind: Optional[BindingKind] = None,
        target: Optional[Scope] = None,
        write: bool = True,
    ) -> None:
        """
        Walk a binding or assignment target.

        With `kind` set, identifiers are declared in `target`; with `write`
        set, they also receive a write reference. Default values and computed
        keys are ordinary expressions evaluated in `scope`.
        """
        if not isinstance(pattern, dict):
            return
        pattern_type = pattern.get("type")
        if pattern_type == "Identifier":
            if kind is not None:
                self._declare(target or scope, pattern, kind)
                if write:
                    reference = Reference(identifier=pattern, scope_id=scope.scope_id, read=False, write=True)
                    scope.references.append(reference)
                    self._pending.append(reference)
            elif write:
                self._reference(pattern, scope, read=False, write=True)
        elif pattern_type == "ObjectPattern":
            for prop in pattern.get("properties", []):
                if prop.get("type") == "Property":
                    if prop.get("computed"):
                        self._visit(prop.get("key"), scope)
                    self._visit_pattern(prop.get("value"), scope, kind=kind, target=target, write=write)
                else:
                    self._visit_pattern(prop, scope, kind=kind, target=target, write=write)
        elif pattern_type == "ArrayPattern":
            for element in pattern.get("elements", []):
                self._visit_pattern(element, scope, kind=kind, target=target, write=write)
        elif pattern_type == "AssignmentPattern":
            self._visit_pattern(pattern.get("left"), scope, kind=kind, target=target, write=write)
            self._visit(pattern.get("right"), scope)
        elif pattern_type in ("RestElement", "SpreadElement"):
            self._visit_pattern(pattern.get("argument"), scope, kind=kind, target=target, write=write)
        else:
            # Member expressions and other assignable expressions.
            self._visit(pattern, scope)

    # ----------------------------------------------------------------- visitors

    def _visit_Identifier(self, node: Node, scope: Scope) -> None:
        self._reference(node, scope)

    def _visit_BlockStatement(self, node: Node, scope: Scope) -> None:
        block_scope = self._new_scope(ScopeType.BLOCK, node, scope)
        self._visit(node.get("body", []), block_scope)

    def _visit_VariableDeclaration(self, node: Node, scope: Scope) -> None:
        kind = BindingKind(node.get("kind", "var"))
        target = self._variable_scope(scope) if kind is BindingKind.VAR else scope
        for declarator in node.get("declarations", []):
            self._visit_pattern(
                declarator.get("id"),
                scope,
                kind=kind,
                target=target,
                write=declarator.get("init") is not None,
            )
            self._visit(declarator.get("init"), scope)

    def _visit_function(self, node: Node, scope: Scope) -> None:
        body = node.get("body")
        directive_strict = isinstance(body, dict) and body.get("type") == "BlockStatement" and _has_use_strict(
            body.get("body", [])
        )
        function_scope = self._new_scope(ScopeType.FUNCTION, node, scope, strict=directive_strict)
        if node.get("type") != "ArrowFunctionExpression":
            self._declare_implicit(function_scope, "arguments")
        if node.get("type") == "FunctionExpression" and isinstance(node.get("id"), dict):
            # Named function expressions bind the name within the inner scope.
            self._declare(function_scope, node["id"], BindingKind.FUNCTION)
        for param in node.get("params", []):
            self._visit_pattern(param, function_scope, kind=BindingKind.PARAMETER, write=False)
        if isinstance(body, dict) and body.get("type") == "BlockStatement":
            self._visit(body.get("body", []), function_scope)
        else:
            self._visit(body, function_scope)

    def _visit_FunctionDeclaration(self, node: Node, scope: Scope) -> None:
        identifier = node.get("id")
        if isinstance(identifier, dict):
            self._declare(scope, identifier, BindingKind.FUNCTION)
        self._visit_function(node, scope)

    def _visit_FunctionExpression(self, node: Node, scope: Scope) -> None:
        self._visit_function(node, scope)

    def _visit_ArrowFunctionExpression(self, node: Node, scope: Scope) -> None:
        self._visit_function(node, scope)

    def _visit_class(self, node: Node, scope: Scope) -> None:
        self._visit(node.get("superClass"), scope)
        class_scope = self._new_scope(ScopeType.CLASS, node, scope, strict=True)
        identifier = node.get("id")
        if isinstance(identifier, dict):
            self._declare(class_scope, identifier, BindingKind.CLASS)
        body = node.get("body") or {}
        self._visit(body.get("body", []), class_scope)

    def _visit_ClassDeclaration(self, node: Node, scope: Scope) -> None:
        identifier = node.get("id")
        if isinstance(identifier, dict):
            self._declare(scope, identifier, BindingKind.CLASS)
        self._visit_class(node, scope)

    def _visit_ClassExpression(self, node: Node, scope: Scope) -> None:
        self._visit_class(node, scope)

    def _visit_MethodDefinition(self, node: Node, scope: Scope) -> None:
        if node.get("computed"):
            self._visit(node.get("key"), scope)
        self._visit(node.get("value"), scope)

    def _visit_Property(self, node: Node, scope: Scope) -> None:
        if node.get("computed"):
            self._visit(node.get("key"), scope)
        self._visit(node.get("value"), scope)

    def _visit_MemberExpression(self, node: Node, scope: Scope) -> None:
        self._visit(node.get("object"), scope)
        if node.get("computed"):
            self._visit(node.get("property"), scope)

    def _visit_MetaProperty(self, node: Node, scope: Scope) -> None:
        return

    def _visit_LabeledStatement(self, node: Node, scope: Scope) -> None:
        self._visit(node.get("body"), scope)

    def _visit_BreakStatement(self, node: Node, scope: Scope) -> None:
        return

    def _visit_ContinueStatement(self, node: Node, scope: Scope) -> None:
        return

    def _visit_AssignmentExpression(self, node: Node, scope: Scope) -> None:
        left = node.get("left") or {}
        if left.get("type") == "Identifier":
            self._reference(left, scope, read=node.get("operator") != "=", write=True)
        else:
            self._visit_pattern(left, scope)
        self._visit(node.get("right"), scope)

    def _visit_UpdateExpression(self, node: Node, scope: Scope) -> None:
        argument = node.get("argument") or {}
        if argument.get("type") == "Identifier":
            self._reference(argument, scope, read=True, write=True)
        else:
            self._visit(argument, scope)

    def _visit_ForStatement(self, node: Node, scope: Scope) -> None:
        init = node.get("init") or {}
        if init.get("type") == "VariableDeclaration" and init.get("kind") != "var":
            scope = self._new_scope(ScopeType.FOR, node, scope)
        self._visit(node.get("init"), scope)
        self._visit(node.get("test"), scope)
        self._visit(node.get("update"), scope)
        self._visit(node.get("body"), scope)

    def _visit_for_in_of(self, node: Node, scope: Scope) -> None:
        left = node.get("left") or {}
        if left.get("type") == "VariableDeclaration":
            kind = BindingKind(left.get("kind", "var"))
            if kind is BindingKind.VAR:
                target = self._variable_scope(scope)
            else:
                scope = self._new_scope(ScopeType.FOR, node, scope)
                target = scope
            for declarator in left.get("declarations", []):
                self._visit_pattern(declarator.get("id"), scope, kind=kind, target=target)
        else:
            self._visit_pattern(left, scope)
        self._visit(node.get("right"), scope)
        self._visit(node.get("body"), scope)

    def _visit_ForInStatement(self, node: Node, scope: Scope) -> None:
        self._visit_for_in_of(node, scope)

    def _visit_ForOfStatement(self, node: Node, scope: Scope) -> None:
        self._visit_for_in_of(node, scope)

    def _visit_SwitchStatement(self, node: Node, scope: Scope) -> None:
        self._visit(node.get("discriminant"), scope)
        switch_scope = self._new_scope(ScopeType.SWITCH, node, scope)
        self._visit(node.get("cases", []), switch_scope)

    def _visit_CatchClause(self, node: Node, scope: Scope) -> None:
        catch_scope = self._new_scope(ScopeType.CATCH, node, scope)
        self._visit_pattern(node.get("param"), catch_scope, kind=BindingKind.CATCH_PARAMETER, write=False)
        self._visit(node.get("body"), catch_scope)

    def _visit_ImportDeclaration(self, node: Node, scope: Scope) -> None:
        for specifier in node.get("specifiers", []):
            local = specifier.get("local")
            if isinstance(local, dict):
                self._declare(scope, local, BindingKind.IMPORT)

    def _visit_ExportNamedDeclaration(self, node: Node, scope: Scope) -> None:
        self._visit(node.get("declaration"), scope)
        if node.get("source") is None:
            for specifier in node.get("specifiers", []):
                self._visit(specifier.get("local"), scope)

    def _visit_ExportDefaultDeclaration(self, node: Node, scope: Scope) -> None:
        self._visit(node.get("declaration"), scope)

    def _visit_ExportAllDeclaration(self, node: Node, scope: Scope) -> None:
        return


def analyze_bindings(
    ast: Node,
    *,
    source_name: str = "<input>",
    source_type: str = "script",
) -> AnalysisResult:
    """
    Run scope and binding analysis on a JavaScript AST.

    Args:
        ast: esprima-compatible AST (result of `parse_js`), with ranges.
        source_name: Label for diagnostics and reporting.
        source_type: `"script"` or `"module"`; modules get a strict module
            scope below the global scope.

    Returns:
        AnalysisResult with the scope tree, resolved references and the
        node parent index.
    """
    analyzer = _BindingAnalyzer(source_name=source_name, source_type=source_type)
    return analyzer.analyze(ast)


__all__ = [
    "AnalysisResult",
    "Binding",
    "BindingKind",
    "Reference",
    "Scope",
    "ScopeTree",
    "ScopeType",
    "SourcePosition",
    "Variable",
    "analyze_bindings",
    "build_parent_index",
]
