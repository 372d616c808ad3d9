import pytest

from analyzer import ScopeType, analyze_bindings, get_innermost_scope
from parser import parse_js

SOURCE = """\
var top = 1;
function outer(a) {
  "use strict";
  if (a) {
    let inner = a;
  }
  return function () { return a; };
}
"""


def _analyze(source: str, source_type: str = "script"):
    parse_result = parse_js(source, source_name="test.js", source_type=source_type)
    return analyze_bindings(parse_result.ast, source_name="test.js", source_type=source_type)


def test_offset_at_top_level_returns_global_scope():
    analysis = _analyze(SOURCE)
    scope = get_innermost_scope(analysis.scopes, SOURCE.index("top"))
    assert scope is analysis.root_scope


def test_offset_in_block_returns_block_scope():
    analysis = _analyze(SOURCE)
    scope = get_innermost_scope(analysis.scopes, SOURCE.index("inner"))
    assert scope.scope_type is ScopeType.BLOCK
    assert "inner" in scope.variables


def test_offset_in_nested_function_returns_deepest_scope():
    analysis = _analyze(SOURCE)
    offset = SOURCE.index("return a;")
    scope = get_innermost_scope(analysis.scopes, offset)
    assert scope.scope_type is ScopeType.FUNCTION
    assert scope.node["type"] == "FunctionExpression"


def test_search_can_start_below_the_root():
    analysis = _analyze(SOURCE)
    tree = analysis.scopes
    outer = next(child for child in tree.children_of(tree.root) if child.scope_type is ScopeType.FUNCTION)
    scope = get_innermost_scope(tree, SOURCE.index("inner"), start=outer)
    assert scope.scope_type is ScopeType.BLOCK


def test_offset_outside_start_scope_raises():
    analysis = _analyze(SOURCE)
    tree = analysis.scopes
    outer = next(child for child in tree.children_of(tree.root) if child.scope_type is ScopeType.FUNCTION)
    with pytest.raises(ValueError):
        get_innermost_scope(tree, SOURCE.index("top"), start=outer)


def test_strictness_follows_directive():
    analysis = _analyze(SOURCE)
    assert not get_innermost_scope(analysis.scopes, SOURCE.index("top")).strict
    assert get_innermost_scope(analysis.scopes, SOURCE.index("inner")).strict
    assert get_innermost_scope(analysis.scopes, SOURCE.index("return a;")).strict


def test_module_code_is_strict():
    source = "import x from 'x';\nvar y = x;\n"
    analysis = _analyze(source, source_type="module")
    scope = get_innermost_scope(analysis.scopes, source.index("y"))
    assert scope.scope_type is ScopeType.MODULE
    assert scope.strict


def test_child_scopes_are_nested_and_disjoint():
    analysis = _analyze(SOURCE)
    tree = analysis.scopes
    visited = []
    pending = [tree.root]
    while pending:
        scope = pending.pop()
        visited.append(scope)
        pending.extend(tree.children_of(scope))
    assert len(visited) == len(tree)
    for scope in visited:
        children = tree.children_of(scope)
        for child in children:
            assert scope.range[0] <= child.range[0] and child.range[1] <= scope.range[1]
        ordered = sorted(child.range for child in children)
        for (_, left_end), (right_start, _) in zip(ordered, ordered[1:]):
            assert left_end <= right_start
