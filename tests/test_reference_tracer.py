import pytest

from analyzer import analyze_bindings
from parser import parse_js
from tracer import CALL, CONSTRUCT, ESM, READ, ReferenceTracer, build_trace_map
from tracer.reference_tracer import property_name, static_string


def _analyze(source: str, source_type: str = "script"):
    parse_result = parse_js(source, source_name="test.js", source_type=source_type)
    return analyze_bindings(parse_result.ast, source_name="test.js", source_type=source_type)


def _events(source, trace_map, *, entry="global", source_type="script", mode="strict"):
    tracer = ReferenceTracer(_analyze(source, source_type), mode=mode)
    iterate = {
        "global": tracer.iterate_global_references,
        "cjs": tracer.iterate_cjs_references,
        "esm": tracer.iterate_esm_references,
    }[entry]
    return [(event.key, event.kind, event.info) for event in iterate(trace_map)]


GLOBALS = build_trace_map(
    {
        "Foo": {
            READ: "foo",
            "bar": {READ: "foo.bar", CALL: "foo.bar()"},
            "Baz": {CONSTRUCT: "new foo.Baz()"},
        },
    }
)


def test_direct_global_read_and_member_call():
    events = _events("Foo;\nFoo.bar();", GLOBALS)
    assert ("Foo", READ, "foo") in events
    assert ("Foo.bar", READ, "foo.bar") in events
    assert ("Foo.bar", CALL, "foo.bar()") in events


def test_construct_is_reported():
    assert ("Foo.Baz", CONSTRUCT, "new foo.Baz()") in _events("new Foo.Baz();", GLOBALS)


def test_alias_through_destructuring_keeps_original_path():
    events = _events("const { bar: b } = Foo;\nb();", GLOBALS)
    assert ("Foo.bar", CALL, "foo.bar()") in events


def test_alias_through_variable_and_assignment():
    events = _events("var f = Foo;\nvar g;\ng = f;\ng.bar();", GLOBALS)
    assert ("Foo.bar", CALL, "foo.bar()") in events


def test_default_value_alias():
    events = _events("function run(x = Foo) { return x.bar; }", GLOBALS)
    assert ("Foo.bar", READ, "foo.bar") in events


def test_pass_through_expressions():
    events = _events("(other || Foo).bar;\n(0, Foo.bar)();", GLOBALS)
    assert events.count(("Foo.bar", READ, "foo.bar")) == 2
    assert ("Foo.bar", CALL, "foo.bar()") in events


def test_global_object_prefix_is_transparent():
    events = _events("global.Foo.bar;\nwindow.Foo;", GLOBALS)
    assert ("Foo.bar", READ, "foo.bar") in events
    assert ("Foo", READ, "foo") in events


def test_computed_constant_keys_are_followed():
    assert ("Foo.bar", READ, "foo.bar") in _events("Foo['bar'];", GLOBALS)
    assert ("Foo.bar", READ, "foo.bar") not in _events("Foo[name];", GLOBALS)


def test_shadowed_name_is_not_traced():
    assert _events("function f(Foo) { return Foo.bar; }", GLOBALS) == []


def test_reassigned_global_is_not_traced():
    assert _events("Foo = {};\nFoo.bar;", GLOBALS) == []


def test_alias_cycles_terminate():
    events = _events("var a = Foo;\nvar b = a;\na = b;\nb.bar;", GLOBALS)
    assert ("Foo.bar", READ, "foo.bar") in events


def test_array_destructuring_is_not_traced():
    assert _events("var [bar, ...others] = Foo;\nbar;\nothers.bar;", GLOBALS) == [("Foo", READ, "foo")]


def _node(node_type, start, end, **fields):
    return {"type": node_type, "range": [start, end], **fields}


def test_object_spread_stops_tracing():
    # `var copy = {...Foo}; copy.bar;` built by hand since the parser predates object spread.
    foo = _node("Identifier", 15, 18, name="Foo")
    copy_decl = _node("Identifier", 4, 8, name="copy")
    copy_ref = _node("Identifier", 21, 25, name="copy")
    ast = _node(
        "Program",
        0,
        30,
        sourceType="script",
        body=[
            _node(
                "VariableDeclaration",
                0,
                20,
                kind="var",
                declarations=[
                    _node(
                        "VariableDeclarator",
                        4,
                        19,
                        id=copy_decl,
                        init=_node("ObjectExpression", 11, 19, properties=[_node("SpreadElement", 12, 18, argument=foo)]),
                    )
                ],
            ),
            _node(
                "ExpressionStatement",
                21,
                30,
                expression=_node(
                    "MemberExpression",
                    21,
                    29,
                    computed=False,
                    object=copy_ref,
                    property=_node("Identifier", 26, 29, name="bar"),
                ),
            ),
        ],
    )
    analysis = analyze_bindings(ast, source_name="spread.js")
    events = list(ReferenceTracer(analysis).iterate_global_references(GLOBALS))
    assert [event.key for event in events] == ["Foo"]


MODULES = build_trace_map(
    {
        "fs": {
            READ: "fs",
            "exists": {READ: "fs.exists"},
        },
        "esm-only": {
            ESM: True,
            "named": {READ: "esm named"},
        },
    }
)


def test_require_member_and_module_read():
    events = _events('var fs = require("fs");\nfs.exists("x");', MODULES, entry="cjs")
    assert ("fs", READ, "fs") in events
    assert ("fs.exists", READ, "fs.exists") in events


def test_require_destructured():
    events = _events('const { exists } = require("fs");', MODULES, entry="cjs")
    assert events[-1] == ("fs.exists", READ, "fs.exists")


def test_local_require_is_not_traced():
    source = 'function require() {}\nvar fs = require("fs");\nfs.exists;'
    assert _events(source, MODULES, entry="cjs") == []


def test_default_import_of_commonjs_module():
    source = 'import fs from "fs";\nfs.exists;'
    events = _events(source, MODULES, entry="esm", source_type="module")
    assert ("fs.exists", READ, "fs.exists") in events
    assert all(key != "fs.default" for key, _, _ in events)


def test_named_import_of_commonjs_module_only_in_legacy_mode():
    source = 'import { exists } from "fs";\nimport * as ns from "fs";\nns.exists;\nexists;'
    strict_events = _events(source, MODULES, entry="esm", source_type="module")
    legacy_events = _events(source, MODULES, entry="esm", source_type="module", mode="legacy")
    assert ("fs.exists", READ, "fs.exists") not in strict_events
    assert legacy_events.count(("fs.exists", READ, "fs.exists")) == 2


def test_esm_module_named_import():
    source = 'import { named } from "esm-only";\nnamed;'
    events = _events(source, MODULES, entry="esm", source_type="module")
    assert events == [("esm-only.named", READ, "esm named")]


def test_re_export_is_a_read():
    source = 'export { exists } from "fs";'
    events = _events(source, MODULES, entry="esm", source_type="module", mode="legacy")
    assert ("fs.exists", READ, "fs.exists") in events


def test_unknown_mode_is_rejected():
    with pytest.raises(ValueError):
        ReferenceTracer(_analyze("1;"), mode="loose")


@pytest.mark.parametrize(
    "source, expected",
    [("o.a", "a"), ("o['b']", "b"), ("o[1]", "1"), ("o[`c`]", "c"), ("o[k]", None)],
)
def test_property_name(source, expected):
    expression = parse_js(source).ast["body"][0]["expression"]
    assert property_name(expression) == expected


def test_static_string_of_non_constant():
    assert static_string(None) is None
    assert static_string({"type": "Identifier", "name": "x"}) is None
