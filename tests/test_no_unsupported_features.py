import json

import pytest

from features import CATALOG, ConfigurationError
from linter import lint_source
from linter.rules.no_unsupported_features import FEATURE_POLICIES, RULE_ID, UNSUPPORTED_GLOBALS, extends_null
from linter.syntax_checks import SYNTAX_CHECKS
from parser import parse_js
from tracer import READ


def _messages(source, version=None, ignores=(), *, source_type="script", filename=None):
    options = {"ignores": list(ignores)}
    if version is not None:
        options["version"] = version
    result = lint_source(
        source,
        source_name="test.js",
        filename=filename,
        source_type=source_type,
        rules={RULE_ID: options},
    )
    return [diagnostic.message for diagnostic in result.diagnostics]


def test_plain_class_is_supported_on_6():
    assert _messages("class A {}", 6) == []


def test_extends_null_is_never_supported():
    assert _messages("class A extends null {}", 6) == ["'extends null' is not supported yet on target 6.0.0."]


def test_generators_on_4():
    assert _messages("function* g() {}", "4.0.0") == ["generator functions are not supported yet on target 4.0.0."]


def test_global_member_reported_once_by_most_specific_known_path():
    assert _messages("Atomics.wait(view, 0, 0);", 6) == ["'Atomics' is not supported yet on target 6.0.0."]


def test_member_with_own_entry_wins_over_root():
    assert _messages("var it = Symbol.hasInstance;", 6) == ["'Symbol.hasInstance' is not supported yet on target 6.0.0."]


def test_traced_global_reads_all_have_catalog_entries():
    read_roots = {name for name, child in UNSUPPORTED_GLOBALS.children.items() if child.wants(READ)}
    assert read_roots <= set(CATALOG)
    for name in ("Boolean", "Number", "String", "Array", "Function", "RegExp"):
        assert name not in read_roots
        assert UNSUPPORTED_GLOBALS.children[name].subclass


def test_strict_only_feature_reports_non_strict_use():
    assert _messages("let x = 1;", 4) == ["'let' declarations in non-strict mode are not supported yet on target 4.0.0."]
    assert _messages('"use strict";\nlet x = 1;', 4) == []


def test_class_is_judged_by_its_enclosing_scope():
    assert _messages("class A {}", 4) == ["classes in non-strict mode are not supported yet on target 4.0.0."]
    assert _messages('function f() {\n  "use strict";\n  class A {}\n}', 4) == []


def test_subclassing_builtin():
    messages = _messages("class MyArray extends Array {}", 4)
    assert messages == [
        "classes in non-strict mode are not supported yet on target 4.0.0.",
        "subclassing of 'Array' is not supported yet on target 4.0.0.",
    ]
    # Class heritage is strict code, so only the class itself is reported.
    assert _messages("class MyArray extends Array {}", 5) == [
        "classes in non-strict mode are not supported yet on target 5.0.0.",
    ]


def test_modules_are_reported():
    messages = _messages('import fs from "fs";\nexport default fs;', 8, source_type="module")
    assert messages == ["import and export declarations are not supported yet on target 8.0.0."] * 2


def test_ignored_feature_is_not_reported():
    assert _messages("class A extends null {}", 6, ignores=["extendsNull"]) == []


def test_runtime_alias_ignores_builtins():
    assert _messages("new Map();", 0.10) == ["'Map' is not supported yet on target 0.10.0."]
    assert _messages("new Map();", 0.10, ignores=["runtime"]) == []


def test_shadowed_builtin_is_not_reported():
    assert _messages("function f(Map) { return new Map(); }", 0.10) == []


def test_global_object_access_is_reported():
    assert _messages("global.Promise.resolve(1);", 0.10) == ["'Promise' is not supported yet on target 0.10.0."]


@pytest.mark.parametrize(
    "source, version, expected",
    [
        ("var f = (a) => a;", 0.12, "arrow functions are not supported yet on target 0.12.0."),
        ("var n = 0b101;", 0.12, "binary number literals are not supported yet on target 0.12.0."),
        ("var n = 0o17;", 0.12, "octal number literals are not supported yet on target 0.12.0."),
        ("var s = `x`;", 0.12, "template strings are not supported yet on target 0.12.0."),
        ("function f(a = 1) {}", 5, "default parameters are not supported yet on target 5.0.0."),
        ("function f(...args) {}", 5, "rest parameters are not supported yet on target 5.0.0."),
        ("f(...args);", 4, "spread operators are not supported yet on target 4.0.0."),
        ("var [a] = b;", 5, "destructuring is not supported yet on target 5.0.0."),
        ("function F() { new.target; }", 4, "'new.target' is not supported yet on target 4.0.0."),
        ("var r = /a/u;", 5, "RegExp 'u' flag is not supported yet on target 5.0.0."),
        ("var r = /a/y;", 5, "RegExp 'y' flag is not supported yet on target 5.0.0."),
        ("var x = 2 ** 8;", 6, "exponential operators are not supported yet on target 6.0.0."),
        ("async function f() {}", 7, "async functions are not supported yet on target 7.0.0."),
        ("var o = { [k]: 1 };", 0.12, "object literal extensions are not supported yet on target 0.12.0."),
        ('var s = "\\u{1F600}";', 0.12, "unicode code point escapes are not supported yet on target 0.12.0."),
        ("for (var x of xs) {}", 0.10, "'for..of' loops are not supported yet on target 0.10.0."),
    ],
)
def test_syntax_features(source, version, expected):
    assert expected in _messages(source, version)


def test_trailing_function_commas():
    assert _messages("function f(a,) {}\nf(1,);", 7) == [
        "trailing commas in functions are not supported yet on target 7.0.0.",
        "trailing commas in functions are not supported yet on target 7.0.0.",
    ]


def test_trailing_comma_after_parenthesized_element():
    message = "trailing commas in functions are not supported yet on target 6.0.0."
    assert _messages("f(a, (b),);", 6) == [message]
    assert _messages("f(a, (b));\nf((a));\nnew G((a) /* c */ ,);", 6) == [message]


def test_block_scoped_function_in_sloppy_code():
    assert _messages("if (a) { function f() {} }", 4) == [
        "block-scoped functions in non-strict mode are not supported yet on target 4.0.0."
    ]
    assert _messages("function outer() { function inner() {} }", 4) == []


def test_regexp_constructor_with_constant_flags():
    assert _messages('var r = new RegExp("a", "y");', 5) == ["RegExp 'y' flag is not supported yet on target 5.0.0."]
    assert _messages('var RegExp = Foo;\nvar r = new RegExp("a", "y");', 5) == []


def test_nothing_reported_on_recent_target():
    source = "const f = async (a, ...rest) => [...rest, a ** 2];\nclass B extends Map {}\n"
    assert _messages(source, 10) == []


def test_default_target_comes_from_manifest(tmp_path):
    (tmp_path / "package.json").write_text(json.dumps({"engines": {"node": ">=7.6.0"}}), encoding="utf-8")
    source_file = tmp_path / "index.js"
    source = "async function f() {}\nvar x = 2 ** 3;\nObject.values({});\n"
    assert _messages(source, filename=source_file) == []
    assert _messages("var s = Object.getOwnPropertyDescriptors;\nf(a,);", filename=source_file) == [
        "trailing commas in functions are not supported yet on target >=7.6.0."
    ]


def test_prerelease_manifest_range_reports_release_features(tmp_path):
    (tmp_path / "package.json").write_text(json.dumps({"engines": {"node": ">=6.0.0-beta"}}), encoding="utf-8")
    source_file = tmp_path / "index.js"
    assert _messages("Proxy;", filename=source_file) == [
        "'Proxy' is not supported yet on target >=6.0.0-beta."
    ]


def test_explicit_version_overrides_manifest(tmp_path):
    (tmp_path / "package.json").write_text(json.dumps({"engines": {"node": ">=8.0.0"}}), encoding="utf-8")
    source_file = tmp_path / "index.js"
    assert _messages("async function f() {}", 7, filename=source_file) == [
        "async functions are not supported yet on target 7.0.0."
    ]


def test_default_target_without_manifest():
    assert _messages("var p = new Proxy({}, {});", None) == []
    assert _messages("var x = 2 ** 3;", None) == ["exponential operators are not supported yet on target 6.0.0."]


def test_invalid_options_are_rejected_before_linting():
    with pytest.raises(ConfigurationError):
        _messages("var x;", "six")


def test_every_policy_names_a_syntax_check():
    assert {policy.check for policy in FEATURE_POLICIES} == set(SYNTAX_CHECKS)


def test_extends_null_detection():
    declaration = parse_js("class A extends null {}").ast["body"][0]
    other = parse_js("class A extends B {}").ast["body"][0]
    assert extends_null(declaration)
    assert not extends_null(other)
