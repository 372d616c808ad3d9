from linter import VisitorBuilder, merge_visitors, traverse
from parser import parse_js


def _program(source: str):
    return parse_js(source, source_name="test.js").ast


def test_handlers_run_in_registration_order():
    calls = []
    dispatch = merge_visitors(
        {"Identifier": lambda node: calls.append(("first", node["name"]))},
        {"Identifier": lambda node: calls.append(("second", node["name"]))},
    )
    traverse(_program("a;"), dispatch)
    assert calls == [("first", "a"), ("second", "a")]


def test_each_handler_runs_exactly_once_per_node():
    calls = []
    handler = calls.append
    builder = VisitorBuilder()
    builder.merge({"Literal": handler})
    builder.merge({"Identifier": lambda node: None})
    traverse(_program("f(1, 2);"), builder.compile())
    assert [node["value"] for node in calls] == [1, 2]


def test_comma_separated_keys_register_every_type():
    seen = []
    dispatch = merge_visitors({"FunctionDeclaration, FunctionExpression": lambda node: seen.append(node["type"])})
    traverse(_program("function f() {}\nvar g = function () {};"), dispatch)
    assert seen == ["FunctionDeclaration", "FunctionExpression"]


def test_handler_count_tracks_split_keys():
    builder = VisitorBuilder()
    builder.merge({"Literal, Identifier": lambda node: None})
    builder.merge({"Literal": lambda node: None})
    assert builder.handler_count("Literal") == 2
    assert builder.handler_count("Identifier") == 1
    assert builder.handler_count("Program") == 0


def test_single_handler_is_not_wrapped():
    handler = lambda node: None  # noqa: E731
    assert merge_visitors({"Literal": handler})["Literal"] is handler


def test_traversal_is_source_ordered_with_exit_events():
    events = []
    dispatch = merge_visitors(
        {
            "Program": lambda node: events.append("enter Program"),
            "Program:exit": lambda node: events.append("exit Program"),
            "Identifier": lambda node: events.append(f"enter {node['name']}"),
            "CallExpression:exit": lambda node: events.append("exit call"),
        }
    )
    traverse(_program("first(second);\nthird;"), dispatch)
    assert events == [
        "enter Program",
        "enter first",
        "enter second",
        "exit call",
        "enter third",
        "exit Program",
    ]


def test_empty_merge_dispatches_nothing():
    assert merge_visitors() == {}
