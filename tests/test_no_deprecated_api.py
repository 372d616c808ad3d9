import pytest

from features import ConfigurationError
from linter import lint_source
from linter.rules.no_deprecated_api import RULE_ID


def _lint(source, options=None, *, source_type="script"):
    result = lint_source(source, source_name="test.js", source_type=source_type, rules={RULE_ID: options})
    return result.diagnostics


def _messages(source, options=None, *, source_type="script"):
    return [diagnostic.message for diagnostic in _lint(source, options, source_type=source_type)]


def test_required_module_member():
    assert _messages('const os = require("os");\nos.tmpDir;') == [
        "'os.tmpDir' was deprecated since v7. Use 'os.tmpdir()' instead."
    ]


def test_destructured_member():
    assert _messages('const { exists } = require("fs");') == [
        "'fs.exists' was deprecated since v4. Use 'fs.stat()' or 'fs.access()' instead."
    ]


def test_whole_module_is_deprecated():
    assert _messages('var sys = require("sys");') == ["'sys' module was deprecated since v0.3. Use 'util' module instead."]


def test_message_without_replacement():
    assert _messages('require("domain");') == ["'domain' module was deprecated since v4."]


def test_buffer_constructor_call_and_new():
    messages = _messages('const { Buffer } = require("buffer");\nBuffer(1);\nnew Buffer(2);')
    assert len(messages) == 2
    assert messages[0].startswith("'buffer.Buffer()' was deprecated since v6.")
    assert messages[1].startswith("'new buffer.Buffer()' was deprecated since v6.")


def test_global_buffer_and_process_members():
    messages = _messages("new Buffer(1);\nprocess.env.NODE_REPL_HISTORY_FILE;\nGLOBAL.x = 1;")
    assert messages == [
        "'new Buffer()' was deprecated since v6. Use 'Buffer.alloc()' or 'Buffer.from()' "
        "(use 'https://www.npmjs.com/package/safe-buffer' for '<4.5.0') instead.",
        "'process.env.NODE_REPL_HISTORY_FILE' was deprecated since v4. Use 'NODE_REPL_HISTORY' instead.",
        "'GLOBAL' was deprecated since v6. Use 'global' instead.",
    ]


def test_version_independent():
    assert _messages('require("util").isArray([]);') == [
        "'util.isArray' was deprecated since v4. Use 'Array.isArray()' instead."
    ]


def test_imported_module_members():
    source = 'import util from "util";\nimport { isArray } from "util";\nutil.log("x");\nisArray([]);'
    messages = _messages(source, source_type="module")
    assert "'util.log' was deprecated since v6. Use a third party module instead." in messages
    assert "'util.isArray' was deprecated since v4. Use 'Array.isArray()' instead." in messages


def test_imported_whole_module():
    assert _messages('import punycode from "punycode";', source_type="module") == [
        "'punycode' module was deprecated since v7. Use 'https://www.npmjs.com/package/punycode' instead."
    ]


def test_ignore_module_items():
    source = 'var fs = require("fs");\nfs.exists("a");\nvar os = require("os");\nos.tmpDir();'
    assert _messages(source, {"ignoreModuleItems": ["fs.exists"]}) == [
        "'os.tmpDir' was deprecated since v7. Use 'os.tmpdir()' instead."
    ]


def test_ignore_global_items():
    source = "new Buffer(1);\nroot.x;"
    assert _messages(source, {"ignoreGlobalItems": ["new Buffer()", "root"]}) == []


def test_suggestion_and_location_are_reported():
    diagnostic = _lint('var os = require("os");\nvar t = os.tmpDir;')[0]
    assert diagnostic.suggestion == "'os.tmpdir()'"
    assert diagnostic.rule_id == RULE_ID
    assert (diagnostic.line, diagnostic.column) == (2, 8)
    assert diagnostic.format("a.js") == (
        "a.js:2:8: 'os.tmpDir' was deprecated since v7. Use 'os.tmpdir()' instead. (no-deprecated-api)"
    )


def test_shadowed_require_is_ignored():
    assert _messages('function f(require) { return require("sys"); }') == []


def test_unknown_option_is_rejected():
    with pytest.raises(ConfigurationError):
        _messages("var x;", {"ignore": ["fs.exists"]})
