"""Deprecated Node.js module members and globals, keyed by access path."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from tracer import CALL, CONSTRUCT, READ, TraceNode, build_trace_map


@dataclass(frozen=True)
class DeprecationInfo:
    since: str
    replaced_by: Optional[str] = None


def _read(since: str, replaced_by: Optional[str] = None):
    return {READ: DeprecationInfo(since, replaced_by)}


def _call_or_construct(since: str, replaced_by: str):
    info = DeprecationInfo(since, replaced_by)
    return {CALL: info, CONSTRUCT: info}


_UNSAFE_BUFFER = "'buffer.Buffer.alloc()' or 'buffer.Buffer.from()'"
_UNSAFE_GLOBAL_BUFFER = "'Buffer.alloc()' or 'Buffer.from()'"
_SAFE_BUFFER_HINT = " (use 'https://www.npmjs.com/package/safe-buffer' for '<4.5.0')"

_NO_REPLACEMENT_UTIL_CHECKS = (
    "isBoolean", "isDate", "isError", "isFunction", "isNull", "isNullOrUndefined",
    "isNumber", "isObject", "isPrimitive", "isRegExp", "isString", "isSymbol",
    "isUndefined",
)

DEPRECATED_MODULES: TraceNode = build_trace_map(
    {
        "_linklist": _read("5"),
        "async_hooks": {
            "currentId": _read("8.2", "'async_hooks.executionAsyncId()'"),
            "triggerId": _read("8.2", "'async_hooks.triggerAsyncId()'"),
        },
        "buffer": {
            "Buffer": _call_or_construct("6", _UNSAFE_BUFFER + _SAFE_BUFFER_HINT),
            "SlowBuffer": _read("6", "'buffer.Buffer.allocUnsafeSlow()'"),
        },
        "constants": _read("6.3", "'constants' property of each module"),
        "crypto": {
            "Credentials": _read("0.12", "'tls.SecureContext'"),
            "createCredentials": _read("0.12", "'tls.createSecureContext()'"),
        },
        "domain": _read("4"),
        "events": {
            "EventEmitter": {
                "listenerCount": _read("4", "'events.EventEmitter#listenerCount()'"),
            },
            "listenerCount": _read("4", "'events.EventEmitter#listenerCount()'"),
        },
        "freelist": _read("4"),
        "fs": {
            "SyncWriteStream": _read("4"),
            "exists": _read("4", "'fs.stat()' or 'fs.access()'"),
            "lchmod": _read("0.4"),
            "lchmodSync": _read("0.4"),
            "lchown": _read("0.4"),
            "lchownSync": _read("0.4"),
        },
        "http": {
            "createClient": _read("0.10", "'http.request()'"),
        },
        "module": {
            "Module": {
                "requireRepl": _read("6", "'require(\"repl\")'"),
                "_debug": _read("9"),
            },
            "requireRepl": _read("6", "'require(\"repl\")'"),
            "_debug": _read("9"),
        },
        "os": {
            "getNetworkInterfaces": _read("0.6", "'os.networkInterfaces()'"),
            "tmpDir": _read("7", "'os.tmpdir()'"),
        },
        "path": {
            "_makeLong": _read("9", "'path.toNamespacedPath()'"),
        },
        "punycode": _read("7", "'https://www.npmjs.com/package/punycode'"),
        "readline": {
            "codePointAt": _read("4"),
            "getStringWidth": _read("6"),
            "isFullWidthCodePoint": _read("6"),
            "stripVTControlCharacters": _read("6"),
        },
        # safe-buffer re-exports buffer.Buffer.
        "safe-buffer": {
            "Buffer": _call_or_construct("6", _UNSAFE_BUFFER),
            "SlowBuffer": _read("6", "'buffer.Buffer.allocUnsafeSlow()'"),
        },
        "sys": _read("0.3", "'util' module"),
        "tls": {
            "CleartextStream": _read("0.10"),
            "CryptoStream": _read("0.12", "'tls.TLSSocket'"),
            "SecurePair": _read("6", "'tls.TLSSocket'"),
            "createSecurePair": _read("6", "'tls.TLSSocket'"),
            "parseCertString": _read("8.6", "'querystring.parse()'"),
        },
        "tty": {
            "setRawMode": _read("0.10", "'tty.ReadStream#setRawMode()' (e.g. 'process.stdin.setRawMode()')"),
        },
        "util": {
            "debug": _read("0.12", "'console.error()'"),
            "error": _read("0.12", "'console.error()'"),
            "isArray": _read("4", "'Array.isArray()'"),
            "isBuffer": _read("4", "'Buffer.isBuffer()'"),
            **{name: _read("4") for name in _NO_REPLACEMENT_UTIL_CHECKS},
            "log": _read("6", "a third party module"),
            "print": _read("0.12", "'console.log()'"),
            "pump": _read("0.10", "'stream.Readable#pipe()'"),
            "puts": _read("0.12", "'console.log()'"),
            "_extend": _read("6", "'Object.assign()'"),
        },
        "vm": {
            "runInDebugContext": _read("8"),
        },
    }
)

DEPRECATED_GLOBALS: TraceNode = build_trace_map(
    {
        "Buffer": _call_or_construct("6", _UNSAFE_GLOBAL_BUFFER + _SAFE_BUFFER_HINT),
        "GLOBAL": _read("6", "'global'"),
        "Intl": {
            "v8BreakIterator": _read("7"),
        },
        "require": {
            "extensions": _read("0.12", "compiling them ahead of time"),
        },
        "root": _read("6", "'global'"),
        "process": {
            "EventEmitter": _read("0.6", "'require(\"events\")'"),
            "env": {
                "NODE_REPL_HISTORY_FILE": _read("4", "'NODE_REPL_HISTORY'"),
            },
        },
    }
)

__all__ = ["DEPRECATED_GLOBALS", "DEPRECATED_MODULES", "DeprecationInfo"]
