"""
Static catalog of checkable ECMAScript features.

Each descriptor records the first Node.js version that supports the feature,
separately for non-strict and strict code. A descriptor declared with a
single threshold applies it to both modes; a threshold of None means the
mode never supports the feature. Keys of runtime features are the dotted
global paths the reference tracer reports (`Object.assign`, `Map`, ...).
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional, Tuple

SYNTAX = "syntax"
RUNTIME = "runtime"


@dataclass(frozen=True)
class FeatureDescriptor:
    key: str
    name: str
    non_strict: Optional[str]
    strict: Optional[str]
    singular: bool = False
    aliases: FrozenSet[str] = frozenset()

    @property
    def names(self) -> FrozenSet[str]:
        """The key and every alias a user may name in `ignores`."""
        return self.aliases | {self.key}


def _feature(
    key: str,
    name: str,
    node: Optional[str] = None,
    *,
    strict: Optional[str] = None,
    sloppy: Optional[str] = None,
    singular: bool = False,
    aliases: Iterable[str] = (SYNTAX,),
) -> FeatureDescriptor:
    if node is not None:
        strict = sloppy = node
    return FeatureDescriptor(
        key=key,
        name=name,
        non_strict=sloppy,
        strict=strict,
        singular=singular,
        aliases=frozenset(aliases),
    )


def _runtime(key: str, node: Optional[str], **kwargs) -> FeatureDescriptor:
    kwargs.setdefault("singular", True)
    return _feature(key, f"'{key}'", node, aliases=(RUNTIME,), **kwargs)


def _subclassing(name: str, strict: str, sloppy: str) -> FeatureDescriptor:
    return _feature(
        f"extends{name}",
        f"subclassing of '{name}'",
        strict=strict,
        sloppy=sloppy,
        singular=True,
        aliases=(RUNTIME,),
    )


_SYNTAX_FEATURES: Tuple[FeatureDescriptor, ...] = (
    # ES2015
    _feature("arrowFunctions", "arrow functions", "4.0.0"),
    _feature("binaryNumberLiterals", "binary number literals", "4.0.0"),
    _feature("blockScopedFunctions", "block-scoped functions", strict="4.0.0", sloppy="6.0.0"),
    _feature("const", "'const' declarations", strict="4.0.0", sloppy="6.0.0"),
    _feature("let", "'let' declarations", strict="4.0.0", sloppy="6.0.0"),
    _feature("classes", "classes", strict="4.0.0", sloppy="6.0.0"),
    _feature("defaultParameters", "default parameters", "6.0.0"),
    _feature("destructuring", "destructuring", "6.0.0", singular=True),
    _feature("extendsNull", "'extends null'", singular=True),
    _feature("forOf", "'for..of' loops", "0.12.0"),
    _feature("generatorFunctions", "generator functions", "6.0.0"),
    _feature("modules", "import and export declarations"),
    _feature("new.target", "'new.target'", "5.0.0", singular=True),
    _feature("objectLiteralExtensions", "object literal extensions", "4.0.0"),
    _feature("objectPropertyShorthandOfGetSet", "property shorthand of 'get' and 'set'", "6.0.0", singular=True),
    _feature("octalNumberLiterals", "octal number literals", "4.0.0"),
    _feature("regexpU", "RegExp 'u' flag", "6.0.0", singular=True),
    _feature("regexpY", "RegExp 'y' flag", "6.0.0", singular=True),
    _feature("restParameters", "rest parameters", "6.0.0"),
    _feature("spreadOperators", "spread operators", "5.0.0"),
    _feature("templateStrings", "template strings", "4.0.0"),
    _feature("unicodeCodePointEscapes", "unicode code point escapes", "4.0.0"),
    # ES2016
    _feature("exponentialOperators", "exponential operators", "7.0.0"),
    # ES2017
    _feature("asyncAwait", "async functions", "7.6.0"),
    _feature("trailingCommasInFunctions", "trailing commas in functions", "8.0.0"),
    # ES2018
    _feature("templateLiteralRevision", "illegal escape sequences in template literals", "8.10.0"),
    _feature("regexpLookbehind", "RegExp lookbehind assertions", "8.10.0"),
    _feature("regexpNamedCaptureGroups", "RegExp named capture groups", "10.0.0"),
    _feature("regexpS", "RegExp 's' flag", "8.10.0", singular=True),
    _feature("regexpUnicodeProperties", "RegExp Unicode property escapes", "10.0.0"),
    _feature("restProperties", "rest properties", "8.3.0"),
    _feature("spreadProperties", "spread properties", "8.3.0"),
    _feature("asyncGenerators", "async generators", "10.0.0"),
    _feature("forAwaitOf", "'for-await-of' loops", "10.0.0"),
)

_MATH_METHODS = (
    "clz32", "imul", "sign", "log10", "log2", "log1p", "expm1", "cosh", "sinh",
    "tanh", "acosh", "asinh", "atanh", "trunc", "fround", "cbrt", "hypot",
)
_TYPED_ARRAYS = (
    "Int8Array", "Uint8Array", "Uint8ClampedArray", "Int16Array", "Uint16Array",
    "Int32Array", "Uint32Array", "Float32Array", "Float64Array", "DataView",
)

_RUNTIME_FEATURES: Tuple[FeatureDescriptor, ...] = (
    _runtime("Object.assign", "4.0.0"),
    _runtime("Object.is", "0.12.0"),
    _runtime("Object.getOwnPropertySymbols", "0.12.0"),
    _runtime("Object.setPrototypeOf", "0.12.0"),
    _runtime("Object.values", "7.0.0"),
    _runtime("Object.entries", "7.0.0"),
    _runtime("Object.getOwnPropertyDescriptors", "7.0.0"),
    _runtime("String.raw", "4.0.0"),
    _runtime("String.fromCodePoint", "4.0.0"),
    _runtime("Array.from", "4.0.0"),
    _runtime("Array.of", "4.0.0"),
    _runtime("Number.isFinite", "0.10.0"),
    _runtime("Number.isInteger", "0.12.0"),
    _runtime("Number.isSafeInteger", "0.12.0"),
    _runtime("Number.isNaN", "0.10.0"),
    _runtime("Number.EPSILON", "0.12.0"),
    _runtime("Number.MIN_SAFE_INTEGER", "0.12.0"),
    _runtime("Number.MAX_SAFE_INTEGER", "0.12.0"),
    *(_runtime(f"Math.{method}", "0.12.0") for method in _MATH_METHODS),
    *(_runtime(name, "0.10.0") for name in _TYPED_ARRAYS),
    _runtime("Map", "0.12.0"),
    _runtime("Set", "0.12.0"),
    _runtime("WeakMap", "0.12.0"),
    _runtime("WeakSet", "0.12.0"),
    _runtime("Proxy", "6.0.0"),
    _runtime("Reflect", "6.0.0"),
    _runtime("Promise", "0.12.0"),
    _runtime("Symbol", "0.12.0"),
    _runtime("Symbol.hasInstance", "6.5.0"),
    _runtime("Symbol.isConcatSpreadable", "6.0.0"),
    _runtime("Symbol.iterator", "0.12.0"),
    _runtime("Symbol.species", "6.5.0"),
    _runtime("Symbol.replace", "6.0.0"),
    _runtime("Symbol.search", "6.0.0"),
    _runtime("Symbol.split", "6.0.0"),
    _runtime("Symbol.match", "6.0.0"),
    _runtime("Symbol.toPrimitive", "6.0.0"),
    _runtime("Symbol.toStringTag", "6.0.0"),
    _runtime("Symbol.unscopables", "0.12.0"),
    _runtime("SharedArrayBuffer", "8.10.0"),
    _runtime("Atomics", "8.10.0"),
    _subclassing("Array", strict="5.0.0", sloppy="6.0.0"),
    _subclassing("RegExp", strict="5.0.0", sloppy="6.0.0"),
    _subclassing("Function", strict="6.0.0", sloppy="6.0.0"),
    _subclassing("Promise", strict="5.0.0", sloppy="6.0.0"),
    _subclassing("Boolean", strict="4.0.0", sloppy="6.0.0"),
    _subclassing("Number", strict="4.0.0", sloppy="6.0.0"),
    _subclassing("String", strict="4.0.0", sloppy="6.0.0"),
    _subclassing("Map", strict="4.0.0", sloppy="6.0.0"),
    _subclassing("Set", strict="4.0.0", sloppy="6.0.0"),
)

CATALOG: Mapping[str, FeatureDescriptor] = MappingProxyType(
    {feature.key: feature for feature in _SYNTAX_FEATURES + _RUNTIME_FEATURES}
)

SUBCLASSING_TARGETS: FrozenSet[str] = frozenset(
    key[len("extends"):] for key in CATALOG if key.startswith("extends") and key != "extendsNull"
)


def ignore_keys(catalog: Mapping[str, FeatureDescriptor] = CATALOG) -> FrozenSet[str]:
    """Every key and alias accepted by the `ignores` option."""
    names = set()
    for feature in catalog.values():
        names |= feature.names
    return frozenset(names)


__all__ = [
    "CATALOG",
    "FeatureDescriptor",
    "RUNTIME",
    "SUBCLASSING_TARGETS",
    "SYNTAX",
    "ignore_keys",
]
