"""
Command-line interface for checking JavaScript files against a Node.js target.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from features import (
    CATALOG,
    VERSION_MAP,
    ConfigurationError,
    build_support_table,
    parse_feature_options,
    resolve_version_config,
)
from linter import RULES, LintError, lint_file
from linter.rules import no_unsupported_features

logger = logging.getLogger(__name__)


def _format_location(line: int | None, column: int | None) -> str:
    if line is None:
        return ""
    if column is None:
        return f":{line}"
    return f":{line}:{column}"


def _print_diagnostics(messages: List[str]) -> None:
    if not messages:
        return
    for message in messages:
        sys.stdout.write(message + "\n")


def _coerce_target(value: str) -> float | str:
    """Map numeric shorthands such as `6` or `8.3` onto VERSION_MAP keys."""
    try:
        number = float(value)
    except ValueError:
        return value
    return number if number in VERSION_MAP else value


def _load_config(path: str | None) -> Dict[str, Any]:
    if not path:
        return {}
    config_path = Path(path)
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Failed to read {config_path}: {exc}") from exc
    except ValueError as exc:
        raise ConfigurationError(f"Invalid JSON in {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path} must contain a JSON object of rule options.")
    unknown = [rule_id for rule_id in data if rule_id not in RULES]
    if unknown:
        raise ConfigurationError(f"Unknown rules in {config_path}: {', '.join(unknown)}")
    return data


def _rule_options(args: argparse.Namespace) -> Dict[str, Any]:
    """Combine config file options with command-line overrides."""
    config = _load_config(args.config)
    selected = args.rule or list(RULES)
    options: Dict[str, Any] = {}
    for rule_id in selected:
        if rule_id not in RULES:
            raise ConfigurationError(f"Unknown rule '{rule_id}'.")
        options[rule_id] = config.get(rule_id)

    feature_rule = no_unsupported_features.RULE_ID
    if feature_rule in options and (args.target is not None or args.ignore):
        raw = options[feature_rule]
        if isinstance(raw, dict):
            merged = dict(raw)
        elif raw is None:
            merged = {}
        else:
            merged = {"version": raw}
        if args.target is not None:
            merged["version"] = _coerce_target(args.target)
        if args.ignore:
            merged["ignores"] = list(dict.fromkeys([*merged.get("ignores", []), *args.ignore]))
        options[feature_rule] = merged
    return options


def check_command(args: argparse.Namespace) -> int:
    try:
        options = _rule_options(args)
    except ConfigurationError as exc:
        sys.stderr.write(f"ERROR: {exc}\n")
        return 2
    logger.debug("Rule options: %r", options)

    source_type = "module" if getattr(args, "module", False) else "script"
    has_problems = False
    for raw_path in args.inputs:
        input_path = Path(raw_path)
        if not input_path.exists():
            sys.stderr.write(f"ERROR: Input file not found: {input_path.resolve()}\n")
            has_problems = True
            continue

        try:
            result = lint_file(
                input_path,
                source_type=source_type,
                rules=options,
                tolerant=not args.strict,
            )
        except ConfigurationError as exc:
            sys.stderr.write(f"ERROR: {exc}\n")
            return 2
        except LintError as exc:
            sys.stderr.write(f"ERROR: {exc}\n")
            for error in exc.errors:
                loc = _format_location(error.line, error.column)
                sys.stderr.write(f"  {error.description}{loc}\n")
            has_problems = True
            continue
        except (OSError, UnicodeDecodeError) as exc:
            sys.stderr.write(f"ERROR: Failed to read {input_path}: {exc}\n")
            has_problems = True
            continue

        for error in result.parse_errors:
            loc = _format_location(error.line, error.column)
            sys.stderr.write(f"ERROR {result.source_name}{loc}: {error.description}\n")

        _print_diagnostics([f"WARNING {d.format(result.source_name)}" for d in result.diagnostics])
        if result.diagnostics or (args.strict and result.parse_errors):
            has_problems = True

    return 1 if has_problems else 0


def features_command(args: argparse.Namespace) -> int:
    try:
        options = parse_feature_options(_coerce_target(args.target) if args.target is not None else None)
    except ConfigurationError as exc:
        sys.stderr.write(f"ERROR: {exc}\n")
        return 2

    support = build_support_table(resolve_version_config(options))
    sys.stdout.write(f"Target: {support.version}\n")
    width = max(len(key) for key in CATALOG)
    for key in sorted(CATALOG):
        feature = support[key]
        if feature.supported:
            status = "supported"
        elif feature.supported_in_strict:
            status = "strict mode only"
        else:
            status = "unsupported"
        sys.stdout.write(f"{key.ljust(width)}  {status}\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nodecompat",
        description="Check JavaScript sources for features a Node.js version lacks and for deprecated APIs",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command")

    check_parser = subparsers.add_parser("check", parents=[common], help="Lint JavaScript files")
    check_parser.add_argument("inputs", nargs="+", help="Paths to JavaScript files")
    check_parser.add_argument(
        "--target",
        help="Target Node.js version: a shorthand such as 6 or 8.3, or a literal 'x.y.z'. "
        "Defaults to engines.node from the nearest package.json, then 6.0.0.",
    )
    check_parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="KEY",
        help="Feature key or alias ('syntax', 'runtime') to skip; repeatable.",
    )
    check_parser.add_argument("--config", help="JSON file mapping rule ids to their options.")
    check_parser.add_argument(
        "--rule",
        action="append",
        choices=sorted(RULES),
        help="Only run the given rule; repeatable. All rules run by default.",
    )
    check_parser.add_argument(
        "--module",
        action="store_true",
        help="Parse the input as an ES module (enables import/export syntax).",
    )
    check_parser.add_argument(
        "--strict",
        action="store_true",
        help="Disable tolerant parsing and treat parse errors as failures.",
    )
    check_parser.set_defaults(func=check_command)

    features_parser = subparsers.add_parser("features", parents=[common], help="Show feature support for a target version")
    features_parser.add_argument("--target", help="Target Node.js version (default 6.0.0).")
    features_parser.set_defaults(func=features_command)

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if getattr(args, "verbose", False):
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    if not hasattr(args, "func"):
        parser.print_help()
        return 1
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
