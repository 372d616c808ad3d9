"""Registry of the lint rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping

from ..context import RuleContext
from ..visitor import Visitor
from . import no_deprecated_api, no_unsupported_features


@dataclass(frozen=True)
class Rule:
    rule_id: str
    description: str
    parse_options: Callable[[Any], Any]
    create: Callable[[RuleContext], Visitor]


def _rule(module) -> Rule:
    return Rule(
        rule_id=module.RULE_ID,
        description=module.DESCRIPTION,
        parse_options=module.parse_options,
        create=module.create,
    )


RULES: Mapping[str, Rule] = {
    rule.rule_id: rule
    for rule in (_rule(no_unsupported_features), _rule(no_deprecated_api))
}


def get_rule(rule_id: str) -> Rule:
    try:
        return RULES[rule_id]
    except KeyError:
        raise KeyError(f"Unknown rule: {rule_id!r}") from None


__all__ = ["RULES", "Rule", "get_rule"]
