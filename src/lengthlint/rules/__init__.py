"""Rules domain — rule base class, diagnostics, and the rule registry."""

from __future__ import annotations

from lengthlint.rules.base import (
    VALID_RULE_SETTINGS,
    VALID_SEVERITIES,
    Diagnostic,
    LintContext,
    Rule,
)
from lengthlint.rules.no_useless_length_check import NoUselessLengthCheck

ALL_RULES: tuple[type[Rule], ...] = (NoUselessLengthCheck,)

_RULES_BY_NAME: dict[str, type[Rule]] = {rule.name: rule for rule in ALL_RULES}


def rule_names() -> list[str]:
    """Return the names of all registered rules, sorted."""
    return sorted(_RULES_BY_NAME)


def get_rule(name: str) -> type[Rule]:
    """Look up a registered rule class by name.

    Raises
    ------
    KeyError
        When no rule is registered under *name*.
    """
    return _RULES_BY_NAME[name]


def default_rules() -> list[Rule]:
    """Instantiate every registered rule at its default severity."""
    return [rule() for rule in ALL_RULES]


__all__ = [
    "ALL_RULES",
    "VALID_RULE_SETTINGS",
    "VALID_SEVERITIES",
    "Diagnostic",
    "LintContext",
    "NoUselessLengthCheck",
    "Rule",
    "default_rules",
    "get_rule",
    "rule_names",
]
