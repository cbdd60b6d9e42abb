"""no-useless-length-check: a length check made redundant by ``some()``/``every()``.

Flags the two shapes where the length comparison is already implied by the
quantifier's result on an empty array::

    array.length === 0 || array.every(Boolean)   // every() is true when empty
    array.length > 0 && array.some(Boolean)      // some() is false when empty

The check is purely syntactic: operands are matched by shape and by the
identifier text of the array, within a single ``&&`` / ``||`` chain.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

from lengthlint.rules.base import Diagnostic, Rule
from lengthlint.syntax.nodes import (
    Binary,
    BinaryOperator,
    Call,
    Identifier,
    Literal,
    Logical,
    LogicalOperator,
    Member,
    inner_expression,
    without_parenthesized,
)

if TYPE_CHECKING:
    from lengthlint.rules.base import LintContext
    from lengthlint.syntax.nodes import Expression, Span

RULE_NAME = "no-useless-length-check"

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------


class CheckKind(enum.Enum):
    """Which redundant check fired."""

    SOME = "Some"
    EVERY = "Every"


_SUMMARIES: dict[CheckKind, str] = {
    CheckKind.SOME: "Redundant non-empty check",
    CheckKind.EVERY: "Redundant empty check",
}

_HELP: dict[CheckKind, str] = {
    CheckKind.SOME: (
        "The non-empty check is useless as `Array#some()` returns `false` for an empty array."
    ),
    CheckKind.EVERY: (
        "The empty check is useless as `Array#every()` returns `true` for an empty array."
    ),
}

RECOGNIZED_COMPARATORS: frozenset[BinaryOperator] = frozenset(
    {
        BinaryOperator.STRICT_EQUALITY,
        BinaryOperator.STRICT_INEQUALITY,
        BinaryOperator.EQUALITY,
        BinaryOperator.INEQUALITY,
        BinaryOperator.GREATER_THAN,
        BinaryOperator.GREATER_EQUAL,
        BinaryOperator.LESS_THAN,
    }
)

QUANTIFIER_METHODS: frozenset[str] = frozenset({"some", "every"})

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ComparisonCondition:
    """``<subject>.length <comparator> 0``."""

    subject: str
    comparator: BinaryOperator
    literal: str
    span: Span


@dataclass(frozen=True)
class QuantifierCall:
    """``<subject>.some(...)`` or ``<subject>.every(...)``; the predicate is not inspected."""

    subject: str
    method: str  # "some" | "every"
    optional: bool  # invoked as ``subject.method?.(...)``
    span: Span


@dataclass(frozen=True)
class CombinationRule:
    """Which quantifier and comparators make a length check redundant under one operator."""

    operator: LogicalOperator
    method: str
    comparators: frozenset[BinaryOperator]
    kind: CheckKind


COMBINATION_RULES: dict[LogicalOperator, CombinationRule] = {
    LogicalOperator.OR: CombinationRule(
        operator=LogicalOperator.OR,
        method="every",
        comparators=frozenset({BinaryOperator.STRICT_EQUALITY}),
        kind=CheckKind.EVERY,
    ),
    LogicalOperator.AND: CombinationRule(
        operator=LogicalOperator.AND,
        method="some",
        comparators=frozenset({BinaryOperator.STRICT_INEQUALITY, BinaryOperator.GREATER_THAN}),
        kind=CheckKind.SOME,
    ),
}


@dataclass(frozen=True)
class RedundantLengthCheck:
    """A matched pair.

    Only the comparison is stored, so the reported span is always the
    comparison's: that is the part the author can delete.
    """

    kind: CheckKind
    comparison: ComparisonCondition

    @property
    def span(self) -> Span:
        return self.comparison.span

    def to_diagnostic(self, severity: str = "warn") -> Diagnostic:
        return Diagnostic(
            rule_name=RULE_NAME,
            kind=self.kind.value,
            severity=severity,
            message=_SUMMARIES[self.kind],
            help=_HELP[self.kind],
            span=self.span,
        )


# ---------------------------------------------------------------------------
# Chain flattening
# ---------------------------------------------------------------------------


def flatten(node: Logical, operator: LogicalOperator | None = None) -> list[Expression]:
    """Unroll nested ``operator`` combinations under *node* into their operands.

    Sides are looked at through parentheses; a side is descended into only
    when it is a logical expression with the same operator.  Any other side,
    including a logical expression with a different operator, is one operand.
    Operands keep left-to-right source order.
    """
    if operator is None:
        operator = node.operator

    operands: list[Expression] = []
    stack: list[Expression] = [node.right, node.left]
    while stack:
        side = stack.pop()
        inner = without_parenthesized(side)
        if isinstance(inner, Logical) and inner.operator is operator:
            stack.append(inner.right)
            stack.append(inner.left)
        else:
            operands.append(side)
    return operands


# ---------------------------------------------------------------------------
# Operand classification
# ---------------------------------------------------------------------------


def classify_as_comparison(operand: Expression) -> ComparisonCondition | None:
    """Return the length comparison *operand* performs, or ``None``.

    The right-hand side must be a literal written exactly as ``0``; ``"0"``,
    ``0.`` and ``0x0`` do not count.
    Parentheses and TypeScript assertions around the array are looked through.
    """
    expr = without_parenthesized(operand)
    if not isinstance(expr, Binary) or expr.operator not in RECOGNIZED_COMPARATORS:
        return None

    left = inner_expression(expr.left)
    if not isinstance(left, Member) or left.optional or left.property != "length":
        return None
    subject = inner_expression(left.object)
    if not isinstance(subject, Identifier):
        return None

    right = expr.right
    if not isinstance(right, Literal) or right.raw != "0":
        return None

    return ComparisonCondition(
        subject=subject.name,
        comparator=expr.operator,
        literal=right.raw,
        span=expr.span,
    )


def classify_as_quantifier(operand: Expression) -> QuantifierCall | None:
    """Return the ``some``/``every`` call *operand* makes, or ``None``.

    ``subject?.every(...)`` and ``subject[every](...)`` are not quantifier
    calls.  ``subject.every?.(...)`` is, with ``optional`` set.
    """
    expr = without_parenthesized(operand)
    if not isinstance(expr, Call):
        return None

    callee = without_parenthesized(expr.callee)
    if not isinstance(callee, Member) or callee.computed or callee.optional:
        return None
    if callee.property is None or callee.property not in QUANTIFIER_METHODS:
        return None
    subject = inner_expression(callee.object)
    if not isinstance(subject, Identifier):
        return None

    return QuantifierCall(
        subject=subject.name,
        method=callee.property,
        optional=expr.optional,
        span=expr.span,
    )


def _classify_pair(
    left: Expression, right: Expression
) -> tuple[ComparisonCondition, QuantifierCall] | None:
    comparison = classify_as_comparison(left)
    if comparison is not None:
        call = classify_as_quantifier(right)
        return (comparison, call) if call is not None else None

    call = classify_as_quantifier(left)
    if call is not None:
        comparison = classify_as_comparison(right)
        return (comparison, call) if comparison is not None else None

    return None


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


def match_pair(
    left: Expression, right: Expression, operator: LogicalOperator
) -> RedundantLengthCheck | None:
    """Match two adjacent chain operands against the combination table.

    One operand must be the length comparison and the other the quantifier
    call, in either order, on the same identifier.
    """
    rule = COMBINATION_RULES.get(operator)
    if rule is None:
        return None

    pair = _classify_pair(left, right)
    if pair is None:
        return None
    comparison, call = pair

    if comparison.comparator not in rule.comparators:
        return None
    if call.method != rule.method or call.optional:
        return None
    if comparison.subject != call.subject:
        return None

    return RedundantLengthCheck(kind=rule.kind, comparison=comparison)


def find_useless_length_checks(node: Logical) -> list[RedundantLengthCheck]:
    """Check every adjacent operand pair of the chain rooted at *node*.

    Pairs are independent: a comparison sitting between two matching calls
    is reported once per pair.
    """
    if node.operator not in COMBINATION_RULES:
        return []

    operands = flatten(node)
    found: list[RedundantLengthCheck] = []
    for left, right in zip(operands, operands[1:]):
        check = match_pair(left, right, node.operator)
        if check is not None:
            found.append(check)
    return found


# ---------------------------------------------------------------------------
# Rule
# ---------------------------------------------------------------------------


class NoUselessLengthCheck(Rule):
    """Disallow length checks that ``Array#some()``/``Array#every()`` already imply."""

    name = RULE_NAME
    category = "correctness"
    description = (
        "Flags `array.length === 0 || array.every(...)` and "
        "`array.length > 0 && array.some(...)`: the length check is redundant."
    )

    def run(self, node: Expression, ctx: LintContext) -> None:
        if not isinstance(node, Logical):
            return
        for check in find_useless_length_checks(node):
            ctx.diagnostic(check.to_diagnostic(self.severity))
