"""Expression model: a closed set of frozen node types built from the parse tree."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Spans and operators
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Span:
    """Source range: byte offsets plus the 1-based position of the start."""

    start: int
    end: int
    line: int = 1
    column: int = 1

    def slice(self, source: str | bytes) -> str:
        """Return the text covered by this span in *source*."""
        data = source.encode("utf-8") if isinstance(source, str) else source
        return data[self.start : self.end].decode("utf-8", errors="replace")


class BinaryOperator(enum.Enum):
    """Non-logical binary operators, keyed by their source token."""

    STRICT_EQUALITY = "==="
    STRICT_INEQUALITY = "!=="
    EQUALITY = "=="
    INEQUALITY = "!="
    GREATER_THAN = ">"
    GREATER_EQUAL = ">="
    LESS_THAN = "<"
    LESS_EQUAL = "<="
    ADDITION = "+"
    SUBTRACTION = "-"
    MULTIPLICATION = "*"
    DIVISION = "/"
    REMAINDER = "%"
    EXPONENTIAL = "**"
    SHIFT_LEFT = "<<"
    SHIFT_RIGHT = ">>"
    SHIFT_RIGHT_ZERO_FILL = ">>>"
    BITWISE_OR = "|"
    BITWISE_XOR = "^"
    BITWISE_AND = "&"
    IN = "in"
    INSTANCEOF = "instanceof"


class LogicalOperator(enum.Enum):
    """Short-circuit combining operators."""

    AND = "&&"
    OR = "||"
    COALESCE = "??"


_LOGICAL_TOKENS: dict[str, LogicalOperator] = {op.value: op for op in LogicalOperator}
_BINARY_TOKENS: dict[str, BinaryOperator] = {op.value: op for op in BinaryOperator}


def logical_operator(token: str) -> LogicalOperator | None:
    """Map a source token to a logical operator, or ``None``."""
    return _LOGICAL_TOKENS.get(token)


def binary_operator(token: str) -> BinaryOperator | None:
    """Map a source token to a binary operator, or ``None``."""
    return _BINARY_TOKENS.get(token)


# ---------------------------------------------------------------------------
# Node types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Identifier:
    """A bare identifier reference such as ``array``."""

    name: str
    span: Span


@dataclass(frozen=True)
class Literal:
    """A literal; ``raw`` is the text exactly as written in the source."""

    raw: str
    literal_kind: str  # "number" | "string" | "boolean" | "null" | "regex" | "template"
    span: Span


@dataclass(frozen=True)
class Member:
    """Property access: ``obj.prop``, ``obj?.prop``, ``obj["prop"]`` or ``obj[expr]``.

    ``property`` holds the static property name: the identifier after the
    dot, or the contents of a string-literal index.  It is ``None`` for a
    dynamic index such as ``obj[key]``.
    """

    object: Expression
    property: str | None
    computed: bool
    optional: bool
    span: Span


@dataclass(frozen=True)
class Call:
    """A call ``callee(args)``; ``optional`` is set for ``callee?.(args)``."""

    callee: Expression
    arguments: tuple[Expression, ...]
    optional: bool
    span: Span


@dataclass(frozen=True)
class Binary:
    """A non-logical binary expression such as ``a.length === 0``."""

    operator: BinaryOperator
    left: Expression
    right: Expression
    span: Span


@dataclass(frozen=True)
class Logical:
    """A short-circuit combination: ``a && b``, ``a || b`` or ``a ?? b``."""

    operator: LogicalOperator
    left: Expression
    right: Expression
    span: Span


@dataclass(frozen=True)
class Parenthesized:
    """An expression wrapped in parentheses."""

    expression: Expression
    span: Span


@dataclass(frozen=True)
class TypeWrapper:
    """A TypeScript-only wrapper that does not change the runtime value.

    ``wrapper`` is one of ``"as"``, ``"satisfies"``, ``"!"`` (non-null
    assertion) or ``"<>"`` (angle-bracket type assertion).
    """

    wrapper: str
    expression: Expression
    span: Span


@dataclass(frozen=True)
class Opaque:
    """Any other grammar node; only its children are kept for traversal."""

    kind: str
    span: Span
    children: tuple[Expression, ...] = field(default=())


Expression = (
    Identifier | Literal | Member | Call | Binary | Logical | Parenthesized | TypeWrapper | Opaque
)


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


def without_parenthesized(expr: Expression) -> Expression:
    """Strip any number of enclosing parentheses."""
    while isinstance(expr, Parenthesized):
        expr = expr.expression
    return expr


def inner_expression(expr: Expression) -> Expression:
    """Strip parentheses and TypeScript wrappers (``x!``, ``x as T``, ...)."""
    while isinstance(expr, (Parenthesized, TypeWrapper)):
        expr = expr.expression
    return expr


def children(expr: Expression) -> tuple[Expression, ...]:
    """Return the direct child expressions of *expr* in source order."""
    match expr:
        case Identifier() | Literal():
            return ()
        case Member(object=obj):
            return (obj,)
        case Call(callee=callee, arguments=args):
            return (callee, *args)
        case Binary(left=left, right=right) | Logical(left=left, right=right):
            return (left, right)
        case Parenthesized(expression=inner) | TypeWrapper(expression=inner):
            return (inner,)
        case Opaque(children=kids):
            return kids
    msg = f"unknown expression node: {expr!r}"
    raise TypeError(msg)
