"""Tree traversal over the expression model, iterative and stack-bounded."""

from __future__ import annotations

from typing import TYPE_CHECKING

from lengthlint.syntax.nodes import Logical, Parenthesized, children

if TYPE_CHECKING:
    from collections.abc import Iterator

    from lengthlint.syntax.nodes import Expression, LogicalOperator


def iter_nodes(root: Expression) -> Iterator[Expression]:
    """Yield every node under *root* (inclusive) in pre-order, left to right."""
    stack: list[Expression] = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(children(node)))


def iter_chain_roots(root: Expression) -> Iterator[Logical]:
    """Yield each :class:`Logical` node that starts a chain.

    A logical node is skipped when it is, through any parentheses, an
    operand of a parent logical node with the same operator: its operands
    already appear in the parent's flattened chain.
    """
    # Each entry carries the operator of the enclosing logical node, if the
    # entry is a direct operand of one.
    stack: list[tuple[Expression, LogicalOperator | None]] = [(root, None)]
    while stack:
        node, enclosing = stack.pop()
        if isinstance(node, Logical):
            if node.operator is not enclosing:
                yield node
            stack.append((node.right, node.operator))
            stack.append((node.left, node.operator))
        elif isinstance(node, Parenthesized):
            stack.append((node.expression, enclosing))
        else:
            stack.extend((child, None) for child in reversed(children(node)))
