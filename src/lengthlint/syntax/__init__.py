"""Syntax domain — expression model, tree-sitter parser, traversal."""

from lengthlint.syntax.nodes import (
    Binary,
    BinaryOperator,
    Call,
    Expression,
    Identifier,
    Literal,
    Logical,
    LogicalOperator,
    Member,
    Opaque,
    Parenthesized,
    Span,
    TypeWrapper,
    inner_expression,
    without_parenthesized,
)
from lengthlint.syntax.parser import (
    LangConfig,
    ParsedSource,
    clear_cache,
    get_lang_config,
    parse_source,
    supported_extensions,
)
from lengthlint.syntax.walker import iter_chain_roots, iter_nodes

__all__ = [
    "Binary",
    "BinaryOperator",
    "Call",
    "Expression",
    "Identifier",
    "LangConfig",
    "Literal",
    "Logical",
    "LogicalOperator",
    "Member",
    "Opaque",
    "ParsedSource",
    "Parenthesized",
    "Span",
    "TypeWrapper",
    "clear_cache",
    "get_lang_config",
    "inner_expression",
    "iter_chain_roots",
    "iter_nodes",
    "parse_source",
    "supported_extensions",
    "without_parenthesized",
]
