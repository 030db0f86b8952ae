"""Ruby syntax tree model, traversal helpers, shape patterns and parser adapter."""

from .ast_walker import ASTWalker
from .exceptions import MalformedTreeError, PatternSyntaxError
from .node_types import NodeKind, NodeMatch, ParseResult, SourceBuffer, SourceRange
from .nodes import SyntaxNode
from .parser import RubyParser
from .patterns import NodeMatcher, compile_pattern

__all__ = [
    "ASTWalker",
    "MalformedTreeError",
    "PatternSyntaxError",
    "NodeKind",
    "NodeMatch",
    "ParseResult",
    "SourceBuffer",
    "SourceRange",
    "SyntaxNode",
    "RubyParser",
    "NodeMatcher",
    "compile_pattern",
]
