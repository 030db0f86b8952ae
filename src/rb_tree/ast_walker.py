from typing import Callable, Iterable, List, Optional, Union

from .node_types import NodeKind, SourceBuffer
from .nodes import SyntaxNode

KindFilter = Union[NodeKind, Iterable[NodeKind]]


def _kinds(kind: KindFilter) -> frozenset:
    if isinstance(kind, NodeKind):
        return frozenset({kind})
    return frozenset(kind)


class ASTWalker:
    """Utilities for traversing and searching the Ruby syntax tree"""

    @staticmethod
    def walk(node: SyntaxNode, callback: Callable[[SyntaxNode], None]):
        """Depth-first, pre-order traversal in document order.

        Uses an explicit stack so deeply nested sources do not hit the
        recursion limit.
        """
        stack = [node]
        while stack:
            current = stack.pop()
            callback(current)
            stack.extend(reversed(current.child_nodes))

    @staticmethod
    def find_parent_of_type(node: SyntaxNode, kind: KindFilter) -> Optional[SyntaxNode]:
        """Find the closest ancestor of a specific kind"""
        wanted = _kinds(kind)
        for ancestor in node.each_ancestor():
            if ancestor.kind in wanted:
                return ancestor
        return None

    @staticmethod
    def get_child_of_type(node: SyntaxNode, kind: KindFilter) -> Optional[SyntaxNode]:
        """Find the first direct child of a specific kind"""
        wanted = _kinds(kind)
        for child in node.child_nodes:
            if child.kind in wanted:
                return child
        return None

    @staticmethod
    def find_all_by_type(node: SyntaxNode, kind: KindFilter) -> List[SyntaxNode]:
        """Find all nodes of a specific kind, the start node included"""
        wanted = _kinds(kind)
        results = []

        def check(n):
            if n.kind in wanted:
                results.append(n)

        ASTWalker.walk(node, check)
        return results

    @staticmethod
    def get_text(node: SyntaxNode, buffer: SourceBuffer) -> str:
        """Source text covered by a node"""
        return buffer.slice(node.expression)
