"""Immutable Ruby syntax tree nodes.

A node owns its children. The parent back-reference is assigned once, when
the parent node is constructed, and is only used for upward queries.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any, Union

from .exceptions import MalformedTreeError
from .node_types import ARGUMENT_KINDS, BLOCK_KINDS, SEND_KINDS, NodeKind, SourceBuffer, SourceRange

Child = Union["SyntaxNode", str, int, None]

# (minimum, maximum) child counts; None means unbounded
_ARITY: dict[NodeKind, tuple[int, int | None]] = {
    NodeKind.BEGIN: (0, None),
    NodeKind.SEND: (2, None),
    NodeKind.CSEND: (2, None),
    NodeKind.BLOCK: (3, 3),
    NodeKind.NUMBLOCK: (3, 3),
    NodeKind.ARGS: (0, None),
    NodeKind.MLHS: (0, None),
    NodeKind.LVAR: (1, 1),
    NodeKind.IVAR: (1, 1),
    NodeKind.ARRAY: (0, None),
    NodeKind.HASH: (0, None),
    NodeKind.INT: (1, 1),
    NodeKind.FLOAT: (1, 1),
    NodeKind.STR: (1, 1),
    NodeKind.SYM: (1, 1),
    NodeKind.CONST: (2, 2),
    NodeKind.NIL: (0, 0),
    NodeKind.TRUE: (0, 0),
    NodeKind.FALSE: (0, 0),
    NodeKind.SELF: (0, 0),
    NodeKind.OPAQUE: (1, None),
}
for _kind in ARGUMENT_KINDS:
    _ARITY[_kind] = (1, 1)

_NAMED_KINDS = ARGUMENT_KINDS | {NodeKind.LVAR, NodeKind.IVAR}


class SyntaxNode:
    """One construct of a parsed Ruby program."""

    __slots__ = ("_kind", "_children", "_expression", "_loc", "_parent")

    def __init__(
        self,
        kind: NodeKind,
        children: tuple[Child, ...] | list[Child] = (),
        expression: SourceRange | None = None,
        loc: Mapping[str, SourceRange] | None = None,
    ):
        if expression is None:
            raise MalformedTreeError(f"{kind.value} node has no source range")
        self._kind = kind
        self._children = tuple(children)
        self._expression = expression
        self._loc = MappingProxyType(dict(loc or {}))
        self._parent: SyntaxNode | None = None
        _validate(self)
        for child in self._children:
            if isinstance(child, SyntaxNode):
                if child._parent is not None:
                    raise MalformedTreeError(f"{child!r} already belongs to {child._parent!r}")
                child._parent = self

    def __setattr__(self, name: str, value: Any) -> None:
        if name in SyntaxNode.__slots__ and not hasattr(self, name):
            object.__setattr__(self, name, value)
        elif name == "_parent" and self._parent is None:
            object.__setattr__(self, name, value)
        else:
            raise AttributeError(f"SyntaxNode is immutable, cannot set {name!r}")

    def __repr__(self) -> str:
        return f"SyntaxNode({self._kind.value}, {self._expression.start}..{self._expression.end})"

    # Basic navigation

    @property
    def kind(self) -> NodeKind:
        return self._kind

    @property
    def type(self) -> str:
        return self._kind.value

    @property
    def children(self) -> tuple[Child, ...]:
        return self._children

    @property
    def child_nodes(self) -> tuple[SyntaxNode, ...]:
        return tuple(c for c in self._children if isinstance(c, SyntaxNode))

    @property
    def parent(self) -> SyntaxNode | None:
        return self._parent

    @property
    def expression(self) -> SourceRange:
        return self._expression

    @property
    def loc(self) -> Mapping[str, SourceRange]:
        return self._loc

    @property
    def selector(self) -> SourceRange | None:
        """Range of the method-name token of a call."""
        return self._loc.get("selector")

    def each_ancestor(self) -> Iterator[SyntaxNode]:
        current = self._parent
        while current is not None:
            yield current
            current = current._parent

    def each_descendant(self) -> Iterator[SyntaxNode]:
        """Descendants in document order, excluding the node itself."""
        stack = list(reversed(self.child_nodes))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.child_nodes))

    def source(self, buffer: SourceBuffer) -> str:
        return buffer.slice(self._expression)

    def same_structure(self, other: Any) -> bool:
        """Structural equality: same kind and equal children, ranges ignored."""
        if not isinstance(other, SyntaxNode) or other._kind is not self._kind:
            return False
        if len(other._children) != len(self._children):
            return False
        for mine, theirs in zip(self._children, other._children):
            if isinstance(mine, SyntaxNode):
                if not mine.same_structure(theirs):
                    return False
            elif isinstance(theirs, SyntaxNode) or mine != theirs:
                return False
        return True

    # Typed accessors

    @property
    def is_send(self) -> bool:
        return self._kind in SEND_KINDS

    @property
    def is_block(self) -> bool:
        return self._kind in BLOCK_KINDS

    @property
    def receiver(self) -> SyntaxNode | None:
        self._expect(SEND_KINDS)
        return self._children[0]

    @property
    def method_name(self) -> str:
        self._expect(SEND_KINDS)
        return self._children[1]

    @property
    def arguments(self) -> tuple[Child, ...] | SyntaxNode:
        """Call arguments for a send, the parameter list for a block."""
        if self._kind in SEND_KINDS:
            return self._children[2:]
        self._expect(BLOCK_KINDS)
        return self._children[1]

    @property
    def send_node(self) -> SyntaxNode:
        self._expect(BLOCK_KINDS)
        return self._children[0]

    @property
    def body(self) -> SyntaxNode | None:
        self._expect(BLOCK_KINDS)
        return self._children[2]

    @property
    def arity(self) -> int:
        if self._kind is NodeKind.NUMBLOCK:
            return self._children[1]
        self._expect({NodeKind.BLOCK})
        return len(self._children[1].children)

    @property
    def name(self) -> str:
        self._expect(_NAMED_KINDS)
        return self._children[0]

    def _expect(self, kinds) -> None:
        if self._kind not in kinds:
            expected = ", ".join(sorted(k.value for k in kinds))
            raise TypeError(f"{self._kind.value} node is not one of: {expected}")


def _validate(node: SyntaxNode) -> None:
    """Check the child shape of a freshly built node."""
    kind = node.kind
    children = node.children
    low, high = _ARITY[kind]
    if len(children) < low or (high is not None and len(children) > high):
        raise MalformedTreeError(f"{kind.value} node has {len(children)} children")

    if kind in SEND_KINDS:
        receiver, method = children[0], children[1]
        if receiver is not None and not isinstance(receiver, SyntaxNode):
            raise MalformedTreeError(f"{kind.value} receiver must be a node or None")
        if not isinstance(method, str):
            raise MalformedTreeError(f"{kind.value} method name must be a string")
        _require_nodes(kind, children[2:])
    elif kind in BLOCK_KINDS:
        call, params, body = children
        if not isinstance(call, SyntaxNode) or call.kind not in SEND_KINDS:
            raise MalformedTreeError(f"{kind.value} must start with a send node")
        if kind is NodeKind.BLOCK:
            if not isinstance(params, SyntaxNode) or params.kind is not NodeKind.ARGS:
                raise MalformedTreeError("block parameters must be an args node")
        elif not isinstance(params, int) or isinstance(params, bool) or not 1 <= params <= 9:
            raise MalformedTreeError("numblock arity must be an integer between 1 and 9")
        if body is not None and not isinstance(body, SyntaxNode):
            raise MalformedTreeError(f"{kind.value} body must be a node or None")
    elif kind is NodeKind.ARGS:
        for child in children:
            if not isinstance(child, SyntaxNode) or (
                child.kind not in ARGUMENT_KINDS and child.kind is not NodeKind.MLHS
            ):
                raise MalformedTreeError("args children must be argument nodes")
    elif kind in _NAMED_KINDS or kind in {NodeKind.INT, NodeKind.FLOAT, NodeKind.STR, NodeKind.SYM}:
        if not isinstance(children[0], str):
            raise MalformedTreeError(f"{kind.value} value must be a string")
    elif kind is NodeKind.CONST:
        if children[0] is not None and not isinstance(children[0], SyntaxNode):
            raise MalformedTreeError("const scope must be a node or None")
        if not isinstance(children[1], str):
            raise MalformedTreeError("const name must be a string")
    elif kind is NodeKind.OPAQUE:
        if not isinstance(children[0], str):
            raise MalformedTreeError("opaque node must start with its grammar type")
        _require_nodes(kind, children[1:])
    else:
        _require_nodes(kind, children)


def _require_nodes(kind: NodeKind, children) -> None:
    for child in children:
        if not isinstance(child, SyntaxNode):
            raise MalformedTreeError(f"{kind.value} children must be nodes, got {child!r}")
