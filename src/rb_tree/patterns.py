"""Declarative shape patterns over the Ruby syntax tree.

A pattern is an immutable tree of variants interpreted by a single recursive
evaluator. Patterns are usually written as s-expression text and compiled
once, for example::

    (block (send _ :map) (args (arg _id)) (array (lvar _id)))

Syntax:

- ``(kind child...)``  node of ``kind`` whose children match in order
- ``_``                anything
- ``_name``            anything, bound to ``name``; every later ``_name``
                       must be equal to the first binding
- ``:sym``             the string ``"sym"`` (method names, variable names)
- ``42``               the integer ``42``
- ``nil``              an absent child (``None``)
- ``{a b ...}``        any one of the alternatives
- ``...``              any number of remaining children (last position only)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from .exceptions import PatternSyntaxError
from .node_types import NodeKind, NodeMatch
from .nodes import SyntaxNode


@dataclass(frozen=True)
class Wildcard:
    pass


@dataclass(frozen=True)
class Rest:
    pass


@dataclass(frozen=True)
class Capture:
    name: str


@dataclass(frozen=True)
class Literal:
    value: Union[str, int, None]


@dataclass(frozen=True)
class AnyOf:
    alternatives: Tuple["Pattern", ...]


@dataclass(frozen=True)
class KindPattern:
    kind: NodeKind
    children: Tuple["Pattern", ...] = ()

    def __post_init__(self):
        for i, child in enumerate(self.children):
            if isinstance(child, Rest) and i != len(self.children) - 1:
                raise ValueError("'...' is only allowed as the last child pattern")

    @property
    def has_rest(self) -> bool:
        return bool(self.children) and isinstance(self.children[-1], Rest)


Pattern = Union[Wildcard, Rest, Capture, Literal, AnyOf, KindPattern]


# Evaluation


def match_pattern(pattern: Pattern, value: Any, bindings: Dict[str, Any]) -> bool:
    """Test ``value`` against ``pattern``, recording captures in ``bindings``.

    ``bindings`` may hold partial captures after a failed match; callers
    discard it in that case.
    """
    if isinstance(pattern, Wildcard):
        return True

    if isinstance(pattern, Capture):
        if pattern.name not in bindings:
            bindings[pattern.name] = value
            return True
        return _values_equal(bindings[pattern.name], value)

    if isinstance(pattern, Literal):
        if isinstance(value, SyntaxNode):
            return False
        return type(value) is type(pattern.value) and value == pattern.value

    if isinstance(pattern, AnyOf):
        for alternative in pattern.alternatives:
            trial = dict(bindings)
            if match_pattern(alternative, value, trial):
                bindings.update(trial)
                return True
        return False

    if isinstance(pattern, KindPattern):
        if not isinstance(value, SyntaxNode) or value.kind is not pattern.kind:
            return False
        children = value.children
        expected = pattern.children[:-1] if pattern.has_rest else pattern.children
        if pattern.has_rest:
            if len(children) < len(expected):
                return False
        elif len(children) != len(expected):
            return False
        for sub_pattern, child in zip(expected, children):
            if not match_pattern(sub_pattern, child, bindings):
                return False
        return True

    raise TypeError(f"Unsupported pattern: {pattern!r}")


def _values_equal(left: Any, right: Any) -> bool:
    if isinstance(left, SyntaxNode):
        return left.same_structure(right)
    if isinstance(right, SyntaxNode):
        return False
    return left == right


class NodeMatcher:
    """A compiled pattern, reusable across nodes and files."""

    def __init__(self, pattern: Union[str, Pattern], name: str = ""):
        self.pattern = compile_pattern(pattern) if isinstance(pattern, str) else pattern
        self.name = name

    def __repr__(self) -> str:
        return f"NodeMatcher({self.name or self.pattern!r})"

    def match(self, node: Optional[SyntaxNode]) -> Optional[NodeMatch]:
        if node is None:
            return None
        bindings: Dict[str, Any] = {}
        if not match_pattern(self.pattern, node, bindings):
            return None
        return NodeMatch(node=node, captures=bindings)

    def matches(self, node: Optional[SyntaxNode]) -> bool:
        return self.match(node) is not None

    __call__ = matches


# Compilation

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+|\#[^\n]*)
  | (?P<rest>\.\.\.)
  | (?P<punct>[(){}])
  | (?P<symbol>:[A-Za-z_][A-Za-z0-9_]*[?!=]?|:(?:\[\]=?|<=>|==|<=|>=|<<|>>|[+\-*/%<>!]))
  | (?P<int>-?\d+)
  | (?P<word>[A-Za-z_][A-Za-z0-9_]*)
    """,
    re.VERBOSE,
)


def _tokenize(text: str):
    tokens = []
    position = 0
    while position < len(text):
        m = _TOKEN_RE.match(text, position)
        if not m:
            raise PatternSyntaxError("Unexpected character", text, position)
        if m.lastgroup != "ws":
            tokens.append((m.lastgroup, m.group(), position))
        position = m.end()
    return tokens


class _PatternParser:
    def __init__(self, text: str):
        self.text = text
        self.tokens = _tokenize(text)
        self.index = 0

    def parse(self) -> Pattern:
        if not self.tokens:
            raise PatternSyntaxError("Empty pattern", self.text, 0)
        pattern = self._parse_one()
        if self.index != len(self.tokens):
            raise PatternSyntaxError("Trailing input", self.text, self.tokens[self.index][2])
        return pattern

    def _next(self):
        if self.index >= len(self.tokens):
            raise PatternSyntaxError("Unexpected end of pattern", self.text, len(self.text))
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _peek(self):
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def _parse_one(self) -> Pattern:
        kind, value, position = self._next()
        if kind == "punct" and value == "(":
            return self._parse_node(position)
        if kind == "punct" and value == "{":
            return self._parse_union(position)
        if kind == "symbol":
            return Literal(value[1:])
        if kind == "int":
            return Literal(int(value))
        if kind == "word":
            if value == "_":
                return Wildcard()
            if value.startswith("_"):
                return Capture(value[1:])
            if value == "nil":
                return Literal(None)
        raise PatternSyntaxError(f"Unexpected token {value!r}", self.text, position)

    def _parse_node(self, position: int) -> KindPattern:
        kind, value, name_position = self._next()
        node_kind = NodeKind.from_name(value) if kind == "word" else None
        if node_kind is None:
            raise PatternSyntaxError(f"Unknown node kind {value!r}", self.text, name_position)
        children = []
        while True:
            token = self._peek()
            if token is None:
                raise PatternSyntaxError("Unclosed '('", self.text, position)
            if token[0] == "punct" and token[1] == ")":
                self.index += 1
                break
            if token[0] == "rest":
                self.index += 1
                children.append(Rest())
                closing = self._peek()
                if closing is None or closing[1] != ")":
                    raise PatternSyntaxError("'...' must be the last child", self.text, token[2])
                continue
            children.append(self._parse_one())
        return KindPattern(node_kind, tuple(children))

    def _parse_union(self, position: int) -> AnyOf:
        alternatives = []
        while True:
            token = self._peek()
            if token is None:
                raise PatternSyntaxError("Unclosed '{'", self.text, position)
            if token[0] == "punct" and token[1] == "}":
                self.index += 1
                break
            alternatives.append(self._parse_one())
        if not alternatives:
            raise PatternSyntaxError("Empty union", self.text, position)
        return AnyOf(tuple(alternatives))


def compile_pattern(text: str) -> Pattern:
    """Compile s-expression pattern text into a pattern tree."""
    return _PatternParser(text).parse()
