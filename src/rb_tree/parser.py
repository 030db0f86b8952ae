"""Ruby parser adapter built on tree-sitter.

tree-sitter produces a concrete syntax tree. This module folds it into the
``SyntaxNode`` model: calls with a block become ``block``/``numblock`` nodes
wrapping a ``send``, bare identifiers become ``lvar`` and constructs the
model does not distinguish become ``opaque`` nodes carrying their grammar
type.
"""

import re
from pathlib import Path
from typing import List, Optional

import tree_sitter_ruby as tsr
from tree_sitter import Language, Node, Parser

from .node_types import NodeKind, ParseResult, SourceBuffer, SourceRange
from .nodes import SyntaxNode

_NUMBERED_PARAM = re.compile(r"_([1-9])")
_CALL_OPERATORS = (".", "&.", "::")
_BLOCK_TYPES = ("block", "do_block", "lambda")
_BODY_TYPES = ("block_body", "body_statement")
# Boundaries that start a fresh local variable table
_SCOPE_TYPES = ("program", "method", "singleton_method", "class", "module", "singleton_class")
# Parents under which an identifier declares a local variable
_DECLARING_TYPES = (
    "block_parameters",
    "method_parameters",
    "lambda_parameters",
    "parameters",
    "destructured_parameter",
    "splat_parameter",
    "hash_splat_parameter",
    "block_parameter",
    "left_assignment_list",
    "destructured_left_assignment",
    "rest_assignment",
    "exception_variable",
)
_NAMED_DECLARING_TYPES = {
    "assignment": "left",
    "operator_assignment": "left",
    "optional_parameter": "name",
    "keyword_parameter": "name",
    "for": "pattern",
}

_LEAF_KINDS = {
    "integer": NodeKind.INT,
    "float": NodeKind.FLOAT,
    "instance_variable": NodeKind.IVAR,
    "identifier": NodeKind.LVAR,
}
_EMPTY_KINDS = {
    "nil": NodeKind.NIL,
    "true": NodeKind.TRUE,
    "false": NodeKind.FALSE,
    "self": NodeKind.SELF,
}


class RubyParser:
    """Parses Ruby source into the syntax tree model."""

    def __init__(self):
        self.language = Language(tsr.language())
        self.parser = Parser(self.language)

    def parse_string(self, source: str, name: str = "") -> ParseResult:
        buffer = SourceBuffer(source, name)
        ts_tree = self.parser.parse(buffer.data)
        builder = _TreeBuilder(buffer)
        root = builder.convert_program(ts_tree.root_node)
        if ts_tree.root_node.has_error and not builder.errors:
            builder.errors.append("Syntax error")
        return ParseResult(tree=root, buffer=buffer, errors=builder.errors)

    def parse_file(self, file_path: Path) -> ParseResult:
        # newline="" keeps CRLF intact so offsets match the bytes on disk
        with open(file_path, encoding="utf-8", newline="") as f:
            return self.parse_string(f.read(), str(file_path))


def _named(node: Optional[Node]) -> List[Node]:
    if node is None:
        return []
    return [c for c in node.named_children if c.type != "comment"]


def _range(node: Node) -> SourceRange:
    return SourceRange(node.start_byte, node.end_byte)


class _TreeBuilder:
    def __init__(self, buffer: SourceBuffer):
        self.buffer = buffer
        self.errors: List[str] = []

    def text(self, node: Node) -> str:
        return self.buffer.data[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def convert_program(self, node: Node) -> SyntaxNode:
        statements = [self.convert(c) for c in _named(node)]
        return SyntaxNode(NodeKind.BEGIN, statements, SourceRange(0, len(self.buffer)))

    def convert(self, node: Node) -> SyntaxNode:
        if node.type == "ERROR" or node.is_missing:
            line = node.start_point[0] + 1
            self.errors.append(f"line {line}: syntax error near {self.text(node)[:40]!r}")

        handler = getattr(self, f"_convert_{node.type}", None)
        if handler is not None:
            return handler(node)
        if node.type in _LEAF_KINDS:
            return SyntaxNode(_LEAF_KINDS[node.type], (self.text(node),), _range(node))
        if node.type in _EMPTY_KINDS:
            return SyntaxNode(_EMPTY_KINDS[node.type], (), _range(node))
        return self._opaque(node)

    def _opaque(self, node: Node) -> SyntaxNode:
        children = [self.convert(c) for c in _named(node)]
        return SyntaxNode(NodeKind.OPAQUE, (node.type, *children), _range(node))

    def _statements(self, nodes: List[Node]) -> Optional[SyntaxNode]:
        if not nodes:
            return None
        if len(nodes) == 1:
            return self.convert(nodes[0])
        children = [self.convert(n) for n in nodes]
        return SyntaxNode(
            NodeKind.BEGIN, children, SourceRange(nodes[0].start_byte, nodes[-1].end_byte)
        )

    # Calls and blocks

    def _convert_call(self, node: Node) -> SyntaxNode:
        receiver_ts = node.child_by_field_name("receiver")
        method_ts = node.child_by_field_name("method")
        arguments_ts = node.child_by_field_name("arguments")
        block_ts = node.child_by_field_name("block")
        operator_ts = next((c for c in node.children if c.type in _CALL_OPERATORS), None)

        receiver = self.convert(receiver_ts) if receiver_ts is not None else None
        name = self.text(method_ts) if method_ts is not None else "call"
        arguments = [self.convert(a) for a in _named(arguments_ts)]

        loc = {}
        if method_ts is not None:
            loc["selector"] = _range(method_ts)
        if operator_ts is not None:
            loc["dot"] = _range(operator_ts)

        if arguments_ts is not None:
            send_end = arguments_ts.end_byte
        elif method_ts is not None:
            send_end = method_ts.end_byte
        elif operator_ts is not None:
            send_end = operator_ts.end_byte
        else:
            send_end = node.start_byte
        kind = NodeKind.CSEND if operator_ts is not None and operator_ts.type == "&." else NodeKind.SEND
        send = SyntaxNode(
            kind, (receiver, name, *arguments), SourceRange(node.start_byte, send_end), loc
        )
        if block_ts is None:
            return send
        return self._wrap_block(node, send, block_ts)

    def _wrap_block(self, call_ts: Node, send: SyntaxNode, block_ts: Node) -> SyntaxNode:
        params_ts = block_ts.child_by_field_name("parameters")
        body_ts = block_ts.child_by_field_name("body")
        if body_ts is None:
            statements = [c for c in _named(block_ts) if params_ts is None or c != params_ts]
        elif body_ts.type in _BODY_TYPES:
            statements = _named(body_ts)
        else:
            statements = [body_ts]

        opening, closing = block_ts.children[0], block_ts.children[-1]
        loc = {"begin": _range(opening), "end": _range(closing)}
        expression = SourceRange(call_ts.start_byte, call_ts.end_byte)

        if params_ts is None:
            arity = self._numbered_arity(statements, block_ts)
            body = self._statements(statements)
            if arity:
                return SyntaxNode(NodeKind.NUMBLOCK, (send, arity, body), expression, loc)
            params = SyntaxNode(NodeKind.ARGS, (), SourceRange(opening.end_byte, opening.end_byte))
        else:
            params = SyntaxNode(NodeKind.ARGS, self._parameters(params_ts), _range(params_ts))
            body = self._statements(statements)
        return SyntaxNode(NodeKind.BLOCK, (send, params, body), expression, loc)

    def _numbered_arity(self, statements: List[Node], block_ts: Node) -> int:
        """Highest numbered parameter used directly in a block body.

        ``it`` only counts when no local variable named ``it`` is visible,
        otherwise it refers to that variable.
        """
        arity = 0
        it_is_local = None
        stack = list(statements)
        while stack:
            node = stack.pop()
            if node.type in _BLOCK_TYPES:
                continue
            if node.type == "identifier":
                text = self.text(node)
                m = _NUMBERED_PARAM.fullmatch(text)
                if m:
                    arity = max(arity, int(m.group(1)))
                elif text == "it":
                    if it_is_local is None:
                        it_is_local = self._declares_local(block_ts, "it")
                    if not it_is_local:
                        arity = max(arity, 1)
            stack.extend(node.named_children)
        return arity

    def _declares_local(self, block_ts: Node, name: str) -> bool:
        """Whether ``name`` is declared as a local visible inside ``block_ts``.

        Looks through the enclosing scope up to the end of the block. Nested
        blocks are searched as well, so a declaration there also counts.
        """
        scope = block_ts.parent
        while scope is not None and scope.type not in _SCOPE_TYPES:
            scope = scope.parent
        if scope is None:
            return False

        stack = list(scope.named_children)
        while stack:
            node = stack.pop()
            if node.start_byte >= block_ts.end_byte or node.type in _SCOPE_TYPES:
                continue
            if node.type == "identifier" and self.text(node) == name and self._is_declaration(node):
                return True
            stack.extend(node.named_children)
        return False

    @staticmethod
    def _is_declaration(identifier: Node) -> bool:
        parent = identifier.parent
        if parent is None:
            return False
        if parent.type in _DECLARING_TYPES:
            return True
        field = _NAMED_DECLARING_TYPES.get(parent.type)
        return field is not None and parent.child_by_field_name(field) == identifier

    def _parameters(self, params_ts: Node) -> List[SyntaxNode]:
        params = []
        shadow = []
        block_locals = False
        trailing_comma = None
        for child in params_ts.children:
            if child.type == ";":
                block_locals = True
            elif child.type == "," and not block_locals:
                trailing_comma = child
            if not child.is_named or child.type == "comment":
                continue
            param = self._parameter(child, block_locals)
            if param is None:
                continue
            if block_locals:
                shadow.append(param)
            else:
                params.append(param)
                trailing_comma = None
        if trailing_comma is not None and params:
            # |x,| destructures each element, the same as |(x, *)|
            start = params[0].expression.start
            params = [SyntaxNode(NodeKind.MLHS, params, SourceRange(start, trailing_comma.end_byte))]
        return params + shadow

    def _parameter(self, node: Node, block_local: bool = False) -> Optional[SyntaxNode]:
        if node.type == "identifier":
            kind = NodeKind.SHADOWARG if block_local else NodeKind.ARG
            return SyntaxNode(kind, (self.text(node),), _range(node))
        if node.type == "destructured_parameter":
            inner = [self._parameter(c) for c in node.named_children]
            return SyntaxNode(NodeKind.MLHS, [p for p in inner if p is not None], _range(node))

        name_ts = node.child_by_field_name("name")
        name = self.text(name_ts) if name_ts is not None else ""
        if node.type == "optional_parameter":
            kind = NodeKind.OPTARG
        elif node.type == "splat_parameter":
            kind = NodeKind.RESTARG
        elif node.type == "hash_splat_parameter":
            kind = NodeKind.KWRESTARG
        elif node.type == "block_parameter":
            kind = NodeKind.BLOCKARG
        elif node.type == "keyword_parameter":
            kind = NodeKind.KWOPTARG if node.child_by_field_name("value") is not None else NodeKind.KWARG
        else:
            return None
        return SyntaxNode(kind, (name,), _range(node))

    # Literals

    def _convert_array(self, node: Node) -> SyntaxNode:
        elements = [self.convert(c) for c in _named(node)]
        return SyntaxNode(NodeKind.ARRAY, elements, _range(node))

    def _convert_hash(self, node: Node) -> SyntaxNode:
        pairs = [self.convert(c) for c in _named(node)]
        return SyntaxNode(NodeKind.HASH, pairs, _range(node))

    def _convert_string(self, node: Node) -> SyntaxNode:
        return SyntaxNode(NodeKind.STR, (self.text(node),), _range(node))

    def _convert_simple_symbol(self, node: Node) -> SyntaxNode:
        return SyntaxNode(NodeKind.SYM, (self.text(node)[1:],), _range(node))

    def _convert_constant(self, node: Node) -> SyntaxNode:
        return SyntaxNode(NodeKind.CONST, (None, self.text(node)), _range(node))

    def _convert_scope_resolution(self, node: Node) -> SyntaxNode:
        scope_ts = node.child_by_field_name("scope")
        name_ts = node.child_by_field_name("name")
        scope = self.convert(scope_ts) if scope_ts is not None else None
        name = self.text(name_ts) if name_ts is not None else ""
        return SyntaxNode(NodeKind.CONST, (scope, name), _range(node))

    def _convert_parenthesized_statements(self, node: Node) -> SyntaxNode:
        statements = [self.convert(c) for c in _named(node)]
        return SyntaxNode(NodeKind.BEGIN, statements, _range(node))
