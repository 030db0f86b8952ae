from rb_tree import NodeKind, SourceBuffer, SourceRange, SyntaxNode


def node(kind: NodeKind, *children, start: int = 0, end: int = 0, loc=None) -> SyntaxNode:
    """Build a node; ranges default to empty when a test does not care."""
    return SyntaxNode(kind, children, SourceRange(start, end), loc)


def lvar(name: str) -> SyntaxNode:
    return node(NodeKind.LVAR, name)


def arg(name: str) -> SyntaxNode:
    return node(NodeKind.ARG, name)


def map_call(receiver="items", method="map") -> SyntaxNode:
    recv = lvar(receiver) if isinstance(receiver, str) else receiver
    return node(NodeKind.SEND, recv, method)


def block(send: SyntaxNode, params, body) -> SyntaxNode:
    return node(NodeKind.BLOCK, send, node(NodeKind.ARGS, *params), body)


def numblock(send: SyntaxNode, arity: int, body) -> SyntaxNode:
    return node(NodeKind.NUMBLOCK, send, arity, body)


ZIP_SOURCE = "[1, 2, 3].map { |id| [id] }"


def zip_example():
    """Hand-built tree for ``[1, 2, 3].map { |id| [id] }`` with exact offsets."""
    buffer = SourceBuffer(ZIP_SOURCE)
    receiver = node(
        NodeKind.ARRAY,
        node(NodeKind.INT, "1", start=1, end=2),
        node(NodeKind.INT, "2", start=4, end=5),
        node(NodeKind.INT, "3", start=7, end=8),
        start=0,
        end=9,
    )
    send = node(
        NodeKind.SEND,
        receiver,
        "map",
        start=0,
        end=13,
        loc={"dot": SourceRange(9, 10), "selector": SourceRange(10, 13)},
    )
    params = node(NodeKind.ARGS, node(NodeKind.ARG, "id", start=17, end=19), start=16, end=20)
    body = node(NodeKind.ARRAY, node(NodeKind.LVAR, "id", start=22, end=24), start=21, end=25)
    tree = node(
        NodeKind.BLOCK,
        send,
        params,
        body,
        start=0,
        end=27,
        loc={"begin": SourceRange(14, 15), "end": SourceRange(26, 27)},
    )
    root = node(NodeKind.BEGIN, tree, start=0, end=27)
    return root, buffer
