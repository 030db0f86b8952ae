from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .nodes import SyntaxNode


class NodeKind(str, Enum):
    """Closed set of node kinds produced by the Ruby parser adapter."""

    BEGIN = "begin"
    SEND = "send"
    CSEND = "csend"
    BLOCK = "block"
    NUMBLOCK = "numblock"
    ARGS = "args"
    ARG = "arg"
    OPTARG = "optarg"
    RESTARG = "restarg"
    KWARG = "kwarg"
    KWOPTARG = "kwoptarg"
    KWRESTARG = "kwrestarg"
    BLOCKARG = "blockarg"
    SHADOWARG = "shadowarg"
    MLHS = "mlhs"
    LVAR = "lvar"
    IVAR = "ivar"
    ARRAY = "array"
    HASH = "hash"
    INT = "int"
    FLOAT = "float"
    STR = "str"
    SYM = "sym"
    CONST = "const"
    NIL = "nil"
    TRUE = "true"
    FALSE = "false"
    SELF = "self"
    OPAQUE = "opaque"

    @classmethod
    def from_name(cls, name: str) -> NodeKind | None:
        try:
            return cls(name)
        except ValueError:
            return None


SEND_KINDS = frozenset({NodeKind.SEND, NodeKind.CSEND})
BLOCK_KINDS = frozenset({NodeKind.BLOCK, NodeKind.NUMBLOCK})
ARGUMENT_KINDS = frozenset(
    {
        NodeKind.ARG,
        NodeKind.OPTARG,
        NodeKind.RESTARG,
        NodeKind.KWARG,
        NodeKind.KWOPTARG,
        NodeKind.KWRESTARG,
        NodeKind.BLOCKARG,
        NodeKind.SHADOWARG,
    }
)


@dataclass(frozen=True, order=True)
class SourceRange:
    """Half-open byte range ``[start, end)`` into a source buffer."""

    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid source range ({self.start}, {self.end})")

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def overlaps(self, other: SourceRange) -> bool:
        return self.start < other.end and other.start < self.end

    def contains(self, other: SourceRange) -> bool:
        return self.start <= other.start and other.end <= self.end

    def join(self, other: SourceRange) -> SourceRange:
        """Smallest range covering both ranges."""
        return SourceRange(min(self.start, other.start), max(self.end, other.end))


@dataclass(frozen=True)
class SourceBuffer:
    """Original source text with byte-offset access."""

    text: str
    name: str = ""
    data: bytes = field(init=False, repr=False, compare=False)
    _line_starts: tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        data = self.text.encode("utf-8")
        starts = [0]
        starts.extend(i + 1 for i, b in enumerate(data) if b == 0x0A)
        object.__setattr__(self, "data", data)
        object.__setattr__(self, "_line_starts", tuple(starts))

    def __len__(self) -> int:
        return len(self.data)

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def slice(self, source_range: SourceRange) -> str:
        return self.data[source_range.start : source_range.end].decode("utf-8", errors="replace")

    def line_and_column(self, offset: int) -> tuple[int, int]:
        """1-based line and 0-based byte column of ``offset``."""
        index = bisect_right(self._line_starts, offset) - 1
        return index + 1, offset - self._line_starts[index]


@dataclass
class ParseResult:
    """Result of parsing one Ruby buffer"""

    tree: SyntaxNode
    buffer: SourceBuffer
    errors: list[str] = field(default_factory=list)


@dataclass
class NodeMatch:
    """Result of a successful pattern match"""

    node: SyntaxNode
    captures: dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, name: str) -> Any:
        return self.captures[name]
