from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Union

from rb_tree.node_types import SourceBuffer, SourceRange
from rb_tree.nodes import SyntaxNode

if TYPE_CHECKING:
    from .rules.base import BaseRule


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    STYLE = "style"


Target = Union[SyntaxNode, SourceRange]


def _range_of(target: Target) -> SourceRange:
    return target.expression if isinstance(target, SyntaxNode) else target


@dataclass(frozen=True)
class Edit:
    """Replace the bytes in ``range`` with ``replacement``"""

    range: SourceRange
    replacement: str

    @classmethod
    def replace(cls, target: Target, text: str) -> Edit:
        return cls(_range_of(target), text)

    @classmethod
    def remove(cls, target: Target) -> Edit:
        return cls(_range_of(target), "")

    @classmethod
    def insert_before(cls, target: Target, text: str) -> Edit:
        start = _range_of(target).start
        return cls(SourceRange(start, start), text)

    @classmethod
    def insert_after(cls, target: Target, text: str) -> Edit:
        end = _range_of(target).end
        return cls(SourceRange(end, end), text)


@dataclass
class Diagnostic:
    """One reported offense"""

    rule_id: str
    range: SourceRange
    message: str
    severity: Severity
    edit: Optional[Edit] = None

    @property
    def auto_fixable(self) -> bool:
        return self.edit is not None

    def location(self, buffer: SourceBuffer) -> tuple[int, int]:
        """(line, column) of the start of the offense."""
        return buffer.line_and_column(self.range.start)


@dataclass
class DiagnosticCollector:
    """Accumulates the diagnostics of a single pass over one buffer."""

    buffer: SourceBuffer
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def report(
        self,
        rule: BaseRule,
        source_range: SourceRange,
        message: str,
        edit: Optional[Edit] = None,
    ) -> Diagnostic:
        diagnostic = Diagnostic(
            rule_id=rule.rule_id,
            range=source_range,
            message=message,
            severity=rule.severity,
            edit=edit,
        )
        self.diagnostics.append(diagnostic)
        return diagnostic


@dataclass
class LintResult:
    buffer: SourceBuffer
    diagnostics: List[Diagnostic]
    parse_errors: List[str] = field(default_factory=list)


@dataclass
class FixResult:
    source: str
    modified: bool
    passes: int
    diagnostics: List[Diagnostic] = field(default_factory=list)
