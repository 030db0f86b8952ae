from abc import ABC, abstractmethod
from typing import Callable, FrozenSet, Mapping, Optional

from rb_tree.node_types import NodeKind, SourceRange
from rb_tree.nodes import SyntaxNode

from ..models import Diagnostic, DiagnosticCollector, Edit, Severity

NodeCallback = Callable[[SyntaxNode, DiagnosticCollector], None]


class BaseRule(ABC):
    """Abstract base class for all linting rules."""

    # Method names a send callback cares about; empty means every send
    restrict_on_send: FrozenSet[str] = frozenset()

    @property
    @abstractmethod
    def rule_id(self) -> str:
        """Unique rule identifier (e.g., 'Performance/UseZipToWrapArrayContents')."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable rule name (e.g., 'use-zip-to-wrap-array-contents')."""
        pass

    @property
    @abstractmethod
    def severity(self) -> Severity:
        """Default severity for this rule."""
        pass

    @property
    def auto_fixable(self) -> bool:
        """Can this rule automatically fix violations?"""
        return False

    @property
    def description(self) -> str:
        """Detailed description of what this rule checks."""
        return ""

    @property
    def department(self) -> str:
        return self.rule_id.split("/", 1)[0]

    @abstractmethod
    def callbacks(self) -> Mapping[NodeKind, NodeCallback]:
        """Node kinds this rule wants to visit, with the callback for each."""
        pass

    def wants_send(self, node: SyntaxNode) -> bool:
        return not self.restrict_on_send or node.method_name in self.restrict_on_send

    # Helper method for consistent offense creation
    def add_offense(
        self,
        collector: DiagnosticCollector,
        source_range: SourceRange,
        message: str,
        edit: Optional[Edit] = None,
    ) -> Diagnostic:
        """Record an offense; the edit is dropped for rules that cannot fix."""
        return collector.report(self, source_range, message, edit if self.auto_fixable else None)
