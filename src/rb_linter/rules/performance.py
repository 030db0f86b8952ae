from typing import Mapping

from rb_tree.exceptions import MalformedTreeError
from rb_tree.node_types import NodeKind, SourceBuffer, SourceRange
from rb_tree.nodes import SyntaxNode
from rb_tree.patterns import NodeMatcher

from ..models import DiagnosticCollector, Edit, Severity
from .base import BaseRule, NodeCallback


class UseZipToWrapArrayContents(BaseRule):
    """Checks for `.map { |id| [id] }` and suggests replacing it with `.zip`.

    Bad::

        [1, 2, 3].map { |id| [id] }
        [1, 2, 3].map { [_1] }

    Good::

        [1, 2, 3].zip
        [1, 2, 3].map { |id| id }
        [1, 2, 3].map { |id| [id, id] }
    """

    MSG = "Use '{replacement}' instead of '{original_code}'."
    REPLACEMENT = "zip"
    restrict_on_send = frozenset({"map"})

    # Regular block form `.map { |e| [e] }`
    MAP_WITH_ARRAY = NodeMatcher(
        """
        (block
          (send _ :map)
          (args (arg _id))
          (array (lvar _id)))
        """,
        name="map_with_array",
    )

    # Numbered parameter form `.map { [_1] }`
    MAP_WITH_ARRAY_NUMBLOCK = NodeMatcher(
        """
        (numblock
          (send _ :map)
          1
          (array (lvar _)))
        """,
        name="map_with_array_numblock",
    )

    @property
    def rule_id(self) -> str:
        return "Performance/UseZipToWrapArrayContents"

    @property
    def name(self) -> str:
        return "use-zip-to-wrap-array-contents"

    @property
    def severity(self) -> Severity:
        return Severity.WARNING

    @property
    def auto_fixable(self) -> bool:
        return True

    @property
    def description(self) -> str:
        return "Wrapping each element in a one-element array with map is what zip does without a block."

    def callbacks(self) -> Mapping[NodeKind, NodeCallback]:
        return {NodeKind.SEND: self.on_send}

    def on_send(self, node: SyntaxNode, collector: DiagnosticCollector) -> None:
        parent = node.parent
        if parent is None or not parent.is_block or parent.send_node is not node:
            return
        if not (self.MAP_WITH_ARRAY.matches(parent) or self.MAP_WITH_ARRAY_NUMBLOCK.matches(parent)):
            return
        if node.receiver is None:
            return

        # One range per offense, shared by the diagnostic and its edit
        offense_range = self.offense_range(parent)
        self.add_offense(
            collector,
            offense_range,
            self.message(parent, collector.buffer),
            Edit.replace(offense_range, self.REPLACEMENT),
        )

    def message(self, block: SyntaxNode, buffer: SourceBuffer) -> str:
        original_code = block.source(buffer).split("\n", 1)[0].rstrip("\r")
        return self.MSG.format(replacement=self.REPLACEMENT, original_code=original_code)

    @staticmethod
    def offense_range(block: SyntaxNode) -> SourceRange:
        """From the start of the method name through the end of the block."""
        selector = block.send_node.selector
        if selector is None:
            raise MalformedTreeError(f"send node {block.send_node!r} has no selector range")
        return SourceRange(selector.start, block.expression.end)
