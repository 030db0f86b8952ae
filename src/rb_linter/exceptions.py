"""Custom exceptions for the lint pipeline."""

from rb_tree.node_types import SourceRange


class LintError(Exception):
    """Base class for failures of a lint or autocorrect pass."""


class EditConflictError(LintError):
    """Two edits recorded in one pass overlap; nothing was applied."""

    def __init__(self, first, second):
        super().__init__(
            f"Edit {_describe(first.range)} overlaps edit {_describe(second.range)}"
        )
        self.first = first
        self.second = second


class RuleError(LintError):
    """A rule callback failed while visiting a node."""

    def __init__(self, rule_id: str, node, cause: Exception):
        super().__init__(f"{rule_id} failed on {node.type} node at {_describe(node.expression)}: {cause}")
        self.rule_id = rule_id
        self.node = node
        self.cause = cause


def _describe(source_range: SourceRange) -> str:
    return f"[{source_range.start}, {source_range.end})"
