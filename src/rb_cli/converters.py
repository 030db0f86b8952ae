from rb_linter.models import Diagnostic
from rb_tree.node_types import SourceBuffer

from .models import Correction, LintIssue


def diagnostic_to_lint_issue(
    diagnostic: Diagnostic, buffer: SourceBuffer, file_path: str, corrected: bool = False
) -> LintIssue:
    """Convert an internal dataclass diagnostic to an external Pydantic issue"""
    line, column = diagnostic.location(buffer)
    correction = None
    if diagnostic.edit is not None:
        correction = Correction(
            start=diagnostic.edit.range.start,
            end=diagnostic.edit.range.end,
            replacement=diagnostic.edit.replacement,
        )
    return LintIssue(
        severity=diagnostic.severity.upper(),  # dataclass uses 'warning', Pydantic uses 'WARNING'
        file_path=file_path,
        line_number=line,
        column=column,
        rule_id=diagnostic.rule_id,
        message=diagnostic.message,
        correction=correction,
        auto_fixable=diagnostic.auto_fixable,
        corrected=corrected,
    )
