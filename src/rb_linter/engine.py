import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from rb_tree.ast_walker import ASTWalker
from rb_tree.exceptions import MalformedTreeError
from rb_tree.node_types import NodeKind, SourceBuffer
from rb_tree.nodes import SyntaxNode
from rb_tree.parser import RubyParser

from .autofix import AutoFixEngine
from .exceptions import LintError, RuleError
from .models import Diagnostic, DiagnosticCollector, FixResult, LintResult
from .registry import RuleRegistry
from .rules.base import BaseRule, NodeCallback

logger = logging.getLogger(__name__)

DEFAULT_MAX_FIX_PASSES = 10


class LinterEngine:
    """Core engine for Ruby linting"""

    def __init__(self, rules: Optional[Iterable[BaseRule]] = None, parser: Optional[RubyParser] = None):
        self.rules: List[BaseRule] = list(rules) if rules is not None else RuleRegistry().get_all_rules()
        self._parser = parser
        self.autofix = AutoFixEngine()
        self._dispatch = self._build_dispatch(self.rules)

    @property
    def parser(self) -> RubyParser:
        if self._parser is None:
            self._parser = RubyParser()
        return self._parser

    @staticmethod
    def _build_dispatch(rules: List[BaseRule]) -> Dict[NodeKind, List[Tuple[BaseRule, NodeCallback]]]:
        dispatch: Dict[NodeKind, List[Tuple[BaseRule, NodeCallback]]] = defaultdict(list)
        for rule in rules:
            for kind, callback in rule.callbacks().items():
                dispatch[kind].append((rule, callback))
        return dict(dispatch)

    def lint_tree(self, tree: SyntaxNode, buffer: SourceBuffer) -> List[Diagnostic]:
        """Walk the tree once and return diagnostics in discovery order"""
        collector = DiagnosticCollector(buffer)

        def visit(node: SyntaxNode):
            entries = self._dispatch.get(node.kind)
            if not entries:
                return
            for rule, callback in entries:
                if node.is_send and not rule.wants_send(node):
                    continue
                try:
                    callback(node, collector)
                except (LintError, MalformedTreeError):
                    raise
                except Exception as e:
                    raise RuleError(rule.rule_id, node, e) from e

        ASTWalker.walk(tree, visit)
        return collector.diagnostics

    def lint_string(self, source: str, file_path: str = "") -> LintResult:
        """Parse and lint a Ruby string"""
        parse_result = self.parser.parse_string(source, file_path)
        for error in parse_result.errors:
            logger.warning("%s: %s", file_path or "<string>", error)
        diagnostics = self.lint_tree(parse_result.tree, parse_result.buffer)
        return LintResult(
            buffer=parse_result.buffer,
            diagnostics=diagnostics,
            parse_errors=parse_result.errors,
        )

    def lint_file(self, file_path: Path) -> LintResult:
        parse_result = self.parser.parse_file(file_path)
        for error in parse_result.errors:
            logger.warning("%s: %s", file_path, error)
        diagnostics = self.lint_tree(parse_result.tree, parse_result.buffer)
        return LintResult(parse_result.buffer, diagnostics, parse_result.errors)

    def fix_string(self, source: str, file_path: str = "", max_passes: int = DEFAULT_MAX_FIX_PASSES) -> FixResult:
        """Lint and autocorrect until no fixable offense remains.

        Each pass resolves its edits as one batch; an ``EditConflictError``
        propagates and leaves the caller's source untouched.
        """
        current = source
        passes = 0
        result = self.lint_string(current, file_path)

        while passes < max_passes:
            fixable = [d for d in result.diagnostics if d.auto_fixable]
            if not fixable:
                break
            corrected = self.autofix.apply(result.buffer, fixable)
            passes += 1
            logger.debug("Pass %d: applied %d fixes to %s", passes, len(fixable), file_path or "<string>")
            if corrected == current:
                break
            current = corrected
            result = self.lint_string(current, file_path)
        else:
            if any(d.auto_fixable for d in result.diagnostics):
                logger.warning("Reached max fix passes (%d) for %s", max_passes, file_path or "<string>")

        return FixResult(
            source=current,
            modified=current != source,
            passes=passes,
            diagnostics=result.diagnostics,
        )
