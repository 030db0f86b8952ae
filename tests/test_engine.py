import pytest

from rb_linter.engine import LinterEngine
from rb_linter.exceptions import EditConflictError, RuleError
from rb_linter.models import Edit, Severity
from rb_linter.rules.base import BaseRule
from rb_linter.rules.performance import UseZipToWrapArrayContents
from rb_tree import MalformedTreeError, NodeKind, SourceBuffer
from helpers import ZIP_SOURCE, arg, block, lvar, map_call, node, zip_example


class RecordingRule(BaseRule):
    def __init__(self, kinds, restrict=()):
        self.kinds = kinds
        self.restrict_on_send = frozenset(restrict)
        self.seen = []

    @property
    def rule_id(self):
        return "Test/Recording"

    @property
    def name(self):
        return "recording"

    @property
    def severity(self):
        return Severity.INFO

    def callbacks(self):
        return {kind: self.on_node for kind in self.kinds}

    def on_node(self, node, collector):
        self.seen.append(node)


class ExplodingRule(RecordingRule):
    def on_node(self, node, collector):
        raise KeyError("boom")


class NonFixingRule(RecordingRule):
    def on_node(self, node, collector):
        self.add_offense(collector, node.expression, "found", Edit.remove(node))


def test_dispatch_only_to_interested_kinds():
    root, buffer = zip_example()
    rule = RecordingRule([NodeKind.INT, NodeKind.LVAR])
    LinterEngine(rules=[rule]).lint_tree(root, buffer)

    assert [n.kind for n in rule.seen] == [NodeKind.INT] * 3 + [NodeKind.LVAR]
    assert [buffer.slice(n.expression) for n in rule.seen] == ["1", "2", "3", "id"]


def test_restrict_on_send_filters_by_method_name():
    tree = node(
        NodeKind.BEGIN,
        node(NodeKind.SEND, lvar("a"), "map"),
        node(NodeKind.SEND, lvar("b"), "each"),
    )
    rule = RecordingRule([NodeKind.SEND], restrict=["each"])
    LinterEngine(rules=[rule]).lint_tree(tree, SourceBuffer(""))

    assert [n.method_name for n in rule.seen] == ["each"]


def test_several_rules_run_in_registration_order():
    root, buffer = zip_example()
    order = []

    class First(RecordingRule):
        def on_node(self, node, collector):
            order.append("first")

    class Second(RecordingRule):
        def on_node(self, node, collector):
            order.append("second")

    LinterEngine(rules=[First([NodeKind.BLOCK]), Second([NodeKind.BLOCK])]).lint_tree(root, buffer)
    assert order == ["first", "second"]


def test_callback_failure_aborts_pass_with_rule_error():
    root, buffer = zip_example()
    engine = LinterEngine(rules=[ExplodingRule([NodeKind.ARRAY])])

    with pytest.raises(RuleError) as excinfo:
        engine.lint_tree(root, buffer)
    assert excinfo.value.rule_id == "Test/Recording"
    assert isinstance(excinfo.value.__cause__, KeyError)
    assert excinfo.value.node.kind is NodeKind.ARRAY


def test_edit_dropped_for_rule_that_cannot_autocorrect():
    root, buffer = zip_example()
    diagnostics = LinterEngine(rules=[NonFixingRule([NodeKind.LVAR])]).lint_tree(root, buffer)

    assert len(diagnostics) == 1
    assert diagnostics[0].edit is None
    assert diagnostics[0].severity is Severity.INFO


def test_zip_rule_on_hand_built_tree():
    root, buffer = zip_example()
    engine = LinterEngine(rules=[UseZipToWrapArrayContents()])
    diagnostics = engine.lint_tree(root, buffer)

    assert len(diagnostics) == 1
    diagnostic = diagnostics[0]
    assert diagnostic.rule_id == "Performance/UseZipToWrapArrayContents"
    assert diagnostic.message == "Use 'zip' instead of '[1, 2, 3].map { |id| [id] }'."
    assert (diagnostic.range.start, diagnostic.range.end) == (10, 27)
    assert diagnostic.edit.range is diagnostic.range
    assert engine.autofix.apply(buffer, diagnostics) == "[1, 2, 3].zip"
    assert ZIP_SOURCE == buffer.text


def test_send_without_selector_is_a_malformed_tree():
    tree = node(NodeKind.BEGIN, block(map_call(), [arg("x")], node(NodeKind.ARRAY, lvar("x"))))
    engine = LinterEngine(rules=[UseZipToWrapArrayContents()])

    with pytest.raises(MalformedTreeError):
        engine.lint_tree(tree, SourceBuffer(""))


def test_lint_tree_returns_fresh_list_each_pass():
    root, buffer = zip_example()
    engine = LinterEngine(rules=[UseZipToWrapArrayContents()])
    first = engine.lint_tree(root, buffer)
    second = engine.lint_tree(root, buffer)

    assert first is not second
    assert len(first) == len(second) == 1


def test_lint_file_reads_from_disk(tmp_path):
    file_path = tmp_path / "sample.rb"
    file_path.write_text("values.map { |v| [v] }\n")

    result = LinterEngine().lint_file(file_path)
    assert [d.rule_id for d in result.diagnostics] == ["Performance/UseZipToWrapArrayContents"]
    assert result.parse_errors == []


class FixingRule(RecordingRule):
    @property
    def auto_fixable(self):
        return True


class ArrayToNilRule(FixingRule):
    def on_node(self, node, collector):
        self.add_offense(collector, node.expression, "array", Edit.replace(node, "nil"))


class IncrementRule(FixingRule):
    def on_node(self, node, collector):
        self.add_offense(collector, node.expression, "int", Edit.replace(node, str(int(node.children[0]) + 1)))


def test_fix_string_propagates_edit_conflict():
    engine = LinterEngine(rules=[UseZipToWrapArrayContents(), ArrayToNilRule([NodeKind.ARRAY])])

    with pytest.raises(EditConflictError) as excinfo:
        engine.fix_string("a.map { |x| [x] }")
    assert {excinfo.value.first.replacement, excinfo.value.second.replacement} == {"zip", "nil"}


def test_fix_string_stops_at_max_passes(caplog):
    engine = LinterEngine(rules=[IncrementRule([NodeKind.INT])])

    with caplog.at_level("WARNING", logger="rb_linter.engine"):
        fixed = engine.fix_string("1", max_passes=3)

    assert fixed.source == "4"
    assert fixed.passes == 3
    assert fixed.modified is True
    assert len(fixed.diagnostics) == 1
    assert "Reached max fix passes (3)" in caplog.text
