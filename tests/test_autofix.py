import pytest

from rb_linter.autofix import AutoFixEngine
from rb_linter.exceptions import EditConflictError
from rb_linter.models import Diagnostic, Edit, Severity
from rb_tree import NodeKind, SourceBuffer, SourceRange
from helpers import node


def edit(start, end, text):
    return Edit(SourceRange(start, end), text)


def test_resolve_splices_against_original_offsets():
    source = "aaa bbb ccc"
    engine = AutoFixEngine()
    result = engine.resolve(source, [edit(0, 3, "x"), edit(8, 11, "zzzzz")])
    assert result == "x bbb zzzzz"


def test_resolve_is_independent_of_recording_order():
    source = "foo.map { |x| [x] } + bar.map { |y| [y] }"
    first = edit(4, 19, "zip")
    second = edit(26, 41, "zip")
    engine = AutoFixEngine()

    forward = engine.resolve(source, [first, second])
    backward = engine.resolve(source, [second, first])
    assert forward == backward == "foo.zip + bar.zip"


def test_resolve_matches_sequential_splicing_from_the_end():
    source = "0123456789"
    edits = [edit(1, 3, "AB"), edit(5, 6, ""), edit(8, 10, "XYZ")]
    expected = source
    for e in sorted(edits, key=lambda e: e.range.start, reverse=True):
        expected = expected[: e.range.start] + e.replacement + expected[e.range.end :]
    assert AutoFixEngine().resolve(source, edits) == expected


def test_overlapping_edits_raise_conflict():
    engine = AutoFixEngine()
    a = edit(0, 5, "x")
    b = edit(3, 8, "y")
    with pytest.raises(EditConflictError) as excinfo:
        engine.resolve("0123456789", [b, a])
    assert excinfo.value.first is a
    assert excinfo.value.second is b


def test_insert_inside_replacement_conflicts():
    with pytest.raises(EditConflictError):
        AutoFixEngine().resolve("0123456789", [edit(2, 6, "x"), edit(4, 4, "y")])


def test_adjacent_edits_do_not_conflict():
    result = AutoFixEngine().resolve("abcdef", [edit(0, 3, "X"), edit(3, 6, "Y")])
    assert result == "XY"


def test_inserts_at_same_offset_keep_recording_order():
    result = AutoFixEngine().resolve("ab", [edit(1, 1, "1"), edit(1, 1, "2")])
    assert result == "a12b"


def test_insert_helpers_on_nodes():
    target = node(NodeKind.LVAR, "x", start=2, end=3)
    source = "[ x ]"
    result = AutoFixEngine().resolve(
        source, [Edit.insert_before(target, "("), Edit.insert_after(target, ")")]
    )
    assert result == "[ (x) ]"


def test_remove_helper():
    target = node(NodeKind.LVAR, "x", start=1, end=3)
    assert AutoFixEngine().resolve("a x b", [Edit.remove(target)]) == "a b"


def test_no_edits_returns_source_unchanged():
    assert AutoFixEngine().resolve("puts 1\n", []) == "puts 1\n"


def test_edit_past_end_of_buffer_is_rejected():
    with pytest.raises(ValueError):
        AutoFixEngine().resolve("abc", [edit(2, 9, "x")])


def test_resolve_works_on_bytes_for_multibyte_text():
    buffer = SourceBuffer("é.map { |x| [x] }")
    # 'é' occupies bytes 0-1, 'map' starts at byte 3
    result = AutoFixEngine().resolve(buffer, [edit(3, 18, "zip")])
    assert result == "é.zip"


def test_apply_uses_edits_from_diagnostics():
    diagnostics = [
        Diagnostic("A/B", SourceRange(0, 1), "m", Severity.WARNING, edit(0, 1, "Z")),
        Diagnostic("A/C", SourceRange(2, 3), "m", Severity.WARNING),
    ]
    assert AutoFixEngine().apply("a b c", diagnostics) == "Z b c"


def test_conflict_leaves_no_partial_output():
    source = "abcdef"
    engine = AutoFixEngine()
    result = None
    with pytest.raises(EditConflictError):
        result = engine.resolve(source, [edit(0, 1, "X"), edit(2, 5, "Y"), edit(4, 6, "Z")])
    assert result is None
    assert source == "abcdef"
