import logging
from typing import Iterable, List, Union

from rb_tree.node_types import SourceBuffer

from .exceptions import EditConflictError
from .models import Diagnostic, Edit

logger = logging.getLogger(__name__)


class AutoFixEngine:
    """Applies the edits of one pass to the original source buffer"""

    def resolve(self, buffer: Union[SourceBuffer, str], edits: Iterable[Edit]) -> str:
        """Splice all edits into the buffer as a single batch.

        Offsets always refer to the original buffer. Overlapping edits raise
        ``EditConflictError`` and no output is produced. Zero-width inserts at
        the same offset keep the order they were recorded in.
        """
        if isinstance(buffer, str):
            buffer = SourceBuffer(buffer)
        data = buffer.data

        ordered: List[Edit] = sorted(edits, key=lambda e: (e.range.start, e.range.end))
        for edit in ordered:
            if edit.range.end > len(data):
                raise ValueError(
                    f"Edit [{edit.range.start}, {edit.range.end}) is outside a buffer of {len(data)} bytes"
                )
        for first, second in zip(ordered, ordered[1:]):
            if first.range.overlaps(second.range):
                raise EditConflictError(first, second)

        result = []
        last_offset = 0
        for edit in ordered:
            result.append(data[last_offset : edit.range.start])
            result.append(edit.replacement.encode("utf-8"))
            last_offset = edit.range.end
        result.append(data[last_offset:])

        logger.debug("Resolved %d edits in %s", len(ordered), buffer.name or "<string>")
        return b"".join(result).decode("utf-8")

    def apply(self, buffer: Union[SourceBuffer, str], diagnostics: Iterable[Diagnostic]) -> str:
        """Resolve the edits attached to ``diagnostics``."""
        return self.resolve(buffer, [d.edit for d in diagnostics if d.edit is not None])
