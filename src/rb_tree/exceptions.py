"""Exceptions raised by the Ruby syntax tree layer."""


class MalformedTreeError(Exception):
    """A node violates the structural shape its kind requires."""


class PatternSyntaxError(Exception):
    """Pattern text could not be compiled."""

    def __init__(self, message: str, text: str, position: int):
        super().__init__(f"{message} at offset {position}: {text!r}")
        self.text = text
        self.position = position
