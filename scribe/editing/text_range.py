"""Text ranges measured in UTF-16 code units.

Native text widgets report carets and selections as UTF-16 offsets, while
Python strings index by code point. These helpers convert between the two
so that ranges coming from the UI can be applied to a ``str`` directly.
"""

from __future__ import annotations

from dataclasses import dataclass


def _units(char: str) -> int:
    return 2 if ord(char) > 0xFFFF else 1


def utf16_length(text: str) -> int:
    """Length of ``text`` in UTF-16 code units."""
    return len(text) + sum(1 for char in text if ord(char) > 0xFFFF)


def utf16_to_index(text: str, offset: int) -> int | None:
    """Convert a UTF-16 offset into a string index.

    Returns None when the offset is negative, past the end, or falls
    between the two halves of a surrogate pair.
    """
    if offset < 0:
        return None
    units = 0
    for index, char in enumerate(text):
        if units == offset:
            return index
        if units > offset:
            return None
        units += _units(char)
    return len(text) if units == offset else None


def clamp_to_index(text: str, offset: int) -> int:
    """Clamp a UTF-16 offset to the nearest valid string index.

    Offsets below zero snap to the start and offsets past the end snap to
    the end. An offset inside a surrogate pair snaps back to the start of
    the pair.
    """
    if offset <= 0:
        return 0
    units = 0
    for index, char in enumerate(text):
        units += _units(char)
        if units > offset:
            return index
    return len(text)


@dataclass(frozen=True)
class TextRange:
    """A caret (``length == 0``) or selection within a text buffer.

    Attributes:
        start: Offset of the first selected UTF-16 code unit.
        length: Number of selected UTF-16 code units.
    """

    start: int
    length: int = 0

    def __post_init__(self) -> None:
        if self.start < 0 or self.length < 0:
            raise ValueError(f"TextRange values must be non-negative, got ({self.start}, {self.length})")

    @property
    def end(self) -> int:
        return self.start + self.length

    @property
    def is_empty(self) -> bool:
        return self.length == 0

    @classmethod
    def caret(cls, offset: int) -> TextRange:
        """An empty range at ``offset``."""
        return cls(offset, 0)

    def resolve(self, text: str) -> tuple[int, int] | None:
        """String indices ``(start, end)`` of this range in ``text``, or None if out of bounds."""
        start = utf16_to_index(text, self.start)
        if start is None:
            return None
        end = utf16_to_index(text, self.end)
        if end is None:
            return None
        return start, end
