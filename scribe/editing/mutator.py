"""Apply generated text to a document buffer.

The document text is never owned here: callers pass the current text and
a range, and get back new text plus the caret to show afterwards. Ranges
that no longer fit the text (stale after an edit, or simply out of
bounds) degrade to an insertion at the nearest valid offset so generated
text is never dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from scribe.editing.text_range import TextRange, clamp_to_index, utf16_length

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MutationResult:
    """New document text and the caret to place after the edit."""

    text: str
    caret: TextRange


def apply(text: str, target: TextRange, replacement: str) -> MutationResult:
    """Replace ``target`` in ``text`` with ``replacement``.

    Args:
        text: Current document text.
        target: Range to replace, in UTF-16 code units.
        replacement: Text to put in its place.

    Returns:
        The new text and a collapsed caret right after the inserted text.
        Callers doing a rewrite may choose to select the inserted span
        instead (``TextRange(target.start, utf16_length(replacement))``).
    """
    resolved = target.resolve(text)
    if resolved is not None:
        start, end = resolved
        new_text = text[:start] + replacement + text[end:]
        return MutationResult(new_text, TextRange.caret(target.start + utf16_length(replacement)))

    index = clamp_to_index(text, target.start)
    logger.debug(
        "Range (%d, %d) is outside a text of %d units; inserting at index %d",
        target.start,
        target.length,
        utf16_length(text),
        index,
    )
    new_text = text[:index] + replacement + text[index:]
    insert_at = utf16_length(text[:index])
    return MutationResult(new_text, TextRange.caret(insert_at + utf16_length(replacement)))


def selection_string(text: str, selection: TextRange) -> str | None:
    """Selected substring, or None for an empty or out-of-bounds range."""
    if selection.is_empty:
        return None
    resolved = selection.resolve(text)
    if resolved is None:
        return None
    start, end = resolved
    return text[start:end]
