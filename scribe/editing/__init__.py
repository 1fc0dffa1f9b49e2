"""Selection-scoped text mutation and the AI editing session."""

from scribe.editing.mutator import MutationResult, apply, selection_string
from scribe.editing.session import EditorSession, SessionState
from scribe.editing.text_range import TextRange, clamp_to_index, utf16_length, utf16_to_index

__all__ = [
    "EditorSession",
    "MutationResult",
    "SessionState",
    "TextRange",
    "apply",
    "clamp_to_index",
    "selection_string",
    "utf16_length",
    "utf16_to_index",
]
