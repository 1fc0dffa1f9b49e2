"""Scribe: AI-assisted rewriting and continuation for a text editor.

The package is split into:
- ``scribe.completion``: request types, envelope decoding and the
  streaming client that talks to the AI proxy
- ``scribe.editing``: selection-scoped text mutation and the editing
  session that drives one AI action at a time
- ``scribe.templates``: JSON-backed store of reusable text snippets
"""

__version__ = "0.1.0"
