"""Envelope decoding for proxy responses.

The proxy forwards events from the model provider with only light
normalization, so a streamed ``data:`` payload can arrive in several
shapes. ``decode_envelope`` classifies a parsed JSON object into one of a
closed set of variants, tried in this order:

1. ``OutputTextDelta``: ``type == "response.output_text.delta"`` with a
   non-empty ``delta.text``
2. ``ContentDelta``: ``type`` ends with ``.delta`` and ``delta.content``
   is a list of parts
3. ``ResponseCompleted``: ``type == "response.completed"``
4. ``BareOutputText``: non-empty top-level ``output_text``
5. ``BareDeltaText``: non-empty top-level ``delta.text``

Anything else is ``Unrecognized`` and yields no text. One-shot bodies are
handled separately by ``extract_one_shot_text``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

OUTPUT_TEXT_DELTA = "response.output_text.delta"
RESPONSE_COMPLETED = "response.completed"
DELTA_SUFFIX = ".delta"


@dataclass(frozen=True)
class OutputTextDelta:
    """A single text delta."""

    text: str

    def fragments(self) -> list[str]:
        return [self.text]


@dataclass(frozen=True)
class ContentDelta:
    """A delta carrying a list of content parts.

    Attributes:
        parts: Texts of the qualifying parts, in list order.
    """

    parts: tuple[str, ...]

    def fragments(self) -> list[str]:
        return list(self.parts)


@dataclass(frozen=True)
class ResponseCompleted:
    """Terminal event; ``output_text`` is None when the event carries no text."""

    output_text: str | None

    def fragments(self) -> list[str]:
        return [self.output_text] if self.output_text else []


@dataclass(frozen=True)
class BareOutputText:
    text: str

    def fragments(self) -> list[str]:
        return [self.text]


@dataclass(frozen=True)
class BareDeltaText:
    text: str

    def fragments(self) -> list[str]:
        return [self.text]


@dataclass(frozen=True)
class Unrecognized:
    """A payload matching none of the known shapes."""

    payload: dict[str, Any]

    def fragments(self) -> list[str]:
        return []


Envelope = OutputTextDelta | ContentDelta | ResponseCompleted | BareOutputText | BareDeltaText | Unrecognized


def _non_empty_str(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _delta_text(obj: dict[str, Any]) -> str | None:
    delta = obj.get("delta")
    if isinstance(delta, dict):
        return _non_empty_str(delta.get("text"))
    return None


def _content_part_text(part: Any) -> str | None:
    if not isinstance(part, dict):
        return None
    # output_text parts and untyped parts both contribute their text
    return _non_empty_str(part.get("text"))


def decode_envelope(obj: dict[str, Any]) -> Envelope:
    """Classify a parsed streaming payload.

    Args:
        obj: A JSON object decoded from one ``data:`` line.

    Returns:
        The first matching envelope variant, or ``Unrecognized``.
    """
    event_type = obj.get("type")
    if isinstance(event_type, str):
        if event_type == OUTPUT_TEXT_DELTA:
            text = _delta_text(obj)
            if text is not None:
                return OutputTextDelta(text)

        if event_type.endswith(DELTA_SUFFIX):
            delta = obj.get("delta")
            content = delta.get("content") if isinstance(delta, dict) else None
            if isinstance(content, list):
                parts = tuple(t for t in map(_content_part_text, content) if t is not None)
                return ContentDelta(parts)

        if event_type == RESPONSE_COMPLETED:
            return ResponseCompleted(_non_empty_str(obj.get("output_text")))

    text = _non_empty_str(obj.get("output_text"))
    if text is not None:
        return BareOutputText(text)

    text = _delta_text(obj)
    if text is not None:
        return BareDeltaText(text)

    return Unrecognized(obj)


def extract_one_shot_text(body: Any) -> str:
    """Extract the combined text of a one-shot JSON response.

    Uses top-level ``output_text`` verbatim when present, otherwise
    concatenates the ``text`` of every part in ``output[0].content``.
    Returns an empty string when neither shape is found.
    """
    if not isinstance(body, dict):
        return ""

    output_text = body.get("output_text")
    if isinstance(output_text, str):
        return output_text

    output = body.get("output")
    if not isinstance(output, list) or not output or not isinstance(output[0], dict):
        return ""
    content = output[0].get("content")
    if not isinstance(content, list):
        return ""

    pieces = []
    for part in content:
        if isinstance(part, dict) and isinstance(part.get("text"), str):
            pieces.append(part["text"])
    return "".join(pieces)
