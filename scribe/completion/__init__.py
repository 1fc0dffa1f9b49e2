"""Completion requests, envelope decoding and the proxy client."""

from scribe.completion.client import CompletionHandle, StreamingCompletionClient, parse_sse_line
from scribe.completion.envelopes import decode_envelope, extract_one_shot_text
from scribe.completion.request import CompletionMode, CompletionRequest

__all__ = [
    "CompletionHandle",
    "CompletionMode",
    "CompletionRequest",
    "StreamingCompletionClient",
    "decode_envelope",
    "extract_one_shot_text",
    "parse_sse_line",
]
