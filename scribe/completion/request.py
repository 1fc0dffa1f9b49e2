"""Completion request sent to the AI proxy."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CompletionMode(StrEnum):
    """What the proxy is asked to do with the prompt."""

    REWRITE = "rewrite"
    CONTINUE = "continue"


class CompletionRequest(BaseModel):
    """A single user-initiated completion.

    Built per AI action and discarded once the response completes or
    fails. ``selection`` is only meaningful for rewrites.
    """

    model_config = ConfigDict(frozen=True)

    mode: CompletionMode
    prompt: str
    selection: str | None = None
    system_instruction: str | None = Field(default=None, description="System prompt for the model")
    model: str
    stream_requested: bool = False

    @model_validator(mode="after")
    def _selection_only_for_rewrite(self) -> CompletionRequest:
        if self.selection is not None and self.mode is not CompletionMode.REWRITE:
            raise ValueError("selection is only allowed for rewrite requests")
        return self

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the proxy's JSON body."""
        return {
            "mode": self.mode.value,
            "prompt": self.prompt,
            "selection": self.selection,
            "system": self.system_instruction,
            "model": self.model,
            "stream": self.stream_requested,
        }
