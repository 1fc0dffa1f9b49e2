"""Editing session that runs AI actions against a document buffer.

One AI action runs at a time per session and moves through
``IDLE -> REQUESTING -> STREAMING -> APPLYING -> IDLE``. Generated text is
buffered and only applied once the completion finishes; a failed or
cancelled completion returns straight to ``IDLE`` without touching the
document.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING

from scribe import prompts
from scribe.completion.request import CompletionMode
from scribe.editing.mutator import apply, selection_string
from scribe.editing.text_range import TextRange, utf16_length
from scribe.exceptions import CompletionCancelledError, SessionBusyError

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from scribe.completion.client import CompletionHandle, StreamingCompletionClient
    from scribe.completion.request import CompletionRequest
    from scribe.templates import TemplateStore, TextTemplate

logger = logging.getLogger(__name__)


class SessionState(StrEnum):
    """Lifecycle of a single AI action."""

    IDLE = "idle"
    REQUESTING = "requesting"
    STREAMING = "streaming"
    APPLYING = "applying"


class EditorSession:
    """Document text and selection plus the AI actions that edit them.

    The UI owns rendering; it reads ``text`` and ``selection`` after each
    action and writes them back when the user types or moves the caret.

    Usage::

        session = EditorSession(client, text="Dear team,")
        session.selection = TextRange.caret(10)
        await session.continue_writing("Announce the release")
    """

    def __init__(
        self,
        client: StreamingCompletionClient,
        text: str = "",
        selection: TextRange | None = None,
        *,
        on_fragment: Callable[[str], None] | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            client: Completion client used for every AI action.
            text: Initial document text.
            selection: Initial selection; defaults to a caret at the end.
            on_fragment: Called with each fragment as it arrives, for a
                live preview. The document is not changed until the
                completion finishes.
        """
        self._client = client
        self.text = text
        self.selection = selection or TextRange.caret(utf16_length(text))
        self.on_fragment = on_fragment
        self.state = SessionState.IDLE
        self.last_instruction: str | None = None
        self._handle: CompletionHandle | None = None

    @property
    def busy(self) -> bool:
        return self.state is not SessionState.IDLE

    def selected_text(self) -> str | None:
        return selection_string(self.text, self.selection)

    def _ensure_idle(self) -> None:
        if self.busy:
            raise SessionBusyError(f"An AI action is already in progress ({self.state})")

    # -- AI actions ---------------------------------------------------------

    async def rewrite_selection(self, instruction: str) -> bool:
        """Rewrite the selected text following ``instruction``.

        The range selected when the action starts is the one replaced,
        and the rewritten text is left selected.

        Returns:
            True if the document was changed; False when there is no
            selection or the action was cancelled.

        Raises:
            SessionBusyError: Another action is in flight.
            TransportError: The proxy request failed; the document is unchanged.
        """
        target = self.selection
        selected = selection_string(self.text, target)
        if selected is None:
            return False

        self._ensure_idle()
        self.last_instruction = instruction
        request = self._client.build_request(
            CompletionMode.REWRITE,
            instruction,
            selection=selected,
            system_instruction=prompts.REWRITE_SYSTEM,
        )
        return await self._run(request, target, select_result=True)

    async def continue_writing(self, prompt: str) -> bool:
        """Generate text from ``prompt`` and insert it after the caret or selection."""
        self._ensure_idle()
        target = TextRange.caret(self.selection.end)
        request = self._client.build_request(
            CompletionMode.CONTINUE,
            prompt,
            system_instruction=prompts.CONTINUE_SYSTEM,
        )
        return await self._run(request, target, select_result=False)

    async def regenerate(self) -> bool:
        """Replay the last rewrite instruction against the current selection."""
        if self.last_instruction is None:
            return False
        return await self.rewrite_selection(self.last_instruction)

    async def improve(self) -> bool:
        return await self.rewrite_selection(prompts.IMPROVE_INSTRUCTION)

    async def shorten(self) -> bool:
        return await self.rewrite_selection(prompts.SHORTEN_INSTRUCTION)

    async def expand(self) -> bool:
        return await self.rewrite_selection(prompts.EXPAND_INSTRUCTION)

    async def submit_prompt(self, prompt: str) -> bool:
        """Rewrite the selection with ``prompt``, or continue writing when nothing is selected."""
        if self.selected_text() is not None:
            return await self.rewrite_selection(prompt)
        return await self.continue_writing(prompt)

    def cancel(self) -> None:
        """Abandon the in-flight AI action, if any."""
        if self._handle is not None:
            self._handle.cancel()

    async def _run(self, request: CompletionRequest, target: TextRange, *, select_result: bool) -> bool:
        self.state = SessionState.REQUESTING
        buffer: list[str] = []
        try:
            self._handle = self._client.start(request)
            try:
                async for fragment in self._handle:
                    self.state = SessionState.STREAMING
                    buffer.append(fragment)
                    if self.on_fragment is not None:
                        self.on_fragment(fragment)
            except CompletionCancelledError:
                logger.info("AI %s cancelled; document left unchanged", request.mode.value)
                return False
            finally:
                # No-op once the completion has finished or failed
                await self._handle.aclose()
                self._handle = None

            self.state = SessionState.APPLYING
            self._apply(target, "".join(buffer), select_result=select_result)
            return True
        finally:
            self.state = SessionState.IDLE

    def _apply(self, target: TextRange, replacement: str, *, select_result: bool) -> None:
        in_bounds = target.resolve(self.text) is not None
        result = apply(self.text, target, replacement)
        self.text = result.text
        if select_result and in_bounds:
            self.selection = TextRange(target.start, utf16_length(replacement))
        else:
            self.selection = result.caret

    # -- Templates ----------------------------------------------------------

    def insert_template(self, store: TemplateStore, template_id: UUID) -> bool:
        """Replace the selection (or insert at the caret) with a template's body."""
        self._ensure_idle()
        template = store.get(template_id)
        if template is None:
            return False
        result = apply(self.text, self.selection, template.body)
        self.text = result.text
        self.selection = result.caret
        store.mark_used(template_id)
        return True

    def save_as_template(self, store: TemplateStore, name: str) -> TextTemplate | None:
        """Save the whole document as a new template."""
        return store.add(name, self.text)
