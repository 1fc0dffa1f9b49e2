"""JSON-backed store of reusable text templates.

Templates are kept newest first and persisted as a pretty-printed JSON
list with ISO-8601 timestamps. Every mutation saves immediately; a
failing save is logged and the in-memory list stays authoritative.
"""

from __future__ import annotations

import logging
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


class TextTemplate(BaseModel):
    """A named snippet of text the user can insert into a document.

    Timestamps are stored under the camelCase keys used by the mobile app
    (``createdAt``, ``lastUsedAt``); snake_case keys are accepted on load.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: UUID = Field(default_factory=uuid4)
    name: str
    body: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), alias="createdAt")
    last_used_at: datetime | None = Field(default=None, alias="lastUsedAt")


_TEMPLATE_LIST = TypeAdapter(list[TextTemplate])


class TemplateStore:
    """Ordered list of templates persisted to a single JSON file.

    Usage::

        store = TemplateStore(settings.templates_path)
        store.add("Sign-off", "Best regards,\\nSam")
        store.delete([0])
    """

    def __init__(self, path: Path | str, *, autoload: bool = True) -> None:
        self.path = Path(path)
        self._templates: list[TextTemplate] = []
        if autoload:
            self.load()

    @property
    def templates(self) -> list[TextTemplate]:
        """Templates, newest first. The returned list is a copy."""
        return list(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def get(self, template_id: UUID) -> TextTemplate | None:
        for template in self._templates:
            if template.id == template_id:
                return template
        return None

    def add(self, name: str, body: str) -> TextTemplate | None:
        """Add a template at the top of the list.

        Args:
            name: Display name; surrounding whitespace is trimmed.
            body: Template text, stored verbatim.

        Returns:
            The new template, or None when the trimmed name is empty.
        """
        trimmed = name.strip()
        if not trimmed:
            logger.debug("Ignoring template with an empty name")
            return None

        template = TextTemplate(name=trimmed, body=body)
        self._templates.insert(0, template)
        self.save()
        return template

    def delete(self, indices: Iterable[int]) -> None:
        """Remove templates by position.

        Indices refer to the list as it was before the call; they are
        removed highest first so earlier removals do not shift later ones.
        Out-of-range indices are ignored.
        """
        for index in sorted(set(indices), reverse=True):
            if 0 <= index < len(self._templates):
                del self._templates[index]
        self.save()

    def mark_used(self, template_id: UUID) -> TextTemplate | None:
        """Stamp a template's ``last_used_at`` with the current time."""
        for i, template in enumerate(self._templates):
            if template.id == template_id:
                updated = template.model_copy(update={"last_used_at": datetime.now(UTC)})
                self._templates[i] = updated
                self.save()
                return updated
        return None

    def load(self) -> None:
        """Load templates from disk.

        A missing file gives an empty store; an unreadable or corrupt one
        is logged and also gives an empty store.
        """
        if not self.path.exists():
            self._templates = []
            return

        try:
            self._templates = _TEMPLATE_LIST.validate_json(self.path.read_bytes())
        except (OSError, ValidationError) as e:
            logger.warning("Failed to load templates from %s: %s", self.path, e)
            self._templates = []

    def save(self) -> None:
        """Write templates to disk atomically."""
        data = _TEMPLATE_LIST.dump_json(self._templates, indent=2, by_alias=True)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".templates-", suffix=".json")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.warning("Failed to save templates to %s: %s", self.path, e)
