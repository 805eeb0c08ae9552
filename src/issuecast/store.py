"""Persistence for the issue collection.

The whole collection is the unit of storage: every load parses the full
document and every save rewrites it. ``IssueStore`` holds the parsing and
recovery rules; a ``StorageBackend`` only moves text, so tests can swap the
JSON file for ``MemoryBackend``.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from issuecast.models import Issue

if TYPE_CHECKING:
    from issuecast.history import HistoryRecorder

logger = logging.getLogger(__name__)

ISSUES_FILENAME = "issues.json"
EMPTY_COLLECTION = "[]"
INITIAL_COMMIT_MESSAGE = "Initial issues.json created by server"


def write_atomic(path: Path, content: str) -> None:
    """Write content to path atomically via temp file + os.replace()."""
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp.write_text(content, encoding="utf-8")
        os.replace(tmp, path)
    except BaseException:
        with contextlib.suppress(OSError):
            tmp.unlink()
        raise


class StorageBackend(Protocol):
    """Raw text storage for the serialized collection."""

    @property
    def location(self) -> str: ...

    def read(self) -> str | None:
        """Return the stored document, or None if nothing has been stored yet."""
        ...

    def write(self, text: str) -> None: ...


class JsonFileBackend:
    def __init__(self, path: Path) -> None:
        self.path = path

    @property
    def location(self) -> str:
        return str(self.path)

    def read(self) -> str | None:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def write(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        write_atomic(self.path, text)


class MemoryBackend:
    def __init__(self, text: str | None = None) -> None:
        self.text = text
        self.writes = 0

    @property
    def location(self) -> str:
        return "<memory>"

    def read(self) -> str | None:
        return self.text

    def write(self, text: str) -> None:
        self.text = text
        self.writes += 1


def serialize_issues(issues: list[Issue]) -> str:
    return json.dumps([i.to_dict() for i in issues], indent=2, ensure_ascii=False) + "\n"


class IssueStore:
    """Load and save the full issue collection through a backend.

    When the backend holds nothing yet, ``load()`` stores an empty collection
    and asks the optional *recorder* to commit it.
    """

    def __init__(self, backend: StorageBackend, *, recorder: HistoryRecorder | None = None) -> None:
        self.backend = backend
        self.recorder = recorder

    def ensure_exists(self) -> None:
        if self.backend.read() is not None:
            return
        self.backend.write(EMPTY_COLLECTION)
        logger.info("Created empty issue collection at %s", self.backend.location)
        if self.recorder is not None:
            self.recorder.commit(INITIAL_COMMIT_MESSAGE)

    def load(self) -> list[Issue]:
        """Return every stored issue. A corrupt document is reset to empty."""
        self.ensure_exists()
        raw = self.backend.read() or ""
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a JSON array, got {type(data).__name__}")
        except ValueError as exc:
            # json.JSONDecodeError subclasses ValueError
            logger.error(
                "Could not parse %s, resetting to []",
                self.backend.location,
                extra={"event": "store_reset", "error": str(exc)},
            )
            self.backend.write(EMPTY_COLLECTION)
            return []

        issues: list[Issue] = []
        for record in data:
            if not isinstance(record, dict):
                logger.warning("Skipping non-object record in %s: %r", self.backend.location, record)
                continue
            issues.append(Issue.from_dict(record))
        return issues

    def save(self, issues: list[Issue]) -> None:
        self.backend.write(serialize_issues(issues))
