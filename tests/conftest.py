"""Shared pytest fixtures for issuecast tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from issuecast.store import ISSUES_FILENAME, IssueStore, JsonFileBackend, MemoryBackend
from tests._fakes import RecordingRecorder


@pytest.fixture
def recorder() -> RecordingRecorder:
    return RecordingRecorder()


@pytest.fixture
def memory_store() -> IssueStore:
    """Store over an in-memory backend that already holds an empty collection."""
    return IssueStore(MemoryBackend("[]"))


@pytest.fixture
def issues_path(tmp_path: Path) -> Path:
    return tmp_path / ISSUES_FILENAME


@pytest.fixture
def file_store(issues_path: Path, recorder: RecordingRecorder) -> IssueStore:
    return IssueStore(JsonFileBackend(issues_path), recorder=recorder)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def populated_dir(tmp_path: Path) -> Generator[Path, None, None]:
    """A data dir whose issues.json holds two issues, one with comments."""
    (tmp_path / ISSUES_FILENAME).write_text(
        """[
  {
    "id": 2,
    "title": "Login fails",
    "description": "500 on submit",
    "status": "In Progress",
    "createdBy": "Alice",
    "createdAt": "2024-03-01T10:00:00.000Z",
    "comments": [
      {"author": "Bob", "text": "Reproduced", "createdAt": "2024-03-01T11:00:00.000Z"},
      {"author": "Alice", "text": "Fix incoming", "createdAt": "2024-03-01T12:00:00.000Z"}
    ]
  },
  {
    "id": 1,
    "title": "Typo on homepage",
    "description": "",
    "status": "Closed",
    "createdBy": "Carol",
    "createdAt": "2024-02-01T09:00:00.000Z",
    "comments": []
  }
]
"""
    )
    yield tmp_path
