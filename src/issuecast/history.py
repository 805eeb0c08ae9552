"""History recorders: snapshot the issues file after each mutation.

Recording is best-effort. A recorder never raises to its caller; a failed
commit only leaves the history behind the data file.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR_NAME = "Issue Tracker"
DEFAULT_AUTHOR_EMAIL = "issue.tracker@example.com"


class HistoryRecorder(Protocol):
    def ensure_repository(self) -> None: ...

    def commit(self, message: str) -> bool:
        """Record a snapshot. Returns False when nothing was recorded."""
        ...


class NullRecorder:
    """Recorder that records nothing (``serve --no-git`` and tests)."""

    def ensure_repository(self) -> None:
        return None

    def commit(self, message: str) -> bool:
        logger.debug("History disabled, skipping commit: %s", message)
        return True


class GitRecorder:
    """Commit the issues file with the ``git`` binary.

    *root* is the working directory holding the repository; *tracked* is the
    file staged on every commit.
    """

    def __init__(self, root: Path, tracked: Path, *, git: str = "git") -> None:
        self.root = root
        self.tracked = tracked
        self.git = git

    def _run(self, *args: str) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            [self.git, *args],
            cwd=self.root,
            check=True,
            capture_output=True,
            text=True,
        )

    def ensure_repository(self) -> None:
        """Initialize a repository with a default identity if none exists."""
        if (self.root / ".git").exists():
            return
        try:
            self._run("init")
            self._run("config", "user.email", DEFAULT_AUTHOR_EMAIL)
            self._run("config", "user.name", DEFAULT_AUTHOR_NAME)
        except (OSError, subprocess.CalledProcessError) as exc:
            logger.warning("Could not initialize git repository in %s: %s", self.root, _describe(exc))
            return
        logger.info("Initialized new git repository in %s with default user", self.root)

    def commit(self, message: str) -> bool:
        try:
            self._run("add", "--", str(self.tracked))
            self._run("commit", "-m", message)
        except (OSError, subprocess.CalledProcessError) as exc:
            logger.warning(
                "Git commit failed (is git initialized?). Message: %s",
                message,
                extra={"event": "commit_failed", "error": _describe(exc)},
            )
            return False
        logger.info("Committed to git: %s", message, extra={"event": "commit"})
        return True


def _describe(exc: OSError | subprocess.CalledProcessError) -> str:
    if isinstance(exc, subprocess.CalledProcessError):
        output = (exc.stderr or exc.stdout or "").strip()
        return output or f"exit status {exc.returncode}"
    return str(exc)
