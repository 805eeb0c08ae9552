"""Runtime settings resolved from CLI options and environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from issuecast.store import ISSUES_FILENAME

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3000
DEFAULT_HOST = "127.0.0.1"

ENV_PORT = "PORT"
ENV_HOST = "ISSUECAST_HOST"
ENV_DATA_DIR = "ISSUECAST_DATA_DIR"
ENV_NO_GIT = "ISSUECAST_NO_GIT"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class Settings:
    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    data_dir: Path = Path(".")
    git: bool = True

    @property
    def issues_path(self) -> Path:
        return self.data_dir / ISSUES_FILENAME


def _env_port() -> int:
    raw = os.environ.get(ENV_PORT)
    if raw is None or not raw.strip():
        return DEFAULT_PORT
    try:
        port = int(raw)
    except ValueError:
        logger.warning("Invalid %s value %r; using default %d", ENV_PORT, raw, DEFAULT_PORT)
        return DEFAULT_PORT
    if not (1 <= port <= 65535):
        logger.warning("%s %d out of range (1-65535); using default %d", ENV_PORT, port, DEFAULT_PORT)
        return DEFAULT_PORT
    return port


def resolve_settings(
    *,
    port: int | None = None,
    host: str | None = None,
    data_dir: Path | None = None,
    git: bool | None = None,
) -> Settings:
    """Explicit arguments win; otherwise fall back to the environment, then defaults."""
    if data_dir is None:
        env_dir = os.environ.get(ENV_DATA_DIR)
        data_dir = Path(env_dir) if env_dir else Path.cwd()
    if git is None:
        git = os.environ.get(ENV_NO_GIT, "").strip().lower() not in _TRUE_VALUES
    return Settings(
        port=port if port is not None else _env_port(),
        host=host or os.environ.get(ENV_HOST) or DEFAULT_HOST,
        data_dir=data_dir.resolve(),
        git=git,
    )
