"""Structured JSON logging for issuecast.

Writes one JSON object per line to ``<data dir>/issuecast.log`` with rotation
(5MB, 3 backups). Records carry an ``event`` field naming what happened:

    connect / disconnect    a WebSocket client joined or left the hub
    send_failed             a broadcast send failed and the client was dropped
    client_error            a frame was rejected (bad JSON, unknown type, no such issue)
    mutation                a create/update/comment was saved; ``message_type`` holds the frame type
    commit / commit_failed  git recorded the change, or could not
    store_reset             issues.json was unreadable and was reset to ``[]``

Timestamps use the same UTC millisecond form as issue ``createdAt`` values.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

LOG_FILENAME = "issuecast.log"
_setup_lock = threading.Lock()
_MAX_BYTES = 5 * 1024 * 1024  # 5MB
_BACKUP_COUNT = 3

_EXTRA_FIELDS = ("event", "message_type", "error")


class _JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds")
        entry: dict[str, Any] = {
            "ts": ts.replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                entry[name] = getattr(record, name)
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = str(record.exc_info[1])
        return json.dumps(entry, default=str, ensure_ascii=False)


def setup_logging(data_dir: Path) -> logging.Logger:
    """Attach the rotating JSON handler for *data_dir* to the ``issuecast`` logger.

    Calling it again for the same directory is a no-op; a different directory
    replaces the previous handler.
    """
    logger = logging.getLogger("issuecast")
    log_path = data_dir / LOG_FILENAME
    target_filename = os.path.abspath(str(log_path))

    with _setup_lock:
        for h in logger.handlers[:]:
            if not isinstance(h, RotatingFileHandler):
                continue
            if h.baseFilename == target_filename:
                return logger
            logger.removeHandler(h)
            h.close()

        data_dir.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            str(log_path),
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setFormatter(_JsonFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger
