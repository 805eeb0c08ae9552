"""Message dispatch: turns client frames into mutations, commits and broadcasts.

Every mutation runs load -> apply -> save -> commit -> broadcast under one
``asyncio.Lock``, so two clients never interleave a read-modify-write of the
issues file inside this process.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

from issuecast import mutations
from issuecast.hub import BroadcastHub

if TYPE_CHECKING:
    from starlette.websockets import WebSocket

    from issuecast.history import HistoryRecorder
    from issuecast.models import Issue
    from issuecast.store import IssueStore

logger = logging.getLogger(__name__)

ERR_INVALID_JSON = "Invalid JSON"
ERR_NOT_FOUND = "Issue not found"
ERR_UNKNOWN_TYPE = "Unknown message type"

MUTATION_TYPES = frozenset({"create_issue", "update_issue", "add_comment"})


def _apply(kind: str, issues: list[Issue], msg: dict[str, Any]) -> str:
    """Apply one mutation to *issues* and return its commit message."""
    if kind == "create_issue":
        _, message = mutations.create_issue(issues, msg.get("issue"))
    elif kind == "update_issue":
        _, message = mutations.update_issue(issues, msg.get("id"), msg.get("fields"), msg.get("actor"))
    else:
        _, message = mutations.add_comment(issues, msg.get("id"), msg.get("comment"))
    return message


class IssueTracker:
    def __init__(self, store: IssueStore, recorder: HistoryRecorder, hub: BroadcastHub | None = None) -> None:
        self.store = store
        self.recorder = recorder
        self.hub = hub or BroadcastHub()
        self._lock = asyncio.Lock()

    def snapshot(self) -> list[Issue]:
        return self.store.load()

    async def join(self, ws: WebSocket) -> None:
        await self.hub.connect(ws, self.snapshot())

    def leave(self, ws: WebSocket) -> None:
        self.hub.disconnect(ws)

    async def handle_message(self, raw: str, ws: WebSocket) -> bool:
        """Handle one inbound frame from *ws*. Returns True if a mutation was applied.

        Malformed frames, unknown types and unknown issue ids are reported to
        *ws* only and leave the stored collection untouched.
        """
        try:
            msg = json.loads(raw)
        except ValueError:
            await self.hub.send_error(ws, ERR_INVALID_JSON)
            return False

        kind = msg.get("type") if isinstance(msg, dict) else None
        if not isinstance(kind, str) or kind not in MUTATION_TYPES:
            await self.hub.send_error(ws, ERR_UNKNOWN_TYPE)
            return False

        async with self._lock:
            issues = self.store.load()
            try:
                commit_message = _apply(kind, issues, msg)
            except KeyError:
                await self.hub.send_error(ws, ERR_NOT_FOUND)
                return False
            self.store.save(issues)
            logger.info("Mutation applied: %s", commit_message, extra={"event": "mutation", "message_type": kind})
            await asyncio.to_thread(self.recorder.commit, commit_message)
            await self.hub.broadcast(issues)
        return True
