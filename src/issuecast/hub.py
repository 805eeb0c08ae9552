"""Fan-out of issue snapshots to connected WebSocket clients."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from starlette.websockets import WebSocketDisconnect, WebSocketState

if TYPE_CHECKING:
    from starlette.websockets import WebSocket

    from issuecast.models import Issue

logger = logging.getLogger(__name__)

MSG_INIT = "init"
MSG_UPDATE = "update"
MSG_ERROR = "error"


def snapshot_message(kind: str, issues: list[Issue]) -> dict[str, Any]:
    return {"type": kind, "issues": [i.to_dict() for i in issues]}


def _is_open(ws: WebSocket) -> bool:
    return ws.client_state == WebSocketState.CONNECTED and ws.application_state == WebSocketState.CONNECTED


class BroadcastHub:
    """Tracks open connections and sends them full-collection snapshots."""

    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()

    def __len__(self) -> int:
        return len(self._connections)

    async def connect(self, ws: WebSocket, issues: list[Issue]) -> None:
        """Accept *ws*, register it, and send it alone the ``init`` snapshot.

        If the ``init`` send fails the socket is unregistered and the error
        propagates.
        """
        await ws.accept()
        self._connections.add(ws)
        logger.info("Client connected", extra={"event": "connect"})
        try:
            await ws.send_text(json.dumps(snapshot_message(MSG_INIT, issues)))
        except BaseException:
            self.disconnect(ws)
            raise

    def disconnect(self, ws: WebSocket) -> None:
        if ws in self._connections:
            self._connections.discard(ws)
            logger.info("Client disconnected", extra={"event": "disconnect"})

    async def broadcast(self, issues: list[Issue]) -> int:
        """Send an ``update`` snapshot to every open connection.

        Connections that are not open are skipped. A connection whose send
        fails is dropped. Returns the number of clients reached.
        """
        text = json.dumps(snapshot_message(MSG_UPDATE, issues))
        delivered = 0
        for ws in list(self._connections):
            if not _is_open(ws):
                continue
            try:
                await ws.send_text(text)
            except (WebSocketDisconnect, RuntimeError, OSError) as exc:
                logger.warning("Dropping client after failed send", extra={"event": "send_failed", "error": str(exc)})
                self._connections.discard(ws)
                continue
            delivered += 1
        return delivered

    async def send_error(self, ws: WebSocket, message: str) -> None:
        logger.warning("Client error: %s", message, extra={"event": "client_error"})
        await ws.send_text(json.dumps({"type": MSG_ERROR, "message": message}))
