"""Web server for issuecast: static UI, read-only JSON API, and the live WebSocket.

A module-level ``_tracker`` is set at startup by ``main()`` (or by test
fixtures) and injected into HTTP routes via ``Depends(_get_tracker)``.

Usage:
    issuecast serve                       # http://127.0.0.1:3000
    issuecast serve --port 9000           # Custom port (or PORT=9000)
    issuecast serve --no-git              # Skip git history
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException, WebSocket
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.staticfiles import StaticFiles

from issuecast.config import Settings
from issuecast.history import GitRecorder, HistoryRecorder, NullRecorder
from issuecast.store import IssueStore, JsonFileBackend
from issuecast.tracker import IssueTracker

STATIC_DIR = Path(__file__).parent / "static"
WS_PATH = "/ws"

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Module-level state, set by main() or test fixtures
# ---------------------------------------------------------------------------

_tracker: IssueTracker | None = None


def _get_tracker() -> IssueTracker:
    if _tracker is None:
        raise HTTPException(status_code=500, detail="Tracker not initialized")
    return _tracker


def build_tracker(settings: Settings) -> IssueTracker:
    """Wire store, recorder and hub for *settings*; ensure the repo and data file exist."""
    recorder: HistoryRecorder
    if settings.git:
        recorder = GitRecorder(settings.data_dir, settings.issues_path)
    else:
        recorder = NullRecorder()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    recorder.ensure_repository()
    store = IssueStore(JsonFileBackend(settings.issues_path), recorder=recorder)
    store.ensure_exists()
    return IssueTracker(store, recorder)


def create_app() -> FastAPI:
    app = FastAPI(title="issuecast", docs_url=None, redoc_url=None)

    # NOTE: Handlers are async despite doing synchronous file I/O so that all
    # reads and writes of issues.json run on the event loop thread.

    @app.get("/", response_class=HTMLResponse)
    async def index() -> HTMLResponse:
        html = (STATIC_DIR / "index.html").read_text()
        return HTMLResponse(html)

    @app.get("/api/issues")
    async def api_issues(tracker: IssueTracker = Depends(_get_tracker)) -> JSONResponse:
        issues = tracker.snapshot()
        return JSONResponse([i.to_dict() for i in issues])

    @app.get("/api/health")
    async def api_health(tracker: IssueTracker = Depends(_get_tracker)) -> JSONResponse:
        return JSONResponse({"status": "ok", "issues": len(tracker.snapshot()), "clients": len(tracker.hub)})

    @app.websocket(WS_PATH)
    async def live(websocket: WebSocket) -> None:
        tracker = _tracker
        if tracker is None:
            await websocket.close(code=1011)
            return
        try:
            await tracker.join(websocket)
            while True:
                frame = await websocket.receive()
                if frame["type"] == "websocket.disconnect":
                    break
                raw = frame.get("text")
                if raw is None:
                    raw = (frame.get("bytes") or b"").decode("utf-8", errors="replace")
                await tracker.handle_message(raw, websocket)
        finally:
            tracker.leave(websocket)

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    return app


def main(settings: Settings) -> None:
    """Start the server. Fails only if the port cannot be bound."""
    import uvicorn

    from issuecast.logging import setup_logging

    global _tracker

    setup_logging(settings.data_dir)
    _tracker = build_tracker(settings)
    app = create_app()

    logger.info("Serving %s on %s:%d (git=%s)", settings.issues_path, settings.host, settings.port, settings.git)
    print(f"issuecast: http://{settings.host}:{settings.port}")
    print("Open this URL in multiple browser windows to see live updates.")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level="warning")
