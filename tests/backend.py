"""
Minimal stand-in for the Agentarium API used by the client tests.

Serves the same health and filesystem endpoints and broadcasts the same
{"type", "data"} envelopes as the real backend.
"""

import json
from typing import Any, Dict, List

from fastapi import APIRouter, FastAPI, HTTPException, Query, WebSocket, WebSocketDisconnect

SAMPLE_LAYOUT = {
    "root": "/test",
    "folders": [
        {
            "path": "/test/src",
            "name": "src",
            "depth": 1,
            "file_count": 2,
            "position": {"x": 10.0, "y": 3.0, "z": 5.0},
            "height": 2.5,
        },
        {
            "path": "/test/src/components",
            "name": "components",
            "depth": 2,
            "file_count": 1,
            "position": {"x": 15.0, "y": 6.0, "z": 5.0},
            "height": 2.7,
        },
        {
            "path": "/test/docs",
            "name": "docs",
            "depth": 1,
            "file_count": 0,
            "position": {"x": -20.0, "y": 3.0, "z": 0.0},
            "height": 2.0,
        },
    ],
    "files": [
        {
            "path": "/test/src/index.ts",
            "name": "index.ts",
            "folder": "/test/src",
            "size": 1024,
            "position": {"x": 12.5, "y": 3.5, "z": 7.2},
        },
        {
            "path": "/test/src/app.ts",
            "name": "app.ts",
            "folder": "/test/src",
            "size": 2048,
            "position": {"x": 8.3, "y": 3.5, "z": 4.1},
        },
        {
            "path": "/test/src/components/button.tsx",
            "name": "button.tsx",
            "folder": "/test/src/components",
            "size": 512,
            "position": {"x": 18.0, "y": 6.5, "z": 5.0},
        },
        {
            "path": "/test/README.md",
            "name": "README.md",
            "folder": "/test",
            "size": 100,
            "position": {"x": 3.0, "y": 0.5, "z": 0.0},
        },
    ],
    "scanned_at": "2025-01-15T10:00:00+00:00",
}


class ConnectionManager:
    """Manages WebSocket client connections and broadcasts"""

    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)

    def disconnect(self, websocket: WebSocket):
        self.active_connections.remove(websocket)

    async def broadcast(self, message_type: str, data: Dict[str, Any]):
        message_json = json.dumps({"type": message_type, "data": data}, default=str)
        for connection in list(self.active_connections):
            await connection.send_text(message_json)


def create_app(layout: Dict[str, Any] = SAMPLE_LAYOUT) -> FastAPI:
    app = FastAPI()
    manager = ConnectionManager()
    app.state.manager = manager

    router = APIRouter(prefix="/api/filesystem", tags=["filesystem"])

    @router.get("")
    async def get_filesystem(path: str = Query(..., description="Root path to scan")):
        if path != layout["root"]:
            raise HTTPException(status_code=404, detail="Path not found")
        return layout

    app.include_router(router)

    @app.post("/api/events")
    async def broadcast_event(envelope: Dict[str, Any]):
        await manager.broadcast(envelope["type"], envelope["data"])
        return {"status": "ok"}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        await manager.connect(websocket)
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            manager.disconnect(websocket)

    return app
