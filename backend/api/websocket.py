"""
WebSocket Handler

Streams analysis progress for a background run.
The server pushes a message whenever the run's state or progress
changes, then a final completed / failed / cancelled message.
"""

import time
import logging
import asyncio
from fastapi import WebSocket, WebSocketDisconnect

from .schemas import (
    AnalysisStateEnum,
    ProgressMessage,
    WebSocketMessage,
    WebSocketMessageType,
)
from .jobs import jobs
from core.domain.analysis import AnalysisRun, AnalysisState
from core.exceptions import RunNotFound

# Configure logging
logger = logging.getLogger(__name__)

_FINAL_MESSAGE_TYPES = {
    AnalysisState.DONE: WebSocketMessageType.COMPLETED,
    AnalysisState.FAILED: WebSocketMessageType.FAILED,
    AnalysisState.CANCELLED: WebSocketMessageType.CANCELLED,
}


class ConnectionManager:
    """
    Manages WebSocket connections.

    Keeps track of which connections follow which analysis run.
    """

    def __init__(self):
        self.active_connections: dict[WebSocket, str] = {}

    async def connect(self, websocket: WebSocket, run_id: str) -> None:
        """Accept new WebSocket connection."""
        await websocket.accept()
        self.active_connections[websocket] = run_id
        logger.info(f"New WebSocket connection for run {run_id}. Total: {len(self.active_connections)}")

    def disconnect(self, websocket: WebSocket) -> None:
        """Handle WebSocket disconnection."""
        self.active_connections.pop(websocket, None)
        logger.info(f"WebSocket disconnected. Remaining: {len(self.active_connections)}")

    async def send_json(self, websocket: WebSocket, data: dict) -> None:
        """Send JSON data to a specific connection."""
        try:
            await websocket.send_json(data)
        except Exception as e:
            logger.error(f"Failed to send WebSocket message: {e}")


# Global connection manager
manager = ConnectionManager()


def build_message(run: AnalysisRun) -> dict:
    """Message describing the run's current status."""
    message_type = _FINAL_MESSAGE_TYPES.get(run.state, WebSocketMessageType.PROGRESS)
    payload = ProgressMessage(
        run_id=run.id,
        state=AnalysisStateEnum(run.state.value),
        progress=run.progress,
        report=run.report if run.state == AnalysisState.DONE else None,
        error=run.error if run.state == AnalysisState.FAILED else None,
    )
    return envelope(message_type, payload.model_dump(mode="json"))


def envelope(message_type: WebSocketMessageType, data: dict) -> dict:
    """Wrap a payload in the WebSocketMessage format."""
    return WebSocketMessage(
        type=message_type,
        data=data,
        timestamp=int(time.time() * 1000),
    ).model_dump(mode="json")


async def websocket_endpoint(websocket: WebSocket, run_id: str) -> None:
    """
    WebSocket endpoint for analysis progress.

    Protocol:
    1. Client connects to /ws/analysis/{run_id}
    2. Server sends the current status immediately
    3. Server sends a "progress" message on every change
    4. Server sends "completed", "failed" or "cancelled" and closes

    Message format (server -> client):
    {
        "type": "progress",
        "data": {
            "run_id": "...",
            "state": "extracting",
            "progress": 0.5,
            "report": null,
            "error": null
        },
        "timestamp": 1704067200025
    }
    """
    await manager.connect(websocket, run_id)

    try:
        try:
            run = jobs.get(run_id)
        except RunNotFound as e:
            await manager.send_json(websocket, envelope(WebSocketMessageType.ERROR, e.to_dict()))
            await websocket.close()
            return

        updates: asyncio.Queue = asyncio.Queue()

        def on_update(changed: AnalysisRun) -> None:
            updates.put_nowait(build_message(changed))

        run.add_listener(on_update)
        try:
            message = build_message(run)
            await manager.send_json(websocket, message)

            # Main message loop, ends after the final status message
            while message["type"] == WebSocketMessageType.PROGRESS.value:
                message = await updates.get()
                await manager.send_json(websocket, message)
        finally:
            run.remove_listener(on_update)

        await websocket.close()

    except WebSocketDisconnect:
        logger.info("Client disconnected")
    finally:
        manager.disconnect(websocket)
