"""FastAPI application carrying the bridge wire protocol over a websocket."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from .relay import ClientMessage, SessionRelay
from .rooms import RoomManager
from .settings import Settings

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None, manager: Optional[RoomManager] = None
) -> FastAPI:
    """Build an application with its own room manager and relay.

    Settings default to the environment, so ``uvicorn --factory
    bridgecoop.web:create_app`` works as well as ``python -m bridgecoop``.
    """

    settings = settings or Settings.from_env()
    manager = manager or RoomManager()
    relay = SessionRelay(manager, verify_win=settings.verify_win)

    app = FastAPI(title="Bridge", description="Co-op bridge building relay")
    app.state.settings = settings
    app.state.manager = manager
    app.state.relay = relay

    @app.get("/health", response_class=PlainTextResponse)
    def health() -> str:
        return "ok"

    @app.get("/api/room/{room_id}")
    async def inspect_room(room_id: str) -> Dict[str, object]:
        room = manager.get(room_id.strip())
        if room is None:
            raise HTTPException(status_code=404, detail="Room not found")
        return {
            "roomId": room.room_id,
            "players": room.count,
            "grid": room.grid.to_wire(),
            "complete": room.grid.is_bridge_complete(),
        }

    @app.websocket("/ws")
    async def play(websocket: WebSocket) -> None:
        await websocket.accept()
        connection_id = uuid.uuid4().hex
        logger.info("conn %s", connection_id)

        async def send(payload: Dict[str, Any]) -> None:
            try:
                await websocket.send_json(payload)
            except WebSocketDisconnect as exc:
                raise RuntimeError("client went away") from exc

        await relay.on_connect(connection_id, send)
        try:
            while True:
                frame = await websocket.receive()
                if frame["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(frame.get("code", 1000), frame.get("reason"))
                raw = frame.get("text")
                if raw is None:
                    logger.debug("dropping non-text frame from %s", connection_id)
                    continue
                try:
                    message = ClientMessage.model_validate_json(raw)
                except ValidationError:
                    logger.debug("dropping malformed frame from %s", connection_id)
                    continue
                await relay.dispatch(connection_id, message)
        except WebSocketDisconnect:
            pass
        finally:
            await relay.on_disconnect(connection_id)

    return app
