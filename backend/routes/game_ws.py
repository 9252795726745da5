from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket

from services.game_server import GameServer

router = APIRouter(tags=["game"])
logger = logging.getLogger(__name__)


@router.websocket("/")
async def ws_game(websocket: WebSocket) -> None:
    """
    Game channel. Each text frame is an envelope:
      {"type": str, "data": "<JSON string>", "id": int}
    Binary frames are not commands and are skipped.
    """
    game_server: GameServer = websocket.app.state.game_server
    try:
        await websocket.accept()
    except Exception as e:
        logger.warning("[game_ws] accept() failed: %s", e)
        return
    await game_server.connect(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                return
            raw = message.get("text")
            if raw is None:
                logger.debug("[game_ws] Ignoring non-text frame")
                continue
            await game_server.handle_message(websocket, raw)
    finally:
        game_server.disconnect(websocket)
