"""
WebSocket endpoint: one connection per player.

URL: /ws/{game_id}?name={player_name}

Connection flow:
  1. Accept, look up the session, join the lobby under the given name
  2. Read JSON intents (set_ready, start_game, night_action, vote, chat)
     and forward them to the session
  3. On close: remove the player from the session, and drop the session
     from the registry once nobody is left in it
"""

import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from api import game_store
from api.models import MAX_PLAYER_NAME_LENGTH, ErrorMessage, inbound_adapter
from game.messages import Notice, Notification
from game.session import JoinRejected

logger = logging.getLogger(__name__)

router = APIRouter()


class WebSocketChannel:
    """Outbound channel that writes notifications as JSON text frames."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket

    async def send(self, message: Notification) -> None:
        await self._websocket.send_json(message.model_dump(mode="json"))


async def _reject(websocket: WebSocket, reason: str) -> None:
    await websocket.send_json(ErrorMessage(message=reason).model_dump(mode="json"))
    await websocket.close(code=1008)


@router.websocket("/ws/{game_id}")
async def game_socket(websocket: WebSocket, game_id: str, name: str = Query(default="")):
    await websocket.accept()
    session = game_store.get(game_id)
    if session is None:
        await _reject(websocket, "Game not found")
        return
    if len(name) > MAX_PLAYER_NAME_LENGTH:
        await _reject(websocket, f"Name is longer than {MAX_PLAYER_NAME_LENGTH} characters")
        return

    channel = WebSocketChannel(websocket)
    try:
        player_id = await session.join(name, channel)
    except JoinRejected as e:
        await _reject(websocket, str(e))
        return

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = inbound_adapter.validate_json(raw)
            except ValidationError as e:
                logger.debug("Bad message from %s in %s: %s", player_id, game_id, e)
                await session.notify(player_id, Notice(reason="Malformed message"))
                continue
            await session.submit_intent(player_id, message.to_intent())
    except WebSocketDisconnect:
        logger.info("Socket closed for player %s in game %s", player_id, game_id)
    finally:
        await session.disconnect(player_id)
        if await session.is_abandoned():
            game_store.delete(game_id)
            logger.info("Game %s evicted: no players left", game_id)
