# sealpad/api/live.py

import logging
from typing import Optional

from fastapi import APIRouter, WebSocket
from pydantic import BaseModel
from starlette.websockets import WebSocketState

from sealpad.core.messages import parse_client_frame
from sealpad.core.rooms import RoomBroadcaster, RoomClient

logger = logging.getLogger(__name__)

router = APIRouter()

# Policy violation
CLOSE_INVALID_ID = 1008


class WebSocketClient(RoomClient):
    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    async def send(self, message: BaseModel):
        await self.websocket.send_json(message.model_dump())

    async def close(self):
        if self.websocket.application_state != WebSocketState.DISCONNECTED:
            await self.websocket.close(code=CLOSE_INVALID_ID)


def _frame_text(event: dict) -> Optional[str]:
    """Text of a websocket.receive event; binary frames are read as UTF-8."""
    if event.get("text") is not None:
        return event["text"]
    try:
        return (event.get("bytes") or b"").decode("utf-8")
    except UnicodeDecodeError:
        return None


@router.websocket("/ws")
async def live_note(websocket: WebSocket):
    """Live-edit channel for one note: /ws?id=<note id>"""
    rooms: RoomBroadcaster = websocket.app.state.rooms
    room_id = websocket.query_params.get("id", "")
    client = WebSocketClient(websocket)

    await websocket.accept()
    if not await rooms.join(room_id, client):
        logger.debug("WS rejected: invalid id")
        return

    try:
        while True:
            event = await websocket.receive()
            if event["type"] == "websocket.disconnect":
                break
            raw = _frame_text(event)
            message = parse_client_frame(raw) if raw is not None else None
            if message is None:
                logger.debug("Dropped malformed frame")
                continue
            await rooms.update(room_id, client, message.content)
    finally:
        rooms.leave(room_id, client)
