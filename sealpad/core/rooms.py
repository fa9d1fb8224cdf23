import asyncio
import logging
import threading
from typing import Dict, List, Set

from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from sealpad.core.errors import NoteError
from sealpad.core.messages import ErrorMessage, InitMessage, UpdateMessage
from sealpad.core.note import MAX_CONTENT_LENGTH, NoteService, is_valid_id
from sealpad.utils.logger import short_id

logger = logging.getLogger(__name__)


class RoomClient:
    """
    One live connection as seen by the broadcaster. The transport supplies
    the concrete adapter (see sealpad.api.live.WebSocketClient).
    """

    async def send(self, message: BaseModel) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        raise NotImplementedError


class RoomBroadcaster:
    """
    Tracks which connections are subscribed to which note id and relays
    live edits between them. Last writer wins: every update overwrites the
    stored note and is pushed as-is to the other members.
    """

    def __init__(self, notes: NoteService):
        self.notes = notes
        self._rooms: Dict[str, Set[RoomClient]] = {}
        # Orders join's load + init against update's write + broadcast
        self._room_locks: Dict[str, asyncio.Lock] = {}
        self._lock = threading.Lock()

    async def join(self, room_id: str, client: RoomClient) -> bool:
        if not is_valid_id(room_id):
            await self._deliver(client, ErrorMessage(message="Invalid ID"))
            await client.close()
            return False

        async with self._room_lock(room_id):
            with self._lock:
                self._rooms.setdefault(room_id, set()).add(client)

            try:
                content = await run_in_threadpool(self.notes.live_content, room_id)
            except NoteError:
                await self._deliver(client, ErrorMessage(message="Failed to load note"))
            else:
                await self._deliver(client, InitMessage(content=content))

        logger.info("Client connected to room %s (%d members)", short_id(room_id), self.room_size(room_id))
        return True

    async def update(self, room_id: str, sender: RoomClient, content) -> None:
        # Empty means nothing typed yet, not an edit
        if not content or not isinstance(content, str):
            return

        if len(content) > MAX_CONTENT_LENGTH:
            await self._deliver(sender, ErrorMessage(message="Note too large (max 100KB)"))
            return

        async with self._room_lock(room_id):
            try:
                await run_in_threadpool(self.notes.apply_live_update, room_id, content)
            except NoteError as e:
                logger.warning("Live update rejected for room %s: %s", short_id(room_id), e.code.value)
                await self._deliver(sender, ErrorMessage(message="Failed to save note"))
                return

            await self.broadcast(room_id, UpdateMessage(content=content), exclude=sender)

    def leave(self, room_id: str, client: RoomClient) -> None:
        with self._lock:
            members = self._rooms.get(room_id)
            if members is None:
                return
            members.discard(client)
            if not members:
                del self._rooms[room_id]
                lock = self._room_locks.get(room_id)
                if lock is not None and not lock.locked():
                    del self._room_locks[room_id]
        logger.debug("Client left room %s", short_id(room_id))

    async def broadcast(self, room_id: str, message: BaseModel, exclude: RoomClient = None) -> None:
        with self._lock:
            recipients = [c for c in self._rooms.get(room_id, ()) if c is not exclude]
        if recipients:
            await asyncio.gather(*(self._deliver(c, message) for c in recipients))

    def room_size(self, room_id: str) -> int:
        with self._lock:
            return len(self._rooms.get(room_id, ()))

    def active_rooms(self) -> List[str]:
        with self._lock:
            return list(self._rooms)

    def _room_lock(self, room_id: str) -> asyncio.Lock:
        with self._lock:
            return self._room_locks.setdefault(room_id, asyncio.Lock())

    async def _deliver(self, client: RoomClient, message: BaseModel) -> None:
        try:
            await client.send(message)
        except Exception as e:
            logger.warning("Send to client failed: %s", e)
