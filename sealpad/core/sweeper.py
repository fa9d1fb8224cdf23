import asyncio
import logging
from typing import Optional

from starlette.concurrency import run_in_threadpool

from sealpad.config import SWEEP_INTERVAL_SECONDS
from sealpad.core.note import now_ms
from sealpad.infra.note_store import NoteStore

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Deletes expired notes nobody comes back to read."""

    def __init__(self, store: NoteStore, interval: float = SWEEP_INTERVAL_SECONDS):
        self.store = store
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    def sweep_once(self, now: Optional[int] = None) -> int:
        try:
            count = self.store.delete_expired(now_ms() if now is None else now)
        except Exception:
            logger.exception("Cleanup error")
            return 0
        if count > 0:
            logger.info("Cleaned up %d expired notes", count)
        return count

    async def run(self):
        while True:
            await asyncio.sleep(self.interval)
            await run_in_threadpool(self.sweep_once)

    def start(self):
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.run())

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()
