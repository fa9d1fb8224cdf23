import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional, Union

from sealpad.core.errors import ErrorCode, NoteError
from sealpad.core.locks import KeyedLock
from sealpad.infra.note_store import NoteRecordMetadata, NoteStore
from sealpad.utils.logger import short_id

logger = logging.getLogger(__name__)

MAX_ID_LENGTH = 64
MAX_CONTENT_LENGTH = 100 * 1024
# notes.expires_at is a signed 64-bit column
MAX_TIMESTAMP = 2**63 - 1
MIN_TIMESTAMP = -(2**63)


def now_ms() -> int:
    return int(time.time() * 1000)


def is_expired(note: NoteRecordMetadata, now: Optional[int] = None) -> bool:
    """Same predicate the sweeper uses: expires_at < now."""
    if note.expires_at is None:
        return False
    return note.expires_at < (now_ms() if now is None else now)


def clamp_timestamp(value: Optional[int]) -> Optional[int]:
    if not value:
        return None
    return max(MIN_TIMESTAMP, min(MAX_TIMESTAMP, int(value)))


def is_valid_id(note_id) -> bool:
    return isinstance(note_id, str) and 0 < len(note_id) <= MAX_ID_LENGTH


def validate_id(note_id):
    if not is_valid_id(note_id):
        raise NoteError(ErrorCode.INVALID_ID)


def validate_content(content):
    if not content or not isinstance(content, str):
        raise NoteError(ErrorCode.CONTENT_REQUIRED)
    if len(content) > MAX_CONTENT_LENGTH:
        raise NoteError(ErrorCode.CONTENT_TOO_LARGE)


@dataclass(frozen=True)
class NoteContent:
    content: str
    expires_at: Optional[int]
    burn_after_reading: bool


@dataclass(frozen=True)
class NoteMetadata:
    exists: bool
    expires_at: Optional[int]
    burn_after_reading: bool


class NoteService:
    """
    Note lifecycle over a NoteStore: writes, reads, peeks, burn and lazy
    expiry. Every sequence that touches one id runs under that id's lock.
    """

    def __init__(self, store: NoteStore):
        self.store = store
        self._locks = KeyedLock()

    # ---------- REQUEST / RESPONSE ----------

    def create_or_update(
        self,
        note_id: str,
        content: str,
        expires_at: Optional[int] = None,
        burn_after_reading: bool = False,
    ) -> None:
        validate_id(note_id)
        validate_content(content)

        with self._locks.hold(note_id), _store_errors("create"):
            existing = self.store.get_metadata(note_id)
            now = now_ms()
            self.store.upsert(
                note_id,
                content,
                clamp_timestamp(expires_at),
                bool(burn_after_reading),
                existing.created_at if existing else now,
                now,
            )

    def read(self, note_id: str, peek: bool = False) -> Union[NoteContent, NoteMetadata]:
        validate_id(note_id)

        with self._locks.hold(note_id), _store_errors("read"):
            if peek:
                meta = self._live_metadata(note_id)
                return NoteMetadata(
                    exists=True,
                    expires_at=meta.expires_at,
                    burn_after_reading=meta.burn_after_reading,
                )

            note = self.store.get(note_id)
            if note is None:
                raise NoteError(ErrorCode.NOT_FOUND)
            if is_expired(note):
                self.store.delete(note_id)
                raise NoteError(ErrorCode.EXPIRED)

            if note.burn_after_reading:
                # Only the caller whose delete removed the row gets the content
                if not self.store.delete(note_id):
                    raise NoteError(ErrorCode.NOT_FOUND)
                logger.info("Burned note %s", short_id(note_id))

            return NoteContent(
                content=note.content,
                expires_at=note.expires_at,
                burn_after_reading=note.burn_after_reading,
            )

    def peek(self, note_id: str) -> NoteMetadata:
        return self.read(note_id, peek=True)

    # ---------- LIVE EDITING ----------

    def live_content(self, note_id: str) -> str:
        """Content pushed to a client joining a room; "" if nothing live."""
        validate_id(note_id)

        with self._locks.hold(note_id), _store_errors("load"):
            note = self.store.get(note_id)
            if note is None:
                return ""
            if is_expired(note):
                self.store.delete(note_id)
                return ""
            return note.content

    def apply_live_update(self, note_id: str, content: str) -> None:
        """
        Overwrite content from a live edit. Expiry, burn flag and created_at
        are carried over unchanged.
        """
        validate_id(note_id)
        validate_content(content)

        with self._locks.hold(note_id), _store_errors("update"):
            existing = self.store.get_metadata(note_id)
            now = now_ms()
            self.store.upsert(
                note_id,
                content,
                existing.expires_at if existing else None,
                existing.burn_after_reading if existing else False,
                existing.created_at if existing else now,
                now,
            )

    # ---------- HELPERS ----------

    def _live_metadata(self, note_id: str) -> NoteRecordMetadata:
        meta = self.store.get_metadata(note_id)
        if meta is None:
            raise NoteError(ErrorCode.NOT_FOUND)
        if is_expired(meta):
            self.store.delete(note_id)
            raise NoteError(ErrorCode.EXPIRED)
        return meta


@contextmanager
def _store_errors(action: str):
    """
    Anything the store raises becomes SERVER_ERROR after being logged.
    NoteErrors raised inside the block pass through untouched.
    """
    try:
        yield
    except NoteError:
        raise
    except Exception as e:
        logger.exception("Store error during %s", action)
        raise NoteError(ErrorCode.SERVER_ERROR) from e
