# sealpad/infra/note_store.py

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.engine import Engine

from sealpad.infra.database import db_session, init_db, make_engine, make_session_factory
from sealpad.models.note import Note


@dataclass(frozen=True)
class NoteRecordMetadata:
    expires_at: Optional[int]
    burn_after_reading: bool
    created_at: int
    updated_at: int


@dataclass(frozen=True)
class StoredNote(NoteRecordMetadata):
    content: str = ""


class NoteStore:
    """
    Persistence boundary for notes. The lifecycle layer only talks to this
    interface; everything it stores is already encrypted by the client.
    """

    def create_tables(self) -> None:
        """Prepare backing storage; nothing to do by default."""

    def get(self, note_id: str) -> Optional[StoredNote]:
        raise NotImplementedError

    def get_metadata(self, note_id: str) -> Optional[NoteRecordMetadata]:
        raise NotImplementedError

    def upsert(
        self,
        note_id: str,
        content: str,
        expires_at: Optional[int],
        burn_after_reading: bool,
        created_at: int,
        updated_at: int,
    ) -> None:
        raise NotImplementedError

    def delete(self, note_id: str) -> bool:
        """Delete a note; True only if this call removed the row."""
        raise NotImplementedError

    def delete_expired(self, now: int) -> int:
        raise NotImplementedError


class SqlNoteStore(NoteStore):
    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine if engine is not None else make_engine()
        self._sessions = make_session_factory(self.engine)

    def create_tables(self):
        init_db(self.engine)

    def get(self, note_id):
        with db_session(self._sessions) as session:
            row = session.get(Note, note_id)
            if row is None:
                return None
            return StoredNote(
                content=row.content,
                expires_at=row.expires_at,
                burn_after_reading=bool(row.burn_after_reading),
                created_at=row.created_at,
                updated_at=row.updated_at,
            )

    def get_metadata(self, note_id):
        with db_session(self._sessions) as session:
            row = session.get(Note, note_id)
            if row is None:
                return None
            return NoteRecordMetadata(
                expires_at=row.expires_at,
                burn_after_reading=bool(row.burn_after_reading),
                created_at=row.created_at,
                updated_at=row.updated_at,
            )

    def upsert(self, note_id, content, expires_at, burn_after_reading, created_at, updated_at):
        with db_session(self._sessions) as session:
            row = session.get(Note, note_id)
            if row is None:
                session.add(Note(
                    id=note_id,
                    content=content,
                    expires_at=expires_at,
                    burn_after_reading=burn_after_reading,
                    created_at=created_at,
                    updated_at=updated_at,
                ))
            else:
                row.content = content
                row.expires_at = expires_at
                row.burn_after_reading = burn_after_reading
                row.created_at = created_at
                row.updated_at = updated_at

    def delete(self, note_id):
        with db_session(self._sessions) as session:
            result = session.execute(delete(Note).where(Note.id == note_id))
            return result.rowcount > 0

    def delete_expired(self, now):
        with db_session(self._sessions) as session:
            result = session.execute(
                delete(Note).where(
                    Note.expires_at.is_not(None),
                    Note.expires_at < now,
                )
            )
            return result.rowcount
