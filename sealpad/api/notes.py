# sealpad/api/notes.py

import math
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Request
from pydantic import BaseModel

from sealpad.core.note import NoteContent, NoteService
from sealpad.core.rate_limit import WRITE_LIMIT, limiter

router = APIRouter(prefix="/api/notes")


class NoteOut(BaseModel):
    content: str
    expiresAt: Optional[int] = None
    burnAfterReading: bool


class NoteMetadataOut(BaseModel):
    exists: bool
    expiresAt: Optional[int] = None
    burnAfterReading: bool


class NoteWrittenOut(BaseModel):
    success: bool


def get_notes(request: Request) -> NoteService:
    """
    FastAPI dependency to provide the app's NoteService to routes.
    """
    return request.app.state.notes


def _expires_at(value) -> Optional[int]:
    # Browsers send Date.now() style milliseconds; anything else means "never"
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return int(value) or None


@router.get("/{note_id}", response_model=None)
def read_note(
    note_id: str,
    peek: Optional[str] = Query(None),
    notes: NoteService = Depends(get_notes),
):
    """Full read (burns burn-after-reading notes) or ?peek=1 for metadata only."""
    if peek in ("1", "true"):
        meta = notes.peek(note_id)
        return NoteMetadataOut(
            exists=meta.exists,
            expiresAt=meta.expires_at,
            burnAfterReading=meta.burn_after_reading,
        )

    note: NoteContent = notes.read(note_id)
    return NoteOut(
        content=note.content,
        expiresAt=note.expires_at,
        burnAfterReading=note.burn_after_reading,
    )


@router.post("/{note_id}", response_model=NoteWrittenOut)
@limiter.limit(WRITE_LIMIT)
def write_note(
    request: Request,
    note_id: str,
    payload: dict = Body(...),
    notes: NoteService = Depends(get_notes),
):
    # Kept as a plain dict so bad content maps to CONTENT_REQUIRED, not a 422
    notes.create_or_update(
        note_id,
        payload.get("content"),
        expires_at=_expires_at(payload.get("expiresAt")),
        burn_after_reading=bool(payload.get("burnAfterReading")),
    )
    return NoteWrittenOut(success=True)
