# sealpad/models/note.py

from sqlalchemy import BigInteger, Boolean, Column, String, Text
from sealpad.models.base import Base


class Note(Base):
    __tablename__ = "notes"

    # HKDF-derived public id (64 hex chars); the title never reaches us
    id = Column(String(64), primary_key=True)

    # JSON envelope {"iv", "data"}, opaque to the server
    content = Column(Text, nullable=False)

    # Epoch milliseconds; NULL means the note never expires
    expires_at = Column(BigInteger, nullable=True, index=True)

    burn_after_reading = Column(Boolean, nullable=False, default=False)

    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)
