# sealpad/clients/sealpad_client.py

import re
import secrets
import time
from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import urlparse

import requests

from sealpad.config import SERVER_URL
from sealpad.core.crypto import decrypt_note, derive_key, encrypt_note, hash_title

# =========================
# CONFIGURATION
# =========================

DEFAULT_EXPIRY = "24h"
SECRET_BYTES = 16
REQUEST_TIMEOUT = 10

_DURATION_UNITS = {"s": 1000, "m": 60_000, "h": 3_600_000, "d": 86_400_000}
_DURATION_RE = re.compile(r"^(\d+)([smhd])$")

# =========================
# ERRORS
# =========================

class SealpadError(Exception):
    pass


class NoteNotFound(SealpadError):
    """Never created, or already burned."""


class NoteExpired(SealpadError):
    pass


# =========================
# HELPERS
# =========================

def parse_duration(value: str) -> int:
    """'30s', '15m', '1h', '7d' → milliseconds"""
    match = _DURATION_RE.match(value.strip())
    if not match:
        raise ValueError(f'Invalid duration: {value}. Use format like "1h", "30m", "1d"')
    amount, unit = match.groups()
    return int(amount) * _DURATION_UNITS[unit]


def parse_secret_link(link: str) -> Tuple[str, str]:
    """<server>/send/<id>#<secret> → (id, secret)"""
    parsed = urlparse(link)
    note_id = parsed.path.rstrip("/").split("/")[-1]
    secret = parsed.fragment
    if not note_id or not secret:
        raise SealpadError("Invalid secret link format")
    return note_id, secret


@dataclass(frozen=True)
class SecretInfo:
    expires_at: Optional[int]
    burn_after_reading: bool


# =========================
# CLIENT
# =========================

class SealpadClient:
    """
    Talks to a sealpad server. Titles and keys stay on this side: only the
    HKDF-derived id and the encrypted envelope go over the wire.
    """

    def __init__(self, server_url: str = SERVER_URL, session: Optional[requests.Session] = None):
        self.server_url = server_url.rstrip("/")
        self.session = session or requests.Session()

    # ---------- NOTES ----------

    def write_note(self, title: str, content: str):
        self._post(hash_title(title), {"content": encrypt_note(content, derive_key(title))})

    def read_note(self, title: str) -> str:
        data = self._get(hash_title(title))
        return decrypt_note(data.get("content", ""), derive_key(title))

    # ---------- SECRETS ----------

    def send_secret(self, content: str, expires: str = DEFAULT_EXPIRY, burn_after_reading: bool = False) -> str:
        """Encrypt under a fresh random secret and return the shareable link."""
        if not content:
            raise SealpadError("No content provided")
        secret = secrets.token_urlsafe(SECRET_BYTES)
        note_id = hash_title(secret)
        self._post(note_id, {
            "content": encrypt_note(content, derive_key(secret)),
            "expiresAt": int(time.time() * 1000) + parse_duration(expires),
            "burnAfterReading": burn_after_reading,
        })
        return f"{self.server_url}/send/{note_id}#{secret}"

    def reveal_secret(self, link: str) -> str:
        note_id, secret = parse_secret_link(link)
        data = self._get(note_id)
        return decrypt_note(data.get("content", ""), derive_key(secret))

    def peek_secret(self, link: str) -> SecretInfo:
        note_id, _ = parse_secret_link(link)
        data = self._get(note_id, peek=True)
        return SecretInfo(
            expires_at=data.get("expiresAt"),
            burn_after_reading=bool(data.get("burnAfterReading")),
        )

    # ---------- HTTP ----------

    def _get(self, note_id: str, peek: bool = False) -> dict:
        params = {"peek": "1"} if peek else None
        resp = self.session.get(f"{self.server_url}/api/notes/{note_id}", params=params, timeout=REQUEST_TIMEOUT)
        self._raise_for_status(resp)
        return resp.json()

    def _post(self, note_id: str, body: dict):
        resp = self.session.post(f"{self.server_url}/api/notes/{note_id}", json=body, timeout=REQUEST_TIMEOUT)
        self._raise_for_status(resp)

    @staticmethod
    def _raise_for_status(resp):
        if resp.status_code == 404:
            raise NoteNotFound("Not found (may have been burned)")
        if resp.status_code == 410:
            raise NoteExpired("Expired")
        if resp.status_code >= 400:
            try:
                detail = resp.json().get("error", resp.status_code)
            except ValueError:
                detail = resp.status_code
            raise SealpadError(f"Error: {detail}")
