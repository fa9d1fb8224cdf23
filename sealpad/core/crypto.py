import base64
import binascii
import json
import logging
import os
from typing import NamedTuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

logger = logging.getLogger(__name__)

# Shared with the browser clients, changing any of these orphans every note
HKDF_SALT = b"SecurePad"
HKDF_INFO_ID = b"ID"
HKDF_INFO_KEY = b"KEY"

KEY_SIZE = 32
NONCE_SIZE = 12


class TitleKeys(NamedTuple):
    id: str
    key: bytes


# ---------- KEY DERIVATION ----------

def _hkdf(title: str, info: bytes) -> bytes:
    """
    HKDF-SHA256 over the UTF-8 title → 32 bytes.
    Same salt for both outputs, different info labels keep them independent.
    """
    return HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=HKDF_SALT,
        info=info,
    ).derive(title.encode("utf-8"))


def hash_title(title: str) -> str:
    """
    Public note id for a title: 64 hex chars.
    This is the only value derived from the title that the server ever sees.
    """
    return _hkdf(title, HKDF_INFO_ID).hex()


def derive_key(title: str) -> bytes:
    """
    Private AES-256-GCM key for a title. Never leaves the client.
    """
    return _hkdf(title, HKDF_INFO_KEY)


def derive_title(title: str) -> TitleKeys:
    return TitleKeys(id=hash_title(title), key=derive_key(title))


# ---------- ENCRYPTION ----------

def encrypt_note(plaintext: str, key: bytes) -> str:
    """
    AES-GCM → JSON envelope {"iv": b64(nonce), "data": b64(ciphertext + tag)}
    """
    aesgcm = AESGCM(key)
    nonce = os.urandom(NONCE_SIZE)
    ciphertext = aesgcm.encrypt(nonce, plaintext.encode("utf-8"), None)
    return json.dumps({
        "iv": base64.b64encode(nonce).decode(),
        "data": base64.b64encode(ciphertext).decode(),
    })


def decrypt_note(envelope: str, key: bytes) -> str:
    """
    Decrypt a JSON envelope. Returns "" on any failure: a wrong key, a
    tampered payload and an empty note all look the same to the caller.
    """
    if not envelope:
        return ""
    try:
        parsed = json.loads(envelope)
        if not isinstance(parsed, dict):
            return ""
        iv_b64 = parsed.get("iv")
        data_b64 = parsed.get("data")
        if not iv_b64 or not data_b64:
            return ""
        nonce = base64.b64decode(iv_b64, validate=True)
        ciphertext = base64.b64decode(data_b64, validate=True)
        plaintext = AESGCM(key).decrypt(nonce, ciphertext, None)
        return plaintext.decode("utf-8")
    except (ValueError, TypeError, binascii.Error, InvalidTag) as e:
        # json.JSONDecodeError and UnicodeDecodeError are ValueErrors
        logger.debug("Decryption failed: %s", type(e).__name__)
        return ""
