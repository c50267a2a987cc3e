"""AES-128-GCM encryption of test data with short textual keys."""

from __future__ import annotations

import hashlib
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

KEY_SIZE = 16
NONCE_SIZE = 12
_PAD = b"-"


def _cipher(key: str) -> AESGCM:
    raw = key.encode("utf-8")
    if len(raw) > KEY_SIZE:
        raise ValueError("key too long")
    return AESGCM(raw + _PAD * (KEY_SIZE - len(raw)))


def encrypt(data: bytes, key: str) -> bytes:
    """Encrypt ``data``; the result is the random nonce followed by the sealed data."""
    cipher = _cipher(key)
    nonce = os.urandom(NONCE_SIZE)
    return nonce + cipher.encrypt(nonce, bytes(data), None)


def decrypt(data: bytes, key: str) -> bytes:
    """Reverse :func:`encrypt`; raises ValueError if the data cannot be opened."""
    cipher = _cipher(key)
    if len(data) < NONCE_SIZE:
        raise ValueError("can't decrypt data")
    nonce, sealed = data[:NONCE_SIZE], data[NONCE_SIZE:]
    try:
        return cipher.decrypt(nonce, bytes(sealed), None)
    except InvalidTag as exc:
        raise ValueError("can't decrypt data") from exc


def hash_key(key: str) -> str:
    """Return the hexadecimal SHA-256 digest of ``key``."""
    return hashlib.sha256(key.encode("utf-8")).hexdigest()