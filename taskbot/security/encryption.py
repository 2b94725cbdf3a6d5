"""Encryption of secrets stored at rest (bot tokens)."""
from __future__ import annotations

import hashlib
import base64
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from taskbot.config import settings


class EncryptionService:
    """Wrapper around Fernet symmetric encryption."""

    def __init__(self, secret_key: str):
        try:
            key_bytes = secret_key.encode("utf-8")
            # Fernet keys are 32 url-safe base64-encoded bytes
            if len(key_bytes) != 44:
                raise ValueError("Fernet key must be 32 url-safe base64-encoded bytes.")
            self._fernet = Fernet(key_bytes)
        except (ValueError, InvalidToken) as exc:
            raise ValueError("Invalid encryption key configured") from exc

    def encrypt_text(self, text: Optional[str]) -> Optional[str]:
        if text is None:
            return text
        return self._fernet.encrypt(text.encode("utf-8")).decode("utf-8")

    def decrypt_text(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return token
        return self._fernet.decrypt(token.encode("utf-8")).decode("utf-8")


def _derive_encryption_key() -> str:
    """Return ENCRYPTION_SECRET, or a Fernet key derived from SECRET_KEY."""
    key = settings.ENCRYPTION_SECRET
    if key:
        return key
    digest = hashlib.sha256(settings.SECRET_KEY.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("utf-8")


encryption_service = EncryptionService(_derive_encryption_key())
