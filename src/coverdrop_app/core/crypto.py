"""AES-256 helpers for encrypting contact details at rest."""

from __future__ import annotations

import base64
import os
from dataclasses import dataclass

from cryptography.hazmat.primitives.ciphers.aead import AESGCM


NONCE_SIZE = 12
KEY_SIZE = 32


@dataclass
class CryptoService:
    """Encrypts and decrypts text using AES-256-GCM."""

    key: bytes

    @classmethod
    def from_base64_key(cls, key_b64: str) -> "CryptoService":
        key = base64.urlsafe_b64decode(key_b64.encode("utf-8"))
        if len(key) != KEY_SIZE:
            raise RuntimeError("Encryption key must decode to 32 bytes for AES-256.")
        return cls(key=key)

    @staticmethod
    def generate_base64_key() -> str:
        """Generate a base64-encoded 32-byte key."""
        return base64.urlsafe_b64encode(os.urandom(KEY_SIZE)).decode("utf-8")

    def encrypt_text(self, plain_text: str) -> str:
        """Encrypt UTF-8 text and return base64 of nonce+ciphertext."""
        nonce = os.urandom(NONCE_SIZE)
        cipher_text = AESGCM(self.key).encrypt(nonce, plain_text.encode("utf-8"), None)
        return base64.b64encode(nonce + cipher_text).decode("ascii")

    def decrypt_text(self, encrypted: str) -> str:
        """Decrypt base64 nonce+ciphertext into UTF-8 text."""
        raw = base64.b64decode(encrypted.encode("ascii"))
        plain = AESGCM(self.key).decrypt(raw[:NONCE_SIZE], raw[NONCE_SIZE:], None)
        return plain.decode("utf-8")


def mask_email(email: str | None) -> str:
    """Mask an email like alice@example.com => a****@example.com."""
    if not email:
        return ""
    local, _, domain = email.partition("@")
    if not domain:
        return "*" * len(email)
    return f"{local[:1]}{'*' * max(len(local) - 1, 4)}@{domain}"
