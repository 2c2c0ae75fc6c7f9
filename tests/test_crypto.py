"""Tests for encryption helpers."""

import pytest

from coverdrop_app.core.crypto import CryptoService, mask_email


def test_encrypt_decrypt_round_trip() -> None:
    crypto = CryptoService.from_base64_key(CryptoService.generate_base64_key())

    cipher = crypto.encrypt_text("alice@example.com")

    assert cipher != "alice@example.com"
    assert crypto.decrypt_text(cipher) == "alice@example.com"


def test_rejects_short_key() -> None:
    with pytest.raises(RuntimeError):
        CryptoService.from_base64_key("c2hvcnQ=")


def test_mask_email() -> None:
    assert mask_email("alice@example.com") == "a****@example.com"
    assert mask_email(None) == ""
