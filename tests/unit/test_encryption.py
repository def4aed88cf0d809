import base64

import pytest

from crewdesk.errors import EncryptionKeyError
from crewdesk.services.encryption import PasswordCipher, generate_key

from tests.factories import TEST_KEY


def test_round_trip():
    cipher = PasswordCipher(TEST_KEY)
    token = cipher.encrypt("s3cret-Pass#")
    assert cipher.decrypt(token) == "s3cret-Pass#"


def test_token_has_nonce_tag_ciphertext_parts():
    token = PasswordCipher(TEST_KEY).encrypt("abc")
    nonce, tag, ct = (base64.b64decode(p) for p in token.split("."))
    assert len(nonce) == 12
    assert len(tag) == 16
    assert len(ct) == 3


def test_same_plaintext_encrypts_differently():
    cipher = PasswordCipher(TEST_KEY)
    assert cipher.encrypt("same") != cipher.encrypt("same")


def test_tampered_ciphertext_fails_closed():
    cipher = PasswordCipher(TEST_KEY)
    nonce, tag, ct = cipher.encrypt("hunter22").split(".")
    raw = bytearray(base64.b64decode(ct))
    raw[0] ^= 0x01
    tampered = ".".join([nonce, tag, base64.b64encode(bytes(raw)).decode()])
    assert cipher.decrypt(tampered) is None


def test_tampered_tag_fails_closed():
    cipher = PasswordCipher(TEST_KEY)
    nonce, tag, ct = cipher.encrypt("hunter22").split(".")
    raw = bytearray(base64.b64decode(tag))
    raw[-1] ^= 0xFF
    tampered = ".".join([nonce, base64.b64encode(bytes(raw)).decode(), ct])
    assert cipher.decrypt(tampered) is None


def test_wrong_key_fails_closed():
    token = PasswordCipher(TEST_KEY).encrypt("hunter22")
    assert PasswordCipher(generate_key()).decrypt(token) is None


@pytest.mark.parametrize("token", [None, "", "not-a-token", "a.b", "!!.??.**"])
def test_malformed_tokens_return_none(token):
    assert PasswordCipher(TEST_KEY).decrypt(token) is None


def test_missing_key_fails_loudly_on_encrypt():
    with pytest.raises(EncryptionKeyError):
        PasswordCipher("").encrypt("x")


def test_short_key_fails_loudly_on_encrypt():
    short = base64.b64encode(b"too-short").decode()
    with pytest.raises(EncryptionKeyError):
        PasswordCipher(short).encrypt("x")


def test_missing_key_decrypt_reports_unavailable():
    token = PasswordCipher(TEST_KEY).encrypt("x")
    assert PasswordCipher(None).decrypt(token) is None


def test_generated_key_is_32_bytes():
    assert len(base64.b64decode(generate_key())) == 32
