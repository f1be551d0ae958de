import pytest

from conftest import CIPHERTEXT, IV, PLAINTEXT
from fritz_cipher import decrypt_value, encrypt_value
from fritz_errors import IntegrityCheckFailed, MalformedCiphertext, TokenDecryptFailed


def test_decrypt_known_value(device_key):
    assert decrypt_value(IV + CIPHERTEXT, device_key) == PLAINTEXT


def test_decrypt_keeps_terminator_for_binary_values(device_key):
    assert decrypt_value(IV + CIPHERTEXT, device_key, is_string=False) == PLAINTEXT + b"\x00"


def test_encrypt_matches_known_value(device_key):
    assert encrypt_value(PLAINTEXT, device_key, iv=IV) == IV + CIPHERTEXT


def test_encrypt_random_iv(device_key):
    first = encrypt_value(b"value", device_key)
    second = encrypt_value(b"value", device_key)
    assert first[:16] != second[:16]
    assert decrypt_value(first, device_key) == b"value"
    assert decrypt_value(second, device_key) == b"value"


def test_empty_and_long_values(device_key):
    assert decrypt_value(encrypt_value(b"", device_key), device_key) == b""
    long_value = b"x" * 100
    encrypted = encrypt_value(long_value, device_key, iv=IV)
    assert (len(encrypted) - 16) % 16 == 0
    assert decrypt_value(encrypted, device_key) == long_value


def test_wrong_key(device_key, other_key):
    with pytest.raises(IntegrityCheckFailed):
        decrypt_value(IV + CIPHERTEXT, other_key)


@pytest.mark.parametrize("data", [b"", IV, IV + CIPHERTEXT[:15], IV[:8]])
def test_malformed_ciphertext(device_key, data):
    with pytest.raises(MalformedCiphertext):
        decrypt_value(data, device_key)


def test_failures_share_base_class(device_key, other_key):
    for data, key in ((IV, device_key), (IV + CIPHERTEXT, other_key)):
        with pytest.raises(TokenDecryptFailed):
            decrypt_value(data, key)


def test_key_size_checked():
    with pytest.raises(ValueError):
        decrypt_value(IV + CIPHERTEXT, b"short")
    with pytest.raises(ValueError):
        encrypt_value(PLAINTEXT, b"short", iv=IV)
