#!/usr/bin/env python3
"""
FRITZ!OS secret value encryption

Encrypted values use AES-256-CBC. After Base32 decoding a value, the first
16 bytes are the IV and the rest is the ciphertext. The decrypted block is
laid out as:

    - 4 bytes: first 4 bytes of MD5(length + data)
    - 4 bytes: data length (big-endian)
    - data (strings carry a trailing NUL)
    - zero padding up to the AES block size

Requirements:
    pip install pycryptodome
"""

import hashlib
import struct

try:
    from Crypto.Cipher import AES
    from Crypto.Random import get_random_bytes
    HAS_CRYPTO = True
except ImportError:
    HAS_CRYPTO = False

from fritz_errors import IntegrityCheckFailed, MalformedCiphertext, MissingCollaborator

BLOCK_SIZE = 16
IV_SIZE = 16
KEY_SIZE = 32
HEADER_SIZE = 8


def _require_crypto():
    if not HAS_CRYPTO:
        raise MissingCollaborator("pycryptodome library not found (pip install pycryptodome)")


def aes_cbc_decrypt(ciphertext, key, iv):
    """Decrypt data using AES CBC mode, no padding is removed"""
    _require_crypto()
    cipher = AES.new(key, AES.MODE_CBC, iv)
    return cipher.decrypt(ciphertext)


def aes_cbc_encrypt(plaintext, key, iv):
    """Encrypt block aligned data using AES CBC mode"""
    _require_crypto()
    cipher = AES.new(key, AES.MODE_CBC, iv)
    return cipher.encrypt(plaintext)


def value_hash(length_and_data):
    """First 4 bytes of the MD5 digest protecting a value"""
    return hashlib.md5(length_and_data).digest()[:4]


def decrypt_value(encrypted, key, is_string=True):
    """
    Decrypt a Base32-decoded secret value.

    Args:
        encrypted: IV followed by the ciphertext
        key: 32 byte AES key
        is_string: Strip the trailing NUL of string values

    Returns:
        bytes: Plaintext value, may be empty

    Raises:
        MalformedCiphertext: Data is too short or not block aligned
        IntegrityCheckFailed: Wrong key or corrupted data
    """
    if len(key) != KEY_SIZE:
        raise ValueError(f"AES key must be {KEY_SIZE} bytes, got {len(key)}")

    iv = encrypted[:IV_SIZE]
    ciphertext = encrypted[IV_SIZE:]

    if len(iv) < IV_SIZE or not ciphertext:
        raise MalformedCiphertext(f"Encrypted data too short: {len(encrypted)} bytes")
    if len(ciphertext) % BLOCK_SIZE:
        raise MalformedCiphertext(
            f"Ciphertext is not a multiple of {BLOCK_SIZE} bytes: {len(ciphertext)} bytes")

    decrypted = aes_cbc_decrypt(ciphertext, key, iv)

    stored_hash = decrypted[:4]
    length = struct.unpack('>I', decrypted[4:HEADER_SIZE])[0]
    if length > len(decrypted) - HEADER_SIZE:
        raise IntegrityCheckFailed(f"Value length {length} exceeds decrypted data")
    if value_hash(decrypted[4:HEADER_SIZE + length]) != stored_hash:
        raise IntegrityCheckFailed("Value hash mismatch (wrong key?)")

    value = decrypted[HEADER_SIZE:HEADER_SIZE + length]
    if is_string and value.endswith(b'\x00'):
        value = value[:-1]
    return value


def encrypt_value(value, key, iv=None, is_string=True):
    """
    Encrypt a secret value the way FRITZ!OS stores it.

    Args:
        value: Plaintext bytes
        key: 32 byte AES key
        iv: 16 byte IV, random if not given
        is_string: Append the NUL terminator used for string values

    Returns:
        bytes: IV followed by the ciphertext, ready for Base32 encoding
    """
    if len(key) != KEY_SIZE:
        raise ValueError(f"AES key must be {KEY_SIZE} bytes, got {len(key)}")
    if iv is None:
        _require_crypto()
        iv = get_random_bytes(IV_SIZE)
    if len(iv) != IV_SIZE:
        raise ValueError(f"IV must be {IV_SIZE} bytes, got {len(iv)}")

    if is_string:
        value = value + b'\x00'
    body = struct.pack('>I', len(value)) + value
    block = value_hash(body) + body
    if len(block) % BLOCK_SIZE:
        block += b'\x00' * (BLOCK_SIZE - len(block) % BLOCK_SIZE)

    return iv + aes_cbc_encrypt(block, key, iv)
