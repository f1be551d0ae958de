#!/usr/bin/env python3
"""
FRITZ!OS Secret Decoder - Token Scan & Substitution

Configuration files and settings exports store secrets as tokens like

    passwd = "$$$$Q5UYOCQ6ZWJS4DPB..."

This module finds every token in a document, decrypts it with the given key
and writes the document back with the plaintext values in place of the
tokens. Tokens which cannot be decoded or decrypted (damaged, or encrypted
with another key) are left untouched; the rest of the document is copied
byte for byte.
"""

import os
import re
import sys
import tempfile
from dataclasses import dataclass, field

import fritz_base32
from fritz_cipher import KEY_SIZE, decrypt_value, encrypt_value
from fritz_errors import CodecError, KeyDerivationFailed, TokenDecryptFailed

MARKER = b"$$$$"

# Characters which would break a quoted value in the rewritten document
ESCAPES = {
    b'\\': b'\\\\',
    b'"': b'\\"',
    b'\n': b'\\n',
    b'\r': b'\\r',
}


@dataclass(frozen=True)
class DecodeOptions:
    """Settings for one rewrite run."""
    marker: bytes = MARKER
    escape: bool = True
    debug: bool = False
    trace: object = field(default=None, compare=False)


@dataclass(frozen=True)
class Substitution:
    """One decoded token occurrence: document span and replacement text."""
    start: int
    end: int
    token: bytes
    replacement: bytes


def _trace(options, message):
    if options.debug:
        print(f"[*] {message}", file=options.trace or sys.stderr)


def token_pattern(marker=MARKER):
    """Regex for a marker followed by one or more base32 symbols"""
    alphabet = re.escape(fritz_base32.ALPHABET.encode('ascii'))
    return re.compile(re.escape(marker) + b'[' + alphabet + b']+')


def escape_value(value):
    """Escape a plaintext value for use inside a quoted configuration value"""
    return b''.join(ESCAPES.get(value[i:i + 1], value[i:i + 1]) for i in range(len(value)))


def check_key(key):
    """Reject a missing or wrong sized cipher key"""
    if not key:
        raise KeyDerivationFailed("No cipher key available")
    if len(key) != KEY_SIZE:
        raise KeyDerivationFailed(f"Cipher key must be {KEY_SIZE} bytes, got {len(key)}")
    return key


def decode_token(token, key, marker=MARKER):
    """
    Decrypt a single token.

    Args:
        token: Token text including the marker (bytes or str)
        key: 32 byte cipher key

    Returns:
        bytes: Plaintext value

    Raises:
        CodecError: Token text is no valid base32
        TokenDecryptFailed: Token does not decrypt with this key
    """
    if isinstance(token, str):
        token = token.encode('ascii')
    if token.startswith(marker):
        token = token[len(marker):]
    encrypted = fritz_base32.decode(token.decode('ascii', errors='replace'))
    return decrypt_value(encrypted, key)


def encode_token(value, key, iv=None, marker=MARKER):
    """Encrypt a plaintext value into a token (the inverse of decode_token)"""
    if isinstance(value, str):
        value = value.encode('utf-8')
    encrypted = encrypt_value(value, check_key(key), iv)
    return marker + fritz_base32.encode(encrypted).encode('ascii')


def plan_substitutions(document, key, options=None):
    """
    Scan a document line by line and decrypt every token found.

    Args:
        document: Document content (bytes)
        key: 32 byte cipher key
        options: DecodeOptions

    Returns:
        list: Substitution entries in document order, one per decoded token
    """
    options = options or DecodeOptions()
    check_key(key)
    pattern = token_pattern(options.marker)

    plan = []
    offset = 0
    for lineno, line in enumerate(document.splitlines(keepends=True), 1):
        for match in pattern.finditer(line):
            token = match.group(0)
            try:
                value = decode_token(token, key, options.marker)
            except (CodecError, TokenDecryptFailed) as e:
                _trace(options, f"line {lineno}: skipped token at column {match.start() + 1}: {e}")
                continue

            replacement = escape_value(value) if options.escape else value
            plan.append(Substitution(offset + match.start(), offset + match.end(), token, replacement))
            _trace(options, f"line {lineno}: decoded token at column {match.start() + 1}")
        offset += len(line)

    return plan


def apply_substitutions(document, plan):
    """Splice the replacements into the document in a single pass"""
    out = []
    pos = 0
    for sub in plan:
        if sub.start < pos or document[sub.start:sub.end] != sub.token:
            # overlapping or stale entry
            continue
        out.append(document[pos:sub.start])
        out.append(sub.replacement)
        pos = sub.end
    out.append(document[pos:])
    return b''.join(out)


def rewrite(document, key, options=None):
    """
    Replace all decryptable tokens in a document with their plaintext.

    Args:
        document: Document content (bytes)
        key: 32 byte cipher key
        options: DecodeOptions

    Returns:
        bytes: Rewritten document, identical to the input outside of the
        replaced tokens
    """
    check_key(key)
    if not document:
        return document

    options = options or DecodeOptions()
    plan = plan_substitutions(document, key, options)
    _trace(options, f"{len(plan)} token(s) decoded")
    if not plan:
        return document
    return apply_substitutions(document, plan)


def write_atomic(path, data):
    """
    Write data to a file via a temporary file in the same directory.

    The temporary file is removed if anything (including an interrupt)
    goes wrong, so a partial output file is never left behind.
    """
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(prefix=".fritz_decoder_", dir=directory)
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def read_document(path=None):
    """Read a whole document from a file or STDIN ('-' or None)"""
    if path is None or path == '-':
        return sys.stdin.buffer.read()
    with open(path, 'rb') as f:
        return f.read()


def write_document(data, path=None):
    """Write a document to a file or STDOUT ('-' or None)"""
    if path is None or path == '-':
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
    else:
        write_atomic(path, data)
