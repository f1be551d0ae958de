#!/usr/bin/env python3
"""
FRITZ!OS Base32 Codec

FRITZ!OS writes encrypted secrets with a Base32 variant that uses the
digits 1-6 instead of the RFC 4648 digits 2-7 and never pads the last
group. Every 8 symbols carry 5 bytes, a shorter last group carries
1-4 bytes.

The 64 symbol alphabet below is only used to turn digest bytes into
printable password characters, it has no decoder.
"""

from fritz_errors import InvalidLength, InvalidSymbol

# Firmware-defined, order matters
ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ123456"
ALPHABET64 = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789!$"

GROUP_SYMBOLS = 8
GROUP_BYTES = 5

# symbols in the last group -> bytes carried
FINAL_GROUP_BYTES = {2: 1, 4: 2, 5: 3, 7: 4, 8: 5}
# bytes in the last block -> symbols written
FINAL_GROUP_SYMBOLS = {v: k for k, v in FINAL_GROUP_BYTES.items()}

_VALUES = {c: i for i, c in enumerate(ALPHABET)}


def _decode_group(group):
    """Decode up to 8 symbols into the bytes they carry"""
    try:
        size = FINAL_GROUP_BYTES[len(group)]
    except KeyError:
        raise InvalidLength(f"Invalid base32 group size: {len(group)} symbols") from None

    value = 0
    for c in group:
        try:
            value = (value << 5) | _VALUES[c]
        except KeyError:
            raise InvalidSymbol(f"Invalid base32 symbol: {c!r}") from None

    # Drop the fill bits of a short group
    value >>= len(group) * 5 - size * 8
    return value.to_bytes(size, 'big')


def decode(symbols: str) -> bytes:
    """
    Decode FRITZ!OS Base32 text to binary.

    Args:
        symbols: Base32 text without whitespace or padding

    Returns:
        bytes: Decoded data

    Raises:
        InvalidSymbol: A character is not part of the alphabet
        InvalidLength: The last group has 1, 3 or 6 symbols
    """
    if isinstance(symbols, (bytes, bytearray)):
        symbols = symbols.decode('ascii', errors='replace')

    # A foreign character is reported even if the length is wrong too
    for c in symbols:
        if c not in _VALUES:
            raise InvalidSymbol(f"Invalid base32 symbol: {c!r}")

    result = bytearray()
    for i in range(0, len(symbols), GROUP_SYMBOLS):
        result += _decode_group(symbols[i:i + GROUP_SYMBOLS])
    return bytes(result)


def encode(data: bytes) -> str:
    """
    Encode binary data as FRITZ!OS Base32 text.

    Args:
        data: Bytes to encode

    Returns:
        str: Base32 text, a short last block is written without padding
    """
    out = []
    for i in range(0, len(data), GROUP_BYTES):
        block = data[i:i + GROUP_BYTES]
        value = int.from_bytes(block.ljust(GROUP_BYTES, b'\x00'), 'big')
        group = [ALPHABET[(value >> shift) & 0x1F] for shift in range(35, -1, -5)]
        out.append(''.join(group[:FINAL_GROUP_SYMBOLS[len(block)]]))
    return ''.join(out)


def project64(values):
    """Map each byte value onto the 64 symbol alphabet (value mod 64)"""
    return ''.join(ALPHABET64[v % 64] for v in values)
