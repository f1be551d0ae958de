import pytest

import fritz_base32
from fritz_errors import InvalidLength, InvalidSymbol


def test_encode_full_block():
    assert fritz_base32.encode(b"Hello") == "JBSWY2DP"
    assert fritz_base32.encode(b"\x00\x01\x02\x03\x04") == "AAAQEAYE"


def test_encode_short_blocks_without_padding():
    assert fritz_base32.encode(b"f") == "MY"
    assert fritz_base32.encode(b"fo") == "MZXQ"
    assert fritz_base32.encode(b"foo") == "MZXW5"
    assert fritz_base32.encode(b"foob") == "MZXW5YQ"
    assert fritz_base32.encode(b"foobar") == "MZXW5YTBOI"


def test_encode_empty():
    assert fritz_base32.encode(b"") == ""
    assert fritz_base32.decode("") == b""


def test_decode():
    assert fritz_base32.decode("JBSWY2DP") == b"Hello"
    assert fritz_base32.decode("MZXW5YTBOI") == b"foobar"
    assert fritz_base32.decode("MZXW5YQ") == b"foob"
    assert fritz_base32.decode(b"MZXW5") == b"foo"


def test_round_trip_all_block_sizes():
    for size in range(0, 16):
        data = bytes(range(200, 200 + size))
        assert fritz_base32.decode(fritz_base32.encode(data)) == data


@pytest.mark.parametrize("text", ["A", "MZX", "MZXW5Y", "JBSWY2DPM"])
def test_decode_invalid_length(text):
    with pytest.raises(InvalidLength):
        fritz_base32.decode(text)


@pytest.mark.parametrize("text", ["MZXW7YTB", "mzxw", "0A", "JBSWY2D=", "MZ XW4YQ"])
def test_decode_invalid_symbol(text):
    with pytest.raises(InvalidSymbol):
        fritz_base32.decode(text)


def test_foreign_symbol_reported_before_length():
    with pytest.raises(InvalidSymbol):
        fritz_base32.decode(b"MZ\xffXW4")


def test_codec_errors_are_value_errors():
    with pytest.raises(ValueError):
        fritz_base32.decode("2")


def test_project64():
    assert fritz_base32.project64([0, 25, 26, 51, 52, 61, 62, 63, 64, 255]) == "azAZ09!$a$"
    assert len(fritz_base32.ALPHABET64) == 64
    assert len(set(fritz_base32.ALPHABET)) == 32
