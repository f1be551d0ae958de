import pytest

SERIAL = "1234567890123456"
MAC = "00:11:22:33:44:55"

# MD5("1234567890123456\n00:11:22:33:44:55\n") + 16 zero bytes
DEVICE_KEY_HEX = "eb987caa99df2ae28634038aa5f78d97" + "0" * 32

# MD5("secret") + 16 zero bytes
PASSWORD_KEY_HEX = "5ebe2294ecd0e0f08eab7690d2a6ee69" + "0" * 32

IV = bytes(range(16))

# "geheim" encrypted with DEVICE_KEY and IV (built with openssl enc -aes-256-cbc -nopad)
CIPHERTEXT = bytes.fromhex("2a507c1e644ed413cdfea4e3f45a0f28")
TOKEN = b"$$$$AAAQEAYEAUDAOCAJBIFQYDIOB3VFA6A5MRHNIE5N61SOH4C1B3UA"
PLAINTEXT = b"geheim"


@pytest.fixture
def device_key():
    return bytes.fromhex(DEVICE_KEY_HEX)


@pytest.fixture
def other_key():
    return bytes.fromhex(PASSWORD_KEY_HEX)


@pytest.fixture
def env_file(tmp_path):
    path = tmp_path / "environment"
    path.write_text(
        "HWRevision\t185\n"
        f"SerialNumber\t{SERIAL}\n"
        f"maca\t{MAC}\n"
        "macb\t00:11:22:33:44:56\n"
    )
    return str(path)
