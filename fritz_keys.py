#!/usr/bin/env python3
"""
FRITZ!OS Key Derivation Functions

- Certificate password: derived from the device MAC address (maca)
- Device key: derived from the device properties, used for secrets in the
  configuration files stored on the device
- Export key: derived from the password given when exporting settings
"""

import hashlib
import re

import fritz_base32
import fritz_env
from fritz_cipher import decrypt_value
from fritz_errors import (
    CodecError,
    IncompleteDeviceProperties,
    InvalidHardwareIdentifier,
    MalformedKey,
    NoLocalDevice,
    TokenDecryptFailed,
    TooManyDeviceProperties,
)

MAC_PATTERN = re.compile(r'[A-F0-9:]{17}')
HEX_KEY_PATTERN = re.compile(r'[0-9A-Fa-f]{64}')
EXPORT_PASSWORD_PATTERN = re.compile(rb'^Password=\$\$\$\$([A-Z1-6]+)\s*$', re.MULTILINE)

# Positional device properties, names as used in the urlader environment
DEVICE_PROPERTIES = ("SerialNumber", "maca", "wlan_key", "tr069_passphrase")
REQUIRED_PROPERTIES = 2

CERTIFICATE_PASSWORD_LENGTH = 8


def validate_mac(mac):
    """Check a MAC address without normalizing it"""
    if not isinstance(mac, str) or len(mac) != 17 or not MAC_PATTERN.fullmatch(mac):
        raise InvalidHardwareIdentifier(f"Invalid MAC address: {mac!r}")
    return mac


def md5_key(data):
    """AES-256 key from an MD5 digest, upper half zero"""
    return hashlib.md5(data).digest() + b'\x00' * 16


def derive_certificate_password(mac):
    """
    Derive the password protecting the private key of the GUI certificate.

    Args:
        mac: MAC address (maca) in upper case, e.g. '00:11:22:33:44:55'

    Returns:
        bytes: 8 character ASCII password
    """
    validate_mac(mac)
    digest = hashlib.md5(mac.encode('ascii')).hexdigest()[:CERTIFICATE_PASSWORD_LENGTH * 2]
    values = [int(digest[i:i + 2], 16) for i in range(0, len(digest), 2)]
    return fritz_base32.project64(values).encode('ascii')


def certificate_password_from_device(env_file=None):
    """Certificate password for the MAC address found in the environment"""
    mac = fritz_env.get_value("maca", env_file)
    if mac is None:
        raise NoLocalDevice("No MAC address (maca) found in the environment")
    return derive_certificate_password(mac)


def local_device_properties(env_file=None):
    """
    Read the key properties of the local device.

    Returns the values in positional order, stopping at the first missing
    optional one.
    """
    env = fritz_env.read_environment(env_file)
    properties = []
    for name in DEVICE_PROPERTIES:
        value = env.get(name)
        if not value:
            break
        properties.append(value)

    if len(properties) < REQUIRED_PROPERTIES:
        missing = DEVICE_PROPERTIES[len(properties)]
        raise NoLocalDevice(f"Device property '{missing}' not found in the environment")
    return properties


def mimic_device_key(properties):
    """Key of a (remote) device from its properties, each value ends with a newline"""
    if len(properties) > len(DEVICE_PROPERTIES):
        raise TooManyDeviceProperties(
            f"At most {len(DEVICE_PROPERTIES)} device properties are used, got {len(properties)}")
    for name, value in zip(DEVICE_PROPERTIES[:REQUIRED_PROPERTIES], properties):
        if not value:
            raise IncompleteDeviceProperties(f"Device property '{name}' is empty")
    if len(properties) < REQUIRED_PROPERTIES:
        missing = DEVICE_PROPERTIES[len(properties)]
        raise IncompleteDeviceProperties(f"Device property '{missing}' is missing")
    validate_mac(properties[1])

    data = b''.join(value.encode('utf-8') + b'\n' for value in properties)
    return md5_key(data)


def derive_device_key(properties=(), local_source=None):
    """
    Derive the key for secrets stored on a device.

    Args:
        properties: 0-4 values (serial number, maca, wlan_key, tr069_passphrase)
            - none: read them from the local environment
            - one: an already computed key as 64 hex digits
            - two or more: derive the key of the device they describe
        local_source: Alternate environment file for the local device

    Returns:
        str: Key as 64 lower case hex digits
    """
    properties = list(properties)

    if not properties:
        return mimic_device_key(local_device_properties(local_source)).hex()

    if len(properties) == 1:
        key = properties[0]
        if not HEX_KEY_PATTERN.fullmatch(key):
            raise MalformedKey("Key must be 64 hexadecimal digits")
        return key.lower()

    return mimic_device_key(properties).hex()


def derive_password_key(password):
    """Bootstrap key for an export file protected with a password"""
    return md5_key(password.encode('utf-8'))


def export_key(document, password):
    """
    Recover the key of a settings export from its header.

    Args:
        document: Export file content (bytes)
        password: Password used when the export was created

    Returns:
        bytes: 32 byte key for the secrets in the export
    """
    match = EXPORT_PASSWORD_PATTERN.search(document)
    if not match:
        raise MalformedKey("No encrypted password field found in export header")

    try:
        encrypted = fritz_base32.decode(match.group(1).decode('ascii'))
        decrypted = decrypt_value(encrypted, derive_password_key(password), is_string=False)
    except (CodecError, TokenDecryptFailed) as e:
        raise MalformedKey(f"Cannot decrypt export key, wrong password? ({e})") from e

    # Only the first half of the stored key is used
    return decrypted[:16].ljust(16, b'\x00') + b'\x00' * 16


def key_from_hex(key_hex):
    """Convert a hex key to bytes"""
    if not key_hex or not HEX_KEY_PATTERN.fullmatch(key_hex):
        raise MalformedKey("Key must be 64 hexadecimal digits")
    return bytes.fromhex(key_hex)
