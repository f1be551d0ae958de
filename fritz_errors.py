"""
Exception hierarchy for the FRITZ!OS secret decoder.

Key-derivation and identifier errors are fatal for a run; codec and
decryption errors on single tokens are caught by the substitution engine.
"""


class DecoderError(Exception):
    """Base class for all decoder errors."""


class InvalidHardwareIdentifier(DecoderError, ValueError):
    """Raised when a MAC address is not 17 characters of [A-F0-9:]."""


class KeyDerivationFailed(DecoderError):
    """Raised when no usable cipher key can be provided."""


class NoLocalDevice(KeyDerivationFailed):
    """Raised when the environment store is missing or incomplete."""


class MalformedKey(KeyDerivationFailed, ValueError):
    """Raised when an explicit key is not 64 hexadecimal digits."""


class IncompleteDeviceProperties(KeyDerivationFailed, ValueError):
    """Raised when a required device property is missing or empty."""


class TooManyDeviceProperties(KeyDerivationFailed, ValueError):
    """Raised when more than four device properties are supplied."""


class CodecError(DecoderError, ValueError):
    pass


class InvalidSymbol(CodecError):
    """Raised for a character outside the base32 alphabet."""


class InvalidLength(CodecError):
    """Raised when the last group has no valid base32 block size."""


class TokenDecryptFailed(DecoderError):
    """Raised when a token cannot be decrypted with the given key."""


class MalformedCiphertext(TokenDecryptFailed):
    """Raised when the decoded token is too short or not block aligned."""


class IntegrityCheckFailed(TokenDecryptFailed):
    """Raised when the decrypted value fails its hash or length check."""


class MissingCollaborator(DecoderError):
    """Raised when a required library or file is not available."""
