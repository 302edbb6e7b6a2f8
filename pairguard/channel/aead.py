"""
AES-128-GCM Channel Encryption

Ciphertext format:
    [ciphertext (len(plaintext) bytes) | tag (16 bytes)]

Key schedule (from the 32-byte derived key):
    key   = derived[0:16]
    nonce = derived[16:28]

No associated data is used. The nonce is a deterministic function of the
derived key, so a derived key may seal exactly one plaintext. Sealing two
different messages under the same derived key breaks both confidentiality
and integrity; derive a fresh key per message.

Decryption fails closed: any tag mismatch raises AuthenticationError and
no plaintext is returned.
"""

from typing import Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..errors import AuthenticationError, InvalidKeyError
from ..logger import PairGuardLogger
from .kdf import DERIVED_KEY_SIZE, DerivedKey


logger = PairGuardLogger.get_logger("aead_channel")

TAG_SIZE = 16
KeyLike = Union[DerivedKey, bytes, bytearray]


def _as_derived_key(key: KeyLike) -> DerivedKey:
    if isinstance(key, DerivedKey):
        return key
    if isinstance(key, (bytes, bytearray)):
        return DerivedKey(key)
    raise InvalidKeyError(f"Channel key must be {DERIVED_KEY_SIZE} bytes", stage="aead")


class AEADChannel:
    """
    Stateless AES-128-GCM sealing under ChannelKDF keys.

    Example:
        >>> channel = AEADChannel()
        >>> sealed = channel.seal(key, b"hello")
        >>> channel.open(key, sealed)
        b'hello'
    """

    def seal(self, key: KeyLike, plaintext: bytes) -> bytes:
        """
        Encrypt and authenticate a plaintext.

        Args:
            key: 32-byte derived key (DerivedKey or raw bytes)
            plaintext: Data to encrypt

        Returns:
            ciphertext || tag

        Raises:
            InvalidKeyError: If the key has the wrong size or was wiped
        """
        derived = _as_derived_key(key)
        aesgcm = AESGCM(derived.aes_key)
        sealed = aesgcm.encrypt(derived.nonce, bytes(plaintext), None)
        logger.debug("Sealed %d-byte payload", len(plaintext))
        return sealed

    def open(self, key: KeyLike, ciphertext: bytes) -> bytes:
        """
        Verify and decrypt a sealed payload.

        Args:
            key: 32-byte derived key (DerivedKey or raw bytes)
            ciphertext: Output of seal()

        Returns:
            Plaintext

        Raises:
            AuthenticationError: On truncated input or tag mismatch
            InvalidKeyError: If the key has the wrong size or was wiped
        """
        derived = _as_derived_key(key)
        ciphertext = bytes(ciphertext)
        if len(ciphertext) < TAG_SIZE:
            logger.warning("Rejected sealed payload shorter than the tag")
            raise AuthenticationError("Ciphertext is truncated")

        aesgcm = AESGCM(derived.aes_key)
        try:
            return aesgcm.decrypt(derived.nonce, ciphertext, None)
        except InvalidTag as exc:
            logger.warning("Rejected sealed payload: authentication tag mismatch")
            raise AuthenticationError("Authentication tag verification failed") from exc


_channel = AEADChannel()


def seal(key: KeyLike, plaintext: bytes) -> bytes:
    """Module-level AEADChannel.seal."""
    return _channel.seal(key, plaintext)


def open_sealed(key: KeyLike, ciphertext: bytes) -> bytes:
    """Module-level AEADChannel.open."""
    return _channel.open(key, ciphertext)
