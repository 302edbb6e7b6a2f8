"""
Channel Key Derivation

ANSI X9.63 KDF with SHA-256, one block:

    K = SHA-256(Z || 00000001 || sender_pub || receiver_pub)

where both public keys are 65-byte uncompressed points. The 32-byte
result is split as:

    K[0:16]   AES-128 key
    K[16:32]  nonce seed (the AEAD nonce is K[16:28])

Sender and receiver are fixed roles agreed by the channel; swapping them
yields a different key.
"""

from typing import Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.kdf.x963kdf import X963KDF

from ..config import COORDINATE_SIZE
from ..core.memory import SecretBuffer
from ..core.points import decode_point, encode_point, public_key_to_bytes
from ..errors import InvalidKeyError
from ..logger import PairGuardLogger


logger = PairGuardLogger.get_logger("channel_kdf")

DERIVED_KEY_SIZE = 32
AES_KEY_SIZE = 16
NONCE_OFFSET = 16
NONCE_SIZE = 12

PublicKeyLike = Union[bytes, bytearray, ec.EllipticCurvePublicKey]


class DerivedKey(SecretBuffer):
    """
    32-byte channel key: AES key followed by the nonce seed.

    Lifetime is one message; wipe it once sealing/opening is done.
    """

    def __init__(self, data: Union[bytes, bytearray]):
        if len(data) != DERIVED_KEY_SIZE:
            raise InvalidKeyError(
                f"Derived key must be {DERIVED_KEY_SIZE} bytes, got {len(data)}",
                stage="kdf",
            )
        super().__init__(data)

    def __repr__(self) -> str:
        return f"DerivedKey(<{'wiped' if self.is_wiped else 'secret'}>)"

    @property
    def aes_key(self) -> bytes:
        return self.bytes(0, AES_KEY_SIZE)

    @property
    def nonce(self) -> bytes:
        return self.bytes(NONCE_OFFSET, NONCE_OFFSET + NONCE_SIZE)

    @property
    def nonce_seed(self) -> bytes:
        return self.bytes(NONCE_OFFSET, DERIVED_KEY_SIZE)

    def to_bytes(self) -> bytes:
        return self.bytes()


def encode_public_key(public_key: PublicKeyLike) -> bytes:
    """
    Normalize a public key to its 65-byte uncompressed encoding.

    Raises:
        InvalidKeyError: If the key is malformed or off-curve
    """
    if isinstance(public_key, (bytes, bytearray)):
        return encode_point(decode_point(bytes(public_key)), with_tag=True)
    return public_key_to_bytes(public_key)


def derive_key(shared_secret: bytes,
               sender_public_key: PublicKeyLike,
               receiver_public_key: PublicKeyLike) -> DerivedKey:
    """
    Derive the channel key from an ECDH shared secret.

    Args:
        shared_secret: 32-byte ECDH output
        sender_public_key: Public key in the sender role
        receiver_public_key: Public key in the receiver role

    Returns:
        DerivedKey (32 bytes)

    Raises:
        InvalidKeyError: On a malformed shared secret or public key
    """
    if len(shared_secret) != COORDINATE_SIZE:
        raise InvalidKeyError(
            f"Shared secret must be {COORDINATE_SIZE} bytes, got {len(shared_secret)}",
            stage="kdf",
        )

    shared_info = encode_public_key(sender_public_key) + encode_public_key(receiver_public_key)
    kdf = X963KDF(
        algorithm=hashes.SHA256(),
        length=DERIVED_KEY_SIZE,
        sharedinfo=shared_info,
    )
    key = DerivedKey(kdf.derive(bytes(shared_secret)))
    logger.debug("Derived channel key")
    return key
