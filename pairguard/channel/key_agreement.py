"""
ECDH Key Agreement (P-256)

shared_secret = X-coordinate of (private scalar * peer point),
encoded as 32 big-endian bytes.

Single use: an ephemeral private key must not be reused across several
agreements in a security-sensitive session. This is the caller's
responsibility; ``agree`` itself does not track usage.
"""

from dataclasses import dataclass
from typing import Optional, Union

from cryptography.hazmat.primitives.asymmetric import ec

from ..config import COORDINATE_SIZE, CURVE
from ..core.ec_math import is_on_curve
from ..core.points import (
    point_from_public_key,
    public_key_from_bytes,
    public_key_to_bytes,
)
from ..errors import DerivationError, InvalidKeyError
from ..logger import PairGuardLogger


logger = PairGuardLogger.get_logger("key_agreement")

PublicKeyLike = Union[bytes, bytearray, ec.EllipticCurvePublicKey]


@dataclass
class KeyPair:
    """
    P-256 key pair container.

    In the ephemeral role, generate a fresh pair per agreement and call
    discard() afterwards.
    """
    private_key: Optional[ec.EllipticCurvePrivateKey]
    public_key: ec.EllipticCurvePublicKey

    @classmethod
    def generate(cls) -> 'KeyPair':
        """Generate a new P-256 key pair."""
        private_key = ec.generate_private_key(CURVE)
        return cls(private_key, private_key.public_key())

    def public_bytes(self) -> bytes:
        """Public key as 0x04 || X || Y."""
        return public_key_to_bytes(self.public_key)

    def discard(self) -> None:
        """Drop the reference to the private key."""
        self.private_key = None

    def __repr__(self) -> str:
        held = "held" if self.private_key is not None else "discarded"
        return f"KeyPair(public={self.public_bytes().hex()[:16]}..., private=<{held}>)"


def load_peer_public_key(peer_public_key: PublicKeyLike) -> ec.EllipticCurvePublicKey:
    """
    Validate a peer public key and return it as a key object.

    Raises:
        InvalidKeyError: For wrong curves, malformed encodings, off-curve
                         points or the point at infinity
    """
    if isinstance(peer_public_key, (bytes, bytearray)):
        return public_key_from_bytes(bytes(peer_public_key))

    if not isinstance(peer_public_key, ec.EllipticCurvePublicKey):
        raise InvalidKeyError("Peer public key must be bytes or a P-256 public key",
                              stage="agreement")
    if peer_public_key.curve.name != CURVE.name:
        raise InvalidKeyError(f"Peer key is on {peer_public_key.curve.name}, not {CURVE.name}",
                              stage="agreement")
    if not is_on_curve(point_from_public_key(peer_public_key)):
        raise InvalidKeyError("Peer point is not on P-256", stage="agreement")
    return peer_public_key


def agree(private_key: ec.EllipticCurvePrivateKey,
          peer_public_key: PublicKeyLike) -> bytes:
    """
    Compute the raw ECDH shared secret.

    Args:
        private_key: Our (ephemeral or static) P-256 private key
        peer_public_key: Peer key as uncompressed bytes or key object

    Returns:
        32-byte X-coordinate of the shared point

    Raises:
        InvalidKeyError: If either key is unusable
        DerivationError: If the backend produced an unexpected result
    """
    if private_key is None:
        raise InvalidKeyError("Private key has been discarded", stage="agreement")
    if not isinstance(private_key, ec.EllipticCurvePrivateKey) or \
            private_key.curve.name != CURVE.name:
        raise InvalidKeyError("Private key is not a P-256 key", stage="agreement")

    peer = load_peer_public_key(peer_public_key)
    try:
        shared = private_key.exchange(ec.ECDH(), peer)
    except ValueError as exc:
        raise InvalidKeyError("ECDH rejected the peer key", stage="agreement") from exc

    if len(shared) != COORDINATE_SIZE or not any(shared):
        raise DerivationError("ECDH produced an invalid shared secret", stage="agreement")

    logger.debug("Completed ECDH agreement")
    return shared
