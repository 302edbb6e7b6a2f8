"""
Sealed-Message Session

Combines KeyAgreement + ChannelKDF + AEADChannel into one-shot messages:

    sender:    e = fresh ephemeral key pair
               Z = ECDH(e, recipient_pub)
               K = KDF(Z, sender=e_pub, receiver=recipient_pub)
               c = AES-128-GCM(K, plaintext)
               -> SealedMessage(e_pub, c)
    recipient: Z = ECDH(recipient_priv, e_pub), same K, open c

Every message uses a new ephemeral key, so every derived key (and hence
every nonce) seals exactly one plaintext. Ephemeral private keys and
derived keys are discarded as soon as the message is sealed.

Peer keys taken from certificates must pass chain validation first
(see trusted_public_key).
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from cryptography.hazmat.primitives.asymmetric import ec

from ..config import CURVE, UNCOMPRESSED_POINT_SIZE
from ..core.points import public_key_to_bytes
from ..errors import InvalidKeyError
from ..logger import PairGuardLogger
from ..pki.chain_validator import CertificateLike, CertificateValidator
from .aead import AEADChannel
from .kdf import derive_key
from .key_agreement import KeyPair, PublicKeyLike, agree, load_peer_public_key


logger = PairGuardLogger.get_logger("session")


@dataclass(frozen=True)
class SealedMessage:
    """
    Sealed message components.

    Format of to_bytes(): [ephemeral_public (65 bytes) | ciphertext | tag]
    """
    ephemeral_public: bytes
    ciphertext: bytes

    def to_bytes(self) -> bytes:
        return self.ephemeral_public + self.ciphertext

    @classmethod
    def from_bytes(cls, data: bytes) -> 'SealedMessage':
        if len(data) < UNCOMPRESSED_POINT_SIZE:
            raise InvalidKeyError("Sealed message is shorter than an ephemeral key",
                                  stage="session")
        return cls(bytes(data[:UNCOMPRESSED_POINT_SIZE]), bytes(data[UNCOMPRESSED_POINT_SIZE:]))


def trusted_public_key(chain: Sequence[CertificateLike],
                       validator: CertificateValidator) -> bytes:
    """
    Validate a certificate chain and return the leaf's P-256 public key.

    Args:
        chain: Leaf-first DER certificates
        validator: Validator configured with trust anchors

    Returns:
        Leaf public key as 0x04 || X || Y

    Raises:
        ChainValidationError: If the chain does not validate
        InvalidKeyError: If the leaf key is not a P-256 key
    """
    validated = validator.validate_chain(chain)
    public_key = validated.leaf.public_key()
    if not isinstance(public_key, ec.EllipticCurvePublicKey) or \
            public_key.curve.name != CURVE.name:
        raise InvalidKeyError("Leaf certificate does not carry a P-256 key", stage="session")
    return public_key_to_bytes(public_key)


class SecureSession:
    """
    Message sealing between a static identity key and its peers.

    Example:
        # Bob's side
        bob = SecureSession(KeyPair.generate())

        # Alice seals for Bob
        alice = SecureSession()
        message = alice.seal_for(bob.public_bytes, b"Hello Bob!")

        # Bob opens
        plaintext = bob.open(message)
    """

    def __init__(self, identity: Optional[KeyPair] = None):
        """
        Args:
            identity: Static key pair used to open messages addressed to
                      us (generated if None)
        """
        self._identity = identity or KeyPair.generate()
        self._channel = AEADChannel()

    @property
    def public_bytes(self) -> bytes:
        return self._identity.public_bytes()

    def seal_for(self, recipient_public_key: PublicKeyLike, plaintext: bytes) -> SealedMessage:
        """
        Seal a plaintext for a recipient.

        Raises:
            InvalidKeyError: If the recipient key is invalid
        """
        recipient = load_peer_public_key(recipient_public_key)
        ephemeral = KeyPair.generate()
        ephemeral_public = ephemeral.public_bytes()

        shared = agree(ephemeral.private_key, recipient)
        ephemeral.discard()

        with derive_key(shared, ephemeral_public, recipient) as key:
            ciphertext = self._channel.seal(key, plaintext)

        logger.debug("Sealed message for peer %s...", public_key_to_bytes(recipient).hex()[:16])
        return SealedMessage(ephemeral_public, ciphertext)

    def open(self, message: SealedMessage) -> bytes:
        """
        Open a message sealed for our identity key.

        Raises:
            InvalidKeyError: If the ephemeral key is invalid
            AuthenticationError: If the ciphertext fails authentication
        """
        shared = agree(self._identity.private_key, message.ephemeral_public)
        with derive_key(shared, message.ephemeral_public, self.public_bytes) as key:
            return self._channel.open(key, message.ciphertext)

    def seal_for_certified(self, chain: Sequence[CertificateLike],
                           validator: CertificateValidator,
                           plaintext: bytes) -> SealedMessage:
        """Seal for the key in a certificate chain once the chain validates."""
        recipient = trusted_public_key(chain, validator)
        return self.seal_for(recipient, plaintext)
