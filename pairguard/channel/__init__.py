# Secure Channel Module
"""
Session encryption:
- ECDH (P-256) key agreement (key_agreement.py)
- X9.63 SHA-256 key derivation binding both public keys (kdf.py)
- AES-128-GCM sealing with a key-derived nonce (aead.py)
- One-shot sealed messages with per-message ephemeral keys (session.py)

Message format: [ephemeral public key (65) | ciphertext | tag (16)]

Security features:
- Peer points validated on-curve before use
- Sender/receiver role binding in the KDF
- Fresh derived key (and nonce) for every sealed message
- Fail-closed decryption
"""

from .key_agreement import (
    KeyPair,
    agree,
    load_peer_public_key,
)

from .kdf import (
    DerivedKey,
    derive_key,
    encode_public_key,
    DERIVED_KEY_SIZE,
)

from .aead import (
    AEADChannel,
    seal,
    open_sealed,
    TAG_SIZE,
)

from .session import (
    SealedMessage,
    SecureSession,
    trusted_public_key,
)

__all__ = [
    'KeyPair',
    'agree',
    'load_peer_public_key',
    'DerivedKey',
    'derive_key',
    'encode_public_key',
    'DERIVED_KEY_SIZE',
    'AEADChannel',
    'seal',
    'open_sealed',
    'TAG_SIZE',
    'SealedMessage',
    'SecureSession',
    'trusted_public_key',
]
