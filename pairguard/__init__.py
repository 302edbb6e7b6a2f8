"""
pairguard - password-authenticated pairing and sealed channels on P-256.

Two phases:
- Pairing setup: password + salt -> (w0, w1) -> verifier L
- Session encryption: ECDH -> X9.63 KDF -> AES-128-GCM

Subpackages:
- core      curve arithmetic, point encoding, secret buffers
- pairing   SecretDeriver, VerifierBuilder, PairingSetup
- channel   key agreement, ChannelKDF, AEADChannel, SecureSession
- pki       CertificateValidator
"""

__version__ = "0.1.0"

from .errors import (
    PairGuardError,
    ConfigurationError,
    InvalidKeyError,
    DerivationError,
    AuthenticationError,
    ChainValidationError,
)

from .config import PairingConfig, StretchAlgorithm, StretchParams

__all__ = [
    'PairGuardError',
    'ConfigurationError',
    'InvalidKeyError',
    'DerivationError',
    'AuthenticationError',
    'ChainValidationError',
    'PairingConfig',
    'StretchAlgorithm',
    'StretchParams',
]
