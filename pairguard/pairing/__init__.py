# Pairing Module
"""
Pairing-password setup:
- Memory-hard password stretching into scalars w0, w1 (secret_deriver.py)
- Verifier point construction, two explicit variants (verifier.py)
- Password/salt generation and verifier records (setup.py)

Security features:
- Deterministic derivation (no hidden randomness)
- Scalars always in [1, n - 1]
- Stretch output wiped after reduction
"""

from .secret_deriver import (
    SecretDeriver,
    derive_scalars,
    reduce_to_scalar,
)

from .verifier import (
    Verifier,
    VerifierAlgorithm,
    VerifierBuilder,
    build_verifier,
    parse_verifier_point,
    verifier_point_by_key_pair,
    verifier_point_by_multiplication,
)

from .setup import (
    PairingSetup,
    VerifierRecord,
    generate_password,
    generate_salt,
    is_valid_salt,
)

__all__ = [
    # Stretching
    'SecretDeriver',
    'derive_scalars',
    'reduce_to_scalar',
    # Verifier
    'Verifier',
    'VerifierAlgorithm',
    'VerifierBuilder',
    'build_verifier',
    'parse_verifier_point',
    'verifier_point_by_key_pair',
    'verifier_point_by_multiplication',
    # Setup
    'PairingSetup',
    'VerifierRecord',
    'generate_password',
    'generate_salt',
    'is_valid_salt',
]
