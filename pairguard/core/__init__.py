# Core Primitives Module
"""
Curve primitives shared by the pairing and channel code:
- P-256 parameters, point checks and k * G (ec_math.py)
- Uncompressed point / scalar encoding with on-curve checks (points.py)
- Wipeable secret buffers (memory.py)
"""

from .ec_math import (
    Point,
    G,
    N,
    P,
    is_on_curve,
    is_valid_scalar,
    multiply_generator,
)

from .points import (
    int_to_bytes,
    int_from_bytes,
    scalar_to_hex,
    encode_point,
    decode_point,
    public_key_from_point,
    public_key_from_bytes,
    public_key_to_bytes,
    point_from_public_key,
)

from .memory import SecretBuffer, wipe

__all__ = [
    # Curve
    'Point',
    'G',
    'N',
    'P',
    'is_on_curve',
    'is_valid_scalar',
    'multiply_generator',
    # Encoding
    'int_to_bytes',
    'int_from_bytes',
    'scalar_to_hex',
    'encode_point',
    'decode_point',
    'public_key_from_point',
    'public_key_from_bytes',
    'public_key_to_bytes',
    'point_from_public_key',
    # Hygiene
    'SecretBuffer',
    'wipe',
]
