"""
P-256 Domain Parameters and Point Checks

Holds the NIST P-256 (secp256r1) constants and the checks applied to
points and scalars arriving from outside:
- On-curve membership (coordinates reduced, curve equation satisfied)
- Scalar range [1, n - 1]

Curve: y^2 = x^3 + a*x + b  (mod p), a = -3

Multiples of G (verifier points from w1) are computed by the
cryptography backend.
"""

from typing import NamedTuple, Optional

from cryptography.hazmat.primitives.asymmetric import ec

from ..config import CURVE
from ..errors import InvalidKeyError


# ============================================================================
# Domain parameters (SEC 2, section 2.4.2)
# ============================================================================

P = 0xFFFFFFFF00000001000000000000000000000000FFFFFFFFFFFFFFFFFFFFFFFF
A = P - 3
B = 0x5AC635D8AA3A93E7B3EBBD55769886BC651D06B0CC53B0F63BCE3C3E27D2604B
N = 0xFFFFFFFF00000000FFFFFFFFFFFFFFFFBCE6FAADA7179E84F3B9CAC2FC632551
GX = 0x6B17D1F2E12C4247F8BCE6E563A440F277037D812DEB33A0F4A13945D898C296
GY = 0x4FE342E2FE1A7F9B8EE7EB4A7C0F9E162BCE33576B315ECECBB6406837BF51F5


class Point(NamedTuple):
    """Affine curve point."""
    x: int
    y: int


# The point at infinity is represented by None throughout.
G = Point(GX, GY)


def is_on_curve(point: Optional[Point]) -> bool:
    """
    Check that a point satisfies the curve equation.

    The point at infinity is not accepted, and coordinates must be
    reduced (0 <= x, y < p).

    Args:
        point: Affine point or None

    Returns:
        True if the point is a finite point on P-256
    """
    if point is None:
        return False
    x, y = point
    if not (0 <= x < P and 0 <= y < P):
        return False
    return (y * y - (x * x * x + A * x + B)) % P == 0


def is_valid_scalar(k: int) -> bool:
    """True if 1 <= k <= n - 1."""
    return 1 <= k < N


def multiply_generator(k: int) -> Point:
    """
    Compute k * G with the cryptography backend.

    Args:
        k: Scalar in [1, n - 1]

    Returns:
        Affine point k * G

    Raises:
        InvalidKeyError: If k is outside [1, n - 1]
    """
    if isinstance(k, bool) or not isinstance(k, int) or not is_valid_scalar(k):
        raise InvalidKeyError("Scalar is outside [1, n - 1]")
    numbers = ec.derive_private_key(k, CURVE).public_key().public_numbers()
    return Point(numbers.x, numbers.y)


if __name__ == "__main__":
    print("P-256 Parameter Self-Test")
    print("=" * 70)

    print("\n[Test 1] Generator on curve")
    test1_pass = is_on_curve(G)
    print(f"  Status: {'✓ PASS' if test1_pass else '✗ FAIL'}")

    print("\n[Test 2] 1 * G == G and (n - 1) * G == -G")
    minus_g = multiply_generator(N - 1)
    test2_pass = multiply_generator(1) == G and minus_g == Point(GX, (-GY) % P)
    print(f"  Status: {'✓ PASS' if test2_pass else '✗ FAIL'}")

    print("\n[Test 3] Scalar range")
    test3_pass = not is_valid_scalar(0) and is_valid_scalar(1) and not is_valid_scalar(N)
    print(f"  3G.x = {multiply_generator(3).x:064x}")
    print(f"  Status: {'✓ PASS' if test3_pass else '✗ FAIL'}")

    all_passed = test1_pass and test2_pass and test3_pass
    print("\n" + "=" * 70)
    print(f"Overall: {'All tests passed!' if all_passed else 'Some tests failed!'}")
