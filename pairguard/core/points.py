"""
Curve-point and scalar encoding.

Wire format for public keys is the uncompressed SEC1 form:
    [0x04 | X (32 bytes, big-endian) | Y (32 bytes, big-endian)]

Points parsed from untrusted input are checked against the curve
equation explicitly before any cryptography object is built from them.
"""

from typing import Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from ..config import COORDINATE_SIZE, CURVE, SCALAR_SIZE, UNCOMPRESSED_POINT_SIZE, UNCOMPRESSED_TAG
from ..errors import InvalidKeyError
from .ec_math import Point, is_on_curve


def int_to_bytes(value: int, size: int = SCALAR_SIZE) -> bytes:
    """Fixed-width big-endian encoding, zero-padded on the left."""
    return value.to_bytes(size, 'big')


def int_from_bytes(data: bytes) -> int:
    """Unsigned big-endian decoding."""
    return int.from_bytes(data, 'big')


def scalar_to_hex(value: int) -> str:
    """Scalar as a fixed-width (64 character) lowercase hex string."""
    return int_to_bytes(value, SCALAR_SIZE).hex()


def encode_point(point: Optional[Point], with_tag: bool = True) -> bytes:
    """
    Encode an affine point.

    Args:
        point: Finite point on the curve
        with_tag: Prefix the 0x04 uncompressed-form tag (65 bytes);
                  otherwise return raw X || Y (64 bytes)

    Raises:
        InvalidKeyError: For the point at infinity or an off-curve point
    """
    if not is_on_curve(point):
        raise InvalidKeyError("Cannot encode a point that is not on P-256")
    body = int_to_bytes(point.x, COORDINATE_SIZE) + int_to_bytes(point.y, COORDINATE_SIZE)
    if with_tag:
        return bytes([UNCOMPRESSED_TAG]) + body
    return body


def decode_point(data: bytes, allow_raw: bool = False) -> Point:
    """
    Decode an uncompressed point and check it lies on the curve.

    Args:
        data: Tagged 65-byte 0x04 || X || Y
        allow_raw: Also accept the untagged 64-byte X || Y form (only
                   KEY_PAIR verifier points use it)

    Raises:
        InvalidKeyError: On bad length, tag, out-of-range coordinates,
                         the point at infinity, or an off-curve point
    """
    data = bytes(data)
    if len(data) == UNCOMPRESSED_POINT_SIZE:
        if data[0] != UNCOMPRESSED_TAG:
            raise InvalidKeyError("Point is not in uncompressed form")
        body = data[1:]
    elif allow_raw and len(data) == 2 * COORDINATE_SIZE:
        body = data
    else:
        raise InvalidKeyError(
            f"Encoded point must be {UNCOMPRESSED_POINT_SIZE} bytes, got {len(data)}"
        )

    point = Point(
        int_from_bytes(body[:COORDINATE_SIZE]),
        int_from_bytes(body[COORDINATE_SIZE:]),
    )
    if not is_on_curve(point):
        raise InvalidKeyError("Point is not on P-256")
    return point


def public_key_from_point(point: Point) -> ec.EllipticCurvePublicKey:
    """Build a cryptography public key object from a validated point."""
    try:
        return ec.EllipticCurvePublicNumbers(point.x, point.y, CURVE).public_key()
    except ValueError as exc:
        raise InvalidKeyError("Point is not a valid P-256 public key") from exc


def public_key_from_bytes(data: bytes) -> ec.EllipticCurvePublicKey:
    """
    Parse an uncompressed public key from the wire.

    Raises:
        InvalidKeyError: For malformed, off-curve or infinity points
    """
    return public_key_from_point(decode_point(data))


def public_key_to_bytes(public_key: ec.EllipticCurvePublicKey) -> bytes:
    """
    Encode a public key as 0x04 || X || Y.

    Raises:
        InvalidKeyError: If the key is not on P-256
    """
    if not isinstance(public_key, ec.EllipticCurvePublicKey) or \
            public_key.curve.name != CURVE.name:
        raise InvalidKeyError("Public key is not a P-256 key")
    return public_key.public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.UncompressedPoint,
    )


def point_from_public_key(public_key: ec.EllipticCurvePublicKey) -> Point:
    """Affine coordinates of a public key."""
    numbers = public_key.public_numbers()
    return Point(numbers.x, numbers.y)
