"""
Verifier Construction Module

Turns the password scalars into the public verifier L.

Two construction variants exist for protocol-version compatibility:

    KEY_PAIR        private key = w1, L = raw X || Y of its public point
                    (64 bytes, no tag)
    MULTIPLICATION  L = w1 * G, encoded as 0x04 || X || Y (65 bytes)

Both yield the point w1 * G, but the encodings differ and the two
verifier records are NOT interchangeable. Pairing and verification sides
must use the same variant.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from cryptography.hazmat.primitives.asymmetric import ec

from ..config import CURVE
from ..core.ec_math import is_valid_scalar, multiply_generator
from ..core.points import decode_point, encode_point, point_from_public_key, scalar_to_hex
from ..errors import DerivationError, InvalidKeyError
from ..logger import PairGuardLogger


logger = PairGuardLogger.get_logger("verifier")


class VerifierAlgorithm(Enum):
    """Named verifier-construction variants."""
    KEY_PAIR = "key_pair"
    MULTIPLICATION = "multiplication"


@dataclass(frozen=True)
class Verifier:
    """
    Password verifier.

    Attributes:
        w0: Verifier secret, 64 hex characters (treat like the password)
        L: Encoded verifier point, hex (public)
        algorithm: Variant that produced L
    """
    w0: str
    L: str
    algorithm: VerifierAlgorithm

    def __repr__(self) -> str:
        return f"Verifier(w0=<secret>, L={self.L[:16]}..., algorithm={self.algorithm.value})"

    @property
    def point_bytes(self) -> bytes:
        return bytes.fromhex(self.L)


def _check_scalar(w1: int) -> None:
    if not isinstance(w1, int) or not is_valid_scalar(w1):
        raise DerivationError("w1 is not a valid P-256 scalar", stage="verifier")


def verifier_point_by_key_pair(w1: int) -> bytes:
    """
    Build L from the key pair whose private scalar is exactly w1.

    Returns:
        Raw 64-byte X || Y
    """
    _check_scalar(w1)
    try:
        private_key = ec.derive_private_key(w1, CURVE)
    except ValueError as exc:
        raise DerivationError("Key pair construction rejected w1",
                              stage="verifier") from exc

    point = point_from_public_key(private_key.public_key())
    return encode_point(point, with_tag=False)


def verifier_point_by_multiplication(w1: int) -> bytes:
    """
    Compute L = w1 * G directly.

    Returns:
        Tagged 65-byte 0x04 || X || Y
    """
    _check_scalar(w1)
    try:
        point = multiply_generator(w1)
    except InvalidKeyError as exc:
        raise DerivationError("w1 * G could not be computed", stage="verifier") from exc
    return encode_point(point, with_tag=True)


_BUILDERS = {
    VerifierAlgorithm.KEY_PAIR: verifier_point_by_key_pair,
    VerifierAlgorithm.MULTIPLICATION: verifier_point_by_multiplication,
}


class VerifierBuilder:
    """
    Builds Verifier records with an explicitly selected variant.

    Example:
        >>> builder = VerifierBuilder(VerifierAlgorithm.MULTIPLICATION)
        >>> verifier = builder.build(w0, w1)
        >>> verifier.L[:2]
        '04'
    """

    def __init__(self, algorithm: VerifierAlgorithm = VerifierAlgorithm.MULTIPLICATION):
        if not isinstance(algorithm, VerifierAlgorithm):
            raise TypeError("algorithm must be a VerifierAlgorithm")
        self._algorithm = algorithm

    @property
    def algorithm(self) -> VerifierAlgorithm:
        return self._algorithm

    def build(self, w0: int, w1: int) -> Verifier:
        """
        Build the verifier for (w0, w1).

        Raises:
            DerivationError: If either scalar is outside [1, n - 1]
        """
        if not isinstance(w0, int) or not is_valid_scalar(w0):
            raise DerivationError("w0 is not a valid P-256 scalar", stage="verifier")

        point = _BUILDERS[self._algorithm](w1)
        logger.debug("Built %s verifier (%d-byte point)",
                     self._algorithm.value, len(point))
        return Verifier(w0=scalar_to_hex(w0), L=point.hex(), algorithm=self._algorithm)


def build_verifier(w0: int, w1: int,
                   algorithm: VerifierAlgorithm = VerifierAlgorithm.MULTIPLICATION) -> Verifier:
    """One-shot helper around VerifierBuilder.build."""
    return VerifierBuilder(algorithm).build(w0, w1)


def parse_verifier_point(L: str, algorithm: VerifierAlgorithm) -> Tuple[int, int]:
    """
    Decode a verifier point received from a peer for a known variant.

    Returns:
        Affine (x, y)

    Raises:
        InvalidKeyError: If the hex is malformed, the length does not
                         match the variant, or the point is off-curve
    """
    try:
        data = bytes.fromhex(L)
    except (TypeError, ValueError) as exc:
        raise InvalidKeyError("Verifier point is not valid hex", stage="verifier") from exc

    expected = 64 if algorithm is VerifierAlgorithm.KEY_PAIR else 65
    if len(data) != expected:
        raise InvalidKeyError(
            f"{algorithm.value} verifier must be {expected} bytes, got {len(data)}",
            stage="verifier",
        )
    point = decode_point(data, allow_raw=algorithm is VerifierAlgorithm.KEY_PAIR)
    return point.x, point.y

