"""
Secret Derivation Module

Stretches a low-entropy pairing password into two curve scalars (w0, w1).

Algorithm:
    1. out = Stretch(password, salt)            (scrypt or Argon2id, L bytes)
    2. z0 || z1 = out                           (two halves of L/2 bytes)
    3. wi = (int(zi) mod (n - 1)) + 1           (so 1 <= wi <= n - 1)

Security considerations:
- Stretching is deliberately slow; callers wrap it with their own timeout
- Fully deterministic: no randomness enters the derivation
- The stretched buffer is wiped once the scalars are computed
"""

from typing import Optional, Tuple, Union

from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret_raw
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from ..config import ARGON2_MIN_SALT_LENGTH, StretchAlgorithm, StretchParams
from ..core.ec_math import N, is_valid_scalar
from ..core.memory import SecretBuffer
from ..core.points import int_from_bytes
from ..errors import ConfigurationError, DerivationError
from ..logger import PairGuardLogger


logger = PairGuardLogger.get_logger("secret_deriver")

BytesLike = Union[bytes, bytearray, str]


def _as_bytes(value: BytesLike, name: str) -> bytes:
    if isinstance(value, str):
        return value.encode('utf-8')
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"{name} must be bytes or str")


def reduce_to_scalar(value: int) -> int:
    """Map an arbitrary non-negative integer into [1, n - 1]."""
    return value % (N - 1) + 1


class SecretDeriver:
    """
    Derives (w0, w1) from (password, salt) with a memory-hard function.

    The instance holds only immutable cost parameters, so one deriver can
    be shared between threads.

    Example:
        >>> deriver = SecretDeriver(StretchParams.from_dict({'cpu_cost': 16}))
        >>> w0, w1 = deriver.derive_scalars(b"123456", b"ab12cd34")
    """

    def __init__(self, params: Optional[StretchParams] = None):
        """
        Args:
            params: Stretching cost parameters (defaults if None)

        Raises:
            ConfigurationError: If the parameters are invalid
        """
        self._params = params or StretchParams()
        self._params.validate()

    @property
    def params(self) -> StretchParams:
        return self._params

    def stretch(self, password: bytes, salt: bytes) -> SecretBuffer:
        """
        Run the memory-hard function and return its output in a wipeable buffer.

        Raises:
            ConfigurationError: If the backend rejects the parameters
        """
        params = self._params
        logger.debug("Stretching password with %s", params.describe())

        if params.algorithm is StretchAlgorithm.SCRYPT:
            try:
                kdf = Scrypt(
                    salt=salt,
                    length=params.output_length,
                    n=params.cpu_cost,
                    r=params.block_size,
                    p=params.parallelization,
                )
                return SecretBuffer(kdf.derive(password))
            except (ValueError, MemoryError) as exc:
                raise ConfigurationError(f"scrypt rejected parameters: {exc}",
                                         stage="stretch") from exc

        if len(salt) < ARGON2_MIN_SALT_LENGTH:
            raise ConfigurationError(
                f"Argon2id needs a salt of at least {ARGON2_MIN_SALT_LENGTH} bytes",
                stage="stretch",
            )
        try:
            return SecretBuffer(hash_secret_raw(
                secret=password,
                salt=salt,
                time_cost=params.time_cost,
                memory_cost=params.memory_cost,
                parallelism=params.parallelization,
                hash_len=params.output_length,
                type=Type.ID,
            ))
        except HashingError as exc:
            raise ConfigurationError(f"Argon2id rejected parameters: {exc}",
                                     stage="stretch") from exc

    def derive_scalars(self, password: BytesLike, salt: BytesLike) -> Tuple[int, int]:
        """
        Derive the two password scalars.

        Args:
            password: Pairing password (str is UTF-8 encoded)
            salt: Salt stored alongside the verifier

        Returns:
            Tuple (w0, w1), both in [1, n - 1]

        Raises:
            ConfigurationError: Invalid cost parameters
            DerivationError: If a scalar falls outside [1, n - 1]
        """
        password = _as_bytes(password, "password")
        salt = _as_bytes(salt, "salt")
        if not salt:
            raise ConfigurationError("Salt must not be empty", stage="stretch")

        with self.stretch(password, salt) as output:
            half = len(output) // 2
            w0 = reduce_to_scalar(int_from_bytes(output.bytes(0, half)))
            w1 = reduce_to_scalar(int_from_bytes(output.bytes(half)))

        if not (is_valid_scalar(w0) and is_valid_scalar(w1)):
            raise DerivationError("Derived scalar out of range", stage="stretch")

        logger.debug("Derived password scalars (%d-byte stretch output)",
                     self._params.output_length)
        return w0, w1


def derive_scalars(password: BytesLike, salt: BytesLike,
                   params: Optional[StretchParams] = None) -> Tuple[int, int]:
    """
    One-shot helper around SecretDeriver.derive_scalars.

    Args:
        password: Pairing password
        salt: Salt
        params: Stretching cost parameters (defaults if None)

    Returns:
        Tuple (w0, w1)
    """
    return SecretDeriver(params).derive_scalars(password, salt)
