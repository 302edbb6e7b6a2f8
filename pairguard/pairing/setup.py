"""
Pairing Setup Module

Generates pairing passwords and salts and produces the verifier record
that is handed to the peer.

Record format (all text):
    {'salt': '<alphanumeric>', 'w0': '<64 hex>', 'L': '<hex>', 'algorithm': '<variant>'}

Salt and L are public; w0 is secret-equivalent to the password.
"""

import hmac
import secrets
import string
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..config import PairingConfig
from ..core.ec_math import is_valid_scalar
from ..core.points import scalar_to_hex
from ..errors import ConfigurationError, InvalidKeyError
from ..logger import PairGuardLogger
from .secret_deriver import SecretDeriver
from .verifier import Verifier, VerifierAlgorithm, VerifierBuilder, parse_verifier_point


logger = PairGuardLogger.get_logger("pairing_setup")

ALPHABETS = {
    'digits': string.digits,
    'alphanumeric': string.ascii_letters + string.digits,
}


def generate_password(length: int = 8, alphabet: str = 'digits') -> str:
    """
    Generate a random pairing password.

    Args:
        length: Number of characters
        alphabet: 'digits' or 'alphanumeric'

    Returns:
        Password string
    """
    chars = ALPHABETS[alphabet]
    return ''.join(secrets.choice(chars) for _ in range(length))


def generate_salt(length: int = 16) -> bytes:
    """
    Generate a random alphanumeric salt.

    Args:
        length: Salt length in bytes

    Returns:
        ASCII alphanumeric bytes
    """
    chars = ALPHABETS['alphanumeric']
    return ''.join(secrets.choice(chars) for _ in range(length)).encode('ascii')


def is_valid_salt(salt: bytes) -> bool:
    """True if the salt is non-empty ASCII letters and digits."""
    return bool(salt) and all(chr(byte) in ALPHABETS['alphanumeric'] for byte in salt)


@dataclass(frozen=True)
class VerifierRecord:
    """Verifier plus the salt it was derived with."""
    salt: bytes
    verifier: Verifier

    @property
    def w0(self) -> str:
        return self.verifier.w0

    @property
    def L(self) -> str:
        return self.verifier.L

    @property
    def algorithm(self) -> VerifierAlgorithm:
        return self.verifier.algorithm

    def to_dict(self) -> Dict[str, str]:
        return {
            'salt': self.salt.decode('ascii'),
            'w0': self.w0,
            'L': self.L,
            'algorithm': self.algorithm.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> 'VerifierRecord':
        """
        Parse a record received from a peer.

        Raises:
            InvalidKeyError: On missing fields, malformed hex, a w0 outside
                             [1, n - 1] or an invalid verifier point
        """
        try:
            salt = data['salt'].encode('ascii')
            w0 = data['w0']
            L = data['L']
            algorithm = VerifierAlgorithm(data['algorithm'])
        except (KeyError, AttributeError, UnicodeEncodeError, ValueError) as exc:
            raise InvalidKeyError("Malformed verifier record", stage="pairing") from exc
        if not is_valid_salt(salt):
            raise InvalidKeyError("Salt must be ASCII letters and digits", stage="pairing")

        try:
            w0_value = int(w0, 16)
        except ValueError as exc:
            raise InvalidKeyError("w0 is not valid hex", stage="pairing") from exc
        if len(w0) != 64 or scalar_to_hex(w0_value) != w0.lower():
            raise InvalidKeyError("w0 must be 64 hex characters", stage="pairing")

        if not is_valid_scalar(w0_value):
            raise InvalidKeyError("w0 is outside the scalar range", stage="pairing")

        parse_verifier_point(L, algorithm)
        return cls(salt=salt, verifier=Verifier(w0=w0.lower(), L=L.lower(), algorithm=algorithm))


class PairingSetup:
    """
    Pairing-password setup.

    Example:
        >>> setup = PairingSetup()
        >>> password, record = setup.create()
        >>> setup.verify(password, record)
        True
    """

    def __init__(self, config: Optional[PairingConfig] = None,
                 algorithm: VerifierAlgorithm = VerifierAlgorithm.MULTIPLICATION):
        self._config = config or PairingConfig()
        self._deriver = SecretDeriver(self._config.stretch)
        self._builder = VerifierBuilder(algorithm)

    @property
    def config(self) -> PairingConfig:
        return self._config

    def create(self, password: Optional[str] = None,
               salt: Optional[bytes] = None) -> Tuple[str, VerifierRecord]:
        """
        Derive a verifier record for a password.

        Args:
            password: Caller-supplied password, or None for a random one
            salt: Caller-supplied salt, or None for a fresh random one

        Returns:
            Tuple (password, VerifierRecord)

        Raises:
            ConfigurationError: If the salt is not ASCII letters and digits
        """
        if password is None:
            password = generate_password(self._config.password_length,
                                         self._config.password_alphabet)
        if salt is None:
            salt = generate_salt(self._config.salt_length)
        elif isinstance(salt, str):
            salt = salt.encode('utf-8')
        if not isinstance(salt, (bytes, bytearray)) or not is_valid_salt(salt):
            raise ConfigurationError("Salt must be ASCII letters and digits", stage="pairing")

        w0, w1 = self._deriver.derive_scalars(password, salt)
        verifier = self._builder.build(w0, w1)
        logger.info("Created %s verifier record", verifier.algorithm.value)
        return password, VerifierRecord(salt=bytes(salt), verifier=verifier)

    def verify(self, password: str, record: VerifierRecord) -> bool:
        """
        Check that a password reproduces a verifier record.

        The record must have been produced with the same variant and cost
        parameters; a variant mismatch is reported as False.
        """
        if record.algorithm is not self._builder.algorithm:
            logger.warning("Verifier variant mismatch: record uses %s, setup uses %s",
                           record.algorithm.value, self._builder.algorithm.value)
            return False

        w0, w1 = self._deriver.derive_scalars(password, record.salt)
        candidate = self._builder.build(w0, w1)
        w0_ok = hmac.compare_digest(candidate.w0, record.w0)
        L_ok = hmac.compare_digest(candidate.L, record.L)
        return w0_ok and L_ok
