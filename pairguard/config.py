"""
Configuration for pairguard.

Holds the fixed curve identifiers and the tunable pairing parameters
(password length, salt length, stretching cost factors).

Defaults live in module-level dictionaries; callers override individual
keys, and every value is validated before any stretching starts.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Optional

from cryptography.hazmat.primitives.asymmetric import ec

from .errors import ConfigurationError


# ============================================================================
# Curve (fixed)
# ============================================================================

CURVE_NAME = "secp256r1"
CURVE = ec.SECP256R1()
COORDINATE_SIZE = 32            # bytes per affine coordinate
SCALAR_SIZE = 32                # bytes per scalar (w0, w1, private keys)
UNCOMPRESSED_POINT_SIZE = 1 + 2 * COORDINATE_SIZE
UNCOMPRESSED_TAG = 0x04

_CURVE_ALIASES = {"secp256r1", "prime256v1", "p-256", "nist p-256"}


def check_curve_name(name: str) -> str:
    """
    Reject any curve other than P-256.

    Returns:
        The canonical curve name

    Raises:
        ConfigurationError: For any other curve
    """
    if name.strip().lower() not in _CURVE_ALIASES:
        raise ConfigurationError(f"Unsupported curve: {name!r} (only {CURVE_NAME})")
    return CURVE_NAME


# ============================================================================
# Stretching parameters
# ============================================================================

class StretchAlgorithm(Enum):
    """Memory-hard functions available for password stretching."""
    SCRYPT = "scrypt"
    ARGON2ID = "argon2id"


# scrypt: cpu_cost=N, block_size=r, parallelization=p
# argon2id: time_cost iterations, memory_cost KiB, parallelization lanes
DEFAULT_STRETCH_CONFIG = {
    'algorithm': StretchAlgorithm.SCRYPT,
    'cpu_cost': 2 ** 14,
    'block_size': 8,
    'parallelization': 1,
    'output_length': 64,
    'time_cost': 3,
    'memory_cost': 65536,
}

ARGON2_MIN_SALT_LENGTH = 8


def _is_power_of_two(value: int) -> bool:
    return value > 0 and (value & (value - 1)) == 0


@dataclass(frozen=True)
class StretchParams:
    """
    Cost parameters for the memory-hard stretching step.

    Example:
        >>> params = StretchParams.from_dict({'cpu_cost': 16})
        >>> params.output_length
        64
    """
    algorithm: StretchAlgorithm = DEFAULT_STRETCH_CONFIG['algorithm']
    cpu_cost: int = DEFAULT_STRETCH_CONFIG['cpu_cost']
    block_size: int = DEFAULT_STRETCH_CONFIG['block_size']
    parallelization: int = DEFAULT_STRETCH_CONFIG['parallelization']
    output_length: int = DEFAULT_STRETCH_CONFIG['output_length']
    time_cost: int = DEFAULT_STRETCH_CONFIG['time_cost']
    memory_cost: int = DEFAULT_STRETCH_CONFIG['memory_cost']

    @classmethod
    def from_dict(cls, overrides: Optional[Dict[str, Any]] = None) -> 'StretchParams':
        """
        Build parameters from the defaults plus overrides.

        The algorithm may be given as a StretchAlgorithm or its string value.

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        config = DEFAULT_STRETCH_CONFIG.copy()
        overrides = dict(overrides or {})

        unknown = set(overrides) - set(config)
        if unknown:
            raise ConfigurationError(
                f"Unknown stretch parameters: {', '.join(sorted(unknown))}"
            )
        config.update(overrides)

        algorithm = config['algorithm']
        if not isinstance(algorithm, StretchAlgorithm):
            try:
                config['algorithm'] = StretchAlgorithm(str(algorithm).lower())
            except ValueError as exc:
                raise ConfigurationError(
                    f"Unknown stretch algorithm: {algorithm!r}"
                ) from exc

        params = cls(**config)
        params.validate()
        return params

    def validate(self) -> None:
        """
        Check the parameters for the selected algorithm.

        Raises:
            ConfigurationError: Describing the first invalid value
        """
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name != 'algorithm' and (isinstance(value, bool) or not isinstance(value, int)):
                raise ConfigurationError(f"{f.name} must be an integer")

        if self.output_length < 2 or self.output_length % 2:
            raise ConfigurationError(
                f"output_length must be an even number >= 2, got {self.output_length}"
            )
        if self.parallelization < 1:
            raise ConfigurationError("parallelization must be >= 1")

        if self.algorithm is StretchAlgorithm.SCRYPT:
            if self.cpu_cost < 2 or not _is_power_of_two(self.cpu_cost):
                raise ConfigurationError(
                    f"cpu_cost must be a power of two greater than 1, got {self.cpu_cost}"
                )
            if self.block_size < 1:
                raise ConfigurationError("block_size must be >= 1")
        elif self.algorithm is StretchAlgorithm.ARGON2ID:
            if self.time_cost < 1:
                raise ConfigurationError("time_cost must be >= 1")
            if self.memory_cost < 8 * self.parallelization:
                raise ConfigurationError(
                    "memory_cost must be at least 8 KiB per parallel lane"
                )
        else:
            raise ConfigurationError(f"Unsupported stretch algorithm: {self.algorithm!r}")

    def describe(self) -> Dict[str, Any]:
        """Non-secret summary, safe to log."""
        if self.algorithm is StretchAlgorithm.SCRYPT:
            return {
                'algorithm': self.algorithm.value,
                'n': self.cpu_cost,
                'r': self.block_size,
                'p': self.parallelization,
                'length': self.output_length,
            }
        return {
            'algorithm': self.algorithm.value,
            'time_cost': self.time_cost,
            'memory_cost': self.memory_cost,
            'parallelism': self.parallelization,
            'length': self.output_length,
        }


# ============================================================================
# Pairing parameters
# ============================================================================

PASSWORD_ALPHABETS = ('digits', 'alphanumeric')

DEFAULT_PAIRING_CONFIG = {
    'password_length': 8,
    'password_alphabet': 'digits',
    'salt_length': 16,
}

PASSWORD_MIN_LENGTH = 6
SALT_MIN_LENGTH = 8


@dataclass(frozen=True)
class PairingConfig:
    """Parameters for pairing-password setup."""
    password_length: int = DEFAULT_PAIRING_CONFIG['password_length']
    password_alphabet: str = DEFAULT_PAIRING_CONFIG['password_alphabet']
    salt_length: int = DEFAULT_PAIRING_CONFIG['salt_length']
    stretch: StretchParams = field(default_factory=StretchParams)

    def __post_init__(self):
        if self.password_length < PASSWORD_MIN_LENGTH:
            raise ConfigurationError(
                f"password_length must be at least {PASSWORD_MIN_LENGTH}"
            )
        if self.password_alphabet not in PASSWORD_ALPHABETS:
            raise ConfigurationError(
                f"password_alphabet must be one of {PASSWORD_ALPHABETS}"
            )
        if self.salt_length < SALT_MIN_LENGTH:
            raise ConfigurationError(f"salt_length must be at least {SALT_MIN_LENGTH}")
        self.stretch.validate()

    @classmethod
    def from_dict(cls, overrides: Optional[Dict[str, Any]] = None) -> 'PairingConfig':
        """
        Build a config from defaults plus overrides.

        A nested ``stretch`` dict is passed to StretchParams.from_dict.
        """
        overrides = dict(overrides or {})
        stretch = overrides.pop('stretch', None)
        if isinstance(stretch, StretchParams):
            stretch.validate()
        else:
            stretch = StretchParams.from_dict(stretch)

        config = DEFAULT_PAIRING_CONFIG.copy()
        unknown = set(overrides) - set(config)
        if unknown:
            raise ConfigurationError(
                f"Unknown pairing parameters: {', '.join(sorted(unknown))}"
            )
        config.update(overrides)
        return cls(stretch=stretch, **config)
