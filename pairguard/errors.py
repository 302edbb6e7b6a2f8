"""
Error taxonomy for pairguard.

Every failure raised by the library is a PairGuardError subclass carrying
the stage that failed, so callers can decide whether to abort the session
or restart pairing from scratch.

Messages never contain passwords, scalars, shared secrets or keys.
"""

from typing import Optional


class PairGuardError(Exception):
    """Base class for all pairguard failures."""

    default_stage = "unknown"

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.stage = stage or self.default_stage

    def __str__(self) -> str:
        return f"[{self.stage}] {super().__str__()}"


class ConfigurationError(PairGuardError):
    """Invalid stretching or curve parameters, rejected before computation."""

    default_stage = "config"


class InvalidKeyError(PairGuardError):
    """Malformed or off-curve key material."""

    default_stage = "key"


class DerivationError(PairGuardError):
    """Internal invariant violated while deriving scalars or points."""

    default_stage = "derivation"


class AuthenticationError(PairGuardError):
    """AEAD tag verification failed."""

    default_stage = "aead"


class ChainValidationError(PairGuardError):
    """
    Certificate path is invalid.

    The underlying exception (if any) is kept on ``cause`` as well as
    being chained through ``__cause__``.
    """

    default_stage = "chain"

    def __init__(self, message: str, cause: Optional[BaseException] = None,
                 stage: Optional[str] = None):
        super().__init__(message, stage)
        self.cause = cause
