"""
X.509 Certificate Chain Validation

Validates a leaf-first chain of DER certificates against a mandatory set
of trust anchors:

1. Every certificate parses as DER X.509
2. Every certificate (and the anchor) is inside its validity window
3. certs[i].issuer == certs[i+1].subject and the signature verifies
4. Every issuing certificate is a CA (basicConstraints), honours its
   pathLenConstraint and, if keyUsage is present, allows keyCertSign
5. The last certificate either is an anchor or is issued by one

Revocation is not checked. The validator keeps no state between calls.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Union

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.x509.oid import ExtensionOID

from ..errors import ChainValidationError, ConfigurationError
from ..logger import PairGuardLogger


logger = PairGuardLogger.get_logger("chain_validator")

CertificateLike = Union[x509.Certificate, bytes]


@dataclass(frozen=True)
class ValidatedChain:
    """Result of a successful validation."""
    certificates: List[x509.Certificate]
    anchor: x509.Certificate

    @property
    def leaf(self) -> x509.Certificate:
        return self.certificates[0]


def _load(cert: CertificateLike, position: int) -> x509.Certificate:
    if isinstance(cert, x509.Certificate):
        return cert
    try:
        return x509.load_der_x509_certificate(bytes(cert))
    except (TypeError, ValueError) as exc:
        raise ChainValidationError(
            f"Certificate {position} is not valid DER", cause=exc
        ) from exc


def _fingerprint(cert: x509.Certificate) -> bytes:
    return cert.fingerprint(hashes.SHA256())


def _subject(cert: x509.Certificate) -> str:
    return cert.subject.rfc4514_string()


class CertificateValidator:
    """
    PKIX-style path validation gate.

    Example:
        >>> validator = CertificateValidator([root_cert])
        >>> chain = validator.validate_chain([leaf_der, root_der])
        >>> chain.anchor.subject == root_cert.subject
        True
    """

    def __init__(self, trust_anchors: Sequence[CertificateLike],
                 now: Optional[datetime] = None):
        """
        Args:
            trust_anchors: Trusted root certificates (required, non-empty)
            now: Fixed validation time (defaults to the current UTC time)

        Raises:
            ConfigurationError: If no trust anchors are supplied or one
                                cannot be parsed
        """
        if not trust_anchors:
            raise ConfigurationError("At least one trust anchor is required", stage="chain")
        try:
            self._anchors = [_load(anchor, i) for i, anchor in enumerate(trust_anchors)]
        except ChainValidationError as exc:
            raise ConfigurationError("Trust anchor is not valid DER", stage="chain") from exc
        self._anchor_fingerprints = {_fingerprint(a): a for a in self._anchors}
        self._now = now

    @property
    def trust_anchors(self) -> List[x509.Certificate]:
        return list(self._anchors)

    def _validation_time(self) -> datetime:
        if self._now is None:
            return datetime.now(timezone.utc)
        if self._now.tzinfo is None:
            return self._now.replace(tzinfo=timezone.utc)
        return self._now

    def validate_chain(self, certs: Sequence[CertificateLike]) -> ValidatedChain:
        """
        Validate a leaf-first chain.

        Args:
            certs: Leaf first, optionally followed by intermediates and
                   the root

        Returns:
            ValidatedChain

        Raises:
            ChainValidationError: With the failing check and its cause
        """
        if not certs:
            raise ChainValidationError("Certificate chain is empty")

        chain = [_load(cert, i) for i, cert in enumerate(certs)]
        now = self._validation_time()

        for position, cert in enumerate(chain):
            self._check_validity(cert, now, f"certificate {position}")

        for position in range(len(chain) - 1):
            # position intermediate CAs sit between the leaf and this issuer
            self._check_issued_by(chain[position], chain[position + 1],
                                  intermediates_below=position)

        anchor = self._find_anchor(chain, now)
        logger.debug("Validated chain for %s (anchor %s)",
                     _subject(chain[0]), _subject(anchor))
        return ValidatedChain(certificates=chain, anchor=anchor)

    def _check_validity(self, cert: x509.Certificate, now: datetime, label: str) -> None:
        if now < cert.not_valid_before_utc:
            raise ChainValidationError(
                f"{label} ({_subject(cert)}) is not valid before {cert.not_valid_before_utc}"
            )
        if now > cert.not_valid_after_utc:
            raise ChainValidationError(
                f"{label} ({_subject(cert)}) expired at {cert.not_valid_after_utc}"
            )

    def _check_ca(self, issuer: x509.Certificate, intermediates_below: int) -> None:
        try:
            constraints = issuer.extensions.get_extension_for_oid(
                ExtensionOID.BASIC_CONSTRAINTS
            ).value
        except x509.ExtensionNotFound as exc:
            raise ChainValidationError(
                f"Issuer {_subject(issuer)} has no basicConstraints", cause=exc
            ) from exc

        if not constraints.ca:
            raise ChainValidationError(f"Issuer {_subject(issuer)} is not a CA")
        if constraints.path_length is not None and intermediates_below > constraints.path_length:
            raise ChainValidationError(
                f"Path length constraint of {_subject(issuer)} exceeded "
                f"(max={constraints.path_length}, depth={intermediates_below})"
            )

        try:
            usage = issuer.extensions.get_extension_for_oid(ExtensionOID.KEY_USAGE).value
        except x509.ExtensionNotFound:
            return
        if not usage.key_cert_sign:
            raise ChainValidationError(
                f"Issuer {_subject(issuer)} is not allowed to sign certificates"
            )

    def _check_issued_by(self, cert: x509.Certificate, issuer: x509.Certificate,
                         intermediates_below: int) -> None:
        if cert.issuer != issuer.subject:
            raise ChainValidationError(
                f"Broken chain: {_subject(cert)} is not issued by {_subject(issuer)}"
            )
        self._check_ca(issuer, intermediates_below)
        try:
            cert.verify_directly_issued_by(issuer)
        except (InvalidSignature, ValueError, TypeError) as exc:
            raise ChainValidationError(
                f"Signature on {_subject(cert)} does not verify against {_subject(issuer)}",
                cause=exc,
            ) from exc

    def _find_anchor(self, chain: List[x509.Certificate], now: datetime) -> x509.Certificate:
        top = chain[-1]

        anchor = self._anchor_fingerprints.get(_fingerprint(top))
        if anchor is not None:
            return anchor

        last_error: Optional[ChainValidationError] = None
        for anchor in self._anchors:
            if anchor.subject != top.issuer:
                continue
            try:
                self._check_validity(anchor, now, "trust anchor")
                self._check_issued_by(top, anchor, intermediates_below=len(chain) - 1)
                return anchor
            except ChainValidationError as exc:
                last_error = exc

        logger.warning("Chain for %s does not end at a trust anchor", _subject(chain[0]))
        raise ChainValidationError(
            f"Untrusted root: {top.issuer.rfc4514_string()} is not a trust anchor",
            cause=last_error,
        )
