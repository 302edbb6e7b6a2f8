"""
Shared fixtures: fast stretch parameters and a small certificate factory.
"""

from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from pairguard.config import StretchParams


@pytest.fixture
def fast_params():
    """scrypt parameters cheap enough for unit tests."""
    return StretchParams.from_dict({
        'cpu_cost': 16,
        'block_size': 8,
        'parallelization': 1,
        'output_length': 64,
    })


class CertFactory:
    """Builds P-256 certificates signed with ECDSA-SHA256."""

    def __init__(self):
        self.now = datetime.now(timezone.utc)

    def make(self, common_name, issuer=None, issuer_key=None, ca=False,
             path_length=None, not_before=None, not_after=None,
             key_cert_sign=None):
        key = ec.generate_private_key(ec.SECP256R1())
        subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
        issuer_name = issuer.subject if issuer is not None else subject
        signing_key = issuer_key if issuer_key is not None else key

        builder = (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(issuer_name)
            .public_key(key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(not_before or self.now - timedelta(days=1))
            .not_valid_after(not_after or self.now + timedelta(days=30))
            .add_extension(
                x509.BasicConstraints(ca=ca, path_length=path_length if ca else None),
                critical=True,
            )
        )
        if key_cert_sign is not None:
            builder = builder.add_extension(
                x509.KeyUsage(
                    digital_signature=True,
                    content_commitment=False,
                    key_encipherment=False,
                    data_encipherment=False,
                    key_agreement=not key_cert_sign,
                    key_cert_sign=key_cert_sign,
                    crl_sign=key_cert_sign,
                    encipher_only=False,
                    decipher_only=False,
                ),
                critical=True,
            )
        cert = builder.sign(signing_key, hashes.SHA256())
        return cert, key

    @staticmethod
    def der(cert):
        return cert.public_bytes(serialization.Encoding.DER)


@pytest.fixture
def cert_factory():
    return CertFactory()


@pytest.fixture
def pki(cert_factory):
    """Root CA plus a leaf issued by it."""
    root, root_key = cert_factory.make("Pairing Root CA", ca=True, path_length=1,
                                       key_cert_sign=True)
    leaf, leaf_key = cert_factory.make("device-01", issuer=root, issuer_key=root_key)
    return {
        'root': root,
        'root_key': root_key,
        'leaf': leaf,
        'leaf_key': leaf_key,
        'factory': cert_factory,
    }
