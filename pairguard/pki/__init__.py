# PKI Module
"""
Certificate chain validation against mandatory trust anchors.
"""

from .chain_validator import CertificateValidator, ValidatedChain

__all__ = [
    'CertificateValidator',
    'ValidatedChain',
]
