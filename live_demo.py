#!/usr/bin/env python
"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                         PAIRGUARD LIVE DEMO                                   ║
╚══════════════════════════════════════════════════════════════════════════════╝

Walks through a device pairing:
- Pairing password and verifier record (scrypt-stretched P-256 scalars)
- Controller-side verification of the typed password
- Certificate chain validation of the device identity
- Sealed messages over ECDH + X9.63 KDF + AES-128-GCM

Run with --no-pause to skip the presenter pauses.
"""

import json
import logging
import sys
from datetime import datetime, timedelta, timezone

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from pairguard.channel import KeyPair, SecureSession
from pairguard.config import PairingConfig
from pairguard.errors import AuthenticationError, ChainValidationError
from pairguard.logger import PairGuardLogger
from pairguard.pairing import PairingSetup, VerifierAlgorithm, VerifierRecord
from pairguard.pki import CertificateValidator


PAUSE = "--no-pause" not in sys.argv


def print_header(title):
    """Print a formatted section header"""
    print("\n" + "═" * 70)
    print(f"  {title}")
    print("═" * 70)


def print_step(step_num, description):
    """Print a numbered step"""
    print(f"\n  [{step_num}] {description}")


def pause(message="Press ENTER to continue..."):
    """Pause for presenter to explain"""
    if not PAUSE:
        return
    print(f"\n  [PAUSE] {message}")
    input()


def make_certificate(common_name, key, issuer=None, issuer_key=None, ca=False):
    """Issue a short-lived P-256 certificate (self-signed when issuer is None)."""
    now = datetime.now(timezone.utc)
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer.subject if issuer is not None else subject)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(minutes=5))
        .not_valid_after(now + timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=ca, path_length=0 if ca else None),
                       critical=True)
    )
    if ca:
        builder = builder.add_extension(
            x509.KeyUsage(
                digital_signature=False, content_commitment=False,
                key_encipherment=False, data_encipherment=False,
                key_agreement=False, key_cert_sign=True, crl_sign=True,
                encipher_only=False, decipher_only=False,
            ),
            critical=True,
        )
    return builder.sign(issuer_key or key, hashes.SHA256())


def main():

    print("\n" * 2)
    print("╔" + "═" * 68 + "╗")
    print("║" + " " * 68 + "║")
    print("║" + "        PAIRGUARD - PASSWORD PAIRING ON P-256".center(68) + "║")
    print("║" + " " * 68 + "║")
    print("╚" + "═" * 68 + "╝")

    # Component loggers propagate to the package logger
    PairGuardLogger.get_logger("pairguard", level=logging.INFO, console_output=True)

    pause("Press ENTER to begin the demonstration...")

    # ========================================================================
    print_header("PART 1: PAIRING SETUP (DEVICE)")
    # ========================================================================

    config = PairingConfig.from_dict({'stretch': {'cpu_cost': 2 ** 12}})
    device_setup = PairingSetup(config, VerifierAlgorithm.MULTIPLICATION)

    print_step(1, "Stretching a fresh pairing password")
    print(f"      Parameters: {config.stretch.describe()}")
    password, record = device_setup.create()
    print(f"      Password shown on device label: {password}")
    print(f"      Salt: {record.salt.decode('ascii')}")
    print(f"      L  ({len(record.verifier.point_bytes)} bytes): {record.L[:32]}...")

    print_step(2, "Serializing the verifier record for the controller")
    wire = json.dumps(record.to_dict())
    print(f"      Record size: {len(wire)} bytes of JSON")

    pause()

    # ========================================================================
    print_header("PART 2: PASSWORD CHECK (CONTROLLER)")
    # ========================================================================

    received = VerifierRecord.from_dict(json.loads(wire))
    controller_setup = PairingSetup(config, VerifierAlgorithm.MULTIPLICATION)

    print_step(3, "User types the password from the label")
    print(f"      Correct password accepted: {controller_setup.verify(password, received)}")

    wrong = "1" * len(password) if password != "1" * len(password) else "2" * len(password)
    print_step(4, "User mistypes the password")
    print(f"      Wrong password accepted:   {controller_setup.verify(wrong, received)}")

    pause()

    # ========================================================================
    print_header("PART 3: DEVICE IDENTITY")
    # ========================================================================

    root_key = ec.generate_private_key(ec.SECP256R1())
    root = make_certificate("Pairing Root CA", root_key, ca=True)
    device_key = ec.generate_private_key(ec.SECP256R1())
    device_cert = make_certificate("device-01", device_key, issuer=root, issuer_key=root_key)
    chain = [c.public_bytes(serialization.Encoding.DER) for c in (device_cert, root)]

    print_step(5, "Validating the device chain against the pinned root")
    validator = CertificateValidator([root])
    validated = validator.validate_chain(chain)
    print(f"      ✓ Leaf: {validated.leaf.subject.rfc4514_string()}")
    print(f"      ✓ Anchor: {validated.anchor.subject.rfc4514_string()}")

    print_step(6, "Rejecting a chain from an unknown root")
    rogue_key = ec.generate_private_key(ec.SECP256R1())
    rogue_root = make_certificate("Pairing Root CA", rogue_key, ca=True)
    rogue_leaf = make_certificate("device-01", device_key, issuer=rogue_root,
                                  issuer_key=rogue_key)
    try:
        validator.validate_chain([rogue_leaf.public_bytes(serialization.Encoding.DER)])
        print("      ✗ Rogue chain accepted")
    except ChainValidationError as exc:
        print(f"      ✓ Rejected: {exc}")

    pause()

    # ========================================================================
    print_header("PART 4: SEALED MESSAGES")
    # ========================================================================

    device = SecureSession(KeyPair(device_key, device_key.public_key()))
    controller = SecureSession()

    print_step(7, "Controller seals for the certified device key")
    message = controller.seal_for_certified(chain, validator, b"pairing confirmed")
    print(f"      Ephemeral key: {message.ephemeral_public.hex()[:32]}...")
    print(f"      Ciphertext:    {message.ciphertext.hex()}")

    print_step(8, "Device opens the message")
    print(f"      Plaintext: {device.open(message).decode()}")

    print_step(9, "Tampered ciphertext")
    tampered = bytearray(message.to_bytes())
    tampered[-1] ^= 0x01
    try:
        device.open(type(message).from_bytes(bytes(tampered)))
        print("      ✗ Tampered message accepted")
    except AuthenticationError as exc:
        print(f"      ✓ Rejected: {exc}")

    print_header("DEMO COMPLETE")


if __name__ == "__main__":
    main()
