"""
Unit tests for the secure channel module.

Tests:
- ECDH key agreement and peer key validation
- X9.63 key derivation and role binding
- AES-128-GCM sealing
- Sealed-message sessions
"""

import hashlib
import os
import struct

import pytest
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from pairguard.channel import (
    AEADChannel,
    DerivedKey,
    KeyPair,
    SealedMessage,
    SecureSession,
    agree,
    derive_key,
    open_sealed,
    seal,
)
from pairguard.core.ec_math import G, P
from pairguard.core.points import encode_point
from pairguard.errors import AuthenticationError, InvalidKeyError


def _channel_key():
    alice = KeyPair.generate()
    bob = KeyPair.generate()
    shared = agree(alice.private_key, bob.public_bytes())
    return derive_key(shared, alice.public_bytes(), bob.public_bytes())


class TestKeyAgreement:
    """Tests for ECDH."""

    def test_keypair_public_bytes(self):
        kp = KeyPair.generate()
        data = kp.public_bytes()
        assert len(data) == 65
        assert data[0] == 0x04

    def test_shared_secret_agreement(self):
        """Both parties compute the same 32-byte secret."""
        alice = KeyPair.generate()
        bob = KeyPair.generate()
        alice_secret = agree(alice.private_key, bob.public_bytes())
        bob_secret = agree(bob.private_key, alice.public_key)
        assert alice_secret == bob_secret
        assert len(alice_secret) == 32

    def test_shared_secret_is_x_coordinate(self):
        """Secret equals the X-coordinate of k * Peer."""
        private = ec.derive_private_key(3, ec.SECP256R1())
        peer = encode_point(G)
        expected = bytes.fromhex(
            "5ecbe4d1a6330a44c8f7ef951d4bf165e6c6b721efada985fb41661bc6e7fd6c"
        )
        assert agree(private, peer) == expected

    def test_different_peers_different_secrets(self):
        alice = KeyPair.generate()
        assert agree(alice.private_key, KeyPair.generate().public_bytes()) != \
            agree(alice.private_key, KeyPair.generate().public_bytes())

    def test_off_curve_peer_rejected(self):
        alice = KeyPair.generate()
        bad = encode_point(G)[:-1] + bytes([encode_point(G)[-1] ^ 1])
        with pytest.raises(InvalidKeyError):
            agree(alice.private_key, bad)

    def test_infinity_and_garbage_rejected(self):
        alice = KeyPair.generate()
        for peer in (b"\x00", b"", b"\x04" + b"\x00" * 64, os.urandom(65)):
            with pytest.raises(InvalidKeyError):
                agree(alice.private_key, peer)

    def test_out_of_range_coordinate_rejected(self):
        alice = KeyPair.generate()
        data = b"\x04" + P.to_bytes(32, 'big') + G.y.to_bytes(32, 'big')
        with pytest.raises(InvalidKeyError):
            agree(alice.private_key, data)

    def test_wrong_curve_peer_rejected(self):
        alice = KeyPair.generate()
        other = ec.generate_private_key(ec.SECP384R1()).public_key()
        with pytest.raises(InvalidKeyError):
            agree(alice.private_key, other)

    def test_discarded_key_rejected(self):
        kp = KeyPair.generate()
        kp.discard()
        with pytest.raises(InvalidKeyError):
            agree(kp.private_key, KeyPair.generate().public_bytes())
        assert "discarded" in repr(kp)


class TestChannelKDF:
    """Tests for the X9.63 derivation."""

    def test_matches_hash_construction(self):
        """K = SHA-256(Z || 00000001 || sender || receiver)."""
        alice = KeyPair.generate()
        bob = KeyPair.generate()
        shared = agree(alice.private_key, bob.public_bytes())
        expected = hashlib.sha256(
            shared + struct.pack('>I', 1) + alice.public_bytes() + bob.public_bytes()
        ).digest()
        key = derive_key(shared, alice.public_bytes(), bob.public_bytes())
        assert key.to_bytes() == expected
        assert key.aes_key == expected[:16]
        assert key.nonce == expected[16:28]
        assert key.nonce_seed == expected[16:32]

    def test_key_objects_and_bytes_agree(self):
        alice = KeyPair.generate()
        bob = KeyPair.generate()
        shared = os.urandom(32)
        assert derive_key(shared, alice.public_key, bob.public_key).to_bytes() == \
            derive_key(shared, alice.public_bytes(), bob.public_bytes()).to_bytes()

    def test_role_sensitivity(self):
        """Swapping sender and receiver changes the key."""
        a = KeyPair.generate().public_bytes()
        b = KeyPair.generate().public_bytes()
        shared = os.urandom(32)
        assert derive_key(shared, a, b).to_bytes() != derive_key(shared, b, a).to_bytes()

    def test_both_sides_derive_same_key(self):
        alice = KeyPair.generate()
        bob = KeyPair.generate()
        k1 = derive_key(agree(alice.private_key, bob.public_key),
                        alice.public_bytes(), bob.public_bytes())
        k2 = derive_key(agree(bob.private_key, alice.public_key),
                        alice.public_bytes(), bob.public_bytes())
        assert k1.to_bytes() == k2.to_bytes()

    def test_bad_inputs(self):
        a = KeyPair.generate().public_bytes()
        with pytest.raises(InvalidKeyError):
            derive_key(b"short", a, a)
        with pytest.raises(InvalidKeyError):
            derive_key(os.urandom(32), a, b"\x04" + b"\x01" * 64)

    def test_wipe(self):
        key = _channel_key()
        key.wipe()
        with pytest.raises(InvalidKeyError):
            key.aes_key

    def test_wrong_size_key(self):
        with pytest.raises(InvalidKeyError):
            DerivedKey(b"\x00" * 16)


class TestAEADChannel:
    """Tests for AES-128-GCM sealing."""

    @pytest.mark.parametrize("plaintext", [b"", b"x", b"Hello, device!", os.urandom(1000)])
    def test_roundtrip(self, plaintext):
        key = _channel_key()
        sealed = seal(key, plaintext)
        assert len(sealed) == len(plaintext) + 16
        assert open_sealed(key, sealed) == plaintext

    def test_matches_aesgcm(self):
        """Key is bytes 0..15 and nonce bytes 16..27, no associated data."""
        raw = bytes(range(32))
        sealed = AEADChannel().seal(raw, b"payload")
        assert sealed == AESGCM(raw[:16]).encrypt(raw[16:28], b"payload", None)

    def test_raw_bytes_key(self):
        raw = os.urandom(32)
        channel = AEADChannel()
        assert channel.open(raw, channel.seal(raw, b"data")) == b"data"

    def test_wrong_key_fails(self):
        sealed = seal(_channel_key(), b"secret")
        with pytest.raises(AuthenticationError):
            open_sealed(_channel_key(), sealed)

    def test_truncated_fails(self):
        key = _channel_key()
        sealed = seal(key, b"secret message")
        for length in (0, 5, 15, len(sealed) - 1):
            with pytest.raises(AuthenticationError):
                open_sealed(key, sealed[:length])

    def test_invalid_key_size(self):
        with pytest.raises(InvalidKeyError):
            seal(b"\x00" * 16, b"data")


class TestSecureSession:
    """Tests for sealed-message sessions."""

    def test_roundtrip(self):
        bob = SecureSession()
        alice = SecureSession()
        message = alice.seal_for(bob.public_bytes, b"Hello Bob!")
        assert bob.open(message) == b"Hello Bob!"

    def test_fresh_ephemeral_per_message(self):
        """Each message uses a new ephemeral key and thus a new nonce."""
        bob = SecureSession()
        alice = SecureSession()
        m1 = alice.seal_for(bob.public_bytes, b"same")
        m2 = alice.seal_for(bob.public_bytes, b"same")
        assert m1.ephemeral_public != m2.ephemeral_public
        assert m1.ciphertext != m2.ciphertext

    def test_wrong_recipient(self):
        bob = SecureSession()
        eve = SecureSession()
        message = SecureSession().seal_for(bob.public_bytes, b"for bob")
        with pytest.raises(AuthenticationError):
            eve.open(message)

    def test_serialization(self):
        bob = SecureSession()
        message = SecureSession().seal_for(bob.public_bytes, b"wire")
        parsed = SealedMessage.from_bytes(message.to_bytes())
        assert parsed == message
        assert bob.open(parsed) == b"wire"

    def test_short_message(self):
        with pytest.raises(InvalidKeyError):
            SealedMessage.from_bytes(b"\x04" * 10)

    def test_invalid_recipient(self):
        with pytest.raises(InvalidKeyError):
            SecureSession().seal_for(b"\x04" + b"\x00" * 64, b"data")

    def test_identity_keypair(self):
        identity = KeyPair.generate()
        bob = SecureSession(identity)
        assert bob.public_bytes == identity.public_bytes()
        assert bob.open(SecureSession().seal_for(identity.public_key, b"hi")) == b"hi"
