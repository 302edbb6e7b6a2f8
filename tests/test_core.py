"""
Unit tests for core primitives.

Tests:
- P-256 parameters and known multiples of G
- Point encoding / decoding and on-curve rejection
- Secret buffer wiping
- Logger namespacing
"""

import logging

import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from pairguard.config import check_curve_name
from pairguard.core.ec_math import (
    G, N, P, Point, is_on_curve, is_valid_scalar, multiply_generator,
)
from pairguard.core.memory import SecretBuffer, wipe
from pairguard.core.points import (
    decode_point, encode_point, int_to_bytes, public_key_from_bytes,
    public_key_to_bytes, scalar_to_hex,
)
from pairguard.errors import ConfigurationError, InvalidKeyError
from pairguard.logger import PairGuardLogger


G_HEX = (
    "046b17d1f2e12c4247f8bce6e563a440f277037d812deb33a0f4a13945d898c296"
    "4fe342e2fe1a7f9b8ee7eb4a7c0f9e162bce33576b315ececbb6406837bf51f5"
)
TWO_G_HEX = (
    "047cf27b188d034f7e8a52380304b51ac3c08969e277f21b35a60b48fc47669978"
    "07775510db8ed040293d9ac69f7430dbba7dade63ce982299e04b79d227873d1"
)
THREE_G_HEX = (
    "045ecbe4d1a6330a44c8f7ef951d4bf165e6c6b721efada985fb41661bc6e7fd6c"
    "8734640c4998ff7e374b06ce1a64a2ecd82ab036384fb83d9a79b127a27d5032"
)


class TestECMath:
    """Tests for P-256 parameters and point checks."""

    def test_generator_on_curve(self):
        """G satisfies the curve equation."""
        assert is_on_curve(G)

    def test_small_multiples(self):
        """1G, 2G, 3G match the published values."""
        assert encode_point(multiply_generator(1)).hex() == G_HEX
        assert encode_point(multiply_generator(2)).hex() == TWO_G_HEX
        assert encode_point(multiply_generator(3)).hex() == THREE_G_HEX

    def test_order_minus_one_is_negated_generator(self):
        """(n - 1)G == -G."""
        assert multiply_generator(N - 1) == Point(G.x, (-G.y) % P)

    def test_out_of_range_scalars_rejected(self):
        """0, n and non-integers have no multiple of G."""
        for k in (0, N, N + 1, -1, True, "1"):
            with pytest.raises(InvalidKeyError):
                multiply_generator(k)

    def test_multiples_are_on_curve(self):
        k = 0x1234567890ABCDEF1234567890ABCDEF1234567890ABCDEF1234567890ABCDEF
        assert is_on_curve(multiply_generator(k))

    def test_off_curve_rejected(self):
        """Tweaked coordinates are not on the curve."""
        assert not is_on_curve(Point(G.x, (G.y + 1) % P))
        assert not is_on_curve(None)
        assert not is_on_curve(Point(P, G.y))

    def test_scalar_range(self):
        """Valid scalars are 1..n-1."""
        assert not is_valid_scalar(0)
        assert is_valid_scalar(1)
        assert is_valid_scalar(N - 1)
        assert not is_valid_scalar(N)


class TestPointEncoding:
    """Tests for uncompressed point encoding."""

    def test_encode_with_tag(self):
        """Tagged form is 65 bytes starting with 0x04."""
        data = encode_point(G)
        assert len(data) == 65
        assert data[0] == 0x04

    def test_encode_without_tag(self):
        """Raw form is X || Y."""
        data = encode_point(G, with_tag=False)
        assert len(data) == 64
        assert data == encode_point(G)[1:]

    def test_decode_both_forms(self):
        """Both forms decode to the same point when the raw form is allowed."""
        assert decode_point(encode_point(G)) == G
        assert decode_point(encode_point(G, with_tag=False), allow_raw=True) == G

    def test_decode_rejects_raw_form_by_default(self):
        """Wire keys must carry the 0x04 tag."""
        with pytest.raises(InvalidKeyError):
            decode_point(encode_point(G, with_tag=False))
        with pytest.raises(InvalidKeyError):
            public_key_from_bytes(encode_point(G, with_tag=False))

    def test_decode_rejects_off_curve(self):
        """An off-curve point is rejected explicitly."""
        bad = bytearray(encode_point(G))
        bad[-1] ^= 0x01
        with pytest.raises(InvalidKeyError):
            decode_point(bytes(bad))

    def test_decode_rejects_bad_tag_and_length(self):
        """Compressed tags, infinity and wrong lengths are rejected."""
        data = bytearray(encode_point(G))
        data[0] = 0x02
        with pytest.raises(InvalidKeyError):
            decode_point(bytes(data))
        with pytest.raises(InvalidKeyError):
            decode_point(b"\x00")
        with pytest.raises(InvalidKeyError):
            decode_point(encode_point(G)[:40])

    def test_encode_infinity_rejected(self):
        """The point at infinity has no uncompressed encoding."""
        with pytest.raises(InvalidKeyError):
            encode_point(None)

    def test_public_key_roundtrip(self):
        """Key objects convert to and from the wire format."""
        key = ec.generate_private_key(ec.SECP256R1()).public_key()
        data = public_key_to_bytes(key)
        assert public_key_from_bytes(data).public_numbers() == key.public_numbers()

    def test_public_key_wrong_curve(self):
        """Non-P-256 keys are rejected."""
        key = ec.generate_private_key(ec.SECP384R1()).public_key()
        with pytest.raises(InvalidKeyError):
            public_key_to_bytes(key)

    def test_scalar_hex_fixed_width(self):
        """Small scalars are zero-padded to 64 hex characters."""
        assert scalar_to_hex(1) == "00" * 31 + "01"
        assert int_to_bytes(255, 4) == b"\x00\x00\x00\xff"

    def test_curve_name_check(self):
        """Only P-256 aliases are accepted."""
        assert check_curve_name("prime256v1") == "secp256r1"
        assert check_curve_name("P-256") == "secp256r1"
        with pytest.raises(ConfigurationError):
            check_curve_name("secp384r1")


class TestSecretBuffer:
    """Tests for wipeable secret buffers."""

    def test_wipe_zeroes(self):
        """wipe() overwrites the bytearray in place."""
        buf = bytearray(b"secret")
        wipe(buf)
        assert buf == bytearray(6)

    def test_context_manager_wipes(self):
        """Leaving the with-block wipes the buffer."""
        with SecretBuffer(b"\x01" * 32) as secret:
            assert secret.bytes() == b"\x01" * 32
        assert secret.is_wiped
        with pytest.raises(InvalidKeyError):
            secret.bytes()

    def test_repr_hides_content(self):
        """repr never shows the secret."""
        secret = SecretBuffer(b"topsecret")
        assert "topsecret" not in repr(secret)
        assert "9 bytes" in repr(secret)


class TestPairGuardLogger:
    """Tests for the namespaced logger cache."""

    def test_names_are_namespaced_and_cached(self):
        logger = PairGuardLogger.get_logger("unit_component")
        assert logger.name == "pairguard.unit_component"
        assert PairGuardLogger.get_logger("unit_component") is logger
        assert PairGuardLogger.get_logger("pairguard.unit_component") is logger

    def test_component_records_reach_package_logger(self, caplog):
        """Records from component loggers propagate to the package logger."""
        caplog.set_level(logging.INFO, logger="pairguard")
        PairGuardLogger.get_logger("unit_propagation").info("stage finished")
        assert any(record.name == "pairguard.unit_propagation" and
                   record.getMessage() == "stage finished"
                   for record in caplog.records)
