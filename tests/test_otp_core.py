import hashlib

import pyotp
import pytest

from totphog.core import otp_core
from totphog.core.errors import InvalidParameter, InvalidSecret
from tests.conftest import RFC_SECRET_SHA1, TEST_SECRET

# RFC 6238 appendix B seeds (ASCII)
RFC_KEYS = {
    "sha1": b"12345678901234567890",
    "sha256": b"12345678901234567890123456789012",
    "sha512": b"1234567890123456789012345678901234567890123456789012345678901234",
}

RFC6238_VECTORS = [
    (59, "sha1", "94287082"),
    (59, "sha256", "46119246"),
    (59, "sha512", "90693936"),
    (1111111109, "sha1", "07081804"),
    (1111111109, "sha256", "68084774"),
    (1111111109, "sha512", "25091201"),
    (1111111111, "sha1", "14050471"),
    (1234567890, "sha256", "91819424"),
    (2000000000, "sha512", "38618901"),
    (20000000000, "sha1", "65353130"),
]

RFC4226_HOTP = [
    "755224", "287082", "359152", "969429", "338314",
    "254676", "287922", "162583", "399871", "520489",
]


@pytest.mark.parametrize("at_time, algorithm, expected", RFC6238_VECTORS)
def test_rfc6238_vectors(at_time, algorithm, expected):
    assert otp_core.generate_code(RFC_KEYS[algorithm], algorithm, 8, 30, at_time) == expected


def test_rfc6238_sha1_from_base32_secret():
    key = otp_core.decode_secret(RFC_SECRET_SHA1)
    assert otp_core.generate_code(key, "sha1", 8, 30, 59) == "94287082"


def test_rfc4226_hotp_table():
    codes = [otp_core.hotp(RFC_KEYS["sha1"], counter, 6) for counter in range(10)]
    assert codes == RFC4226_HOTP


def test_dynamic_truncate_rfc4226_example():
    digest = bytes.fromhex("1f8698690e02ca16618550ef7f19da8e945b555a")
    assert otp_core.dynamic_truncate(digest) == 0x50EF7F19


def test_dynamic_truncate_masks_top_bit():
    digest = bytes([0xFF] * 19 + [0x00])
    assert otp_core.dynamic_truncate(digest) == 0x7FFFFFFF


def test_int_to_bytes_is_8_byte_big_endian():
    assert otp_core.int_to_bytes(1) == b"\x00" * 7 + b"\x01"
    assert len(otp_core.int_to_bytes(2 ** 40)) == 8


def test_code_keeps_leading_zeros(monkeypatch):
    monkeypatch.setattr(otp_core, "dynamic_truncate", lambda digest: 32)
    assert otp_core.hotp(b"key", 0, 6) == "000032"


def test_generate_code_is_deterministic():
    key = otp_core.decode_secret(TEST_SECRET)
    first = otp_core.generate_code(key, "sha256", 6, 30, 1700000000)
    assert all(otp_core.generate_code(key, "sha256", 6, 30, 1700000000) == first for _ in range(5))


@pytest.mark.parametrize("digits", [1, 6, 8, 10])
def test_code_length_matches_digits(digits):
    key = otp_core.decode_secret(TEST_SECRET)
    for at_time in range(0, 3000, 30):
        code = otp_core.generate_code(key, "sha1", digits, 30, at_time)
        assert len(code) == digits
        assert code.isdigit()


def test_same_step_gives_same_code():
    key = otp_core.decode_secret(TEST_SECRET)
    assert otp_core.generate_code(key, "sha1", 6, 30, 60) == otp_core.generate_code(key, "sha1", 6, 30, 89)
    assert otp_core.generate_code(key, "sha1", 6, 30, 89) != otp_core.generate_code(key, "sha1", 6, 30, 90)


@pytest.mark.parametrize(
    "algorithm, digest",
    [("sha1", hashlib.sha1), ("sha256", hashlib.sha256), ("sha512", hashlib.sha512)],
)
@pytest.mark.parametrize("digits, period", [(6, 30), (8, 60)])
def test_matches_pyotp(algorithm, digest, digits, period):
    key = otp_core.decode_secret(TEST_SECRET)
    reference = pyotp.TOTP(TEST_SECRET, digits=digits, interval=period, digest=digest)
    for at_time in (0, 59, 1111111109, 1700000000, 2000000000):
        assert otp_core.generate_code(key, algorithm, digits, period, at_time) == reference.at(at_time)


def test_algorithm_is_case_insensitive():
    key = RFC_KEYS["sha1"]
    assert otp_core.generate_code(key, "SHA1", 8, 30, 59) == "94287082"


# --- remaining seconds -----------------------------------------------------
def test_remaining_seconds_at_step_boundary_is_full_period():
    assert otp_core.remaining_seconds(30, 1111111110) == 30
    assert otp_core.remaining_seconds(30, 0) == 30


def test_remaining_seconds_last_second_of_step():
    assert otp_core.remaining_seconds(30, 1111111109) == 1


@pytest.mark.parametrize("period", [1, 7, 30, 60])
def test_remaining_seconds_range(period):
    for at_time in range(0, 200):
        assert 1 <= otp_core.remaining_seconds(period, at_time) <= period


# --- parameters ------------------------------------------------------------
@pytest.mark.parametrize("digits", [0, -1, 11, "6"])
def test_unsupported_digits(digits):
    with pytest.raises(InvalidParameter):
        otp_core.generate_code(RFC_KEYS["sha1"], "sha1", digits, 30, 59)


@pytest.mark.parametrize("algorithm", ["md5", "sha384", ""])
def test_unsupported_algorithm(algorithm):
    with pytest.raises(InvalidParameter):
        otp_core.generate_code(RFC_KEYS["sha1"], algorithm, 6, 30, 59)


def test_unsupported_period():
    with pytest.raises(InvalidParameter):
        otp_core.generate_code(RFC_KEYS["sha1"], "sha1", 6, 0, 59)


# --- Base32 ----------------------------------------------------------------
def test_decode_secret_accepts_lowercase_spaces_and_missing_padding():
    expected = b"Hello!\xde\xad\xbe\xef"
    assert otp_core.decode_secret("JBSWY3DPEHPK3PXP") == expected
    assert otp_core.decode_secret("jbsw y3dp ehpk 3pxp") == expected
    assert otp_core.decode_secret("GEZDGNBV") == b"12345"
    assert otp_core.decode_secret("GEZDG") == b"123"
    assert otp_core.decode_secret("GEZDG===") == b"123"


@pytest.mark.parametrize("secret", ["", "   ", "====", "SECRET1AAAAAAAAA", "A", "ÄBCDEFGH"])
def test_decode_secret_rejects_bad_input(secret):
    with pytest.raises(InvalidSecret):
        otp_core.decode_secret(secret)


def test_invalid_secret_is_a_value_error():
    with pytest.raises(ValueError):
        otp_core.decode_secret("not base32!")


def test_generated_secret_round_trips():
    secret = otp_core.generate_base32_secret()
    assert len(secret) == otp_core.SECRET_LENGTH
    assert len(otp_core.decode_secret(secret)) == 20


def test_totp_wrapper():
    code, remaining = otp_core.totp(RFC_SECRET_SHA1, timestamp=59, digits=8)
    assert code == "94287082"
    assert remaining == 1
