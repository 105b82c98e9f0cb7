"""
otp_core.py — Core library for TOTP / HOTP (RFC 4226 / RFC 6238).

Goals:
- Pure functions only, usable from the store, the REST API and the CLI alike.
- No file I/O, no logging, no shared state: safe to call from any thread.

Base32 handling lives in exactly one place, decode_secret(). The callers
(CredentialStore, totp()) decode first and hand raw key bytes to
generate_code() / hotp().

Security note:
- Secrets are shared keys. Keep the storage file private (chmod 600).
"""

from typing import Optional, Tuple
import base64
import hashlib
import hmac
import struct
import time

import pyotp

from .errors import InvalidParameter, InvalidSecret
from .models import DEFAULT_ALGORITHM, DEFAULT_DIGITS, DEFAULT_PERIOD

# --- Config / constants ----------------------------------------------------
MIN_DIGITS = 1
MAX_DIGITS = 10             # a 31-bit truncated value has at most 10 decimal digits
SECRET_LENGTH = 32          # Base32 chars -> 160-bit secret (common practice)

HASH_FUNCTIONS = {
    "sha1": hashlib.sha1,       # 20-byte digest
    "sha256": hashlib.sha256,   # 32-byte digest
    "sha512": hashlib.sha512,   # 64-byte digest
}


# --- Secrets ---------------------------------------------------------------
def generate_base32_secret() -> str:
    """
    Generate a random Base32 secret (uppercase, no padding).

    Uses pyotp.random_base32(), which draws from the `secrets` CSPRNG.
    The result imports directly into Google Authenticator / Authy.
    """
    return pyotp.random_base32(length=SECRET_LENGTH)


def decode_secret(secret_b32: str) -> bytes:
    """
    Decode a Base32 secret to raw key bytes.

    - Case-insensitive, whitespace is ignored (secrets are often shown in groups of 4).
    - Missing '=' padding is restored, as most authenticator exports drop it.

    Raises:
        InvalidSecret: characters outside the Base32 alphabet, an impossible
            length, or a secret that decodes to zero bytes
    """
    cleaned = "".join(secret_b32.split()).upper().rstrip("=")
    if not cleaned:
        raise InvalidSecret("Secret is empty")
    padded = cleaned + "=" * (-len(cleaned) % 8)
    try:
        key = base64.b32decode(padded)
    except ValueError as e:
        # binascii.Error is a ValueError; so is the non-ASCII input error
        raise InvalidSecret("Invalid Base32 secret") from e
    if not key:
        raise InvalidSecret("Secret decodes to zero bytes")
    return key


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(i: int) -> bytes:
    """
    Pack a counter as the 8-byte big-endian value RFC 4226 requires.

    Example: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'
    """
    return struct.pack(">Q", i)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    RFC 4226 §5.3 dynamic truncation.

    - offset = last_byte & 0x0F (0..15, valid for every supported digest length)
    - take 4 bytes from offset, clear the top bit of the first one
    - return them as a 31-bit unsigned integer
    """
    offset = hmac_digest[-1] & 0x0F
    code = (
        ((hmac_digest[offset] & 0x7F) << 24)
        | ((hmac_digest[offset + 1] & 0xFF) << 16)
        | ((hmac_digest[offset + 2] & 0xFF) << 8)
        | (hmac_digest[offset + 3] & 0xFF)
    )
    return code


def resolve_hash(algorithm: str):
    """
    Map an algorithm identifier to its hashlib constructor.

    Case-insensitive, so "SHA1" taken verbatim from a URI still works.

    Raises:
        InvalidParameter: anything other than sha1 / sha256 / sha512
    """
    digestmod = HASH_FUNCTIONS.get(str(algorithm).lower())
    if digestmod is None:
        raise InvalidParameter(f"Unsupported algorithm: {algorithm!r}")
    return digestmod


def _check_digits(digits: int) -> None:
    if not isinstance(digits, int) or not MIN_DIGITS <= digits <= MAX_DIGITS:
        raise InvalidParameter(f"digits must be between {MIN_DIGITS} and {MAX_DIGITS}, got {digits!r}")


def _check_period(period: int) -> None:
    if not isinstance(period, int) or period <= 0:
        raise InvalidParameter(f"period must be a positive integer, got {period!r}")


def hotp(
    secret_bytes: bytes,
    counter: int,
    digits: int = DEFAULT_DIGITS,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """
    HOTP code per RFC 4226.

    Steps:
    1. Message = 8-byte big-endian counter
    2. HMAC-<algorithm>(key=secret_bytes, msg)
    3. Dynamic truncate -> 31-bit integer
    4. otp = value % 10^digits
    5. Zero-pad to exactly `digits` characters (leading zeros are significant)

    Raises:
        InvalidParameter: digits outside 1..10 or unknown algorithm
    """
    _check_digits(digits)
    digestmod = resolve_hash(algorithm)

    digest = hmac.new(secret_bytes, int_to_bytes(counter), digestmod).digest()
    otp_val = dynamic_truncate(digest) % (10 ** digits)
    return str(otp_val).zfill(digits)


def generate_code(
    secret_bytes: bytes,
    algorithm: str,
    digits: int,
    period: int,
    at_time: float,
) -> str:
    """
    TOTP code per RFC 6238: HOTP with counter = floor(at_time / period).

    Arguments:
        secret_bytes: raw key (see decode_secret)
        algorithm: "sha1" | "sha256" | "sha512"
        digits: code length, 1..10
        period: time step in seconds, > 0
        at_time: Unix time in seconds (fractions are dropped)

    Raises:
        InvalidParameter: bad digits, period or algorithm
    """
    _check_period(period)
    counter = int(at_time) // period
    return hotp(secret_bytes, counter, digits, algorithm)


def remaining_seconds(period: int, at_time: float) -> int:
    """
    Seconds the code for `at_time` stays valid, always in [1, period].

    At an exact multiple of `period` a new step has just begun, so the
    full period remains.
    """
    _check_period(period)
    return period - (int(at_time) % period)


def totp(
    secret_b32: str,
    timestamp: Optional[int] = None,
    period: int = DEFAULT_PERIOD,
    digits: int = DEFAULT_DIGITS,
    algorithm: str = DEFAULT_ALGORITHM,
) -> Tuple[str, int]:
    """
    Convenience wrapper taking a Base32 secret.

    Arguments:
        secret_b32: Base32 secret
        timestamp: epoch seconds (None -> time.time())

    Returns:
        (code, remaining_seconds)
    """
    if timestamp is None:
        timestamp = int(time.time())
    key = decode_secret(secret_b32)
    code = generate_code(key, algorithm, digits, period, timestamp)
    return code, remaining_seconds(period, timestamp)
