"""
totphog.core package
====================

HOTP/TOTP code generation (RFC 4226 & RFC 6238) and the otpauth:// URI codec.

──────────────────────────────────────────────
Core algorithm
──────────────────────────────────────────────
- HOTP: code = Truncate(HMAC-<alg>(key=secret, msg=counter)) mod 10^digits
- TOTP: HOTP with counter = floor(unix_time / period), period 30s by default
- Dynamic truncation: 4 bytes at offset (last byte & 0x0F), top bit cleared

──────────────────────────────────────────────
Quick example
──────────────────────────────────────────────
>>> from totphog.core import decode_secret, generate_code
>>> generate_code(decode_secret("GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"), "sha1", 8, 30, 59)
'94287082'
"""
from .errors import (
    OtpError,
    ValidationError,
    InvalidUri,
    MissingSecret,
    InvalidSecret,
    InvalidParameter,
)
from .models import CodeResult, Credential, CredentialFields
from .otp_core import (
    decode_secret,
    generate_base32_secret,
    generate_code,
    hotp,
    remaining_seconds,
    totp,
)
from . import otp_uri

__all__ = [
    "OtpError",
    "ValidationError",
    "InvalidUri",
    "MissingSecret",
    "InvalidSecret",
    "InvalidParameter",
    "CodeResult",
    "Credential",
    "CredentialFields",
    "decode_secret",
    "generate_base32_secret",
    "generate_code",
    "hotp",
    "remaining_seconds",
    "totp",
    "otp_uri",
]
