"""
errors.py — Error kinds raised by the TOTPHog core.

All of them derive from ValueError so callers that only know
"bad input" can still catch them in one place.

"Not found" is not an error here: lookups return None.
"""


class OtpError(ValueError):
    """Base class for every failure reported by the core."""


class ValidationError(OtpError):
    """A required credential field is missing, empty or out of range."""


class InvalidUri(OtpError):
    """The text is not an otpauth:// URI."""


class MissingSecret(OtpError):
    """An otpauth URI without a `secret` query parameter."""


class InvalidSecret(OtpError):
    """The Base32 secret cannot be decoded, or decodes to zero bytes."""


class InvalidParameter(OtpError):
    """Unsupported digits / period / algorithm for code generation."""
