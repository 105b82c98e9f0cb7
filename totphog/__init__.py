"""TOTPHog: store TOTP secrets, show their current codes, import/export otpauth:// URIs."""

__version__ = "1.0.0"
