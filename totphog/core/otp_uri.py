"""
otp_uri.py — otpauth:// provisioning URI codec (the format behind authenticator QR codes).

    otpauth://totp/{issuer}:{name}?secret=...&issuer=...&digits=...&period=...&algorithm=...

encode() percent-encodes issuer and name separately, so a ':' inside either
never collides with the label separator. decode() accepts URIs produced by
other generators too, filling in defaults for whatever is missing.
"""

from typing import Optional
from urllib.parse import parse_qsl, quote, unquote, urlencode, urlsplit
import re

from .errors import InvalidUri, MissingSecret
from .models import DEFAULT_ALGORITHM, DEFAULT_DIGITS, DEFAULT_PERIOD, CredentialFields

SCHEME = "otpauth"
OTP_TYPE = "totp"
UNKNOWN_LABEL = "Unknown"

# RFC 3986 scheme grammar; matched on the raw text because urlsplit lower-cases it
_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*):")


def encode(credential) -> str:
    """
    Build the provisioning URI for a credential.

    Arguments:
        credential: anything with name / secret / issuer / digits / period /
            algorithm attributes (Credential or CredentialFields)

    The label is "{issuer}:{name}", or just "{name}" when issuer is empty.
    The issuer query parameter is always written (possibly empty) so that
    decode() gives the same issuer back.
    """
    label = quote(credential.name, safe="")
    if credential.issuer:
        label = f"{quote(credential.issuer, safe='')}:{label}"

    query = urlencode(
        [
            ("secret", credential.secret),
            ("issuer", credential.issuer),
            ("digits", str(credential.digits)),
            ("period", str(credential.period)),
            ("algorithm", credential.algorithm),
        ],
        quote_via=quote,
    )
    return f"{SCHEME}://{OTP_TYPE}/{label}?{query}"


def _positive_int(value: Optional[str], default: int) -> int:
    # absent, non-numeric, zero or negative -> default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def _name_from_path(path: str) -> str:
    # only a missing path means "Unknown"; "/" alone gives an empty name
    if not path:
        return UNKNOWN_LABEL
    label = path[1:] if path.startswith("/") else path
    # "Issuer:account" -> "account"
    if ":" in label:
        label = label.split(":", 1)[1]
    return unquote(label)


def decode(uri: str) -> CredentialFields:
    """
    Parse an otpauth:// URI into credential fields.

    - issuer defaults to "Unknown", digits to 6, period to 30, algorithm to "sha1"
    - on duplicate query keys the first occurrence wins
    - algorithm is taken verbatim; CredentialStore.add() validates it

    Raises:
        InvalidUri: the scheme is not exactly "otpauth", the input is not text, or the URI cannot be parsed
        MissingSecret: no `secret` query parameter
    """
    if not isinstance(uri, str):
        raise InvalidUri("Invalid otpauth URI")
    match = _SCHEME_RE.match(uri)
    if match is None or match.group(1) != SCHEME:
        raise InvalidUri("Invalid otpauth URI")
    try:
        parts = urlsplit(uri)
    except ValueError as e:
        raise InvalidUri("Invalid otpauth URI") from e

    params = {}
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        params.setdefault(key, value)

    if "secret" not in params:
        raise MissingSecret("Missing secret in URI")

    return CredentialFields(
        name=_name_from_path(parts.path),
        secret=params["secret"],
        issuer=params.get("issuer", UNKNOWN_LABEL),
        digits=_positive_int(params.get("digits"), DEFAULT_DIGITS),
        period=_positive_int(params.get("period"), DEFAULT_PERIOD),
        algorithm=params.get("algorithm", DEFAULT_ALGORITHM),
    )
