"""
models.py — Value types shared by the codec, the algorithm and the store.

- CredentialFields: what a caller supplies to create a credential.
- Credential: a stored, immutable credential (has id + created_at).
- CodeResult: one freshly generated code, never cached.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict

# --- Defaults --------------------------------------------------------------
DEFAULT_ISSUER = "TOTPHog"
DEFAULT_DIGITS = 6          # 6 or 8 in practice, 1..10 supported
DEFAULT_PERIOD = 30         # TOTP step (seconds)
DEFAULT_ALGORITHM = "sha1"

CREDENTIAL_KEYS = ("id", "name", "secret", "issuer", "digits", "period", "algorithm", "created_at")


@dataclass(frozen=True)
class CredentialFields:
    """
    Input for CredentialStore.add().

    Fields:
        name: account label shown to the user, must be non-empty
        secret: Base32 shared key, must be non-empty (decoded only when a code is generated)
        issuer: service label (default DEFAULT_ISSUER)
        digits: code length, > 0 (default 6; 1..10 accepted by the algorithm)
        period: time step in seconds, > 0 (default 30)
        algorithm: "sha1" | "sha256" | "sha512" (default "sha1"; checked at generation time)
    """

    name: str
    secret: str
    issuer: str = DEFAULT_ISSUER
    digits: int = DEFAULT_DIGITS
    period: int = DEFAULT_PERIOD
    algorithm: str = DEFAULT_ALGORITHM


@dataclass(frozen=True)
class Credential:
    id: str
    name: str
    secret: str
    issuer: str
    digits: int
    period: int
    algorithm: str
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Credential":
        """
        Build a Credential from a persisted record.

        Raises:
            KeyError: if one of CREDENTIAL_KEYS is missing
            TypeError / ValueError: if digits / period are not integers
        """
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            secret=str(data["secret"]),
            issuer=str(data["issuer"]),
            digits=int(data["digits"]),
            period=int(data["period"]),
            algorithm=str(data["algorithm"]),
            created_at=str(data["created_at"]),
        )


@dataclass(frozen=True)
class CodeResult:
    code: str
    remaining_seconds: int
    period: int
    generated_at: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
