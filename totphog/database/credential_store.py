"""
CREDENTIAL STORE - JSON FILE BACKED

Keeps every credential in an in-memory dict (id -> Credential) and rewrites
the whole JSON file after each mutation, before the call returns.

- One store per process, built with an explicit storage path and handed to
  whoever needs it (Flask app, CLI).
- No internal locking: a multi-threaded host must serialise calls
  (the Flask backend does it with a single lock).
- Two processes writing the same file: last writer wins.

File layout (UTF-8, 4-space indent):
    {
        "<uuid>": {"id": ..., "name": ..., "secret": ..., "issuer": ...,
                   "digits": 6, "period": 30, "algorithm": "sha1",
                   "created_at": "2025-01-01T12:00:00+00:00"},
        ...
    }
"""

from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple
import json
import logging
import os
import tempfile
import time
import uuid

from totphog.core import otp_core, otp_uri
from totphog.core.errors import InvalidParameter, ValidationError
from totphog.core.models import CodeResult, Credential, CredentialFields

logger = logging.getLogger(__name__)


def _isoformat(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).astimezone().isoformat(timespec="seconds")


def _is_int(value) -> bool:
    # bool is an int subclass, but `true` is not a digit count
    return isinstance(value, int) and not isinstance(value, bool)


def _validate(fields: CredentialFields) -> None:
    """
    Enforce the credential invariants before anything is stored.

    The secret is only checked for presence; Base32 decoding happens when
    a code is generated.
    """
    for key in ("name", "secret", "issuer", "algorithm"):
        if not isinstance(getattr(fields, key), str):
            raise ValidationError(f"{key} must be text, got {getattr(fields, key)!r}")
    if not fields.name or not fields.secret:
        raise ValidationError("Name and secret are required")
    if not _is_int(fields.digits) or not 0 < fields.digits <= otp_core.MAX_DIGITS:
        raise ValidationError(f"digits must be between 1 and {otp_core.MAX_DIGITS}, got {fields.digits!r}")
    if not _is_int(fields.period) or fields.period <= 0:
        raise ValidationError(f"period must be a positive integer, got {fields.period!r}")
    try:
        otp_core.resolve_hash(fields.algorithm)
    except InvalidParameter as e:
        raise ValidationError(str(e)) from e


class CredentialStore:
    """File-backed store of TOTP credentials, keyed by UUID."""

    def __init__(self, storage_path: str, clock: Callable[[], float] = time.time):
        """
        Arguments:
            storage_path: JSON file; its directory is created on first write
            clock: returns the current Unix time (injectable for tests)
        """
        self.storage_path = storage_path
        self._clock = clock
        self._credentials: Dict[str, Credential] = {}
        self.load()

    # --- Persistence -------------------------------------------------------
    def load(self) -> None:
        """
        (Re)read the backing file.

        A missing file means an empty store. Unreadable content (bad JSON,
        wrong shape, incomplete records) also gives an empty store; the file
        itself is only replaced by the next mutation.
        """
        self._credentials = {}
        if not os.path.exists(self.storage_path):
            logger.debug("No credential file at %s, starting empty", self.storage_path)
            return

        try:
            with open(self.storage_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("top-level JSON value is not an object")
            credentials = {}
            for record in data.values():
                credential = Credential.from_dict(record)
                credentials[credential.id] = credential
        except (OSError, ValueError, TypeError, KeyError) as e:
            logger.warning("Ignoring unreadable credential file %s: %s", self.storage_path, e)
            return

        self._credentials = credentials
        logger.debug("Loaded %d credential(s) from %s", len(credentials), self.storage_path)

    def _save(self) -> None:
        """Rewrite the whole file: temp file in the same directory, then os.replace()."""
        directory = os.path.dirname(os.path.abspath(self.storage_path))
        os.makedirs(directory, exist_ok=True)

        payload = {cid: credential.to_dict() for cid, credential in self._credentials.items()}
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tokens-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=4, ensure_ascii=False)
                f.write("\n")
            os.replace(tmp_path, self.storage_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logger.debug("Saved %d credential(s) to %s", len(payload), self.storage_path)

    # --- CRUD --------------------------------------------------------------
    def add(self, fields: CredentialFields) -> Credential:
        """
        Validate, stamp and store a new credential.

        Raises:
            ValidationError: non-text or empty name/secret, digits outside 1..10,
                non-positive period, or an unsupported algorithm
        """
        _validate(fields)
        credential = Credential(
            id=str(uuid.uuid4()),
            name=fields.name,
            secret=fields.secret,
            issuer=fields.issuer,
            digits=fields.digits,
            period=fields.period,
            algorithm=fields.algorithm,
            created_at=_isoformat(self._clock()),
        )
        self._credentials[credential.id] = credential
        self._save()
        return credential

    def add_from_uri(self, uri: str) -> Credential:
        """
        Store the credential described by an otpauth:// URI.

        Raises:
            InvalidUri, MissingSecret: from otp_uri.decode
            ValidationError: from add
        """
        return self.add(otp_uri.decode(uri))

    def get(self, credential_id: str) -> Optional[Credential]:
        return self._credentials.get(credential_id)

    def get_all(self) -> List[Credential]:
        """Snapshot of all credentials, in insertion order."""
        return list(self._credentials.values())

    def delete(self, credential_id: str) -> bool:
        if credential_id not in self._credentials:
            return False
        del self._credentials[credential_id]
        self._save()
        return True

    def delete_all(self) -> int:
        count = len(self._credentials)
        self._credentials = {}
        self._save()
        return count

    def __len__(self) -> int:
        return len(self._credentials)

    # --- Codes & URIs ------------------------------------------------------
    def _code_for(self, credential: Credential) -> CodeResult:
        now = self._clock()
        key = otp_core.decode_secret(credential.secret)
        code = otp_core.generate_code(key, credential.algorithm, credential.digits, credential.period, now)
        return CodeResult(
            code=code,
            remaining_seconds=otp_core.remaining_seconds(credential.period, now),
            period=credential.period,
            generated_at=_isoformat(now),
        )

    def generate_code(self, credential_id: str) -> Optional[CodeResult]:
        """
        Current code for one credential, or None for an unknown id.

        Raises:
            InvalidSecret: the stored secret is not valid Base32
            InvalidParameter: unsupported digits / algorithm
        """
        credential = self._credentials.get(credential_id)
        if credential is None:
            return None
        return self._code_for(credential)

    def generate_all_codes(self) -> List[Tuple[Credential, CodeResult]]:
        """(credential, code) for every credential, in store order."""
        return [(credential, self._code_for(credential)) for credential in self._credentials.values()]

    def get_provisioning_uri(self, credential_id: str) -> Optional[str]:
        credential = self._credentials.get(credential_id)
        if credential is None:
            return None
        return otp_uri.encode(credential)
