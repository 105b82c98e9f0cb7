"""Persistence for TOTPHog credentials (single JSON file)."""

from .credential_store import CredentialStore

__all__ = ["CredentialStore"]
