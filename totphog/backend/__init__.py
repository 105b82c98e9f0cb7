"""
Backend package: Flask REST API over the TOTPHog credential store.
"""

from .app import create_app

__all__ = ["create_app"]
