"""
Storage Module

Provides the file-backed key-value store used for the session and the
per-user post cache.
"""

from .store import LocalStore

__all__ = ["LocalStore"]
