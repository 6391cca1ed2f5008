"""
Posts Module

Provides the post repository: cache-first loading and optimistic,
write-through create/update/delete.
"""

from .repository import PostRepository

__all__ = ["PostRepository"]
