"""
Auth Module

Provides username lookup login and the persisted session.
"""

from .session import SessionManager

__all__ = ["SessionManager"]
