"""
API Client Module

Provides the HTTP client for the JSONPlaceholder users and posts endpoints.
"""

from .client import APIClient, Post, User

__all__ = ["APIClient", "Post", "User"]
