"""
Session Module

Username-only login against the remote user list. The logged-in user is
kept in the local store so the session survives between runs.
"""

import logging
from typing import Optional

from ..api.client import APIClient, User
from ..config import config
from ..errors import UserNotFoundError, ValidationError
from ..storage.store import LocalStore


logger = logging.getLogger(__name__)


class SessionManager:
    """Holds the current user and performs login/logout."""

    def __init__(self, api: APIClient, store: LocalStore):
        self.api = api
        self.store = store

    @property
    def current_user(self) -> Optional[User]:
        """The persisted user, or None when logged out or the record is corrupt."""
        data = self.store.get_json(config.storage.user_key)
        if not isinstance(data, dict):
            return None

        try:
            return User.from_dict(data)
        except (KeyError, TypeError):
            logger.warning("Ignoring malformed stored user")
            return None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    def login(self, username: str) -> User:
        """
        Log in by username.

        Args:
            username: Username to look up, compared trimmed and
                case-insensitively.

        Returns:
            The matching user, now persisted as the current user.

        Raises:
            ValidationError: If the username is empty.
            UserNotFoundError: If no user matches. The session is unchanged.
        """
        wanted = (username or "").strip().lower()
        if not wanted:
            raise ValidationError("Username is required.")

        users = self.api.fetch_users_or_fallback()
        found = next((u for u in users if u.username.lower() == wanted), None)

        if found is None:
            logger.info(f"Login failed: no user named '{username.strip()}'")
            raise UserNotFoundError("Username not found. Try 'Bret', 'Antonette', etc.")

        self.store.set_json(config.storage.user_key, found.to_dict())
        logger.info(f"Logged in as {found.username} (id: {found.id})")
        return found

    def logout(self) -> None:
        """Forget the current user. Cached posts are kept."""
        user = self.current_user
        self.store.remove_item(config.storage.user_key)
        if user:
            logger.info(f"Logged out {user.username}")
