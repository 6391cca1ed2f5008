"""
API Client Module

HTTP client for the JSONPlaceholder users and posts endpoints with
timeout handling and a uniform network error.
"""

import logging
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, asdict

import httpx

from ..config import config
from ..errors import NetworkError


logger = logging.getLogger(__name__)


@dataclass
class User:
    """Represents the logged-in user."""
    id: int
    username: str
    name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        """Build a user from an API or storage record, dropping extra fields."""
        return cls(id=data["id"], username=data["username"], name=data.get("name", ""))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Post:
    """Represents a post owned by one user."""
    id: int
    title: str
    body: str
    user_id: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Post":
        """Build a post from its JSON shape (``userId`` on the wire)."""
        return cls(
            id=data["id"],
            title=data["title"],
            body=data["body"],
            user_id=data["userId"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "userId": self.user_id,
        }

    def merged(self, *updates: Dict[str, Any]) -> "Post":
        """Return a copy with each update's JSON fields layered on top, in order."""
        data = self.to_dict()
        for update in updates:
            data.update({k: v for k, v in update.items() if k in data})
        return Post.from_dict(data)


class APIClient:
    """
    HTTP client for the JSONPlaceholder API.

    Every transport failure, non-2xx status and undecodable body is
    raised as NetworkError so callers only handle one failure type.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None
    ):
        """
        Initialize the API client.

        Args:
            base_url: API root (uses config default if None).
            timeout: Request timeout in seconds (uses config default if None).
            client: Pre-built httpx client, e.g. one with a mock transport.
        """
        self.base_url = base_url or config.api.base_url
        self.timeout = timeout or config.api.timeout_seconds
        # An injected client belongs to the caller and is left open on close()
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=self.base_url, timeout=self.timeout)
        logger.info(f"APIClient initialized (base_url: {self.base_url})")

    def __enter__(self) -> "APIClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def fetch_users(self) -> List[User]:
        """
        Fetch every user from the API.

        Raises:
            NetworkError: If the request fails.
        """
        data = self._request("GET", config.api.users_endpoint)
        if not isinstance(data, list):
            raise NetworkError(f"Unexpected API response format: {type(data)}")

        try:
            users = [User.from_dict(item) for item in data]
        except (KeyError, TypeError) as e:
            raise NetworkError(f"Malformed user record: {e!r}") from e
        logger.info(f"Fetched {len(users)} users")
        return users

    def fetch_users_or_fallback(self) -> List[User]:
        """
        Fetch users, returning the configured fallback users when the API
        is unavailable.
        """
        try:
            return self.fetch_users()
        except NetworkError as e:
            logger.warning(f"Could not fetch users: {e}")
            logger.info("Using fallback users instead")
            return [User.from_dict(item) for item in config.storage.fallback_users]

    def fetch_posts(self, user_id: int) -> List[Post]:
        """
        Fetch the posts of one user.

        Args:
            user_id: Owner of the posts.

        Returns:
            List of Post objects.

        Raises:
            NetworkError: If the request fails or a record is malformed.
        """
        data = self._request("GET", config.api.posts_endpoint, params={"userId": user_id})
        if not isinstance(data, list):
            raise NetworkError(f"Unexpected API response format: {type(data)}")

        try:
            posts = [Post.from_dict(item) for item in data]
        except (KeyError, TypeError) as e:
            raise NetworkError(f"Malformed post record: {e!r}") from e

        logger.info(f"Fetched {len(posts)} posts for user {user_id}")
        return posts

    def create_post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST a new post and return the server's JSON response."""
        return self._request("POST", config.api.posts_endpoint, json=payload)

    def update_post(self, post_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        """PUT a post and return the server's JSON response."""
        return self._request("PUT", f"{config.api.posts_endpoint}/{post_id}", json=payload)

    def delete_post(self, post_id: int) -> None:
        """DELETE a post."""
        self._request("DELETE", f"{config.api.posts_endpoint}/{post_id}")

    def _request(self, method: str, path: str, **kwargs) -> Any:
        """
        Send a request and decode its JSON body.

        Raises:
            NetworkError: On transport errors, error statuses or bad JSON.
        """
        logger.debug(f"{method} {path} {kwargs.get('params') or ''}")
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise NetworkError(f"{method} {path} failed: {e}") from e

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(f"{method} {path} returned invalid JSON") from e
