"""
Route resolution.

``/`` is the login page, ``/posts`` the post list of the logged-in user,
and every other path redirects to ``/``.
"""

from dataclasses import dataclass
from typing import Optional

from .api.client import User


LOGIN_PATH = "/"
POSTS_PATH = "/posts"


@dataclass
class Route:
    """Page to show after redirects."""
    path: str
    page: str
    redirected: bool = False


def resolve_route(path: str, user: Optional[User]) -> Route:
    """
    Resolve a path to the page to show for the given user.

    Args:
        path: Requested path. A trailing slash is ignored.
        user: Logged-in user, or None.

    Returns:
        The final Route; ``redirected`` is True if it differs from ``path``.
    """
    normalized = "/" + (path or "").strip().strip("/")

    if normalized == POSTS_PATH:
        if user is None:
            return Route(LOGIN_PATH, "login", redirected=True)
        return Route(POSTS_PATH, "posts")

    # Unknown paths fall back to the login page, which sends logged-in users on
    redirected = normalized != LOGIN_PATH
    if user is not None:
        return Route(POSTS_PATH, "posts", redirected=True)
    return Route(LOGIN_PATH, "login", redirected=redirected)
