"""
Main Application Module

This is the entry point for the MediPosts client.
Wires the components together and exposes them as a command line tool:

1. Log in with a JSONPlaceholder username
2. List the user's posts (cached locally after the first load)
3. Create, edit and delete posts with optimistic local updates
4. Log out

Handled failures (validation, unknown user, load errors) are printed
as messages and give exit code 1; nothing is fatal.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import httpx

from .config import config
from .api import APIClient, Post, User
from .auth import SessionManager
from .errors import (
    LoadError,
    MediPostsError,
    PostBusyError,
    UserNotFoundError,
    ValidationError,
)
from .posts import PostRepository
from .routes import POSTS_PATH, Route, resolve_route
from .storage import LocalStore


def setup_logging(log_level: Optional[str] = None) -> logging.Logger:
    """Set up logging for the application."""
    log_level = (log_level or config.log.log_level).upper()

    # Ensure log directory exists
    config.log.log_directory.mkdir(parents=True, exist_ok=True)

    # Create logger
    logger = logging.getLogger("medi_posts")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG)

    # Console handler; stdout is reserved for command output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, log_level))
    console_format = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%H:%M:%S"
    )
    console_handler.setFormatter(console_format)

    # File handler
    file_handler = logging.FileHandler(
        config.log.log_file_path,
        mode='a',
        encoding='utf-8'
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(config.log.log_format))

    logger.addHandler(console_handler)
    logger.addHandler(file_handler)

    return logger


class MediPostsApp:
    """
    Application controller.

    Owns the store, the API client, the session and the post repository,
    and decides which page a path leads to.
    """

    def __init__(
        self,
        storage_path: Optional[Path] = None,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.Client] = None
    ):
        self.logger = logging.getLogger("medi_posts.main")
        self.store = LocalStore(storage_path)
        self.api = APIClient(base_url=base_url, client=http_client)
        self.session = SessionManager(self.api, self.store)
        self.posts = PostRepository(self.api, self.store)

        self.logger.debug("MediPostsApp initialized")

    def __enter__(self) -> "MediPostsApp":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.api.close()

    @property
    def user(self) -> Optional[User]:
        return self.session.current_user

    def open(self, path: str) -> Route:
        """
        Navigate to a path. Opening the posts page loads the user's posts;
        a load failure is kept in ``self.posts.error`` instead of raised.
        """
        user = self.user
        route = resolve_route(path, user)
        if route.redirected:
            self.logger.debug(f"Redirected {path!r} -> {route.path}")

        if route.page == "posts":
            try:
                self.posts.load(user.id)
            except LoadError as e:
                self.logger.debug(f"Showing posts page in error state: {e}")
        return route

    def login(self, username: str) -> Route:
        """Log in and navigate to the posts page."""
        self.session.login(username)
        return self.open(POSTS_PATH)

    def logout(self) -> Route:
        self.session.logout()
        self.posts = PostRepository(self.api, self.store)
        return self.open("/")


def format_post(post: Post, busy: bool = False) -> str:
    """Render one post as a text card."""
    status = "  [busy]" if busy else ""
    return f"#{post.id}{status}\n  {post.title}\n  " + post.body.replace("\n", "\n  ")


def render_posts(app: MediPostsApp) -> str:
    user = app.user
    lines = [f"Posts (user ID: {user.id if user else '-'})"]

    if app.posts.loading:
        lines.append("Loading posts...")
    elif app.posts.error:
        lines.append(app.posts.error)
    elif not app.posts.posts:
        lines.append("No posts for this user yet.")
    else:
        lines.extend(format_post(p, app.posts.is_busy(p.id)) for p in app.posts.posts)
    return "\n".join(lines)


def _open_posts(app: MediPostsApp) -> bool:
    """
    Open the posts page; print the login hint if the route redirects away.

    A failed load does not block the page: mutations still apply locally.
    """
    route = app.open(POSTS_PATH)
    if route.page != "posts":
        print("Please log in first: medi-posts login USERNAME")
        return False
    return True


def cmd_login(app: MediPostsApp, args: argparse.Namespace) -> int:
    app.login(args.username)
    print(f"Hi, {app.user.username}")
    print(render_posts(app))
    return 1 if app.posts.error else 0


def cmd_logout(app: MediPostsApp, args: argparse.Namespace) -> int:
    app.logout()
    print("Logged out")
    return 0


def cmd_whoami(app: MediPostsApp, args: argparse.Namespace) -> int:
    user = app.user
    if user is None:
        print("Not logged in")
        return 1
    print(f"{user.username} ({user.name}), ID: {user.id}")
    return 0


def cmd_open(app: MediPostsApp, args: argparse.Namespace) -> int:
    route = app.open(args.path)
    if route.redirected:
        print(f"Redirected to {route.path}")
    if route.page == "posts":
        print(render_posts(app))
        return 1 if app.posts.error else 0

    print("Login: medi-posts login USERNAME (e.g. Bret)")
    return 0


def cmd_list(app: MediPostsApp, args: argparse.Namespace) -> int:
    if not _open_posts(app):
        return 1
    print(render_posts(app))
    return 1 if app.posts.error else 0


def cmd_reload(app: MediPostsApp, args: argparse.Namespace) -> int:
    user = app.user
    if resolve_route(POSTS_PATH, user).page != "posts":
        print("Please log in first: medi-posts login USERNAME")
        return 1

    try:
        app.posts.load(user.id)
    except LoadError as e:
        print(e)
        return 1
    print(render_posts(app))
    return 0


def cmd_create(app: MediPostsApp, args: argparse.Namespace) -> int:
    if not _open_posts(app):
        return 1
    post = app.posts.create({"title": args.title, "body": args.body})
    print(f"Created post #{post.id}")
    return 0


def cmd_edit(app: MediPostsApp, args: argparse.Namespace) -> int:
    if not _open_posts(app):
        return 1

    existing = app.posts.get(args.id)
    if existing is None:
        print(f"Post #{args.id} not found")
        return 1

    payload = {
        "title": existing.title if args.title is None else args.title,
        "body": existing.body if args.body is None else args.body,
    }
    post = app.posts.update(args.id, payload)
    print(f"Saved post #{post.id}")
    return 0


def cmd_delete(app: MediPostsApp, args: argparse.Namespace) -> int:
    if not _open_posts(app):
        return 1

    if not args.yes:
        answer = input(f"Delete post #{args.id}? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            print("Cancelled")
            return 0

    app.posts.delete(args.id)
    print(f"Deleted post #{args.id}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="medi-posts",
        description="JSONPlaceholder posts client with local caching"
    )
    parser.add_argument("--storage", type=Path, default=None,
                        help="Path of the local storage file")
    parser.add_argument("--base-url", default=None, help="API base URL")
    parser.add_argument("--log-level", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Console log level")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login", help="Log in with a username")
    p.add_argument("username")
    p.set_defaults(func=cmd_login)

    sub.add_parser("logout", help="Log out").set_defaults(func=cmd_logout)
    sub.add_parser("whoami", help="Show the logged-in user").set_defaults(func=cmd_whoami)

    p = sub.add_parser("open", help="Open a page by path")
    p.add_argument("path")
    p.set_defaults(func=cmd_open)

    sub.add_parser("list", help="List your posts").set_defaults(func=cmd_list)
    sub.add_parser("reload", help="Refetch your posts").set_defaults(func=cmd_reload)

    p = sub.add_parser("create", help="Create a post")
    p.add_argument("--title", required=True)
    p.add_argument("--body", required=True)
    p.set_defaults(func=cmd_create)

    p = sub.add_parser("edit", help="Edit a post")
    p.add_argument("id", type=int)
    p.add_argument("--title")
    p.add_argument("--body")
    p.set_defaults(func=cmd_edit)

    p = sub.add_parser("delete", help="Delete a post")
    p.add_argument("id", type=int)
    p.add_argument("--yes", action="store_true", help="Skip confirmation")
    p.set_defaults(func=cmd_delete)

    return parser


def main(argv: Optional[List[str]] = None, http_client: Optional[httpx.Client] = None) -> int:
    """Main entry point for the command line client."""
    args = build_parser().parse_args(argv)
    logger = setup_logging(args.log_level)

    try:
        with MediPostsApp(args.storage, args.base_url, http_client) as app:
            return args.func(app, args)

    except (ValidationError, UserNotFoundError, PostBusyError) as e:
        print(e)
        return 1

    except MediPostsError as e:
        logger.error(str(e))
        print(e)
        return 1

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
