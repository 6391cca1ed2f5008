"""
Post Repository Module

Keeps the in-memory post list of the current user in step with the
remote API and the local cache.

Reads are cache-first: a cached list is returned as-is and the network
is only used when nothing is cached. Writes are optimistic: the local
list always changes, whether or not the server accepted the call, and
every change is written through to the cache.
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Set

from ..api.client import APIClient, Post
from ..config import config
from ..errors import LoadError, NetworkError, PostBusyError, ValidationError
from ..storage.store import LocalStore


logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Failed to load posts. Try reloading."


def _local_id() -> int:
    """Millisecond timestamp used as the id of posts the server did not number."""
    return int(time.time() * 1000)


def _validated(payload: Dict[str, Any]) -> Dict[str, str]:
    title = (payload.get("title") or "").strip()
    body = (payload.get("body") or "").strip()
    if not title or not body:
        raise ValidationError("Title and body are required.")
    return {"title": title, "body": body}


class PostRepository:
    """
    Post list of one user with remote sync and write-through caching.

    Attributes:
        posts: Current in-memory list, newest created first.
        user_id: Owner of ``posts``; set by ``load``.
        busy_ids: Ids with an update or delete in flight.
        loading: True while ``load`` runs.
        error: Message of the last failed load, else empty.
    """

    def __init__(self, api: APIClient, store: LocalStore):
        self.api = api
        self.store = store
        self.posts: List[Post] = []
        self.user_id: Optional[int] = None
        self.busy_ids: Set[int] = set()
        self.loading = False
        self.error = ""

    def load(self, user_id: int) -> List[Post]:
        """
        Load the posts of a user, preferring the local cache.

        Args:
            user_id: Owner of the posts.

        Returns:
            The cached list verbatim if one exists, else the fetched list
            with title overrides applied (and now cached).

        Raises:
            LoadError: If nothing is cached and the fetch fails.
        """
        self.user_id = user_id
        self.loading = True
        self.error = ""
        try:
            cached = self._read_cache()
            if cached is not None:
                logger.debug(f"Using {len(cached)} cached posts for user {user_id}")
                self.posts = cached
                return self.posts

            try:
                fetched = self.api.fetch_posts(user_id)
            except NetworkError as e:
                logger.error(f"Failed to load posts for user {user_id}: {e}")
                self.error = LOAD_ERROR_MESSAGE
                raise LoadError(LOAD_ERROR_MESSAGE) from e

            self.posts = [self._apply_overrides(post) for post in fetched]
            self._persist()
            return self.posts
        finally:
            self.loading = False

    def reload(self) -> List[Post]:
        """Run ``load`` again for the current user."""
        if self.user_id is None:
            raise LoadError(LOAD_ERROR_MESSAGE)
        return self.load(self.user_id)

    def get(self, post_id: int) -> Optional[Post]:
        return next((p for p in self.posts if p.id == post_id), None)

    def is_busy(self, post_id: int) -> bool:
        return post_id in self.busy_ids

    def create(self, payload: Dict[str, Any]) -> Post:
        """
        Create a post and put it at the head of the list.

        The server-assigned id is used when the API accepts the post;
        otherwise a timestamp id is used and the post stays local.

        Raises:
            ValidationError: If title or body is empty. Nothing is sent.
        """
        fields = _validated(payload)
        data = {**fields, "userId": self.user_id}

        try:
            created = self.api.create_post(data)
            new_id = created.get("id") if isinstance(created, dict) else None
            if new_id is None:
                new_id = _local_id()
            logger.info(f"Created post {new_id}")
        except NetworkError as e:
            new_id = _local_id()
            logger.warning(f"Create failed, keeping post locally as {new_id}: {e}")

        post = Post(id=new_id, title=fields["title"], body=fields["body"], user_id=self.user_id)
        self._set_posts([post] + self.posts)
        return post

    def update(self, post_id: int, payload: Dict[str, Any]) -> Optional[Post]:
        """
        Edit a post.

        On success the server response is merged over the edit, on
        failure only the edit is applied.

        Returns:
            The updated post, or None if ``post_id`` is not in the list.

        Raises:
            ValidationError: If title or body is empty. Nothing is sent.
            PostBusyError: If the post already has an operation in flight.
        """
        fields = _validated(payload)
        data = {**fields, "userId": self.user_id}

        with self._busy(post_id):
            try:
                updated = self.api.update_post(post_id, data)
                layers = [data, updated if isinstance(updated, dict) else {}]
                logger.info(f"Updated post {post_id}")
            except NetworkError as e:
                layers = [data]
                logger.warning(f"Update failed, editing post {post_id} locally: {e}")

            self._set_posts([p.merged(*layers) if p.id == post_id else p for p in self.posts])

        return self.get(post_id)

    def delete(self, post_id: int) -> None:
        """
        Delete a post. It is removed locally whatever the server answers.

        Raises:
            PostBusyError: If the post already has an operation in flight.
        """
        with self._busy(post_id):
            try:
                self.api.delete_post(post_id)
                logger.info(f"Deleted post {post_id}")
            except NetworkError as e:
                logger.warning(f"Delete failed on server, removing post {post_id} locally: {e}")
            finally:
                self._set_posts([p for p in self.posts if p.id != post_id])

    @contextmanager
    def _busy(self, post_id: int) -> Iterator[None]:
        if post_id in self.busy_ids:
            raise PostBusyError(post_id)

        self.busy_ids.add(post_id)
        try:
            yield
        finally:
            self.busy_ids.discard(post_id)

    def _apply_overrides(self, post: Post) -> Post:
        override = config.storage.title_overrides.get(post.id)
        return post.merged(override) if override else post

    def _cache_key(self) -> Optional[str]:
        if self.user_id is None:
            return None
        return config.storage.posts_key(self.user_id)

    def _read_cache(self) -> Optional[List[Post]]:
        key = self._cache_key()
        if key is None:
            return None

        cached = self.store.get_json(key)
        if not isinstance(cached, list):
            return None

        # Any cached array wins; entries without the post fields are dropped
        posts = []
        for item in cached:
            try:
                posts.append(Post.from_dict(item))
            except (KeyError, TypeError):
                logger.warning(f"Skipping malformed cached post under '{key}': {item!r}")
        return posts

    def _set_posts(self, posts: List[Post]) -> None:
        self.posts = posts
        self._persist()

    def _persist(self) -> None:
        """Write the in-memory list through to the cache."""
        key = self._cache_key()
        if key is None:
            return

        try:
            self.store.set_json(key, [p.to_dict() for p in self.posts])
        except OSError as e:
            logger.warning(f"Could not persist posts under '{key}': {e}")
