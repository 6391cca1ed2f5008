"""
Configuration constants for the MediPosts client.

This module centralizes all configurable parameters to make the client
easy to point at a different API or storage location.
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class APIConfig:
    """API configuration settings."""
    base_url: str = field(
        default_factory=lambda: os.environ.get(
            "MEDI_POSTS_BASE_URL", "https://jsonplaceholder.typicode.com"
        )
    )
    users_endpoint: str = "/users"
    posts_endpoint: str = "/posts"
    timeout_seconds: float = 10.0


@dataclass
class StorageConfig:
    """Local persistence configuration."""
    storage_path: Path = field(
        default_factory=lambda: Path(
            os.environ.get(
                "MEDI_POSTS_STORAGE",
                Path(os.path.expanduser("~")) / ".medi_posts" / "storage.json",
            )
        )
    )
    user_key: str = "current_user"
    posts_key_prefix: str = "posts_"

    # Static title/body replacements applied to freshly fetched posts
    title_overrides: Dict[int, Dict[str, str]] = field(default_factory=lambda: {
        1: {"title": "Judul baru", "body": "Isi baru"},
    })

    # Used for login when the users endpoint is unreachable
    fallback_users: List[Dict] = field(default_factory=lambda: [
        {"id": 1, "username": "Bret", "name": "Demo User"},
    ])

    def posts_key(self, user_id: int) -> str:
        """Storage key holding the cached posts of a user."""
        return f"{self.posts_key_prefix}{user_id}"


@dataclass
class LogConfig:
    """Logging configuration."""
    log_directory: Path = field(default_factory=lambda: Path("logs"))
    log_filename: str = "medi_posts.log"
    log_level: str = field(
        default_factory=lambda: os.environ.get("MEDI_POSTS_LOG_LEVEL", "INFO")
    )
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @property
    def log_file_path(self) -> Path:
        """Get full path to the log file."""
        return self.log_directory / self.log_filename


@dataclass
class Config:
    """Master configuration combining all sub-configurations."""
    api: APIConfig = field(default_factory=APIConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    log: LogConfig = field(default_factory=LogConfig)


# Global configuration instance
config = Config()
