"""
Shared fixtures: an in-memory stand-in for the JSONPlaceholder API served
through httpx.MockTransport, and a store in a temporary directory.
"""

import json
import sys
from pathlib import Path

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from medi_posts.api.client import APIClient
from medi_posts.config import config
from medi_posts.storage.store import LocalStore


BASE_URL = "https://api.test"


class FakeAPI:
    """Answers the five endpoints the client uses and records every request."""

    def __init__(self):
        self.users = [
            {"id": 1, "username": "Bret", "name": "Leanne Graham", "email": "Sincere@april.biz"},
            {"id": 2, "username": "Antonette", "name": "Ervin Howell", "email": "Shanna@melissa.tv"},
        ]
        self.posts = [
            {"userId": 1, "id": 1, "title": "sunt aut facere", "body": "quia et suscipit"},
            {"userId": 1, "id": 2, "title": "qui est esse", "body": "est rerum tempore"},
            {"userId": 2, "id": 11, "title": "et ea vero", "body": "delectus reiciendis"},
        ]
        self.requests = []
        # HTTP methods that should fail, e.g. {"POST"}; "*" fails everything
        self.failing = set()
        self.on_request = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path))
        if self.on_request:
            self.on_request(request)

        if "*" in self.failing or request.method in self.failing:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path
        if request.method == "GET" and path == "/users":
            return httpx.Response(200, json=self.users)

        if request.method == "GET" and path == "/posts":
            user_id = int(request.url.params["userId"])
            return httpx.Response(200, json=[p for p in self.posts if p["userId"] == user_id])

        if request.method == "POST" and path == "/posts":
            return httpx.Response(201, json={**json.loads(request.content), "id": 101})

        if path.startswith("/posts/"):
            post_id = int(path.rsplit("/", 1)[1])
            if request.method == "PUT":
                return httpx.Response(200, json={**json.loads(request.content), "id": post_id})
            if request.method == "DELETE":
                return httpx.Response(200, json={})

        return httpx.Response(404, json={})

    def calls(self, method: str) -> int:
        return sum(1 for m, _ in self.requests if m == method)


@pytest.fixture
def fake_api():
    return FakeAPI()


@pytest.fixture
def http_client(fake_api):
    client = httpx.Client(transport=httpx.MockTransport(fake_api.handler), base_url=BASE_URL)
    yield client
    client.close()


@pytest.fixture
def api(http_client):
    return APIClient(base_url=BASE_URL, client=http_client)


@pytest.fixture
def store(tmp_path):
    return LocalStore(tmp_path / "storage.json")


@pytest.fixture(autouse=True)
def log_directory(tmp_path, monkeypatch):
    """Keep log files written by the CLI out of the working directory."""
    monkeypatch.setattr(config.log, "log_directory", tmp_path / "logs")
