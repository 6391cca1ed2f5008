"""
Tests for the application controller and the command line client
"""

import pytest

from medi_posts.main import MediPostsApp, main
from medi_posts.storage.store import LocalStore


@pytest.fixture
def storage(tmp_path):
    return tmp_path / "storage.json"


@pytest.fixture
def run(storage, http_client):
    """Run the CLI against the fake API and a temporary store."""
    def _run(*argv):
        return main(["--storage", str(storage), "--log-level", "ERROR", *argv],
                    http_client=http_client)
    return _run


class TestMediPostsApp:

    @pytest.fixture
    def app(self, storage, http_client):
        with MediPostsApp(storage, "https://api.test", http_client) as app:
            yield app

    def test_login_navigates_to_posts(self, app):
        route = app.login("Bret")

        assert route.page == "posts"
        assert app.posts.posts[0].title == "Judul baru"

    def test_open_posts_without_login_redirects(self, app, fake_api):
        route = app.open("/posts")

        assert route.path == "/"
        assert route.redirected
        assert fake_api.requests == []

    def test_load_error_is_kept_not_raised(self, app, fake_api):
        app.login("Bret")
        app.store.remove_item("posts_1")
        fake_api.failing.add("GET")

        route = app.open("/posts")

        assert route.page == "posts"
        assert app.posts.error == "Failed to load posts. Try reloading."

    def test_logout_returns_to_login(self, app):
        app.login("Bret")

        route = app.logout()

        assert route.page == "login"
        assert app.user is None
        assert app.posts.posts == []


class TestCLI:

    def test_login_lists_posts(self, run, capsys):
        assert run("login", "bret") == 0

        out = capsys.readouterr().out
        assert "Hi, Bret" in out
        assert "Judul baru" in out

    def test_unknown_user(self, run, capsys):
        assert run("login", "nobody") == 1

        assert "not found" in capsys.readouterr().out
        assert run("whoami") == 1

    def test_post_commands_require_login(self, run, capsys, fake_api):
        assert run("list") == 1

        assert "log in first" in capsys.readouterr().out
        assert fake_api.requests == []

    def test_create_edit_delete(self, run, capsys, storage):
        run("login", "Bret")

        assert run("create", "--title", "Hello", "--body", "World") == 0
        assert run("edit", "101", "--title", "Hello again") == 0
        assert run("delete", "2", "--yes") == 0
        capsys.readouterr()

        assert run("list") == 0
        out = capsys.readouterr().out
        assert "#101" in out and "Hello again" in out
        assert "#2\n" not in out

    def test_create_with_empty_title_fails(self, run, capsys, fake_api):
        run("login", "Bret")
        fake_api.requests.clear()

        assert run("create", "--title", " ", "--body", "x") == 1

        assert "required" in capsys.readouterr().out
        assert fake_api.calls("POST") == 0

    def test_delete_asks_for_confirmation(self, run, capsys, monkeypatch, fake_api):
        run("login", "Bret")
        monkeypatch.setattr("builtins.input", lambda prompt: "n")

        assert run("delete", "1") == 0

        assert "Cancelled" in capsys.readouterr().out
        assert fake_api.calls("DELETE") == 0

    def test_edit_unknown_post(self, run, capsys):
        run("login", "Bret")

        assert run("edit", "999", "--title", "x") == 1
        assert "not found" in capsys.readouterr().out

    def test_open_unknown_path_redirects(self, run, capsys):
        assert run("open", "/settings") == 0

        out = capsys.readouterr().out
        assert "Redirected to /" in out
        assert "Login" in out

    def test_reload_keeps_local_changes(self, run, capsys, fake_api):
        run("login", "Bret")
        run("delete", "2", "--yes")
        fake_api.requests.clear()
        capsys.readouterr()

        assert run("reload") == 0

        assert fake_api.calls("GET") == 0
        out = capsys.readouterr().out
        assert "#1" in out
        assert "#2" not in out

    def test_reload_offline_keeps_offline_post(self, run, capsys, fake_api, storage):
        run("login", "Bret")
        fake_api.failing.add("POST")
        run("create", "--title", "Offline", "--body", "Draft")
        fake_api.failing.add("GET")
        capsys.readouterr()

        assert run("reload") == 0
        assert run("list") == 0

        out = capsys.readouterr().out
        assert "Offline" in out
        assert "Failed to load posts" not in out
        assert "Offline" in storage.read_text(encoding="utf-8")

    def test_logout(self, run, capsys):
        run("login", "Bret")

        assert run("logout") == 0
        assert run("whoami") == 1

    def test_reload_requires_login(self, run, capsys, fake_api):
        assert run("reload") == 1

        assert "log in first" in capsys.readouterr().out
        assert fake_api.requests == []


class TestOfflineCLI:
    """Post commands keep working locally when the first load failed."""

    @pytest.fixture
    def offline(self, run, storage, fake_api, capsys):
        run("login", "Bret")
        LocalStore(storage).remove_item("posts_1")
        fake_api.failing.add("*")
        capsys.readouterr()
        return run

    def test_list_shows_load_error(self, offline, capsys):
        assert offline("list") == 1

        assert "Failed to load posts. Try reloading." in capsys.readouterr().out

    def test_create_uses_local_id(self, offline, capsys, storage):
        assert offline("create", "--title", "T", "--body", "B") == 0

        assert "Created post #" in capsys.readouterr().out
        cached = LocalStore(storage).get_json("posts_1")
        assert [(p["title"], p["body"]) for p in cached] == [("T", "B")]
        assert cached[0]["id"] > 1_000_000_000_000

    def test_edit_and_delete_offline_post(self, offline, capsys, storage):
        offline("create", "--title", "T", "--body", "B")
        post_id = LocalStore(storage).get_json("posts_1")[0]["id"]

        assert offline("edit", str(post_id), "--body", "Edited") == 0
        assert offline("list") == 0
        assert "Edited" in capsys.readouterr().out

        assert offline("delete", str(post_id), "--yes") == 0
        assert LocalStore(storage).get_json("posts_1") == []


if __name__ == "__main__":
    pytest.main([__file__, "-v", "-s"])
