"""
tests/test_session.py -- SessionContext, SessionManager and StoreUserDirectory
against a real (shared-memory) UserStore.

These run the production collaborators through the thread pool exactly as the
routes do, so they also cover the store <-> JWT <-> cookie wiring.
"""

from __future__ import annotations

from fakes import run
from starlette.responses import Response

from auth.dal import StoreUserDirectory, verify_password_async
from auth.models import User
from auth.session import SessionContext, SessionManager, resolve_user
from auth.tokens import hash_password


def _set_cookie_headers(resp: Response) -> list[str]:
    return [v.decode() for k, v in resp.raw_headers if k == b"set-cookie"]


class TestSessionContext:
    def test_untouched_context_writes_nothing(self) -> None:
        resp = Response()
        SessionContext(token="abc").apply(resp)
        assert _set_cookie_headers(resp) == []

    def test_issue_sets_cookie(self) -> None:
        ctx = SessionContext()
        ctx.issue("tok")
        resp = Response()
        ctx.apply(resp)
        [header] = _set_cookie_headers(resp)
        assert header.startswith("session=tok")
        assert "httponly" in header.lower()
        assert "samesite=lax" in header.lower()

    def test_clear_expires_cookie(self) -> None:
        ctx = SessionContext(token="tok")
        ctx.clear()
        resp = Response()
        ctx.apply(resp)
        [header] = _set_cookie_headers(resp)
        assert header.startswith("session=")
        assert "max-age=0" in header.lower()
        assert ctx.token is None

    def test_from_cookies(self) -> None:
        assert SessionContext.from_cookies({"session": "tok"}).token == "tok"
        assert SessionContext.from_cookies({}).token is None


class TestSessionManager:
    def test_create_then_resolve_then_delete(self, store) -> None:
        user_id = store.create_user(User(email="ada@example.com", password="digest"))
        manager = SessionManager(store, SessionContext())

        run(manager.create_session(user_id))
        token = manager.context.outgoing
        assert isinstance(token, str)
        assert resolve_user(store, token).id == user_id
        assert store.count_sessions(user_id) == 1

        signout = SessionManager(store, SessionContext(token=token))
        run(signout.delete_session())
        assert signout.context.outgoing is None
        assert store.count_sessions(user_id) == 0
        assert resolve_user(store, token) is None

    def test_delete_without_cookie_only_clears(self, store) -> None:
        manager = SessionManager(store, SessionContext())
        run(manager.delete_session())
        assert manager.context.changed
        assert manager.context.outgoing is None

    def test_delete_with_garbage_cookie_only_clears(self, store) -> None:
        manager = SessionManager(store, SessionContext(token="garbage"))
        run(manager.delete_session())
        assert manager.context.outgoing is None

    def test_resolve_rejects_missing_token(self, store) -> None:
        assert resolve_user(store, None) is None
        assert resolve_user(store, "") is None


class TestStoreUserDirectory:
    def test_create_user_hashes_password(self, store) -> None:
        users = StoreUserDirectory(store)
        user = run(users.create_user("new@example.com", "secret1"))
        assert user is not None
        assert user.password != "secret1"
        assert run(verify_password_async("secret1", user.password)) is True

    def test_lookup(self, store) -> None:
        store.create_user(User(email="ada@example.com", password=hash_password("secret1")))
        users = StoreUserDirectory(store)
        assert run(users.get_user_by_email("ada@example.com")).email == "ada@example.com"
        assert run(users.get_user_by_email("ghost@example.com")) is None

    def test_duplicate_insert_returns_none(self, store) -> None:
        store.create_user(User(email="ada@example.com", password="digest"))
        users = StoreUserDirectory(store)
        assert run(users.create_user("ada@example.com", "secret1")) is None
