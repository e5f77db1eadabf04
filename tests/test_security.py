"""Tests for the session provider and the session gate."""
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import OperationalError

from backend.models import User
from backend.security import ANONYMOUS, OAuthSessionProvider, SessionState, resolve_session
from tests.conftest import FakeSessionProvider


def _provider(session_factory, session=None, oauth=None):
    request = SimpleNamespace(session={} if session is None else session)
    return OAuthSessionProvider(request, oauth or MagicMock(), session_factory)


class TestSessionGate:

    def test_anonymous_without_user(self):
        state = resolve_session(FakeSessionProvider(None))
        assert state is ANONYMOUS
        assert not state.is_authenticated

    def test_authenticated_with_user(self, user):
        state = resolve_session(FakeSessionProvider(user))
        assert state.is_authenticated
        assert state.user == user

    def test_states_compare_by_user(self, user):
        assert SessionState(user) == SessionState(user)
        assert SessionState() == ANONYMOUS


class TestCurrentUser:

    def test_no_session_is_anonymous(self, session_factory):
        assert _provider(session_factory).get_current_user() is None

    def test_known_user(self, session_factory, db_user):
        p = _provider(session_factory, {"user_id": db_user.id})
        assert p.get_current_user() == db_user

    def test_unknown_user_is_anonymous(self, session_factory):
        p = _provider(session_factory, {"user_id": 999})
        assert p.get_current_user() is None

    def test_database_failure_is_anonymous(self, session_factory, db_user):
        p = _provider(session_factory, {"user_id": db_user.id})
        with patch("sqlalchemy.orm.Session.get", side_effect=OperationalError("SELECT", {}, Exception("down"))):
            assert p.get_current_user() is None


class TestSignOut:

    def test_clears_session(self, session_factory, db_user):
        p = _provider(session_factory, {"user_id": db_user.id})
        p.sign_out()
        assert p.request.session == {}
        assert resolve_session(p) is ANONYMOUS


class TestSignIn:

    @pytest.mark.asyncio
    async def test_requests_account_chooser(self, session_factory):
        client = MagicMock()
        client.authorize_redirect = AsyncMock(return_value="redirect")
        oauth = MagicMock()
        oauth.create_client.return_value = client
        p = _provider(session_factory, oauth=oauth)

        assert await p.sign_in("google", "http://testserver/auth/callback") == "redirect"
        oauth.create_client.assert_called_once_with("google")
        client.authorize_redirect.assert_awaited_once_with(
            p.request, "http://testserver/auth/callback", access_type="offline", prompt="consent"
        )

    @pytest.mark.asyncio
    async def test_unknown_provider(self, session_factory):
        oauth = MagicMock()
        oauth.create_client.return_value = None
        with pytest.raises(HTTPException) as exc:
            await _provider(session_factory, oauth=oauth).sign_in("myspace", "/cb")
        assert exc.value.status_code == 404


class TestCompleteSignIn:

    def _oauth(self, token):
        client = MagicMock()
        client.authorize_access_token = AsyncMock(return_value=token)
        client.get = AsyncMock()
        oauth = MagicMock()
        oauth.create_client.return_value = client
        return oauth, client

    @pytest.mark.asyncio
    async def test_creates_user_and_session(self, session_factory):
        oauth, _ = self._oauth({"userinfo": {"email": "new@example.com", "name": "New", "picture": "p.png"}})
        p = _provider(session_factory, oauth=oauth)
        user = await p.complete_sign_in("google")
        assert user.email == "new@example.com"
        assert p.request.session["user_id"] == user.id
        assert p.get_current_user() == user

    @pytest.mark.asyncio
    async def test_updates_existing_user(self, session_factory, db_user):
        oauth, _ = self._oauth({"userinfo": {"email": db_user.email, "name": "Ada L.", "picture": ""}})
        p = _provider(session_factory, oauth=oauth)
        user = await p.complete_sign_in("google")
        assert user.id == db_user.id
        assert user.name == "Ada L."
        with session_factory() as s:
            assert s.query(User).count() == 1

    @pytest.mark.asyncio
    async def test_falls_back_to_userinfo_endpoint(self, session_factory):
        oauth, client = self._oauth({"access_token": "t"})
        client.get.return_value = MagicMock(json=MagicMock(return_value={"email": "fb@example.com"}))
        user = await _provider(session_factory, oauth=oauth).complete_sign_in("google")
        assert user.email == "fb@example.com"

    @pytest.mark.asyncio
    async def test_missing_email_is_401(self, session_factory):
        oauth, _ = self._oauth({"userinfo": {"name": "No Mail"}})
        p = _provider(session_factory, oauth=oauth)
        with pytest.raises(HTTPException) as exc:
            await p.complete_sign_in("google")
        assert exc.value.status_code == 401
        assert "user_id" not in p.request.session
