"""
Session Provider (Google OAuth via authlib) and the two-state Session Gate.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from authlib.integrations.starlette_client import OAuth, OAuthError
from fastapi import Request, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from starlette.responses import Response

from .config import GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_METADATA_URL
from .models import User
from .schemas import SessionUser
from .utils import clean

logger = logging.getLogger(__name__)

oauth = OAuth()
oauth.register(
    name="google",
    server_metadata_url=GOOGLE_METADATA_URL,
    client_id=GOOGLE_CLIENT_ID,
    client_secret=GOOGLE_CLIENT_SECRET,
    client_kwargs={"scope": "openid email profile"},
)

GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


class SessionProvider(Protocol):
    def get_current_user(self) -> Optional[SessionUser]:
        ...

    async def sign_in(self, provider: str, redirect_target: str) -> Response:
        ...

    def sign_out(self) -> None:
        ...


@dataclass(frozen=True)
class SessionState:
    """Either anonymous (no user) or authenticated(user). Nothing in between."""
    user: Optional[SessionUser] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


ANONYMOUS = SessionState()


def resolve_session(provider: SessionProvider) -> SessionState:
    user = provider.get_current_user()
    return SessionState(user) if user is not None else ANONYMOUS


class OAuthSessionProvider:
    """Session provider bound to one request; identity lives in the signed session cookie."""

    def __init__(self, request: Request, oauth_registry: OAuth, session_factory: sessionmaker):
        self.request = request
        self.oauth = oauth_registry
        self.session_factory = session_factory

    def get_current_user(self) -> Optional[SessionUser]:
        uid = self.request.session.get("user_id")
        if not uid:
            return None
        try:
            with self.session_factory() as s:
                user = s.get(User, uid)
                if not user:
                    logger.warning("session refers to unknown user %s", uid)
                    return None
                return SessionUser.model_validate(user)
        except SQLAlchemyError as e:
            logger.error("resolving session user %s failed: %s", uid, e)
            return None

    async def sign_in(self, provider: str, redirect_target: str) -> Response:
        client = self.oauth.create_client(provider)
        if client is None:
            raise HTTPException(404, f"unknown identity provider: {provider}")
        # prompt=consent makes Google show the account chooser every time
        return await client.authorize_redirect(
            self.request, redirect_target, access_type="offline", prompt="consent"
        )

    async def complete_sign_in(self, provider: str) -> SessionUser:
        client = self.oauth.create_client(provider)
        if client is None:
            raise HTTPException(404, f"unknown identity provider: {provider}")
        try:
            token = await client.authorize_access_token(self.request)
        except OAuthError as e:
            logger.warning("token exchange failed: %s %s", e.error, e.description)
            raise HTTPException(401, "OAuth token exchange failed")

        userinfo = token.get("userinfo") if token else None
        if not userinfo:
            try:
                resp = await client.get(GOOGLE_USERINFO_URL, token=token)
                userinfo = resp.json()
            except Exception as e:
                logger.warning("userinfo fetch failed: %r", e)
                raise HTTPException(401, "Failed to fetch user info")

        email = clean((userinfo or {}).get("email"))
        if not email:
            logger.warning("no email in userinfo: %s", userinfo)
            raise HTTPException(401, "Account has no email")

        user = self._upsert_user(email, clean(userinfo.get("name")), clean(userinfo.get("picture")))
        self.request.session["user_id"] = user.id
        logger.info("user %s signed in", user.id)
        return user

    def _upsert_user(self, email: str, name: str, picture: str) -> SessionUser:
        with self.session_factory() as s:
            user = s.execute(select(User).where(User.email == email)).scalar_one_or_none()
            if not user:
                user = User(email=email, name=name, picture=picture)
                s.add(user)
                s.commit()
                s.refresh(user)
            else:
                changed = False
                if name and name != user.name:
                    user.name = name; changed = True
                if picture and picture != user.picture:
                    user.picture = picture; changed = True
                if changed:
                    s.commit()
            return SessionUser.model_validate(user)

    def sign_out(self) -> None:
        self.request.session.clear()
