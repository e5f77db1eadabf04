"""Shared fixtures: in-memory database, fake store, fake session provider."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

from datetime import datetime, timedelta, timezone
from itertools import count
from typing import List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.responses import RedirectResponse
from starlette.testclient import TestClient

from backend.db import init_db
from backend.models import User
from backend.schemas import BookmarkRecord, SessionUser
from backend.store import SqlBookmarkStore, StoreError


class FakeStore:
    """In-memory BookmarkStore that records every call."""

    def __init__(self, records: Optional[List[BookmarkRecord]] = None):
        self.records: List[BookmarkRecord] = list(records or [])
        self.calls: List[tuple] = []
        self.fail_select = False
        self.fail_insert = False
        self.fail_delete = False
        self._ids = count(1)
        self._clock = datetime(2024, 3, 5, 12, 0, tzinfo=timezone.utc)

    def select(self, owner_id):
        self.calls.append(("select", owner_id))
        if self.fail_select:
            raise StoreError("select rejected")
        mine = [r for r in self.records if r.user_id == owner_id]
        return sorted(mine, key=lambda r: r.created_at, reverse=True)

    def insert(self, title, url, owner_id):
        self.calls.append(("insert", title, url, owner_id))
        if self.fail_insert:
            raise StoreError("insert rejected")
        self._clock += timedelta(seconds=1)
        record = BookmarkRecord(
            id=f"bm-{next(self._ids)}", user_id=owner_id, title=title, url=url, created_at=self._clock
        )
        self.records.append(record)
        return record

    def delete_by_id(self, bookmark_id, owner_id):
        self.calls.append(("delete", bookmark_id, owner_id))
        if self.fail_delete:
            raise StoreError("delete rejected")
        self.records = [r for r in self.records if not (r.id == bookmark_id and r.user_id == owner_id)]

    def call_names(self):
        return [c[0] for c in self.calls]


class FakeSessionProvider:
    def __init__(self, user: Optional[SessionUser] = None):
        self.user = user
        self.signed_out = False
        self.sign_in_calls: List[tuple] = []

    def get_current_user(self):
        return self.user

    async def sign_in(self, provider, redirect_target):
        self.sign_in_calls.append((provider, redirect_target))
        return RedirectResponse(f"https://idp.example/{provider}?redirect_uri={redirect_target}", status_code=302)

    async def complete_sign_in(self, provider):
        return self.user

    def sign_out(self):
        self.signed_out = True
        self.user = None


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    init_db(engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    engine.dispose()


@pytest.fixture()
def sql_store(session_factory):
    return SqlBookmarkStore(session_factory)


@pytest.fixture()
def db_user(session_factory):
    with session_factory() as s:
        u = User(email="ada@example.com", name="Ada")
        s.add(u)
        s.commit()
        s.refresh(u)
        return SessionUser.model_validate(u)


@pytest.fixture()
def user():
    return SessionUser(id=7, email="ada@example.com", name="Ada")


@pytest.fixture()
def fake_store():
    return FakeStore()


@pytest.fixture()
def provider(user):
    return FakeSessionProvider(user)


@pytest.fixture()
def make_client(fake_store):
    from backend.app import app, get_store, get_session_provider

    def _make(provider):
        app.dependency_overrides[get_store] = lambda: fake_store
        app.dependency_overrides[get_session_provider] = lambda: provider
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture()
def client(make_client, provider):
    return make_client(provider)


@pytest.fixture()
def anon_client(make_client):
    return make_client(FakeSessionProvider(None))
