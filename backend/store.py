"""
Bookmark persistence, always scoped to one owner.
"""

import logging
from typing import List, Protocol

from sqlalchemy import select, delete, and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .models import Bookmark
from .schemas import BookmarkRecord

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """The backing database rejected a bookmark operation."""


class BookmarkStore(Protocol):
    def select(self, owner_id: int) -> List[BookmarkRecord]:
        """All bookmarks of owner_id, newest first."""
        ...

    def insert(self, title: str, url: str, owner_id: int) -> BookmarkRecord:
        ...

    def delete_by_id(self, bookmark_id: str, owner_id: int) -> None:
        ...


class SqlBookmarkStore:
    """BookmarkStore over SQLAlchemy. One session per call."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def select(self, owner_id: int) -> List[BookmarkRecord]:
        stmt = (
            select(Bookmark)
            .where(Bookmark.user_id == owner_id)
            .order_by(Bookmark.created_at.desc())
        )
        try:
            with self.session_factory() as s:
                rows = s.execute(stmt).scalars().all()
                return [BookmarkRecord.model_validate(r) for r in rows]
        except SQLAlchemyError as e:
            raise StoreError(f"select failed for owner {owner_id}") from e

    def insert(self, title: str, url: str, owner_id: int) -> BookmarkRecord:
        with self.session_factory() as s:
            row = Bookmark(title=title, url=url, user_id=owner_id)
            s.add(row)
            try:
                s.commit()
                s.refresh(row)
            except SQLAlchemyError as e:
                s.rollback()
                raise StoreError(f"insert failed for owner {owner_id}") from e
            logger.debug("inserted bookmark %s for owner %s", row.id, owner_id)
            return BookmarkRecord.model_validate(row)

    def delete_by_id(self, bookmark_id: str, owner_id: int) -> None:
        # a miss deletes zero rows and still counts as success
        stmt = delete(Bookmark).where(and_(Bookmark.id == bookmark_id, Bookmark.user_id == owner_id))
        with self.session_factory() as s:
            try:
                result = s.execute(stmt)
                s.commit()
            except SQLAlchemyError as e:
                s.rollback()
                raise StoreError(f"delete failed for bookmark {bookmark_id}") from e
            logger.debug("deleted %d row(s) for bookmark %s", result.rowcount, bookmark_id)
