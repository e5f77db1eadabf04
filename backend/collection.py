"""
Client-side cache of one user's bookmarks.

The collection is seeded once from the store and then kept in step with the
user's own creates and deletes. Changes made elsewhere only show up after the
next load().
"""

import asyncio
import enum
import logging
from typing import Dict, List, Optional

from .schemas import BookmarkRecord, SessionUser
from .store import BookmarkStore, StoreError
from .utils import clean

logger = logging.getLogger(__name__)


class EntryStatus(str, enum.Enum):
    REMOVING = "removing"
    DELETE_FAILED = "delete_failed"


class BookmarkCollection:
    def __init__(self, store: BookmarkStore, owner: SessionUser):
        self.store = store
        self.owner = owner
        self._items: List[BookmarkRecord] = []
        self._status: Dict[str, EntryStatus] = {}

    @property
    def bookmarks(self) -> List[BookmarkRecord]:
        return list(self._items)

    def status(self, bookmark_id: str) -> Optional[EntryStatus]:
        return self._status.get(bookmark_id)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))

    def __contains__(self, bookmark_id) -> bool:
        return any(b.id == bookmark_id for b in self._items)

    async def load(self) -> List[BookmarkRecord]:
        """Replace the local sequence with the owner's bookmarks, newest first."""
        try:
            items = await asyncio.to_thread(self.store.select, self.owner.id)
        except StoreError as e:
            logger.error("loading bookmarks for user %s failed: %s", self.owner.id, e)
            items = []
        self._items = list(items)
        self._status.clear()
        return self.bookmarks

    async def create(self, title: Optional[str], url: Optional[str]) -> Optional[BookmarkRecord]:
        """
        Insert a bookmark and prepend the stored record.
        Returns None when the input is blank or the store rejects the insert.
        """
        title, url = clean(title), clean(url)
        if not title or not url:
            return None

        try:
            record = await asyncio.to_thread(self.store.insert, title, url, self.owner.id)
        except StoreError as e:
            logger.error("insert failed for user %s (%s): %s", self.owner.id, url, e)
            return None

        self._items.insert(0, record)
        return record

    async def delete(self, bookmark_id: str) -> bool:
        """
        Delete from the store first; drop the local entry only once the store
        confirms. On failure the entry stays, marked DELETE_FAILED.
        """
        present = bookmark_id in self
        if present:
            self._status[bookmark_id] = EntryStatus.REMOVING

        try:
            await asyncio.to_thread(self.store.delete_by_id, bookmark_id, self.owner.id)
        except StoreError as e:
            logger.error("delete of bookmark %s failed: %s", bookmark_id, e)
            if present and bookmark_id in self:
                self._status[bookmark_id] = EntryStatus.DELETE_FAILED
            return False

        self._items = [b for b in self._items if b.id != bookmark_id]
        self._status.pop(bookmark_id, None)
        return True
