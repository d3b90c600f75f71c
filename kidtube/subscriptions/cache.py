"""Single-user, time-boxed snapshot of the subscription list."""

import logging
import threading
from typing import Callable, Iterable, Optional

from ..auth.credential_store import CredentialStore
from ..errors import CacheCorrupt
from ..models import CacheCursor, CacheSnapshot, ChannelRecord, PageResult, now_millis
from ..storage import SUBSCRIPTION_CACHE_KEY, LocalStorage

logger = logging.getLogger(__name__)

CACHE_TTL_MILLIS = 24 * 60 * 60 * 1000


class SubscriptionCache:
    """Page-addressable cache of channel records owned by one user.

    The snapshot is loaded from storage once and kept in memory; every
    mutation is written back. Staleness only makes the snapshot invalid for
    normal reads, it is never deleted by age so it can still serve as a
    fallback when the API fails.
    """

    def __init__(
        self,
        storage: LocalStorage,
        credential_store: CredentialStore,
        clock: Callable[[], int] = now_millis,
        ttl_millis: int = CACHE_TTL_MILLIS,
        key: str = SUBSCRIPTION_CACHE_KEY,
    ):
        self.storage = storage
        self.credential_store = credential_store
        self.clock = clock
        self.ttl_millis = ttl_millis
        self.key = key
        self._lock = threading.RLock()
        self._snapshot = self._load()

    def _load(self) -> Optional[CacheSnapshot]:
        try:
            data = self.storage.get_item(self.key)
        except CacheCorrupt as e:
            logger.warning(f"Ignoring corrupt subscription cache: {e}")
            return None
        if data is None:
            return None
        try:
            return CacheSnapshot.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Ignoring malformed subscription cache: {e}")
            return None

    def _persist(self) -> None:
        try:
            if self._snapshot is None:
                self.storage.remove_item(self.key)
            else:
                self.storage.set_item(self.key, self._snapshot.to_dict())
        except OSError as e:
            logger.error(f"Failed to persist subscription cache: {e}")

    def _current_user_id(self) -> Optional[str]:
        credential = self.credential_store.load()
        return credential.user.id if credential else None

    def snapshot(self) -> Optional[CacheSnapshot]:
        return self._snapshot

    def exists(self) -> bool:
        """True if any snapshot is held, regardless of age or owner."""
        return self._snapshot is not None

    def is_valid(self) -> bool:
        """True if the snapshot is younger than the TTL and owned by the current user."""
        with self._lock:
            snapshot = self._snapshot
            if snapshot is None:
                return False
            if self.clock() - snapshot.timestamp >= self.ttl_millis:
                return False
            current_user_id = self._current_user_id()
            return (
                snapshot.user_id is None
                or current_user_id is None
                or snapshot.user_id == current_user_id
            )

    def belongs_to_different_user(self) -> bool:
        """True if the snapshot has an owner other than the signed-in user."""
        with self._lock:
            snapshot = self._snapshot
            if snapshot is None or snapshot.user_id is None:
                return False
            current_user_id = self._current_user_id()
            return current_user_id is not None and current_user_id != snapshot.user_id

    def page(self, index: int, page_size: int) -> Optional[PageResult]:
        """Slice one page out of the snapshot.

        Args:
            index: Zero-based page index.
            page_size: Records per page.

        Returns:
            PageResult with CacheCursor neighbours, or None if there is no snapshot.
        """
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        index = max(0, index)
        with self._lock:
            snapshot = self._snapshot
            if snapshot is None:
                return None
            data = snapshot.data

        total = len(data)
        start = index * page_size
        end = start + page_size
        last_index = max(0, (total - 1) // page_size)

        if start >= total and index > 0:
            # Past the end: nothing to show, but point back at the last real page
            return PageResult(
                channels=[],
                prev_page_token=CacheCursor(last_index),
                total_results=total,
            )

        return PageResult(
            channels=list(data[start:end]),
            prev_page_token=CacheCursor(index - 1) if index > 0 else None,
            next_page_token=CacheCursor(index + 1) if end < total else None,
            total_results=total,
        )

    def replace(self, records: Iterable[ChannelRecord]) -> None:
        """Overwrite the snapshot, stamping it with now and the current user."""
        with self._lock:
            self._snapshot = CacheSnapshot(
                timestamp=self.clock(),
                data=tuple(records),
                user_id=self._current_user_id(),
            )
            self._persist()
        logger.debug(f"Cached {len(self._snapshot.data)} subscriptions")

    def remove_by_id(self, channel_id: str) -> None:
        """Drop one channel from the snapshot and write it back.

        The snapshot keeps its owner; only the timestamp is renewed.
        """
        with self._lock:
            snapshot = self._snapshot
            if snapshot is None:
                return
            self._snapshot = CacheSnapshot(
                timestamp=self.clock(),
                data=tuple(r for r in snapshot.data if r.id != channel_id),
                user_id=snapshot.user_id,
            )
            self._persist()

    def clear(self) -> None:
        """Delete the snapshot entirely."""
        with self._lock:
            self._snapshot = None
            self._persist()
        logger.info("Subscription cache cleared")
