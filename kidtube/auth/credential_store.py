"""Persistent slot holding the single OAuth credential."""

import logging
import threading
from typing import Callable, Optional

from ..errors import CacheCorrupt
from ..models import Credential, now_millis
from ..storage import AUTH_DATA_KEY, LocalStorage

logger = logging.getLogger(__name__)


class CredentialStore:
    """Saves, loads and validates the signed-in user's credential.

    Persistence is best-effort: write failures are logged and never raised,
    and unreadable data is treated as if no credential were stored.
    """

    def __init__(
        self,
        storage: LocalStorage,
        clock: Callable[[], int] = now_millis,
        key: str = AUTH_DATA_KEY,
    ):
        self.storage = storage
        self.clock = clock
        self.key = key
        self._lock = threading.Lock()

    def save(self, credential: Credential) -> None:
        """Persist ``credential``, replacing any previous one."""
        with self._lock:
            try:
                self.storage.set_item(self.key, credential.to_dict())
            except OSError as e:
                logger.error(f"Failed to save auth data: {e}")

    def load(self) -> Optional[Credential]:
        """Return the stored credential, or None if absent or corrupt."""
        with self._lock:
            try:
                data = self.storage.get_item(self.key)
            except CacheCorrupt as e:
                logger.warning(f"Ignoring corrupt auth data: {e}")
                return None
            if data is None:
                return None
            try:
                return Credential.from_dict(data)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Ignoring malformed auth data: {e}")
                return None

    def clear(self) -> None:
        """Remove the stored credential. Safe to call repeatedly."""
        with self._lock:
            try:
                self.storage.remove_item(self.key)
            except OSError as e:
                logger.error(f"Failed to clear auth data: {e}")

    def is_valid(self) -> bool:
        """True iff a credential is stored and has not yet expired."""
        credential = self.load()
        if credential is None:
            return False
        return self.clock() < credential.expires_at
