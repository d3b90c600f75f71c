"""Durable key/value storage for local state, one JSON file per key."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from .errors import CacheCorrupt

logger = logging.getLogger(__name__)

AUTH_DATA_KEY = "kidtube_auth_data"
SUBSCRIPTION_CACHE_KEY = "youtube_subscriptions_cache"


class LocalStorage:
    """Stores JSON documents under a state directory.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace`` so readers never observe a half-written file.
    """

    def __init__(self, state_dir: str | os.PathLike):
        """Initialize storage rooted at ``state_dir``.

        Args:
            state_dir: Directory holding the state files. Created on first write.
        """
        self.state_dir = Path(state_dir)

    def _path(self, key: str) -> Path:
        return self.state_dir / f"{key}.json"

    def get_item(self, key: str) -> Optional[Any]:
        """Load the document stored under ``key``.

        Returns:
            The decoded JSON value, or None if nothing is stored.

        Raises:
            CacheCorrupt: If the file exists but cannot be decoded.
        """
        path = self._path(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            raise CacheCorrupt(f"Unreadable state file {path}: {e}") from e

    def set_item(self, key: str, value: Any) -> None:
        """Atomically write ``value`` as JSON under ``key``."""
        self.state_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.state_dir, prefix=f".{key}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
                json.dump(value, tmp_file, indent=2)
            os.replace(tmp_path, self._path(key))
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def remove_item(self, key: str) -> None:
        """Delete the document stored under ``key``; missing keys are ignored."""
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass
