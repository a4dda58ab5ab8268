"""
Expiring Key-Value Store Module

This module implements the per-connection key-value storage with
optional time-to-live per entry.

Expiration is lazy: an expired key stays in memory until an operation
touches it, at which point it is removed. There is no background sweeper.
"""

import time
from typing import Any, Dict, Optional

from ..config.settings import settings


class ExpiringStore:
    """
    In-memory key-value store with lazy TTL expiration.

    Internal Storage:
        _entries:     key -> value
        _expirations: key -> absolute deadline (time.monotonic() seconds)

        A key that has no entry in _expirations never expires.

    All operations are synchronous and never fail; the only observable
    outcomes are "value found" and "value absent".
    """

    def __init__(self):
        self._entries: Dict[bytes, bytes] = {}
        self._expirations: Dict[bytes, float] = {}

    def set(self, key: bytes, value: bytes) -> None:
        """
        Insert or overwrite a key-value pair with no expiration.

        Any TTL previously attached to the key is cleared.
        """
        self._entries[key] = value
        self._expirations.pop(key, None)

    def set_with_ttl(self, key: bytes, value: bytes, ttl_ms: int) -> None:
        """
        Insert or overwrite a key-value pair that expires after ttl_ms.

        Args:
            key: The key to store
            value: The value to associate with the key
            ttl_ms: Time-to-live in milliseconds. 0 means the entry is
                already expired on the next read. Values above
                settings.MAX_TTL_MS are clamped to it.
        """
        self._entries[key] = value
        ttl_ms = min(ttl_ms, settings.MAX_TTL_MS)
        self._expirations[key] = time.monotonic() + ttl_ms / 1000

    def get(self, key: bytes) -> Optional[bytes]:
        """
        Retrieve the value for a given key.

        Returns:
            The value if found and not expired, None otherwise.
            An expired key is removed from the store as a side effect.
        """
        deadline = self._expirations.get(key)
        if deadline is not None and time.monotonic() >= deadline:
            # Lazy expiration
            self._entries.pop(key, None)
            self._expirations.pop(key, None)
            return None

        return self._entries.get(key)

    def size(self) -> int:
        """
        Get the number of keys currently held.

        Note: This may include expired keys that haven't been touched yet.
        """
        return len(self._entries)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the store.

        Returns:
            Dictionary containing:
            - total_keys: Keys physically held
            - expiring_keys: Keys that carry a deadline
            - expired_keys: Keys past their deadline but not yet reclaimed
        """
        now = time.monotonic()
        expired = sum(1 for deadline in self._expirations.values() if deadline <= now)

        return {
            "total_keys": len(self._entries),
            "expiring_keys": len(self._expirations),
            "expired_keys": expired,
        }
