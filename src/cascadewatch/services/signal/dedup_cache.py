"""In-memory set of seen signal hashes.

The only state shared between concurrent dispatch units. Entries live for
the whole process and are never evicted.
"""

import asyncio

import structlog

logger = structlog.get_logger(__name__)


class DedupCache:
    """
    Process-lifetime set of signal hashes with atomic insert-if-absent.

    Only the check-and-insert operation mutates the set; callers never see
    or iterate the underlying storage.
    """

    def __init__(self) -> None:
        self._seen: set[str] = set()
        self._lock = asyncio.Lock()

    async def insert_if_absent(self, signal_hash: str) -> bool:
        """
        Record a signal hash if it was not seen before.

        Args:
            signal_hash: 0x-prefixed keccak-256 signal hash

        Returns:
            True if the hash was new and is now recorded, False if already present
        """
        key = signal_hash.lower()
        async with self._lock:
            if key in self._seen:
                return False
            self._seen.add(key)

        logger.debug("dedup_hash_recorded", signal_hash=key[:10] + "...", size=len(self._seen))
        return True

    def __contains__(self, signal_hash: object) -> bool:
        return isinstance(signal_hash, str) and signal_hash.lower() in self._seen

    def __len__(self) -> int:
        return len(self._seen)
