"""Per-item lock manager serializing read-modify-write of review state"""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import datetime

logger = logging.getLogger(__name__)

LockKey = tuple[str, str]


@dataclass
class LockInfo:
    """Information about a held item lock"""

    locked_at: datetime
    operation: str
    lock_id: str


@dataclass
class _LockSlot:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0
    info: LockInfo | None = None


class ItemLockManager:
    """
    Hands out one asyncio.Lock per (learner_id, item_id).

    Callers for the same item queue behind each other; different items never
    block each other. Slots are dropped once nobody holds or waits for them.
    """

    def __init__(self):
        self._slots: dict[LockKey, _LockSlot] = {}

    @contextlib.asynccontextmanager
    async def hold(
        self, learner_id: str, item_id: str, operation: str = "review"
    ) -> AsyncIterator[LockInfo]:
        """
        Hold the lock for an item for the duration of the block

        Args:
            learner_id: Owner of the item
            item_id: Dictionary entry ID
            operation: Name of operation being locked, for diagnostics
        """
        key = (learner_id, item_id)
        slot = self._slots.get(key)
        if slot is None:
            slot = self._slots[key] = _LockSlot()
        slot.users += 1

        try:
            if slot.lock.locked():
                logger.debug(
                    f"Waiting for lock on {key}, held for: {slot.info.operation if slot.info else '?'}"
                )
            async with slot.lock:
                now = datetime.now()
                slot.info = LockInfo(
                    locked_at=now,
                    operation=operation,
                    lock_id=f"{learner_id}_{item_id}_{operation}_{now.timestamp()}",
                )
                logger.debug(f"Acquired lock for {key}, operation: {operation}")
                try:
                    yield slot.info
                finally:
                    slot.info = None
                    logger.debug(f"Released lock for {key}, operation: {operation}")
        finally:
            slot.users -= 1
            if slot.users == 0 and self._slots.get(key) is slot:
                del self._slots[key]

    def is_locked(self, learner_id: str, item_id: str) -> bool:
        """Check if an item is currently locked"""
        slot = self._slots.get((learner_id, item_id))
        return slot is not None and slot.lock.locked()

    def get_lock_info(self, learner_id: str, item_id: str) -> LockInfo | None:
        """Get lock information for an item, None if unlocked"""
        slot = self._slots.get((learner_id, item_id))
        return slot.info if slot else None

    def get_active_locks_count(self) -> int:
        """Number of items currently held or waited on"""
        return len(self._slots)
