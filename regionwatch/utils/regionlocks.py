"""
per-region locks held for the duration of a recompute chain.
locks are taken root to leaf and released leaf to root so that two chains over the
same lineage never wait on each other in opposite orders
"""

import math
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional

from django.conf import settings
from redis.exceptions import LockNotOwnedError
from redis.lock import Lock

from regionwatch.core.exceptions import RegionLockError
from regionwatch.utils.constants import REGION_LOCK_PREFIX
from regionwatch.utils.custom_logger import CustomLogger
from regionwatch.utils.redis_client import RedisClient

logger = CustomLogger("regionwatch")


def region_lock_key(region_id: str) -> str:
    """the redis key of a region's lock"""
    return f"{REGION_LOCK_PREFIX}-{region_id}"


class RegionLockManager:
    """
    Takes redis locks on regions.
    When REGION_LOCKS_ENABLED is off, hold() takes no locks
    """

    def __init__(self, enabled: bool = None, timeout: int = None, blocking_timeout: int = None):
        self.enabled = settings.REGION_LOCKS_ENABLED if enabled is None else enabled
        self.timeout = settings.REGION_LOCK_TIMEOUT_SECONDS if timeout is None else timeout
        self.blocking_timeout = (
            settings.REGION_LOCK_BLOCKING_TIMEOUT_SECONDS
            if blocking_timeout is None
            else blocking_timeout
        )

    @contextmanager
    def hold(
        self, region_ids: Iterable[str], timeout: Optional[float] = None
    ) -> Iterator[List[str]]:
        """
        lock each region in the order given (callers pass root-to-leaf order) and
        release them in the opposite order on the way out.
        a region id given twice is locked once. the locks expire after `timeout`
        seconds when that is longer than the configured timeout.
        a lock which expired before it was released is logged, not raised

        Raises:
            RegionLockError: if a lock is not acquired within the blocking timeout;
                locks taken so far are released
        """
        ordered_ids = list(dict.fromkeys(region_ids))
        if not self.enabled:
            yield ordered_ids
            return

        lock_timeout = self.timeout
        if timeout is not None:
            lock_timeout = max(lock_timeout, math.ceil(timeout))
        redis = RedisClient.get_instance()
        held: List[Lock] = []
        try:
            for region_id in ordered_ids:
                lock: Lock = redis.lock(
                    region_lock_key(region_id),
                    timeout=lock_timeout,
                    blocking_timeout=self.blocking_timeout,
                )
                if not lock.acquire():
                    logger.warning(f"timed out waiting for the lock on region {region_id}")
                    raise RegionLockError(region_id)
                held.append(lock)
            yield ordered_ids
        finally:
            for lock in reversed(held):
                try:
                    lock.release()
                except LockNotOwnedError:
                    logger.warning(f"lock {lock.name} expired before it was released")
