"""
Sliding-window rate limiting backed by MongoDB

Each key owns one document holding the timestamps of its recent hits. A hit
is recorded only while fewer than ``max_hits`` remain inside the window; the
check and the write happen in one conditional upsert, so concurrent requests
(and separate worker processes) cannot both slip past the limit.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from pymongo import ASCENDING
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

logger = logging.getLogger(__name__)

COLLECTION = "ratelimit"


class RateLimiter:
    def __init__(
        self,
        db: Database,
        max_hits: int,
        window_seconds: int,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if max_hits < 1:
            raise ValueError("max_hits must be at least 1")
        self.collection = db[COLLECTION]
        self.max_hits = max_hits
        self.window = timedelta(seconds=window_seconds)
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self._indexed = False

    def ensure_index(self) -> None:
        # Without the unique key index every upsert would insert and nothing
        # would ever be refused. Errors propagate so callers fail closed.
        if not self._indexed:
            self.collection.create_index([("key", ASCENDING)], unique=True)
            self._indexed = True

    def hit(self, key: str) -> bool:
        """Record a hit for ``key``; False when the key is over its limit."""
        self.ensure_index()
        now = self.clock()
        self.collection.update_one({"key": key}, {"$pull": {"hits": {"$lt": now - self.window}}})
        try:
            # Matches only while the (max_hits)th slot is still free. When it
            # is taken the upsert tries to insert a second document for the key
            # and the unique index refuses it.
            self.collection.update_one(
                {"key": key, f"hits.{self.max_hits - 1}": {"$exists": False}},
                {"$push": {"hits": now}, "$set": {"expires_at": now + self.window}},
                upsert=True,
            )
        except DuplicateKeyError:
            logger.info("rate limit exceeded for %s", key)
            return False
        return True
