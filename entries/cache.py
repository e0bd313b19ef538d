# entries/cache.py
import logging
from datetime import date
from typing import Optional

from django.conf import settings
from django.core.cache import caches

logger = logging.getLogger(__name__)


class EntryCache:
    """(owner, date) 단위 read-through 캐시. 값은 Entry 스냅샷."""

    def __init__(self, backend=None, ttl: Optional[int] = None):
        self.backend = backend if backend is not None else caches[settings.ENTRY_CACHE_ALIAS]
        self.ttl = settings.ENTRY_CACHE_TTL if ttl is None else ttl

    @staticmethod
    def key(owner_id, entry_date: date) -> str:
        return f"entry:{owner_id}:{entry_date.isoformat()}"

    def get(self, owner_id, entry_date: date):
        key = self.key(owner_id, entry_date)
        entry = self.backend.get(key)
        logger.debug("cache %s key=%s", "hit" if entry is not None else "miss", key)
        return entry

    def set(self, owner_id, entry_date: date, entry) -> None:
        key = self.key(owner_id, entry_date)
        self.backend.set(key, entry, timeout=self.ttl)
        logger.debug("cache set key=%s ttl=%s", key, self.ttl)

    def delete(self, owner_id, entry_date: date) -> None:
        key = self.key(owner_id, entry_date)
        self.backend.delete(key)
        logger.debug("cache delete key=%s", key)
