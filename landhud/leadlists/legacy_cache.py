import copy
import threading

from django.conf import settings


class LegacyListCache:
    """
    Process-local list of lead lists registered through the old direct
    registration webhook. Newest first, capped, gone on restart.

    Entries use the same camelCase shape the API returns.
    """

    def __init__(self, max_size=None):
        self._max_size = max_size
        self._items = []
        self._lock = threading.Lock()

    @property
    def max_size(self) -> int:
        if self._max_size is not None:
            return self._max_size
        return int(getattr(settings, "LEAD_LIST_LEGACY_CACHE_SIZE", 100))

    def add(self, entry: dict) -> dict:
        item = copy.deepcopy(entry)
        with self._lock:
            self._items = [x for x in self._items if x.get("id") != item.get("id")]
            self._items.insert(0, item)
            del self._items[self.max_size:]
        return copy.deepcopy(item)

    def get(self, list_id):
        with self._lock:
            for item in self._items:
                if item.get("id") == str(list_id):
                    return copy.deepcopy(item)
        return None

    def update(self, list_id, changes: dict):
        with self._lock:
            for item in self._items:
                if item.get("id") == str(list_id):
                    item.update(copy.deepcopy(changes))
                    return copy.deepcopy(item)
        return None

    def remove(self, list_id) -> bool:
        with self._lock:
            before = len(self._items)
            self._items = [x for x in self._items if x.get("id") != str(list_id)]
            return len(self._items) != before

    def snapshot(self) -> list:
        with self._lock:
            return copy.deepcopy(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items = []


legacy_cache = LegacyListCache()
