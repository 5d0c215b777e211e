from __future__ import annotations

import threading
from typing import Dict, List, Optional, Sequence

from ...domain.interfaces import ItemStore
from ...domain.models import Item


class InMemoryItemStore(ItemStore):
    """Dict-backed item store.

    Writers hold a lock; readers get a snapshot list in insertion order, so concurrent
    queries never observe a half-applied upsert. Replacing an item keeps its position.
    """

    def __init__(self, items: Sequence[Item] = ()) -> None:
        self._items: Dict[str, Item] = {}
        self._lock = threading.Lock()
        if items:
            self.upsert_items(items)

    def get_all(self) -> List[Item]:
        with self._lock:
            return list(self._items.values())

    def get(self, item_id: str) -> Optional[Item]:
        with self._lock:
            return self._items.get(item_id)

    def upsert_items(self, items: Sequence[Item]) -> int:
        with self._lock:
            for it in items:
                self._items[it.id] = it
        return len(items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
