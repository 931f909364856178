from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, Generic, List, Optional, TypeVar

K = TypeVar("K")
V = TypeVar("V")


@dataclass(frozen=True)
class SessionInfo:
    room_code: str
    player_name: str


class InMemoryRepository(Generic[K, V]):
    """Keyed store shared across rooms; safe to use from several threads."""

    def __init__(self) -> None:
        self._items: Dict[K, V] = {}
        self._lock = threading.Lock()

    def get(self, key: K) -> Optional[V]:
        with self._lock:
            return self._items.get(key)

    def set(self, key: K, value: V) -> None:
        with self._lock:
            self._items[key] = value

    def delete(self, key: K) -> Optional[V]:
        with self._lock:
            return self._items.pop(key, None)

    def values(self) -> List[V]:
        with self._lock:
            return list(self._items.values())

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
