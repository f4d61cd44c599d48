"""FIFO store that keeps itself within an item count and estimated memory budget."""

import logging
from collections import deque
from collections.abc import Collection
from typing import Any, Callable, Deque, Dict, Iterator, List, Optional, Tuple

from typing_extensions import override

from .memory_estimator import SizeEstimator

logger = logging.getLogger(__name__)


class BoundedStore(Collection):
    """Oldest-first eviction once either budget is exceeded.

    Each item is priced once, when added. The recorded size is what gets
    released on eviction, so mutating a stored item does not skew the total.
    """

    def __init__(
        self,
        max_items: Optional[int] = None,
        max_bytes: Optional[int] = None,
        estimator: Optional[SizeEstimator] = None,
        on_evict: Optional[Callable[[Any], None]] = None,
    ):
        self.max_items = max_items
        self.max_bytes = max_bytes
        self._estimator = estimator or SizeEstimator()
        self._on_evict = on_evict
        self._entries: Deque[Tuple[Any, int]] = deque()
        self._total_bytes = 0

    def add(self, item: Any) -> None:
        item_bytes = self._estimator.size_of(item)
        self._entries.append((item, item_bytes))
        self._total_bytes += item_bytes
        while self._entries and self._over_budget():
            self._evict_oldest()

    def _over_budget(self) -> bool:
        if self.max_items is not None and len(self._entries) > self.max_items:
            return True
        return self.max_bytes is not None and self._total_bytes > self.max_bytes

    def _evict_oldest(self) -> None:
        item, item_bytes = self._entries.popleft()
        self._total_bytes -= item_bytes
        logger.debug(f"Evicted {type(item).__name__} ({item_bytes} bytes)")
        if self._on_evict is None:
            return
        try:
            self._on_evict(item)
        except Exception as e:
            logger.warning(f"Eviction callback failed: {e}")

    def get_items(self) -> List[Any]:
        return [item for item, _ in self._entries]

    def get_memory_stats(self) -> Dict[str, Any]:
        usage = self._total_bytes / self.max_bytes * 100 if self.max_bytes else 0
        return {
            "item_count": len(self._entries),
            "total_bytes": self._total_bytes,
            "max_items": self.max_items,
            "max_bytes": self.max_bytes,
            "memory_usage_percent": usage,
        }

    @override
    def __len__(self) -> int:
        return len(self._entries)

    @override
    def __iter__(self) -> Iterator[Any]:
        return iter(self.get_items())

    @override
    def __contains__(self, item: object) -> bool:
        return any(stored == item for stored, _ in self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)
