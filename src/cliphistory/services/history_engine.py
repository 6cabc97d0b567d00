"""In-memory clipboard history with dedup, eviction and day filtering.

The engine owns the ordered history (most recent first), the optional
calendar-day filter and the projection of the history through that
filter. Every mutation persists the full list through the injected
``HistoryStore`` and then recomputes the projection.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Callable, List, Optional, Union

from cliphistory.models import ClipboardItem, TextItem
from cliphistory.storage import HistoryStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITEMS = 20

FilterCallback = Callable[[List[ClipboardItem]], None]


class Direction(Enum):
    FORWARD = 1
    BACKWARD = -1


@dataclass(frozen=True)
class RemovalResult:
    """Outcome of ``HistoryEngine.remove``; truthy when something was removed."""
    removed: bool
    clear_clipboard: bool = False

    def __bool__(self) -> bool:
        return self.removed


class HistoryEngine:

    def __init__(
        self,
        store: HistoryStore,
        max_items: int = DEFAULT_MAX_ITEMS,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if max_items < 1:
            raise ValueError(f"max_items must be >= 1, got {max_items}")
        self.store = store
        self.max_items = max_items
        self._clock = clock
        self._lock = threading.RLock()
        self._subscribers: List[FilterCallback] = []
        self._items: List[ClipboardItem] = store.load()[:max_items]
        self._filter_date: Optional[date] = None
        self._filtered: List[ClipboardItem] = list(self._items)
        self._active_item_id: Optional[str] = None

    @property
    def lock(self) -> threading.RLock:
        """Serializes every read and mutation of the history."""
        return self._lock

    @property
    def items(self) -> List[ClipboardItem]:
        with self._lock:
            return list(self._items)

    @property
    def filtered_items(self) -> List[ClipboardItem]:
        with self._lock:
            return list(self._filtered)

    @property
    def filter_date(self) -> Optional[date]:
        return self._filter_date

    @property
    def active_item_id(self) -> Optional[str]:
        return self._active_item_id

    def today(self) -> date:
        return self._clock().date()

    def get(self, item_id: str) -> Optional[ClipboardItem]:
        with self._lock:
            for item in self._items:
                if item.item_id == item_id:
                    return item
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def ingest(self, candidate: ClipboardItem) -> bool:
        """Add ``candidate`` unless it is blank text or equivalent to a stored item."""
        if isinstance(candidate, TextItem) and candidate.is_blank:
            logger.debug("Ignoring blank text from clipboard")
            return False

        with self._lock:
            for existing in self._items:
                if existing.item_id == candidate.item_id or existing.is_equivalent(candidate):
                    self._active_item_id = existing.item_id
                    logger.debug("Clipboard content already in history: %s", existing.preview)
                    return False

            self._items.insert(0, candidate)
            evicted = self._items[self.max_items:]
            del self._items[self.max_items:]
            self._active_item_id = candidate.item_id

            logger.info("New clipboard item added: %s", candidate.make_preview(20))
            for item in evicted:
                logger.debug("Evicted oldest item %s", item.item_id)

            self.store.save(self._items)
            self._refresh()
        return True

    def select(self, index: int) -> ClipboardItem:
        """Return the filtered item at ``index`` for write-back; order is untouched."""
        with self._lock:
            if index < 0:
                raise IndexError(f"history index out of range: {index}")
            item = self._filtered[index]
            self._active_item_id = item.item_id
            return item

    def remove(self, item_id: str) -> RemovalResult:
        with self._lock:
            for position, item in enumerate(self._items):
                if item.item_id == item_id:
                    break
            else:
                return RemovalResult(removed=False)

            del self._items[position]
            was_active = self._active_item_id == item_id
            if was_active:
                self._active_item_id = None

            logger.info("Removed clipboard item %s", item_id)
            self.store.save(self._items)
            self._refresh()
        return RemovalResult(removed=True, clear_clipboard=was_active)

    def clear_all(self) -> None:
        with self._lock:
            self._items.clear()
            self._active_item_id = None
            self.store.clear_all()
            self._refresh()
        logger.info("Clipboard history cleared")

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------
    def set_filter(self, day: Union[date, datetime, None]) -> None:
        if isinstance(day, datetime):
            day = day.date()
        with self._lock:
            self._filter_date = day
            self._refresh()

    def navigate_day(self, direction: Direction) -> Optional[date]:
        """Step the day filter and return the new filter date (None = unfiltered).

        Going back from the unfiltered view lands on today; going forward
        from today (or later) drops the filter instead of entering the future.
        """
        with self._lock:
            current = self._filter_date
            today = self.today()

            if current is None:
                if direction is not Direction.BACKWARD:
                    return None
                target: Optional[date] = today
            elif direction is Direction.FORWARD:
                target = None if current >= today else current + timedelta(days=1)
            else:
                target = current - timedelta(days=1)

            self.set_filter(target)
            return target

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def subscribe(self, callback: FilterCallback) -> Callable[[], None]:
        """Call ``callback`` with the filtered view after every change."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _refresh(self) -> None:
        if self._filter_date is None:
            self._filtered = list(self._items)
        else:
            self._filtered = [
                item for item in self._items
                if item.created_at.date() == self._filter_date
            ]

        for callback in list(self._subscribers):
            try:
                callback(list(self._filtered))
            except Exception:
                logger.exception("Error in history subscriber")
