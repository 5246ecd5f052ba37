# strike_annote/segment_store.py
from __future__ import annotations

import itertools
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Union

from .domain import ALL_CATEGORIES, ActionCatalog, ActionCategory, Segment


class SortKey(str, Enum):
    BY_TIME = "time"
    BY_ACTION = "action"


CategoryFilter = Union[ActionCategory, str]


class SegmentIdAllocator:
    """Monotonic id source; never hands out the same id twice."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(max(1, int(start)))

    def next_id(self) -> int:
        return next(self._counter)


class SegmentStore:
    """
    Committed segments for the active video, in insertion order.

    Owns the id allocator so ids stay unique for the store's lifetime, including
    after segments are removed.
    """

    def __init__(self, catalog: ActionCatalog, segments: Optional[Iterable[Segment]] = None):
        self._catalog = catalog
        self._segments: List[Segment] = list(segments or [])
        start = max((s.id for s in self._segments), default=0) + 1
        self._ids = SegmentIdAllocator(start)

    def __iter__(self) -> Iterator[Segment]:
        return iter(list(self._segments))

    def __len__(self) -> int:
        return len(self._segments)

    # ---------------- Mutation ----------------

    def allocate_id(self) -> int:
        return self._ids.next_id()

    def add(self, segment: Segment) -> None:
        self._segments.append(segment)

    def remove(self, segment_id: int) -> Optional[Segment]:
        """Remove by id. Returns the removed segment, or None if it was not present."""
        for i, s in enumerate(self._segments):
            if s.id == segment_id:
                return self._segments.pop(i)
        return None

    # ---------------- Queries ----------------

    def get(self, segment_id: int) -> Optional[Segment]:
        return next((s for s in self._segments if s.id == segment_id), None)

    def segments(self) -> List[Segment]:
        """Insertion-ordered copy."""
        return list(self._segments)

    def list(self, sort_key: SortKey = SortKey.BY_TIME, category: CategoryFilter = ALL_CATEGORIES) -> List[Segment]:
        """
        Fresh, filtered and sorted sequence.

        Segments whose action id is not in the catalog never match a category
        filter. Sorting is stable, so ties keep insertion order.
        """
        if category == ALL_CATEGORIES:
            picked = list(self._segments)
        else:
            wanted = ActionCategory(category)
            picked = []
            for s in self._segments:
                action = self._catalog.lookup(s.action_id)
                if action is not None and action.category == wanted:
                    picked.append(s)

        if SortKey(sort_key) == SortKey.BY_ACTION:
            picked.sort(key=lambda s: s.action_id)
        else:
            picked.sort(key=lambda s: s.start_time)
        return picked

    def count(self) -> int:
        return len(self._segments)

    def is_empty(self) -> bool:
        return not self._segments
