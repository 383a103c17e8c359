"""Service for detecting scheduling conflicts between talks.

Overlap rule: two half-open intervals ``[a.start, a.end)`` and
``[b.start, b.end)`` conflict iff ``a.start < b.end AND b.start < a.end``.
Exact boundary touches (``a.end == b.start``) are NOT considered conflicts,
so back-to-back talks in consecutive slots are never flagged.
"""

from __future__ import annotations

from collections import defaultdict
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

from pydantic import BaseModel, ConfigDict

from confschedule.domain.errors import DuplicateItemError, InvalidIntervalError


class ScheduleItem(BaseModel):
    """Minimal record the detector operates on: an id and a half-open interval."""

    model_config = ConfigDict(frozen=True)

    id: str
    start_time: int
    end_time: int


class ConflictPair(BaseModel):
    """An unordered conflicting pair, stored in input order."""

    model_config = ConfigDict(frozen=True)

    first: str
    second: str

    def ids(self) -> frozenset[str]:
        return frozenset((self.first, self.second))


class ConflictRelation:
    """Symmetric, irreflexive conflict relation for one input collection.

    Exposes both the pair list and the per-id adjacency view.
    """

    def __init__(
        self,
        pairs: Sequence[ConflictPair],
        adjacency: Mapping[str, Iterable[str]],
        comparisons: int = 0,
    ) -> None:
        self.pairs: tuple[ConflictPair, ...] = tuple(pairs)
        self.adjacency: Mapping[str, frozenset[str]] = MappingProxyType(
            {item_id: frozenset(ids) for item_id, ids in adjacency.items()}
        )
        self.comparisons = comparisons

    @property
    def has_conflicts(self) -> bool:
        return bool(self.pairs)

    def conflicts_for(self, item_id: str) -> frozenset[str]:
        return self.adjacency.get(item_id, frozenset())

    def as_set(self) -> frozenset[frozenset[str]]:
        return frozenset(pair.ids() for pair in self.pairs)

    def __len__(self) -> int:
        return len(self.pairs)

    def __bool__(self) -> bool:
        return self.has_conflicts

    def __repr__(self) -> str:
        pairs = ", ".join(f"({p.first}, {p.second})" for p in self.pairs)
        return f"ConflictRelation([{pairs}])"


def overlaps(a: ScheduleItem, b: ScheduleItem) -> bool:
    return a.start_time < b.end_time and b.start_time < a.end_time


def _validated(items: Iterable[ScheduleItem]) -> list[ScheduleItem]:
    """Materialise *items*, rejecting malformed intervals and duplicate ids."""
    seen: set[str] = set()
    result: list[ScheduleItem] = []
    for item in items:
        if item.end_time <= item.start_time:
            raise InvalidIntervalError(item.id)
        if item.id in seen:
            raise DuplicateItemError(item.id)
        seen.add(item.id)
        result.append(item)
    return result


def find_conflicts(items: Iterable[ScheduleItem]) -> ConflictRelation:
    """Return every pair of items whose intervals overlap.

    Compares each unordered pair exactly once (``n*(n-1)/2`` checks). Pairs
    come back in input order: ``(items[i], items[j])`` with ``i < j``.

    Raises ``InvalidIntervalError`` for an item with ``end_time <= start_time``
    and ``DuplicateItemError`` when an id appears twice.
    """
    ordered = _validated(items)
    pairs: list[ConflictPair] = []
    adjacency: dict[str, set[str]] = defaultdict(set)
    comparisons = 0

    for i, a in enumerate(ordered):
        for b in ordered[i + 1 :]:
            comparisons += 1
            if overlaps(a, b):
                pairs.append(ConflictPair(first=a.id, second=b.id))
                adjacency[a.id].add(b.id)
                adjacency[b.id].add(a.id)

    return ConflictRelation(pairs, adjacency, comparisons)


def find_conflicts_sweep(items: Iterable[ScheduleItem]) -> ConflictRelation:
    """Sweep-line variant of :func:`find_conflicts` for large inputs.

    Sorts by start time and keeps the set of still-running items; everything
    in that set when a new item starts overlaps it. The resulting relation is
    identical to the pairwise scan, pair order included.
    """
    ordered = _validated(items)
    by_start = sorted(range(len(ordered)), key=lambda i: (ordered[i].start_time, i))

    found: list[tuple[int, int]] = []
    active: list[int] = []
    comparisons = 0

    for idx in by_start:
        current = ordered[idx]
        # Anything that ended at or before this start can no longer overlap.
        active = [a for a in active if ordered[a].end_time > current.start_time]
        for other in active:
            comparisons += 1
            found.append((min(idx, other), max(idx, other)))
        active.append(idx)

    found.sort()
    pairs: list[ConflictPair] = []
    adjacency: dict[str, set[str]] = defaultdict(set)
    for i, j in found:
        a, b = ordered[i].id, ordered[j].id
        pairs.append(ConflictPair(first=a, second=b))
        adjacency[a].add(b)
        adjacency[b].add(a)

    return ConflictRelation(pairs, adjacency, comparisons)


def conflicts_for(relation: ConflictRelation, item_id: str) -> frozenset[str]:
    return relation.conflicts_for(item_id)


def has_any_conflict(items: Iterable[ScheduleItem]) -> bool:
    """True iff at least one pair of *items* overlaps."""
    return find_conflicts(items).has_conflicts


def find_conflicts_with(
    start_time: int,
    end_time: int,
    items: Iterable[ScheduleItem],
) -> list[ScheduleItem]:
    """Return the items that overlap the range ``[start_time, end_time)``.

    *items* are checked like the input to :func:`find_conflicts`.
    """
    if end_time <= start_time:
        raise ValueError("end_time must be after start_time")
    candidate = ScheduleItem(id="", start_time=start_time, end_time=end_time)
    return [item for item in _validated(items) if overlaps(candidate, item)]
