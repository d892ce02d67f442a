"""
Strategy catalog: named total orderings over the meeting list.

Placement is greedy and first-fit, so the processing order decides how many
meetings fit. Each strategy is a fixed key sequence with a direction per key;
the randomized variant shuffles before sorting.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from meeting_allocator.domain.models import Meeting


class SortKey(Enum):
    PRIORITY = "Order"
    SIZE = "Size"
    BUSYNESS = "Busyness"
    VALID_SLOTS = "Valid slots"
    WEIGHTED = "Weighted"


def _scores(m: Meeting):
    if m.scores is None:
        raise ValueError(f"Meeting {m.name} has no derived scores; run preprocessing first")
    return m.scores


KEY_GETTERS: dict = {
    SortKey.PRIORITY: lambda m: _scores(m).priority,
    SortKey.SIZE: lambda m: len(m.participants),
    SortKey.BUSYNESS: lambda m: _scores(m).busyness,
    SortKey.VALID_SLOTS: lambda m: _scores(m).valid_slot_count,
    SortKey.WEIGHTED: lambda m: _scores(m).weighted_score,
}


@dataclass(frozen=True)
class Strategy:
    name: str
    keys: Tuple[Tuple[SortKey, bool], ...]  # (key, descending)
    shuffle: bool = False

    def order(self, meetings: Sequence[Meeting], rng: Optional[random.Random] = None) -> List[Meeting]:
        items = list(meetings)
        if self.shuffle:
            (rng or random.Random()).shuffle(items)
        # stable multi-key sort: least significant key first
        for key, descending in reversed(self.keys):
            getter: Callable[[Meeting], int] = KEY_GETTERS[key]
            items.sort(key=getter, reverse=descending)
        return items


DESC = True
ASC = False


def _chain(*keys: SortKey) -> Tuple[Tuple[SortKey, bool], ...]:
    return tuple((k, DESC) for k in keys)


def create_strategies() -> List[Strategy]:
    S, B, O = SortKey.SIZE, SortKey.BUSYNESS, SortKey.PRIORITY
    return [
        # fewest feasible slots first, larger meetings break ties
        Strategy("Most Constrained First (Fewest Slots)", ((SortKey.VALID_SLOTS, ASC), (S, DESC))),
        Strategy("Weighted (Size * Busyness)", _chain(SortKey.WEIGHTED)),
        Strategy("Size -> Busyness -> Order", _chain(S, B, O)),
        Strategy("Size -> Order -> Busyness", _chain(S, O, B)),
        Strategy("Busyness -> Size -> Order", _chain(B, S, O)),
        Strategy("Busyness -> Order -> Size", _chain(B, O, S)),
        Strategy("Order -> Size -> Busyness", _chain(O, S, B)),
        Strategy("Order -> Busyness -> Size", _chain(O, B, S)),
    ]


def create_random_strategy() -> Strategy:
    return Strategy("Randomized Size Priority", _chain(SortKey.SIZE, SortKey.BUSYNESS), shuffle=True)
