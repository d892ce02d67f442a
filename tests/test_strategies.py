import random

from conftest import at, busy, index, make_context, meeting

from meeting_allocator.optimization.strategies import (
    SortKey, Strategy, create_random_strategy, create_strategies,
)


def _names(items):
    return [m.name for m in items]


def test_catalog_has_eight_named_strategies():
    names = [s.name for s in create_strategies()]
    assert len(names) == 8
    assert len(set(names)) == 8
    assert names[0] == "Most Constrained First (Fewest Slots)"


def test_size_then_busyness_descending():
    ctx = make_context(
        [meeting("small", "T1"), meeting("big", "T1", "T2", "T3"), meeting("mid", "T2", "T4")],
        [at(0)],
    )
    s = Strategy("size", ((SortKey.SIZE, True), (SortKey.BUSYNESS, True)))
    assert _names(s.order(ctx.meetings)) == ["big", "mid", "small"]


def test_most_constrained_first_sorts_ascending_slot_count():
    slots = [at(0), at(1), at(2)]
    idx = index(busy("T1", 0, 2))
    ctx = make_context([meeting("free", "T2"), meeting("tight", "T1")], slots, idx)
    first = create_strategies()[0]
    assert _names(first.order(ctx.meetings)) == ["tight", "free"]


def test_priority_key_descends_by_order_index():
    ctx = make_context([meeting("A", "T1"), meeting("B", "T2"), meeting("C", "T3")], [at(0)], orders=["A", "B"])
    s = Strategy("order", ((SortKey.PRIORITY, True),))
    # unlisted meetings have priority -1 and come last
    assert _names(s.order(ctx.meetings)) == ["B", "A", "C"]


def test_ties_keep_catalog_order():
    ctx = make_context([meeting("A", "T1"), meeting("B", "T2"), meeting("C", "T3")], [at(0)])
    s = Strategy("size", ((SortKey.SIZE, True),))
    assert _names(s.order(ctx.meetings)) == ["A", "B", "C"]


def test_random_strategy_still_sorts_by_size():
    ctx = make_context(
        [meeting("A", "T1"), meeting("B", "T2"), meeting("big", "T3", "T4", "T5")], [at(0)]
    )
    s = create_random_strategy()
    assert s.shuffle
    ordered = s.order(ctx.meetings, random.Random(3))
    assert ordered[0].name == "big"
    assert sorted(_names(ordered)) == ["A", "B", "big"]
