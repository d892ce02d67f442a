from conftest import at, busy, index

from meeting_allocator.optimization.availability import (
    check_participants_availability, clone_unavailability, count_valid_slots, reserve,
)


def test_free_participant_without_records():
    check = check_participants_availability({}, at(0), 1, ["T1"], "A")
    assert check.is_all_available
    assert check.unavailable_participants == ()


def test_overlapping_record_blocks():
    idx = index(busy("T1", 0, 1))
    check = check_participants_availability(idx, at(0.5), 1, ["T1", "T2"], "A")
    assert not check.is_all_available
    assert check.unavailable_participants == ("T1",)


def test_touching_intervals_do_not_overlap():
    idx = index(busy("T1", 0, 1))
    assert check_participants_availability(idx, at(1), 1, ["T1"], "A").is_all_available
    assert check_participants_availability(idx, at(-1), 1, ["T1"], "A").is_all_available


def test_ignored_meeting_is_exempt_only_for_that_meeting():
    idx = index(busy("T1", 0, 1, ignored="M"))
    assert check_participants_availability(idx, at(0), 1, ["T1"], "M").is_all_available
    assert not check_participants_availability(idx, at(0), 1, ["T1"], "N").is_all_available


def test_reports_every_blocked_participant():
    idx = index(busy("T1", 0, 2), busy("T3", 1, 3))
    check = check_participants_availability(idx, at(1), 1, ["T1", "T2", "T3"], "A")
    assert check.unavailable_participants == ("T1", "T3")


def test_reserve_blocks_without_exemption_and_clone_is_isolated():
    base = index(busy("T1", 5, 6))
    working = clone_unavailability(base)
    reserve(working, ["T1", "T2"], at(0), 1)

    assert not check_participants_availability(working, at(0), 1, ["T2"], "A").is_all_available
    assert check_participants_availability(base, at(0), 1, ["T1", "T2"], "A").is_all_available
    assert len(base["T1"]) == 1
    assert "T2" not in base


def test_count_valid_slots():
    idx = index(busy("T1", 1, 2))
    slots = [at(0), at(1), at(2)]
    assert count_valid_slots(idx, slots, 1, ["T1"], "A") == 2
