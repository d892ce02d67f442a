from conftest import at, busy, index, meeting

from meeting_allocator.domain.models import InputData, Meeting, PrincipalRoster, UnavailabilityEntry
from meeting_allocator.preprocessing.preprocess import (
    attach_scores, flatten_unavailability, group_by_participant, merge_principals, preprocess_all,
)


def test_merge_principals_and_participants_dedup():
    raw = [Meeting("A", "a", 1, members=("T1", "T2", "T1"), pics=("T2", "T3"))]
    rosters = [PrincipalRoster("P1", ("A", "B")), PrincipalRoster("P2", ("B",))]
    merged = merge_principals(rosters, raw)[0]
    assert merged.members == ("T1", "T2")
    assert merged.principals == ("P1",)
    assert merged.participants == ("T1", "T2", "P1", "T3")


def test_flatten_compact_entries():
    entry = UnavailabilityEntry(
        participants=("T1", "T2"),
        intervals=((at(0), at(1)), (at(3), at(4))),
        remark="trip",
        ignored_meeting="A",
    )
    records = flatten_unavailability([entry])
    assert len(records) == 4
    assert {r.participant for r in records} == {"T1", "T2"}
    assert all(r.ignored_meeting == "A" and r.remark == "trip" for r in records)
    grouped = group_by_participant(records)
    assert [r.start for r in grouped["T1"]] == [at(0), at(3)]


def test_empty_ignored_meeting_normalized_to_none():
    entry = UnavailabilityEntry(participants=("T1",), intervals=((at(0), at(1)),), ignored_meeting="")
    assert flatten_unavailability([entry])[0].ignored_meeting is None


def test_attach_scores():
    meetings = [meeting("A", "T1", "T2"), meeting("B", "T1"), meeting("C", "T3")]
    slots = [at(0), at(1)]
    scored = {m.name: m.scores for m in attach_scores(meetings, slots, index(busy("T1", 0, 1)), ["C", "A"])}

    assert scored["A"].busyness == 3  # T1 twice, T2 once
    assert scored["A"].weighted_score == 6
    assert scored["A"].valid_slot_count == 1
    assert scored["C"].valid_slot_count == 2
    assert (scored["C"].priority, scored["C"].rank) == (0, 1)
    assert (scored["A"].priority, scored["A"].rank) == (1, 2)
    assert (scored["B"].priority, scored["B"].rank) == (-1, 3)


def test_preprocess_all_scores_against_initial_index():
    data = InputData(
        slots=[at(0), at(1)],
        locations=["G01"],
        orders=[],
        meetings=[Meeting("A", "a", 1, members=("T1",))],
        principal_rosters=[PrincipalRoster("P", ("A",))],
        prefilled=[],
        unavailability_entries=[UnavailabilityEntry(("P",), ((at(1), at(2)),))],
    )
    pre = preprocess_all(data)
    m = pre.meetings[0]
    assert m.participants == ("T1", "P")
    assert m.scores.valid_slot_count == 1
    assert list(pre.unavailability) == ["P"]


def test_ranks_skip_order_names_missing_from_catalog():
    meetings = [meeting("A", "T1"), meeting("B", "T2"), meeting("C", "T3")]
    scored = {m.name: m.scores for m in attach_scores(meetings, [at(0)], {}, ["Gone", "C", "Old", "A"])}
    assert (scored["C"].priority, scored["C"].rank) == (1, 1)
    assert (scored["A"].priority, scored["A"].rank) == (3, 2)
    assert (scored["B"].priority, scored["B"].rank) == (-1, 3)
