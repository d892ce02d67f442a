# meeting_allocator/preprocessing/preprocess.py
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, List, Sequence

from meeting_allocator.domain.models import (
    DerivedScores, InputData, Meeting, PrincipalRoster, Unavailability,
    UnavailabilityEntry, UnavailabilityIndex,
)
from meeting_allocator.optimization.availability import count_valid_slots, participant_counts


@dataclass(frozen=True)
class Preprocessed:
    meetings: List[Meeting]               # principals merged, scores attached
    unavailability: UnavailabilityIndex   # participant -> records


def _dedupe(items: Sequence[str]) -> tuple:
    return tuple(dict.fromkeys(items))


def merge_principals(rosters: Sequence[PrincipalRoster], meetings: Sequence[Meeting]) -> List[Meeting]:
    """Principals of a meeting are the owners of every roster that lists it."""
    out = []
    for m in meetings:
        principals = [r.name for r in rosters if m.name in r.meetings]
        out.append(replace(
            m,
            members=_dedupe(m.members),
            principals=_dedupe(principals),
            pics=_dedupe(m.pics),
        ))
    return out


def flatten_unavailability(entries: Sequence[UnavailabilityEntry]) -> List[Unavailability]:
    """Expand compact entries into one record per (participant, interval)."""
    out: List[Unavailability] = []
    for e in entries:
        for p in e.participants:
            for start, end in e.intervals:
                out.append(Unavailability(
                    participant=p,
                    start=start,
                    end=end,
                    ignored_meeting=e.ignored_meeting or None,
                    remark=e.remark,
                ))
    return out


def group_by_participant(records: Sequence[Unavailability]) -> UnavailabilityIndex:
    index: UnavailabilityIndex = {}
    for r in records:
        index.setdefault(r.participant, []).append(r)
    return index


def attach_scores(
    meetings: Sequence[Meeting],
    slots: Sequence[datetime],
    unavailability: UnavailabilityIndex,
    orders: Sequence[str],
) -> List[Meeting]:
    """
    Busyness = sum over participants of their appearance count across the catalog.
    Valid slot count is taken against the initial (pre-scheduling) index.
    """
    counts = participant_counts(m.participants for m in meetings)
    priority_of: Dict[str, int] = {}
    for i, name in enumerate(orders):
        priority_of.setdefault(name, i)

    # ranks are dense over the catalog
    listed = sorted((m.name for m in meetings if m.name in priority_of), key=priority_of.__getitem__)
    rank_of = {name: i + 1 for i, name in enumerate(listed)}

    unlisted = 0
    out = []
    for m in meetings:
        participants = m.participants
        busyness = sum(counts[p] for p in participants)
        priority = priority_of.get(m.name, -1)
        if priority >= 0:
            rank = rank_of[m.name]
        else:
            unlisted += 1
            rank = len(listed) + unlisted
        scores = DerivedScores(
            busyness=busyness,
            valid_slot_count=count_valid_slots(unavailability, slots, m.duration, participants, m.name),
            weighted_score=len(participants) * busyness,
            priority=priority,
            rank=rank,
        )
        out.append(replace(m, scores=scores))
    return out


def preprocess_all(data: InputData) -> Preprocessed:
    merged = merge_principals(data.principal_rosters, data.meetings)
    index = group_by_participant(flatten_unavailability(data.unavailability_entries))
    scored = attach_scores(merged, data.slots, index, data.orders)
    return Preprocessed(meetings=scored, unavailability=index)
