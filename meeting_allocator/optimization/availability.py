from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Tuple

from meeting_allocator.domain.models import Unavailability, UnavailabilityIndex
from meeting_allocator.domain.timegrid import Interval, meeting_interval


@dataclass(frozen=True)
class AvailabilityCheck:
    is_all_available: bool
    unavailable_participants: Tuple[str, ...]


def is_blocked(record: Unavailability, interval: Interval, meeting_name: str) -> bool:
    """A record blocks a meeting when it overlaps and does not exempt that meeting."""
    if not record.interval.overlaps(interval):
        return False
    return record.ignored_meeting != meeting_name


def check_participants_availability(
    unavailability: UnavailabilityIndex,
    slot: datetime,
    duration: float,
    participants: Iterable[str],
    meeting_name: str,
) -> AvailabilityCheck:
    interval = meeting_interval(slot, duration)
    blocked: List[str] = []
    for p in participants:
        records = unavailability.get(p)
        if not records:
            continue
        if any(is_blocked(r, interval, meeting_name) for r in records):
            blocked.append(p)
    return AvailabilityCheck(is_all_available=not blocked, unavailable_participants=tuple(blocked))


def clone_unavailability(unavailability: UnavailabilityIndex) -> UnavailabilityIndex:
    # records are frozen, so copying the lists gives an independent working index
    return {p: list(records) for p, records in unavailability.items()}


def reserve(
    unavailability: UnavailabilityIndex,
    participants: Iterable[str],
    slot: datetime,
    duration: float,
) -> None:
    """Block the meeting interval for every participant (no exemption)."""
    interval = meeting_interval(slot, duration)
    for p in participants:
        unavailability.setdefault(p, []).append(
            Unavailability(participant=p, start=interval.start, end=interval.end)
        )


def count_valid_slots(
    unavailability: UnavailabilityIndex,
    slots: Iterable[datetime],
    duration: float,
    participants: Iterable[str],
    meeting_name: str,
) -> int:
    participants = tuple(participants)
    return sum(
        1 for s in slots
        if check_participants_availability(unavailability, s, duration, participants, meeting_name).is_all_available
    )


def shares_participant(a: Iterable[str], b: Iterable[str]) -> List[str]:
    b_set = set(b)
    return [p for p in a if p in b_set]


def participant_counts(meetings_participants: Iterable[Iterable[str]]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for participants in meetings_participants:
        for p in participants:
            counts[p] = counts.get(p, 0) + 1
    return counts
