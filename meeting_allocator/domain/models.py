from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from meeting_allocator.domain.errors import AttemptFailure
from meeting_allocator.domain.timegrid import Interval, meeting_interval


@dataclass(frozen=True)
class DerivedScores:
    """Greedy-ordering heuristics, computed once from the initial unavailability state."""
    busyness: int
    valid_slot_count: int
    weighted_score: int
    priority: int  # index in the external priority list, -1 if absent
    rank: int      # 1-based; unlisted meetings follow listed ones in catalog order


@dataclass(frozen=True)
class Meeting:
    name: str
    label: str
    duration: float  # hours
    members: Tuple[str, ...] = ()
    principals: Tuple[str, ...] = ()
    pics: Tuple[str, ...] = ()  # persons in charge
    location: Optional[str] = None
    remark: str = ""
    scores: Optional[DerivedScores] = None

    @property
    def participants(self) -> Tuple[str, ...]:
        seen: Dict[str, None] = {}
        for p in self.members + self.principals + self.pics:
            seen.setdefault(p, None)
        return tuple(seen)

    def interval_at(self, slot: datetime) -> Interval:
        return meeting_interval(slot, self.duration)


@dataclass(frozen=True)
class Unavailability:
    participant: str
    start: datetime
    end: datetime
    ignored_meeting: Optional[str] = None  # this one meeting is exempt
    remark: str = ""

    @property
    def interval(self) -> Interval:
        return Interval(self.start, self.end)


UnavailabilityIndex = Dict[str, List[Unavailability]]


@dataclass(frozen=True)
class PrefilledConstraint:
    name: str
    slot: Optional[datetime] = None
    location: Optional[str] = None


@dataclass(frozen=True)
class Assignment:
    meeting: Meeting
    slot: datetime
    location: Optional[str] = None

    @property
    def name(self) -> str:
        return self.meeting.name

    @property
    def interval(self) -> Interval:
        return self.meeting.interval_at(self.slot)


@dataclass(frozen=True)
class ScheduleResult:
    assignments: Tuple[Assignment, ...]
    count: int  # -1 for a failed attempt
    strategy_name: str
    error: Optional[AttemptFailure] = None

    @property
    def failed(self) -> bool:
        return self.count < 0

    @property
    def assigned_names(self) -> List[str]:
        return [a.name for a in self.assignments]


EMPTY_RESULT = ScheduleResult(assignments=(), count=-1, strategy_name="")


@dataclass(frozen=True)
class PrincipalRoster:
    name: str
    meetings: Tuple[str, ...]


@dataclass(frozen=True)
class UnavailabilityEntry:
    """Compact source form: several participants x several intervals."""
    participants: Tuple[str, ...]
    intervals: Tuple[Tuple[datetime, datetime], ...]
    remark: str = ""
    ignored_meeting: Optional[str] = None


@dataclass
class InputData:
    slots: List[datetime]
    locations: List[str]
    orders: List[str]                      # priority names
    meetings: List[Meeting]                # raw, principals not merged yet
    principal_rosters: List[PrincipalRoster]
    prefilled: List[PrefilledConstraint]
    unavailability_entries: List[UnavailabilityEntry] = field(default_factory=list)


@dataclass(frozen=True)
class ScheduleContext:
    """Everything one strategy attempt reads. The index is cloned per attempt."""
    meetings: Tuple[Meeting, ...]
    prefilled: Tuple[PrefilledConstraint, ...]
    unavailability: UnavailabilityIndex
    slots: Tuple[datetime, ...]
    locations: Tuple[str, ...]

    def find_meeting(self, name: str) -> Optional[Meeting]:
        for m in self.meetings:
            if m.name == name:
                return m
        return None
