# meeting_allocator/validation/validator.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from meeting_allocator.config import CapacityConfig
from meeting_allocator.domain.errors import (
    DataIntegrityError, Issue, IssueKind, ScheduleIntegrityViolation,
)
from meeting_allocator.domain.models import (
    Assignment, Meeting, PrefilledConstraint, PrincipalRoster, UnavailabilityIndex,
)
from meeting_allocator.domain.timegrid import Interval
from meeting_allocator.optimization.availability import is_blocked, shares_participant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _ForcedPlacement:
    constraint: PrefilledConstraint
    meeting: Meeting
    interval: Interval


def validate_catalog(
    meetings: Sequence[Meeting],
    rosters: Sequence[PrincipalRoster],
    prefilled: Sequence[PrefilledConstraint],
    capacity: CapacityConfig,
) -> List[Issue]:
    """
    Structural checks on the merged meeting catalog.
    Errors raise DataIntegrityError; questionable but usable input is returned as warnings.
    """
    warnings: List[Issue] = []

    seen = set()
    for m in meetings:
        if m.name in seen:
            raise DataIntegrityError(f"Duplicate meeting name: {m.name}", meeting_names=(m.name,))
        seen.add(m.name)
        if m.duration <= 0:
            raise DataIntegrityError(f"Meeting duration must be positive: {m.name} ({m.duration})",
                                     meeting_names=(m.name,))
        if not m.participants:
            warnings.append(Issue(IssueKind.EMPTY_MEETING, m.name, f"Meeting has no participants: {m.name}"))

    for roster in rosters:
        for name in roster.meetings:
            if name not in seen:
                warnings.append(Issue(
                    IssueKind.UNKNOWN_ROSTER_MEETING, roster.name,
                    f"Principal {roster.name} lists an unknown meeting: {name}",
                ))

    # forced rooms must respect the capacity cap too
    by_name = {m.name: m for m in meetings}
    forced_rooms = [(m.name, m.location) for m in meetings if m.location]
    forced_rooms += [(c.name, c.location) for c in prefilled if c.location]
    for name, location in forced_rooms:
        m = by_name.get(name)
        if m is None or location != capacity.limited_location:
            continue
        if len(m.participants) > capacity.capacity:
            raise DataIntegrityError(
                f"{name} is forced into {location} but has {len(m.participants)} participants "
                f"(cap {capacity.capacity})",
                meeting_names=(name,),
            )

    return warnings


def validate_prefilled(
    prefilled: Sequence[PrefilledConstraint],
    meetings: Sequence[Meeting],
    unavailability: UnavailabilityIndex,
) -> None:
    """
    Runs once before any strategy. Every forced constraint must name a known meeting and fit
    the raw unavailability index. A meeting is fixed at most once, and forced
    constraints sharing a participant must not overlap.
    """
    by_name: Dict[str, Meeting] = {m.name: m for m in meetings}

    placements: List[_ForcedPlacement] = []
    fixed: Dict[str, PrefilledConstraint] = {}
    for c in prefilled:
        meeting = by_name.get(c.name)
        if meeting is None:
            raise DataIntegrityError(f"Prefilled meeting not found: {c.name}", meeting_names=(c.name,))
        if c.slot is None:
            continue  # location-only constraint
        if c.name in fixed:
            raise DataIntegrityError(
                f"Prefilled meeting {c.name} is fixed more than once: "
                f"{fixed[c.name].slot.isoformat()} and {c.slot.isoformat()}",
                meeting_names=(c.name,),
            )
        fixed[c.name] = c
        placements.append(_ForcedPlacement(c, meeting, meeting.interval_at(c.slot)))

    for fp in placements:
        name = fp.meeting.name
        for participant in fp.meeting.participants:
            for record in unavailability.get(participant, []):
                if is_blocked(record, fp.interval, name):
                    logger.error("Conflict for %s in %s at %s: %s", participant, name, fp.constraint.slot, record)
                    raise DataIntegrityError(
                        f"Prefilled meeting {name} at {fp.constraint.slot.isoformat()} conflicts with "
                        f"the availability of {participant}",
                        meeting_names=(name,),
                        participants=(participant,),
                    )

        for other in placements:
            if other is fp:
                continue
            if not fp.interval.overlaps(other.interval):
                continue
            common = shares_participant(fp.meeting.participants, other.meeting.participants)
            if common:
                logger.error("%s conflicts with %s: %s", name, other.meeting.name, common)
                raise DataIntegrityError(
                    f"Prefilled meetings overlap: {name} and {other.meeting.name} share {', '.join(common)}",
                    meeting_names=(name, other.meeting.name),
                    participants=tuple(common),
                )


def validate_schedule(assignments: Iterable[Assignment]) -> None:
    """
    Exhaustive post-hoc double-booking check over a winning result.
    Forced placements skip the committed-assignment check, so only this pass
    guarantees mutual exclusion end to end.
    """
    by_participant: Dict[str, List[Assignment]] = {}
    for a in assignments:
        for p in a.meeting.participants:
            by_participant.setdefault(p, []).append(a)

    for participant, schedule in by_participant.items():
        for i in range(len(schedule)):
            for j in range(i + 1, len(schedule)):
                a, b = schedule[i], schedule[j]
                if a.interval.overlaps(b.interval):
                    logger.error("Conflict detected for %s: %s at %s / %s at %s",
                                 participant, a.name, a.slot, b.name, b.slot)
                    raise ScheduleIntegrityViolation(
                        f"Participant conflict: {participant} is scheduled for overlapping meetings "
                        f"{a.name} and {b.name}",
                        participant=participant,
                        meeting_names=(a.name, b.name),
                    )

    logger.info("Final validation passed: no participant-level conflicts found.")
