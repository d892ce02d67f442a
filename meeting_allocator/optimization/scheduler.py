"""
Three-phase greedy placer.

  1. forced (prefilled) placements, reserved in the working index
  2. remaining meetings in strategy order, first feasible slot wins
  3. rooms, first free location in catalog order
"""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from meeting_allocator.config import CapacityConfig
from meeting_allocator.domain.errors import AttemptFailure
from meeting_allocator.domain.models import (
    Assignment, Meeting, PrefilledConstraint, UnavailabilityIndex,
)
from meeting_allocator.optimization.availability import (
    check_participants_availability, reserve, shares_participant,
)

logger = logging.getLogger(__name__)


class Scheduler:
    def __init__(self, capacity: Optional[CapacityConfig] = None):
        self.capacity = capacity or CapacityConfig()
        self.assigned: List[Assignment] = []

    def run(
        self,
        meetings: Sequence[Meeting],
        prefilled: Sequence[PrefilledConstraint],
        unavailability: UnavailabilityIndex,
        slots: Sequence[datetime],
        locations: Sequence[str],
    ) -> List[Assignment]:
        """
        `unavailability` is the caller's working copy and is extended with reservations.
        Raises AttemptFailure when a forced placement is blocked.
        """
        self.assigned = []
        self.assign_prefilled(prefilled, meetings, unavailability)
        self.assign_remaining(meetings, slots, unavailability)
        self.assign_locations(prefilled, locations)
        return sorted(self.assigned, key=lambda a: a.slot)

    def assign_prefilled(
        self,
        prefilled: Sequence[PrefilledConstraint],
        meetings: Sequence[Meeting],
        unavailability: UnavailabilityIndex,
    ) -> None:
        by_name = {m.name: m for m in meetings}
        for c in prefilled:
            if c.slot is None:
                continue
            meeting = by_name.get(c.name)
            if meeting is None:
                raise AttemptFailure(f"Prefilled meeting not found: {c.name}", meeting_name=c.name)
            if any(a.name == c.name for a in self.assigned):
                raise AttemptFailure(f"Prefilled meeting {c.name} is fixed more than once", meeting_name=c.name)

            check = check_participants_availability(
                unavailability, c.slot, meeting.duration, meeting.participants, meeting.name
            )
            if not check.is_all_available:
                raise AttemptFailure(
                    f"Prefilled meeting {c.name} is not available at {c.slot.isoformat()}",
                    meeting_name=c.name,
                    participants=check.unavailable_participants,
                )

            # No check against committed assignments here: the refiner may force a
            # placement that only the final validator is allowed to reject.
            self.assigned.append(Assignment(meeting=meeting, slot=c.slot, location=meeting.location))
            reserve(unavailability, meeting.participants, c.slot, meeting.duration)

    def assign_remaining(
        self,
        meetings: Sequence[Meeting],
        slots: Sequence[datetime],
        unavailability: UnavailabilityIndex,
    ) -> None:
        placed = {a.name for a in self.assigned}
        for meeting in meetings:
            if meeting.name in placed:
                continue
            for slot in slots:
                check = check_participants_availability(
                    unavailability, slot, meeting.duration, meeting.participants, meeting.name
                )
                if not check.is_all_available:
                    continue
                if self.conflicts_with_assigned(meeting, slot):
                    continue
                self.assigned.append(Assignment(meeting=meeting, slot=slot, location=meeting.location))
                reserve(unavailability, meeting.participants, slot, meeting.duration)
                placed.add(meeting.name)
                break

    def conflicts_with_assigned(self, meeting: Meeting, slot: datetime) -> bool:
        interval = meeting.interval_at(slot)
        return any(
            a.interval.overlaps(interval) and shares_participant(meeting.participants, a.meeting.participants)
            for a in self.assigned
        )

    def assign_locations(self, prefilled: Sequence[PrefilledConstraint], locations: Sequence[str]) -> None:
        forced: Dict[str, str] = {c.name: c.location for c in prefilled if c.location}
        self.assigned = [
            replace(a, location=forced[a.name]) if a.name in forced else a
            for a in self.assigned
        ]

        for i, a in enumerate(self.assigned):
            if a.location:
                continue
            taken = {o.location for o in self.assigned if o.slot == a.slot and o.location}
            too_big = len(a.meeting.participants) > self.capacity.capacity
            for location in locations:
                if location in taken:
                    continue
                if too_big and location == self.capacity.limited_location:
                    continue
                self.assigned[i] = replace(a, location=location)
                break
