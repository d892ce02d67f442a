"""
Iterative repair: force one still-unassigned meeting into a feasible slot, re-run
every strategy, and keep the best move of the pass. Committed moves are never undone.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from meeting_allocator.domain.models import Meeting, PrefilledConstraint, ScheduleContext, ScheduleResult
from meeting_allocator.optimization.availability import check_participants_availability, shares_participant
from meeting_allocator.optimization.runner import Runner
from meeting_allocator.optimization.strategies import Strategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Move:
    result: ScheduleResult
    meeting_name: str
    slot: datetime
    strategy_name: str


class Refiner:
    def __init__(self, runner: Runner, context: ScheduleContext, max_unassigned: int = 10):
        self.runner = runner
        self.context = context
        self.max_unassigned = max_unassigned
        self.forced: List[PrefilledConstraint] = list(context.prefilled)

    def unassigned_names(self, result: ScheduleResult) -> List[str]:
        assigned = set(result.assigned_names)
        known = {m.name for m in self.context.meetings}
        missing = [m.name for m in self.context.meetings if m.name not in assigned]
        # names in the result but unknown to the catalog (symmetric difference)
        extra = [n for n in result.assigned_names if n not in known]
        return extra + missing

    def refine(self, initial: ScheduleResult, strategies: Sequence[Strategy]) -> ScheduleResult:
        best = initial
        total = len(self.context.meetings)

        while best.count < total:
            unassigned = self.unassigned_names(best)
            if not unassigned or len(unassigned) > self.max_unassigned:
                if unassigned:
                    logger.info("Skipping refinement: %d unassigned (limit %d)",
                                len(unassigned), self.max_unassigned)
                break

            logger.info("Starting refinement pass. Unassigned: %d", len(unassigned))
            move = self.best_move(unassigned, strategies, best.count)
            if move is None:
                logger.info("No improvement found in this pass.")
                break

            logger.info("Committing best move: %s @ %s (score %d) via %s",
                        move.meeting_name, move.slot.isoformat(), move.result.count, move.strategy_name)
            best = replace(
                move.result,
                strategy_name=f"Refined ({move.meeting_name} @ {move.slot.isoformat()}) via {move.strategy_name}",
            )
            self.forced.append(PrefilledConstraint(name=move.meeting_name, slot=move.slot))

        return best

    def best_move(self, unassigned: Sequence[str], strategies: Sequence[Strategy], baseline: int) -> Optional[Move]:
        total = len(self.context.meetings)
        move: Optional[Move] = None
        for name in unassigned:
            meeting = self.context.find_meeting(name)
            if meeting is None:
                continue
            for slot in self.find_valid_slots(meeting):
                trial = replace(
                    self.context,
                    prefilled=tuple(self.forced) + (PrefilledConstraint(name=name, slot=slot),),
                )
                for strategy in strategies:
                    result = self.runner.run_strategy(strategy, trial)
                    if result.count <= baseline:
                        continue
                    if move is None or result.count > move.result.count:
                        move = Move(result, name, slot, strategy.name)
                        if result.count == total:
                            return move
        return move

    def _resolved_forced(self) -> List[Tuple[Meeting, datetime]]:
        out = []
        for c in self.forced:
            if c.slot is None:
                continue
            m = self.context.find_meeting(c.name)
            if m is not None:
                out.append((m, c.slot))
        return out

    def find_valid_slots(self, meeting: Meeting) -> List[datetime]:
        """Slots free in the base index and clear of every accumulated forced placement."""
        forced = self._resolved_forced()
        valid = []
        for slot in self.context.slots:
            check = check_participants_availability(
                self.context.unavailability, slot, meeting.duration, meeting.participants, meeting.name
            )
            if not check.is_all_available:
                continue
            interval = meeting.interval_at(slot)
            clash = any(
                interval.overlaps(other.interval_at(other_slot))
                and shares_participant(meeting.participants, other.participants)
                for other, other_slot in forced
            )
            if not clash:
                valid.append(slot)
        return valid
