from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Callable, Optional, Sequence

from meeting_allocator.config import CapacityConfig
from meeting_allocator.domain.errors import AttemptFailure
from meeting_allocator.domain.models import EMPTY_RESULT, ScheduleContext, ScheduleResult
from meeting_allocator.optimization.availability import clone_unavailability
from meeting_allocator.optimization.scheduler import Scheduler
from meeting_allocator.optimization.strategies import Strategy

logger = logging.getLogger(__name__)

ResultCallback = Callable[[ScheduleResult], None]


class Runner:
    """Executes strategies against independent copies of the unavailability index."""

    def __init__(self, capacity: Optional[CapacityConfig] = None, rng: Optional[random.Random] = None):
        self.capacity = capacity or CapacityConfig()
        self.rng = rng or random.Random()

    def run_strategy(self, strategy: Strategy, context: ScheduleContext) -> ScheduleResult:
        working = clone_unavailability(context.unavailability)
        ordered = strategy.order(context.meetings, self.rng)
        scheduler = Scheduler(self.capacity)
        try:
            assigned = scheduler.run(
                meetings=ordered,
                prefilled=context.prefilled,
                unavailability=working,
                slots=context.slots,
                locations=context.locations,
            )
        except AttemptFailure as e:
            logger.debug("Strategy '%s' failed: %s", strategy.name, e)
            return ScheduleResult(assignments=(), count=-1, strategy_name=strategy.name, error=e)

        return ScheduleResult(assignments=tuple(assigned), count=len(assigned), strategy_name=strategy.name)

    def run_strategies(
        self,
        strategies: Sequence[Strategy],
        context: ScheduleContext,
        on_result: Optional[ResultCallback] = None,
    ) -> ScheduleResult:
        """Best (highest count) result; ties keep the earlier strategy."""
        best = EMPTY_RESULT
        for strategy in strategies:
            result = self.run_strategy(strategy, context)
            if on_result:
                on_result(result)
            if result.count > best.count:
                best = result
        return best


def run_random_search(
    runner: Runner,
    strategy: Strategy,
    context: ScheduleContext,
    best: ScheduleResult,
    iterations: int,
) -> ScheduleResult:
    """
    Sequential randomized attempts. Only strictly better results are adopted;
    stops as soon as every meeting is placed.
    """
    total = len(context.meetings)
    step = max(1, iterations // 10)
    for i in range(iterations):
        if best.count >= total:
            break
        if i % step == 0:
            logger.info("Random search %d/%d, current best: %d", i, iterations, best.count)
        result = runner.run_strategy(strategy, context)
        if result.count > best.count:
            best = replace(result, strategy_name=f"{strategy.name} (iter {i})")
    logger.info("Random search finished, final best: %d", best.count)
    return best
