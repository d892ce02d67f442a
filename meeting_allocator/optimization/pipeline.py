from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional

from meeting_allocator.config import AppConfig
from meeting_allocator.domain.errors import Issue, IssueKind
from meeting_allocator.domain.models import InputData, Meeting, ScheduleContext, ScheduleResult
from meeting_allocator.optimization.refiner import Refiner
from meeting_allocator.optimization.runner import ResultCallback, Runner, run_random_search
from meeting_allocator.optimization.strategies import create_random_strategy, create_strategies
from meeting_allocator.preprocessing.preprocess import preprocess_all
from meeting_allocator.validation.validator import validate_catalog, validate_prefilled, validate_schedule

logger = logging.getLogger(__name__)


@dataclass
class AllocationOutcome:
    result: ScheduleResult
    meetings: List[Meeting]                              # scored catalog
    warnings: List[Issue] = field(default_factory=list)  # input quality
    issues: List[Issue] = field(default_factory=list)    # soft scheduling outcomes

    @property
    def total(self) -> int:
        return len(self.meetings)

    @property
    def unassigned(self) -> List[Meeting]:
        placed = set(self.result.assigned_names)
        return [m for m in self.meetings if m.name not in placed]


def summarize_issues(result: ScheduleResult, meetings: List[Meeting]) -> List[Issue]:
    placed = set(result.assigned_names)
    issues = [
        Issue(IssueKind.UNASSIGNED_MEETING, m.name, f"No feasible slot for {m.name}")
        for m in meetings if m.name not in placed
    ]
    issues += [
        Issue(IssueKind.UNASSIGNED_LOCATION, a.name, f"No free location for {a.name} at {a.slot.isoformat()}")
        for a in result.assignments if not a.location
    ]
    return issues


def solve_schedule(
    data: InputData,
    cfg: AppConfig,
    on_result: Optional[ResultCallback] = None,
) -> AllocationOutcome:
    """
    Flow:
    - catalog checks and preprocessing (derived scores from the initial index)
    - prefilled validation, once; DataIntegrityError aborts the run
    - every deterministic strategy, best kept
    - refiner when 1..refine_max_unassigned meetings are left
    - optional randomized search
    - final double-booking check; ScheduleIntegrityViolation aborts before any sink
    """
    pre = preprocess_all(data)
    warnings = validate_catalog(pre.meetings, data.principal_rosters, data.prefilled, cfg.capacity)
    for w in warnings:
        logger.warning(w.message)

    validate_prefilled(data.prefilled, pre.meetings, pre.unavailability)

    context = ScheduleContext(
        meetings=tuple(pre.meetings),
        prefilled=tuple(data.prefilled),
        unavailability=pre.unavailability,
        slots=tuple(data.slots),
        locations=tuple(data.locations),
    )
    total = len(context.meetings)
    runner = Runner(cfg.capacity, rng=random.Random(cfg.search.random_seed))
    strategies = create_strategies()

    def _report(result: ScheduleResult) -> None:
        if result.failed:
            logger.warning("Strategy '%s' failed: %s", result.strategy_name, result.error)
        else:
            logger.info("Strategy '%s': assigned %d/%d", result.strategy_name, result.count, total)
        if on_result:
            on_result(result)

    logger.info("Running %d deterministic scheduling strategies...", len(strategies))
    best = runner.run_strategies(strategies, context, _report)
    logger.info("Best deterministic strategy: '%s' with %d/%d assigned", best.strategy_name, best.count, total)

    if best.count < total:
        refiner = Refiner(runner, context, max_unassigned=cfg.search.refine_max_unassigned)
        refined = refiner.refine(best, strategies)
        if refined.count > best.count:
            best = refined

    if best.count < total and cfg.search.random_enabled:
        logger.info("Running %d random iterations...", cfg.search.random_iterations)
        best = run_random_search(runner, create_random_strategy(), context, best, cfg.search.random_iterations)

    logger.info("Final winner: '%s' with %d assigned", best.strategy_name, best.count)

    validate_schedule(best.assignments)

    return AllocationOutcome(
        result=best,
        meetings=pre.meetings,
        warnings=warnings,
        issues=summarize_issues(best, pre.meetings),
    )
