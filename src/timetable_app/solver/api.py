"""
Option assembly, the single entry point of the engine.

generate() validates once, builds the resource index and the lecture pool,
then runs pinning + placement once per option. Each run owns its builder,
candidate cache and random source, so runs can go to a thread pool without
coordination; results are joined back in ordinal order.

Run i is seeded with (seed + i). Option 1 keeps the natural pool order,
later options shuffle it, and every run shuffles slot order per unit.
"""

from __future__ import annotations

import logging
import random
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from ..models import Constraints, DepartmentRoster, GlobalResources
from .candidates import CandidateResolver
from .cpsat import CpSatPlacement  # noqa: F401  (registers "cpsat")
from .greedy import GreedyFirstFit  # noqa: F401  (registers "greedy")
from .pinned import place_pinned
from .pool import LectureUnit, build_lecture_pool
from .precheck import ResourceIndex, build_index, precheck
from .result import Option
from .rules import RuleSet, ScheduleBuilder
from .strategy import PlacementContext, get_strategy
from .suggestions import suggest

logger = logging.getLogger(__name__)


def _run_option(i: int, seed: int, strategy: str, pool: List[LectureUnit],
                idx: ResourceIndex, rules: RuleSet,
                resources: GlobalResources, constraints: Constraints) -> Option:
    rng     = random.Random(seed + i)
    builder = ScheduleBuilder(constraints.week)
    ctx     = PlacementContext(rules, CandidateResolver(idx, resources.classrooms))

    remaining = place_pinned(constraints.pinned_lectures, builder, idx, pool)
    if i > 0:
        rng.shuffle(remaining)

    placer   = get_strategy(strategy, constraints.solver)
    unplaced = placer.place(remaining, builder, ctx, rng)
    schedule = builder.freeze()

    option = Option(
        id          = i + 1,
        schedule    = schedule,
        unplaced    = unplaced,
        clashes     = schedule.clash_count,
        suggestions = suggest(schedule, unplaced, idx),
        strategy    = strategy,
        seed        = seed + i,
    )
    option.stats = {
        "total":    len(pool),
        "placed":   option.placed_count,
        "pinned":   sum(1 for a in schedule.assignments() if a.pinned),
        "unplaced": len(unplaced),
        **placer.stats,
    }
    logger.info("option %d: %d/%d lecture(s) placed, %d unplaced, %d clash(es)",
                option.id, option.placed_count, len(pool), len(unplaced), option.clashes)
    return option


def generate(roster: Optional[DepartmentRoster],
             resources: Optional[GlobalResources],
             constraints: Optional[Constraints],
             *,
             num_options: Optional[int] = None,
             seed: Optional[int] = None,
             strategy: Optional[str] = None,
             parallel: Optional[bool] = None) -> List[Option]:
    """
    Produce timetable options for one department.

    Keyword arguments override the matching fields of constraints.solver.
    Returns [] (and logs why) when the input fails its precondition checks;
    otherwise exactly num_options options, however much is left unplaced.
    Never raises.
    """
    try:
        return _generate(roster, resources, constraints, num_options=num_options,
                         seed=seed, strategy=strategy, parallel=parallel)
    except Exception:
        logger.exception("timetable generation failed")
        return []


def _generate(roster, resources, constraints, *, num_options, seed,
              strategy, parallel) -> List[Option]:
    errors, warnings = precheck(roster, resources, constraints)
    if errors:
        for e in errors:
            logger.error("cannot generate timetable: %s", e)
        return []
    for w in warnings:
        logger.warning(w)

    params   = constraints.solver
    n        = params.num_options if num_options is None else num_options
    strategy = (strategy or params.strategy).lower()
    parallel = params.parallel if parallel is None else parallel
    if seed is None:
        seed = params.seed
    if seed is None:
        seed = random.SystemRandom().randrange(2 ** 31)
        logger.debug("no seed given, drew %d", seed)

    if n < 1:
        logger.error("cannot generate timetable: num_options must be >= 1 (got %d)", n)
        return []
    try:
        get_strategy(strategy)
    except ValueError as e:
        logger.error("cannot generate timetable: %s", e)
        return []

    idx   = build_index(roster, resources)
    pool  = build_lecture_pool(roster, idx)
    rules = RuleSet(constraints)
    logger.info("generating %d option(s) for %d lecture unit(s) with %s (seed %d)",
                n, len(pool), strategy, seed)

    def run(i: int) -> Option:
        return _run_option(i, seed, strategy, pool, idx, rules, resources, constraints)

    if parallel and n > 1:
        with ThreadPoolExecutor(max_workers=n) as pool_exec:
            return list(pool_exec.map(run, range(n)))
    return [run(i) for i in range(n)]
