"""
CP-SAT placement: an exact alternative to the greedy search.

Same inputs, same rules, same output contract as GreedyFirstFit, but the
placement is posed as one model and the solver maximises the number of
placed lecture units. Pins already sit in the builder and enter the model
as constants.

Variables:
  x[k,s,t,r] = 1  iff  unit k is taught at slot s by teacher t in room r
Only tuples that pass the static checks are created: not the lunch period,
teacher not unavailable, and no pinned entry already holding the batch,
teacher or room (or a related subject) at s.

Contiguous-run caps use sliding windows: a run longer than m exists iff
some window of m+1 consecutive periods on one day is fully occupied, so
  sum(occupancy over any m+1 consecutive periods) <= m
Each occupancy term is 0/1 because (slot, teacher) and (slot, batch) are
each bounded by 1 and pinned cells are excluded.

Objective: maximise BIG * placed + tie-break, where the tie-break weights
come from the run's random source so different seeds yield different
optimal schedules.

Reference: OR-Tools CP-SAT Python API
https://developers.google.com/optimization/reference/python/sat/python/cp_model
"""

from __future__ import annotations

import logging
import random
from collections import defaultdict
from typing import Dict, List, Sequence, Tuple

from ortools.sat.python import cp_model

from ..models import Slot
from .pool import LectureUnit
from .result import NO_SLOT, Assignment, UnplacedLecture
from .rules import BATCH, ROOM, SUBJECT, TEACHER, ScheduleBuilder
from .strategy import PlacementContext, PlacementStrategy, register, unplaced

logger = logging.getLogger(__name__)

Key = Tuple[int, Slot, str, str]   # (unit index, slot, teacher id, room id)


def _status_str(s: object) -> str:
    """Convert a CP-SAT solver status value to a readable string."""
    mapping = {
        int(cp_model.OPTIMAL):       "OPTIMAL",
        int(cp_model.FEASIBLE):      "FEASIBLE",
        int(cp_model.INFEASIBLE):    "INFEASIBLE",
        int(cp_model.MODEL_INVALID): "MODEL_INVALID",
    }
    return mapping.get(int(s), "UNKNOWN")  # type: ignore[call-overload]


@register
class CpSatPlacement(PlacementStrategy):
    name = "cpsat"

    def place(self, units: Sequence[LectureUnit], builder: ScheduleBuilder,
              ctx: PlacementContext, rng: random.Random) -> List[UnplacedLecture]:
        rules = ctx.rules
        c     = rules.c
        week  = builder.week
        out: List[UnplacedLecture] = []

        model = cp_model.CpModel()
        x: Dict[Key, cp_model.IntVar] = {}
        live: List[Tuple[int, LectureUnit]] = []

        # ── variables (static filtering) ──────────────────────────────────────
        for k, unit in enumerate(units):
            reason = ctx.candidates.unplaced_reason(unit)
            if reason is not None:
                out.append(unplaced(unit, reason))
                continue
            live.append((k, unit))
            related = rules.related.get(unit.subject.id, ())
            for slot in week.slots():
                if c.lunch_break is not None and slot.period == c.lunch_break:
                    continue
                if builder.busy(slot, BATCH, unit.batch.id):
                    continue
                if any(builder.busy(slot, SUBJECT, o) for o in related):
                    continue
                for t in ctx.candidates.teachers(unit):
                    if builder.busy(slot, TEACHER, t.id) or slot in rules.unavailable.get(t.id, ()):
                        continue
                    for r in ctx.candidates.rooms(unit):
                        if builder.busy(slot, ROOM, r.id):
                            continue
                        x[k, slot, t.id, r.id] = model.new_bool_var(
                            f"x_u{k}_{slot.key}_{t.id}_{r.id}")

        by_unit:    Dict[int, list]              = defaultdict(list)
        by_teacher: Dict[Tuple[Slot, str], list] = defaultdict(list)
        by_room:    Dict[Tuple[Slot, str], list] = defaultdict(list)
        by_batch:   Dict[Tuple[Slot, str], list] = defaultdict(list)
        by_subject: Dict[Tuple[Slot, str], list] = defaultdict(list)
        batch_of   = {k: u.batch.id for k, u in live}
        subject_of = {k: u.subject.id for k, u in live}
        for (k, slot, tid, rid), var in x.items():
            by_unit[k].append(var)
            by_teacher[slot, tid].append(var)
            by_room[slot, rid].append(var)
            by_batch[slot, batch_of[k]].append(var)
            by_subject[slot, subject_of[k]].append(var)

        # ── hard constraints ──────────────────────────────────────────────────
        for vs in by_unit.values():
            model.add_at_most_one(vs)
        for group in (by_teacher, by_room, by_batch):
            for vs in group.values():
                model.add_at_most_one(vs)

        def bound(vs: list, pinned: int, cap: int) -> None:
            if vs:
                model.add(sum(vs) <= max(0, cap - pinned))

        def windows(group: Dict[Tuple[Slot, str], list], kind: str,
                    ids: List[str], cap: int) -> None:
            span = cap + 1
            for ident in ids:
                for day in week.days:
                    cells = [Slot(day, p) for p in week.periods]
                    for i in range(len(cells) - span + 1):
                        window = cells[i:i + span]
                        vs = [v for s in window for v in group.get((s, ident), ())]
                        pinned = sum(1 for s in window if builder.busy(s, kind, ident))
                        bound(vs, pinned, cap)

        if c.max_consecutive_faculty_hours is not None:
            windows(by_teacher, TEACHER, sorted({tid for _, tid in by_teacher}),
                    c.max_consecutive_faculty_hours)
        if c.max_consecutive_batch_hours is not None:
            windows(by_batch, BATCH, sorted(set(batch_of.values())), c.max_consecutive_batch_hours)

        if c.max_classes_per_day is not None:
            for bid in sorted(set(batch_of.values())):
                for day in week.days:
                    vs = [v for p in week.periods for v in by_batch.get((Slot(day, p), bid), ())]
                    bound(vs, builder.batch_day_count(bid, day), c.max_classes_per_day)

        if c.max_classes_per_week is not None:
            per_teacher: Dict[str, list] = defaultdict(list)
            for (_, tid), vs in by_teacher.items():
                per_teacher[tid].extend(vs)
            for tid, vs in per_teacher.items():
                bound(vs, builder.teacher_week_count(tid), c.max_classes_per_week)

        for slot in week.slots():
            seen = set()
            for a in sorted(rules.related):
                for b in sorted(rules.related[a]):
                    pair = tuple(sorted((a, b)))
                    if pair in seen:
                        continue
                    seen.add(pair)
                    va = by_subject.get((slot, a), [])
                    vb = by_subject.get((slot, b), [])
                    if a == b:
                        if len(va) > 1:
                            model.add_at_most_one(va)
                    elif va and vb:
                        # z = 1: subject a stays out of the slot; z = 0: b does.
                        z = model.new_bool_var(f"rel_{slot.key}_{pair[0]}_{pair[1]}")
                        model.add(sum(va) == 0).only_enforce_if(z)
                        model.add(sum(vb) == 0).only_enforce_if(z.Not())

        # ── objective ─────────────────────────────────────────────────────────
        keys = list(x)
        jitter = [rng.randint(0, 3) for _ in keys]
        big = 4 * len(keys) + 1
        model.maximize(sum((big + w) * x[key] for key, w in zip(keys, jitter)))

        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = self.params.max_time_in_seconds
        solver.parameters.num_workers         = self.params.num_workers
        solver.parameters.random_seed         = rng.randrange(2 ** 31)
        status = solver.solve(model)
        name   = _status_str(status)
        self.stats = {"solver_status": name}
        logger.debug("CP-SAT %s in %.3fs over %d variable(s)", name, solver.wall_time, len(keys))

        chosen: Dict[int, Key] = {}
        if name in ("OPTIMAL", "FEASIBLE"):
            for key in keys:
                if solver.value(x[key]) == 1:
                    chosen[key[0]] = key
        else:
            logger.warning("CP-SAT returned %s; no units placed by this run", name)

        for k, unit in live:
            key = chosen.get(k)
            if key is None:
                out.append(unplaced(unit, NO_SLOT))
                continue
            _, slot, tid, rid = key
            teacher = next(t for t in ctx.candidates.teachers(unit) if t.id == tid)
            builder.commit(slot, Assignment(
                subject_id = unit.subject.id,
                subject    = unit.subject.name,
                teacher_id = tid,
                teacher    = teacher.name,
                room       = rid,
                batch      = unit.batch.id,
                lecture_id = unit.lecture_id,
            ))
        return out
