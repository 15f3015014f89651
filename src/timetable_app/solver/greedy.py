"""
Greedy first-fit placement.

For each unit in the order given: shuffle the weekly slots with the run's
random source, then walk slot -> teacher -> room and commit the first
admissible tuple. Nothing committed is ever revisited, so a unit placed early
can block a later one that a backtracking search would have fitted.
"""

from __future__ import annotations

import logging
import random
from typing import List, Sequence

from .pool import LectureUnit
from .result import NO_SLOT, Assignment, UnplacedLecture
from .rules import ScheduleBuilder
from .strategy import PlacementContext, PlacementStrategy, register, unplaced

logger = logging.getLogger(__name__)


@register
class GreedyFirstFit(PlacementStrategy):
    name = "greedy"

    def place(self, units: Sequence[LectureUnit], builder: ScheduleBuilder,
              ctx: PlacementContext, rng: random.Random) -> List[UnplacedLecture]:
        rules = ctx.rules
        out: List[UnplacedLecture] = []
        all_slots = builder.week.slots()

        for unit in units:
            reason = ctx.candidates.unplaced_reason(unit)
            if reason is not None:
                out.append(unplaced(unit, reason))
                continue

            teachers = ctx.candidates.teachers(unit)
            rooms    = ctx.candidates.rooms(unit)
            slots    = list(all_slots)
            rng.shuffle(slots)

            placed = False
            for slot in slots:
                if not rules.slot_ok(builder, slot, unit.batch.id, unit.subject.id):
                    continue
                for teacher in teachers:
                    if not rules.teacher_ok(builder, slot, teacher.id):
                        continue
                    room = next((r for r in rooms if rules.room_ok(builder, slot, r.id)), None)
                    if room is None:
                        continue
                    builder.commit(slot, Assignment(
                        subject_id = unit.subject.id,
                        subject    = unit.subject.name,
                        teacher_id = teacher.id,
                        teacher    = teacher.name,
                        room       = room.id,
                        batch      = unit.batch.id,
                        lecture_id = unit.lecture_id,
                    ))
                    placed = True
                    break
                if placed:
                    break

            if not placed:
                logger.debug("no slot for %s of batch %s", unit.lecture_id, unit.batch.id)
                out.append(unplaced(unit, NO_SLOT))
        return out
