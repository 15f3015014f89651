"""
Administrator-pinned lectures, placed before any search runs.

Pins bypass the rule layer entirely. Each placed pin consumes one lecture
unit of the same (subject, batch) from the pool so the hour is not scheduled
twice; a pin beyond the subject's weekly hours is still placed but consumes
nothing. Pins naming a subject or faculty member missing from the roster are
skipped.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from ..models import PinnedLecture
from .pool import LectureUnit
from .precheck import ResourceIndex
from .result import Assignment
from .rules import ScheduleBuilder

logger = logging.getLogger(__name__)


def place_pinned(pins: Sequence[PinnedLecture], builder: ScheduleBuilder,
                 idx: ResourceIndex, pool: Sequence[LectureUnit]) -> List[LectureUnit]:
    """Place every usable pin into builder and return the pool left to schedule."""
    remaining = list(pool)
    for pin in pins:
        subject = idx.subjects.get(pin.subject_id)
        teacher = idx.faculty.get(pin.faculty_id)
        if subject is None or teacher is None:
            logger.warning("skipping pin %s/%s at %s: unknown subject or faculty",
                           pin.subject_id, pin.batch_id, pin.slot.key)
            continue

        consumed = next(
            (u for u in remaining
             if u.subject.id == pin.subject_id and u.batch.id == pin.batch_id),
            None,
        )
        if consumed is not None:
            remaining.remove(consumed)
        else:
            logger.info("pin %s/%s at %s exceeds the subject's weekly hours",
                        pin.subject_id, pin.batch_id, pin.slot.key)

        stored = builder.place_forced(pin.slot, Assignment(
            subject_id = subject.id,
            subject    = subject.name,
            teacher_id = teacher.id,
            teacher    = teacher.name,
            room       = pin.room_id,
            batch      = pin.batch_id,
            lecture_id = consumed.lecture_id if consumed else None,
            pinned     = True,
        ))
        if stored.is_clash:
            logger.warning("pin %s/%s at %s collides with %s/%s",
                           pin.subject_id, pin.batch_id, pin.slot.key,
                           stored.original.subject_id, stored.original.batch)
    return remaining
