"""Expansion of (batch, subject) pairings into one-hour lecture units."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from ..models import Batch, DepartmentRoster, Subject
from .precheck import ResourceIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LectureUnit:
    batch:   Batch
    subject: Subject
    index:   int     # 0 .. subject.hours - 1

    @property
    def lecture_id(self) -> str:
        return f"{self.subject.id}-{self.index}"

    def __hash__(self) -> int:
        return hash((self.batch.id, self.subject.id, self.index))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LectureUnit):
            return NotImplemented
        return (self.batch.id, self.subject.id, self.index) == \
               (other.batch.id, other.subject.id, other.index)


def build_lecture_pool(roster: DepartmentRoster, idx: ResourceIndex) -> List[LectureUnit]:
    pool: List[LectureUnit] = []
    for batch in roster.batches:
        for sid in batch.subjects:
            subject = idx.subjects.get(sid)
            if subject is None:
                logger.debug("batch %s: skipping unknown subject %s", batch.id, sid)
                continue
            pool.extend(LectureUnit(batch, subject, h) for h in range(subject.hours))
    return pool


def total_units(roster: DepartmentRoster, idx: ResourceIndex) -> int:
    return sum(
        idx.subjects[sid].hours
        for b in roster.batches for sid in b.subjects if sid in idx.subjects
    )
