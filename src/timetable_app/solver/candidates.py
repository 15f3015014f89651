"""
Teacher and room candidates for a lecture unit.

Candidates depend only on the unit's subject and batch, never on the slot,
so they are computed once per (subject, batch) and cached for the run.
Order follows the roster and classroom list, which keeps the search
deterministic for a fixed seed.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from ..models import Classroom, Faculty
from .pool import LectureUnit
from .precheck import ResourceIndex
from .result import NO_CLASSROOM, NO_FACULTY


class CandidateResolver:
    def __init__(self, idx: ResourceIndex, classrooms: Sequence[Classroom]) -> None:
        self._idx        = idx
        self._classrooms = list(classrooms)
        self._rooms:    Dict[Tuple[str, str], List[Classroom]] = {}

    def teachers(self, unit: LectureUnit) -> List[Faculty]:
        return self._idx.qualified(unit.subject.id)

    def rooms(self, unit: LectureUnit) -> List[Classroom]:
        key = (unit.subject.id, unit.batch.id)
        if key not in self._rooms:
            wanted = unit.subject.requires_room_type
            self._rooms[key] = [
                r for r in self._classrooms
                if r.capacity >= unit.batch.strength
                and (not wanted or r.type == wanted)
            ]
        return self._rooms[key]

    def unplaced_reason(self, unit: LectureUnit) -> Optional[str]:
        """Reason the unit cannot be placed anywhere, or None if it might be."""
        if not self.teachers(unit):
            return NO_FACULTY
        if not self.rooms(unit):
            return NO_CLASSROOM
        return None
