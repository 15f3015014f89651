from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from timetable_app.models import Slot, WeekTemplate

NO_FACULTY   = "no qualified faculty"
NO_CLASSROOM = "no suitable classroom"
NO_SLOT      = "no available slots found"

DRAFT    = "Draft"
PENDING  = "Pending Approval"
APPROVED = "Approved"


@dataclass(frozen=True)
class Assignment:
    subject_id: str
    subject:    str                      # display name
    teacher_id: str
    teacher:    str                      # display name
    room:       str
    batch:      str
    lecture_id: Optional[str]        = None   # None for pins beyond the weekly hours
    pinned:     bool                 = False
    is_clash:   bool                 = False
    original:   Optional[Assignment] = None   # entry this one was forced onto


@dataclass(frozen=True)
class UnplacedLecture:
    lecture_id: str
    subject_id: str
    subject:    str
    batch:      str
    reason:     str


@dataclass(frozen=True)
class Schedule:
    """Frozen slot -> assignments map produced by one placement run."""
    entries: Dict[Slot, Tuple[Assignment, ...]] = field(default_factory=dict)

    def at(self, slot: Slot) -> Tuple[Assignment, ...]:
        return self.entries.get(slot, ())

    def items(self) -> Iterator[Tuple[Slot, Assignment]]:
        for slot, entries in self.entries.items():
            for a in entries:
                yield slot, a

    def assignments(self) -> List[Assignment]:
        return [a for _, a in self.items()]

    def __len__(self) -> int:
        return sum(len(v) for v in self.entries.values())

    @property
    def clash_count(self) -> int:
        return sum(1 for a in self.assignments() if a.is_clash)

    def density(self, week: WeekTemplate) -> Dict[str, Dict[str, int]]:
        """Classes per (day, period); the data behind a heatmap view."""
        return {
            day: {p: len(self.at(Slot(day, p))) for p in week.periods}
            for day in week.days
        }

    def load_by_teacher(self) -> Dict[str, int]:
        return dict(Counter(a.teacher_id for a in self.assignments()))

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {slot.key: [asdict(a) for a in entries]
                for slot, entries in self.entries.items() if entries}


@dataclass
class Option:
    id:          int
    schedule:    Schedule
    unplaced:    List[UnplacedLecture]  = field(default_factory=list)
    clashes:     int                    = 0
    status:      str                    = DRAFT
    suggestions: List[str]              = field(default_factory=list)
    comments:    List[Dict[str, str]]   = field(default_factory=list)
    strategy:    str                    = "greedy"
    seed:        Optional[int]          = None
    stats:       Dict[str, Any]         = field(default_factory=dict)

    @property
    def placed_count(self) -> int:
        """Assignments that consumed a lecture unit from the pool."""
        return sum(1 for a in self.schedule.assignments() if a.lecture_id is not None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id":          self.id,
            "status":      self.status,
            "strategy":    self.strategy,
            "seed":        self.seed,
            "clashes":     self.clashes,
            "schedule":    self.schedule.to_dict(),
            "unscheduled": [asdict(u) for u in self.unplaced],
            "suggestions": list(self.suggestions),
            "comments":    [dict(c) for c in self.comments],
            "stats":       dict(self.stats),
        }
