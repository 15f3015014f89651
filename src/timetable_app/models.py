"""
Data model layer for the lecture timetable generator.

Every domain object is a plain Python dataclass. The @dataclass decorator
generates __init__, __repr__ and __eq__ automatically from field declarations.

Reference: Python Software Foundation. "dataclasses — Data Classes."
https://docs.python.org/3/library/dataclasses.html

Design note — flat entities with ID references:
  Batches hold subject ids and faculty hold expertise as subject ids, rather
  than embedding Subject objects. Pinned lectures and unavailability refer to
  faculty, batches and rooms by id as well. The roster is read-only input for
  a generation run; nothing in the solver mutates it.

Design note — "no restriction" defaults:
  Every optional cap in Constraints defaults to None, which the rule layer
  reads as unlimited. Empty lists/dicts mean no pins, no unavailability and
  no subject relations.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Set

DEFAULT_DAYS    = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
DEFAULT_PERIODS = ["09-10", "10-11", "11-12", "12-13", "13-14", "14-15", "15-16"]

STRATEGIES = ("greedy", "cpsat")


@dataclass(frozen=True)
class Slot:
    """One cell of the weekly grid, e.g. Monday 09-10."""
    day:    str
    period: str

    @property
    def key(self) -> str:
        return f"{self.day}-{self.period}"


@dataclass
class WeekTemplate:
    days:    List[str] = field(default_factory=lambda: list(DEFAULT_DAYS))
    periods: List[str] = field(default_factory=lambda: list(DEFAULT_PERIODS))

    def slots(self) -> List[Slot]:
        return [Slot(d, p) for d in self.days for p in self.periods]

    def period_index(self, period: str) -> int:
        return self.periods.index(period)

    def contains(self, slot: Slot) -> bool:
        return slot.day in self.days and slot.period in self.periods


@dataclass
class Subject:
    id:    str
    name:  str
    semester: int                     = 0
    hours:    int                     = 1   # weekly contact hours
    requires_room_type: Optional[str] = None


@dataclass
class Faculty:
    id:   str
    name: str
    expertise:    List[str]     = field(default_factory=list)
    max_load:     Optional[int] = None
    current_load: int           = 0     # informational only


@dataclass
class Classroom:
    id:       str
    capacity: int
    type:     str = ""


@dataclass
class Batch:
    id:       str
    program:  str       = ""
    semester: int       = 0
    strength: int       = 0
    subjects: List[str] = field(default_factory=list)


@dataclass
class PinnedLecture:
    subject_id: str
    faculty_id: str
    batch_id:   str
    room_id:    str
    day:        str
    period:     str

    @property
    def slot(self) -> Slot:
        return Slot(self.day, self.period)


@dataclass
class SubjectRelation:
    """Two subjects that may not share a slot."""
    subject_a: str
    subject_b: str
    kind:      str = "cannot_overlap"


@dataclass
class SolverParams:
    strategy:    str           = "greedy"
    num_options: int           = 2
    seed:        Optional[int] = None
    parallel:    bool          = False
    # CP-SAT only. One worker keeps runs reproducible under a fixed seed.
    max_time_in_seconds: float = 10.0
    num_workers:         int   = 1


@dataclass
class Constraints:
    max_classes_per_day:           Optional[int] = None   # per batch
    max_classes_per_week:          Optional[int] = None   # per faculty
    max_consecutive_faculty_hours: Optional[int] = None
    max_consecutive_batch_hours:   Optional[int] = None
    lunch_break:                   Optional[str] = None   # period label
    pinned_lectures:        List[PinnedLecture]   = field(default_factory=list)
    faculty_unavailability: Dict[str, List[Slot]] = field(default_factory=dict)
    subject_relations:      List[SubjectRelation] = field(default_factory=list)
    week:                   WeekTemplate          = field(default_factory=WeekTemplate)
    solver:                 SolverParams          = field(default_factory=SolverParams)

    def problems(self) -> List[str]:
        """Return every validation problem; empty means the config is usable."""
        out: List[str] = []
        collections = {
            "pinned_lectures":        self.pinned_lectures,
            "faculty_unavailability": self.faculty_unavailability,
            "subject_relations":      self.subject_relations,
            "week":                   self.week,
            "solver":                 self.solver,
        }
        missing = [name for name, value in collections.items() if value is None]
        if missing:
            # the checks below all read these
            return [f"constraints.{name} must not be None" for name in missing]

        caps = {
            "max_classes_per_day":           self.max_classes_per_day,
            "max_classes_per_week":          self.max_classes_per_week,
            "max_consecutive_faculty_hours": self.max_consecutive_faculty_hours,
            "max_consecutive_batch_hours":   self.max_consecutive_batch_hours,
        }
        for name, value in caps.items():
            if value is not None and value < 1:
                out.append(f"constraints.{name} must be >= 1 (got {value})")

        if not self.week.days or not self.week.periods:
            out.append("week template needs at least one day and one period")
        if len(set(self.week.periods)) != len(self.week.periods):
            out.append("week template lists a period twice")
        if self.lunch_break is not None and self.lunch_break not in self.week.periods:
            out.append(f"lunch_break {self.lunch_break!r} is not a period of the week")

        for pin in self.pinned_lectures:
            if not self.week.contains(pin.slot):
                out.append(f"pinned lecture {pin.subject_id}/{pin.batch_id} "
                           f"uses unknown slot {pin.slot.key!r}")
        for fid, slots in self.faculty_unavailability.items():
            bad = [s.key for s in slots if not self.week.contains(s)]
            if bad:
                out.append(f"faculty '{fid}' unavailability lists unknown slot(s): {bad}")
        for rel in self.subject_relations:
            if rel.kind != "cannot_overlap":
                out.append(f"unsupported subject relation kind {rel.kind!r}")

        if self.solver.num_options < 1:
            out.append("solver.num_options must be >= 1")
        if self.solver.strategy not in STRATEGIES:
            out.append(f"unknown solver strategy {self.solver.strategy!r}")
        if self.solver.max_time_in_seconds <= 0:
            out.append("solver.max_time_in_seconds must be > 0")
        return out

    def unavailable_slots(self) -> Dict[str, Set[Slot]]:
        return {fid: set(slots) for fid, slots in self.faculty_unavailability.items()}


@dataclass
class DepartmentRoster:
    faculty:  List[Faculty] = field(default_factory=list)
    subjects: List[Subject] = field(default_factory=list)
    batches:  List[Batch]   = field(default_factory=list)
    name:     str           = ""


@dataclass
class GlobalResources:
    classrooms: List[Classroom] = field(default_factory=list)


@dataclass
class Config:
    meta:        Dict[str, Any]   = field(default_factory=dict)
    roster:      DepartmentRoster = field(default_factory=DepartmentRoster)
    resources:   GlobalResources  = field(default_factory=GlobalResources)
    constraints: Constraints      = field(default_factory=Constraints)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def validate(self) -> None:
        problems = self.constraints.problems()
        for s in self.roster.subjects:
            if s.hours < 1:
                problems.append(f"subject '{s.id}' hours must be >= 1")
        for r in self.resources.classrooms:
            if r.capacity < 0:
                problems.append(f"classroom '{r.id}' capacity must be >= 0")
        if problems:
            raise ValueError("; ".join(problems))

    def get_subject(self, sid: str) -> Optional[Subject]:
        return next((s for s in self.roster.subjects if s.id == sid), None)

    def get_faculty(self, fid: str) -> Optional[Faculty]:
        return next((f for f in self.roster.faculty if f.id == fid), None)
