"""
Per-run schedule state and the hard-constraint predicates.

ScheduleBuilder is the mutable state owned by exactly one placement run:
slot -> assignments, plus an occupied-resource key set so the busy checks
are O(1). Keys are (slot, kind, id) with kind "T" (teacher), "R" (room),
"B" (batch) or "S" (subject). freeze() turns it into an immutable Schedule.

RuleSet holds the read-only view of Constraints and answers admissibility
questions against a builder without touching it. Rules:
  1. slot is not the lunch-break period
  2. batch is free at the slot
  3. teacher is free and not marked unavailable at the slot
  4. room is free at the slot
  5. teacher's contiguous run on that day stays <= max_consecutive_faculty_hours
  6. batch's contiguous run on that day stays <= max_consecutive_batch_hours
  7. no subject related by a cannot-overlap rule already sits in the slot
  8. batch stays <= max_classes_per_day lectures that day
  9. teacher stays <= max_classes_per_week lectures that week
The split into slot_ok / teacher_ok / room_ok mirrors the nesting of the
search loops, so cheap slot-level rejections happen before candidate loops.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..models import Constraints, Slot, WeekTemplate
from .result import Assignment, Schedule

TEACHER, ROOM, BATCH, SUBJECT = "T", "R", "B", "S"


def first_conflict(entries: Iterable[Assignment], a: Assignment) -> Optional[Assignment]:
    """First entry sharing a teacher, room or batch with a."""
    for existing in entries:
        if (existing.teacher_id == a.teacher_id or existing.room == a.room
                or existing.batch == a.batch):
            return existing
    return None


class ScheduleBuilder:
    def __init__(self, week: WeekTemplate) -> None:
        self.week = week
        self._entries: Dict[Slot, List[Assignment]] = defaultdict(list)
        self._occupied: Set[Tuple[Slot, str, str]] = set()
        self._batch_day:    Counter = Counter()   # (batch, day) -> lectures
        self._teacher_week: Counter = Counter()   # teacher -> lectures

    # ── queries ───────────────────────────────────────────────────────────────

    def busy(self, slot: Slot, kind: str, ident: str) -> bool:
        return (slot, kind, ident) in self._occupied

    def at(self, slot: Slot) -> List[Assignment]:
        return list(self._entries.get(slot, ()))

    def batch_day_count(self, batch_id: str, day: str) -> int:
        return self._batch_day[(batch_id, day)]

    def teacher_week_count(self, teacher_id: str) -> int:
        return self._teacher_week[teacher_id]

    def __len__(self) -> int:
        return sum(len(v) for v in self._entries.values())

    # ── mutation ──────────────────────────────────────────────────────────────

    def commit(self, slot: Slot, a: Assignment) -> None:
        self._entries[slot].append(a)
        self._occupied.add((slot, TEACHER, a.teacher_id))
        self._occupied.add((slot, ROOM,    a.room))
        self._occupied.add((slot, BATCH,   a.batch))
        self._occupied.add((slot, SUBJECT, a.subject_id))
        self._batch_day[(a.batch, slot.day)] += 1
        self._teacher_week[a.teacher_id] += 1

    def conflicting(self, slot: Slot, a: Assignment) -> Optional[Assignment]:
        return first_conflict(self._entries.get(slot, ()), a)

    def place_forced(self, slot: Slot, a: Assignment) -> Assignment:
        """
        Place a without any rule check. If it collides with an entry already
        in the slot it is stored flagged as a clash, pointing at that entry.
        Returns the assignment actually stored.
        """
        clash = self.conflicting(slot, a)
        if clash is not None:
            a = replace(a, is_clash=True, original=clash)
        self.commit(slot, a)
        return a

    def freeze(self) -> Schedule:
        return Schedule({
            slot: tuple(entries)
            for slot, entries in self._entries.items() if entries
        })


class RuleSet:
    def __init__(self, constraints: Constraints) -> None:
        self.c           = constraints
        self.week        = constraints.week
        self.unavailable = constraints.unavailable_slots()
        self.related: Dict[str, Set[str]] = defaultdict(set)
        for rel in constraints.subject_relations:
            self.related[rel.subject_a].add(rel.subject_b)
            self.related[rel.subject_b].add(rel.subject_a)

    # ── contiguous runs ───────────────────────────────────────────────────────

    def consecutive_run(self, b: ScheduleBuilder, slot: Slot, kind: str, ident: str) -> int:
        """Length of the run ident would be part of if placed at slot."""
        periods = self.week.periods
        i = self.week.period_index(slot.period)
        run = 1
        for j in range(i - 1, -1, -1):
            if not b.busy(Slot(slot.day, periods[j]), kind, ident):
                break
            run += 1
        for j in range(i + 1, len(periods)):
            if not b.busy(Slot(slot.day, periods[j]), kind, ident):
                break
            run += 1
        return run

    # ── predicates ────────────────────────────────────────────────────────────

    def slot_ok(self, b: ScheduleBuilder, slot: Slot, batch_id: str, subject_id: str) -> bool:
        c = self.c
        if c.lunch_break is not None and slot.period == c.lunch_break:
            return False
        if b.busy(slot, BATCH, batch_id):
            return False
        if (c.max_consecutive_batch_hours is not None and
                self.consecutive_run(b, slot, BATCH, batch_id) > c.max_consecutive_batch_hours):
            return False
        if any(b.busy(slot, SUBJECT, other) for other in self.related.get(subject_id, ())):
            return False
        if (c.max_classes_per_day is not None and
                b.batch_day_count(batch_id, slot.day) >= c.max_classes_per_day):
            return False
        return True

    def teacher_ok(self, b: ScheduleBuilder, slot: Slot, teacher_id: str) -> bool:
        c = self.c
        if b.busy(slot, TEACHER, teacher_id):
            return False
        if slot in self.unavailable.get(teacher_id, ()):
            return False
        if (c.max_consecutive_faculty_hours is not None and
                self.consecutive_run(b, slot, TEACHER, teacher_id) > c.max_consecutive_faculty_hours):
            return False
        if (c.max_classes_per_week is not None and
                b.teacher_week_count(teacher_id) >= c.max_classes_per_week):
            return False
        return True

    def room_ok(self, b: ScheduleBuilder, slot: Slot, room_id: str) -> bool:
        return not b.busy(slot, ROOM, room_id)

    def is_admissible(self, b: ScheduleBuilder, slot: Slot, teacher_id: str,
                      room_id: str, batch_id: str, subject_id: str) -> bool:
        return (self.slot_ok(b, slot, batch_id, subject_id)
                and self.teacher_ok(b, slot, teacher_id)
                and self.room_ok(b, slot, room_id))
