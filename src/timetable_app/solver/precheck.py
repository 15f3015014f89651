"""
Input checks and lookup tables built once per generation request.

Errors are precondition failures: the caller gets no options at all.
Warnings are data-integrity gaps the engine steps around (a batch naming a
subject that does not exist, a pin naming an unknown faculty member, ...).
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..models import (Batch, Classroom, Constraints, DepartmentRoster, Faculty,
    GlobalResources, Subject)


class PrecheckError(ValueError):
    """Raised by ensure_ok() when hard errors are present."""


@dataclass(frozen=True)
class ResourceIndex:
    subjects:           Dict[str, Subject]
    faculty:            Dict[str, Faculty]
    batches:            Dict[str, Batch]
    classrooms:         Dict[str, Classroom]
    faculty_by_subject: Dict[str, List[Faculty]]

    def qualified(self, subject_id: str) -> List[Faculty]:
        return self.faculty_by_subject.get(subject_id, [])


def build_index(roster: DepartmentRoster, resources: GlobalResources) -> ResourceIndex:
    by_subject: Dict[str, List[Faculty]] = {s.id: [] for s in roster.subjects}
    for f in roster.faculty:
        for sid in f.expertise:
            if sid in by_subject and f not in by_subject[sid]:
                by_subject[sid].append(f)
    return ResourceIndex(
        subjects           = {s.id: s for s in roster.subjects},
        faculty            = {f.id: f for f in roster.faculty},
        batches            = {b.id: b for b in roster.batches},
        classrooms         = {r.id: r for r in resources.classrooms},
        faculty_by_subject = by_subject,
    )


def precheck(roster: Optional[DepartmentRoster],
             resources: Optional[GlobalResources],
             constraints: Optional[Constraints]) -> Tuple[List[str], List[str]]:
    """Return (errors, warnings). errors = no options can be produced."""
    errors:   List[str] = []
    warnings: List[str] = []

    if roster is None or roster.batches is None:
        errors.append("Department roster has no batches.")
    elif roster.subjects is None or roster.faculty is None:
        errors.append("Department roster has no subject or faculty list.")
    if resources is None or resources.classrooms is None:
        errors.append("Global resources have no classroom list.")
    if constraints is None:
        errors.append("No constraint configuration supplied.")
    else:
        errors.extend(constraints.problems())
    if errors:
        return errors, warnings

    idx = build_index(roster, resources)

    for b in roster.batches:
        missing = [sid for sid in b.subjects if sid not in idx.subjects]
        if missing:
            warnings.append(f"Batch '{b.id}' references unknown subject(s): {missing}")

    for f in roster.faculty:
        unknown = [sid for sid in f.expertise if sid not in idx.subjects]
        if unknown:
            warnings.append(f"Faculty '{f.id}' lists unknown subject(s) as expertise: {unknown}")

    for pin in constraints.pinned_lectures:
        label = f"{pin.subject_id}/{pin.batch_id} at {pin.slot.key}"
        if pin.subject_id not in idx.subjects:
            warnings.append(f"Pinned lecture {label} names unknown subject; it will be skipped.")
        if pin.faculty_id not in idx.faculty:
            warnings.append(f"Pinned lecture {label} names unknown faculty "
                            f"'{pin.faculty_id}'; it will be skipped.")
        if pin.batch_id not in idx.batches:
            warnings.append(f"Pinned lecture {label} names unknown batch '{pin.batch_id}'.")
        if pin.room_id not in idx.classrooms:
            warnings.append(f"Pinned lecture {label} names unknown room '{pin.room_id}'.")

    for fid in constraints.faculty_unavailability:
        if fid not in idx.faculty:
            warnings.append(f"Unavailability given for unknown faculty '{fid}'.")

    # Demand per subject versus combined max load of qualified faculty.
    demand: Dict[str, int] = defaultdict(int)
    for b in roster.batches:
        for sid in b.subjects:
            subj = idx.subjects.get(sid)
            if subj:
                demand[sid] += subj.hours
    for sid, hours in demand.items():
        qualified = idx.qualified(sid)
        if not qualified:
            warnings.append(f"Subject '{sid}' is required but no faculty lists it as expertise.")
            continue
        if all(f.max_load is not None for f in qualified):
            capacity = sum(f.max_load for f in qualified)
            if capacity < hours:
                warnings.append(
                    f"Subject '{sid}' needs {hours} hour(s) a week but its qualified "
                    f"faculty have a combined max load of {capacity}."
                )

    return errors, warnings


def ensure_ok(roster, resources, constraints) -> None:
    errors, _ = precheck(roster, resources, constraints)
    if errors:
        raise PrecheckError("\n".join(errors))
