"""Plain-English hints shown next to each option for the human reviewer."""

from __future__ import annotations

from collections import Counter
from typing import Dict, List, Sequence

from .precheck import ResourceIndex
from .result import NO_CLASSROOM, NO_FACULTY, NO_SLOT, Schedule, UnplacedLecture


def suggest(schedule: Schedule, unplaced: Sequence[UnplacedLecture],
            idx: ResourceIndex) -> List[str]:
    out: List[str] = []

    groups: Counter = Counter((u.subject_id, u.batch, u.reason) for u in unplaced)
    for (sid, batch_id, reason), n in groups.items():
        subject = idx.subjects.get(sid)
        name    = subject.name if subject else sid
        if reason == NO_FACULTY:
            out.append(f"Assign a faculty member qualified for \"{name}\" "
                       f"({n} hour(s) for batch {batch_id} are unscheduled).")
        elif reason == NO_CLASSROOM:
            batch = idx.batches.get(batch_id)
            need  = f"at least {batch.strength} seats" if batch else "enough seats"
            if subject and subject.requires_room_type:
                need += f" of type \"{subject.requires_room_type}\""
            out.append(f"Add a classroom with {need} for \"{name}\" (batch {batch_id}).")
        elif reason == NO_SLOT:
            out.append(f"{n} hour(s) of \"{name}\" for batch {batch_id} found no free slot; "
                       "consider relaxing consecutive-hour caps, faculty unavailability "
                       "or adding another qualified faculty member.")

    load: Dict[str, int] = schedule.load_by_teacher()
    for fid, hours in sorted(load.items()):
        f = idx.faculty.get(fid)
        if f is not None and f.max_load is not None and hours > f.max_load:
            out.append(f"{f.name} is scheduled for {hours} hour(s), above the "
                       f"maximum load of {f.max_load}.")

    for slot, a in schedule.items():
        if a.is_clash and a.original is not None:
            out.append(f"Resolve conflict for \"{a.subject}\" and \"{a.original.subject}\" "
                       f"in slot {slot.key}. Try moving one to an empty slot.")
    return out
