"""
Review workflow and manual cell edits on a generated Option.

Status moves Draft -> Pending Approval -> Approved, or back from Pending
Approval to Draft when an admin requests changes. Every status change needs
a comment, which is appended to the option's comment log.

Manual edits bypass the engine. An edited entry that shares a teacher, room
or batch with an entry already in the slot is kept and flagged as a clash,
never silently dropped.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Tuple

from ..models import Slot
from .result import APPROVED, DRAFT, PENDING, Assignment, Option, Schedule
from .rules import first_conflict

ADMIN, SCHEDULER, FACULTY = "Admin", "Scheduler", "Faculty"

# action -> (from status, to status, roles allowed)
_TRANSITIONS = {
    "submit":          (DRAFT,   PENDING,  {SCHEDULER, ADMIN}),
    "approve":         (PENDING, APPROVED, {ADMIN}),
    "request_changes": (PENDING, DRAFT,    {ADMIN}),
}


class WorkflowError(ValueError):
    """Raised for an action the option's status or the user's role forbids."""


def add_comment(option: Option, role: str, text: str) -> None:
    if not text or not text.strip():
        raise WorkflowError("Cannot add an empty comment.")
    option.comments.append({"role": role, "text": text.strip()})


def _transition(option: Option, action: str, role: str, comment: str) -> None:
    src, dst, roles = _TRANSITIONS[action]
    if option.status != src:
        raise WorkflowError(f"Cannot {action.replace('_', ' ')} an option in status "
                            f"{option.status!r} (needs {src!r}).")
    if role not in roles:
        raise WorkflowError(f"Role {role!r} may not {action.replace('_', ' ')}.")
    if not comment or not comment.strip():
        raise WorkflowError("Please add a comment explaining this action.")
    add_comment(option, role, comment)
    option.status = dst


def submit(option: Option, role: str, comment: str) -> None:
    _transition(option, "submit", role, comment)


def approve(option: Option, role: str, comment: str) -> None:
    _transition(option, "approve", role, comment)


def request_changes(option: Option, role: str, comment: str) -> None:
    _transition(option, "request_changes", role, comment)


# ── manual edits ──────────────────────────────────────────────────────────────

def _refresh(option: Option, entries: Dict[Slot, Tuple[Assignment, ...]]) -> None:
    option.schedule = Schedule({s: e for s, e in entries.items() if e})
    option.clashes  = option.schedule.clash_count


def edit_cell(option: Option, slot: Slot, assignment: Assignment) -> Assignment:
    """Put assignment into slot; returns the entry stored (flagged if it clashes)."""
    if option.status == APPROVED:
        raise WorkflowError("An approved option cannot be edited.")
    entries = dict(option.schedule.entries)
    current = entries.get(slot, ())
    clash = first_conflict(current, assignment)
    if clash is not None:
        assignment = replace(assignment, is_clash=True, original=clash)
        option.suggestions.append(
            f"Resolve conflict for \"{assignment.subject}\" and \"{clash.subject}\" "
            f"in slot {slot.key}. Try moving one to an empty slot."
        )
    entries[slot] = current + (assignment,)
    _refresh(option, entries)
    return assignment


def clear_cell(option: Option, slot: Slot, batch_id: str) -> int:
    """Remove the batch's entries from slot; returns how many were removed."""
    if option.status == APPROVED:
        raise WorkflowError("An approved option cannot be edited.")
    entries = dict(option.schedule.entries)
    current = entries.get(slot, ())
    kept    = [a for a in current if a.batch != batch_id]
    removed = len(current) - len(kept)

    # An entry whose clash partner is gone stops being a clash if nothing
    # else in the slot still collides with it.
    fixed = []
    for a in kept:
        if a.is_clash and a.original not in kept:
            others = [b for b in kept if b is not a]
            if first_conflict(others, a) is None:
                a = replace(a, is_clash=False, original=None)
        fixed.append(a)
    entries[slot] = tuple(fixed)
    _refresh(option, entries)
    return removed
