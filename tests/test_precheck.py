"""Tests for precheck layer and the resource index."""
import pytest

from timetable_app.models import (Batch, Classroom, Constraints, DepartmentRoster,
    Faculty, GlobalResources, PinnedLecture, Subject)
from timetable_app.solver.precheck import PrecheckError, build_index, ensure_ok, precheck


def _inputs():
    roster = DepartmentRoster(
        faculty  = [
            Faculty(id="F1", name="Dr One", expertise=["CS101", "CS202"], max_load=10),
            Faculty(id="F2", name="Dr Two", expertise=["CS101"]),
        ],
        subjects = [
            Subject(id="CS101", name="Intro", hours=4),
            Subject(id="CS202", name="Data Structures", hours=3),
        ],
        batches  = [Batch(id="B1", strength=60, subjects=["CS101", "CS202"])],
    )
    resources = GlobalResources(classrooms=[Classroom(id="R1", capacity=100)])
    return roster, resources, Constraints()


def test_ok_inputs_pass() -> None:
    errors, warnings = precheck(*_inputs())
    assert errors == []
    assert warnings == []


def test_index_faculty_by_subject() -> None:
    roster, resources, _ = _inputs()
    idx = build_index(roster, resources)
    assert [f.id for f in idx.qualified("CS101")] == ["F1", "F2"]
    assert [f.id for f in idx.qualified("CS202")] == ["F1"]
    assert idx.qualified("NOPE") == []
    assert idx.subjects["CS202"].hours == 3


def test_missing_batches_is_error() -> None:
    _, resources, constraints = _inputs()
    errors, _ = precheck(None, resources, constraints)
    assert any("batches" in e for e in errors)


def test_missing_classrooms_is_error() -> None:
    roster, _, constraints = _inputs()
    errors, _ = precheck(roster, None, constraints)
    assert any("classroom" in e for e in errors)


def test_missing_constraints_is_error() -> None:
    roster, resources, _ = _inputs()
    errors, _ = precheck(roster, resources, None)
    assert errors


def test_invalid_constraint_is_error() -> None:
    roster, resources, constraints = _inputs()
    constraints.max_consecutive_faculty_hours = 0
    errors, _ = precheck(roster, resources, constraints)
    assert any("max_consecutive_faculty_hours" in e for e in errors)


def test_dangling_subject_is_warning() -> None:
    roster, resources, constraints = _inputs()
    roster.batches[0].subjects.append("XX999")
    errors, warnings = precheck(roster, resources, constraints)
    assert errors == []
    assert any("XX999" in w for w in warnings)


def test_pin_with_unknown_faculty_is_warning() -> None:
    roster, resources, constraints = _inputs()
    constraints.pinned_lectures = [
        PinnedLecture("CS101", "GHOST", "B1", "R1", "Monday", "09-10"),
    ]
    errors, warnings = precheck(roster, resources, constraints)
    assert errors == []
    assert any("GHOST" in w for w in warnings)


def test_subject_without_faculty_is_warning() -> None:
    roster, resources, constraints = _inputs()
    roster.faculty[0].expertise = ["CS101"]
    _, warnings = precheck(roster, resources, constraints)
    assert any("CS202" in w and "no faculty" in w for w in warnings)


def test_demand_above_max_load_is_warning() -> None:
    roster, resources, constraints = _inputs()
    roster.faculty[0].max_load = 2          # F1 is the only CS202 teacher
    _, warnings = precheck(roster, resources, constraints)
    assert any("CS202" in w and "max load" in w for w in warnings)


def test_ensure_ok_raises_on_errors() -> None:
    roster, _, constraints = _inputs()
    with pytest.raises(PrecheckError):
        ensure_ok(roster, None, constraints)


def test_none_collections_are_errors() -> None:
    roster, resources, constraints = _inputs()
    roster.faculty = None
    constraints.subject_relations = None
    errors, _ = precheck(roster, resources, constraints)
    assert "Department roster has no subject or faculty list." in errors
    assert "constraints.subject_relations must not be None" in errors
