"""Tests for generate(): preconditions, option numbering, seeding and threading."""
import logging

from timetable_app.models import (DEFAULT_DAYS, Batch, Classroom, Constraints,
    DepartmentRoster, Faculty, GlobalResources, Subject)
from timetable_app.solver.api import generate
from timetable_app.solver.result import DRAFT


def _inputs():
    roster = DepartmentRoster(
        faculty  = [
            Faculty(id="F1", name="Alice", expertise=["CS101", "CS202"]),
            Faculty(id="F2", name="Bob",   expertise=["CS202", "MA101"]),
        ],
        subjects = [
            Subject(id="CS101", name="Intro",    hours=3),
            Subject(id="CS202", name="Algorithms", hours=3),
            Subject(id="MA101", name="Calculus", hours=2),
        ],
        batches  = [
            Batch(id="B1", strength=40, subjects=["CS101", "MA101"]),
            Batch(id="B2", strength=35, subjects=["CS202", "MA101"]),
        ],
    )
    resources = GlobalResources(classrooms=[
        Classroom(id="R1", capacity=50), Classroom(id="R2", capacity=40),
    ])
    return roster, resources, Constraints(lunch_break="12-13", max_consecutive_faculty_hours=2)


def test_missing_batches_returns_empty(caplog) -> None:
    roster, resources, constraints = _inputs()
    roster.batches = None
    with caplog.at_level(logging.ERROR):
        assert generate(roster, resources, constraints, seed=1) == []
    assert "batches" in caplog.text


def test_missing_classrooms_returns_empty(caplog) -> None:
    roster, _, constraints = _inputs()
    with caplog.at_level(logging.ERROR):
        assert generate(roster, GlobalResources(classrooms=None), constraints, seed=1) == []
    assert "classroom" in caplog.text


def test_missing_constraints_returns_empty() -> None:
    roster, resources, _ = _inputs()
    assert generate(roster, resources, None, seed=1) == []


def test_invalid_cap_returns_empty() -> None:
    roster, resources, constraints = _inputs()
    constraints.max_consecutive_batch_hours = -1
    assert generate(roster, resources, constraints, seed=1) == []


def test_bad_option_count_and_strategy(caplog) -> None:
    roster, resources, constraints = _inputs()
    with caplog.at_level(logging.ERROR):
        assert generate(roster, resources, constraints, num_options=0, seed=1) == []
        assert generate(roster, resources, constraints, strategy="annealing", seed=1) == []
    assert "num_options" in caplog.text
    assert "annealing" in caplog.text


def test_option_ids_and_seeds() -> None:
    options = generate(*_inputs(), num_options=3, seed=10)
    assert [o.id for o in options] == [1, 2, 3]
    assert [o.seed for o in options] == [10, 11, 12]
    for o in options:
        assert o.status == DRAFT
        assert o.strategy == "greedy"
        assert o.stats["total"] == 10
        assert o.stats["placed"] + o.stats["unplaced"] == 10


def test_keyword_overrides_solver_params() -> None:
    roster, resources, constraints = _inputs()
    constraints.solver.num_options = 4
    assert len(generate(roster, resources, constraints, seed=1)) == 4
    assert len(generate(roster, resources, constraints, num_options=1, seed=1)) == 1


def test_seed_from_solver_params() -> None:
    roster, resources, constraints = _inputs()
    constraints.solver.seed = 77
    assert [o.seed for o in generate(roster, resources, constraints)] == [77, 78]


def test_parallel_matches_sequential() -> None:
    seq = generate(*_inputs(), num_options=4, seed=5)
    par = generate(*_inputs(), num_options=4, seed=5, parallel=True)
    assert [o.to_dict() for o in seq] == [o.to_dict() for o in par]


def test_dangling_subject_skipped(caplog) -> None:
    roster, resources, constraints = _inputs()
    roster.batches[0].subjects.append("XX999")
    with caplog.at_level(logging.WARNING):
        options = generate(roster, resources, constraints, seed=3)
    assert len(options) == 2
    assert all(o.stats["total"] == 10 for o in options)
    assert "XX999" in caplog.text


def test_generate_does_not_mutate_inputs() -> None:
    roster, resources, constraints = _inputs()
    before = (repr(roster), repr(resources), repr(constraints))
    generate(roster, resources, constraints, num_options=2, seed=8)
    assert (repr(roster), repr(resources), repr(constraints)) == before


def test_to_dict_shape() -> None:
    opt = generate(*_inputs(), num_options=1, seed=2)[0]
    d = opt.to_dict()
    assert set(d) >= {"id", "status", "schedule", "unscheduled", "clashes", "suggestions"}
    for key, entries in d["schedule"].items():
        day, _, period = key.partition("-")
        assert day in DEFAULT_DAYS
        assert all({"subject", "teacher", "room", "batch"} <= set(e) for e in entries)

def test_none_roster_lists_return_empty(caplog) -> None:
    for field in ("subjects", "faculty"):
        roster, resources, constraints = _inputs()
        setattr(roster, field, None)
        with caplog.at_level(logging.ERROR):
            assert generate(roster, resources, constraints, seed=1) == []
        assert "subject or faculty list" in caplog.text
        caplog.clear()


def test_none_constraint_collections_return_empty(caplog) -> None:
    for field in ("pinned_lectures", "faculty_unavailability", "subject_relations",
                  "week", "solver"):
        roster, resources, constraints = _inputs()
        setattr(constraints, field, None)
        with caplog.at_level(logging.ERROR):
            assert generate(roster, resources, constraints, seed=1) == []
        assert f"constraints.{field} must not be None" in caplog.text
        caplog.clear()


def test_unexpected_failure_is_logged_not_raised(caplog) -> None:
    roster, resources, constraints = _inputs()
    roster.batches[0].subjects = None          # not a list; fails deep inside the run
    with caplog.at_level(logging.ERROR):
        assert generate(roster, resources, constraints, seed=1) == []
    assert "timetable generation failed" in caplog.text
