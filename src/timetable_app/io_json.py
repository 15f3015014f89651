"""
JSON serialisation / deserialisation for Config objects and generated options.

Uses only the Python standard-library json module.  The docs warn that
parsing large or deeply nested JSON from untrusted sources can be expensive,
so basic structural validation is applied before domain objects are built.

Keys are accepted in snake_case or in the camelCase the web front end sends
(maxConsecutiveFacultyHours, pinnedLectures, requiresRoomType, ...).

Reference: Python docs — json
https://docs.python.org/3/library/json.html
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from timetable_app.models import (Batch, Classroom, Config, Constraints,
    DepartmentRoster, Faculty, GlobalResources, PinnedLecture, Slot,
    SolverParams, Subject, SubjectRelation, WeekTemplate)
from timetable_app.solver.result import Option


class ConfigError(ValueError):
    """Raised when the config JSON is structurally invalid."""


def _require(obj: Dict[str, Any], key: str, ctx: str) -> Any:
    if key not in obj:
        raise ConfigError(f"Missing required key '{key}' in {ctx}")
    return obj[key]


def _get(obj: Dict[str, Any], key: str, camel: str, default: Any = None) -> Any:
    if key in obj:
        return obj[key]
    return obj.get(camel, default)


def _require_any(obj: Dict[str, Any], key: str, camel: str, ctx: str) -> Any:
    if key in obj:
        return obj[key]
    if camel in obj:
        return obj[camel]
    raise ConfigError(f"Missing required key '{key}' in {ctx}")


def _as_list(obj: Any, ctx: str) -> List[Any]:
    if not isinstance(obj, list):
        raise ConfigError(f"Expected a JSON array in {ctx}, got {type(obj).__name__}")
    return obj


def _as_dict(obj: Any, ctx: str) -> Dict[str, Any]:
    if not isinstance(obj, dict):
        raise ConfigError(
            f"Expected a JSON object in {ctx}, got {type(obj).__name__}"
        )
    return obj


def _opt_int(v: Any) -> Optional[int]:
    return None if v is None else int(v)


def _opt_cap(v: Any) -> Optional[int]:
    # The web form stores an empty cap field as 0.
    return None if v in (None, 0, "") else int(v)


def _check_unique_ids(items: list, ctx: str) -> None:
    seen: set = set()
    dupes: set = set()
    for item in items:
        item_id = getattr(item, "id", None)
        if not item_id:
            raise ConfigError(f"Empty or missing 'id' in {ctx}")
        if item_id in seen:
            dupes.add(item_id)
        seen.add(item_id)
    if dupes:
        raise ConfigError(f"Duplicate ids in {ctx}: {sorted(dupes)}")


def parse_slot(raw: Any, ctx: str) -> Slot:
    """Accept {"day": ..., "period": ...} or the front end's "Monday-09-10"."""
    if isinstance(raw, str):
        day, sep, period = raw.partition("-")
        if not sep or not day or not period:
            raise ConfigError(f"Bad slot {raw!r} in {ctx}; expected '<day>-<period>'")
        return Slot(day, period)
    raw = _as_dict(raw, ctx)
    return Slot(str(_require(raw, "day", ctx)), str(_require(raw, "period", ctx)))


def _parse_roster(raw: Dict[str, Any]) -> DepartmentRoster:
    faculty = [
        Faculty(
            id           = str(_require(f, "id",   f"faculty[{i}]")),
            name         = str(_require(f, "name", f"faculty[{i}]")),
            expertise    = [str(x) for x in _as_list(f.get("expertise", []), f"faculty[{i}].expertise")],
            max_load     = _opt_int(_get(f, "max_load", "maxLoad")),
            current_load = int(_get(f, "current_load", "currentLoad", 0) or 0),
        )
        for i, f in enumerate(_as_list(raw.get("faculty", []), "faculty"))
    ]
    subjects = [
        Subject(
            id       = str(_require(s, "id",   f"subjects[{i}]")),
            name     = str(_require(s, "name", f"subjects[{i}]")),
            semester = int(s.get("semester", 0)),
            hours    = int(s.get("hours", 1)),
            requires_room_type = _get(s, "requires_room_type", "requiresRoomType"),
        )
        for i, s in enumerate(_as_list(raw.get("subjects", []), "subjects"))
    ]
    batches = [
        Batch(
            id       = str(_require(b, "id", f"batches[{i}]")),
            program  = str(b.get("program", "")),
            semester = int(b.get("semester", 0)),
            strength = int(b.get("strength", 0)),
            subjects = [str(x) for x in _as_list(b.get("subjects", []), f"batches[{i}].subjects")],
        )
        for i, b in enumerate(_as_list(_require(raw, "batches", "department"), "batches"))
    ]
    return DepartmentRoster(faculty=faculty, subjects=subjects, batches=batches,
                            name=str(raw.get("name", "")))


def _parse_constraints(raw: Dict[str, Any]) -> Constraints:
    pins = [
        PinnedLecture(
            subject_id = str(_require_any(p, "subject_id", "subjectId", f"pinned_lectures[{i}]")),
            faculty_id = str(_require_any(p, "faculty_id", "facultyId", f"pinned_lectures[{i}]")),
            batch_id   = str(_require_any(p, "batch_id",   "batchId",   f"pinned_lectures[{i}]")),
            room_id    = str(_require_any(p, "room_id",    "roomId",    f"pinned_lectures[{i}]")),
            day        = str(_require(p, "day",    f"pinned_lectures[{i}]")),
            period     = str(_require(p, "period", f"pinned_lectures[{i}]")),
        )
        for i, p in enumerate(_as_list(
            _get(raw, "pinned_lectures", "pinnedLectures", []), "pinned_lectures"))
    ]

    unavail_raw = _as_dict(
        _get(raw, "faculty_unavailability", "facultyUnavailability", {}) or {},
        "faculty_unavailability")
    unavailability = {
        str(fid): [parse_slot(s, f"faculty_unavailability[{fid!r}]")
                   for s in _as_list(slots, f"faculty_unavailability[{fid!r}]")]
        for fid, slots in unavail_raw.items()
    }

    relations = []
    for i, r in enumerate(_as_list(
            _get(raw, "subject_relations", "subjectRelations", []), "subject_relations")):
        if isinstance(r, list) and len(r) == 2:
            relations.append(SubjectRelation(str(r[0]), str(r[1])))
        else:
            r = _as_dict(r, f"subject_relations[{i}]")
            relations.append(SubjectRelation(
                subject_a = str(_require_any(r, "subject_a", "subjectA", f"subject_relations[{i}]")),
                subject_b = str(_require_any(r, "subject_b", "subjectB", f"subject_relations[{i}]")),
                kind      = str(r.get("kind", "cannot_overlap")),
            ))

    week_raw   = _as_dict(raw.get("week") or {}, "constraints.week")
    solver_raw = _as_dict(raw.get("solver") or {}, "constraints.solver")
    week   = WeekTemplate()
    if "days" in week_raw:
        week.days = [str(d) for d in _as_list(week_raw["days"], "week.days")]
    if "periods" in week_raw:
        week.periods = [str(p) for p in _as_list(week_raw["periods"], "week.periods")]

    seed = solver_raw.get("seed")
    solver = SolverParams(
        strategy            = str(solver_raw.get("strategy", "greedy")),
        num_options         = int(_get(solver_raw, "num_options", "numOptions", 2)),
        seed                = None if seed is None else int(seed),
        parallel            = bool(solver_raw.get("parallel", False)),
        max_time_in_seconds = float(solver_raw.get("max_time_in_seconds", 10.0)),
        num_workers         = int(solver_raw.get("num_workers", 1)),
    )

    lunch = _get(raw, "lunch_break", "lunchBreak")
    return Constraints(
        max_classes_per_day  = _opt_cap(_get(raw, "max_classes_per_day",  "maxClassesPerDay")),
        max_classes_per_week = _opt_cap(_get(raw, "max_classes_per_week", "maxClassesPerWeek")),
        max_consecutive_faculty_hours = _opt_cap(
            _get(raw, "max_consecutive_faculty_hours", "maxConsecutiveFacultyHours")),
        max_consecutive_batch_hours = _opt_cap(
            _get(raw, "max_consecutive_batch_hours", "maxConsecutiveBatchHours")),
        lunch_break            = None if lunch is None else str(lunch),
        pinned_lectures        = pins,
        faculty_unavailability = unavailability,
        subject_relations      = relations,
        week                   = week,
        solver                 = solver,
    )


def config_from_dict(raw: Any) -> Config:
    raw  = _as_dict(raw, "root")
    meta = _as_dict(raw.get("meta") or {}, "meta")

    dept_raw   = _as_dict(_require(raw, "department", "root"), "department")
    global_raw = _as_dict(_require(raw, "global", "root"), "global")
    constraints_raw = _as_dict(raw.get("constraints") or {}, "constraints")

    try:
        cfg = Config(
            meta        = meta,
            roster      = _parse_roster(dept_raw),
            resources   = GlobalResources(classrooms=[
                Classroom(
                    id       = str(_require(r, "id", f"classrooms[{i}]")),
                    capacity = int(_require(r, "capacity", f"classrooms[{i}]")),
                    type     = str(r.get("type", "")),
                )
                for i, r in enumerate(_as_list(
                    _require(global_raw, "classrooms", "global"), "classrooms"))
            ]),
            constraints = _parse_constraints(constraints_raw),
        )
    except ConfigError:
        raise
    except (TypeError, AttributeError, ValueError) as e:
        raise ConfigError(f"Malformed config: {e}") from e

    try:
        cfg.validate()
    except ValueError as e:
        raise ConfigError(str(e)) from e
    _check_unique_ids(cfg.roster.faculty,       "faculty")
    _check_unique_ids(cfg.roster.subjects,      "subjects")
    _check_unique_ids(cfg.roster.batches,       "batches")
    _check_unique_ids(cfg.resources.classrooms, "classrooms")
    return cfg


def config_to_dict(cfg: Config) -> Dict[str, Any]:
    d = cfg.to_dict()
    return {
        "meta":        d["meta"],
        "department":  d["roster"],
        "global":      d["resources"],
        "constraints": d["constraints"],
    }


def load_config(path: str | Path) -> Config:
    """Load and validate a Config from a JSON file."""
    with Path(path).open("r", encoding="utf-8") as f:
        raw = json.load(f)
    return config_from_dict(raw)


def save_config(cfg: Config, path: str | Path) -> None:
    """Serialise Config to JSON, creating parent directories if needed."""
    cfg.validate()
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        # ensure_ascii=False preserves accented names.
        # sort_keys=True keeps diffs readable in version control.
        json.dump(config_to_dict(cfg), f, ensure_ascii=False, indent=2, sort_keys=True)


def save_options(options: Sequence[Option], path: str | Path) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump({"options": [o.to_dict() for o in options]}, f,
                  ensure_ascii=False, indent=2)
