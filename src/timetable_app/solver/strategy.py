"""
Placement strategy interface.

A strategy receives the units left after pinning, the run's ScheduleBuilder
(already holding the pins), the rule and candidate layers, and the run's own
random source. It commits what it can place into the builder and returns
the rest as UnplacedLecture records. Strategies never share a builder.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Type

from ..models import SolverParams
from .candidates import CandidateResolver
from .pool import LectureUnit
from .result import UnplacedLecture
from .rules import RuleSet, ScheduleBuilder


@dataclass(frozen=True)
class PlacementContext:
    rules:      RuleSet
    candidates: CandidateResolver


def unplaced(unit: LectureUnit, reason: str) -> UnplacedLecture:
    return UnplacedLecture(
        lecture_id = unit.lecture_id,
        subject_id = unit.subject.id,
        subject    = unit.subject.name,
        batch      = unit.batch.id,
        reason     = reason,
    )


class PlacementStrategy:
    name = "base"

    def __init__(self, params: Optional[SolverParams] = None) -> None:
        self.params = params or SolverParams()
        self.stats: Dict[str, Any] = {}

    def place(self, units: Sequence[LectureUnit], builder: ScheduleBuilder,
              ctx: PlacementContext, rng: random.Random) -> List[UnplacedLecture]:
        raise NotImplementedError


_REGISTRY: Dict[str, Type[PlacementStrategy]] = {}


def register(cls: Type[PlacementStrategy]) -> Type[PlacementStrategy]:
    _REGISTRY[cls.name] = cls
    return cls


def get_strategy(name: str, params: Optional[SolverParams] = None) -> PlacementStrategy:
    try:
        cls = _REGISTRY[(name or "").lower()]
    except KeyError:
        raise ValueError(f"Unknown placement strategy: {name!r}") from None
    return cls(params)
