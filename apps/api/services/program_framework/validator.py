"""
Program Validator

Boundary check for externally produced candidates. Works on the raw decoded
JSON (not the typed model) so malformed shapes come back as violations
instead of exceptions.

Any violation rejects the whole candidate; nothing is repaired here.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .catalogue import CATALOGUE, MovementPattern
from .constants import ExperienceLevel, Goal
from .models import TrainingProfile

logger = logging.getLogger(__name__)

_GOALS = {g.value for g in Goal}
_LEVELS = {lvl.value for lvl in ExperienceLevel}

_PUSH_PATTERNS = {
    MovementPattern.HORIZONTAL_PUSH,
    MovementPattern.VERTICAL_PUSH,
    MovementPattern.CHEST_ISOLATION,
}
_PULL_PATTERNS = {
    MovementPattern.HORIZONTAL_PULL,
    MovementPattern.VERTICAL_PULL,
    MovementPattern.REAR_DELT,
}


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    violations: List[str] = field(default_factory=list)


class ProgramValidator:
    """
    Checks a candidate program against the catalogue and the profile.

    Loose mode (default) mirrors the long-standing acceptance rules: a
    non-empty schedule, a known goal and experience level, and catalogue
    ids only. Strict mode also checks the candidate against the profile.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict

    def validate(self, candidate: Any, profile: TrainingProfile) -> ValidationResult:
        if not isinstance(candidate, dict):
            return ValidationResult(ok=False, violations=["candidate is not a JSON object"])

        violations: List[str] = []

        goal = candidate.get("goal")
        if goal not in _GOALS:
            violations.append(f"goal {goal!r} is not one of {sorted(_GOALS)}")

        level = candidate.get("experienceLevel")
        if level not in _LEVELS:
            violations.append(f"experienceLevel {level!r} is not one of {sorted(_LEVELS)}")

        schedule = candidate.get("schedule")
        if not isinstance(schedule, list) or not schedule:
            violations.append("schedule must be a non-empty list")
            schedule = []

        for day_index, day in enumerate(schedule):
            violations.extend(self._check_day(day_index, day))

        if self.strict:
            violations.extend(self._strict_checks(candidate, schedule, profile))

        if violations:
            logger.debug(f"Candidate rejected with {len(violations)} violation(s)")
        return ValidationResult(ok=not violations, violations=violations)

    def _check_day(self, day_index: int, day: Any) -> List[str]:
        if not isinstance(day, dict):
            return [f"schedule[{day_index}] is not an object"]

        exercises = day.get("exercises")
        if not isinstance(exercises, list):
            return [f"schedule[{day_index}].exercises must be a list"]

        problems = []
        for ex_index, exercise in enumerate(exercises):
            where = f"schedule[{day_index}].exercises[{ex_index}]"
            if not isinstance(exercise, dict):
                problems.append(f"{where} is not an object")
                continue
            exercise_id = exercise.get("exerciseId")
            if not CATALOGUE.is_known(exercise_id):
                problems.append(f"{where}.exerciseId {exercise_id!r} is not in the catalogue")
        return problems

    def _strict_checks(
        self,
        candidate: Dict[str, Any],
        schedule: List[Any],
        profile: TrainingProfile,
    ) -> List[str]:
        problems = []

        days_per_week = candidate.get("daysPerWeek")
        if days_per_week != profile.days_per_week:
            problems.append(
                f"daysPerWeek {days_per_week!r} does not match requested {profile.days_per_week}"
            )
        if isinstance(days_per_week, int) and len(schedule) != days_per_week:
            problems.append(f"schedule has {len(schedule)} days, daysPerWeek is {days_per_week}")

        goal = candidate.get("goal")
        if goal in _GOALS and goal not in {g.value for g in profile.goals}:
            problems.append(f"goal {goal!r} is not one of the profile goals")

        push, pull = _push_pull_sets(schedule)
        if pull < push:
            problems.append(f"pull volume ({pull} sets) is below push volume ({push} sets)")

        return problems


def _push_pull_sets(schedule: List[Any]):
    """Weekly working sets on push and pull patterns."""
    push = pull = 0
    for day in schedule:
        if not isinstance(day, dict) or not isinstance(day.get("exercises"), list):
            continue
        for exercise in day["exercises"]:
            if not isinstance(exercise, dict):
                continue
            exercise_id = exercise.get("exerciseId")
            entry = CATALOGUE.get(exercise_id) if CATALOGUE.is_known(exercise_id) else None
            scheme = exercise.get("scheme")
            sets = scheme.get("sets") if isinstance(scheme, dict) else None
            if entry is None or not isinstance(sets, int):
                continue
            if entry.pattern in _PUSH_PATTERNS:
                push += sets
            elif entry.pattern in _PULL_PATTERNS:
                pull += sets
    return push, pull
