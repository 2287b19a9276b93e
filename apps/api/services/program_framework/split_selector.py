"""
Split Selector

Deterministic decision table: (days per week, style preference) → named
weekly split, plus the day-by-day layout for each split.

SPLIT_TABLE and SPLIT_LAYOUTS are rendered into the generation instruction
AND used by the fallback synthesizer as its structural template, so both
paths agree on what each split means.

Usage:
    split = select_split(4, ProgramStyle.PUSH_PULL_LEGS)   # PPL_UPPER
    plan = plan_split(9, None, max_days=FALLBACK_MAX_DAYS)
    plan.days        # 5
    plan.deviations  # [Deviation(field="daysPerWeek", requested=9, applied=5, ...)]
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from .constants import (
    DayType,
    ProgramStyle,
    SplitName,
    SPLIT_MAX_DAYS,
    SPLIT_MIN_DAYS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DaySpec:
    """One day of a split layout."""
    label: str
    day_type: DayType
    template: str


@dataclass(frozen=True)
class Deviation:
    """A request value the engine could not honour literally."""
    field: str
    requested: int
    applied: int
    reason: str

    def to_dict(self):
        return {
            "field": self.field,
            "requested": self.requested,
            "applied": self.applied,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class SplitPlan:
    split: SplitName
    requested_days: int
    days: int
    days_layout: Tuple[DaySpec, ...]
    deviations: Tuple[Deviation, ...] = ()


# Order matters: first matching row wins. Every (days, style) in [2, 7]
# matches exactly one row before the table runs out.
_Rule = Tuple[str, Callable[[int, Optional[ProgramStyle]], bool], SplitName]

SPLIT_TABLE: Tuple[_Rule, ...] = (
    ("days <= 3", lambda d, s: d <= 3, SplitName.FULL_BODY),
    ("days == 4 and style == push-pull-legs",
     lambda d, s: d == 4 and s == ProgramStyle.PUSH_PULL_LEGS, SplitName.PPL_UPPER),
    ("days == 4", lambda d, s: d == 4, SplitName.UPPER_LOWER),
    ("days == 5 and style == upper-lower",
     lambda d, s: d == 5 and s == ProgramStyle.UPPER_LOWER, SplitName.UPPER_LOWER_EMPHASIS),
    ("days == 5", lambda d, s: d == 5, SplitName.PPL_FIVE),
    ("days >= 6", lambda d, s: d >= 6, SplitName.PPL_SIX),
)

_LOWER_BODY_MUSCLES = ("quad", "hamstring", "glute", "calf", "calves", "leg", "hip")

_FB_A = DaySpec("Full Body A", DayType.FULL_BODY, "full_body_a")
_FB_B = DaySpec("Full Body B", DayType.FULL_BODY, "full_body_b")
_UPPER_STRENGTH = DaySpec("Upper Strength", DayType.UPPER, "upper_strength")
_UPPER_VOLUME = DaySpec("Upper Volume", DayType.UPPER, "upper_volume")
_LOWER_QUAD = DaySpec("Lower Quad-Dominant", DayType.LOWER, "lower_quad")
_LOWER_HIP = DaySpec("Lower Hip-Dominant", DayType.LOWER, "lower_hip")
_PUSH = DaySpec("Push", DayType.PUSH, "push")
_PULL = DaySpec("Pull", DayType.PULL, "pull")
_LEGS = DaySpec("Legs", DayType.LEGS, "legs")
_UPPER = DaySpec("Upper", DayType.UPPER, "upper_strength")
_LOWER = DaySpec("Lower", DayType.LOWER, "lower_quad")
_UPPER_EMPHASIS = DaySpec("Upper Emphasis", DayType.UPPER, "upper_volume")
_LOWER_EMPHASIS = DaySpec("Lower Emphasis", DayType.LOWER, "lower_hip")
_CONDITIONING = DaySpec("Conditioning", DayType.CARDIO, "conditioning")

SPLIT_LAYOUTS = {
    SplitName.FULL_BODY: (_FB_A, _FB_B),  # alternates to fill 2-3 days
    SplitName.UPPER_LOWER: (_UPPER_STRENGTH, _LOWER_QUAD, _UPPER_VOLUME, _LOWER_HIP),
    SplitName.PPL_UPPER: (_PUSH, _PULL, _LEGS, _UPPER),
    SplitName.UPPER_LOWER_EMPHASIS: (
        _UPPER_STRENGTH, _LOWER_QUAD, _UPPER_VOLUME, _LOWER_HIP, _UPPER_EMPHASIS,
    ),
    SplitName.PPL_FIVE: (_PUSH, _PULL, _LEGS, _UPPER, _LOWER),
    SplitName.PPL_SIX: (
        DaySpec("Push A", DayType.PUSH, "push"),
        DaySpec("Pull A", DayType.PULL, "pull"),
        DaySpec("Legs A", DayType.LEGS, "legs"),
        DaySpec("Push B", DayType.PUSH, "push_b"),
        DaySpec("Pull B", DayType.PULL, "pull_b"),
        DaySpec("Legs B", DayType.LEGS, "legs_b"),
    ),
}


def clamp_days(
    days_per_week: int,
    low: int = SPLIT_MIN_DAYS,
    high: int = SPLIT_MAX_DAYS,
    reason: str = "outside supported range",
) -> Tuple[int, Optional[Deviation]]:
    """Clamp a day count, returning the deviation when one was applied."""
    applied = max(low, min(high, int(days_per_week)))
    if applied == days_per_week:
        return applied, None
    deviation = Deviation(
        field="daysPerWeek",
        requested=int(days_per_week),
        applied=applied,
        reason=f"{reason} [{low}, {high}]",
    )
    logger.warning(
        f"daysPerWeek clamped {days_per_week} -> {applied} ({deviation.reason})",
        extra={"extra_fields": deviation.to_dict()},
    )
    return applied, deviation


def select_split(days_per_week: int, style: Optional[ProgramStyle] = None) -> SplitName:
    """Total function over all ints: clamp to [2, 7], then first matching row."""
    days, _ = clamp_days(days_per_week)
    for _description, matches, split in SPLIT_TABLE:
        if matches(days, style):
            return split
    # Unreachable for any clamped input; the table covers 2..7 completely.
    raise AssertionError(f"split table has no row for days={days} style={style}")


def layout_for(
    split: SplitName,
    days: int,
    priority_muscles: Iterable[str] = (),
) -> Tuple[DaySpec, ...]:
    """Day-by-day layout for a split at a given (clamped) day count."""
    base = SPLIT_LAYOUTS[split]

    if split == SplitName.UPPER_LOWER_EMPHASIS and _prioritises_lower_body(priority_muscles):
        base = base[:-1] + (_LOWER_EMPHASIS,)

    if split == SplitName.FULL_BODY:
        days_layout = [base[i % len(base)] for i in range(days)]
    else:
        days_layout = list(base[:days])
        while len(days_layout) < days:
            days_layout.append(_CONDITIONING)

    return tuple(
        DaySpec(f"Day {i + 1}: {spec.label}", spec.day_type, spec.template)
        for i, spec in enumerate(days_layout)
    )


def plan_split(
    days_per_week: int,
    style: Optional[ProgramStyle] = None,
    max_days: int = SPLIT_MAX_DAYS,
    priority_muscles: Iterable[str] = (),
) -> SplitPlan:
    """
    Select a split and lay it out, recording any clamp as a deviation.

    `max_days` narrows the range further (the fallback path passes 5).
    """
    deviations: List[Deviation] = []
    days, deviation = clamp_days(
        days_per_week,
        high=min(max_days, SPLIT_MAX_DAYS),
        reason="outside supported range" if max_days >= SPLIT_MAX_DAYS
        else "fallback templates cover",
    )
    if deviation:
        deviations.append(deviation)

    split = select_split(days, style)
    return SplitPlan(
        split=split,
        requested_days=int(days_per_week),
        days=days,
        days_layout=layout_for(split, days, priority_muscles),
        deviations=tuple(deviations),
    )


def render_split_table() -> str:
    """Decision table + layouts as plain text for the generation instruction."""
    lines = ["SPLIT DECISION TABLE (first matching row wins; days clamped to 2-7):"]
    for description, _matches, split in SPLIT_TABLE:
        lines.append(f"- {description} → {split.value}")
    lines.append("SPLIT LAYOUTS:")
    for split, layout in SPLIT_LAYOUTS.items():
        days = " / ".join(f"{d.label} ({d.day_type.value})" for d in layout)
        lines.append(f"- {split.value}: {days}")
    lines.append("- full-body alternates A/B; push-pull-legs-six adds a conditioning day at 7 days.")
    return "\n".join(lines)


def _prioritises_lower_body(priority_muscles: Iterable[str]) -> bool:
    for muscle in priority_muscles or ():
        lower = muscle.lower()
        if any(key in lower for key in _LOWER_BODY_MUSCLES):
            return True
    return False
