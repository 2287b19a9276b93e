"""
Fallback Synthesizer

Builds a complete 8-week program from the exercise catalogue, the derived
constraints and the split layout. Used whenever the external generator is
unavailable or its candidate is rejected, so it must always return a valid
program: every id comes from the catalogue, every day has at least one
exercise, and the periodization notes are always present.

Per day:
1. Walk the day's slot template (main lifts, accessories, core). Each slot
   lists candidates from most to least equipment-hungry; take the first one
   the equipment allows and no injury rule excludes (swapping in the rule's
   replacement where one fits).
2. Accessories that hit a priority muscle, and injury accessories such as
   face pulls, move ahead of the other accessories.
3. Trim to the session cap (accessories go first), then top up from the
   day's extension pool to the session minimum.
4. Optional conditioning finisher when the profile asks for cardio.

Usage:
    synthesizer = FallbackSynthesizer()
    plan = synthesizer.plan_for(profile)
    program = synthesizer.synthesize(profile, constraints, plan)
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union
from uuid import uuid4

from .catalogue import CATALOGUE, EquipmentKind, ExerciseCatalogueEntry, ExerciseRole, MovementPattern
from .config import ConfigService
from .constants import (
    DayType,
    Goal,
    SplitName,
    EXERCISE_PROGRESSION_NOTE,
    FALLBACK_MAX_DAYS,
    FAT_LOSS_REST_FACTOR,
    PROGRAM_DURATION_WEEKS,
    SET_SCHEMES,
    SPLIT_MIN_DAYS,
    TRAINING_PHILOSOPHY,
)
from .constraints import DerivedConstraints
from .models import GeneratedProgram, ProgramExercise, SetScheme, TrainingDay, TrainingProfile
from .split_selector import DaySpec, SplitPlan, layout_for, plan_split

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Slot:
    name: str
    candidates: Tuple[str, ...]


@dataclass(frozen=True)
class DayTemplate:
    main: Tuple[Slot, ...]
    accessories: Tuple[Slot, ...]
    core: Tuple[Slot, ...]


def _slot(name: str, *candidates: str) -> Slot:
    return Slot(name, candidates)


# Candidates run barbell → cable/machine → dumbbell → bodyweight
SQUAT = _slot("squat", "barbell-back-squat", "leg-press", "goblet-squat", "bulgarian-split-squat")
SQUAT_B = _slot("squat_b", "leg-press", "goblet-squat", "bulgarian-split-squat")
HINGE = _slot("hinge", "romanian-deadlift", "hip-thrust", "glute-bridge")
HEAVY_HINGE = _slot("heavy_hinge", "deadlift", "romanian-deadlift", "hip-thrust", "glute-bridge")
GLUTE = _slot("glute", "hip-thrust", "glute-bridge")
LUNGE = _slot("lunge", "bulgarian-split-squat", "walking-lunge")
LUNGE_B = _slot("lunge_b", "walking-lunge", "bulgarian-split-squat")
BENCH = _slot("bench", "barbell-bench-press", "dumbbell-bench-press", "push-up")
INCLINE = _slot("incline", "incline-dumbbell-press", "push-up")
OVERHEAD = _slot("overhead", "overhead-press", "dumbbell-shoulder-press", "push-up")
ROW = _slot("row", "barbell-row", "seated-cable-row", "dumbbell-row", "pull-up")
ROW_B = _slot("row_b", "seated-cable-row", "dumbbell-row", "pull-up")
VERTICAL_PULL = _slot("vertical_pull", "lat-pulldown", "pull-up")
VERTICAL_PULL_B = _slot("vertical_pull_b", "pull-up", "lat-pulldown")

CHEST_FLY = _slot("chest_fly", "cable-chest-fly")
LATERAL = _slot("lateral", "dumbbell-lateral-raise")
REAR_DELT = _slot("rear_delt", "face-pull")
BICEPS = _slot("biceps", "barbell-curl", "hammer-curl")
BICEPS_B = _slot("biceps_b", "hammer-curl", "barbell-curl")
TRICEPS = _slot("triceps", "tricep-pushdown", "skull-crusher", "overhead-tricep-extension")
TRICEPS_B = _slot("triceps_b", "skull-crusher", "overhead-tricep-extension", "tricep-pushdown")
QUAD_ISO = _slot("quad_iso", "leg-extension", "walking-lunge")
HAM_ISO = _slot("ham_iso", "leg-curl", "glute-bridge")
CALVES = _slot("calves", "standing-calf-raise")

CORE_STABLE = _slot("core_stable", "plank", "ab-wheel-rollout")
CORE_DYNAMIC = _slot("core_dynamic", "hanging-leg-raise", "ab-wheel-rollout", "plank")
CONDITIONING = _slot("conditioning", "kettlebell-swing", "box-jump", "mountain-climbers")
CONDITIONING_B = _slot("conditioning_b", "box-jump", "mountain-climbers", "kettlebell-swing")

DAY_TEMPLATES: Dict[str, DayTemplate] = {
    "full_body_a": DayTemplate(
        main=(SQUAT, BENCH, ROW, OVERHEAD),
        accessories=(BICEPS, TRICEPS, CALVES),
        core=(CORE_STABLE,),
    ),
    "full_body_b": DayTemplate(
        main=(HINGE, INCLINE, VERTICAL_PULL, LUNGE),
        accessories=(REAR_DELT, LATERAL, HAM_ISO),
        core=(CORE_DYNAMIC,),
    ),
    "upper_strength": DayTemplate(
        main=(BENCH, ROW, OVERHEAD, VERTICAL_PULL),
        accessories=(TRICEPS, BICEPS, REAR_DELT),
        core=(CORE_STABLE,),
    ),
    "upper_volume": DayTemplate(
        main=(INCLINE, VERTICAL_PULL_B, ROW_B),
        accessories=(LATERAL, CHEST_FLY, REAR_DELT, BICEPS_B, TRICEPS_B),
        core=(),
    ),
    "lower_quad": DayTemplate(
        main=(SQUAT, LUNGE),
        accessories=(QUAD_ISO, HAM_ISO, CALVES),
        core=(CORE_STABLE,),
    ),
    "lower_hip": DayTemplate(
        main=(HEAVY_HINGE, GLUTE, LUNGE_B),
        accessories=(HAM_ISO, CALVES),
        core=(CORE_DYNAMIC,),
    ),
    "push": DayTemplate(
        main=(BENCH, OVERHEAD, INCLINE),
        accessories=(LATERAL, CHEST_FLY, TRICEPS, TRICEPS_B),
        core=(),
    ),
    "push_b": DayTemplate(
        main=(OVERHEAD, INCLINE, BENCH),
        accessories=(TRICEPS_B, LATERAL, CHEST_FLY),
        core=(CORE_STABLE,),
    ),
    "pull": DayTemplate(
        main=(VERTICAL_PULL, ROW, ROW_B),
        accessories=(REAR_DELT, BICEPS, BICEPS_B),
        core=(CORE_DYNAMIC,),
    ),
    "pull_b": DayTemplate(
        main=(ROW, VERTICAL_PULL_B),
        accessories=(REAR_DELT, BICEPS_B, BICEPS),
        core=(CORE_STABLE,),
    ),
    "legs": DayTemplate(
        main=(SQUAT, HINGE, LUNGE),
        accessories=(QUAD_ISO, HAM_ISO, CALVES),
        core=(CORE_STABLE,),
    ),
    "legs_b": DayTemplate(
        main=(HEAVY_HINGE, SQUAT_B, LUNGE_B),
        accessories=(HAM_ISO, QUAD_ISO, CALVES),
        core=(CORE_DYNAMIC,),
    ),
    "conditioning": DayTemplate(
        main=(CONDITIONING, CONDITIONING_B),
        accessories=(),
        core=(CORE_DYNAMIC, CORE_STABLE),
    ),
}

_UPPER_PATTERNS = {
    MovementPattern.HORIZONTAL_PUSH, MovementPattern.CHEST_ISOLATION, MovementPattern.VERTICAL_PUSH,
    MovementPattern.HORIZONTAL_PULL, MovementPattern.VERTICAL_PULL, MovementPattern.REAR_DELT,
    MovementPattern.LATERAL_DELT, MovementPattern.BICEPS, MovementPattern.TRICEPS,
}
_LOWER_PATTERNS = {
    MovementPattern.KNEE_DOMINANT, MovementPattern.HIP_HINGE, MovementPattern.HAMSTRING,
    MovementPattern.GLUTE, MovementPattern.CALVES,
}
_EXTENSION_PATTERNS = {
    DayType.UPPER: _UPPER_PATTERNS,
    DayType.PUSH: _UPPER_PATTERNS,
    DayType.PULL: _UPPER_PATTERNS,
    DayType.LOWER: _LOWER_PATTERNS,
    DayType.LEGS: _LOWER_PATTERNS,
    DayType.FULL_BODY: _UPPER_PATTERNS | _LOWER_PATTERNS,
    DayType.CARDIO: {MovementPattern.CONDITIONING},
}
# Days on which injury accessories (face pulls) are added
_ACCESSORY_DAY_TYPES = {DayType.UPPER, DayType.PUSH, DayType.PULL, DayType.FULL_BODY}

_MUSCLE_ALIASES = {
    "arms": ("biceps", "triceps"),
    "legs": ("quads", "hamstrings", "glutes", "calves"),
    "delts": ("shoulders",),
    "lats": ("back",),
    "abs": ("core",),
    "pecs": ("chest",),
}

_SPLIT_TITLES = {
    SplitName.FULL_BODY: "Full-Body",
    SplitName.UPPER_LOWER: "Upper/Lower",
    SplitName.PPL_UPPER: "Push/Pull/Legs + Upper",
    SplitName.UPPER_LOWER_EMPHASIS: "Upper/Lower Emphasis",
    SplitName.PPL_FIVE: "Push/Pull/Legs + Upper/Lower",
    SplitName.PPL_SIX: "Push/Pull/Legs",
}

DEFAULT_DESCRIPTION = "A personalised program built around your training profile."


class FallbackSynthesizer:
    """
    Deterministic program construction from fixed templates.

    Stateless; one instance can serve concurrent requests.
    """

    def plan_for(self, profile: TrainingProfile) -> SplitPlan:
        """Split plan narrowed to the day range the templates cover."""
        return plan_split(
            profile.days_per_week,
            profile.program_style,
            max_days=FALLBACK_MAX_DAYS,
            priority_muscles=profile.priority_muscles or (),
        )

    def synthesize(
        self,
        profile: TrainingProfile,
        constraints: DerivedConstraints,
        split: Union[SplitPlan, SplitName, None] = None,
    ) -> GeneratedProgram:
        days = max(SPLIT_MIN_DAYS, min(FALLBACK_MAX_DAYS, profile.days_per_week))
        split_name, layout = self._resolve_layout(profile, split, days)

        priorities = _expand_priorities(profile.priority_muscles or ())
        schedule = [
            self._build_day(spec, profile, constraints, priorities) for spec in layout
        ]

        goal = profile.primary_goal
        tier = constraints.experience_tier
        tags = ["fallback", goal.value, split_name.value, tier.value]
        if constraints.equipment.bodyweight_only:
            tags.append("bodyweight")
        tags.extend(f"{rule.family.value}-friendly" for rule in constraints.injury_substitutions)

        program = GeneratedProgram(
            id=str(uuid4()),
            name=f"{PROGRAM_DURATION_WEEKS}-Week {_SPLIT_TITLES[split_name]} Program",
            goal=goal.value,
            experience_level=tier.value,
            description=profile.ai_summary or DEFAULT_DESCRIPTION,
            training_philosophy=TRAINING_PHILOSOPHY,
            weekly_progression_notes=ConfigService.get_weekly_progression_notes(),
            days_per_week=days,
            estimated_duration_weeks=PROGRAM_DURATION_WEEKS,
            schedule=schedule,
            tags=tags,
            is_custom=True,
            is_ai_generated=True,
            generation_source="fallback",
        )
        logger.info(
            f"Synthesized fallback program: {split_name.value} {days}d {tier.value} "
            f"({sum(len(d.exercises) for d in schedule)} exercises)"
        )
        return program

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _resolve_layout(
        self,
        profile: TrainingProfile,
        split: Union[SplitPlan, SplitName, None],
        days: int,
    ) -> Tuple[SplitName, Tuple[DaySpec, ...]]:
        if isinstance(split, SplitPlan) and split.days == days:
            return split.split, split.days_layout
        if isinstance(split, SplitName):
            return split, layout_for(split, days, profile.priority_muscles or ())
        # Missing plan, or one built for a day count outside the template range
        plan = self.plan_for(profile)
        return plan.split, plan.days_layout

    # ------------------------------------------------------------------
    # Day construction
    # ------------------------------------------------------------------

    def _build_day(
        self,
        spec: DaySpec,
        profile: TrainingProfile,
        constraints: DerivedConstraints,
        priorities: Set[str],
    ) -> TrainingDay:
        template = DAY_TEMPLATES.get(spec.template, DAY_TEMPLATES["full_body_a"])
        used: List[str] = []

        main = self._fill(template.main, constraints, used)
        core = self._fill(template.core, constraints, used)
        accessories = self._fill(template.accessories, constraints, used)

        injury_accessories: List[str] = []
        if spec.day_type in _ACCESSORY_DAY_TYPES:
            for rule in constraints.injury_substitutions:
                for exercise_id in rule.accessory_ids:
                    if exercise_id in injury_accessories or exercise_id in main or exercise_id in core:
                        continue
                    if exercise_id in accessories:
                        injury_accessories.append(exercise_id)
                    elif exercise_id not in used and _allowed(exercise_id, constraints):
                        injury_accessories.append(exercise_id)
                        used.append(exercise_id)

        prioritised = injury_accessories + [
            a for a in accessories if _hits(a, priorities) and a not in injury_accessories
        ]
        others = [a for a in accessories if a not in prioritised]

        wants_finisher = profile.include_cardio and spec.day_type != DayType.CARDIO
        cap = constraints.max_exercises_per_session - (1 if wants_finisher else 0)
        floor = constraints.min_exercises_per_session - (1 if wants_finisher else 0)

        # Keep order: main lifts, priority accessories, core, everything else
        kept = set((main + prioritised + core + others)[:cap])
        if len(kept) < floor:
            for exercise_id in self._extension_pool(spec.day_type, constraints, used):
                if len(kept) >= floor:
                    break
                others.append(exercise_id)
                used.append(exercise_id)
                kept.add(exercise_id)

        session_order = [e for e in main + prioritised + others + core if e in kept]

        exercises = [
            self._prescribe(exercise_id, profile, constraints) for exercise_id in session_order
        ]

        if wants_finisher:
            finisher = self._fill((CONDITIONING, CONDITIONING_B), constraints, list(session_order))
            if finisher:
                exercises.append(
                    self._prescribe(finisher[0], profile, constraints, optional=True)
                )

        if not exercises:
            # Every day carries at least one exercise
            exercises.append(self._prescribe("plank", profile, constraints))

        return TrainingDay(label=spec.label, type=spec.day_type.value, exercises=exercises)

    def _fill(
        self,
        slots: Sequence[Slot],
        constraints: DerivedConstraints,
        used: List[str],
    ) -> List[str]:
        picked = []
        for slot in slots:
            exercise_id = _pick(slot, constraints, used)
            if exercise_id is not None:
                picked.append(exercise_id)
                used.append(exercise_id)
        return picked

    def _extension_pool(
        self,
        day_type: DayType,
        constraints: DerivedConstraints,
        used: Iterable[str],
    ) -> List[str]:
        patterns = _EXTENSION_PATTERNS.get(day_type, _UPPER_PATTERNS | _LOWER_PATTERNS)
        taken = set(used)
        pool = [
            e.id for e in CATALOGUE
            if (e.pattern in patterns or e.role == ExerciseRole.CORE)
            and e.id not in taken
            and _allowed(e.id, constraints)
        ]
        # Isolation work before extra core
        return sorted(pool, key=lambda i: CATALOGUE.get(i).role == ExerciseRole.CORE)

    # ------------------------------------------------------------------
    # Prescription
    # ------------------------------------------------------------------

    def _prescribe(
        self,
        exercise_id: str,
        profile: TrainingProfile,
        constraints: DerivedConstraints,
        optional: bool = False,
    ) -> ProgramExercise:
        entry = CATALOGUE.get(exercise_id)
        base = SET_SCHEMES[constraints.experience_tier.value][entry.role.value]

        rest = int(base["rest"])
        if profile.primary_goal == Goal.FAT_LOSS:
            rest = int(rest * FAT_LOSS_REST_FACTOR)

        notes = [EXERCISE_PROGRESSION_NOTE, *constraints.cues_for(entry.pattern)]
        kwargs = {}
        if optional:
            notes.insert(0, "Optional conditioning finisher.")
            # Only finishers carry the flag on the wire
            kwargs["is_optional"] = True
        return ProgramExercise(
            exercise_id=exercise_id,
            scheme=SetScheme(
                sets=int(base["sets"]),
                reps=str(base["reps"]),
                rest_seconds=rest,
                rpe=base["rpe"],
            ),
            notes=" ".join(notes),
            **kwargs,
        )


# ----------------------------------------------------------------------
# Selection helpers
# ----------------------------------------------------------------------

def _allowed(exercise_id: str, constraints: DerivedConstraints) -> bool:
    """Catalogue member, equipment available, not excluded by an injury rule."""
    entry: Optional[ExerciseCatalogueEntry] = CATALOGUE.get(exercise_id)
    if entry is None or exercise_id in constraints.excluded_exercise_ids:
        return False
    eq = constraints.equipment
    if entry.equipment == EquipmentKind.BODYWEIGHT:
        return True
    if eq.bodyweight_only:
        return False
    if entry.equipment == EquipmentKind.BARBELL:
        return eq.has_barbell
    if entry.equipment == EquipmentKind.CABLE:
        return eq.has_cable
    return eq.has_dumbbell


def _pick(slot: Slot, constraints: DerivedConstraints, used: Iterable[str]) -> Optional[str]:
    taken = set(used)
    excluded = constraints.excluded_exercise_ids
    for candidate in slot.candidates:
        if candidate in excluded:
            for replacement in constraints.replacement_for(candidate):
                if replacement not in taken and _allowed(replacement, constraints):
                    return replacement
            continue
        if candidate not in taken and _allowed(candidate, constraints):
            return candidate
    return None


def _expand_priorities(priority_muscles: Iterable[str]) -> Set[str]:
    expanded: Set[str] = set()
    for muscle in priority_muscles:
        key = muscle.strip().lower()
        if not key:
            continue
        expanded.add(key)
        expanded.update(_MUSCLE_ALIASES.get(key, ()))
    return expanded


def _hits(exercise_id: str, priorities: Set[str]) -> bool:
    if not priorities:
        return False
    entry = CATALOGUE.get(exercise_id)
    return any(p in m or m in p for p in priorities for m in entry.muscles)
