"""
Profile Constraint Deriver

Maps a raw TrainingProfile into the hard constraints the rest of the engine
works from: experience tier, equipment capabilities, injury substitutions
and the per-session exercise range.

Equipment and injury tags are matched against an explicit vocabulary first.
Free-text tags (legacy onboarding answers like "home gym with dumbbells")
go through the regex shim in this module only; nothing downstream sees a
raw tag.

Usage:
    constraints = derive_constraints(profile)
    if constraints.equipment.bodyweight_only:
        ...
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, Tuple

from .catalogue import MovementPattern
from .config import ConfigService
from .constants import EquipmentTag, ExperienceLevel, InjuryFamily
from .models import TrainingProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EquipmentCapabilities:
    has_barbell: bool
    has_cable: bool
    has_dumbbell: bool
    bodyweight_only: bool


@dataclass(frozen=True)
class InjurySubstitution:
    """One injury family's exclusions, replacements and coaching cue."""
    family: InjuryFamily
    trigger_pattern: str
    excluded_exercise_ids: Tuple[str, ...]
    preferred_exercise_ids: Tuple[str, ...]
    coaching_cue: str
    # excluded id → replacements in preference order
    replacements: Dict[str, Tuple[str, ...]] = field(default_factory=dict, hash=False)
    accessory_ids: Tuple[str, ...] = ()
    # patterns whose exercises carry the cue
    cue_patterns: Tuple[MovementPattern, ...] = ()


@dataclass(frozen=True)
class DerivedConstraints:
    experience_tier: ExperienceLevel
    equipment: EquipmentCapabilities
    injury_substitutions: Tuple[InjurySubstitution, ...]
    exercise_range: Tuple[int, int]

    @property
    def min_exercises_per_session(self) -> int:
        return self.exercise_range[0]

    @property
    def max_exercises_per_session(self) -> int:
        return self.exercise_range[1]

    @property
    def excluded_exercise_ids(self) -> frozenset:
        return frozenset(
            ex for rule in self.injury_substitutions for ex in rule.excluded_exercise_ids
        )

    def replacement_for(self, exercise_id: str) -> Tuple[str, ...]:
        for rule in self.injury_substitutions:
            if exercise_id in rule.replacements:
                return rule.replacements[exercise_id]
        return ()

    def cues_for(self, pattern: MovementPattern) -> Tuple[str, ...]:
        return tuple(
            rule.coaching_cue for rule in self.injury_substitutions
            if pattern in rule.cue_patterns
        )


# ---------------------------------------------------------------------------
# Equipment
# ---------------------------------------------------------------------------

_BARBELL_RE = re.compile(r"barbell|full|gym", re.IGNORECASE)
_CABLE_RE = re.compile(r"cable|machine|full|gym", re.IGNORECASE)
_DUMBBELL_RE = re.compile(r"dumb\s*-?bell|kettle\s*-?bell|full|gym|home", re.IGNORECASE)
_BODYWEIGHT_RE = re.compile(r"body\s*-?weight|no equipment|calisthenics|^none$", re.IGNORECASE)

# Vocabulary tag → (barbell, cable, dumbbell, bodyweight)
_TAG_CAPABILITIES = {
    EquipmentTag.BARBELL: (True, False, False, False),
    EquipmentTag.DUMBBELL: (False, False, True, False),
    EquipmentTag.KETTLEBELL: (False, False, True, False),
    EquipmentTag.CABLE: (False, True, False, False),
    EquipmentTag.MACHINE: (False, True, False, False),
    EquipmentTag.FULL_GYM: (True, True, True, False),
    EquipmentTag.BODYWEIGHT: (False, False, False, True),
    EquipmentTag.RESISTANCE_BAND: (False, False, False, False),
}


def _tag_capabilities(tag: str) -> Tuple[bool, bool, bool, bool]:
    try:
        return _TAG_CAPABILITIES[EquipmentTag(tag.strip().lower())]
    except ValueError:
        pass
    # Free-text compatibility shim
    return (
        bool(_BARBELL_RE.search(tag)),
        bool(_CABLE_RE.search(tag)),
        bool(_DUMBBELL_RE.search(tag)),
        bool(_BODYWEIGHT_RE.search(tag.strip())),
    )


def derive_equipment(equipment: Iterable[str]) -> EquipmentCapabilities:
    """Equipment tags → capability flags. Empty means a full gym."""
    tags = [t for t in equipment if t and t.strip()]
    if not tags:
        return EquipmentCapabilities(
            has_barbell=True, has_cable=True, has_dumbbell=True, bodyweight_only=False
        )

    flags = [_tag_capabilities(t) for t in tags]
    bodyweight_only = all(f[3] for f in flags)
    return EquipmentCapabilities(
        has_barbell=not bodyweight_only and any(f[0] for f in flags),
        has_cable=not bodyweight_only and any(f[1] for f in flags),
        has_dumbbell=not bodyweight_only and any(f[2] for f in flags),
        bodyweight_only=bodyweight_only,
    )


# ---------------------------------------------------------------------------
# Injuries
# ---------------------------------------------------------------------------

_SHOULDER_RULE = InjurySubstitution(
    family=InjuryFamily.SHOULDER,
    trigger_pattern=r"shoulder|rotator|impinge|labrum|ac joint",
    excluded_exercise_ids=("overhead-press", "barbell-bench-press", "overhead-tricep-extension"),
    preferred_exercise_ids=("dumbbell-shoulder-press", "dumbbell-bench-press", "face-pull"),
    coaching_cue=(
        "Shoulder: press with a neutral grip in a pain-free range. "
        "No behind-the-neck or barbell overhead work."
    ),
    replacements={
        "overhead-press": ("dumbbell-shoulder-press",),
        "barbell-bench-press": ("dumbbell-bench-press", "push-up"),
    },
    accessory_ids=("face-pull",),
    cue_patterns=(MovementPattern.HORIZONTAL_PUSH, MovementPattern.VERTICAL_PUSH),
)

_BACK_RULE = InjurySubstitution(
    family=InjuryFamily.BACK,
    trigger_pattern=r"back|spine|spinal|lumbar|disc|sciatica",
    excluded_exercise_ids=("deadlift", "romanian-deadlift"),
    preferred_exercise_ids=("hip-thrust", "glute-bridge"),
    coaching_cue="Back: brace and keep a neutral spine; stop the set if you feel back pain.",
    replacements={
        "deadlift": ("hip-thrust", "glute-bridge"),
        "romanian-deadlift": ("hip-thrust", "glute-bridge"),
    },
    cue_patterns=(MovementPattern.HIP_HINGE, MovementPattern.GLUTE, MovementPattern.HORIZONTAL_PULL),
)

_KNEE_RULE = InjurySubstitution(
    family=InjuryFamily.KNEE,
    trigger_pattern=r"knee|acl|mcl|menisc|patell",
    excluded_exercise_ids=("barbell-back-squat",),
    preferred_exercise_ids=("leg-press", "goblet-squat"),
    coaching_cue="Knee: track knees over toes and keep depth pain-free.",
    replacements={
        "barbell-back-squat": ("leg-press", "goblet-squat"),
    },
    cue_patterns=(MovementPattern.KNEE_DOMINANT,),
)

INJURY_RULES: Tuple[InjurySubstitution, ...] = (_SHOULDER_RULE, _BACK_RULE, _KNEE_RULE)
_RULE_REGEX = {rule.family: re.compile(rule.trigger_pattern) for rule in INJURY_RULES}


def derive_injury_substitutions(injuries: Iterable[str]) -> Tuple[InjurySubstitution, ...]:
    """Scan injury tags for keyword families. Rules are independent and additive."""
    tags = [t.strip().lower() for t in injuries if t and t.strip()]
    if not tags:
        return ()

    families = set()
    for tag in tags:
        try:
            families.add(InjuryFamily(tag))
        except ValueError:
            pass

    text = " ".join(tags)
    matched = []
    for rule in INJURY_RULES:
        if rule.family in families or _RULE_REGEX[rule.family].search(text):
            matched.append(rule)
    return tuple(matched)


# ---------------------------------------------------------------------------
# Tier and session size
# ---------------------------------------------------------------------------

def derive_experience_tier(training_age_years: float) -> ExperienceLevel:
    thresholds = ConfigService.get_experience_thresholds()
    if training_age_years <= thresholds.get("beginner_max_years", 0):
        return ExperienceLevel.BEGINNER
    if training_age_years <= thresholds.get("intermediate_max_years", 2):
        return ExperienceLevel.INTERMEDIATE
    return ExperienceLevel.ADVANCED


def derive_exercise_range(session_duration_minutes: int) -> Tuple[int, int]:
    ranges, long_range = ConfigService.get_session_exercise_ranges()
    for max_minutes, exercise_range in ranges:
        if session_duration_minutes <= max_minutes:
            return exercise_range
    return long_range


def derive_constraints(profile: TrainingProfile) -> DerivedConstraints:
    """Pure: profile in, constraints out. No external calls."""
    constraints = DerivedConstraints(
        experience_tier=derive_experience_tier(profile.training_age_years),
        equipment=derive_equipment(profile.equipment),
        injury_substitutions=derive_injury_substitutions(profile.injuries),
        exercise_range=derive_exercise_range(profile.session_duration_minutes),
    )
    logger.debug(
        f"Derived constraints: tier={constraints.experience_tier.value} "
        f"equipment={constraints.equipment} "
        f"injuries={[r.family.value for r in constraints.injury_substitutions]} "
        f"range={constraints.exercise_range}"
    )
    return constraints


def describe_constraints(constraints: DerivedConstraints) -> Dict[str, object]:
    """JSON-friendly view, used by the prompt and the preview endpoint."""
    eq = constraints.equipment
    return {
        "experienceTier": constraints.experience_tier.value,
        "equipment": {
            "hasBarbell": eq.has_barbell,
            "hasCable": eq.has_cable,
            "hasDumbbell": eq.has_dumbbell,
            "bodyweightOnly": eq.bodyweight_only,
        },
        "injurySubstitutions": [
            {
                "family": rule.family.value,
                "excludedExerciseIds": list(rule.excluded_exercise_ids),
                "preferredExerciseIds": list(rule.preferred_exercise_ids),
                "coachingCue": rule.coaching_cue,
            }
            for rule in constraints.injury_substitutions
        ],
        "minExercisesPerSession": constraints.min_exercises_per_session,
        "maxExercisesPerSession": constraints.max_exercises_per_session,
    }
