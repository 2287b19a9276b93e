"""
Constants for program generation.

These are DEFAULTS that can be overridden by config (see config.py).
They exist here for type safety and documentation.
"""

from enum import Enum
from typing import Dict, List, Tuple


class Goal(str, Enum):
    """Training goals collected during onboarding."""
    HYPERTROPHY = "hypertrophy"
    FAT_LOSS = "fat-loss"
    GENERAL_FITNESS = "general-fitness"


class ExperienceLevel(str, Enum):
    """Experience tier derived from training age."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class DayType(str, Enum):
    """Session types a schedule day can take."""
    FULL_BODY = "full-body"
    UPPER = "upper"
    LOWER = "lower"
    PUSH = "push"
    PULL = "pull"
    LEGS = "legs"
    CARDIO = "cardio"
    REST = "rest"


class ProgramStyle(str, Enum):
    """Optional split preference from the profile."""
    PUSH_PULL_LEGS = "push-pull-legs"
    UPPER_LOWER = "upper-lower"
    FULL_BODY = "full-body"
    ANY = "any"


class SplitName(str, Enum):
    """Named weekly splits."""
    FULL_BODY = "full-body"
    UPPER_LOWER = "upper-lower"
    PPL_UPPER = "push-pull-legs-upper"
    UPPER_LOWER_EMPHASIS = "upper-lower-emphasis"
    PPL_FIVE = "push-pull-legs-five"
    PPL_SIX = "push-pull-legs-six"


class EquipmentTag(str, Enum):
    """Explicit equipment vocabulary accepted at the input boundary."""
    BARBELL = "barbell"
    DUMBBELL = "dumbbell"
    CABLE = "cable"
    MACHINE = "machine"
    KETTLEBELL = "kettlebell"
    BODYWEIGHT = "bodyweight"
    FULL_GYM = "full-gym"
    RESISTANCE_BAND = "resistance-band"


class InjuryFamily(str, Enum):
    """Injury keyword families that drive exercise substitution."""
    SHOULDER = "shoulder"
    BACK = "back"
    KNEE = "knee"


# Program shape
PROGRAM_DURATION_WEEKS = 8
SPLIT_MIN_DAYS = 2
SPLIT_MAX_DAYS = 7
# The fallback templates only cover up to five sessions a week
FALLBACK_MAX_DAYS = 5

# Training age (years) → experience tier. 0 is beginner, <= 2 intermediate.
EXPERIENCE_THRESHOLDS = {
    "beginner_max_years": 0,
    "intermediate_max_years": 2,
}

# Session length (minutes, inclusive upper bound) → (min, max) exercises.
# Anything longer than the last bound gets SESSION_EXERCISE_RANGE_LONG.
SESSION_EXERCISE_RANGES: List[Tuple[int, Tuple[int, int]]] = [
    (45, (4, 5)),
    (60, (5, 6)),
    (75, (6, 7)),
]
SESSION_EXERCISE_RANGE_LONG: Tuple[int, int] = (7, 8)

# Fat-loss sessions keep density up
FAT_LOSS_REST_FACTOR = 0.75

# 8-week linear periodization arc, one line per week
WEEKLY_PROGRESSION_NOTES: List[str] = [
    "Week 1 (accumulation): 3 working sets per exercise at RPE 6. Learn the movements and log your loads.",
    "Week 2 (accumulation): add a set where recovery allows (3-4 sets) and push to RPE 7.",
    "Week 3 (accumulation): 4 sets at RPE 8. Last block before the deload, keep form strict.",
    "Week 4 (deload): 2 sets per exercise, cut load by ~20%, stay around RPE 6.",
    "Week 5 (intensification): 4 sets at RPE 7 with loads above week 3.",
    "Week 6 (intensification): 4-5 sets at RPE 8. Add load before adding reps.",
    "Week 7 (intensification): 5 sets at RPE 9 on compounds, 1 rep in reserve.",
    "Week 8 (test or deload): test a top set on your main lifts, or repeat the week 4 deload if fatigue is high.",
]

EXERCISE_PROGRESSION_NOTE = (
    "Wk 1-3 accumulate: 3→4 sets, RPE 6→8. "
    "Wk 4 deload: 2 sets, ~20% lighter, RPE 6. "
    "Wk 5-7 intensify: 4→5 sets, RPE 7→9. "
    "Wk 8: test a top set or deload again."
)

TRAINING_PHILOSOPHY = (
    "Linear periodization over eight weeks: three accumulation weeks build volume, "
    "a mandatory deload in week 4 clears fatigue, three intensification weeks push "
    "load and effort, and week 8 is either a test week or a second deload."
)

# Base schemes by (tier, role): sets, reps, rest seconds, RPE
SET_SCHEMES: Dict[str, Dict[str, Dict[str, object]]] = {
    ExperienceLevel.BEGINNER.value: {
        "compound": {"sets": 3, "reps": "8-12", "rest": 120, "rpe": 6},
        "isolation": {"sets": 3, "reps": "10-15", "rest": 75, "rpe": 6},
        "core": {"sets": 3, "reps": "30-45s", "rest": 60, "rpe": 6},
        "conditioning": {"sets": 3, "reps": "30s", "rest": 60, "rpe": 7},
    },
    ExperienceLevel.INTERMEDIATE.value: {
        "compound": {"sets": 3, "reps": "8-10", "rest": 150, "rpe": 7},
        "isolation": {"sets": 3, "reps": "10-12", "rest": 90, "rpe": 7},
        "core": {"sets": 3, "reps": "45s", "rest": 60, "rpe": 7},
        "conditioning": {"sets": 4, "reps": "30s", "rest": 60, "rpe": 7},
    },
    ExperienceLevel.ADVANCED.value: {
        "compound": {"sets": 4, "reps": "6-10", "rest": 180, "rpe": 7},
        "isolation": {"sets": 4, "reps": "8-12", "rest": 90, "rpe": 8},
        "core": {"sets": 3, "reps": "10-15", "rest": 60, "rpe": 8},
        "conditioning": {"sets": 5, "reps": "30s", "rest": 45, "rpe": 8},
    },
}
