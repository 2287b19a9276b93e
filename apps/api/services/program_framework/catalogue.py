"""
Exercise Catalogue

Fixed, versioned registry of movement identifiers grouped by movement
pattern. The same registry is rendered into the generation prompt, checked by
the validator, and drawn from by the fallback synthesizer.

Usage:
    from services.program_framework.catalogue import CATALOGUE

    CATALOGUE.is_known("goblet-squat")          # True
    CATALOGUE.by_pattern(MovementPattern.HINGE)  # entries, catalogue order
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterator, List, Optional, Tuple


CATALOGUE_VERSION = "2024.1"


class MovementPattern(str, Enum):
    HORIZONTAL_PUSH = "horizontal_push"
    CHEST_ISOLATION = "chest_isolation"
    VERTICAL_PUSH = "vertical_push"
    HORIZONTAL_PULL = "horizontal_pull"
    VERTICAL_PULL = "vertical_pull"
    REAR_DELT = "rear_delt"
    LATERAL_DELT = "lateral_delt"
    BICEPS = "biceps"
    TRICEPS = "triceps"
    KNEE_DOMINANT = "knee_dominant"
    HIP_HINGE = "hip_hinge"
    HAMSTRING = "hamstring"
    GLUTE = "glute"
    CALVES = "calves"
    CORE = "core"
    CONDITIONING = "conditioning"


class EquipmentKind(str, Enum):
    BARBELL = "barbell"
    CABLE = "cable"        # cable stacks and plate/selectorized machines
    DUMBBELL = "dumbbell"  # dumbbells and kettlebells
    BODYWEIGHT = "bodyweight"


class ExerciseRole(str, Enum):
    COMPOUND = "compound"
    ISOLATION = "isolation"
    CORE = "core"
    CONDITIONING = "conditioning"


@dataclass(frozen=True)
class ExerciseCatalogueEntry:
    id: str
    pattern: MovementPattern
    equipment: EquipmentKind
    role: ExerciseRole
    muscles: Tuple[str, ...] = ()


def _e(id, pattern, equipment, role, *muscles):
    return ExerciseCatalogueEntry(id, pattern, equipment, role, tuple(muscles))


_P = MovementPattern
_Q = EquipmentKind
_R = ExerciseRole

_ENTRIES: Tuple[ExerciseCatalogueEntry, ...] = (
    # Chest / horizontal push
    _e("barbell-bench-press", _P.HORIZONTAL_PUSH, _Q.BARBELL, _R.COMPOUND, "chest", "triceps"),
    _e("dumbbell-bench-press", _P.HORIZONTAL_PUSH, _Q.DUMBBELL, _R.COMPOUND, "chest", "triceps"),
    _e("incline-dumbbell-press", _P.HORIZONTAL_PUSH, _Q.DUMBBELL, _R.COMPOUND, "chest", "shoulders"),
    _e("cable-chest-fly", _P.CHEST_ISOLATION, _Q.CABLE, _R.ISOLATION, "chest"),
    _e("push-up", _P.HORIZONTAL_PUSH, _Q.BODYWEIGHT, _R.COMPOUND, "chest", "triceps"),
    # Back / pulls
    _e("barbell-row", _P.HORIZONTAL_PULL, _Q.BARBELL, _R.COMPOUND, "back", "biceps"),
    _e("dumbbell-row", _P.HORIZONTAL_PULL, _Q.DUMBBELL, _R.COMPOUND, "back", "biceps"),
    _e("lat-pulldown", _P.VERTICAL_PULL, _Q.CABLE, _R.COMPOUND, "back", "biceps"),
    _e("pull-up", _P.VERTICAL_PULL, _Q.BODYWEIGHT, _R.COMPOUND, "back", "biceps"),
    _e("seated-cable-row", _P.HORIZONTAL_PULL, _Q.CABLE, _R.COMPOUND, "back", "biceps"),
    _e("face-pull", _P.REAR_DELT, _Q.CABLE, _R.ISOLATION, "shoulders", "back"),
    # Shoulders
    _e("overhead-press", _P.VERTICAL_PUSH, _Q.BARBELL, _R.COMPOUND, "shoulders", "triceps"),
    _e("dumbbell-lateral-raise", _P.LATERAL_DELT, _Q.DUMBBELL, _R.ISOLATION, "shoulders"),
    _e("dumbbell-shoulder-press", _P.VERTICAL_PUSH, _Q.DUMBBELL, _R.COMPOUND, "shoulders", "triceps"),
    # Arms
    _e("barbell-curl", _P.BICEPS, _Q.BARBELL, _R.ISOLATION, "biceps"),
    _e("hammer-curl", _P.BICEPS, _Q.DUMBBELL, _R.ISOLATION, "biceps"),
    _e("tricep-pushdown", _P.TRICEPS, _Q.CABLE, _R.ISOLATION, "triceps"),
    _e("skull-crusher", _P.TRICEPS, _Q.BARBELL, _R.ISOLATION, "triceps"),
    _e("overhead-tricep-extension", _P.TRICEPS, _Q.DUMBBELL, _R.ISOLATION, "triceps"),
    # Legs / knee dominant
    _e("barbell-back-squat", _P.KNEE_DOMINANT, _Q.BARBELL, _R.COMPOUND, "quads", "glutes"),
    _e("goblet-squat", _P.KNEE_DOMINANT, _Q.DUMBBELL, _R.COMPOUND, "quads", "glutes"),
    _e("leg-press", _P.KNEE_DOMINANT, _Q.CABLE, _R.COMPOUND, "quads", "glutes"),
    _e("leg-extension", _P.KNEE_DOMINANT, _Q.CABLE, _R.ISOLATION, "quads"),
    _e("walking-lunge", _P.KNEE_DOMINANT, _Q.BODYWEIGHT, _R.COMPOUND, "quads", "glutes"),
    _e("bulgarian-split-squat", _P.KNEE_DOMINANT, _Q.BODYWEIGHT, _R.COMPOUND, "quads", "glutes"),
    # Legs / hip dominant
    _e("romanian-deadlift", _P.HIP_HINGE, _Q.BARBELL, _R.COMPOUND, "hamstrings", "glutes"),
    _e("deadlift", _P.HIP_HINGE, _Q.BARBELL, _R.COMPOUND, "hamstrings", "glutes", "back"),
    _e("hip-thrust", _P.GLUTE, _Q.BARBELL, _R.COMPOUND, "glutes"),
    _e("glute-bridge", _P.GLUTE, _Q.BODYWEIGHT, _R.ISOLATION, "glutes"),
    _e("leg-curl", _P.HAMSTRING, _Q.CABLE, _R.ISOLATION, "hamstrings"),
    _e("standing-calf-raise", _P.CALVES, _Q.BODYWEIGHT, _R.ISOLATION, "calves"),
    # Core
    _e("plank", _P.CORE, _Q.BODYWEIGHT, _R.CORE, "core"),
    _e("hanging-leg-raise", _P.CORE, _Q.BODYWEIGHT, _R.CORE, "core"),
    _e("ab-wheel-rollout", _P.CORE, _Q.BODYWEIGHT, _R.CORE, "core"),
    # Conditioning
    _e("kettlebell-swing", _P.CONDITIONING, _Q.DUMBBELL, _R.CONDITIONING, "glutes", "hamstrings"),
    _e("box-jump", _P.CONDITIONING, _Q.BODYWEIGHT, _R.CONDITIONING, "quads"),
    _e("mountain-climbers", _P.CONDITIONING, _Q.BODYWEIGHT, _R.CONDITIONING, "core"),
)


class ExerciseCatalogue:
    """
    Read-only registry of exercise entries.

    Built once at import; nothing mutates it afterwards, so it is safe to
    share across concurrent requests.
    """

    def __init__(self, entries: Tuple[ExerciseCatalogueEntry, ...], version: str):
        self.version = version
        self._entries = entries
        self._by_id: Dict[str, ExerciseCatalogueEntry] = {e.id: e for e in entries}
        if len(self._by_id) != len(entries):
            raise ValueError("Duplicate exercise id in catalogue")
        self._ids: FrozenSet[str] = frozenset(self._by_id)

    def __iter__(self) -> Iterator[ExerciseCatalogueEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, exercise_id: object) -> bool:
        return self.is_known(exercise_id)

    def is_known(self, exercise_id: object) -> bool:
        return isinstance(exercise_id, str) and exercise_id in self._ids

    def get(self, exercise_id: str) -> Optional[ExerciseCatalogueEntry]:
        return self._by_id.get(exercise_id)

    def ids(self) -> List[str]:
        """All ids in catalogue order."""
        return [e.id for e in self._entries]

    def by_pattern(self, pattern: MovementPattern) -> List[ExerciseCatalogueEntry]:
        return [e for e in self._entries if e.pattern == pattern]

    def grouped(self) -> Dict[str, List[str]]:
        """Pattern name → ids, patterns in declaration order."""
        groups: Dict[str, List[str]] = {}
        for entry in self._entries:
            groups.setdefault(entry.pattern.value, []).append(entry.id)
        return groups

    def render_for_prompt(self) -> str:
        """One line per movement pattern, for the generation instruction."""
        return "\n".join(
            f"- {pattern}: {', '.join(ids)}" for pattern, ids in self.grouped().items()
        )


CATALOGUE = ExerciseCatalogue(_ENTRIES, CATALOGUE_VERSION)
