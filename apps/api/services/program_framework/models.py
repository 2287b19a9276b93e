"""
Wire models for program generation.

JSON on the wire is camelCase (the onboarding collaborator and the mobile
client both speak it); Python attributes are snake_case.
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .constants import Goal, ProgramStyle


GoalLiteral = Literal["hypertrophy", "fat-loss", "general-fitness"]
ExperienceLiteral = Literal["beginner", "intermediate", "advanced"]
DayTypeLiteral = Literal["full-body", "upper", "lower", "push", "pull", "legs", "cardio", "rest"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TrainingProfile(_CamelModel):
    """Training profile produced by onboarding. Immutable input to the engine."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    goals: List[Goal] = Field(..., min_length=1)
    training_age_years: float = Field(0, ge=0)
    # Out-of-range counts are clamped downstream with a recorded Deviation
    days_per_week: int = 3
    session_duration_minutes: int = Field(60, gt=0)
    equipment: List[str] = Field(default_factory=list)
    injuries: List[str] = Field(default_factory=list)
    priority_muscles: Optional[List[str]] = None
    program_style: Optional[ProgramStyle] = None
    include_cardio: bool = False
    ai_summary: Optional[str] = None

    @field_validator("equipment", "injuries", "priority_muscles", mode="before")
    @classmethod
    def _drop_blank_tags(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [v.strip() for v in value if isinstance(v, str) and v.strip()]
        return value

    @property
    def primary_goal(self) -> Goal:
        return self.goals[0]


class SetScheme(_CamelModel):
    sets: int = Field(..., gt=0)
    reps: str
    rest_seconds: int = Field(..., ge=0)
    rpe: Optional[Union[int, float]] = Field(None, ge=6, le=10)


class ProgramExercise(_CamelModel):
    exercise_id: str
    scheme: SetScheme
    notes: Optional[str] = None
    is_optional: Optional[bool] = None


class TrainingDay(_CamelModel):
    label: str
    type: DayTypeLiteral
    exercises: List[ProgramExercise] = Field(default_factory=list)


class GeneratedProgram(_CamelModel):
    """
    A synthesized program. Accepted external candidates never pass through
    this model; they are returned as the dict that was validated.
    """

    id: str = ""
    name: str
    goal: GoalLiteral
    experience_level: ExperienceLiteral
    description: str = ""
    training_philosophy: Optional[str] = None
    weekly_progression_notes: Optional[List[str]] = Field(None, min_length=8, max_length=8)
    days_per_week: int = Field(..., ge=1)
    estimated_duration_weeks: int = 8
    schedule: List[TrainingDay] = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)
    is_custom: bool = True
    is_ai_generated: bool = True
    generation_source: Optional[Literal["external", "fallback"]] = None

    def exercise_ids(self) -> List[str]:
        return [ex.exercise_id for day in self.schedule for ex in day.exercises]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to camelCase dictionary for JSON serialization."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)
