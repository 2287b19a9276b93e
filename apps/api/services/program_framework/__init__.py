# Program Generation Framework
#
# Builds personalised 8-week strength programs from a training profile.
#
# Architecture:
# - One static exercise catalogue shared by prompt, validator and fallback
# - Pure constraint derivation and split selection
# - Single external generation attempt, validated at the boundary
# - Deterministic fallback synthesis that always returns a program
# - Config-driven rule tables (config/program_rules.yaml)

from .catalogue import CATALOGUE, CATALOGUE_VERSION, ExerciseCatalogue, MovementPattern
from .config import ConfigService
from .constraints import DerivedConstraints, derive_constraints, describe_constraints
from .split_selector import SplitPlan, Deviation, select_split, plan_split
from .synthesizer import FallbackSynthesizer
from .validator import ProgramValidator, ValidationResult
from .parsing import ParsedOk, ParseFailure, parse_candidate
from .generation import (
    AnthropicGenerationClient,
    ProgramGenerationClient,
    build_system_prompt,
    close_generation_client,
    get_generation_client,
)
from .orchestrator import ProgramOrchestrator, ProgramResult, OrchestratorState, parse_profile
from .models import TrainingProfile, GeneratedProgram
from .errors import (
    ProgramFrameworkError,
    ProgramConfigurationError,
    ProfileInputError,
    GenerationError,
    CandidateValidationError,
)
from .constants import Goal, ExperienceLevel, DayType, ProgramStyle, SplitName

__all__ = [
    # Catalogue and rules
    'CATALOGUE',
    'CATALOGUE_VERSION',
    'ExerciseCatalogue',
    'MovementPattern',
    'ConfigService',

    # Engine components
    'DerivedConstraints',
    'derive_constraints',
    'describe_constraints',
    'SplitPlan',
    'Deviation',
    'select_split',
    'plan_split',
    'FallbackSynthesizer',
    'ProgramValidator',
    'ValidationResult',
    'ParsedOk',
    'ParseFailure',
    'parse_candidate',

    # External generation
    'AnthropicGenerationClient',
    'ProgramGenerationClient',
    'build_system_prompt',
    'close_generation_client',
    'get_generation_client',

    # Orchestration
    'ProgramOrchestrator',
    'ProgramResult',
    'OrchestratorState',
    'parse_profile',

    # Models
    'TrainingProfile',
    'GeneratedProgram',

    # Errors
    'ProgramFrameworkError',
    'ProgramConfigurationError',
    'ProfileInputError',
    'GenerationError',
    'CandidateValidationError',

    # Constants
    'Goal',
    'ExperienceLevel',
    'DayType',
    'ProgramStyle',
    'SplitName',
]
