"""
Program framework errors.

Two are caller-facing (configuration, input) and short-circuit before any
generation is attempted. The other two are recovered inside the orchestrator
and only ever trigger fallback synthesis.
"""

from typing import List, Optional


class ProgramFrameworkError(Exception):
    """Base class for program framework errors."""


class ProgramConfigurationError(ProgramFrameworkError):
    """The external generation service is not configured (missing credentials)."""


class ProfileInputError(ProgramFrameworkError):
    """The training profile is missing or malformed (e.g., no valid goals)."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class GenerationError(ProgramFrameworkError):
    """External call failed, timed out, or returned a non-text response."""


class CandidateValidationError(ProgramFrameworkError):
    """An externally produced candidate failed validation."""

    def __init__(self, violations: List[str]):
        super().__init__("; ".join(violations) or "candidate rejected")
        self.violations = list(violations)
