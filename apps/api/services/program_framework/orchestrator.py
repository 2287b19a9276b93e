"""
Program Orchestrator

One request, one external attempt, always a program back.

    REQUESTED → AWAITING_CANDIDATE → VALIDATING → ACCEPTED → RETURNED
                         │                 │
                         │                 └──→ REJECTED ──┐
                         └─────────────────────────────────┴→ SYNTHESIZING → RETURNED

Generator failures (errors, timeouts, non-text replies), unparseable output
and validation violations all end in fallback synthesis. They are logged,
never raised. The only errors a caller sees are a missing generation client
and a malformed profile, and both are raised before the state machine starts.

The validator is the only gate for a candidate: once it passes, the parsed
dict is returned as sent plus isCustom, isAiGenerated and generationSource.

Usage:
    orchestrator = ProgramOrchestrator.from_settings()
    result = await orchestrator.generate(payload)
    result.to_response()
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from core.config import settings

from .constraints import DerivedConstraints, derive_constraints
from .errors import (
    CandidateValidationError,
    GenerationError,
    ProfileInputError,
    ProgramConfigurationError,
)
from .generation import USER_PROMPT, ProgramGenerationClient, build_system_prompt, get_generation_client
from .models import TrainingProfile
from .parsing import ParseFailure, parse_candidate
from .split_selector import Deviation, SplitPlan, plan_split
from .synthesizer import FallbackSynthesizer
from .validator import ProgramValidator

logger = logging.getLogger(__name__)


class OrchestratorState(str, Enum):
    REQUESTED = "requested"
    AWAITING_CANDIDATE = "awaiting_candidate"
    VALIDATING = "validating"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    SYNTHESIZING = "synthesizing"
    RETURNED = "returned"


class ProgramSource(str, Enum):
    EXTERNAL = "external"
    FALLBACK = "fallback"


@dataclass
class ProgramResult:
    """`program` is the camelCase dict handed back to the caller."""
    program: Dict[str, Any]
    source: ProgramSource
    state_trace: List[OrchestratorState] = field(default_factory=list)
    fallback_reason: Optional[str] = None
    violations: List[str] = field(default_factory=list)
    deviations: List[Deviation] = field(default_factory=list)

    def to_response(self) -> Dict[str, Any]:
        return {"program": self.program}


def parse_profile(payload: Any) -> TrainingProfile:
    """Raw request body → TrainingProfile, or ProfileInputError."""
    if isinstance(payload, TrainingProfile):
        return payload
    if not isinstance(payload, dict):
        raise ProfileInputError("Valid training profile is required")

    try:
        return TrainingProfile.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ProfileInputError(
            f"Valid training profile is required: {location or 'profile'}: {first.get('msg')}",
            field=location,
        ) from e


class ProgramOrchestrator:
    """
    Coordinates external generation, validation and fallback synthesis.

    Holds no per-request state; one instance serves concurrent requests.
    """

    def __init__(
        self,
        client: Optional[ProgramGenerationClient] = None,
        validator: Optional[ProgramValidator] = None,
        synthesizer: Optional[FallbackSynthesizer] = None,
        timeout_s: Optional[float] = None,
        client_factory: Optional[Callable[[], ProgramGenerationClient]] = None,
    ):
        self._client = client
        self._client_factory = client_factory
        self.validator = validator or ProgramValidator()
        self.synthesizer = synthesizer or FallbackSynthesizer()
        self.timeout_s = timeout_s if timeout_s is not None else settings.PROGRAM_GENERATION_TIMEOUT_S

    @classmethod
    def from_settings(cls) -> "ProgramOrchestrator":
        """Orchestrator wired to the shared Anthropic client (created on first request)."""
        return cls(
            validator=ProgramValidator(strict=settings.PROGRAM_STRICT_VALIDATION),
            timeout_s=settings.PROGRAM_GENERATION_TIMEOUT_S,
            client_factory=get_generation_client,
        )

    def _resolve_client(self) -> ProgramGenerationClient:
        if self._client is not None:
            return self._client
        if self._client_factory is not None:
            return self._client_factory()
        raise ProgramConfigurationError("No program generation client configured")

    async def generate(self, payload: Any) -> ProgramResult:
        client = self._resolve_client()
        profile = parse_profile(payload)

        trace = [OrchestratorState.REQUESTED]
        constraints = derive_constraints(profile)
        plan = plan_split(
            profile.days_per_week,
            profile.program_style,
            priority_muscles=profile.priority_muscles or (),
        )
        deviations = list(plan.deviations)

        trace.append(OrchestratorState.AWAITING_CANDIDATE)
        raw_text, failure = await self._request_candidate(client, profile, constraints, plan)
        if failure is not None:
            return self._fallback(profile, constraints, trace, deviations, reason=failure)

        trace.append(OrchestratorState.VALIDATING)
        parsed = parse_candidate(raw_text)
        if isinstance(parsed, ParseFailure):
            trace.append(OrchestratorState.REJECTED)
            return self._fallback(
                profile, constraints, trace, deviations, reason=f"parse failure: {parsed.reason}"
            )

        try:
            program = self._accept(parsed.candidate, profile)
        except CandidateValidationError as e:
            trace.append(OrchestratorState.REJECTED)
            return self._fallback(
                profile, constraints, trace, deviations,
                reason="candidate rejected", violations=e.violations,
            )

        trace.extend([OrchestratorState.ACCEPTED, OrchestratorState.RETURNED])
        logger.info(
            f"Accepted external program: {len(program['schedule'])} days, "
            f"{sum(len(day['exercises']) for day in program['schedule'])} exercises"
        )
        return ProgramResult(
            program=program,
            source=ProgramSource.EXTERNAL,
            state_trace=trace,
            deviations=deviations,
        )

    def _accept(self, candidate: Dict[str, Any], profile: TrainingProfile) -> Dict[str, Any]:
        """The validator is the only gate; nothing is coerced or re-typed."""
        result = self.validator.validate(candidate, profile)
        if not result.ok:
            raise CandidateValidationError(result.violations)

        return {
            **candidate,
            "isCustom": True,
            "isAiGenerated": True,
            "generationSource": ProgramSource.EXTERNAL.value,
        }

    async def _request_candidate(
        self,
        client: ProgramGenerationClient,
        profile: TrainingProfile,
        constraints: DerivedConstraints,
        plan: SplitPlan,
    ):
        """Single attempt. Returns (text, None) or (None, failure reason)."""
        system_prompt = build_system_prompt(profile, constraints, plan)
        try:
            text = await asyncio.wait_for(
                client.complete(system_prompt, USER_PROMPT), timeout=self.timeout_s
            )
        except asyncio.TimeoutError:
            return None, f"generation timed out after {self.timeout_s}s"
        except GenerationError as e:
            return None, f"generation failed: {e}"
        except Exception as e:
            logger.error(f"Unexpected generation client error: {e}", exc_info=True)
            return None, f"generation failed: {type(e).__name__}"

        if not isinstance(text, str):
            return None, "generation returned non-text output"
        return text, None

    def _fallback(
        self,
        profile: TrainingProfile,
        constraints: DerivedConstraints,
        trace: List[OrchestratorState],
        deviations: List[Deviation],
        reason: str,
        violations: Optional[List[str]] = None,
    ) -> ProgramResult:
        trace.append(OrchestratorState.SYNTHESIZING)
        logger.warning(
            f"Using fallback program: {reason}",
            extra={"extra_fields": {"fallback_reason": reason, "violations": violations or []}},
        )

        plan = self.synthesizer.plan_for(profile)
        deviations.extend(d for d in plan.deviations if d not in deviations)
        program = self.synthesizer.synthesize(profile, constraints, plan)
        program = program.model_copy(
            update={"is_ai_generated": False, "generation_source": ProgramSource.FALLBACK.value}
        ).to_dict()

        trace.append(OrchestratorState.RETURNED)
        return ProgramResult(
            program=program,
            source=ProgramSource.FALLBACK,
            state_trace=trace,
            fallback_reason=reason,
            violations=list(violations or []),
            deviations=deviations,
        )
