"""
External program generation.

Wraps the Anthropic Messages API behind a one-method protocol so the
orchestrator can be exercised with fakes, and builds the instruction the
model receives. The prompt is rendered from the same catalogue, split table
and constraints the validator and the fallback synthesizer use.
"""

import json
import logging
import threading
from typing import Optional, Protocol

import anthropic
from anthropic import AsyncAnthropic

from core.config import settings

from .catalogue import CATALOGUE
from .constants import PROGRAM_DURATION_WEEKS, SET_SCHEMES, ExperienceLevel
from .config import ConfigService
from .constraints import DerivedConstraints, describe_constraints
from .errors import GenerationError, ProgramConfigurationError
from .models import TrainingProfile
from .split_selector import SplitPlan, render_split_table

logger = logging.getLogger(__name__)

USER_PROMPT = "Generate the program now."


class ProgramGenerationClient(Protocol):
    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        ...


class AnthropicGenerationClient:
    """Single-shot text completion against the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 4096,
        timeout_s: float = 30.0,
    ):
        self.model = model
        self.max_tokens = max_tokens
        # Retries are the orchestrator's decision (it makes exactly one attempt)
        self._client = AsyncAnthropic(api_key=api_key, timeout=timeout_s, max_retries=0)

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        try:
            message = await self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except anthropic.APIError as e:
            raise GenerationError(f"Anthropic API error: {e}") from e

        if not message.content:
            raise GenerationError("Empty response from generation service")
        block = message.content[0]
        if block.type != "text":
            raise GenerationError(f"Unexpected response block type: {block.type}")
        return block.text

    async def close(self) -> None:
        await self._client.close()


# Process-wide client (lazy singleton)
_client: Optional[AnthropicGenerationClient] = None
_client_lock = threading.Lock()


def get_generation_client() -> AnthropicGenerationClient:
    """Return the shared client, creating it on first use."""
    global _client

    if _client is not None:
        return _client

    with _client_lock:
        if _client is None:
            if not settings.ANTHROPIC_API_KEY:
                raise ProgramConfigurationError("ANTHROPIC_API_KEY is not configured")
            _client = AnthropicGenerationClient(
                api_key=settings.ANTHROPIC_API_KEY,
                model=settings.PROGRAM_GENERATION_MODEL,
                max_tokens=settings.PROGRAM_GENERATION_MAX_TOKENS,
                timeout_s=settings.PROGRAM_GENERATION_TIMEOUT_S,
            )
            logger.info(f"Generation client initialized (model={settings.PROGRAM_GENERATION_MODEL})")
        return _client


async def close_generation_client() -> None:
    """Close and drop the shared client. Safe to call when none exists."""
    global _client

    with _client_lock:
        client, _client = _client, None
    if client is not None:
        await client.close()
        logger.info("Generation client closed")


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------

_OUTPUT_SCHEMA = """{
  "name": "string",
  "goal": "hypertrophy" | "fat-loss" | "general-fitness",
  "experienceLevel": "beginner" | "intermediate" | "advanced",
  "description": "string (1-2 sentences)",
  "trainingPhilosophy": "string",
  "weeklyProgressionNotes": ["string", ... exactly 8, one per week],
  "daysPerWeek": number,
  "estimatedDurationWeeks": 8,
  "schedule": [
    {
      "label": "string (e.g. Day 1: Push)",
      "type": "push" | "pull" | "legs" | "upper" | "lower" | "full-body" | "cardio" | "rest",
      "exercises": [
        {
          "exerciseId": "string (from the catalogue above)",
          "scheme": {
            "sets": number,
            "reps": "string (e.g. '8-10' or '60s')",
            "restSeconds": number,
            "rpe": number (optional, 6-9)
          },
          "notes": "string (optional)",
          "isOptional": boolean (optional)
        }
      ]
    }
  ],
  "tags": ["string"]
}"""


def _render_schemes() -> str:
    lines = []
    for level in ExperienceLevel:
        compound = SET_SCHEMES[level.value]["compound"]
        isolation = SET_SCHEMES[level.value]["isolation"]
        lines.append(
            f"- {level.value}: compounds {compound['sets']}x{compound['reps']} "
            f"(rest {compound['rest']}s, RPE {compound['rpe']}), "
            f"isolations {isolation['sets']}x{isolation['reps']} "
            f"(rest {isolation['rest']}s, RPE {isolation['rpe']})"
        )
    return "\n".join(lines)


def build_system_prompt(
    profile: TrainingProfile,
    constraints: DerivedConstraints,
    split_plan: SplitPlan,
) -> str:
    """Instruction for one program generation request."""
    layout = "\n".join(f"- {d.label} ({d.day_type.value})" for d in split_plan.days_layout)
    weekly = "\n".join(f"- {note}" for note in ConfigService.get_weekly_progression_notes())

    substitutions = []
    for rule in constraints.injury_substitutions:
        swaps = ", ".join(
            f"{excluded} -> {' / '.join(replacements)}"
            for excluded, replacements in rule.replacements.items()
        )
        substitutions.append(
            f"- {rule.family.value}: never use {', '.join(rule.excluded_exercise_ids)}"
            + (f"; swap {swaps}" if swaps else "")
            + (f"; include {', '.join(rule.accessory_ids)}" if rule.accessory_ids else "")
            + f". Cue: {rule.coaching_cue}"
        )

    return f"""You are an expert strength and conditioning coach. Generate a personalised {PROGRAM_DURATION_WEEKS}-week training program as valid JSON.

USER PROFILE:
- Goals: {', '.join(g.value for g in profile.goals)}
- Training age: {profile.training_age_years} year(s)
- Days per week: {profile.days_per_week}
- Session duration: {profile.session_duration_minutes} minutes
- Equipment: {', '.join(profile.equipment) or 'full gym'}
- Injuries/limitations: {', '.join(profile.injuries) or 'none'}
- Priority muscles: {', '.join(profile.priority_muscles or []) or 'none'}
- Include cardio: {'yes' if profile.include_cardio else 'no'}

DERIVED CONSTRAINTS (hard limits, already resolved from the profile):
{json.dumps(describe_constraints(constraints), indent=2)}
{chr(10).join(substitutions) if substitutions else '- No injury substitutions.'}

{render_split_table()}

USE THIS SPLIT: {split_plan.split.value} ({split_plan.days} days)
{layout}

AVAILABLE EXERCISE IDs (catalogue {CATALOGUE.version}; use ONLY these exact IDs):
{CATALOGUE.render_for_prompt()}

OUTPUT REQUIREMENTS:
- Output ONLY a single JSON object. No markdown, no prose, no code fences.
- Match this exact schema:
{_OUTPUT_SCHEMA}

PROGRAMMING RULES:
- Use ONLY exercise IDs from the catalogue above, no exceptions
- Only use exercises the equipment capabilities allow; bodyweight-only means bodyweight movements only
- Number of schedule days must equal daysPerWeek ({split_plan.days})
- Each session: {constraints.min_exercises_per_session}-{constraints.max_exercises_per_session} exercises
- Weekly pull sets must be at least equal to weekly push sets
- Balance squat and hinge patterns across the week
- Put exercises for priority muscles early in the session
- If cardio is requested, add one conditioning finisher per session marked "isOptional": true
- Set schemes by experience level:
{_render_schemes()}
- Periodize over {PROGRAM_DURATION_WEEKS} weeks, one weeklyProgressionNotes entry per week:
{weekly}"""
