"""
Program Generation API Router

Endpoints for:
- Generating a personalised 8-week program from a training profile
- Listing the exercise catalogue
- Previewing derived constraints and the split plan for a profile
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request

from core.exceptions import InputError, ServiceConfigurationError
from services.program_framework import (
    CATALOGUE,
    ProfileInputError,
    ProgramConfigurationError,
    ProgramOrchestrator,
    derive_constraints,
    describe_constraints,
    parse_profile,
    plan_split,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/programs", tags=["Program Generation"])

_orchestrator: Optional[ProgramOrchestrator] = None


def get_program_orchestrator() -> ProgramOrchestrator:
    """Shared orchestrator, overridable in tests via dependency_overrides."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = ProgramOrchestrator.from_settings()
    return _orchestrator


async def _read_json_body(request: Request) -> Any:
    """Request body as JSON, or None when it is missing or not JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


# ============ Endpoints ============

@router.post("/generate")
async def generate_program(
    # Raw body: a malformed profile is a 400 from the engine, not FastAPI's 422
    request: Request,
    orchestrator: ProgramOrchestrator = Depends(get_program_orchestrator),
) -> Dict[str, Any]:
    """
    Generate a personalised program.

    Always returns a program when the profile is valid; external generation
    failures fall back to template synthesis.
    """
    try:
        result = await orchestrator.generate(await _read_json_body(request))
    except ProgramConfigurationError as e:
        logger.error(f"Program generation not configured: {e}")
        raise ServiceConfigurationError()
    except ProfileInputError as e:
        raise InputError(str(e), error_code="INVALID_PROFILE", field=e.field)

    logger.info(
        f"Program generated: source={result.source.value} "
        f"states={[s.value for s in result.state_trace]}",
        extra={
            "extra_fields": {
                "source": result.source.value,
                "fallback_reason": result.fallback_reason,
                "deviations": [d.to_dict() for d in result.deviations],
            }
        },
    )
    return result.to_response()


@router.get("/exercises")
async def list_exercises() -> Dict[str, Any]:
    """Exercise catalogue ids grouped by movement pattern."""
    return {
        "version": CATALOGUE.version,
        "count": len(CATALOGUE),
        "patterns": CATALOGUE.grouped(),
    }


@router.post("/constraints")
async def preview_constraints(request: Request) -> Dict[str, Any]:
    """Derived constraints and split plan for a profile, without generating."""
    try:
        profile = parse_profile(await _read_json_body(request))
    except ProfileInputError as e:
        raise InputError(str(e), error_code="INVALID_PROFILE", field=e.field)

    constraints = derive_constraints(profile)
    plan = plan_split(
        profile.days_per_week,
        profile.program_style,
        priority_muscles=profile.priority_muscles or (),
    )
    return {
        "constraints": describe_constraints(constraints),
        "split": {
            "name": plan.split.value,
            "requestedDays": plan.requested_days,
            "days": plan.days,
            "layout": [
                {"label": d.label, "type": d.day_type.value} for d in plan.days_layout
            ],
            "deviations": [d.to_dict() for d in plan.deviations],
        },
    }
