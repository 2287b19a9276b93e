"""Deterministic profiles, candidates and a fake generation client for program tests.

No network, no randomness.
"""
import asyncio
import copy

from services.program_framework.models import TrainingProfile


class FakeGenerationClient:
    """Stands in for AnthropicGenerationClient; records every call."""

    def __init__(self, response=None, error=None, delay_s=0.0):
        self.response = response
        self.error = error
        self.delay_s = delay_s
        self.calls = []

    async def complete(self, system_prompt, user_prompt):
        self.calls.append({"system": system_prompt, "user": user_prompt})
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.error is not None:
            raise self.error
        return self.response


def make_profile(**overrides) -> TrainingProfile:
    data = {
        "goals": ["hypertrophy"],
        "trainingAgeYears": 1,
        "daysPerWeek": 4,
        "sessionDurationMinutes": 60,
        "equipment": ["full-gym"],
        "injuries": [],
        "aiSummary": "Intermediate lifter chasing size.",
    }
    data.update(overrides)
    return TrainingProfile.model_validate(data)


def make_candidate(**overrides) -> dict:
    """A candidate program that passes loose and strict validation for make_profile()."""
    def exercise(ex_id, sets=3):
        return {
            "exerciseId": ex_id,
            "scheme": {"sets": sets, "reps": "8-10", "restSeconds": 120, "rpe": 7},
        }

    candidate = {
        "name": "Upper/Lower Hypertrophy",
        "goal": "hypertrophy",
        "experienceLevel": "intermediate",
        "description": "Four days of upper/lower training.",
        "daysPerWeek": 4,
        "estimatedDurationWeeks": 8,
        "schedule": [
            {"label": "Day 1: Upper", "type": "upper", "exercises": [
                exercise("barbell-bench-press"), exercise("barbell-row"),
                exercise("lat-pulldown"), exercise("face-pull"), exercise("hammer-curl"),
            ]},
            {"label": "Day 2: Lower", "type": "lower", "exercises": [
                exercise("barbell-back-squat"), exercise("romanian-deadlift"),
                exercise("leg-curl"), exercise("standing-calf-raise"), exercise("plank"),
            ]},
            {"label": "Day 3: Upper", "type": "upper", "exercises": [
                exercise("overhead-press"), exercise("pull-up"),
                exercise("seated-cable-row"), exercise("dumbbell-lateral-raise"),
                exercise("tricep-pushdown"),
            ]},
            {"label": "Day 4: Lower", "type": "lower", "exercises": [
                exercise("deadlift"), exercise("leg-press"), exercise("walking-lunge"),
                exercise("leg-extension"), exercise("hanging-leg-raise"),
            ]},
        ],
        "tags": ["hypertrophy", "upper-lower"],
    }
    candidate.update(overrides)
    return copy.deepcopy(candidate)
