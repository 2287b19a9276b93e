"""
Configuration Service

Loads program rule tables from YAML.
Allows changing business rules without code changes.

Usage:
    config = ConfigService.get()

    # Session-length thresholds
    ranges = ConfigService.get_session_exercise_ranges()

The exercise catalogue is deliberately NOT configurable: the prompt, the
validator and the synthesizer must share one list.
"""

import yaml
import logging
from typing import Any, Optional, Dict, List, Tuple
from pathlib import Path
from functools import reduce

logger = logging.getLogger(__name__)


class ConfigService:
    """
    Load and cache configuration from YAML files.
    """

    _config: Optional[Dict[str, Any]] = None
    _config_dir: Path = Path(__file__).parent.parent.parent.parent.parent / "config"

    @classmethod
    def get(cls, key: str = None, default: Any = None) -> Any:
        """
        Get configuration value.

        Args:
            key: Dot-separated key (e.g., "program_rules.experience.intermediate_max_years")
            default: Default value if key not found

        Returns:
            Configuration value or entire config if no key provided
        """
        if cls._config is None:
            cls._load()

        if key is None:
            return cls._config

        try:
            keys = key.split(".")
            value = reduce(lambda d, k: d[k], keys, cls._config)
            return value
        except (KeyError, TypeError):
            return default

    @classmethod
    def reload(cls):
        """Reload configuration from files."""
        cls._config = None
        cls._load()
        logger.info("Configuration reloaded")

    @classmethod
    def _load(cls):
        """Load all configuration files."""
        config: Dict[str, Any] = {}

        filepath = cls._config_dir / "program_rules.yaml"
        if filepath.exists():
            try:
                with open(filepath, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f)
                    if data:
                        config["program_rules"] = data
                        logger.debug(f"Loaded config: {filepath.name}")
            except (OSError, yaml.YAMLError) as e:
                logger.error(f"Error loading {filepath.name}: {e}")
        else:
            logger.debug(f"Config file not found: {filepath}")

        cls._config = config
        # Fall back to defaults from constants if no config found
        if not cls._config:
            cls._load_defaults()

    @classmethod
    def _load_defaults(cls):
        """Load default configuration from constants."""
        from .constants import (
            EXPERIENCE_THRESHOLDS,
            SESSION_EXERCISE_RANGES,
            SESSION_EXERCISE_RANGE_LONG,
            WEEKLY_PROGRESSION_NOTES,
        )

        cls._config = {
            "program_rules": {
                "experience": dict(EXPERIENCE_THRESHOLDS),
                "session_exercise_ranges": [
                    {"max_minutes": bound, "min": lo, "max": hi}
                    for bound, (lo, hi) in SESSION_EXERCISE_RANGES
                ],
                "session_exercise_range_long": {
                    "min": SESSION_EXERCISE_RANGE_LONG[0],
                    "max": SESSION_EXERCISE_RANGE_LONG[1],
                },
                "weekly_progression_notes": list(WEEKLY_PROGRESSION_NOTES),
            }
        }

        logger.info("Loaded default configuration from constants")

    @classmethod
    def get_experience_thresholds(cls) -> Dict[str, float]:
        """Upper bounds (years) for the beginner and intermediate tiers."""
        from .constants import EXPERIENCE_THRESHOLDS
        return cls.get("program_rules.experience", dict(EXPERIENCE_THRESHOLDS))

    @classmethod
    def get_session_exercise_ranges(cls) -> Tuple[List[Tuple[int, Tuple[int, int]]], Tuple[int, int]]:
        """Return ([(max_minutes, (min, max)), ...] ascending, long-session range)."""
        from .constants import SESSION_EXERCISE_RANGES, SESSION_EXERCISE_RANGE_LONG

        rows = cls.get("program_rules.session_exercise_ranges")
        long_row = cls.get("program_rules.session_exercise_range_long")
        if not rows or not long_row:
            return list(SESSION_EXERCISE_RANGES), SESSION_EXERCISE_RANGE_LONG

        ranges = sorted(
            (int(r["max_minutes"]), (int(r["min"]), int(r["max"]))) for r in rows
        )
        return ranges, (int(long_row["min"]), int(long_row["max"]))

    @classmethod
    def get_weekly_progression_notes(cls) -> List[str]:
        """Eight program-level notes, one per week."""
        from .constants import WEEKLY_PROGRESSION_NOTES, PROGRAM_DURATION_WEEKS

        notes = cls.get("program_rules.weekly_progression_notes")
        if not notes or len(notes) != PROGRAM_DURATION_WEEKS:
            if notes:
                logger.warning(
                    f"weekly_progression_notes has {len(notes)} entries, "
                    f"expected {PROGRAM_DURATION_WEEKS}; using defaults"
                )
            return list(WEEKLY_PROGRESSION_NOTES)
        return [str(n) for n in notes]
