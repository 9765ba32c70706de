"""
Skill Challenge Engine - Test Configuration and Fixtures

Common fixtures and test data for all test modules.
"""

import dataclasses
import random
from typing import Callable

import pytest

from skill_challenge.config.settings import Settings
from skill_challenge.engine.base import (
    Challenge,
    ChallengeStructure,
    ProgressionState,
    SkillCategory,
    SkillOption,
    SkillSynergy,
)
from skill_challenge.engine.catalog import CREATIVE_APPROACH
from skill_challenge.engine.challenge_engine import SkillChallengeEngine

ARCANA = "Intelligence (Arcana)"
RELIGION = "Wisdom (Religion)"
PERFORMANCE = "Charisma (Performance)"
PERCEPTION = "Wisdom (Perception)"


# =============================================================================
# ENGINE FIXTURES
# =============================================================================

@pytest.fixture
def settings() -> Settings:
    """Default settings, ignoring any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def engine(settings: Settings) -> SkillChallengeEngine:
    """Engine with a fixed random source."""
    return SkillChallengeEngine(rng=random.Random(0), settings=settings)


@pytest.fixture
def ritual(engine: SkillChallengeEngine) -> Challenge:
    """Generated magical ritual at moderate difficulty (6 successes before 2 failures)."""
    return engine.generate_challenge("magical-ritual", "moderate")


# =============================================================================
# FIXED-DC CHALLENGES
# =============================================================================

@pytest.fixture
def fixed_options() -> tuple[SkillOption, ...]:
    """
    Hand-built options with known DCs.

    Returns:
        Arcana (DC 15, synergy with Religion), Religion (DC 15),
        Performance (DC 15, one use), Creative Approach (DC 14) and
        Perception (DC 16, needs one success first)
    """
    return (
        SkillOption(
            skill=ARCANA,
            category=SkillCategory.PRIMARY,
            dc=15,
            success_outcome="The sigils flare to life.",
            failure_outcome="The sigils sputter.",
            synergies=(SkillSynergy(with_skill=RELIGION, bonus=2),),
        ),
        SkillOption(
            skill=RELIGION,
            category=SkillCategory.PRIMARY,
            dc=15,
            success_outcome="The invocation holds.",
            failure_outcome="The invocation falters.",
        ),
        SkillOption(
            skill=PERFORMANCE,
            category=SkillCategory.PRIMARY,
            dc=15,
            usage_limit=1,
            success_outcome="The chant keeps time.",
            failure_outcome="The chant loses its rhythm.",
        ),
        SkillOption(
            skill=CREATIVE_APPROACH,
            category=SkillCategory.CREATIVE,
            dc=14,
            success_outcome="An unorthodox idea works.",
            failure_outcome="The idea goes nowhere.",
        ),
        SkillOption(
            skill=PERCEPTION,
            category=SkillCategory.SECONDARY,
            dc=16,
            prerequisites=("successes:1",),
            success_outcome="You spot the flaw in the circle.",
            failure_outcome="Nothing stands out.",
        ),
    )


@pytest.fixture
def make_challenge(
    ritual: Challenge,
    fixed_options: tuple[SkillOption, ...],
) -> Callable[..., Challenge]:
    """
    Factory for a ritual with fixed options and a custom structure.

    Args (of the returned callable):
        successes: Successes required (default 3)
        failures: Failures allowed (default 2)
        time_limit: Optional time limit in minutes
        options: Skill options (defaults to ``fixed_options``)
    """
    def _make(successes: int = 3, failures: int = 2, time_limit: int | None = None, options=None) -> Challenge:
        return dataclasses.replace(
            ritual,
            structure=ChallengeStructure(successes, failures, time_limit),
            skill_options=tuple(options) if options is not None else fixed_options,
            progression=ProgressionState(),
        )

    return _make
