"""
Skill Challenge Engine - Input Models

Pydantic models for the values a host hands to the engine: generation
context, attempts and suggestion context.
"""

from typing import Literal

from pydantic import BaseModel, Field

from skill_challenge.engine.base import ModifierType


class ChallengeContext(BaseModel):
    """Party context used when generating a challenge."""

    party_size: int = Field(default=4, ge=1)
    party_level: int = Field(default=5, ge=1)
    has_time_limit: bool = False
    environmental_factors: list[str] = Field(default_factory=list)
    story_context: str = ""
    minimum_solutions: int | None = Field(default=None, ge=1)

    model_config = {"frozen": True}


class AttemptModifier(BaseModel):
    """An explicit DC adjustment supplied with an attempt."""

    source: str
    value: int
    type: ModifierType = ModifierType.CIRCUMSTANCE
    description: str = ""

    model_config = {"frozen": True}


class SkillAttemptInput(BaseModel):
    """A pre-rolled attempt from one character."""

    character: str = Field(min_length=1)
    skill: str
    roll: int
    modifiers: list[AttemptModifier] = Field(default_factory=list)

    model_config = {"frozen": True}


class CharacterInfo(BaseModel):
    """A character available to act in the challenge."""

    name: str
    skills: list[str] = Field(default_factory=list)
    specialties: list[str] = Field(default_factory=list)


class SuggestionContext(BaseModel):
    """Who is at the table when asking for skill suggestions."""

    available_characters: list[CharacterInfo] = Field(default_factory=list)
    current_situation: str = ""
    urgency_level: Literal["low", "moderate", "high"] = "moderate"
