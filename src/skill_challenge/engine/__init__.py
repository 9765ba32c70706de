"""
Skill Challenge Engine.

Pure Python rules for "X successes before Y failures" group challenges
with zero UI/database dependencies. Handles template selection, scaling,
skill options, attempt resolution, momentum, dynamic elements,
completion and skill suggestions.
"""

from skill_challenge.engine.base import (
    AttemptOutcome,
    Challenge,
    ChallengeAttempt,
    ChallengeOutcome,
    ChallengeStructure,
    ChallengeTheme,
    CompletionResult,
    Difficulty,
    DynamicElement,
    MomentumLevel,
    ProgressionState,
    RejectionReason,
    SkillAttemptResult,
    SkillCategory,
    SkillOption,
    SkillSuggestion,
    SkillSynergy,
)
from skill_challenge.engine.catalog import ChallengeTemplate, TemplateCatalog
from skill_challenge.engine.challenge_engine import SkillChallengeEngine
from skill_challenge.engine.errors import (
    ChallengeConfigurationError,
    StructuralViolation,
    UnknownTemplateError,
)
from skill_challenge.engine.models import (
    AttemptModifier,
    ChallengeContext,
    CharacterInfo,
    SkillAttemptInput,
    SuggestionContext,
)
from skill_challenge.engine.progression import ProgressionStateMachine

__all__ = [
    # Data Classes
    "Challenge",
    "ChallengeAttempt",
    "ChallengeStructure",
    "ChallengeTemplate",
    "CompletionResult",
    "DynamicElement",
    "ProgressionState",
    "SkillAttemptResult",
    "SkillOption",
    "SkillSuggestion",
    "SkillSynergy",
    # Input Models
    "AttemptModifier",
    "ChallengeContext",
    "CharacterInfo",
    "SkillAttemptInput",
    "SuggestionContext",
    # Enums
    "AttemptOutcome",
    "ChallengeOutcome",
    "ChallengeTheme",
    "Difficulty",
    "MomentumLevel",
    "RejectionReason",
    "SkillCategory",
    # Errors
    "ChallengeConfigurationError",
    "StructuralViolation",
    "UnknownTemplateError",
    # Engines
    "ProgressionStateMachine",
    "SkillChallengeEngine",
    "TemplateCatalog",
]
