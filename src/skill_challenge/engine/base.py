"""
Skill Challenge Engine - Base Classes

This module defines the foundational enums and data structures used
throughout the engine. Generated records (structure, skill options,
consequences, attempt history entries) are frozen dataclasses. The only
mutable objects are the per-challenge ProgressionState and MomentumState,
which are written exclusively by the ProgressionStateMachine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from skill_challenge.engine.errors import UnknownTemplateError
from skill_challenge.engine.validators import (
    MOMENTUM_ORDER,
    validate_prerequisites,
    validate_structure_bounds,
    validate_usage_limit,
)

if TYPE_CHECKING:
    from skill_challenge.engine.models import AttemptModifier
    from skill_challenge.engine.scaling import ScalingRules


class Difficulty(Enum):
    """Difficulty tier requested for a challenge."""
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"
    EXTREME = "extreme"


class ChallengeTheme(Enum):
    """Catalog template keys."""
    RESIST_INFLUENCE = "resist-influence"
    SOCIAL_NEGOTIATION = "social-negotiation"
    ENVIRONMENTAL_TRAVERSAL = "environmental-traversal"
    MAGICAL_RITUAL = "magical-ritual"
    INVESTIGATION_MYSTERY = "investigation-mystery"

    @classmethod
    def parse(cls, value: "ChallengeTheme | str") -> "ChallengeTheme":
        """
        Resolve a theme from an enum member, template key, alias or theme tag.

        Raises:
            UnknownTemplateError: If the value names no known theme
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        try:
            return cls(key)
        except ValueError:
            pass
        if key in _THEME_ALIASES:
            return _THEME_ALIASES[key]
        raise UnknownTemplateError(value)


_THEME_ALIASES: dict[str, ChallengeTheme] = {
    # Short aliases
    "mental-resistance": ChallengeTheme.RESIST_INFLUENCE,
    "social": ChallengeTheme.SOCIAL_NEGOTIATION,
    "environmental": ChallengeTheme.ENVIRONMENTAL_TRAVERSAL,
    "magical": ChallengeTheme.MAGICAL_RITUAL,
    "investigation": ChallengeTheme.INVESTIGATION_MYSTERY,
    # Theme tags
    "social-interaction": ChallengeTheme.SOCIAL_NEGOTIATION,
    "physical-challenge": ChallengeTheme.ENVIRONMENTAL_TRAVERSAL,
    "magical-complexity": ChallengeTheme.MAGICAL_RITUAL,
    "intellectual-challenge": ChallengeTheme.INVESTIGATION_MYSTERY,
}


class SkillCategory(Enum):
    """How a skill option relates to the challenge."""
    PRIMARY = "primary"
    SECONDARY = "secondary"
    CREATIVE = "creative"


class AttemptOutcome(Enum):
    """Result tag of a single skill attempt."""
    CRITICAL_SUCCESS = "critical-success"
    SUCCESS = "success"
    FAILURE = "failure"
    CRITICAL_FAILURE = "critical-failure"

    @property
    def is_success(self) -> bool:
        """True for success and critical success."""
        return self in (AttemptOutcome.SUCCESS, AttemptOutcome.CRITICAL_SUCCESS)

    @property
    def is_critical(self) -> bool:
        return self in (AttemptOutcome.CRITICAL_SUCCESS, AttemptOutcome.CRITICAL_FAILURE)


class MomentumLevel(Enum):
    """Four-level party mood that shifts subsequent DCs."""
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    POSITIVE = "positive"
    HIGH = "high"

    @property
    def rank(self) -> int:
        """Position in the order negative < neutral < positive < high."""
        return MOMENTUM_ORDER.index(self.value)


class ModifierType(Enum):
    """Source category of an explicit attempt modifier."""
    CIRCUMSTANCE = "circumstance"
    EQUIPMENT = "equipment"
    MAGIC = "magic"
    TEAMWORK = "teamwork"
    ENVIRONMENTAL = "environmental"


class TriggerType(Enum):
    """What a dynamic element watches."""
    SUCCESS_COUNT = "success-count"
    FAILURE_COUNT = "failure-count"
    TIME = "time"
    CHARACTER_ACTION = "character-action"
    ENVIRONMENTAL = "environmental"


class EffectType(Enum):
    """What a triggered dynamic element announces."""
    DC_CHANGE = "dc-change"
    SKILL_UNLOCK = "skill-unlock"
    NARRATIVE_SHIFT = "narrative-shift"
    MECHANICAL_BONUS = "mechanical-bonus"
    ENVIRONMENTAL_CHANGE = "environmental-change"


class ChallengeOutcome(Enum):
    """Overall state of a challenge as reported by the completion check."""
    ONGOING = "ongoing"
    SUCCESS = "success"
    FAILURE = "failure"
    TIMEOUT = "timeout"


class RejectionReason(Enum):
    """Why an attempt was refused without touching the progression state."""
    INVALID_SKILL = "invalid-skill"
    USAGE_LIMIT = "usage-limit"
    PREREQUISITE = "prerequisite"
    CHALLENGE_COMPLETE = "challenge-complete"


class ConsequenceType(Enum):
    STORY = "story"
    MECHANICAL = "mechanical"
    SOCIAL = "social"
    ENVIRONMENTAL = "environmental"
    PERSONAL = "personal"


class ConsequenceSeverity(Enum):
    """Ordered from mildest to harshest."""
    MINOR = 1
    MODERATE = 2
    MAJOR = 3
    CRITICAL = 4

    def shifted(self, steps: int) -> "ConsequenceSeverity":
        """Move along the severity scale, clamped at both ends."""
        value = max(ConsequenceSeverity.MINOR.value, min(ConsequenceSeverity.CRITICAL.value, self.value + steps))
        return ConsequenceSeverity(value)


class ConsequenceDuration(Enum):
    IMMEDIATE = "immediate"
    SCENE = "scene"
    SESSION = "session"
    ONGOING = "ongoing"
    PERMANENT = "permanent"


class MechanicalType(Enum):
    BONUS = "bonus"
    PENALTY = "penalty"
    CONDITION = "condition"
    RESOURCE = "resource"
    ACCESS = "access"


class ConsequenceIntensity(Enum):
    """How hard adverse consequences hit at a given difficulty."""
    LIGHT = -1
    STANDARD = 0
    SEVERE = 1
    DEVASTATING = 2


class DescriptionTone(Enum):
    HOPEFUL = "hopeful"
    TENSE = "tense"
    DESPERATE = "desperate"
    TRIUMPHANT = "triumphant"
    OMINOUS = "ominous"


# =============================================================================
# STRUCTURE
# =============================================================================

@dataclass(frozen=True)
class CollaborationBonus:
    condition: str
    bonus: int
    description: str
    requirements: tuple[str, ...] = ()


@dataclass(frozen=True)
class ParticipationRules:
    """
    Who takes part in the challenge and how.

    Attributes:
        min_participants: Fewest characters expected to attempt a skill
        max_participants: Most characters that may take part (None = no cap)
        rotation_required: Whether characters must take turns
        leadership_roles: Suggested roles for the table
        collaboration_bonuses: Informational teamwork bonuses
    """
    min_participants: int = 1
    max_participants: int | None = None
    rotation_required: bool = False
    leadership_roles: tuple[str, ...] = ()
    collaboration_bonuses: tuple[CollaborationBonus, ...] = ()


@dataclass(frozen=True)
class ComplexityModifier:
    condition: str
    effect: str
    impact: str
    description: str


@dataclass(frozen=True)
class ChallengeStructure:
    """
    The "X successes before Y failures" frame of a challenge.

    Attributes:
        successes_required: Successes needed to win (>= 2)
        failures_allowed: Failures that end the challenge (>= 1)
        time_limit_minutes: Optional in-game time limit
        participation_rules: Who takes part and how
        complexity_modifiers: Extra rules for harder tiers
    """
    successes_required: int
    failures_allowed: int
    time_limit_minutes: int | None = None
    participation_rules: ParticipationRules = field(default_factory=ParticipationRules)
    complexity_modifiers: tuple[ComplexityModifier, ...] = ()

    def __post_init__(self) -> None:
        """Validate structural bounds."""
        validate_structure_bounds(self.successes_required, self.failures_allowed)
        if self.time_limit_minutes is not None and self.time_limit_minutes <= 0:
            raise ValueError(f"Time limit must be positive, got {self.time_limit_minutes}.")

    @property
    def format(self) -> str:
        """Human-readable frame, e.g. '6 successes before 2 failures'."""
        return f"{self.successes_required} successes before {self.failures_allowed} failures"


# =============================================================================
# SKILL OPTIONS
# =============================================================================

@dataclass(frozen=True)
class SkillSynergy:
    """
    DC discount granted when this option immediately follows another skill.

    Attributes:
        with_skill: Skill that must have been used on the previous attempt
        bonus: DC reduction applied when the synergy holds
        description: Human-readable explanation
    """
    with_skill: str
    bonus: int = 2
    description: str = ""


@dataclass(frozen=True)
class SkillOption:
    """
    One way the party can contribute to the challenge.

    Attributes:
        skill: Skill name, used as the lookup key for attempts
        category: Primary, secondary or creative
        dc: Base difficulty class before momentum, synergy and modifiers
        description: What using the skill looks like
        success_outcome: Narrative text on success
        failure_outcome: Narrative text on failure
        usage_limit: Maximum number of attempts with this skill (None = unlimited)
        prerequisites: Conditions in ``kind:argument`` form
        synergies: Skills whose use on the previous attempt lowers the DC
        alternatives: Skills a player may substitute
    """
    skill: str
    category: SkillCategory
    dc: int
    description: str = ""
    success_outcome: str = ""
    failure_outcome: str = ""
    usage_limit: int | None = None
    prerequisites: tuple[str, ...] = ()
    synergies: tuple[SkillSynergy, ...] = ()
    alternatives: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate usage limit and prerequisite syntax."""
        validate_usage_limit(self.usage_limit)
        object.__setattr__(self, "prerequisites", validate_prerequisites(self.prerequisites))

    def synergy_with(self, skill: str) -> SkillSynergy | None:
        """Return the synergy declared with ``skill``, if any."""
        for synergy in self.synergies:
            if synergy.with_skill == skill:
                return synergy
        return None


# =============================================================================
# CONSEQUENCES
# =============================================================================

@dataclass(frozen=True)
class Consequence:
    type: ConsequenceType
    description: str
    severity: ConsequenceSeverity
    duration: ConsequenceDuration
    affected_parties: tuple[str, ...] = ("party",)
    mitigation: tuple[str, ...] = ()


@dataclass(frozen=True)
class MechanicalConsequence:
    type: MechanicalType
    effect: str
    duration: ConsequenceDuration
    value: int | None = None
    conditions: tuple[str, ...] = ()


@dataclass(frozen=True)
class ConsequenceSet:
    """Everything that follows one way a challenge can end."""
    narrative: str
    immediate: tuple[Consequence, ...] = ()
    delayed: tuple[Consequence, ...] = ()
    ongoing: tuple[Consequence, ...] = ()
    mechanical: tuple[MechanicalConsequence, ...] = ()


@dataclass(frozen=True)
class ChallengeConsequences:
    """The five consequence sets consumed at completion time."""
    success: ConsequenceSet
    failure: ConsequenceSet
    partial: ConsequenceSet
    critical_success: ConsequenceSet
    critical_failure: ConsequenceSet


# =============================================================================
# DYNAMIC ELEMENTS
# =============================================================================

@dataclass(frozen=True)
class DynamicTrigger:
    type: TriggerType
    condition: str
    threshold: int | None = None


@dataclass(frozen=True)
class DynamicEffect:
    type: EffectType
    description: str
    mechanical_change: str = ""
    narrative_impact: str = ""


@dataclass(frozen=True)
class DynamicElement:
    """
    A trigger/effect rule evaluated after every attempt.

    Effects are advisory. They are announced, never written into the
    progression counters.
    """
    trigger: DynamicTrigger
    effect: DynamicEffect
    condition: str
    duration: str
    description: str


# =============================================================================
# NARRATIVE FRAMEWORK
# =============================================================================

@dataclass(frozen=True)
class ProgressBeat:
    success_count: int
    failure_count: int
    description: str
    tone: DescriptionTone


@dataclass(frozen=True)
class ConclusionVariant:
    """
    One way a challenge can end.

    ``exceptional`` marks the flawless variant of an outcome (a success
    with no critical failures), which the table may narrate separately.
    """
    outcome: ChallengeOutcome
    description: str
    requirements: tuple[str, ...] = ()
    follow_up: tuple[str, ...] = ()
    exceptional: bool = False


@dataclass(frozen=True)
class CharacterMoment:
    trigger: str
    character: str
    description: str
    mechanical_benefit: str = ""


@dataclass(frozen=True)
class EnvironmentalChange:
    trigger: str
    description: str
    mechanical_effect: str
    duration: str


@dataclass(frozen=True)
class NarrativeFramework:
    opening_description: str
    progress_beats: tuple[ProgressBeat, ...] = ()
    conclusion_variants: tuple[ConclusionVariant, ...] = ()
    character_moments: tuple[CharacterMoment, ...] = ()
    environmental_changes: tuple[EnvironmentalChange, ...] = ()


# =============================================================================
# PROGRESSION
# =============================================================================

@dataclass(frozen=True)
class ChallengeAttempt:
    """
    Immutable audit record of one resolved attempt.

    Attributes:
        character: Who made the attempt
        skill: Skill option used
        roll: Roll total supplied by the caller
        dc: Final DC the roll was compared against
        result: Resolved result tag
        timestamp: When the attempt was resolved
        modifiers: Explicit modifiers supplied with the attempt
        consequences: Outcome text attached to this attempt
    """
    character: str
    skill: str
    roll: int
    dc: int
    result: AttemptOutcome
    timestamp: datetime
    modifiers: tuple["AttemptModifier", ...] = ()
    consequences: tuple[str, ...] = ()


@dataclass
class MomentumState:
    """Current momentum plus the effects and triggers that shaped it."""
    level: MomentumLevel = MomentumLevel.NEUTRAL
    effects: list[str] = field(default_factory=list)
    triggers: list[str] = field(default_factory=list)


@dataclass
class ProgressionState:
    """
    Mutable per-challenge progress.

    Written only by the ProgressionStateMachine. ``attempt_history`` is
    append-only.
    """
    current_successes: int = 0
    current_failures: int = 0
    attempt_history: list[ChallengeAttempt] = field(default_factory=list)
    used_skills: set[str] = field(default_factory=set)
    participating_characters: set[str] = field(default_factory=set)
    time_elapsed_minutes: float = 0
    momentum: MomentumState = field(default_factory=MomentumState)

    @property
    def last_attempt(self) -> ChallengeAttempt | None:
        """Most recent attempt, or None before the first one."""
        return self.attempt_history[-1] if self.attempt_history else None

    def usage_count(self, skill: str) -> int:
        """Number of recorded attempts that used ``skill``."""
        return sum(1 for attempt in self.attempt_history if attempt.skill == skill)


# =============================================================================
# CHALLENGE
# =============================================================================

@dataclass
class Challenge:
    """
    A generated skill challenge and its live progression.

    Owned by a single caller for one play session.
    """
    id: str
    name: str
    description: str
    theme: ChallengeTheme
    difficulty: Difficulty
    structure: ChallengeStructure
    skill_options: tuple[SkillOption, ...]
    consequences: ChallengeConsequences
    dynamic_elements: tuple[DynamicElement, ...]
    narrative: NarrativeFramework
    scaling_rules: "ScalingRules"
    progression: ProgressionState = field(default_factory=ProgressionState)

    def option_for(self, skill: str) -> SkillOption | None:
        """Look up a skill option by name."""
        for option in self.skill_options:
            if option.skill == skill:
                return option
        return None


# =============================================================================
# RESULTS
# =============================================================================

@dataclass(frozen=True)
class ProgressUpdate:
    successes: int
    failures: int
    is_complete: bool


@dataclass(frozen=True)
class SkillAttemptResult:
    """
    Outcome of a processed attempt.

    Rejected attempts carry ``success=False``, a ``rejection`` reason and
    no progress update.
    """
    success: bool
    result: AttemptOutcome
    message: str
    consequences: tuple[str, ...] = ()
    progress: ProgressUpdate | None = None
    narrative: str | None = None
    final_dc: int | None = None
    triggered_elements: tuple[DynamicElement, ...] = ()
    rejection: RejectionReason | None = None

    @property
    def is_rejected(self) -> bool:
        return self.rejection is not None


@dataclass(frozen=True)
class CompletionResult:
    is_complete: bool
    outcome: ChallengeOutcome
    consequences: ConsequenceSet | None = None
    narrative_conclusion: str | None = None
    progress_description: str | None = None


@dataclass(frozen=True)
class SkillSuggestion:
    skill: str
    reason: str
    priority: int
    synergies: tuple[SkillSynergy, ...] = ()
