"""
Skill Challenge Engine - Template Catalog

Read-only tables describing the built-in challenge templates, base DCs,
skill affinities and alternatives. The catalog is plain immutable data
passed into the engine; nothing here is mutated at runtime.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping

from skill_challenge.engine.base import ChallengeTheme, Difficulty
from skill_challenge.engine.errors import UnknownTemplateError

CREATIVE_APPROACH = "Creative Approach"


@dataclass(frozen=True)
class ChallengeTemplate:
    """
    Base record a challenge is generated from.

    Attributes:
        key: Theme this template answers to
        name: Display name of the challenge
        base_successes: Successes required before difficulty/party scaling
        base_failures: Failures allowed before difficulty/party scaling
        primary_skills: Ordered core skills
        theme_tag: Flavour tag used for descriptions and narrative
        secondary_skills: Situational skills offered alongside the primaries
    """
    key: ChallengeTheme
    name: str
    base_successes: int
    base_failures: int
    primary_skills: tuple[str, ...]
    theme_tag: str
    secondary_skills: tuple[str, ...] = ()


DEFAULT_TEMPLATES: Mapping[ChallengeTheme, ChallengeTemplate] = MappingProxyType({
    ChallengeTheme.RESIST_INFLUENCE: ChallengeTemplate(
        key=ChallengeTheme.RESIST_INFLUENCE,
        name="Resist Mental Influence",
        base_successes=4,
        base_failures=3,
        primary_skills=(
            "Wisdom (Insight)",
            "Charisma (Persuasion)",
            "Intelligence (Investigation)",
        ),
        theme_tag="mental-resistance",
        secondary_skills=("Wisdom (Medicine)", "Constitution (Concentration)"),
    ),
    ChallengeTheme.SOCIAL_NEGOTIATION: ChallengeTemplate(
        key=ChallengeTheme.SOCIAL_NEGOTIATION,
        name="Complex Negotiation",
        base_successes=5,
        base_failures=3,
        primary_skills=(
            "Charisma (Persuasion)",
            "Charisma (Deception)",
            "Wisdom (Insight)",
            "Intelligence (History)",
        ),
        theme_tag="social-interaction",
        secondary_skills=("Charisma (Intimidation)", "Wisdom (Perception)"),
    ),
    ChallengeTheme.ENVIRONMENTAL_TRAVERSAL: ChallengeTemplate(
        key=ChallengeTheme.ENVIRONMENTAL_TRAVERSAL,
        name="Dangerous Environment",
        base_successes=3,
        base_failures=2,
        primary_skills=(
            "Dexterity (Acrobatics)",
            "Strength (Athletics)",
            "Wisdom (Survival)",
            "Intelligence (Nature)",
        ),
        theme_tag="physical-challenge",
        secondary_skills=("Constitution (Concentration)", "Wisdom (Medicine)"),
    ),
    ChallengeTheme.MAGICAL_RITUAL: ChallengeTemplate(
        key=ChallengeTheme.MAGICAL_RITUAL,
        name="Complex Magical Ritual",
        base_successes=6,
        base_failures=2,
        primary_skills=(
            "Intelligence (Arcana)",
            "Wisdom (Religion)",
            "Charisma (Performance)",
            "Constitution (Concentration)",
        ),
        theme_tag="magical-complexity",
        secondary_skills=("Intelligence (History)", "Wisdom (Perception)"),
    ),
    ChallengeTheme.INVESTIGATION_MYSTERY: ChallengeTemplate(
        key=ChallengeTheme.INVESTIGATION_MYSTERY,
        name="Unravel the Mystery",
        base_successes=4,
        base_failures=4,
        primary_skills=(
            "Intelligence (Investigation)",
            "Wisdom (Perception)",
            "Charisma (Persuasion)",
            "Intelligence (History)",
        ),
        theme_tag="intellectual-challenge",
        secondary_skills=("Intelligence (Religion)", "Wisdom (Medicine)"),
    ),
})

BASE_DCS: Mapping[Difficulty, int] = MappingProxyType({
    Difficulty.EASY: 12,
    Difficulty.MODERATE: 15,
    Difficulty.HARD: 17,
    Difficulty.EXTREME: 20,
})

TIME_LIMITS: Mapping[Difficulty, int] = MappingProxyType({
    Difficulty.EASY: 45,
    Difficulty.MODERATE: 30,
    Difficulty.HARD: 20,
    Difficulty.EXTREME: 15,
})

# Partner skills that lower the DC when used on the previous attempt.
SKILL_AFFINITIES: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "Wisdom (Insight)": ("Charisma (Persuasion)", "Intelligence (Investigation)"),
    "Charisma (Persuasion)": ("Wisdom (Insight)", "Charisma (Deception)"),
    "Intelligence (Investigation)": ("Wisdom (Perception)", "Intelligence (History)"),
    "Intelligence (Arcana)": ("Wisdom (Religion)", "Intelligence (Investigation)"),
})
AFFINITY_BONUS = 1

SKILL_ALTERNATIVES: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "Wisdom (Insight)": ("Wisdom (Perception)", "Intelligence (Investigation)"),
    "Charisma (Persuasion)": ("Charisma (Deception)", "Charisma (Intimidation)"),
    "Intelligence (Investigation)": ("Wisdom (Perception)", "Intelligence (History)"),
    "Intelligence (Arcana)": ("Wisdom (Religion)", "Intelligence (History)"),
})

SKILL_DESCRIPTIONS: Mapping[str, str] = MappingProxyType({
    "Wisdom (Insight)": "Read the situation and understand underlying motivations",
    "Charisma (Persuasion)": "Convince others through reasoned argument and appeal",
    "Intelligence (Investigation)": "Analyze clues and piece together information",
    "Intelligence (Arcana)": "Apply magical knowledge and understanding",
    "Dexterity (Acrobatics)": "Navigate physical obstacles with grace and precision",
    "Strength (Athletics)": "Overcome physical challenges through raw power",
    "Wisdom (Survival)": "Apply knowledge of natural environments and dangers",
    "Intelligence (Nature)": "Understand natural phenomena and environmental factors",
})


@dataclass(frozen=True)
class ImprovisedApproach:
    """An entry in the pool used to pad out thin option lists."""
    approach: str
    skill: str
    description: str


CREATIVE_SOLUTION_POOL: tuple[ImprovisedApproach, ...] = (
    ImprovisedApproach("environmental", "Intelligence (Nature)", "Use environmental features creatively"),
    ImprovisedApproach("collaborative", "Charisma (Persuasion)", "Coordinate party members for a combined approach"),
    ImprovisedApproach("magical", "Intelligence (Arcana)", "Apply magical theory in unexpected ways"),
    ImprovisedApproach("observational", "Wisdom (Perception)", "Notice the detail everyone else missed"),
    ImprovisedApproach("dexterous", "Dexterity (Sleight of Hand)", "Work the problem with quick, careful hands"),
)


def describe_skill(skill: str) -> str:
    """Catalog description for a skill, with a generic fallback sentence."""
    return SKILL_DESCRIPTIONS.get(skill, f"Apply {skill} to contribute to the challenge")


class TemplateCatalog:
    """
    Immutable theme -> template lookup.

    Defaults to the built-in templates. Hosts may pass their own mapping;
    it is copied and frozen on construction.
    """

    def __init__(self, templates: Mapping[ChallengeTheme, ChallengeTemplate] | None = None) -> None:
        source = DEFAULT_TEMPLATES if templates is None else templates
        self._templates: Mapping[ChallengeTheme, ChallengeTemplate] = MappingProxyType(dict(source))

    def get(self, theme: ChallengeTheme | str) -> ChallengeTemplate:
        """
        Resolve a theme to its template.

        Raises:
            UnknownTemplateError: If the theme is unknown or has no template
        """
        key = ChallengeTheme.parse(theme)
        try:
            return self._templates[key]
        except KeyError:
            raise UnknownTemplateError(theme) from None

    def __contains__(self, theme: object) -> bool:
        try:
            key = ChallengeTheme.parse(theme)
        except UnknownTemplateError:
            return False
        return key in self._templates

    def __iter__(self) -> Iterator[ChallengeTheme]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)
