"""
Skill Challenge Engine - Challenge Builders

Turns a catalog template plus difficulty and party context into the
immutable parts of a challenge: its structure, skill options,
consequence sets and narrative framework.

Scaling is applied here, once. Attempt resolution never consults the
scaling tables.
"""

from __future__ import annotations

import logging
import random

from skill_challenge.engine.base import (
    ChallengeConsequences,
    ChallengeOutcome,
    ChallengeStructure,
    CharacterMoment,
    CollaborationBonus,
    ComplexityModifier,
    ConclusionVariant,
    Consequence,
    ConsequenceDuration,
    ConsequenceSeverity,
    ConsequenceSet,
    ConsequenceType,
    DescriptionTone,
    Difficulty,
    EnvironmentalChange,
    MechanicalConsequence,
    MechanicalType,
    NarrativeFramework,
    ParticipationRules,
    ProgressBeat,
    SkillCategory,
    SkillOption,
    SkillSynergy,
)
from skill_challenge.engine.catalog import (
    AFFINITY_BONUS,
    BASE_DCS,
    CREATIVE_APPROACH,
    CREATIVE_SOLUTION_POOL,
    SKILL_AFFINITIES,
    SKILL_ALTERNATIVES,
    TIME_LIMITS,
    ChallengeTemplate,
    describe_skill,
)
from skill_challenge.engine.errors import StructuralViolation
from skill_challenge.engine.models import ChallengeContext
from skill_challenge.engine.narrative import NarrativeProvider
from skill_challenge.engine.scaling import ScalingRules

logger = logging.getLogger(__name__)

MIN_SUCCESSES = 2
MIN_FAILURES = 1


class StructureBuilder:
    """Derives the success/failure frame of a challenge."""

    LEADERSHIP_ROLES = ("coordinator", "specialist", "support")

    def __init__(self, scaling_rules: ScalingRules) -> None:
        self.scaling_rules = scaling_rules

    def build(
        self,
        template: ChallengeTemplate,
        difficulty: Difficulty,
        context: ChallengeContext,
    ) -> ChallengeStructure:
        """
        Build the structure for a template at a difficulty.

        Successes are clamped to at least 2 and failures to at least 1
        after difficulty and party-size adjustments.

        Args:
            template: Catalog template
            difficulty: Requested difficulty tier
            context: Party context

        Returns:
            Immutable ChallengeStructure
        """
        success_mod, failure_mod = self.scaling_rules.structure_modifiers(difficulty, context.party_size)
        successes = max(MIN_SUCCESSES, template.base_successes + success_mod)
        failures = max(MIN_FAILURES, template.base_failures + failure_mod)

        return ChallengeStructure(
            successes_required=successes,
            failures_allowed=failures,
            time_limit_minutes=TIME_LIMITS[difficulty] if context.has_time_limit else None,
            participation_rules=self._participation_rules(context),
            complexity_modifiers=self._complexity_modifiers(difficulty),
        )

    def _participation_rules(self, context: ChallengeContext) -> ParticipationRules:
        return ParticipationRules(
            min_participants=max(1, context.party_size // 2),
            max_participants=context.party_size,
            rotation_required=context.party_size > 4,
            leadership_roles=self.LEADERSHIP_ROLES,
            collaboration_bonuses=(
                CollaborationBonus(
                    condition="All party members participate",
                    bonus=1,
                    description="Unity bonus for full participation",
                    requirements=("Each character attempts at least one skill",),
                ),
            ),
        )

    @staticmethod
    def _complexity_modifiers(difficulty: Difficulty) -> tuple[ComplexityModifier, ...]:
        if difficulty in (Difficulty.HARD, Difficulty.EXTREME):
            return (
                ComplexityModifier(
                    condition="High difficulty challenge",
                    effect="Additional complications may arise",
                    impact="moderate",
                    description="The challenge becomes more complex as it progresses",
                ),
            )
        return ()


class SkillOptionGenerator:
    """
    Produces the primary, secondary and creative options for a challenge.

    Per-index DC jitter on the primary skills comes from the injected
    random source so generation is reproducible under a fixed seed.
    """

    def __init__(self, scaling_rules: ScalingRules, rng: random.Random) -> None:
        self.scaling_rules = scaling_rules
        self.rng = rng

    def generate(
        self,
        template: ChallengeTemplate,
        difficulty: Difficulty,
        context: ChallengeContext,
        minimum_solutions: int,
    ) -> tuple[SkillOption, ...]:
        """
        Generate the skill options for a template.

        Args:
            template: Catalog template
            difficulty: Requested difficulty tier
            context: Party context (size and level shift every DC)
            minimum_solutions: Fewest options the challenge should offer

        Returns:
            Tuple of options: primaries in template order, secondaries,
            exactly one creative option, then any improvised padding

        Raises:
            StructuralViolation: If the template lists no primary skills
        """
        if not template.primary_skills:
            raise StructuralViolation(
                f"Template {template.key.value!r} yields no skill options."
            )

        base_dc = BASE_DCS[difficulty] + self.scaling_rules.dc_modifier(
            context.party_size, context.party_level
        )
        options: list[SkillOption] = []
        seen: set[str] = set()

        for index, skill in enumerate(template.primary_skills):
            if skill in seen:
                continue
            jitter = 0 if index == 0 else self.rng.randint(-1, 1)
            options.append(self._option(
                skill,
                SkillCategory.PRIMARY,
                base_dc + jitter,
                template,
                synergies=self._synergies(skill, template.primary_skills),
                alternatives=SKILL_ALTERNATIVES.get(skill, ()),
            ))
            seen.add(skill)

        for skill in template.secondary_skills:
            if skill in seen:
                continue
            options.append(self._option(skill, SkillCategory.SECONDARY, base_dc + 1, template))
            seen.add(skill)

        options.append(SkillOption(
            skill=CREATIVE_APPROACH,
            category=SkillCategory.CREATIVE,
            dc=base_dc - 1,
            description="Use creative thinking and available resources to contribute to the challenge",
            success_outcome="Your innovative approach provides unexpected benefits",
            failure_outcome="The creative attempt doesn't work as planned but provides insight",
            alternatives=("Any skill with creative justification",),
        ))
        seen.add(CREATIVE_APPROACH)

        for approach in CREATIVE_SOLUTION_POOL:
            if len(options) >= minimum_solutions:
                break
            if approach.skill in seen:
                continue
            options.append(SkillOption(
                skill=approach.skill,
                category=SkillCategory.SECONDARY,
                dc=base_dc + 1,
                description=approach.description,
                success_outcome=f"Your {approach.approach} approach pays off in an unexpected way",
                failure_outcome=f"The {approach.approach} approach falls short, but reveals something useful",
            ))
            seen.add(approach.skill)

        if len(options) < minimum_solutions:
            logger.warning(
                "Only %d skill options available for %s; %d requested",
                len(options), template.key.value, minimum_solutions,
            )

        return tuple(options)

    @staticmethod
    def _option(
        skill: str,
        category: SkillCategory,
        dc: int,
        template: ChallengeTemplate,
        synergies: tuple[SkillSynergy, ...] = (),
        alternatives: tuple[str, ...] = (),
    ) -> SkillOption:
        return SkillOption(
            skill=skill,
            category=category,
            dc=dc,
            description=describe_skill(skill),
            success_outcome=f"Your {skill} attempt succeeds, advancing the challenge toward resolution",
            failure_outcome=(
                f"Your {skill} attempt doesn't achieve the desired result, but provides valuable insight"
            ),
            synergies=synergies,
            alternatives=alternatives,
        )

    @staticmethod
    def _synergies(skill: str, template_skills: tuple[str, ...]) -> tuple[SkillSynergy, ...]:
        # Only partners that are themselves options in this challenge.
        return tuple(
            SkillSynergy(
                with_skill=partner,
                bonus=AFFINITY_BONUS,
                description=f"Works well in combination with {partner}",
            )
            for partner in SKILL_AFFINITIES.get(skill, ())
            if partner in template_skills
        )


class ConsequenceGenerator:
    """Builds the five consequence sets, scaled by difficulty intensity."""

    def __init__(self, scaling_rules: ScalingRules) -> None:
        self.scaling_rules = scaling_rules

    def generate(self, template: ChallengeTemplate, difficulty: Difficulty) -> ChallengeConsequences:
        """
        Generate consequences for a challenge.

        Adverse sets (failure, partial, critical failure) have their
        severity shifted by the difficulty's consequence intensity.
        """
        shift = self.scaling_rules.for_difficulty(difficulty).consequence_intensity.value

        return ChallengeConsequences(
            success=self._set(
                "Through skill and teamwork, you have triumphed over the challenge",
                "The challenge is overcome successfully",
                ConsequenceSeverity.MODERATE,
                ConsequenceDuration.PERMANENT,
                MechanicalType.ACCESS,
                "Progress to next story beat",
                ConsequenceDuration.PERMANENT,
            ),
            failure=self._set(
                "Despite your efforts, the challenge proves too difficult, but new opportunities arise",
                "The challenge is not overcome, but alternative paths emerge",
                ConsequenceSeverity.MODERATE.shifted(shift),
                ConsequenceDuration.SCENE,
                MechanicalType.ACCESS,
                "Alternative story path becomes available",
                ConsequenceDuration.PERMANENT,
            ),
            partial=self._set(
                "Your efforts achieve partial success, creating a mixed outcome",
                "Partial success provides some benefits but with complications",
                ConsequenceSeverity.MINOR.shifted(shift),
                ConsequenceDuration.SCENE,
                MechanicalType.BONUS,
                "Advantage on related future attempts",
                ConsequenceDuration.SESSION,
            ),
            critical_success=self._set(
                "Your exceptional performance not only succeeds but provides unexpected advantages",
                "Exceptional success provides additional benefits",
                ConsequenceSeverity.MAJOR,
                ConsequenceDuration.PERMANENT,
                MechanicalType.BONUS,
                "Additional reward or benefit",
                ConsequenceDuration.PERMANENT,
            ),
            critical_failure=self._set(
                "The failure creates significant complications that must be addressed",
                "Significant failure creates additional complications",
                ConsequenceSeverity.MAJOR.shifted(shift),
                ConsequenceDuration.SCENE,
                MechanicalType.PENALTY,
                "Additional challenge or complication",
                ConsequenceDuration.SCENE,
            ),
        )

    @staticmethod
    def _set(
        narrative: str,
        description: str,
        severity: ConsequenceSeverity,
        duration: ConsequenceDuration,
        mechanical_type: MechanicalType,
        mechanical_effect: str,
        mechanical_duration: ConsequenceDuration,
    ) -> ConsequenceSet:
        return ConsequenceSet(
            narrative=narrative,
            immediate=(
                Consequence(
                    type=ConsequenceType.STORY,
                    description=description,
                    severity=severity,
                    duration=duration,
                ),
            ),
            mechanical=(
                MechanicalConsequence(
                    type=mechanical_type,
                    effect=mechanical_effect,
                    duration=mechanical_duration,
                ),
            ),
        )


def build_narrative_framework(template: ChallengeTemplate, provider: NarrativeProvider) -> NarrativeFramework:
    """Opening text, progress beats, conclusions and table moments for a template."""
    return NarrativeFramework(
        opening_description=provider.opening(template.theme_tag),
        progress_beats=(
            ProgressBeat(1, 0, "You make initial progress, building momentum", DescriptionTone.HOPEFUL),
            ProgressBeat(2, 1, "Despite setbacks, you continue to advance", DescriptionTone.TENSE),
            ProgressBeat(1, 2, "The situation becomes increasingly difficult", DescriptionTone.DESPERATE),
        ),
        conclusion_variants=(
            ConclusionVariant(
                outcome=ChallengeOutcome.SUCCESS,
                description="You overcome the challenge with exceptional skill",
                requirements=("All successes achieved", "No critical failures"),
                follow_up=("Additional rewards", "Reputation boost"),
                exceptional=True,
            ),
            ConclusionVariant(
                outcome=ChallengeOutcome.SUCCESS,
                description="You successfully navigate the challenge",
                requirements=("Required successes achieved",),
                follow_up=("Story progression", "Standard rewards"),
            ),
            ConclusionVariant(
                outcome=ChallengeOutcome.FAILURE,
                description="The challenge proves too difficult",
                requirements=("Maximum failures reached",),
                follow_up=("Alternative path", "Complication"),
            ),
            ConclusionVariant(
                outcome=ChallengeOutcome.TIMEOUT,
                description="Time runs out before the challenge is resolved",
                requirements=("Time limit elapsed",),
                follow_up=("Alternative path",),
            ),
        ),
        character_moments=(
            CharacterMoment(
                trigger="First success",
                character="any",
                description="Your expertise shines through in this moment",
                mechanical_benefit="Inspiration for next attempt",
            ),
            CharacterMoment(
                trigger="Critical success",
                character="any",
                description="Your exceptional performance inspires the entire party",
                mechanical_benefit="Party gains advantage on next attempt",
            ),
        ),
        environmental_changes=(
            EnvironmentalChange(
                trigger="Multiple failures",
                description="The situation becomes more volatile and unpredictable",
                mechanical_effect="DC increases by 1 for remaining attempts",
                duration="Remainder of challenge",
            ),
            EnvironmentalChange(
                trigger="Multiple successes",
                description="Your progress creates favorable conditions",
                mechanical_effect="DC decreases by 1 for next attempt",
                duration="Next attempt only",
            ),
        ),
    )
