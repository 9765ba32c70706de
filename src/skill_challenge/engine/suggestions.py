"""
Skill Challenge Engine - Suggestion Advisor

Heuristic ranking of skill options for the current state of a challenge.
Advisory only: nothing here touches the progression state.
"""

from typing import ClassVar

from skill_challenge.engine.base import (
    Challenge,
    MomentumLevel,
    SkillCategory,
    SkillOption,
    SkillSuggestion,
)
from skill_challenge.engine.models import SuggestionContext


class SuggestionAdvisor:
    """
    Scores skill options and returns the best few.

    Score = 50 base
          + 20 primary category
          + 15 skill not used yet
          + 10 synergy with the previous attempt's skill
          + 15 creative category while momentum is negative
    """

    BASE_PRIORITY: ClassVar[int] = 50
    PRIMARY_BONUS: ClassVar[int] = 20
    UNUSED_BONUS: ClassVar[int] = 15
    SYNERGY_BONUS: ClassVar[int] = 10
    CREATIVE_RECOVERY_BONUS: ClassVar[int] = 15

    def __init__(self, limit: int = 5) -> None:
        if limit < 1:
            raise ValueError(f"Suggestion limit must be positive, got {limit}.")
        self.limit = limit

    def suggest(self, challenge: Challenge, context: SuggestionContext) -> list[SkillSuggestion]:
        """
        Rank the options available right now.

        Options at their usage cap are dropped, as are options no
        available character can use (creative options are open to all).
        Ties keep catalog order.

        Returns:
            Up to ``limit`` suggestions, highest priority first
        """
        suggestions = [
            SkillSuggestion(
                skill=option.skill,
                reason=self.reason(challenge, option),
                priority=self.priority(challenge, option),
                synergies=tuple(
                    synergy for synergy in option.synergies
                    if any(synergy.with_skill in char.skills for char in context.available_characters)
                ),
            )
            for option in challenge.skill_options
            if self.is_available(challenge, option, context)
        ]
        suggestions.sort(key=lambda s: s.priority, reverse=True)
        return suggestions[: self.limit]

    @staticmethod
    def is_available(challenge: Challenge, option: SkillOption, context: SuggestionContext) -> bool:
        """Whether the option is under its cap and someone at the table can use it."""
        progression = challenge.progression
        if option.usage_limit is not None and progression.usage_count(option.skill) >= option.usage_limit:
            return False
        if option.category is SkillCategory.CREATIVE:
            return True
        return any(option.skill in char.skills for char in context.available_characters)

    @classmethod
    def priority(cls, challenge: Challenge, option: SkillOption) -> int:
        progression = challenge.progression
        score = cls.BASE_PRIORITY

        if option.category is SkillCategory.PRIMARY:
            score += cls.PRIMARY_BONUS
        if option.skill not in progression.used_skills:
            score += cls.UNUSED_BONUS

        last = progression.last_attempt
        if last is not None and option.synergy_with(last.skill) is not None:
            score += cls.SYNERGY_BONUS

        if option.category is SkillCategory.CREATIVE and progression.momentum.level is MomentumLevel.NEGATIVE:
            score += cls.CREATIVE_RECOVERY_BONUS

        return score

    @staticmethod
    def reason(challenge: Challenge, option: SkillOption) -> str:
        if option.category is SkillCategory.PRIMARY:
            return "Core skill for this challenge type"
        if option.category is SkillCategory.CREATIVE:
            return "Creative approaches often provide unexpected solutions"
        if challenge.progression.momentum.level is MomentumLevel.NEGATIVE:
            return "Alternative approach might break the negative momentum"
        return "Situational skill that could provide unique benefits"
