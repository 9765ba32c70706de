"""
Skill Challenge Engine - Engine Facade

A constructible engine object tying the catalog, builders, state machine,
completion evaluator and suggestion advisor together. Instantiate one per
use; all mutable state lives on the Challenge objects it returns.
"""

import logging
import random
import uuid
from datetime import datetime
from typing import Any, Mapping

from skill_challenge.config.settings import Settings, get_settings
from skill_challenge.engine.base import (
    Challenge,
    ChallengeTheme,
    CompletionResult,
    Difficulty,
    SkillAttemptResult,
    SkillSuggestion,
)
from skill_challenge.engine.builder import (
    ConsequenceGenerator,
    SkillOptionGenerator,
    StructureBuilder,
    build_narrative_framework,
)
from skill_challenge.engine.catalog import TemplateCatalog
from skill_challenge.engine.completion import CompletionEvaluator
from skill_challenge.engine.dynamics import DynamicElementCatalog
from skill_challenge.engine.models import ChallengeContext, SkillAttemptInput, SuggestionContext
from skill_challenge.engine.narrative import NarrativeProvider, StaticNarrativeProvider
from skill_challenge.engine.progression import ProgressionStateMachine
from skill_challenge.engine.scaling import DEFAULT_SCALING_RULES, ScalingRules
from skill_challenge.engine.suggestions import SuggestionAdvisor

logger = logging.getLogger(__name__)


def _parse_difficulty(value: Difficulty | str) -> Difficulty:
    if isinstance(value, Difficulty):
        return value
    try:
        return Difficulty(str(value).strip().lower())
    except ValueError:
        valid = [d.value for d in Difficulty]
        raise ValueError(f"Unknown difficulty {value!r}. Must be one of {valid}.") from None


class SkillChallengeEngine:
    """
    Generates structured skill challenges and drives them to completion.

    Args:
        catalog: Template catalog (defaults to the built-in templates)
        scaling_rules: Party/level/difficulty tables
        narrative: Flavour text source
        rng: Random source for cosmetic DC jitter; seeded from settings when omitted
        settings: Engine settings (defaults to the cached environment settings)
    """

    def __init__(
        self,
        *,
        catalog: TemplateCatalog | None = None,
        scaling_rules: ScalingRules | None = None,
        narrative: NarrativeProvider | None = None,
        rng: random.Random | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings if settings is not None else get_settings()
        self.catalog = catalog if catalog is not None else TemplateCatalog()
        self.scaling_rules = scaling_rules if scaling_rules is not None else DEFAULT_SCALING_RULES
        self.narrative = narrative if narrative is not None else StaticNarrativeProvider()
        self.rng = rng if rng is not None else random.Random(self.settings.rng_seed)

        self._structures = StructureBuilder(self.scaling_rules)
        self._options = SkillOptionGenerator(self.scaling_rules, self.rng)
        self._consequences = ConsequenceGenerator(self.scaling_rules)
        self._completion = CompletionEvaluator(self.narrative)
        self._advisor = SuggestionAdvisor(self.settings.suggestion_limit)

    def generate_challenge(
        self,
        theme: ChallengeTheme | str,
        difficulty: Difficulty | str,
        context: ChallengeContext | Mapping[str, Any] | None = None,
    ) -> Challenge:
        """
        Build a new challenge.

        Args:
            theme: Template key, alias or theme tag
            difficulty: easy, moderate, hard or extreme
            context: Party context; defaults to a party of four at level five

        Returns:
            A fresh Challenge with empty progression

        Raises:
            UnknownTemplateError: If the theme has no template
            StructuralViolation: If the template yields no skill options
            ValueError: If the difficulty is unknown or the context invalid
        """
        template = self.catalog.get(theme)
        tier = _parse_difficulty(difficulty)
        ctx = self._context(context)
        minimum_solutions = ctx.minimum_solutions or self.settings.minimum_solutions

        structure = self._structures.build(template, tier, ctx)
        challenge = Challenge(
            id=f"challenge-{uuid.uuid4().hex[:12]}",
            name=template.name,
            description=self.narrative.describe(template.theme_tag),
            theme=template.key,
            difficulty=tier,
            structure=structure,
            skill_options=self._options.generate(template, tier, ctx, minimum_solutions),
            consequences=self._consequences.generate(template, tier),
            dynamic_elements=DynamicElementCatalog.default_elements(),
            narrative=build_narrative_framework(template, self.narrative),
            scaling_rules=self.scaling_rules,
        )

        logger.info(
            "Generated %r (%s) with %d skill options",
            challenge.name, structure.format, len(challenge.skill_options),
        )
        return challenge

    def process_attempt(
        self,
        challenge: Challenge,
        attempt: SkillAttemptInput | Mapping[str, Any],
        *,
        now: datetime | None = None,
    ) -> SkillAttemptResult:
        """Resolve one attempt; the only entry point that mutates a challenge."""
        if not isinstance(attempt, SkillAttemptInput):
            attempt = SkillAttemptInput.model_validate(attempt)
        result = ProgressionStateMachine.process_attempt(challenge, attempt, now=now)
        if result.progress is not None and result.progress.is_complete:
            logger.info(
                "Challenge %s complete: %d successes, %d failures",
                challenge.id, result.progress.successes, result.progress.failures,
            )
        return result

    def check_completion(self, challenge: Challenge) -> CompletionResult:
        """Read-only completion check."""
        return self._completion.evaluate(challenge)

    def suggest_skills(
        self,
        challenge: Challenge,
        context: SuggestionContext | Mapping[str, Any],
    ) -> list[SkillSuggestion]:
        """Read-only ranked skill suggestions."""
        if not isinstance(context, SuggestionContext):
            context = SuggestionContext.model_validate(context)
        return self._advisor.suggest(challenge, context)

    def advance_time(self, challenge: Challenge, minutes: float) -> float:
        """Advance the challenge clock; returns total elapsed minutes."""
        return ProgressionStateMachine.advance_time(challenge, minutes)

    @staticmethod
    def _context(context: ChallengeContext | Mapping[str, Any] | None) -> ChallengeContext:
        if context is None:
            return ChallengeContext()
        if isinstance(context, ChallengeContext):
            return context
        return ChallengeContext.model_validate(context)
