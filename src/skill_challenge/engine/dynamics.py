"""
Skill Challenge Engine - Dynamic Elements

Trigger/effect rules evaluated read-only against the progression state
after every attempt. Only two trigger conditions are implemented:
consecutive successes and accumulated failures. Other trigger types are
carried as data and never fire.
"""

import logging
from typing import Iterable

from skill_challenge.engine.base import (
    DynamicEffect,
    DynamicElement,
    DynamicTrigger,
    EffectType,
    ProgressionState,
    TriggerType,
)

logger = logging.getLogger(__name__)

CONSECUTIVE_SUCCESSES = "consecutive-successes"
MULTIPLE_FAILURES = "multiple-failures"


class DynamicElementCatalog:
    """Source of the dynamic elements attached to every generated challenge."""

    DEFAULT_FAILURE_THRESHOLD = 2

    @classmethod
    def default_elements(cls) -> tuple[DynamicElement, ...]:
        """The momentum-builds and situation-deteriorates elements."""
        return (
            DynamicElement(
                trigger=DynamicTrigger(TriggerType.SUCCESS_COUNT, CONSECUTIVE_SUCCESSES, 2),
                effect=DynamicEffect(
                    type=EffectType.DC_CHANGE,
                    description="Momentum builds",
                    mechanical_change="DC -1 for next attempt",
                    narrative_impact="The party works in perfect harmony",
                ),
                condition="Two consecutive successes",
                duration="Next attempt",
                description="Success breeds success as the party finds their rhythm",
            ),
            DynamicElement(
                trigger=DynamicTrigger(
                    TriggerType.FAILURE_COUNT, MULTIPLE_FAILURES, cls.DEFAULT_FAILURE_THRESHOLD
                ),
                effect=DynamicEffect(
                    type=EffectType.NARRATIVE_SHIFT,
                    description="Situation deteriorates",
                    mechanical_change="Additional complications",
                    narrative_impact="The challenge becomes more desperate",
                ),
                condition="Two failures accumulated",
                duration="Remainder of challenge",
                description="Repeated failures make the situation more dire",
            ),
        )

    @classmethod
    def is_triggered(cls, trigger: DynamicTrigger, progression: ProgressionState) -> bool:
        """
        Check a single trigger against the current progression.

        Args:
            trigger: Trigger to evaluate
            progression: State after the latest attempt was recorded

        Returns:
            True if the trigger condition holds
        """
        if trigger.type is TriggerType.SUCCESS_COUNT and trigger.condition == CONSECUTIVE_SUCCESSES:
            recent = progression.attempt_history[-2:]
            return len(recent) == 2 and all(attempt.result.is_success for attempt in recent)

        if trigger.type is TriggerType.FAILURE_COUNT and trigger.condition == MULTIPLE_FAILURES:
            threshold = trigger.threshold if trigger.threshold is not None else cls.DEFAULT_FAILURE_THRESHOLD
            return progression.current_failures >= threshold

        return False

    @classmethod
    def evaluate(
        cls,
        elements: Iterable[DynamicElement],
        progression: ProgressionState,
    ) -> tuple[DynamicElement, ...]:
        """Return every element whose trigger holds, in declaration order."""
        triggered = tuple(e for e in elements if cls.is_triggered(e.trigger, progression))
        for element in triggered:
            logger.info("Dynamic element triggered: %s", element.effect.description)
        return triggered
