"""
Skill Challenge Engine - Completion Evaluation

Decides whether a challenge is over and, if so, how it ended.

Priority when several end conditions hold at once:
    1. success threshold reached
    2. failure threshold reached
    3. time limit elapsed
Thresholds are compared with >= because a critical result can carry a
counter past its threshold in a single attempt.
"""

from skill_challenge.engine.base import (
    AttemptOutcome,
    Challenge,
    ChallengeOutcome,
    ChallengeStructure,
    CompletionResult,
    ConsequenceSet,
    ProgressionState,
)
from skill_challenge.engine.narrative import NarrativeProvider, StaticNarrativeProvider


def describe_progress(structure: ChallengeStructure, progression: ProgressionState) -> str:
    """Narrative line keyed off the success ratio and the failure count."""
    ratio = progression.current_successes / structure.successes_required
    if ratio > 0.75:
        return "Victory seems within reach as your efforts bear fruit"
    if ratio > 0.5:
        return "You make steady progress despite the challenges"
    if progression.current_failures > progression.current_successes:
        return "The situation grows more difficult with each setback"
    return "The challenge continues, requiring careful strategy"


class CompletionEvaluator:
    """Read-only inspection of a challenge's end state."""

    def __init__(self, narrative: NarrativeProvider | None = None) -> None:
        self.narrative = narrative if narrative is not None else StaticNarrativeProvider()

    @staticmethod
    def outcome_for(structure: ChallengeStructure, progression: ProgressionState) -> ChallengeOutcome:
        """
        Classify the current state.

        Returns:
            SUCCESS, FAILURE or TIMEOUT when terminal, otherwise ONGOING
        """
        if progression.current_successes >= structure.successes_required:
            return ChallengeOutcome.SUCCESS
        if progression.current_failures >= structure.failures_allowed:
            return ChallengeOutcome.FAILURE
        if (
            structure.time_limit_minutes is not None
            and progression.time_elapsed_minutes >= structure.time_limit_minutes
        ):
            return ChallengeOutcome.TIMEOUT
        return ChallengeOutcome.ONGOING

    @classmethod
    def is_complete(cls, structure: ChallengeStructure, progression: ProgressionState) -> bool:
        return cls.outcome_for(structure, progression) is not ChallengeOutcome.ONGOING

    @staticmethod
    def select_consequences(challenge: Challenge, outcome: ChallengeOutcome) -> ConsequenceSet | None:
        """
        Pick the consequence set for a terminal outcome.

        A flawless win (a critical success and no failures at all) earns the
        critical-success set. A rout (a critical failure and no successes)
        earns the critical-failure set. A timeout with some successes on the
        board earns the partial set.
        """
        progression = challenge.progression
        consequences = challenge.consequences
        results = [attempt.result for attempt in progression.attempt_history]

        if outcome is ChallengeOutcome.SUCCESS:
            if progression.current_failures == 0 and AttemptOutcome.CRITICAL_SUCCESS in results:
                return consequences.critical_success
            return consequences.success
        if outcome is ChallengeOutcome.FAILURE:
            if progression.current_successes == 0 and AttemptOutcome.CRITICAL_FAILURE in results:
                return consequences.critical_failure
            return consequences.failure
        if outcome is ChallengeOutcome.TIMEOUT:
            if progression.current_successes > 0:
                return consequences.partial
            return consequences.failure
        return None

    def evaluate(self, challenge: Challenge) -> CompletionResult:
        """
        Check whether ``challenge`` is complete.

        Returns:
            CompletionResult with consequences and a narrative conclusion
            when terminal, or a progress description while ongoing
        """
        structure = challenge.structure
        progression = challenge.progression
        outcome = self.outcome_for(structure, progression)

        if outcome is ChallengeOutcome.ONGOING:
            return CompletionResult(
                is_complete=False,
                outcome=outcome,
                progress_description=(
                    f"Progress: {progression.current_successes}/{structure.successes_required} successes, "
                    f"{progression.current_failures}/{structure.failures_allowed} failures. "
                    f"{describe_progress(structure, progression)}"
                ),
            )

        consequences = self.select_consequences(challenge, outcome)
        return CompletionResult(
            is_complete=True,
            outcome=outcome,
            consequences=consequences,
            narrative_conclusion=self.narrative.conclusion(
                outcome, challenge.name, consequences.narrative if consequences else ""
            ),
        )
