"""
Skill Challenge Engine - Progression State Machine

Resolves skill attempts against a challenge and owns every write to its
ProgressionState.

States: ongoing -> {success, failure, timeout}, all terminal.

Attempt resolution:
    1. Resolve the skill option by name (unknown -> rejected)
    2. Validate usage limit and prerequisites (unmet -> rejected)
    3. Final DC = base DC + momentum + synergy + modifiers, clamped to [5, 25]
    4. Natural 20 / natural 1 first, then +/-10 margins, then plain compare
    5. Criticals count double on their counter
    6. Append the immutable attempt record
    7. Evaluate dynamic elements (advisory only)
    8. Shift momentum from the current result alone

Rejected attempts leave the state untouched.
"""

import logging
from datetime import datetime, timezone
from typing import ClassVar, Sequence

from skill_challenge.engine.base import (
    AttemptOutcome,
    Challenge,
    ChallengeAttempt,
    MomentumLevel,
    MomentumState,
    ProgressionState,
    ProgressUpdate,
    RejectionReason,
    SkillAttemptResult,
    SkillOption,
)
from skill_challenge.engine.completion import CompletionEvaluator, describe_progress
from skill_challenge.engine.dynamics import DynamicElementCatalog
from skill_challenge.engine.models import AttemptModifier, SkillAttemptInput
from skill_challenge.engine.validators import parse_prerequisite, validate_minutes

logger = logging.getLogger(__name__)


class ProgressionStateMachine:
    """
    Stateless resolver for skill attempts.

    All methods are class methods. The challenge's ProgressionState is the
    only thing written, and only by process_attempt and advance_time.
    """

    DC_FLOOR: ClassVar[int] = 5
    DC_CEILING: ClassVar[int] = 25
    CRITICAL_MARGIN: ClassVar[int] = 10
    NATURAL_CRITICAL_SUCCESS: ClassVar[int] = 20
    NATURAL_CRITICAL_FAILURE: ClassVar[int] = 1

    MOMENTUM_DC: ClassVar[dict[MomentumLevel, int]] = {
        MomentumLevel.NEGATIVE: 1,
        MomentumLevel.NEUTRAL: 0,
        MomentumLevel.POSITIVE: -1,
        MomentumLevel.HIGH: -2,
    }

    MOMENTUM_EFFECTS: ClassVar[dict[MomentumLevel, tuple[str, ...]]] = {
        MomentumLevel.NEGATIVE: ("Setbacks weigh on the party: DC +1",),
        MomentumLevel.NEUTRAL: (),
        MomentumLevel.POSITIVE: ("The party finds its rhythm: DC -1",),
        MomentumLevel.HIGH: ("The party is unstoppable: DC -2",),
    }

    @classmethod
    def process_attempt(
        cls,
        challenge: Challenge,
        attempt: SkillAttemptInput,
        *,
        now: datetime | None = None,
    ) -> SkillAttemptResult:
        """
        Resolve one attempt and update the challenge's progression.

        Args:
            challenge: Challenge to act on
            attempt: Pre-rolled attempt from the caller
            now: Timestamp for the attempt record (defaults to current UTC time)

        Returns:
            SkillAttemptResult; rejected attempts carry a rejection reason
            and no progress update
        """
        progression = challenge.progression

        if CompletionEvaluator.is_complete(challenge.structure, progression):
            return cls._reject(RejectionReason.CHALLENGE_COMPLETE, "Challenge is already complete", attempt)

        option = challenge.option_for(attempt.skill)
        if option is None:
            return cls._reject(RejectionReason.INVALID_SKILL, "Invalid skill choice", attempt)

        rejection = cls.validate_attempt(progression, option)
        if rejection is not None:
            reason, message = rejection
            return cls._reject(reason, message, attempt)

        final_dc = cls.calculate_final_dc(progression, option, attempt.modifiers)
        result = cls.determine_result(attempt.roll, final_dc)
        cls._apply_counters(progression, result)

        consequences = (option.success_outcome if result.is_success else option.failure_outcome,)
        progression.attempt_history.append(ChallengeAttempt(
            character=attempt.character,
            skill=option.skill,
            roll=attempt.roll,
            dc=final_dc,
            result=result,
            timestamp=now or datetime.now(timezone.utc),
            modifiers=tuple(attempt.modifiers),
            consequences=consequences,
        ))
        progression.used_skills.add(option.skill)
        progression.participating_characters.add(attempt.character)

        triggered = DynamicElementCatalog.evaluate(challenge.dynamic_elements, progression)
        progression.momentum.triggers.extend(element.effect.description for element in triggered)

        cls._update_momentum(progression.momentum, result)

        logger.debug(
            "%s used %s: roll %d vs DC %d -> %s (%d/%d successes, %d/%d failures)",
            attempt.character, option.skill, attempt.roll, final_dc, result.value,
            progression.current_successes, challenge.structure.successes_required,
            progression.current_failures, challenge.structure.failures_allowed,
        )

        return SkillAttemptResult(
            success=result.is_success,
            result=result,
            message=cls.result_message(option, result),
            consequences=consequences,
            progress=ProgressUpdate(
                successes=progression.current_successes,
                failures=progression.current_failures,
                is_complete=CompletionEvaluator.is_complete(challenge.structure, progression),
            ),
            narrative=describe_progress(challenge.structure, progression),
            final_dc=final_dc,
            triggered_elements=triggered,
        )

    @classmethod
    def validate_attempt(
        cls,
        progression: ProgressionState,
        option: SkillOption,
    ) -> tuple[RejectionReason, str] | None:
        """
        Check usage limit and prerequisites for an option.

        Returns:
            None if the attempt may proceed, otherwise (reason, message)
        """
        if option.usage_limit is not None and progression.usage_count(option.skill) >= option.usage_limit:
            return RejectionReason.USAGE_LIMIT, "Skill usage limit exceeded"

        for prerequisite in option.prerequisites:
            if not cls.check_prerequisite(progression, prerequisite):
                return RejectionReason.PREREQUISITE, f"Prerequisite not met: {prerequisite}"

        return None

    @staticmethod
    def check_prerequisite(progression: ProgressionState, prerequisite: str) -> bool:
        """
        Evaluate a ``kind:argument`` prerequisite against the progression.

        Raises:
            ValueError: If the prerequisite is malformed
        """
        kind, argument = parse_prerequisite(prerequisite)
        if kind == "skill-used":
            return argument in progression.used_skills
        if kind == "successes":
            return progression.current_successes >= int(argument)
        if kind == "failures-below":
            return progression.current_failures < int(argument)
        if kind == "momentum":
            return progression.momentum.level.rank >= MomentumLevel(argument).rank
        return argument in progression.participating_characters

    @classmethod
    def calculate_final_dc(
        cls,
        progression: ProgressionState,
        option: SkillOption,
        modifiers: Sequence[AttemptModifier] = (),
    ) -> int:
        """
        Compute the DC an attempt is resolved against.

        Starts from the option's base DC, applies momentum, a synergy
        discount when the previous attempt used a partner skill, and the
        sum of explicit modifiers, then clamps to [DC_FLOOR, DC_CEILING].
        """
        dc = option.dc + cls.MOMENTUM_DC[progression.momentum.level]

        last = progression.last_attempt
        if last is not None:
            synergy = option.synergy_with(last.skill)
            if synergy is not None:
                dc -= synergy.bonus

        dc += sum(modifier.value for modifier in modifiers)
        return max(cls.DC_FLOOR, min(cls.DC_CEILING, dc))

    @classmethod
    def determine_result(cls, roll: int, dc: int) -> AttemptOutcome:
        """
        Map a roll and final DC to a result tag.

        Natural 20 and natural 1 take precedence over the margin checks.
        """
        if roll == cls.NATURAL_CRITICAL_SUCCESS:
            return AttemptOutcome.CRITICAL_SUCCESS
        if roll == cls.NATURAL_CRITICAL_FAILURE:
            return AttemptOutcome.CRITICAL_FAILURE
        if roll >= dc + cls.CRITICAL_MARGIN:
            return AttemptOutcome.CRITICAL_SUCCESS
        if roll >= dc:
            return AttemptOutcome.SUCCESS
        if roll <= dc - cls.CRITICAL_MARGIN:
            return AttemptOutcome.CRITICAL_FAILURE
        return AttemptOutcome.FAILURE

    @staticmethod
    def next_momentum(current: MomentumLevel, result: AttemptOutcome) -> MomentumLevel:
        """
        Momentum after an attempt, from the current result only.

        critical success: positive -> high, anything else -> positive
        success:          negative -> neutral -> positive (positive/high hold)
        failure:          high/positive -> neutral -> negative (negative holds)
        critical failure: always negative
        """
        if result is AttemptOutcome.CRITICAL_SUCCESS:
            return MomentumLevel.HIGH if current is MomentumLevel.POSITIVE else MomentumLevel.POSITIVE
        if result is AttemptOutcome.SUCCESS:
            if current is MomentumLevel.NEGATIVE:
                return MomentumLevel.NEUTRAL
            if current is MomentumLevel.NEUTRAL:
                return MomentumLevel.POSITIVE
            return current
        if result is AttemptOutcome.FAILURE:
            if current in (MomentumLevel.POSITIVE, MomentumLevel.HIGH):
                return MomentumLevel.NEUTRAL
            return MomentumLevel.NEGATIVE
        return MomentumLevel.NEGATIVE

    @staticmethod
    def result_message(option: SkillOption, result: AttemptOutcome) -> str:
        if result is AttemptOutcome.CRITICAL_SUCCESS:
            return f"Exceptional {option.skill} attempt! {option.success_outcome}"
        if result is AttemptOutcome.SUCCESS:
            return f"Successful {option.skill} attempt. {option.success_outcome}"
        if result is AttemptOutcome.FAILURE:
            return f"{option.skill} attempt fails. {option.failure_outcome}"
        return f"Critical failure on {option.skill} attempt! {option.failure_outcome}"

    @staticmethod
    def advance_time(challenge: Challenge, minutes: float) -> float:
        """
        Move the challenge clock forward.

        Args:
            challenge: Challenge whose clock advances
            minutes: Non-negative in-game minutes

        Returns:
            Total elapsed minutes

        Raises:
            ValueError: If minutes is negative
        """
        validate_minutes(minutes)
        challenge.progression.time_elapsed_minutes += minutes
        return challenge.progression.time_elapsed_minutes

    # -- Internals -------------------------------------------------------

    @staticmethod
    def _apply_counters(progression: ProgressionState, result: AttemptOutcome) -> None:
        # Criticals count twice and may overshoot the threshold.
        if result.is_success:
            progression.current_successes += 2 if result.is_critical else 1
        else:
            progression.current_failures += 2 if result.is_critical else 1

    @classmethod
    def _update_momentum(cls, momentum: MomentumState, result: AttemptOutcome) -> None:
        new_level = cls.next_momentum(momentum.level, result)
        if new_level is not momentum.level:
            logger.debug("Momentum %s -> %s", momentum.level.value, new_level.value)
        momentum.level = new_level
        momentum.effects = list(cls.MOMENTUM_EFFECTS[new_level])

    @staticmethod
    def _reject(reason: RejectionReason, message: str, attempt: SkillAttemptInput) -> SkillAttemptResult:
        logger.info("Rejected %s attempt by %s: %s", attempt.skill, attempt.character, message)
        return SkillAttemptResult(
            success=False,
            result=AttemptOutcome.FAILURE,
            message=message,
            rejection=reason,
        )
