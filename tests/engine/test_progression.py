"""
Skill Challenge Engine - Progression State Machine Tests

Comprehensive tests for attempt resolution, counters, momentum and
rejections.
"""

from datetime import datetime, timezone

import pytest
from skill_challenge.engine.base import (
    AttemptOutcome,
    ChallengeAttempt,
    MomentumLevel,
    MomentumState,
    ProgressionState,
    RejectionReason,
    SkillCategory,
    SkillOption,
    SkillSynergy,
)
from skill_challenge.engine.catalog import CREATIVE_APPROACH
from skill_challenge.engine.models import AttemptModifier, SkillAttemptInput
from skill_challenge.engine.progression import ProgressionStateMachine

ARCANA = "Intelligence (Arcana)"
RELIGION = "Wisdom (Religion)"
PERFORMANCE = "Charisma (Performance)"
PERCEPTION = "Wisdom (Perception)"

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _attempt(skill: str, roll: int, character: str = "Aria", modifiers=()) -> SkillAttemptInput:
    return SkillAttemptInput(character=character, skill=skill, roll=roll, modifiers=list(modifiers))


def _option(dc: int = 15, synergies=()) -> SkillOption:
    return SkillOption(ARCANA, SkillCategory.PRIMARY, dc, synergies=synergies)


def _process(challenge, skill, roll, **kwargs):
    return ProgressionStateMachine.process_attempt(challenge, _attempt(skill, roll, **kwargs), now=NOW)


# === Final DC ===


class TestCalculateFinalDc:
    """Tests for ProgressionStateMachine.calculate_final_dc()."""

    @pytest.mark.parametrize("level,expected", [
        (MomentumLevel.NEGATIVE, 16),
        (MomentumLevel.NEUTRAL, 15),
        (MomentumLevel.POSITIVE, 14),
        (MomentumLevel.HIGH, 13),
    ])
    def test_momentum_shift(self, level, expected):
        progression = ProgressionState(momentum=MomentumState(level=level))
        assert ProgressionStateMachine.calculate_final_dc(progression, _option()) == expected

    def test_synergy_with_previous_attempt(self):
        previous = ChallengeAttempt("Bram", RELIGION, 15, 15, AttemptOutcome.SUCCESS, NOW)
        progression = ProgressionState(attempt_history=[previous])
        option = _option(synergies=(SkillSynergy(with_skill=RELIGION, bonus=2),))
        assert ProgressionStateMachine.calculate_final_dc(progression, option) == 13

    def test_synergy_needs_the_immediately_previous_attempt(self):
        history = [
            ChallengeAttempt("Bram", RELIGION, 15, 15, AttemptOutcome.SUCCESS, NOW),
            ChallengeAttempt("Cora", PERFORMANCE, 15, 15, AttemptOutcome.SUCCESS, NOW),
        ]
        progression = ProgressionState(attempt_history=history)
        option = _option(synergies=(SkillSynergy(with_skill=RELIGION, bonus=2),))
        assert ProgressionStateMachine.calculate_final_dc(progression, option) == 15

    def test_modifiers_are_summed(self):
        modifiers = [AttemptModifier(source="rain", value=2), AttemptModifier(source="focus", value=-3)]
        dc = ProgressionStateMachine.calculate_final_dc(ProgressionState(), _option(), modifiers)
        assert dc == 14

    @pytest.mark.parametrize("modifier,expected", [(40, 25), (-40, 5), (10, 25), (-10, 5)])
    def test_clamped(self, modifier, expected):
        modifiers = [AttemptModifier(source="test", value=modifier)]
        assert ProgressionStateMachine.calculate_final_dc(ProgressionState(), _option(), modifiers) == expected

    @pytest.mark.parametrize("base_dc", [1, 5, 15, 25, 40])
    @pytest.mark.parametrize("level", list(MomentumLevel))
    @pytest.mark.parametrize("modifier", [-50, -5, 0, 5, 50])
    def test_always_within_bounds(self, base_dc, level, modifier):
        progression = ProgressionState(momentum=MomentumState(level=level))
        modifiers = [AttemptModifier(source="test", value=modifier)]
        dc = ProgressionStateMachine.calculate_final_dc(progression, _option(base_dc), modifiers)
        assert 5 <= dc <= 25

    def test_high_momentum_scenario(self):
        """Base DC 15 with high momentum and nothing else resolves at 13."""
        progression = ProgressionState(momentum=MomentumState(level=MomentumLevel.HIGH))
        assert ProgressionStateMachine.calculate_final_dc(progression, _option(15)) == 13


# === Result Determination ===


class TestDetermineResult:
    """Tests for ProgressionStateMachine.determine_result()."""

    @pytest.mark.parametrize("roll,dc,expected", [
        (25, 15, AttemptOutcome.CRITICAL_SUCCESS),
        (30, 15, AttemptOutcome.CRITICAL_SUCCESS),
        (24, 15, AttemptOutcome.SUCCESS),
        (15, 15, AttemptOutcome.SUCCESS),
        (14, 15, AttemptOutcome.FAILURE),
        (6, 15, AttemptOutcome.FAILURE),
        (5, 15, AttemptOutcome.CRITICAL_FAILURE),
        (0, 15, AttemptOutcome.CRITICAL_FAILURE),
    ])
    def test_margins(self, roll, dc, expected):
        assert ProgressionStateMachine.determine_result(roll, dc) is expected

    @pytest.mark.parametrize("dc", [5, 15, 25])
    def test_natural_twenty_always_critical_success(self, dc):
        assert ProgressionStateMachine.determine_result(20, dc) is AttemptOutcome.CRITICAL_SUCCESS

    @pytest.mark.parametrize("dc", [5, 15, 25])
    def test_natural_one_always_critical_failure(self, dc):
        assert ProgressionStateMachine.determine_result(1, dc) is AttemptOutcome.CRITICAL_FAILURE

    def test_natural_twenty_beats_impossible_dc(self):
        assert ProgressionStateMachine.determine_result(20, 31) is AttemptOutcome.CRITICAL_SUCCESS

    def test_natural_one_beats_trivial_dc(self):
        assert ProgressionStateMachine.determine_result(1, -20) is AttemptOutcome.CRITICAL_FAILURE


# === Momentum ===


class TestNextMomentum:
    """Tests for ProgressionStateMachine.next_momentum()."""

    @pytest.mark.parametrize("current,result,expected", [
        (MomentumLevel.NEGATIVE, AttemptOutcome.CRITICAL_SUCCESS, MomentumLevel.POSITIVE),
        (MomentumLevel.NEUTRAL, AttemptOutcome.CRITICAL_SUCCESS, MomentumLevel.POSITIVE),
        (MomentumLevel.POSITIVE, AttemptOutcome.CRITICAL_SUCCESS, MomentumLevel.HIGH),
        (MomentumLevel.HIGH, AttemptOutcome.CRITICAL_SUCCESS, MomentumLevel.POSITIVE),
        (MomentumLevel.NEGATIVE, AttemptOutcome.SUCCESS, MomentumLevel.NEUTRAL),
        (MomentumLevel.NEUTRAL, AttemptOutcome.SUCCESS, MomentumLevel.POSITIVE),
        (MomentumLevel.POSITIVE, AttemptOutcome.SUCCESS, MomentumLevel.POSITIVE),
        (MomentumLevel.HIGH, AttemptOutcome.SUCCESS, MomentumLevel.HIGH),
        (MomentumLevel.NEGATIVE, AttemptOutcome.FAILURE, MomentumLevel.NEGATIVE),
        (MomentumLevel.NEUTRAL, AttemptOutcome.FAILURE, MomentumLevel.NEGATIVE),
        (MomentumLevel.POSITIVE, AttemptOutcome.FAILURE, MomentumLevel.NEUTRAL),
        (MomentumLevel.HIGH, AttemptOutcome.FAILURE, MomentumLevel.NEUTRAL),
    ])
    def test_transitions(self, current, result, expected):
        assert ProgressionStateMachine.next_momentum(current, result) is expected

    @pytest.mark.parametrize("current", list(MomentumLevel))
    def test_critical_failure_always_negative(self, current):
        result = ProgressionStateMachine.next_momentum(current, AttemptOutcome.CRITICAL_FAILURE)
        assert result is MomentumLevel.NEGATIVE


# === Process Attempt ===


class TestProcessAttemptCounters:
    """Counter updates from ProgressionStateMachine.process_attempt()."""

    @pytest.mark.parametrize("roll,successes,failures", [
        (20, 2, 0),
        (25, 2, 0),
        (15, 1, 0),
        (10, 0, 1),
        (5, 0, 2),
        (1, 0, 2),
    ])
    def test_first_attempt_counters(self, make_challenge, roll, successes, failures):
        challenge = make_challenge(successes=6, failures=4)
        result = _process(challenge, RELIGION, roll)
        assert challenge.progression.current_successes == successes
        assert challenge.progression.current_failures == failures
        assert result.progress.successes == successes
        assert result.progress.failures == failures

    def test_roll_25_is_critical_without_natural_twenty(self, make_challenge):
        result = _process(make_challenge(), RELIGION, 25)
        assert result.result is AttemptOutcome.CRITICAL_SUCCESS
        assert result.success is True

    def test_critical_can_overshoot_threshold(self, make_challenge):
        challenge = make_challenge(successes=3, failures=2)
        _process(challenge, RELIGION, 15)
        _process(challenge, RELIGION, 15)
        result = _process(challenge, RELIGION, 20)
        assert challenge.progression.current_successes == 4
        assert result.progress.is_complete is True


class TestProcessAttemptRecord:
    """History, bookkeeping and result fields."""

    def test_attempt_is_recorded(self, make_challenge):
        challenge = make_challenge()
        modifiers = [AttemptModifier(source="ritual focus", value=-1)]
        _process(challenge, RELIGION, 16, character="Bram", modifiers=modifiers)

        record = challenge.progression.attempt_history[0]
        assert record.character == "Bram"
        assert record.skill == RELIGION
        assert record.roll == 16
        assert record.dc == 14
        assert record.result is AttemptOutcome.SUCCESS
        assert record.timestamp == NOW
        assert record.modifiers == tuple(modifiers)
        assert record.consequences == ("The invocation holds.",)

    def test_default_timestamp_is_utc(self, make_challenge):
        challenge = make_challenge()
        ProgressionStateMachine.process_attempt(challenge, _attempt(RELIGION, 15))
        assert challenge.progression.attempt_history[0].timestamp.tzinfo is timezone.utc

    def test_used_skills_and_participants(self, make_challenge):
        challenge = make_challenge(successes=6, failures=4)
        _process(challenge, RELIGION, 15, character="Aria")
        _process(challenge, ARCANA, 10, character="Bram")
        assert challenge.progression.used_skills == {RELIGION, ARCANA}
        assert challenge.progression.participating_characters == {"Aria", "Bram"}

    @pytest.mark.parametrize("roll,message", [
        (20, "Exceptional Wisdom (Religion) attempt! The invocation holds."),
        (15, "Successful Wisdom (Religion) attempt. The invocation holds."),
        (10, "Wisdom (Religion) attempt fails. The invocation falters."),
        (1, "Critical failure on Wisdom (Religion) attempt! The invocation falters."),
    ])
    def test_messages(self, make_challenge, roll, message):
        result = _process(make_challenge(), RELIGION, roll)
        assert result.message == message

    def test_failure_consequences(self, make_challenge):
        result = _process(make_challenge(), RELIGION, 10)
        assert result.success is False
        assert result.consequences == ("The invocation falters.",)

    def test_result_carries_final_dc_and_narrative(self, make_challenge):
        result = _process(make_challenge(), RELIGION, 15)
        assert result.final_dc == 15
        assert result.narrative == "The challenge continues, requiring careful strategy"
        assert result.rejection is None


class TestProcessAttemptMomentum:
    """Momentum updates and their effect on later attempts."""

    def test_success_raises_momentum(self, make_challenge):
        challenge = make_challenge(successes=6)
        _process(challenge, RELIGION, 15)
        assert challenge.progression.momentum.level is MomentumLevel.POSITIVE
        assert challenge.progression.momentum.effects == ["The party finds its rhythm: DC -1"]

    def test_momentum_lowers_next_dc(self, make_challenge):
        challenge = make_challenge(successes=6)
        _process(challenge, RELIGION, 15)
        result = _process(challenge, RELIGION, 14)
        assert result.final_dc == 14
        assert result.result is AttemptOutcome.SUCCESS

    def test_critical_failure_forces_negative(self, make_challenge):
        challenge = make_challenge(successes=6, failures=4)
        _process(challenge, RELIGION, 20)
        _process(challenge, RELIGION, 20)
        assert challenge.progression.momentum.level is MomentumLevel.HIGH
        _process(challenge, RELIGION, 1)
        assert challenge.progression.momentum.level is MomentumLevel.NEGATIVE

    def test_negative_momentum_raises_next_dc(self, make_challenge):
        challenge = make_challenge(successes=6, failures=4)
        _process(challenge, RELIGION, 1)
        result = _process(challenge, RELIGION, 15)
        assert result.final_dc == 16
        assert result.result is AttemptOutcome.FAILURE

    def test_synergy_applies_after_partner_skill(self, make_challenge):
        challenge = make_challenge(successes=6)
        _process(challenge, RELIGION, 15)
        result = _process(challenge, ARCANA, 12)
        assert result.final_dc == 12
        assert result.success is True


class TestDynamicElements:
    """Dynamic elements evaluated after each attempt."""

    def test_two_consecutive_successes_build_momentum(self, make_challenge):
        challenge = make_challenge(successes=6)
        first = _process(challenge, RELIGION, 15)
        second = _process(challenge, RELIGION, 15)

        assert first.triggered_elements == ()
        assert [e.effect.description for e in second.triggered_elements] == ["Momentum builds"]
        assert challenge.progression.momentum.triggers == ["Momentum builds"]

        third = _process(challenge, RELIGION, 14)
        assert third.final_dc == 14

    def test_interrupted_streak_does_not_trigger(self, make_challenge):
        challenge = make_challenge(successes=6, failures=4)
        _process(challenge, RELIGION, 15)
        _process(challenge, RELIGION, 10)
        result = _process(challenge, RELIGION, 15)
        assert "Momentum builds" not in [e.effect.description for e in result.triggered_elements]

    def test_failures_deteriorate_situation(self, make_challenge):
        challenge = make_challenge(successes=6, failures=4)
        first = _process(challenge, RELIGION, 10)
        second = _process(challenge, RELIGION, 10)
        assert first.triggered_elements == ()
        assert [e.effect.description for e in second.triggered_elements] == ["Situation deteriorates"]

    def test_effects_are_advisory(self, make_challenge):
        challenge = make_challenge(successes=6)
        _process(challenge, RELIGION, 15)
        _process(challenge, RELIGION, 15)
        assert challenge.progression.current_successes == 2


# === Rejections ===


class TestRejections:
    """Rejected attempts never touch the progression."""

    @staticmethod
    def _assert_untouched(challenge, successes=0, failures=0, history=0):
        progression = challenge.progression
        assert progression.current_successes == successes
        assert progression.current_failures == failures
        assert len(progression.attempt_history) == history

    def test_invalid_skill(self, make_challenge):
        challenge = make_challenge()
        result = _process(challenge, "Strength (Cooking)", 20)
        assert result.success is False
        assert result.rejection is RejectionReason.INVALID_SKILL
        assert result.message == "Invalid skill choice"
        assert result.progress is None
        self._assert_untouched(challenge)

    def test_usage_limit(self, make_challenge):
        challenge = make_challenge(successes=6)
        _process(challenge, PERFORMANCE, 15)
        result = _process(challenge, PERFORMANCE, 20)
        assert result.rejection is RejectionReason.USAGE_LIMIT
        assert result.message == "Skill usage limit exceeded"
        self._assert_untouched(challenge, successes=1, history=1)

    def test_prerequisite_unmet(self, make_challenge):
        challenge = make_challenge()
        result = _process(challenge, PERCEPTION, 20)
        assert result.rejection is RejectionReason.PREREQUISITE
        assert result.message == "Prerequisite not met: successes:1"
        self._assert_untouched(challenge)

    def test_prerequisite_met_later(self, make_challenge):
        challenge = make_challenge(successes=6)
        _process(challenge, RELIGION, 15)
        result = _process(challenge, PERCEPTION, 16)
        assert result.is_rejected is False
        assert result.success is True

    def test_completed_challenge(self, make_challenge):
        challenge = make_challenge(successes=3, failures=2)
        _process(challenge, RELIGION, 1)
        result = _process(challenge, RELIGION, 20)
        assert result.rejection is RejectionReason.CHALLENGE_COMPLETE
        self._assert_untouched(challenge, failures=2, history=1)

    def test_rejection_keeps_momentum(self, make_challenge):
        challenge = make_challenge()
        _process(challenge, RELIGION, 15)
        _process(challenge, "Strength (Cooking)", 1)
        assert challenge.progression.momentum.level is MomentumLevel.POSITIVE

    def test_rejection_is_logged(self, make_challenge, caplog):
        with caplog.at_level("INFO", logger="skill_challenge.engine.progression"):
            _process(make_challenge(), "Strength (Cooking)", 12)
        assert "Invalid skill choice" in caplog.text


class TestCheckPrerequisite:
    """Tests for ProgressionStateMachine.check_prerequisite()."""

    @pytest.fixture
    def progression(self):
        return ProgressionState(
            current_successes=1,
            current_failures=1,
            used_skills={RELIGION},
            participating_characters={"Aria"},
            momentum=MomentumState(level=MomentumLevel.POSITIVE),
        )

    @pytest.mark.parametrize("prerequisite,expected", [
        ("skill-used:Wisdom (Religion)", True),
        ("skill-used:Intelligence (Arcana)", False),
        ("successes:1", True),
        ("successes:2", False),
        ("failures-below:2", True),
        ("failures-below:1", False),
        ("momentum:neutral", True),
        ("momentum:positive", True),
        ("momentum:high", False),
        ("participant:Aria", True),
        ("participant:Bram", False),
    ])
    def test_prerequisites(self, progression, prerequisite, expected):
        assert ProgressionStateMachine.check_prerequisite(progression, prerequisite) is expected

    def test_malformed(self, progression):
        with pytest.raises(ValueError):
            ProgressionStateMachine.check_prerequisite(progression, "successes:many")


class TestAdvanceTime:
    """Tests for ProgressionStateMachine.advance_time()."""

    def test_accumulates(self, make_challenge):
        challenge = make_challenge(time_limit=30)
        assert ProgressionStateMachine.advance_time(challenge, 10) == 10
        assert ProgressionStateMachine.advance_time(challenge, 5.5) == 15.5
        assert challenge.progression.time_elapsed_minutes == 15.5

    def test_negative_rejected(self, make_challenge):
        challenge = make_challenge()
        with pytest.raises(ValueError, match="negative"):
            ProgressionStateMachine.advance_time(challenge, -5)
        assert challenge.progression.time_elapsed_minutes == 0

    def test_timeout_rejects_further_attempts(self, make_challenge):
        challenge = make_challenge(time_limit=30)
        ProgressionStateMachine.advance_time(challenge, 30)
        result = _process(challenge, RELIGION, 20)
        assert result.rejection is RejectionReason.CHALLENGE_COMPLETE

    def test_time_pressure_does_not_change_dc(self, make_challenge):
        challenge = make_challenge(time_limit=30)
        ProgressionStateMachine.advance_time(challenge, 28)
        result = _process(challenge, RELIGION, 15)
        assert result.final_dc == 15
        assert result.success is True


def test_creative_option_resolves_like_any_other(make_challenge):
    challenge = make_challenge()
    result = _process(challenge, CREATIVE_APPROACH, 14)
    assert result.success is True
    assert result.final_dc == 14
