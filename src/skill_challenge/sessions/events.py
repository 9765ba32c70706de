"""
Skill Challenge Engine - Session Event Definitions

Event types and payloads emitted while a hosted challenge is played.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from skill_challenge.engine.base import MomentumLevel, SkillAttemptResult


class ChallengeEvent(Enum):
    """Events that can occur during a hosted challenge."""

    CHALLENGE_CREATED = auto()
    ATTEMPT_RESOLVED = auto()
    ATTEMPT_REJECTED = auto()
    DYNAMIC_TRIGGERED = auto()
    MOMENTUM_SHIFTED = auto()
    TIME_ADVANCED = auto()
    CHALLENGE_COMPLETED = auto()
    CHALLENGE_CLOSED = auto()


@dataclass
class EventPayload:
    """Wrapper for session event data."""

    event: ChallengeEvent
    challenge_id: str
    character: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


def classify_attempt(
    result: SkillAttemptResult,
    momentum_before: MomentumLevel,
    momentum_after: MomentumLevel,
) -> list[ChallengeEvent]:
    """Determine the events produced by one processed attempt, in emit order."""
    if result.is_rejected:
        return [ChallengeEvent.ATTEMPT_REJECTED]

    events = [ChallengeEvent.ATTEMPT_RESOLVED]
    if result.triggered_elements:
        events.append(ChallengeEvent.DYNAMIC_TRIGGERED)
    if momentum_after is not momentum_before:
        events.append(ChallengeEvent.MOMENTUM_SHIFTED)
    if result.progress is not None and result.progress.is_complete:
        events.append(ChallengeEvent.CHALLENGE_COMPLETED)
    return events
