"""
Skill Challenge Engine Sessions.

Event vocabulary and per-challenge serialised hosting for multi-table play.
"""

from skill_challenge.sessions.events import ChallengeEvent, EventPayload, classify_attempt
from skill_challenge.sessions.session_manager import ChallengeSessionManager

__all__ = [
    "ChallengeEvent",
    "ChallengeSessionManager",
    "EventPayload",
    "classify_attempt",
]
