"""
Skill Challenge Engine - Session Manager

Host-side registry of live challenges. Serialises mutation per challenge
with one lock per challenge id so a server can run many tables at once.
Challenges never share mutable state, so there is no cross-challenge
locking.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Mapping

from skill_challenge.engine.base import (
    Challenge,
    ChallengeTheme,
    CompletionResult,
    Difficulty,
    MomentumLevel,
    SkillAttemptResult,
    SkillSuggestion,
)
from skill_challenge.engine.challenge_engine import SkillChallengeEngine
from skill_challenge.engine.completion import CompletionEvaluator
from skill_challenge.engine.models import ChallengeContext, SkillAttemptInput, SuggestionContext
from skill_challenge.sessions.events import ChallengeEvent, EventPayload, classify_attempt

logger = logging.getLogger(__name__)

Listener = Callable[[EventPayload], None]


class ChallengeSessionManager:
    """Owns live challenges and serialises attempts per challenge.

    Listeners are called synchronously after each change, outside the
    challenge lock. A failing listener is logged and skipped.
    """

    def __init__(self, engine: SkillChallengeEngine | None = None) -> None:
        self._engine = engine if engine is not None else SkillChallengeEngine()
        self._challenges: dict[str, Challenge] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self._listeners: list[Listener] = []

    # -- Listeners -------------------------------------------------------

    def subscribe(self, on_event: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        with self._registry_lock:
            self._listeners.append(on_event)

        def unsubscribe() -> None:
            with self._registry_lock:
                if on_event in self._listeners:
                    self._listeners.remove(on_event)

        return unsubscribe

    # -- Lifecycle -------------------------------------------------------

    def create(
        self,
        theme: ChallengeTheme | str,
        difficulty: Difficulty | str,
        context: ChallengeContext | Mapping[str, Any] | None = None,
    ) -> str:
        """Generate a challenge and register it. Returns the challenge id."""
        challenge = self._engine.generate_challenge(theme, difficulty, context)
        with self._registry_lock:
            self._challenges[challenge.id] = challenge
            self._locks[challenge.id] = threading.Lock()

        self._emit(EventPayload(
            event=ChallengeEvent.CHALLENGE_CREATED,
            challenge_id=challenge.id,
            data={"name": challenge.name, "format": challenge.structure.format},
        ))
        return challenge.id

    def get(self, challenge_id: str) -> Challenge:
        """Return a registered challenge.

        Raises:
            KeyError: If the id is unknown or closed
        """
        with self._registry_lock:
            return self._challenges[challenge_id]

    def active_ids(self) -> list[str]:
        with self._registry_lock:
            return list(self._challenges)

    def close(self, challenge_id: str) -> Challenge:
        """Stop hosting a challenge and return it.

        Raises:
            KeyError: If the id is unknown or already closed
        """
        with self._registry_lock:
            challenge = self._challenges.pop(challenge_id)
            self._locks.pop(challenge_id, None)

        self._emit(EventPayload(event=ChallengeEvent.CHALLENGE_CLOSED, challenge_id=challenge_id))
        return challenge

    # -- Play ------------------------------------------------------------

    def attempt(
        self,
        challenge_id: str,
        attempt: SkillAttemptInput | Mapping[str, Any],
    ) -> SkillAttemptResult:
        """Process one attempt with the challenge's lock held."""
        challenge, lock = self._lookup(challenge_id)
        if not isinstance(attempt, SkillAttemptInput):
            attempt = SkillAttemptInput.model_validate(attempt)

        with lock:
            momentum_before = challenge.progression.momentum.level
            result = self._engine.process_attempt(challenge, attempt)
            momentum_after = challenge.progression.momentum.level

        for event in classify_attempt(result, momentum_before, momentum_after):
            self._emit(EventPayload(
                event=event,
                challenge_id=challenge_id,
                character=attempt.character,
                data=self._event_data(event, result, momentum_after),
            ))
        return result

    def advance_time(self, challenge_id: str, minutes: float) -> float:
        """Advance a challenge's clock; emits completion on timeout."""
        challenge, lock = self._lookup(challenge_id)

        with lock:
            was_complete = CompletionEvaluator.is_complete(challenge.structure, challenge.progression)
            elapsed = self._engine.advance_time(challenge, minutes)
            now_complete = CompletionEvaluator.is_complete(challenge.structure, challenge.progression)

        self._emit(EventPayload(
            event=ChallengeEvent.TIME_ADVANCED,
            challenge_id=challenge_id,
            data={"minutes": minutes, "elapsed": elapsed},
        ))
        if now_complete and not was_complete:
            self._emit(EventPayload(
                event=ChallengeEvent.CHALLENGE_COMPLETED,
                challenge_id=challenge_id,
                data={"elapsed": elapsed},
            ))
        return elapsed

    def completion(self, challenge_id: str) -> CompletionResult:
        challenge, lock = self._lookup(challenge_id)
        with lock:
            return self._engine.check_completion(challenge)

    def suggest(
        self,
        challenge_id: str,
        context: SuggestionContext | Mapping[str, Any],
    ) -> list[SkillSuggestion]:
        challenge, lock = self._lookup(challenge_id)
        with lock:
            return self._engine.suggest_skills(challenge, context)

    # -- Internals -------------------------------------------------------

    def _lookup(self, challenge_id: str) -> tuple[Challenge, threading.Lock]:
        with self._registry_lock:
            return self._challenges[challenge_id], self._locks[challenge_id]

    @staticmethod
    def _event_data(event: ChallengeEvent, result: SkillAttemptResult, momentum: MomentumLevel) -> dict[str, Any]:
        if event is ChallengeEvent.ATTEMPT_REJECTED:
            return {"reason": result.rejection.value if result.rejection else None, "message": result.message}
        if event is ChallengeEvent.DYNAMIC_TRIGGERED:
            return {"effects": [e.effect.description for e in result.triggered_elements]}
        if event is ChallengeEvent.MOMENTUM_SHIFTED:
            return {"momentum": momentum.value}
        data: dict[str, Any] = {"result": result.result.value, "final_dc": result.final_dc}
        if result.progress is not None:
            data.update(successes=result.progress.successes, failures=result.progress.failures)
        return data

    def _emit(self, payload: EventPayload) -> None:
        with self._registry_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(payload)
            except Exception:
                logger.exception("Listener failed on %s for challenge %s", payload.event.name, payload.challenge_id)
