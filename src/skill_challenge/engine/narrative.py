"""
Skill Challenge Engine - Narrative Provider

The engine never generates prose itself. It asks a NarrativeProvider for
plain strings keyed by theme tag and outcome. StaticNarrativeProvider
serves fixed text; hosts backed by a text generation service can supply
their own implementation.
"""

from typing import Protocol

from skill_challenge.engine.base import ChallengeOutcome

_DESCRIPTIONS: dict[str, str] = {
    "mental-resistance": "A test of mental fortitude against overwhelming psychic influence",
    "social-interaction": "A complex social situation requiring careful navigation and diplomacy",
    "physical-challenge": "A dangerous environment that tests physical prowess and survival instincts",
    "magical-complexity": "An intricate magical working requiring precise coordination and arcane knowledge",
    "intellectual-challenge": "A mystery that demands careful investigation and logical deduction",
}

_OPENINGS: dict[str, str] = {
    "mental-resistance": "A powerful psychic presence presses against your minds, testing your mental fortitude...",
    "social-interaction": "The situation is delicate, requiring careful words and diplomatic finesse...",
    "physical-challenge": "The environment ahead is treacherous, demanding physical skill and endurance...",
    "magical-complexity": "The magical energies swirl chaotically, requiring precise control and understanding...",
    "intellectual-challenge": "Clues and mysteries surround you, waiting to be unraveled through careful investigation...",
}


class NarrativeProvider(Protocol):
    """Source of flavour text for a challenge."""

    def describe(self, theme_tag: str) -> str:
        """One-line description of a challenge with this theme."""
        ...

    def opening(self, theme_tag: str) -> str:
        """Opening prose read when the challenge begins."""
        ...

    def conclusion(self, outcome: ChallengeOutcome, challenge_name: str, consequence_narrative: str) -> str:
        """Closing prose for a finished challenge."""
        ...


class StaticNarrativeProvider:
    """Fixed English text for every built-in theme."""

    def describe(self, theme_tag: str) -> str:
        return _DESCRIPTIONS.get(theme_tag, "A complex challenge requiring diverse skills and teamwork")

    def opening(self, theme_tag: str) -> str:
        return _OPENINGS.get(
            theme_tag, "A complex challenge lies before you, requiring diverse skills and teamwork..."
        )

    def conclusion(self, outcome: ChallengeOutcome, challenge_name: str, consequence_narrative: str) -> str:
        if outcome is ChallengeOutcome.SUCCESS:
            return (
                f"Through skill, determination, and teamwork, you have successfully overcome "
                f"the {challenge_name}. {consequence_narrative}"
            )
        if outcome is ChallengeOutcome.FAILURE:
            return (
                f"Despite your best efforts, the {challenge_name} proves too difficult to "
                f"overcome completely. {consequence_narrative}"
            )
        if outcome is ChallengeOutcome.TIMEOUT:
            return (
                f"Time runs out before you can complete the {challenge_name}. The pressure of "
                f"the deadline forces you to seek alternative solutions."
            )
        return ""
