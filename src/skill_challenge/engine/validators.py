"""
Skill Challenge Engine - Input Validation Utilities

Provides validation functions for engine inputs. All validators
either return validated data or raise descriptive ValueError exceptions.
"""

from typing import Sequence

MOMENTUM_ORDER: tuple[str, ...] = ("negative", "neutral", "positive", "high")

PREREQUISITE_KINDS: frozenset[str] = frozenset({
    "skill-used",
    "successes",
    "failures-below",
    "momentum",
    "participant",
})

_NUMERIC_KINDS = frozenset({"successes", "failures-below"})


def validate_structure_bounds(successes_required: int, failures_allowed: int) -> tuple[int, int]:
    """
    Validate the "X successes before Y failures" bounds.

    Args:
        successes_required: Successes needed to win the challenge
        failures_allowed: Failures that end the challenge

    Returns:
        The validated (successes, failures) pair

    Raises:
        ValueError: If either bound is not an integer or is out of range
    """
    for name, value in (("successes_required", successes_required), ("failures_allowed", failures_allowed)):
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"{name} must be an integer, got {type(value).__name__}.")

    if successes_required < 2:
        raise ValueError(f"successes_required must be at least 2, got {successes_required}.")
    if failures_allowed < 1:
        raise ValueError(f"failures_allowed must be at least 1, got {failures_allowed}.")

    return successes_required, failures_allowed


def validate_usage_limit(limit: int | None) -> int | None:
    """
    Validate an optional per-skill usage cap.

    Raises:
        ValueError: If the limit is set but not a positive integer
    """
    if limit is None:
        return None
    if not isinstance(limit, int) or isinstance(limit, bool):
        raise ValueError(f"Usage limit must be an integer, got {type(limit).__name__}.")
    if limit < 1:
        raise ValueError(f"Usage limit must be positive, got {limit}.")
    return limit


def parse_prerequisite(text: str) -> tuple[str, str]:
    """
    Split a prerequisite string into its kind and argument.

    Prerequisites use a ``kind:argument`` form, for example
    ``skill-used:Wisdom (Insight)``, ``successes:2`` or ``momentum:positive``.

    Args:
        text: Prerequisite string to parse

    Returns:
        Tuple of (kind, argument)

    Raises:
        ValueError: If the kind is unknown or the argument is malformed
    """
    kind, sep, argument = text.partition(":")
    kind = kind.strip()
    argument = argument.strip()

    if not sep or not argument:
        raise ValueError(f"Prerequisite {text!r} must have the form 'kind:argument'.")
    if kind not in PREREQUISITE_KINDS:
        raise ValueError(
            f"Unknown prerequisite kind {kind!r}. Must be one of {sorted(PREREQUISITE_KINDS)}."
        )
    if kind in _NUMERIC_KINDS:
        if not argument.isdigit():
            raise ValueError(f"Prerequisite {text!r} needs a non-negative integer argument.")
    if kind == "momentum" and argument not in MOMENTUM_ORDER:
        raise ValueError(
            f"Prerequisite {text!r} names unknown momentum level. Must be one of {MOMENTUM_ORDER}."
        )

    return kind, argument


def validate_prerequisites(prerequisites: Sequence[str]) -> tuple[str, ...]:
    """Validate every prerequisite string and return them as a tuple."""
    values = tuple(prerequisites)
    for prereq in values:
        parse_prerequisite(prereq)
    return values


def validate_minutes(minutes: float) -> float:
    """
    Validate a span of in-game minutes.

    Raises:
        ValueError: If minutes is negative or not a number
    """
    if isinstance(minutes, bool) or not isinstance(minutes, (int, float)):
        raise ValueError(f"Minutes must be a number, got {type(minutes).__name__}.")
    if minutes < 0:
        raise ValueError(f"Minutes cannot be negative, got {minutes}.")
    return minutes
