"""
Skill Challenge Engine - Configuration Errors

Only catalog and configuration problems raise. Rejected player attempts
are reported through SkillAttemptResult instead.
"""


class ChallengeConfigurationError(ValueError):
    """Base class for catalog and configuration errors that abort generation."""


class UnknownTemplateError(ChallengeConfigurationError):
    """Raised when a theme does not map to any template in the catalog."""

    def __init__(self, theme: object) -> None:
        super().__init__(f"No challenge template for theme {theme!r}.")
        self.theme = theme


class StructuralViolation(ChallengeConfigurationError):
    """Raised when a template cannot produce a playable challenge."""
