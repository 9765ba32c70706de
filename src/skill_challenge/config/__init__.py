"""
Skill Challenge Engine Configuration.

Environment variables, settings, and logging configuration.
"""

from skill_challenge.config.settings import Settings, configure_logging, get_settings

__all__ = ["Settings", "configure_logging", "get_settings"]
