"""
Skill Challenge Engine.

Generator and state machine for tabletop "X successes before Y failures"
skill challenges.
"""

__version__ = "0.1.0"
