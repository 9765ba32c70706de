"""
Skill Challenge Engine - Scaling Rules

Pure lookup tables mapping party size, party level and difficulty to
structural and DC adjustments. Applied once when a challenge is built,
never during attempt resolution.
"""

from dataclasses import dataclass

from skill_challenge.engine.base import ConsequenceIntensity, Difficulty
from skill_challenge.engine.errors import ChallengeConfigurationError


@dataclass(frozen=True)
class SizeAdjustment:
    size: int
    success_modifier: int
    failure_modifier: int
    dc_adjustment: int
    notes: tuple[str, ...] = ()


@dataclass(frozen=True)
class LevelAdjustment:
    """
    DC shift for a band of party levels.

    Attributes:
        min_level: Lowest level in the band
        max_level: Highest level in the band (None = open-ended)
        dc_modifier: Added to every generated DC
        complexity_change: Description of the structural feel
    """
    min_level: int
    max_level: int | None
    dc_modifier: int
    complexity_change: str = ""

    def contains(self, level: int) -> bool:
        if level < self.min_level:
            return False
        return self.max_level is None or level <= self.max_level

    @property
    def label(self) -> str:
        if self.max_level is None:
            return f"{self.min_level}+"
        return f"{self.min_level}-{self.max_level}"


@dataclass(frozen=True)
class DifficultyAdjustment:
    difficulty: Difficulty
    success_modifier: int
    failure_modifier: int
    consequence_intensity: ConsequenceIntensity


@dataclass(frozen=True)
class PressureModifier:
    """
    Advisory DC pressure once a timed challenge is nearly out of time.

    Attributes:
        time_remaining: Row applies at or below this many minutes left
        dc_modifier: Suggested DC increase for the table to narrate
        description: Short rules description
        narrative_effect: Flavour text for the table
    """
    time_remaining: int
    dc_modifier: int
    description: str
    narrative_effect: str = ""


@dataclass(frozen=True)
class ScalingRules:
    """
    Party-size, level, difficulty and time-pressure tables.

    Party sizes are clamped into the table's range before lookup, so a
    party of two uses the smallest row and a party of eight the largest.
    The base party size and base level have no row and adjust nothing.
    Time-pressure rows are reference data only and never change a DC.
    """
    party_size: tuple[SizeAdjustment, ...]
    level: tuple[LevelAdjustment, ...]
    difficulty: tuple[DifficultyAdjustment, ...]
    time_pressure: tuple[PressureModifier, ...] = ()
    base_party_size: int = 4
    base_level: int = 5
    base_time_minutes: int = 30

    def for_party_size(self, size: int) -> SizeAdjustment | None:
        """Row for ``size``, or None when the size needs no adjustment."""
        if not self.party_size:
            return None
        smallest = min(row.size for row in self.party_size)
        largest = max(row.size for row in self.party_size)
        clamped = max(smallest, min(largest, size))
        for row in self.party_size:
            if row.size == clamped:
                return row
        return None

    def for_level(self, level: int) -> LevelAdjustment | None:
        """Band containing ``level``, or None for levels with no adjustment."""
        for band in self.level:
            if band.contains(level):
                return band
        return None

    def for_difficulty(self, difficulty: Difficulty) -> DifficultyAdjustment:
        """
        Row for ``difficulty``.

        Raises:
            ChallengeConfigurationError: If the table has no row for the tier
        """
        for row in self.difficulty:
            if row.difficulty is difficulty:
                return row
        raise ChallengeConfigurationError(f"No difficulty scaling for {difficulty.value!r}.")

    def pressure_for(self, minutes_remaining: float) -> PressureModifier | None:
        """Tightest pressure row covering ``minutes_remaining``, if any."""
        matching = [row for row in self.time_pressure if minutes_remaining <= row.time_remaining]
        if not matching:
            return None
        return min(matching, key=lambda row: row.time_remaining)

    def structure_modifiers(self, difficulty: Difficulty, party_size: int) -> tuple[int, int]:
        """Combined (success, failure) modifiers for a difficulty and party size."""
        tier = self.for_difficulty(difficulty)
        successes = tier.success_modifier
        failures = tier.failure_modifier
        size = self.for_party_size(party_size)
        if size is not None:
            successes += size.success_modifier
            failures += size.failure_modifier
        return successes, failures

    def dc_modifier(self, party_size: int, party_level: int) -> int:
        """Combined DC shift for a party of the given size and level."""
        total = 0
        size = self.for_party_size(party_size)
        if size is not None:
            total += size.dc_adjustment
        band = self.for_level(party_level)
        if band is not None:
            total += band.dc_modifier
        return total


DEFAULT_SCALING_RULES = ScalingRules(
    party_size=(
        SizeAdjustment(3, -1, 0, -1, ("Reduced success requirement", "Slightly easier DCs")),
        SizeAdjustment(5, 1, 1, 0, ("Increased success requirement", "Additional failure tolerance")),
        SizeAdjustment(6, 2, 1, 0, ("Significantly increased requirements", "More failure tolerance")),
    ),
    level=(
        LevelAdjustment(1, 2, -3, "Simplified structure"),
        LevelAdjustment(3, 4, -1, "Standard structure"),
        LevelAdjustment(6, 8, 1, "Enhanced complexity"),
        LevelAdjustment(9, None, 2, "Maximum complexity"),
    ),
    difficulty=(
        DifficultyAdjustment(Difficulty.EASY, -1, 1, ConsequenceIntensity.LIGHT),
        DifficultyAdjustment(Difficulty.MODERATE, 0, 0, ConsequenceIntensity.STANDARD),
        DifficultyAdjustment(Difficulty.HARD, 1, -1, ConsequenceIntensity.SEVERE),
        DifficultyAdjustment(Difficulty.EXTREME, 2, -1, ConsequenceIntensity.DEVASTATING),
    ),
    time_pressure=(
        PressureModifier(10, 1, "Time pressure increases difficulty", "The urgency of the situation weighs heavily"),
        PressureModifier(5, 2, "Extreme time pressure", "Desperation sets in as time runs out"),
    ),
)
