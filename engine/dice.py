"""Seeded, reproducible dice for Skirmish Server."""

# Linear congruential generator constants. The sequence for a given seed is
# part of the wire contract: replaying a session must reproduce every roll.
LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280


class SeededRNG:
    """Deterministic dice source built from a single integer seed.

    Two instances built from the same seed return the same values for the
    same sequence of calls, in any process. The generator only touches its
    own state.
    """

    def __init__(self, seed: int) -> None:
        self._state = seed % LCG_MODULUS

    def _next(self) -> int:
        self._state = (self._state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self._state

    def roll(self, sides: int) -> int:
        """Roll a single die with the given number of sides.

        Args:
            sides: Number of faces (must be positive).

        Returns:
            A value in [1, sides].

        Raises:
            ValueError: If sides is not positive.
        """
        if sides < 1:
            raise ValueError(f"Die must have at least one side, got {sides}")
        return self._next() * sides // LCG_MODULUS + 1

    def roll_d20(self) -> int:
        return self.roll(20)

    def roll_d6(self) -> int:
        return self.roll(6)

    def roll_d100(self) -> int:
        return self.roll(100)

    def random_int(self, min_value: int, max_value: int) -> int:
        """Return an int in [min_value, max_value]; min_value if the range is empty."""
        if min_value > max_value:
            return min_value
        return min_value + self.roll(max_value - min_value + 1) - 1
