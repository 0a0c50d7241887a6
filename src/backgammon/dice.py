"""
Dice rolling mechanics.
"""

import random
from dataclasses import dataclass


@dataclass(frozen=True)
class DiceRoll:
    """Result of rolling two dice."""

    die1: int
    die2: int

    @property
    def is_double(self) -> bool:
        return self.die1 == self.die2

    def to_list(self) -> list[int]:
        return [self.die1, self.die2]

    def moves(self) -> list[int]:
        """Die values available to move with: a double is played four times."""
        if self.is_double:
            return [self.die1] * 4
        return [self.die1, self.die2]


class Dice:
    """Handles all dice rolling for the game."""

    def __init__(self, seed: int | None = None) -> None:
        """
        Args:
            seed: Optional seed for reproducible rolls (useful for testing)
        """
        self._random = random.Random(seed)

    def roll(self) -> DiceRoll:
        """Roll two independent six-sided dice."""
        return DiceRoll(die1=self._random.randint(1, 6), die2=self._random.randint(1, 6))


class FixedDice:
    """Returns a predetermined sequence of rolls. Lets tests and replays control the dice."""

    def __init__(self, rolls: list[tuple[int, int]]) -> None:
        self._rolls = list(rolls)

    def roll(self) -> DiceRoll:
        die1, die2 = self._rolls.pop(0)
        return DiceRoll(die1=die1, die2=die2)
