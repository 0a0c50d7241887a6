"""
Backgammon board: 24 points, the bar and the borne-off trays.

Points are indexed 0..23. Each point holds a signed checker count: positive counts are white checkers,
negative counts are black checkers. White moves from point 0 towards point 23 (home board 18..23),
black moves from point 23 towards point 0 (home board 0..5).
"""

from dataclasses import dataclass, field
from typing import Optional, Self

from src.core.exceptions import GameStateError
from src.core.shared_types import Color

NUM_POINTS = 24
CHECKERS_PER_SIDE = 15

# Pseudo points used by moves
BAR = 24
OFF = 25

HOME_BOARD: dict[Color, range] = {
    Color.WHITE: range(18, 24),
    Color.BLACK: range(0, 6),
}

DIRECTION: dict[Color, int] = {Color.WHITE: 1, Color.BLACK: -1}

SIGN: dict[Color, int] = {Color.WHITE: 1, Color.BLACK: -1}

# (point, color, checkers) of the standard starting position
STARTING_LAYOUT: list[tuple[int, Color, int]] = [
    (0, Color.WHITE, 2),
    (11, Color.WHITE, 5),
    (16, Color.WHITE, 3),
    (18, Color.WHITE, 5),
    (23, Color.BLACK, 2),
    (12, Color.BLACK, 5),
    (7, Color.BLACK, 3),
    (5, Color.BLACK, 5),
]


def relative_point(point: int, color: Color) -> int:
    """
    Index of a point as seen by the player with the 'color' checkers: 0 is their ace point, 23 their 24-point.
    (Equivalently: the number of pips minus one a checker on that point still has to travel.)
    """
    return NUM_POINTS - 1 - point if color == Color.WHITE else point


def absolute_point(relative: int, color: Color) -> int:
    """Inverse of relative_point"""
    return NUM_POINTS - 1 - relative if color == Color.WHITE else relative


@dataclass
class Board:
    points: list[int] = field(default_factory=lambda: [0] * NUM_POINTS)
    bar: dict[Color, int] = field(
        default_factory=lambda: {Color.WHITE: 0, Color.BLACK: 0}
    )
    off: dict[Color, int] = field(
        default_factory=lambda: {Color.WHITE: 0, Color.BLACK: 0}
    )

    @classmethod
    def empty(cls) -> Self:
        """No checkers on the board, bar or trays. Useful to set up test positions."""
        return cls()

    @classmethod
    def initial(cls) -> Self:
        board = cls()
        for point, color, checkers in STARTING_LAYOUT:
            board.place(point, color, checkers)
        return board

    def copy(self) -> Self:
        return type(self)(
            points=list(self.points), bar=dict(self.bar), off=dict(self.off)
        )

    # --- Queries ---
    def owner(self, point: int) -> Optional[Color]:
        count = self.points[point]
        if count > 0:
            return Color.WHITE
        if count < 0:
            return Color.BLACK
        return None

    def checkers_on(self, point: int, color: Color) -> int:
        """Number of 'color' checkers on a point (or on the bar)."""
        if point == BAR:
            return self.bar[color]
        count = self.points[point] * SIGN[color]
        return max(count, 0)

    def is_blocked(self, point: int, color: Color) -> bool:
        """A point is blocked for 'color' when the opponent holds it with two or more checkers."""
        return self.checkers_on(point, color.opponent) >= 2

    def all_home(self, color: Color) -> bool:
        """True when every checker of 'color' still in play sits in its home board."""
        if self.bar[color] > 0:
            return False
        home = HOME_BOARD[color]
        return all(
            self.checkers_on(point, color) == 0
            for point in range(NUM_POINTS)
            if point not in home
        )

    def pip_count(self, color: Color) -> int:
        pips = self.bar[color] * (NUM_POINTS + 1)
        for point in range(NUM_POINTS):
            pips += self.checkers_on(point, color) * (relative_point(point, color) + 1)
        return pips

    def checker_total(self, color: Color) -> int:
        on_board = sum(self.checkers_on(point, color) for point in range(NUM_POINTS))
        return on_board + self.bar[color] + self.off[color]

    def validate(self) -> None:
        """Every color must account for exactly 15 checkers (board + bar + borne off)."""
        for color in Color:
            total = self.checker_total(color)
            if total != CHECKERS_PER_SIDE:
                raise GameStateError(
                    f"Board holds {total} {color} checkers, expected {CHECKERS_PER_SIDE}."
                )

    # --- Updates ---
    def place(self, point: int, color: Color, checkers: int) -> None:
        """Put 'checkers' checkers of 'color' on an empty (or own) point."""
        if self.owner(point) not in (None, color):
            raise GameStateError(f"Point {point + 1} is occupied by the opponent.")
        self.points[point] += SIGN[color] * checkers

    def remove_checker(self, point: int, color: Color) -> None:
        if point == BAR:
            self.bar[color] -= 1
            return
        self.points[point] -= SIGN[color]

    def add_checker(self, point: int, color: Color) -> None:
        if point == OFF:
            self.off[color] += 1
            return
        self.points[point] += SIGN[color]

    def hit(self, point: int, color: Color) -> None:
        """Send the single 'color' checker on a point to the bar"""
        self.points[point] = 0
        self.bar[color] += 1

    # --- Export ---
    def to_points(self) -> list[dict]:
        """Occupied points, 1-indexed, in the shape the frontend draws."""
        occupied = []
        for point, count in enumerate(self.points):
            owner = self.owner(point)
            if owner is None:
                continue
            occupied.append(
                {"point": point + 1, "player": str(owner), "checkers": abs(count)}
            )
        return occupied
