# =========================================================
# --- core_state.py ---
# =========================================================

import numpy as np
from dataclasses import dataclass, field
from typing import Optional, List, Iterator

from .board import BOARD_START, NUM_OF_POINTS, COLORS, WHITE, BLACK
from .state_invariants import assert_board_invariant

# =========================================================

@dataclass(frozen=True)
class Slot:
    """
    One normalized board point.

    Attributes:
        count (int): Number of checkers on the point.
        color (Optional[str]): Color of the first checker, None if unknown or empty.
    """
    count: int = 0
    color: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        """Return True if no checker sits on the point."""
        return self.count == 0


@dataclass(frozen=True)
class RailCounts:
    """
    Checker counts on the bar or borne off, per color.

    Attributes:
        white (int): White checkers.
        black (int): Black checkers.
    """
    white: int = 0
    black: int = 0

    def for_color(self, color: str) -> int:
        """Return the count for a color name, 0 for unknown colors."""
        if color == WHITE:
            return self.white
        if color == BLACK:
            return self.black
        return 0

    @property
    def total(self) -> int:
        """Return the number of checkers of both colors."""
        return self.white + self.black


@dataclass
class Board24:
    """
    Fixed 24-slot projection of a remote board, rebuilt on every render.

    Attributes:
        counts (np.ndarray): Array of 24 checker counts (index = position - 1).
        colors (List[Optional[str]]): Color of each slot, None when empty or unknown.
        bar (RailCounts): Checkers on the bar.
        off (RailCounts): Checkers borne off.
        direction (str): Numbering the slot indices follow.
        debug (bool): Enable invariant assertions.
    """
    counts: np.ndarray = field(default_factory=lambda: np.zeros(NUM_OF_POINTS, dtype=np.int64))
    colors: List[Optional[str]] = field(default_factory=lambda: [None] * NUM_OF_POINTS)
    bar: RailCounts = field(default_factory=RailCounts)
    off: RailCounts = field(default_factory=RailCounts)
    direction: str = "clockwise"
    debug: bool = False

    # ---------- Slots ----------
    def set_slot(self, index: int, count: int, color: Optional[str]) -> None:
        """
        Overwrite a slot. Only the normalizer calls this.

        Args:
            index (int): Slot index 0..23.
            count (int): Number of checkers.
            color (Optional[str]): Color of the stack.
        """
        self.counts[index] = count
        self.colors[index] = color if count > 0 else None
        self._assert("set_slot")

    def slot(self, index: int) -> Slot:
        """Return the slot at a 0-based index."""
        return Slot(int(self.counts[index]), self.colors[index])

    def point(self, position: int) -> Slot:
        """Return the slot for a 1-based point number."""
        return self.slot(position - BOARD_START)

    @property
    def slots(self) -> List[Slot]:
        """Return all 24 slots in index order."""
        return [self.slot(i) for i in range(NUM_OF_POINTS)]

    def __iter__(self) -> Iterator[Slot]:
        return iter(self.slots)

    def __len__(self) -> int:
        return NUM_OF_POINTS

    # ---------- Queries ----------
    def checkers_on_board(self, color: str) -> int:
        """Return how many checkers of a color sit on the 24 points."""
        mask = np.array([c == color for c in self.colors], dtype=bool)
        return int(self.counts[mask].sum())

    def occupied_positions(self, color: Optional[str] = None) -> List[int]:
        """
        Return the 1-based points holding checkers.

        Args:
            color (Optional[str]): Restrict to one color. Defaults to any color.
        """
        indices = np.flatnonzero(self.counts > 0)
        return [
            int(i) + BOARD_START for i in indices
            if color is None or self.colors[i] == color
        ]

    def pip_count(self, color: str) -> int:
        """
        Return the pip count of a color in the slot numbering.

        Bar checkers count 25 pips; borne off checkers count nothing.
        The caller picks the direction matching the color's travel.
        """
        pips = sum(
            (i + BOARD_START) * int(self.counts[i])
            for i in range(NUM_OF_POINTS)
            if self.colors[i] == color
        )
        return pips + 25 * self.bar.for_color(color)

    def totals(self) -> dict:
        """Return checkers per color on board, bar and off."""
        return {
            color: self.checkers_on_board(color) + self.bar.for_color(color) + self.off.for_color(color)
            for color in COLORS
        }

    # ---------- Debug / Assertions ----------
    def _assert(self, where: str = "") -> None:
        """Assert board invariants if debug mode is active."""
        if self.debug:
            assert_board_invariant(self, where)
