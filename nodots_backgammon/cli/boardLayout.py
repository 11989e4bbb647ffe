# =========================================================
# --- cli_boardLayout.py ---
# =========================================================

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set

from nodots_backgammon.core.board import (
    UPPER_LEFT, UPPER_RIGHT, LOWER_LEFT, LOWER_RIGHT, VISIBLE_ROWS,
)
from nodots_backgammon.core.state import Board24, RailCounts, Slot

from .cliColors import TColor, GLYPH, UNKNOWN_GLYPH, paint

# =========================================================

#: Width of one point column
CELL_WIDTH = 3

#: Width of the bar column between the two quadrants of a half
BAR_WIDTH = 7

#: Row of a stack that shows the count when the stack is deeper than VISIBLE_ROWS.
#: Row 0 is the outer edge of the board, next to the point labels.
OVERFLOW_ROW = 0


def fit_count(count: int, width: int) -> str:
    """Return a count as text no wider than `width`, e.g. "99+" for 1000 in 3 characters."""
    text = str(count)
    if len(text) <= width:
        return text
    return "9" * (width - 1) + "+"


@dataclass
class GridRow:
    """
    One printed line of a board half.

    Attributes:
        left (List[str]): Six point cells left of the bar.
        bar (str): Bar column content.
        right (List[str]): Six point cells right of the bar.
    """
    left: List[str]
    bar: str
    right: List[str]


@dataclass
class BoardGrid:
    """
    Display cells of a complete board, in print order.

    Attributes:
        top (str): Upper border with the labels 13-24.
        upper (List[GridRow]): Upper half rows, top edge first.
        middle (GridRow): Separator row with the BAR label.
        lower (List[GridRow]): Lower half rows, bottom edge last.
        bottom (str): Lower border with the labels 12-1.
    """
    top: str
    upper: List[GridRow] = field(default_factory=list)
    middle: Optional[GridRow] = None
    lower: List[GridRow] = field(default_factory=list)
    bottom: str = ""


class BoardLayout:
    """
    Lays a Board24 out as the traditional two-sided board.

    Upper half shows points 13-18 | bar | 19-24, lower half 12-7 | bar | 6-1,
    so the board reads as one racetrack around the bar column.

    Attributes:
        use_color (bool): Whether to use colored output.
        show_home (bool): Whether to show the borne off tally in the bar column.
        highlight_from (Set[int]): Point labels highlighted as move origins.
        highlight_to (Set[int]): Point labels highlighted as move targets.
    """

    def __init__(
        self,
        use_color: bool = False,
        show_home: bool = True,
        highlight_from: Optional[Iterable[int]] = None,
        highlight_to: Optional[Iterable[int]] = None,
    ) -> None:
        self.use_color: bool = use_color
        self.show_home: bool = show_home
        self.highlight_from: Set[int] = set(highlight_from or ())
        self.highlight_to: Set[int] = set(highlight_to or ())

    # ---------------- Cells ----------------
    def cell(self, slot: Slot, row: int) -> str:
        """
        Return the 3-character cell of a point at a stacking row.

        - row >= count: blank
        - count > VISIBLE_ROWS and row == OVERFLOW_ROW: the count itself
        - otherwise: the checker glyph of the slot color

        Args:
            slot (Slot): The point.
            row (int): Stacking row, 0 = outer edge.

        Returns:
            str: Cell text.
        """
        if row >= slot.count:
            return " " * CELL_WIDTH
        if slot.count > VISIBLE_ROWS and row == OVERFLOW_ROW:
            text = fit_count(slot.count, CELL_WIDTH)
            if len(text) < CELL_WIDTH:
                text = f" {text:<2}"
            return paint(text, TColor.YELLOW, self.use_color)
        glyph = GLYPH.get(slot.color, UNKNOWN_GLYPH)
        return paint(f" {glyph} ", TColor.BOLD, self.use_color)

    def _label(self, position: int) -> str:
        """Return the border label of a point with move highlights."""
        s = f"{position:-^{CELL_WIDTH}}"
        if position in self.highlight_from and position in self.highlight_to:
            return paint(s, TColor.PURPLE, self.use_color)
        if position in self.highlight_from:
            return paint(s, TColor.GREEN, self.use_color)
        if position in self.highlight_to:
            return paint(s, TColor.YELLOW, self.use_color)
        return s

    def _border(self, left: List[int], right: List[int]) -> str:
        return (
            "+" + "".join(self._label(p) for p in left)
            + "+" + "-" * BAR_WIDTH + "+"
            + "".join(self._label(p) for p in right) + "+"
        )

    @staticmethod
    def _rail_pair(rail: RailCounts) -> str:
        return f"{fit_count(rail.white, 2)}{GLYPH['white']} {fit_count(rail.black, 2)}{GLYPH['black']}"

    def _row(self, board: Board24, left: List[int], right: List[int], row: int, bar: str) -> GridRow:
        return GridRow(
            left=[self.cell(board.point(p), row) for p in left],
            bar=f"{bar:^{BAR_WIDTH}}",
            right=[self.cell(board.point(p), row) for p in right],
        )

    # ---------------- Grid ----------------
    def build(self, board: Board24) -> BoardGrid:
        """
        Build the display grid of a board.

        Args:
            board (Board24): Normalized board.

        Returns:
            BoardGrid: Cells in print order.
        """
        grid = BoardGrid(top=self._border(UPPER_LEFT, UPPER_RIGHT))

        for row in range(VISIBLE_ROWS):
            bar = self._rail_pair(board.bar) if row == 0 else ""
            grid.upper.append(self._row(board, UPPER_LEFT, UPPER_RIGHT, row, bar))

        empty = [" " * CELL_WIDTH] * len(UPPER_LEFT)
        grid.middle = GridRow(left=empty, bar=f"{'BAR':^{BAR_WIDTH}}", right=empty)

        for row in range(VISIBLE_ROWS - 1, -1, -1):
            bar = ""
            if self.show_home and row == VISIBLE_ROWS - 1:
                bar = "HOME"
            elif self.show_home and row == 0:
                bar = self._rail_pair(board.off)
            grid.lower.append(self._row(board, LOWER_LEFT, LOWER_RIGHT, row, bar))

        grid.bottom = self._border(LOWER_LEFT, LOWER_RIGHT)
        return grid

    @staticmethod
    def render_row(row: GridRow) -> str:
        """Join one grid row with the vertical frame characters."""
        return "|" + "".join(row.left) + "|" + row.bar + "|" + "".join(row.right) + "|"

    def render(self, grid: BoardGrid) -> str:
        """
        Render a grid as text, one line per row.

        Args:
            grid (BoardGrid): Grid from `build`.

        Returns:
            str: The framed board, without trailing newline.
        """
        lines = [grid.top]
        lines.extend(self.render_row(r) for r in grid.upper)
        if grid.middle is not None:
            lines.append(self.render_row(grid.middle))
        lines.extend(self.render_row(r) for r in grid.lower)
        lines.append(grid.bottom)
        return "\n".join(lines)

    def layout(self, board: Board24) -> str:
        """Build and render a board in one step."""
        return self.render(self.build(board))

