# =========================================================
# --- core_board.py ---
# =========================================================

"""
Board-related constants for the wire-format backgammon board.

This module defines:
- Board point range and slot count
- Checker colors and player directions
- Visible stack height for the terminal layout
- Quadrant ranges used by the layout engine
- The standard opening position (for demos and tests)
"""

from typing import Dict, List, Tuple

# =========================================================

#: Board point range (1-24 are the playable points)
BOARD_START = 1
BOARD_END = 24

#: Number of slots in the normalized board (index = position - 1)
NUM_OF_POINTS = BOARD_END - BOARD_START + 1

#: Checker colors as sent by the game service
WHITE = "white"
BLACK = "black"
COLORS: Tuple[str, str] = (WHITE, BLACK)

#: Player directions as sent by the game service
CLOCKWISE = "clockwise"
COUNTERCLOCKWISE = "counterclockwise"
DIRECTIONS: Tuple[str, str] = (CLOCKWISE, COUNTERCLOCKWISE)

#: Rail color per direction: clockwise checkers are white, counterclockwise black
RAIL_COLOR: Dict[str, str] = {
    CLOCKWISE: WHITE,
    COUNTERCLOCKWISE: BLACK,
}

#: Visible checker rows per half board; deeper stacks show a count
VISIBLE_ROWS = 5

#: Display order of the points, left to right
#: Upper half: 13-18 | bar | 19-24
#: Lower half: 12-7  | bar | 6-1
UPPER_LEFT: List[int] = list(range(13, 19))
UPPER_RIGHT: List[int] = list(range(19, 25))
LOWER_LEFT: List[int] = list(range(12, 6, -1))
LOWER_RIGHT: List[int] = list(range(6, 0, -1))

#: Sentinel e-mail the service historically used for robot users.
#: Only a fallback when no user roster is available.
ROBOT_EMAIL = "robot@nodots.com"

#: Standard opening position in clockwise numbering
#: Each entry: list of (point, number_of_checkers) for that color
#: Black: 2 on 1, 5 on 12, 3 on 17, 5 on 19
#: White: 2 on 24, 5 on 13, 3 on 8, 5 on 6
DEFAULT_POSITIONS: Dict[str, List[Tuple[int, int]]] = {
    BLACK: [(1, 2), (12, 5), (17, 3), (19, 5)],
    WHITE: [(24, 2), (13, 5), (8, 3), (6, 5)],
}


def opposite_position(position: int) -> int:
    """Return the mirrored point number (clockwise <-> counterclockwise)."""
    return BOARD_END + BOARD_START - position


def is_on_board(position: object) -> bool:
    """Check if a value is an integer point number on the board."""
    return (
        isinstance(position, int)
        and not isinstance(position, bool)
        and BOARD_START <= position <= BOARD_END
    )
