# =========================================================
# --- core_state_invariants.py ---
# =========================================================

import numpy as np
from typing import Any

from .board import NUM_OF_POINTS

# =========================================================

def assert_slot_invariant(board: Any, where: str = "") -> None:
    """
    Check that the slot arrays have the fixed shape and consistent colors.

    Args:
        board: The Board24 object to check.
        where: Optional description of where the check is performed (for debugging).

    Raises:
        AssertionError: If the arrays are not 24 long, a count is negative,
            or an empty slot carries a color.
    """
    if board.counts.shape != (NUM_OF_POINTS,) or len(board.colors) != NUM_OF_POINTS:
        raise AssertionError(
            f"[SHAPE] expected {NUM_OF_POINTS} slots at {where}\n"
            f"counts={board.counts.shape}, colors={len(board.colors)}"
        )

    negative = np.flatnonzero(board.counts < 0)
    if negative.size:
        raise AssertionError(
            f"[NEGATIVE COUNT] slots {negative.tolist()} at {where}"
        )

    for i in np.flatnonzero(board.counts == 0):
        if board.colors[i] is not None:
            raise AssertionError(
                f"[COLOR DESYNC] empty slot {i} has color {board.colors[i]} at {where}"
            )


def assert_rail_invariant(board: Any, where: str = "") -> None:
    """
    Check that bar and off counts are non-negative.

    Raises:
        AssertionError: If any rail count is negative.
    """
    for name in ("bar", "off"):
        rail = getattr(board, name)
        if rail.white < 0 or rail.black < 0:
            raise AssertionError(
                f"[RAIL] negative {name} count at {where}: {rail}"
            )


def assert_board_invariant(board: Any, where: str = "") -> None:
    """
    Perform full invariant check for a Board24.

    This includes:
    - Slot shape and color consistency
    - Non-negative rail counts

    Args:
        board: The Board24 object to check.
        where: Optional description of where the check is performed (for debugging).

    Raises:
        AssertionError: If any invariant fails.
    """
    assert_slot_invariant(board, where)
    assert_rail_invariant(board, where)
