# =========================================================
# --- core_normalizer.py ---
# =========================================================

"""
Normalization of the wire-format board into a Board24.

All shape-sniffing of the service JSON happens here, once. The renderer
only ever sees the typed result.
"""

from typing import Any, Dict, List, Optional

from .board import BOARD_START, CLOCKWISE, COUNTERCLOCKWISE, DIRECTIONS, is_on_board
from .state import Board24, RailCounts

# =========================================================

def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _as_count(value: Any) -> int:
    """Coerce a flat rail count; anything unusable counts as 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float) and value.is_integer():
        return max(int(value), 0)
    return 0


def checker_color(checkers: List[Any]) -> Optional[str]:
    """
    Return the color of the first checker of a stack.

    Mixed stacks are not rejected: the first checker decides.

    Args:
        checkers (List[Any]): Checker objects, bottom to top.

    Returns:
        Optional[str]: The color string or None if unknown.
    """
    if not checkers:
        return None
    color = _as_dict(checkers[0]).get("color")
    return color if isinstance(color, str) and color else None


def extract_rail(rail_view: Any) -> RailCounts:
    """
    Map a bar or off sub-document to per-color counts.

    Two shapes are accepted:
    - directional: {"clockwise": {"checkers": [...]}, "counterclockwise": {"checkers": [...]}}
    - flat: {"white": n, "black": n}

    The directional shape wins when either direction key is present.

    Args:
        rail_view (Any): The bar/off JSON value.

    Returns:
        RailCounts: White (clockwise) and black (counterclockwise) counts.
    """
    rail = _as_dict(rail_view)

    if CLOCKWISE in rail or COUNTERCLOCKWISE in rail:
        white = len(_as_list(_as_dict(rail.get(CLOCKWISE)).get("checkers")))
        black = len(_as_list(_as_dict(rail.get(COUNTERCLOCKWISE)).get("checkers")))
        return RailCounts(white=white, black=black)

    return RailCounts(
        white=_as_count(rail.get("white")),
        black=_as_count(rail.get("black")),
    )


def point_position(point_view: Any, direction: str = CLOCKWISE) -> Optional[int]:
    """
    Return the point number of a PointView in the given numbering.

    Args:
        point_view (Any): PointView JSON object.
        direction (str): "clockwise" or "counterclockwise".

    Returns:
        Optional[int]: Point number 1..24, or None if missing or off board.
    """
    position = _as_dict(_as_dict(point_view).get("position"))
    value = position.get(direction)
    return value if is_on_board(value) else None


def normalize_board(board_view: Any, direction: str = CLOCKWISE, debug: bool = False) -> Board24:
    """
    Build the 24-slot board from a BoardView.

    - Points without a usable position are skipped.
    - Duplicate positions: the last PointView wins.
    - Missing points stay empty.

    Args:
        board_view (Any): The "board" object of a game document.
        direction (str, optional): Numbering used for slot indices. Unknown
            values fall back to clockwise. Defaults to "clockwise".
        debug (bool, optional): Assert Board24 invariants while building.

    Returns:
        Board24: Freshly built board; never raises on malformed input.
    """
    if direction not in DIRECTIONS:
        direction = CLOCKWISE

    view = _as_dict(board_view)
    board = Board24(direction=direction, debug=debug)

    for point_view in _as_list(view.get("points")):
        position = point_position(point_view, direction)
        if position is None:
            continue
        checkers = _as_list(_as_dict(point_view).get("checkers"))
        board.set_slot(position - BOARD_START, len(checkers), checker_color(checkers))

    board.bar = extract_rail(view.get("bar"))
    board.off = extract_rail(view.get("off"))
    board._assert("normalize_board")
    return board
