import pytest

from nodots_backgammon.core.game import build_point
from nodots_backgammon.core.normalizer import (
    checker_color, extract_rail, normalize_board, point_position,
)
from nodots_backgammon.core.state import RailCounts, Slot


def test_opening_position_fills_eight_points(opening_game):
    board = normalize_board(opening_game["board"])

    assert board.occupied_positions() == [1, 6, 8, 12, 13, 17, 19, 24]
    assert board.point(1) == Slot(2, "black")
    assert board.point(12) == Slot(5, "black")
    assert board.point(17) == Slot(3, "black")
    assert board.point(19) == Slot(5, "black")
    assert board.point(24) == Slot(2, "white")
    assert board.point(13) == Slot(5, "white")
    assert board.point(8) == Slot(3, "white")
    assert board.point(6) == Slot(5, "white")
    assert board.totals() == {"white": 15, "black": 15}


def test_counterclockwise_numbering_mirrors_slots(opening_game):
    board = normalize_board(opening_game["board"], direction="counterclockwise")

    assert board.direction == "counterclockwise"
    assert board.point(24) == Slot(2, "black")
    assert board.point(1) == Slot(2, "white")
    assert board.point(19) == Slot(5, "white")


def test_unknown_direction_falls_back_to_clockwise(opening_game):
    board = normalize_board(opening_game["board"], direction="sideways")
    assert board.direction == "clockwise"
    assert board.point(1) == Slot(2, "black")


def test_empty_point_and_missing_point_are_identical():
    with_empty = normalize_board({"points": [build_point(5, None, 0)]})
    without = normalize_board({"points": []})

    assert with_empty.point(5) == without.point(5) == Slot(0, None)
    assert with_empty.occupied_positions() == without.occupied_positions() == []


def test_malformed_points_are_skipped():
    points = [
        "not a point",
        {"checkers": [{"color": "white"}]},
        {"position": {"clockwise": 0}, "checkers": [{"color": "white"}]},
        {"position": {"clockwise": 25}, "checkers": [{"color": "white"}]},
        {"position": {"clockwise": "3"}, "checkers": [{"color": "white"}]},
        {"position": {"clockwise": True}, "checkers": [{"color": "white"}]},
        build_point(3, "black", 2),
    ]
    board = normalize_board({"points": points})
    assert board.occupied_positions() == [3]


def test_missing_clockwise_position_is_not_mirrored():
    point = {"position": {"counterclockwise": 20}, "checkers": [{"color": "black"}]}
    board = normalize_board({"points": [point]})
    assert board.occupied_positions() == []


def test_duplicate_positions_last_wins():
    points = [build_point(7, "white", 4), build_point(7, "black", 1)]
    board = normalize_board({"points": points})
    assert board.point(7) == Slot(1, "black")


@pytest.mark.parametrize("board_view", [None, [], "board", {"points": "nope"}, {}])
def test_garbage_board_gives_empty_board(board_view):
    board = normalize_board(board_view)
    assert len(board) == 24
    assert all(slot.is_empty for slot in board)
    assert board.bar == RailCounts() and board.off == RailCounts()


def test_first_checker_decides_color():
    assert checker_color([{"color": "white"}, {"color": "black"}]) == "white"
    assert checker_color([{"id": "x"}]) is None
    assert checker_color([]) is None


def test_unknown_color_keeps_count():
    point = {"position": {"clockwise": 9}, "checkers": [{"id": "a"}, {"id": "b"}]}
    board = normalize_board({"points": [point]})
    assert board.point(9) == Slot(2, None)


def test_point_position_reads_requested_direction():
    point = build_point(4, "white", 1)
    assert point_position(point) == 4
    assert point_position(point, "counterclockwise") == 21
    assert point_position({}) is None


def test_debug_mode_checks_invariants(opening_game):
    board = normalize_board(opening_game["board"], debug=True)
    assert board.debug
    assert board.pip_count("black") == 1 * 2 + 12 * 5 + 17 * 3 + 19 * 5


# ---------------- Rails ----------------

def test_extract_directional_rail():
    rail = {
        "clockwise": {"checkers": [{"color": "white"}, {"color": "white"}]},
        "counterclockwise": {"checkers": [{"color": "black"}]},
    }
    assert extract_rail(rail) == RailCounts(white=2, black=1)


def test_extract_flat_rail():
    assert extract_rail({"white": 3, "black": 0}) == RailCounts(white=3, black=0)


def test_directional_shape_wins_over_flat():
    rail = {"clockwise": {"checkers": []}, "white": 4, "black": 2}
    assert extract_rail(rail) == RailCounts(white=0, black=0)


def test_partial_directional_rail():
    rail = {"counterclockwise": {"checkers": [{}, {}, {}]}}
    assert extract_rail(rail) == RailCounts(white=0, black=3)


@pytest.mark.parametrize("rail", [None, 7, "bar", {}, {"white": "2", "black": -1}, {"white": True}])
def test_unusable_rail_counts_zero(rail):
    assert extract_rail(rail) == RailCounts(0, 0)


def test_float_rail_counts_are_accepted():
    assert extract_rail({"white": 2.0, "black": 1}) == RailCounts(2, 1)


def test_rail_totals_in_board():
    view = {
        "points": [],
        "bar": {"white": 1, "black": 2},
        "off": {"clockwise": {"checkers": [{}] * 4}, "counterclockwise": {"checkers": []}},
    }
    board = normalize_board(view)
    assert board.bar.total == 3
    assert board.off.for_color("white") == 4
    assert board.off.for_color("green") == 0
    assert board.pip_count("black") == 50


def test_huge_stack_does_not_overflow():
    board = normalize_board({"points": [build_point(1, "black", 40000)]})
    assert board.point(1) == Slot(40000, "black")
    assert board.checkers_on_board("black") == 40000
