import numpy as np
import pytest

from nodots_backgammon.core.board import opposite_position, is_on_board
from nodots_backgammon.core.state import Board24, RailCounts, Slot
from nodots_backgammon.core.state_invariants import (
    assert_board_invariant, assert_rail_invariant, assert_slot_invariant,
)


def test_new_board_is_empty():
    board = Board24()
    assert board.counts.shape == (24,)
    assert board.counts.dtype == np.int64
    assert board.slots == [Slot()] * 24
    assert board.occupied_positions() == []


def test_set_slot_clears_color_of_empty_slot():
    board = Board24()
    board.set_slot(0, 0, "white")
    assert board.slot(0) == Slot(0, None)


def test_point_uses_one_based_positions():
    board = Board24()
    board.set_slot(23, 2, "white")
    assert board.point(24) == Slot(2, "white")
    assert board.occupied_positions("white") == [24]
    assert board.occupied_positions("black") == []


def test_pip_count_includes_bar():
    board = Board24(bar=RailCounts(white=1, black=0))
    board.set_slot(5, 3, "white")
    assert board.pip_count("white") == 6 * 3 + 25
    assert board.checkers_on_board("white") == 3


def test_invariants_detect_negative_counts():
    board = Board24()
    board.counts[4] = -1
    with pytest.raises(AssertionError, match="NEGATIVE"):
        assert_slot_invariant(board, "test")


def test_invariants_detect_color_on_empty_slot():
    board = Board24()
    board.colors[2] = "black"
    with pytest.raises(AssertionError, match="COLOR DESYNC"):
        assert_board_invariant(board)


def test_invariants_detect_wrong_shape():
    board = Board24()
    board.colors = [None] * 23
    with pytest.raises(AssertionError, match="SHAPE"):
        assert_slot_invariant(board)


def test_invariants_detect_negative_rail():
    board = Board24(off=RailCounts(white=-1))
    with pytest.raises(AssertionError, match="RAIL"):
        assert_rail_invariant(board)


def test_debug_board_asserts_on_write():
    board = Board24(debug=True)
    board.colors[1] = "white"
    with pytest.raises(AssertionError):
        board.set_slot(0, 1, "black")


def test_position_helpers():
    assert opposite_position(1) == 24
    assert opposite_position(13) == 12
    assert is_on_board(1) and is_on_board(24)
    assert not is_on_board(0)
    assert not is_on_board(25)
    assert not is_on_board(True)
    assert not is_on_board(3.0)
