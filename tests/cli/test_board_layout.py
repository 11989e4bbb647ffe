import pytest

from nodots_backgammon.cli.boardLayout import BAR_WIDTH, CELL_WIDTH, BoardLayout, fit_count
from nodots_backgammon.cli.cliColors import TColor, paint
from nodots_backgammon.core.board import LOWER_LEFT, LOWER_RIGHT, UPPER_LEFT, UPPER_RIGHT
from nodots_backgammon.core.game import build_point
from nodots_backgammon.core.normalizer import normalize_board
from nodots_backgammon.core.state import Board24, RailCounts

TOP = "+13-14-15-16-17-18-+-------+19-20-21-22-23-24-+"
BOTTOM = "+12-11-10--9--8--7-+-------+-6--5--4--3--2--1-+"


def column_offset(position):
    """Character offset of a point cell within a board line."""
    for left, right in ((UPPER_LEFT, UPPER_RIGHT), (LOWER_LEFT, LOWER_RIGHT)):
        if position in left:
            return 1 + CELL_WIDTH * left.index(position)
        if position in right:
            return 2 + CELL_WIDTH * len(left) + BAR_WIDTH + 1 + CELL_WIDTH * right.index(position)
    raise ValueError(position)


def render(board, **kwargs):
    return BoardLayout(**kwargs).layout(board).split("\n")


def column(lines, position):
    """Return the five cells of a point, edge row first."""
    offset = column_offset(position)
    if position in UPPER_LEFT or position in UPPER_RIGHT:
        rows = lines[1:6]
    else:
        rows = list(reversed(lines[7:12]))
    return [line[offset:offset + CELL_WIDTH] for line in rows]


def board_of(*points, **rails):
    view = {"points": [build_point(p, color, n) for p, color, n in points]}
    view.update(rails)
    return normalize_board(view)


def test_frame_shape():
    lines = render(Board24())
    assert len(lines) == 13
    assert lines[0] == TOP
    assert lines[-1] == BOTTOM
    assert all(len(line) == 47 for line in lines)
    assert all(line[0] == "|" and line[-1] == "|" for line in lines[1:-1])
    assert "BAR" in lines[6]


def test_opening_position_columns(opening_game):
    lines = render(normalize_board(opening_game["board"]))
    expected = {1: ("●", 2), 12: ("●", 5), 17: ("●", 3), 19: ("●", 5),
                24: ("○", 2), 13: ("○", 5), 8: ("○", 3), 6: ("○", 5)}

    for position in range(1, 25):
        cells = column(lines, position)
        glyph, count = expected.get(position, (None, 0))
        assert cells[:count] == [f" {glyph} "] * count
        assert cells[count:] == ["   "] * (5 - count)


def test_upper_half_stacks_down_from_top_edge():
    lines = render(board_of((15, "white", 1)))
    offset = column_offset(15)
    assert lines[1][offset:offset + 3] == " ○ "
    assert lines[5][offset:offset + 3] == "   "


def test_lower_half_stacks_up_from_bottom_edge():
    lines = render(board_of((3, "black", 1)))
    offset = column_offset(3)
    assert lines[11][offset:offset + 3] == " ● "
    assert lines[7][offset:offset + 3] == "   "


def test_eleven_checkers_show_count():
    lines = render(board_of((1, "black", 11)))
    cells = column(lines, 1)
    assert cells[0] == " 11"
    assert cells[1:] == [" ● "] * 4


@pytest.mark.parametrize("count, label", [(6, " 6 "), (11, " 11"), (15, " 15")])
def test_overflow_counts(count, label):
    cells = column(render(board_of((20, "white", count))), 20)
    assert cells[0] == label
    assert cells[1:] == [" ○ "] * 4


def test_five_checkers_do_not_overflow():
    cells = column(render(board_of((9, "white", 5))), 9)
    assert cells == [" ○ "] * 5


def test_empty_point_and_absent_point_render_the_same():
    with_empty = normalize_board({"points": [build_point(10, "white", 0)]})
    assert render(with_empty) == render(Board24())


def test_unknown_color_renders_question_mark():
    board = normalize_board({"points": [{"position": {"clockwise": 4}, "checkers": [{"id": "x"}]}]})
    assert column(render(board), 4)[0] == " ? "


def test_bar_and_home_counts():
    board = Board24(bar=RailCounts(white=1, black=2), off=RailCounts(white=3, black=0))
    lines = render(board)
    assert "1○ 2●" in lines[1]
    assert "HOME" in lines[7]
    assert "3○ 0●" in lines[11]


def test_home_can_be_hidden():
    board = Board24(off=RailCounts(white=3, black=0))
    text = "\n".join(render(board, show_home=False))
    assert "HOME" not in text
    assert "3○" not in text


def test_render_is_idempotent(opening_game):
    board = normalize_board(opening_game["board"])
    layout = BoardLayout()
    assert layout.layout(board) == layout.layout(board)


def test_labels_are_highlighted():
    lines = render(Board24(), use_color=True, highlight_from=[6], highlight_to=[3, 19])
    assert paint("-6-", TColor.GREEN) in lines[-1]
    assert paint("-3-", TColor.YELLOW) in lines[-1]
    assert paint("19-", TColor.YELLOW) in lines[0]


def test_same_label_from_and_to():
    lines = render(Board24(), use_color=True, highlight_from=[13], highlight_to=[13])
    assert paint("13-", TColor.PURPLE) in lines[0]


def test_column_offsets_line_up_with_labels():
    for position in range(1, 25):
        offset = column_offset(position)
        border = TOP if position >= 13 else BOTTOM
        assert border[offset:offset + 3] == f"{position:-^3}"


def test_layout_order():
    assert LOWER_LEFT == [12, 11, 10, 9, 8, 7]
    assert LOWER_RIGHT == [6, 5, 4, 3, 2, 1]


@pytest.mark.parametrize("count, label", [(100, "100"), (999, "999"), (1000, "99+"), (40000, "99+")])
def test_large_counts_keep_line_width(count, label):
    lines = render(board_of((7, "black", count)))
    assert all(len(line) == 47 for line in lines)
    assert column(lines, 7)[0] == label


def test_large_flat_rails_keep_line_width():
    lines = render(board_of(bar={"white": 100, "black": 100}, off={"white": 100, "black": 5}))
    assert all(len(line) == 47 for line in lines)
    assert "9+○ 9+●" in lines[1]
    assert "9+○ 5●" in lines[11]


def test_fit_count():
    assert fit_count(7, 2) == "7"
    assert fit_count(99, 2) == "99"
    assert fit_count(100, 2) == "9+"
    assert fit_count(1000, 3) == "99+"


@pytest.mark.parametrize("color, glyph", [("white", "○"), ("black", "●")])
@pytest.mark.parametrize("count", range(1, 6))
@pytest.mark.parametrize("position", range(1, 25))
def test_stack_shows_one_glyph_per_checker(position, count, color, glyph):
    lines = render(board_of((position, color, count)))
    for other in range(1, 25):
        cells = column(lines, other)
        if other == position:
            assert cells[:count] == [f" {glyph} "] * count
            assert cells[count:] == ["   "] * (5 - count)
        else:
            assert cells == ["   "] * 5
