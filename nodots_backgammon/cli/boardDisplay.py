# =========================================================
# --- cli_boardDisplay.py ---
# =========================================================

from typing import Any, Dict, Iterable, List, Optional

from nodots_backgammon.core.board import CLOCKWISE
from nodots_backgammon.core.game import GameInfo, player_pips
from nodots_backgammon.core.normalizer import normalize_board

from .boardLayout import BoardLayout
from .cliColors import TColor, GLYPH, paint
from .cliUtils import clear
from .statusDisplay import render_status

# =========================================================

class BoardDisplay:
    """
    Class for displaying a remote game document in the terminal.

    Rendering is a pure function of the document: the board is normalized,
    laid out and annotated on every call, nothing is cached.

    Attributes:
        game (Any): The game document as returned by the service.
        roster (Optional[dict]): Users indexed by id, used for human/robot icons.
        clear_screen (bool): Whether to clear the screen before drawing.
        use_color (bool): Whether to use colored output.
        direction (str): Numbering of the drawn point labels.
        show_home (bool): Whether to draw the borne off tally.
    """

    def __init__(
        self,
        game: Any,
        roster: Optional[Dict[str, Dict[str, Any]]] = None,
        clear_screen: bool = False,
        use_color: bool = True,
        direction: str = CLOCKWISE,
        show_home: bool = True,
    ) -> None:
        self.game: Any = game
        self.roster: Optional[Dict[str, Dict[str, Any]]] = roster
        self.clear_screen: bool = clear_screen
        self.use_color: bool = use_color
        self.direction: str = direction
        self.show_home: bool = show_home

    def _header(self) -> Optional[str]:
        """
        Return the "● name (pips) vs ○ name (pips)" line, None without names.
        """
        players = GameInfo.from_json(self.game).players
        if len(players) < 2 or not any(p.name for p in players):
            return None

        def describe(player) -> str:
            glyph = GLYPH.get(player.color or "", "?")
            name = (player.name or "Unknown")[:10]
            pip_count = player_pips(self.game, player)
            pips = f" ({pip_count})" if pip_count is not None else ""
            return f"{glyph} {name}{pips}"

        return paint(f"{describe(players[0])} vs {describe(players[1])}", TColor.YELLOW, self.use_color)

    def render(
        self,
        from_points: Optional[Iterable[int]] = None,
        to_points: Optional[Iterable[int]] = None,
    ) -> str:
        """
        Render header, board and status block.

        Args:
            from_points (Optional[Iterable[int]]): Point labels highlighted as move origins.
            to_points (Optional[Iterable[int]]): Point labels highlighted as move targets.

        Returns:
            str: Board text ending in a newline.
        """
        board_view = self.game.get("board") if isinstance(self.game, dict) else None
        board = normalize_board(board_view, self.direction)
        layout = BoardLayout(
            use_color=self.use_color,
            show_home=self.show_home,
            highlight_from=from_points,
            highlight_to=to_points,
        )

        parts: List[str] = []
        header = self._header()
        if header:
            parts.append(header)
        parts.append(layout.layout(board))
        parts.append(render_status(self.game, self.roster, use_color=self.use_color))
        return "\n".join(parts) + "\n"

    def draw_all(
        self,
        from_points: Optional[Iterable[int]] = None,
        to_points: Optional[Iterable[int]] = None,
    ) -> None:
        """
        Print the complete board, clearing the terminal first if configured.
        """
        if self.clear_screen:
            clear()
        print(paint("--- Board ---", TColor.BOLD, self.use_color))
        print(self.render(from_points, to_points))

    @classmethod
    def render_board(cls, game: Any, roster: Optional[Dict[str, Dict[str, Any]]] = None, **kwargs: Any) -> str:
        """
        Render a game document without color.

        Args:
            game (Any): Game document.
            roster (Optional[dict]): Users indexed by id.
            **kwargs: Forwarded to the constructor (direction, show_home, ...).

        Returns:
            str: Deterministic board text.
        """
        kwargs.setdefault("use_color", False)
        return cls(game, roster, **kwargs).render()


def render_possible_moves(moves: List[Dict[str, Any]], use_color: bool = True) -> str:
    """
    Render a list of {from, to, dieValue} moves as a numbered list.

    Args:
        moves (List[dict]): Moves reported by the service.
        use_color (bool): Whether to use colored output.

    Returns:
        str: One line per move.
    """
    if not moves:
        return paint("No legal moves available.", TColor.RED, use_color)

    lines = [paint("Possible moves:", TColor.GREEN, use_color)]
    for idx, move in enumerate(moves, 1):
        lines.append(f"{idx}. {move.get('from')} > {move.get('to')} ({move.get('dieValue')})")
    return "\n".join(lines)
