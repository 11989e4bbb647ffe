# =========================================================
# --- cli_statusDisplay.py ---
# =========================================================

from typing import Any, Dict, List, Optional

from nodots_backgammon.core.game import GameInfo, PlayerInfo, classify_player, player_pips, HUMAN

from .cliColors import TColor, GLYPH, ICON, paint

# =========================================================

#: Ids longer than this are shortened when `short_id` is requested
SHORT_ID_LIMIT = 12
SHORT_ID_PREFIX = 8

LEGEND = f"{GLYPH['black']} = Black, {GLYPH['white']} = White | BAR = Hit | HOME = Borne off"


def format_game_id(game_id: str, short_id: bool = False) -> str:
    """Return the game id, shortened to a prefix for long ids when requested."""
    if short_id and len(game_id) > SHORT_ID_LIMIT:
        return game_id[:SHORT_ID_PREFIX] + "…"
    return game_id


def format_player(player: PlayerInfo, active_color: Optional[str],
                  roster: Optional[Dict[str, Dict[str, Any]]] = None, use_color: bool = False,
                  pips: Optional[int] = None) -> str:
    """
    Return the status line of one player.

    Example: "🤖 Robot: BLACK (counterclockwise) pips:167 <- ACTIVE"

    Args:
        player (PlayerInfo): Player to describe.
        active_color (Optional[str]): Color whose turn it is.
        roster (Optional[dict]): Users indexed by id for classification.
        use_color (bool): Whether to use colored output.
        pips (Optional[int]): Pip count to show, defaults to the reported one.

    Returns:
        str: Player line.
    """
    kind = classify_player(player, roster)
    label = "Human" if kind == HUMAN else "Robot"
    line = f"{ICON[kind]} {label}: {(player.color or 'unknown').upper()}"
    if player.direction:
        line += f" ({player.direction})"
    if pips is None:
        pips = player.pip_count
    if pips is not None:
        line += f" pips:{pips}"
    if player.color and player.color == active_color:
        line += paint(" <- ACTIVE", TColor.GREEN, use_color)
    return line


def render_status(game: Any, roster: Optional[Dict[str, Dict[str, Any]]] = None,
                  use_color: bool = False, short_id: bool = False, legend: bool = True) -> str:
    """
    Render the status block shown under the board.

    Each line is only emitted when its field is present in the document.

    Args:
        game (Any): Game document.
        roster (Optional[dict]): Users indexed by id, see `roster_index`.
        use_color (bool): Whether to use colored output.
        short_id (bool): Shorten long game ids to a prefix.
        legend (bool): Append the glyph legend.

    Returns:
        str: Status lines joined by newlines; never raises on partial input.
    """
    info = GameInfo.from_json(game)
    lines: List[str] = []

    if info.id:
        lines.append(paint(f"Game: {format_game_id(info.id, short_id)}", TColor.CYAN, use_color))
    if info.state_kind:
        lines.append(paint(f"State: {info.state_kind.upper()}", TColor.BLUE, use_color))
    if info.active_color:
        lines.append(paint(f"Turn: {info.active_color.upper()}", TColor.YELLOW, use_color))

    for player in info.players:
        lines.append(format_player(player, info.active_color, roster, use_color, player_pips(game, player)))

    if info.dice:
        dice = ", ".join(str(d) for d in info.dice)
        lines.append(paint(f"Dice: [{dice}]", TColor.PURPLE, use_color))
    if info.last_roll:
        last_roll = ", ".join(str(d) for d in info.last_roll)
        lines.append(f"🎲 Last Roll: [{last_roll}]")
    if info.last_move:
        origin, destination = info.last_move
        lines.append(f"📍 Last Move: {origin} → {destination}")

    if legend:
        lines.append(paint(LEGEND, TColor.GRAY, use_color))

    return "\n".join(lines)
