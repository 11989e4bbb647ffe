# =========================================================
# --- core_game.py ---
# =========================================================

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .board import (
    BLACK, CLOCKWISE, COUNTERCLOCKWISE, DEFAULT_POSITIONS, RAIL_COLOR,
    ROBOT_EMAIL, WHITE, opposite_position,
)
from .normalizer import normalize_board

# =========================================================

HUMAN = "human"
ROBOT = "robot"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _as_int(value: Any) -> Optional[int]:
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def _as_id(value: Any) -> Optional[str]:
    """Return a string or integer id as text."""
    if _as_int(value) is not None:
        return str(value)
    return _as_str(value)


def _as_roll(value: Any) -> Optional[Tuple[int, ...]]:
    if isinstance(value, list) and value and all(_as_int(d) is not None for d in value):
        return tuple(value)
    return None


def _as_move(value: Any) -> Optional[Tuple[Any, Any]]:
    move = _as_dict(value)
    if move.get("from") is None and move.get("to") is None:
        return None
    return move.get("from"), move.get("to")


@dataclass(frozen=True)
class PlayerInfo:
    """
    Read-only view of one player of a game document.

    Attributes:
        color (Optional[str]): "white" or "black".
        direction (Optional[str]): "clockwise" or "counterclockwise".
        dice (Optional[Tuple[int, int]]): Current roll, if any.
        pip_count (Optional[int]): Pip count reported by the service.
        name (Optional[str]): Display name.
        email (Optional[str]): E-mail address.
        user_id (Optional[str]): Roster id of the user behind the player.
        is_robot (Optional[bool]): Robot flag if the service sent one.
    """
    color: Optional[str] = None
    direction: Optional[str] = None
    dice: Optional[Tuple[int, ...]] = None
    pip_count: Optional[int] = None
    name: Optional[str] = None
    email: Optional[str] = None
    user_id: Optional[str] = None
    is_robot: Optional[bool] = None

    @classmethod
    def from_json(cls, data: Any) -> "PlayerInfo":
        """Build a PlayerInfo from a PlayerView; missing fields become None."""
        data = _as_dict(data)

        roll = _as_dict(data.get("dice")).get("currentRoll")
        dice = _as_roll(roll)

        pip_count = _as_int(data.get("pipCount"))

        is_robot = data.get("isRobot")
        if not isinstance(is_robot, bool):
            user_type = _as_str(data.get("userType"))
            is_robot = (user_type == ROBOT) if user_type else None

        return cls(
            color=_as_str(data.get("color")),
            direction=_as_str(data.get("direction")),
            dice=dice,
            pip_count=pip_count,
            name=_as_str(data.get("name")),
            email=_as_str(data.get("email")),
            user_id=_as_str(data.get("userId")) or _as_str(data.get("id")),
            is_robot=is_robot,
        )


@dataclass(frozen=True)
class GameInfo:
    """
    Read-only view of the status fields of a game document.

    Attributes:
        id (Optional[str]): Game id.
        state_kind (Optional[str]): Service state label ("rolling", "moved", ...).
        active_color (Optional[str]): Color whose turn it is.
        players (List[PlayerInfo]): Players in document order.
        ascii_board (Optional[str]): Server-side rendering, if the service sent one.
        last_roll (Optional[Tuple[int, ...]]): Dice of the previous roll.
        last_move (Optional[Tuple[Any, Any]]): Origin and destination of the previous move.
    """
    id: Optional[str] = None
    state_kind: Optional[str] = None
    active_color: Optional[str] = None
    players: List[PlayerInfo] = field(default_factory=list)
    ascii_board: Optional[str] = None
    last_roll: Optional[Tuple[int, ...]] = None
    last_move: Optional[Tuple[Any, Any]] = None

    @classmethod
    def from_json(cls, game: Any) -> "GameInfo":
        """Build a GameInfo; `status` is accepted as an alias of `stateKind`."""
        game = _as_dict(game)
        players = game.get("players")
        return cls(
            id=_as_id(game.get("id")),
            state_kind=_as_str(game.get("stateKind")) or _as_str(game.get("status")),
            active_color=_as_str(game.get("activeColor")),
            players=[PlayerInfo.from_json(p) for p in players] if isinstance(players, list) else [],
            ascii_board=_as_str(game.get("asciiBoard")) or _as_str(game.get("ascii")),
            last_roll=_as_roll(game.get("lastRoll")),
            last_move=_as_move(game.get("lastMove")),
        )

    @property
    def active_player(self) -> Optional[PlayerInfo]:
        """Return the player whose color is active, if any."""
        for player in self.players:
            if player.color and player.color == self.active_color:
                return player
        return None

    @property
    def dice(self) -> Optional[Tuple[int, ...]]:
        """Return the active player's current roll, if any."""
        player = self.active_player
        return player.dice if player else None


# ---------------- Classification ----------------

def roster_index(roster: Optional[Iterable[Any]]) -> Dict[str, Dict[str, Any]]:
    """Index a user roster (list of user objects) by id."""
    index: Dict[str, Dict[str, Any]] = {}
    for user in roster or []:
        user = _as_dict(user)
        user_id = _as_str(user.get("id"))
        if user_id:
            index[user_id] = user
    return index


def classify_player(player: PlayerInfo, roster: Optional[Dict[str, Dict[str, Any]]] = None) -> str:
    """
    Classify a player as human or robot.

    Order of authority:
    1. Roster entry of the player's user id (`userType` or `isRobot`).
    2. The player's own `isRobot`/`userType` field.
    3. The legacy robot e-mail sentinel (deprecated).

    Args:
        player (PlayerInfo): Player to classify.
        roster (Optional[dict]): Users indexed by id, see `roster_index`.

    Returns:
        str: "human" or "robot".
    """
    if roster and player.user_id in roster:
        user = roster[player.user_id]
        if isinstance(user.get("isRobot"), bool):
            return ROBOT if user["isRobot"] else HUMAN
        user_type = _as_str(user.get("userType"))
        if user_type:
            return ROBOT if user_type == ROBOT else HUMAN

    if player.is_robot is not None:
        return ROBOT if player.is_robot else HUMAN

    return ROBOT if player.email == ROBOT_EMAIL else HUMAN


# ---------------- Pips ----------------

def player_pips(game: Any, player: PlayerInfo) -> Optional[int]:
    """
    Return the pip count of a player.

    The service's `pipCount` wins. Otherwise the pips are counted on the
    board, numbered in the player's direction so that 1 is the last point
    before bearing off. None when neither is available.
    """
    if player.pip_count is not None:
        return player.pip_count
    if not player.color or player.direction not in (CLOCKWISE, COUNTERCLOCKWISE):
        return None

    board = normalize_board(_as_dict(game).get("board"), player.direction)
    if not board.totals().get(player.color):
        return None
    return board.pip_count(player.color)


# ---------------- Moves ----------------

def find_checker_id(game: Any, position: int) -> Optional[str]:
    """
    Find the checker the active player would move from a point.

    The point is numbered in the active player's direction. The topmost
    checker of the active color on that point is returned.

    Args:
        game (Any): Game document.
        position (int): Point number in the active player's numbering.

    Returns:
        Optional[str]: Checker id, or None if no such checker exists.
    """
    game = _as_dict(game)
    active = GameInfo.from_json(game).active_player
    if active is None or active.direction not in (CLOCKWISE, COUNTERCLOCKWISE):
        return None

    points = _as_dict(game.get("board")).get("points")
    for point in points if isinstance(points, list) else []:
        point = _as_dict(point)
        if _as_dict(point.get("position")).get(active.direction) != position:
            continue
        checkers = point.get("checkers") if isinstance(point.get("checkers"), list) else []
        own = [_as_dict(c) for c in checkers if _as_dict(c).get("color") == active.color]
        if own and _as_str(own[-1].get("id")):
            return own[-1]["id"]
    return None


# ---------------- Fixtures ----------------

def build_point(clockwise: int, color: Optional[str], count: int, prefix: str = "c") -> Dict[str, Any]:
    """Build one PointView with `count` checkers of one color."""
    return {
        "position": {CLOCKWISE: clockwise, COUNTERCLOCKWISE: opposite_position(clockwise)},
        "checkers": [
            {"id": f"{prefix}{clockwise}-{i}", "color": color} for i in range(count)
        ],
    }


def opening_game_document(game_id: str = "demo-game") -> Dict[str, Any]:
    """
    Build a game document with the standard opening position.

    Used by `board --demo` and the tests.
    """
    points = [
        build_point(position, color, count)
        for color in (BLACK, WHITE)
        for position, count in DEFAULT_POSITIONS[color]
    ]
    def empty_rail() -> Dict[str, Any]:
        return {direction: {"checkers": []} for direction in (CLOCKWISE, COUNTERCLOCKWISE)}

    return {
        "id": game_id,
        "stateKind": "rolling-for-start",
        "activeColor": WHITE,
        "players": [
            {"color": color, "direction": direction, "pipCount": 167}
            for direction, color in RAIL_COLOR.items()
        ],
        "board": {"points": points, "bar": empty_rail(), "off": empty_rail()},
    }
