# =========================================================
# --- cli_cliHandlers.py ---
# =========================================================

import json
import logging
from argparse import Namespace
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from nodots_backgammon.core.board import CLOCKWISE, DIRECTIONS, opposite_position
from nodots_backgammon.core.game import GameInfo, find_checker_id, opening_game_document, roster_index
from nodots_backgammon.core.normalizer import normalize_board
from nodots_backgammon.services.api import ApiContractError, ApiError, ApiService, NotAuthenticatedError
from nodots_backgammon.services.auth import AuthService
from nodots_backgammon.services.batch import (
    DIFFICULTIES, BatchResult, BatchScenario, BatchSimulationRunner,
    load_scenarios, preset_scenarios, save_results, summarize,
)
from nodots_backgammon.services.config import Config

from .boardDisplay import BoardDisplay, render_possible_moves
from .cliColors import TColor, paint
from .cliUtils import choose_option, clear, confirm, format_duration, interruptible_sleep, plural, safe_input

logger = logging.getLogger(__name__)

# =========================================================

SPEED_CHOICES = [
    ("Very Fast (100ms) - For testing", 100),
    ("Fast (500ms) - Quick games", 500),
    ("Normal (1000ms) - Standard speed", 1000),
    ("Slow (2000ms) - For observation", 2000),
    ("Very Slow (5000ms) - For learning", 5000),
]

DIFFICULTY_CHOICES = [
    ("Beginner - Basic move selection", "beginner"),
    ("Intermediate - Balanced strategy", "intermediate"),
    ("Advanced - Sophisticated algorithms", "advanced"),
]

MIN_SPEED = 100
MAX_SPEED = 30000

PROG = "nodots-backgammon"


class CLIHandlers:
    """
    Handles CLI sub-commands.

    Every handler takes the parsed arguments and returns a process exit code.
    Service errors propagate as ApiError and are reported by the caller.

    Attributes:
        config (Config): Settings of this invocation.
        auth (AuthService): Credential cache.
        use_color (bool): Whether to use colored output.
    """

    def __init__(self, config: Config, auth: Optional[AuthService] = None,
                 api_factory: Optional[Callable[[Config], ApiService]] = None,
                 use_color: bool = True, sleep: Callable[[float], None] = interruptible_sleep) -> None:
        """
        Args:
            config (Config): Settings of this invocation.
            auth (Optional[AuthService]): Credential cache; defaults to the one in config_dir.
            api_factory (Optional[Callable]): Builds the API client, replaceable in tests.
            use_color (bool): Whether to use colored output.
            sleep (Callable[[float], None]): Sleep between polls.
        """
        self.config: Config = config
        self.auth: AuthService = auth or AuthService(config.config_dir)
        self.use_color: bool = use_color
        self._api_factory = api_factory or ApiService
        self._api: Optional[ApiService] = None
        self._sleep = sleep

    # ---------------- Helpers ----------------
    def _say(self, text: str, color: Optional[str] = None) -> None:
        print(paint(text, color, self.use_color) if color else text)

    def _effective_config(self) -> Config:
        """Fill token and user id from the auth cache when not configured."""
        cached = self.auth.get_api_config()
        return self.config.with_overrides(
            api_key=self.config.api_key or cached["api_key"],
            user_id=self.config.user_id or cached["user_id"],
        )

    @property
    def api(self) -> ApiService:
        if self._api is None:
            self._api = self._api_factory(self._effective_config())
        return self._api

    def _require_auth(self) -> None:
        if not self._effective_config().api_key:
            raise NotAuthenticatedError(f"Not authenticated. Please run: {PROG} login")

    def _roster(self) -> Optional[Dict[str, Dict[str, Any]]]:
        """Fetch the user roster for human/robot icons; None if unavailable."""
        try:
            return roster_index(self.api.get_users())
        except ApiError as e:
            logger.info(f"User roster unavailable, using player flags: {e.message}")
            return None

    def _show_game(self, game: Dict[str, Any], direction: str = CLOCKWISE,
                   from_points: Optional[List[int]] = None, roster: bool = True) -> None:
        display = BoardDisplay(
            game,
            roster=self._roster() if roster else None,
            use_color=self.use_color,
            direction=direction,
        )
        print(display.render(from_points=from_points))
        moves = game.get("possibleMoves")
        if isinstance(moves, list):
            print(render_possible_moves(moves, self.use_color))

    # ---------------- Auth ----------------
    def handle_login(self, args: Namespace) -> int:
        """Cache a token (and optional user id/email) for later commands."""
        if self.auth.is_logged_in() and not args.force:
            user = self.auth.get_current_user() or {}
            self._say("You are already logged in.", TColor.YELLOW)
            if user.get("email"):
                self._say(f"Logged in as: {user['email']}", TColor.GRAY)
            if not confirm("Login with a different account?"):
                self._say("Continuing with current session", TColor.GREEN)
                return 0

        token = args.token or safe_input("API token: ")
        if not token:
            self._say("A token is required to log in.", TColor.RED)
            return 1

        profile = self.auth.login({"token": token, "userId": args.user_id, "email": args.email})
        self._say("✅ Logged in", TColor.GREEN)
        if profile.get("email"):
            self._say(f"Welcome, {profile['email']}!", TColor.GRAY)
        return 0

    def handle_logout(self, args: Namespace) -> int:
        if not self.auth.is_logged_in():
            self._say("You are not currently logged in.", TColor.YELLOW)
            return 0
        user = self.auth.get_current_user() or {}
        self.auth.logout()
        self._say("✅ Successfully logged out", TColor.GREEN)
        if user.get("email"):
            self._say(f"Goodbye, {user['email']}!", TColor.GRAY)
        return 0

    def handle_whoami(self, args: Namespace) -> int:
        user = self.auth.get_current_user()
        if not user or not (user.get("token") or user.get("userId")):
            self._say("Not logged in.", TColor.YELLOW)
            return 1
        for key in ("email", "userId", "loginTime"):
            if user.get(key):
                self._say(f"{key}: {user[key]}", TColor.CYAN)
        return 0

    # ---------------- Games ----------------
    def handle_new(self, args: Namespace) -> int:
        """Create a game against a robot or between two users."""
        self._require_auth()

        if args.robot:
            game = self.api.create_robot_game()
        else:
            player1, player2 = args.player1, args.player2
            if not (player1 and player2):
                users = self.api.get_users()
                if len(users) < 2:
                    self._say("Need at least 2 users to create a game", TColor.RED)
                    return 1
                options = [(u.get("name") or u.get("email") or u.get("id"), u.get("id")) for u in users]
                player1 = player1 or choose_option("Select first player:", options)
                player2 = player2 or choose_option("Select second player:", options)
            if player1 == player2:
                self._say("Players must be different", TColor.RED)
                return 1
            game = self.api.create_game(player1, player2)

        info = GameInfo.from_json(game)
        self._say("✅ Game created successfully!", TColor.GREEN)
        self._say(f"Game ID: {info.id}", TColor.CYAN)
        self._show_game(game)
        self._say(f"• Check status: {PROG} status {info.id}", TColor.GRAY)
        self._say(f"• Roll dice: {PROG} roll {info.id}", TColor.GRAY)
        return 0

    def handle_status(self, args: Namespace) -> int:
        """Fetch a game and show it."""
        self._require_auth()
        game = self.api.get_game(args.game_id)

        if args.raw:
            print(json.dumps(game, indent=2))
            return 0

        if args.ascii:
            ascii_board = GameInfo.from_json(game).ascii_board
            if not ascii_board:
                raise ApiContractError("API response missing asciiBoard property")
            self._say("📋 Board:", TColor.CYAN)
            print(ascii_board)
            return 0

        self._show_game(game, direction=args.direction)

        state = GameInfo.from_json(game).state_kind
        if state in ("rolling", "rolling-for-start"):
            self._say(f"• Roll dice: {PROG} roll {args.game_id}", TColor.GRAY)
        elif state == "rolled":
            self._say(f"• Move: {PROG} move {args.game_id} <from>", TColor.GRAY)
        return 0

    def handle_roll(self, args: Namespace) -> int:
        self._require_auth()
        game = self.api.roll_dice(args.game_id)
        self._say("🎲 Dice rolled!", TColor.GREEN)
        self._show_game(game)
        return 0

    def handle_move(self, args: Namespace) -> int:
        """Move from a point; the checker id is looked up in the current game."""
        self._require_auth()

        if args.to is not None:
            game = self.api.make_move(args.game_id, args.from_position, args.to)
        else:
            current = self.api.get_game(args.game_id)
            checker_id = find_checker_id(current, args.from_position)
            if not checker_id:
                self._say(f"No checker found at position {args.from_position}", TColor.RED)
                self._hint_own_points(current)
                return 1
            logger.info(f"Found checker {checker_id} at position {args.from_position}")
            game = self.api.make_move_with_checker_id(args.game_id, checker_id)

        self._say("Move made successfully!", TColor.GREEN)

        # Highlight the origin in the clockwise labels of the drawn board
        active = GameInfo.from_json(game).active_player
        origin = args.from_position
        if active and active.direction and active.direction != CLOCKWISE:
            origin = opposite_position(origin)
        self._show_game(game, from_points=[origin])
        return 0

    def _hint_own_points(self, game: Any) -> None:
        """List the points holding the active player's checkers, in their numbering."""
        active = GameInfo.from_json(game).active_player
        if active is None or active.direction not in DIRECTIONS:
            return
        board = normalize_board(game.get("board"), active.direction)
        positions = board.occupied_positions(active.color)
        if positions:
            self._say(f"Your checkers are on: {', '.join(str(p) for p in positions)}", TColor.GRAY)

    def handle_board(self, args: Namespace) -> int:
        """Render a saved game document (or the opening position) without the service."""
        if args.file:
            game = json.loads(Path(args.file).read_text(encoding="utf-8"))
        else:
            game = opening_game_document()
        print(BoardDisplay(game, use_color=self.use_color, direction=args.direction,
                           show_home=not args.no_home).render())
        return 0

    # ---------------- Robots ----------------
    def handle_robot_list(self, args: Namespace) -> int:
        robots = self.api.get_robots()
        if not robots:
            self._say("No robot users found.", TColor.YELLOW)
            self._say("Robot users are required to run simulations.", TColor.GRAY)
            return 0

        self._say(f"Found {plural(len(robots), 'robot user')}:", TColor.BLUE)
        for idx, robot in enumerate(robots, 1):
            self._say(f"{idx}. {robot.get('name') or robot.get('id')}", TColor.CYAN)
            if robot.get("difficulty"):
                self._say(f"   Default Difficulty: {robot['difficulty']}", TColor.GRAY)
            if robot.get("description"):
                self._say(f"   Description: {robot['description']}", TColor.GRAY)
            if "isActive" in robot:
                self._say(f"   Status: {'Active' if robot['isActive'] else 'Inactive'}", TColor.GRAY)

        self._say(f"Available difficulty levels: {', '.join(DIFFICULTIES)}", TColor.YELLOW)
        self._say(f'Use "{PROG} robot-simulate --interactive" to start a simulation', TColor.GRAY)
        return 0

    def _check_robots(self) -> bool:
        robots = self.api.get_robots()
        if len(robots) < 2:
            self._say("Need at least 2 robot users to start a simulation", TColor.RED)
            return False
        self._say(f"Found {plural(len(robots), 'robot user')} available", TColor.BLUE)
        return True

    def handle_robot_simulate(self, args: Namespace) -> int:
        if not self._check_robots():
            return 1

        speed = args.speed
        robot1 = args.robot1_difficulty
        robot2 = args.robot2_difficulty
        if args.interactive:
            robot1 = choose_option("Select Robot 1 difficulty:", DIFFICULTY_CHOICES)
            robot2 = choose_option("Select Robot 2 difficulty:", DIFFICULTY_CHOICES)
            speed = choose_option("Select simulation speed:", SPEED_CHOICES)

        simulation = self.api.start_simulation(speed, robot1, robot2)
        simulation_id = simulation.get("id")
        self._say("✓ Simulation started", TColor.GREEN)
        self._say(f"Simulation ID: {simulation_id}", TColor.CYAN)
        if simulation.get("gameId"):
            self._say(f"Game ID: {simulation['gameId']}", TColor.CYAN)
        self._say(f"Speed: {speed}ms between moves", TColor.CYAN)
        self._say(f"• Watch: {PROG} robot-status {simulation_id} --watch", TColor.GRAY)
        self._say(f"• Board: {PROG} robot-board {simulation_id}", TColor.GRAY)
        return 0

    def _display_simulation(self, status: Dict[str, Any]) -> None:
        self._say("=== Simulation Status ===", TColor.BLUE)
        self._say(f"Simulation ID: {status.get('id')}", TColor.CYAN)
        if status.get("gameId"):
            self._say(f"Game ID: {status['gameId']}", TColor.CYAN)
        self._say(f"Status: {str(status.get('status', 'unknown')).upper()}", TColor.CYAN)
        if status.get("currentTurn"):
            self._say(f"Current Turn: {status['currentTurn']}", TColor.CYAN)
        if status.get("totalMoves"):
            self._say(f"Total Moves: {status['totalMoves']}", TColor.CYAN)
        if status.get("duration"):
            self._say(f"Duration: {format_duration(status['duration'])}", TColor.CYAN)
        if status.get("speed"):
            self._say(f"Speed: {status['speed']}ms between moves", TColor.CYAN)
        for n in (1, 2):
            name, difficulty = status.get(f"robot{n}Name"), status.get(f"robot{n}Difficulty")
            if name or difficulty:
                self._say(f"Robot {n}: {name or 'Unknown'} ({difficulty or 'Unknown'})", TColor.YELLOW)
        if status.get("error"):
            self._say(f"Error: {status['error']}", TColor.RED)

        logs = status.get("logs")
        if isinstance(logs, list) and logs:
            self._say("--- Recent Activity ---", TColor.GRAY)
            for entry in logs[-5:]:
                self._say(f"{entry.get('timestamp')}: {entry.get('message')}", TColor.GRAY)

        result = status.get("result")
        if status.get("status") == "completed" and isinstance(result, dict):
            self._say("--- Final Result ---", TColor.GREEN)
            self._say(f"Winner: {result.get('winner') or 'Unknown'}", TColor.GREEN)
            if result.get("score"):
                self._say(f"Score: {result['score']}", TColor.GREEN)

    def handle_robot_status(self, args: Namespace) -> int:
        if not args.watch:
            self._display_simulation(self.api.get_simulation_status(args.simulation_id))
            return 0

        self._say(f"Watching simulation {args.simulation_id} (press Ctrl+C to stop)", TColor.BLUE)
        first = True
        while True:
            status = self.api.get_simulation_status(args.simulation_id)
            if not first:
                clear()
            first = False
            self._display_simulation(status)
            if status.get("status") in ("completed", "error"):
                self._say("Simulation finished. Stopping watch mode.", TColor.YELLOW)
                return 0
            self._sleep(args.interval)

    def handle_robot_pause(self, args: Namespace) -> int:
        status = self.api.get_simulation_status(args.simulation_id)
        if status.get("status") in ("completed", "error"):
            self._say(f"Cannot pause a {status['status']} simulation", TColor.RED)
            return 1
        result = self.api.pause_simulation(args.simulation_id) or {}
        new_status = result.get("status") or ("running" if status.get("status") == "paused" else "paused")
        self._say(f"✓ Simulation {args.simulation_id} is now {new_status}", TColor.GREEN)
        return 0

    def handle_robot_stop(self, args: Namespace) -> int:
        status = self.api.get_simulation_status(args.simulation_id)
        self._say(f"Simulation Status: {status.get('status')}", TColor.BLUE)
        if status.get("status") == "completed":
            self._say("Simulation is already completed.", TColor.YELLOW)
            return 0
        if status.get("status") == "error":
            self._say("Simulation already stopped due to error.", TColor.YELLOW)
            return 0

        if not args.force and not confirm(f"Are you sure you want to stop simulation {args.simulation_id}?"):
            self._say("Stop cancelled.", TColor.YELLOW)
            return 0

        self.api.stop_simulation(args.simulation_id)
        self._say("✓ Simulation stopped successfully", TColor.GREEN)
        if status.get("currentTurn"):
            self._say(f"Simulation was stopped at turn {status['currentTurn']}", TColor.GRAY)
        if status.get("totalMoves"):
            self._say(f"Total moves completed: {status['totalMoves']}", TColor.GRAY)
        return 0

    def handle_robot_speed(self, args: Namespace) -> int:
        status = self.api.get_simulation_status(args.simulation_id)
        self._say(f"Current simulation status: {status.get('status')}", TColor.BLUE)
        if status.get("status") == "completed":
            self._say("Cannot change speed of completed simulation", TColor.RED)
            return 1
        if status.get("status") == "error":
            self._say("Cannot change speed of failed simulation", TColor.RED)
            return 1

        if args.interactive:
            speed = choose_option("Select new simulation speed:", SPEED_CHOICES)
        elif args.speed is not None:
            speed = args.speed
        else:
            self._say("Either provide --speed <milliseconds> or use --interactive mode", TColor.RED)
            return 1

        if not MIN_SPEED <= speed <= MAX_SPEED:
            self._say(f"Speed must be a number between {MIN_SPEED}ms and {MAX_SPEED}ms", TColor.RED)
            return 1

        self.api.change_simulation_speed(args.simulation_id, speed)
        self._say(f"✓ Simulation speed changed to {speed}ms between moves", TColor.GREEN)

        old = status.get("speed")
        if isinstance(old, (int, float)) and old > 0 and old != speed:
            change = "slower" if speed > old else "faster"
            ratio = round(max(speed, old) / min(speed, old), 1)
            self._say(f"Simulation is now {ratio}x {change} than before", TColor.YELLOW)
        return 0

    def _interactive_scenarios(self, default_speed: int) -> List[BatchScenario]:
        scenarios: List[BatchScenario] = []
        while True:
            name = safe_input("Scenario name (optional): ") or None
            robot1 = choose_option("Robot 1 difficulty:", [(d, d) for d in DIFFICULTIES])
            robot2 = choose_option("Robot 2 difficulty:", [(d, d) for d in DIFFICULTIES])
            raw_speed = safe_input(f"Speed in ms [{default_speed}]: ")
            speed = int(raw_speed) if raw_speed.isdigit() else default_speed
            scenarios.append(BatchScenario(robot1, robot2, speed, name))
            if not confirm("Add another scenario?"):
                return scenarios

    def _on_batch_event(self, event: str, result: BatchResult) -> None:
        label = result.scenario.label
        if event == "started":
            self._say(f"Started: {label} ({result.simulation_id})", TColor.GRAY)
        elif event == "finished" and not result.error:
            self._say(f"✅ Finished: {label} ({result.simulation_id})", TColor.GRAY)
        else:
            self._say(f"❌ Failed: {label}: {result.error}", TColor.GRAY)

    def handle_robot_batch(self, args: Namespace) -> int:
        if not self._check_robots():
            return 1

        if args.preset:
            try:
                scenarios = preset_scenarios(args.preset, args.speed)
            except ValueError as e:
                self._say(str(e), TColor.RED)
                return 1
        elif args.file:
            scenarios = load_scenarios(Path(args.file))
        elif args.interactive:
            scenarios = self._interactive_scenarios(args.speed)
        else:
            scenarios = [BatchScenario("beginner", "intermediate", args.speed, "Beginner vs Intermediate")]

        if not scenarios:
            self._say("No scenarios to run", TColor.RED)
            return 1

        self._say(f"Running {plural(len(scenarios), 'simulation scenario')}...", TColor.YELLOW)
        self._say(f"Max concurrent: {args.concurrent}", TColor.CYAN)
        self._say(f"Default speed: {args.speed}ms", TColor.CYAN)

        runner = BatchSimulationRunner(
            self.api,
            max_concurrent=args.concurrent,
            default_speed=args.speed,
            poll_interval=args.poll_interval,
            sleep=self._sleep,
            on_event=self._on_batch_event,
        )
        results = runner.run_batch(scenarios)
        self._display_batch(results)

        if args.output:
            save_results(results, Path(args.output))
            self._say(f"Results saved to {args.output}", TColor.GREEN)
        return 0

    def _display_batch(self, results: List[BatchResult]) -> None:
        summary = summarize(results)
        self._say("=== Batch Simulation Results ===", TColor.BLUE)
        self._say(f"Total scenarios: {summary['total']}", TColor.CYAN)
        self._say(f"Completed: {summary['completed']}", TColor.GREEN)
        self._say(f"Failed: {summary['failed']}", TColor.RED)
        if summary["average_duration"] is not None:
            self._say(f"Average duration: {format_duration(summary['average_duration'])}", TColor.CYAN)

        for idx, result in enumerate(results, 1):
            scenario = result.scenario
            self._say(f"{idx}. {scenario.label}")
            self._say(f"   {scenario.robot1_difficulty} vs {scenario.robot2_difficulty} @ {scenario.speed}ms", TColor.GRAY)
            if result.error:
                self._say(f"   ❌ Error: {result.error}", TColor.RED)
            elif result.result:
                self._say(f"   ✅ {result.result.get('status')}", TColor.GREEN)
                winner = (result.result.get("result") or {}).get("winner")
                if winner:
                    self._say(f"   Winner: {winner}", TColor.GRAY)
                if result.duration:
                    self._say(f"   Duration: {format_duration(result.duration)}", TColor.GRAY)

    def handle_robot_board(self, args: Namespace) -> int:
        """Show the board of the game a simulation is playing."""
        status = None
        game_id = args.game_id
        if not game_id:
            status = self.api.get_simulation_status(args.simulation_id)
            game_id = status.get("gameId")
            if not game_id:
                self._say("No game ID found in simulation data", TColor.RED)
                return 1

        game = self.api.get_game(game_id)
        if args.raw:
            print(json.dumps(game, indent=2))
            return 0

        self._show_game(game)
        if status is None:
            status = self.api.get_simulation_status(args.simulation_id)
        self._display_simulation(status)
        return 0

    # ---------------- Handler Mapping ----------------
    @property
    def handlers(self) -> Dict[str, Callable[[Namespace], int]]:
        """
        Returns a dictionary mapping sub-command names to their handlers.

        Returns:
            dict: Mapping of command strings to handler methods.
        """
        return {
            "login": self.handle_login,
            "logout": self.handle_logout,
            "whoami": self.handle_whoami,
            "new": self.handle_new,
            "status": self.handle_status,
            "roll": self.handle_roll,
            "move": self.handle_move,
            "board": self.handle_board,
            "robot-list": self.handle_robot_list,
            "robot-simulate": self.handle_robot_simulate,
            "robot-status": self.handle_robot_status,
            "robot-pause": self.handle_robot_pause,
            "robot-stop": self.handle_robot_stop,
            "robot-speed": self.handle_robot_speed,
            "robot-batch": self.handle_robot_batch,
            "robot-board": self.handle_robot_board,
        }
