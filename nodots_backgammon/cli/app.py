# =========================================================
# --- cli_app.py ---
# =========================================================

import argparse
import logging
import sys
from typing import List, Optional

from nodots_backgammon import __version__
from nodots_backgammon.core.board import DIRECTIONS, CLOCKWISE
from nodots_backgammon.services.api import ApiError
from nodots_backgammon.services.batch import DIFFICULTIES
from nodots_backgammon.services.config import Config
from nodots_backgammon.utils.logger import resolve_level, setup_logging

from .cliColors import TColor, paint
from .cliHandlers import PROG, CLIHandlers
from .cliUtils import ExitGame

logger = logging.getLogger(__name__)

# =========================================================

EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def _add_direction(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--direction", choices=DIRECTIONS, default=CLOCKWISE,
        help="Point numbering used to draw the board (default: clockwise)",
    )


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser with one sub-command per handler.

    Returns:
        argparse.ArgumentParser: The configured parser.
    """
    parser = argparse.ArgumentParser(prog=PROG, description="Command line client for Nodots Backgammon")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--api-url", help="Game service URL (overrides NODOTS_API_URL)")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR (overrides NDBG_LOG_LEVEL)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Shortcut for --log-level DEBUG")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    # ---------------- Auth ----------------
    p = sub.add_parser("login", help="Cache an API token")
    p.add_argument("--token", help="API token (prompted if omitted)")
    p.add_argument("--user-id", help="User id to store with the token")
    p.add_argument("--email", help="Email to store with the token")
    p.add_argument("--force", action="store_true", help="Replace an existing login without asking")

    sub.add_parser("logout", help="Clear the cached login")
    sub.add_parser("whoami", help="Show the cached login")

    # ---------------- Games ----------------
    p = sub.add_parser("new", help="Create a new game")
    p.add_argument("--player1", help="User id of the first player")
    p.add_argument("--player2", help="User id of the second player")
    p.add_argument("--robot", action="store_true", help="Play against a robot")

    p = sub.add_parser("status", help="Show a game")
    p.add_argument("game_id")
    p.add_argument("--ascii", action="store_true", help="Print the board drawn by the service")
    p.add_argument("--raw", action="store_true", help="Print the game document as JSON")
    _add_direction(p)

    p = sub.add_parser("roll", help="Roll the dice")
    p.add_argument("game_id")

    p = sub.add_parser("move", help="Move a checker")
    p.add_argument("game_id")
    p.add_argument("from_position", type=int, metavar="from", help="Point to move from (active player's numbering)")
    p.add_argument("--to", type=int, help="Destination point; the service chooses when omitted")

    p = sub.add_parser("board", help="Draw a saved game document or the opening position")
    source = p.add_mutually_exclusive_group()
    source.add_argument("--file", help="JSON game document")
    source.add_argument("--demo", action="store_true", help="Draw the opening position (default)")
    p.add_argument("--no-home", action="store_true", help="Hide the borne-off counts")
    _add_direction(p)

    # ---------------- Robots ----------------
    sub.add_parser("robot-list", help="List robot users")

    p = sub.add_parser("robot-simulate", help="Start a robot vs robot simulation")
    p.add_argument("-s", "--speed", type=int, default=1000, help="Milliseconds between moves")
    p.add_argument("--robot1-difficulty", choices=DIFFICULTIES, default="beginner")
    p.add_argument("--robot2-difficulty", choices=DIFFICULTIES, default="beginner")
    p.add_argument("-i", "--interactive", action="store_true")

    p = sub.add_parser("robot-status", help="Show a simulation")
    p.add_argument("simulation_id")
    p.add_argument("-w", "--watch", action="store_true", help="Refresh until the simulation finishes")
    p.add_argument("--interval", type=float, default=2.0, help="Seconds between refreshes")

    p = sub.add_parser("robot-pause", help="Pause or resume a simulation")
    p.add_argument("simulation_id")

    p = sub.add_parser("robot-stop", help="Stop a simulation")
    p.add_argument("simulation_id")
    p.add_argument("-f", "--force", action="store_true", help="Do not ask for confirmation")

    p = sub.add_parser("robot-speed", help="Change the speed of a simulation")
    p.add_argument("simulation_id")
    p.add_argument("-s", "--speed", type=int, help="Milliseconds between moves (100-30000)")
    p.add_argument("-i", "--interactive", action="store_true")

    p = sub.add_parser("robot-batch", help="Run several simulations")
    p.add_argument("-c", "--concurrent", type=int, default=3, help="Simulations running at once")
    p.add_argument("-s", "--speed", type=int, default=200, help="Default milliseconds between moves")
    p.add_argument("-p", "--preset", help="all, difficulty-test or speed-test")
    p.add_argument("-f", "--file", help="JSON list of scenarios")
    p.add_argument("-o", "--output", help="Write results to this JSON file")
    p.add_argument("-i", "--interactive", action="store_true")
    p.add_argument("--poll-interval", type=float, default=2.0, help="Seconds between status checks")

    p = sub.add_parser("robot-board", help="Show the board of a simulation's game")
    p.add_argument("simulation_id")
    p.add_argument("--game-id", help="Game id, if known")
    p.add_argument("--raw", action="store_true", help="Print the game document as JSON")

    return parser


class BackgammonCLI:
    """
    Command-line entry point: parses arguments and dispatches to CLIHandlers.
    """

    def __init__(self, config: Optional[Config] = None, handlers: Optional[CLIHandlers] = None):
        """
        Args:
            config (Optional[Config]): Base settings; read from the environment if None.
            handlers (Optional[CLIHandlers]): Prepared handlers, for tests.
        """
        self.config = config
        self._handlers = handlers
        self.parser = build_parser()

    def run(self, argv: Optional[List[str]] = None) -> int:
        """
        Run one command.

        Args:
            argv (Optional[List[str]]): Arguments without the program name.

        Returns:
            int: Process exit code.
        """
        args = self.parser.parse_args(argv)

        config = self.config or Config.from_env()
        config = config.with_overrides(api_url=args.api_url)
        level_name = "DEBUG" if args.verbose else (args.log_level or config.log_level)
        setup_logging(resolve_level(level_name, quiet=args.quiet))
        logger.debug(f"Using API {config.base_path}")

        use_color = not args.no_color and sys.stdout.isatty()
        handlers = self._handlers or CLIHandlers(config, use_color=use_color)

        try:
            return handlers.handlers[args.command](args)
        except ApiError as e:
            print(paint(f"❌ {e.message}", TColor.RED, use_color), file=sys.stderr)
            return EXIT_ERROR
        except (OSError, ValueError) as e:
            print(paint(f"❌ {e}", TColor.RED, use_color), file=sys.stderr)
            return EXIT_ERROR
        except ExitGame:
            print("\nExited.")
            return EXIT_INTERRUPTED
        except KeyboardInterrupt:
            print("\nInterrupted by user. Exiting…")
            return EXIT_INTERRUPTED


def main() -> None:
    """Console script entry point."""
    sys.exit(BackgammonCLI().run())


# ---------------- Main ----------------
if __name__ == "__main__":
    main()
