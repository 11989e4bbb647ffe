# =========================================================
# --- cli_cliUtils.py ---
# =========================================================
import os
import time
from typing import Sequence, Tuple, TypeVar

# =========================================================

T = TypeVar("T")


class ExitGame(Exception):
    """
    Custom exception to indicate that the user wants to quit.
    Raised by `safe_input` when the user types 'q', 'quit', or presses Ctrl+C.
    """
    pass


def safe_input(prompt: str) -> str:
    """
    Prompt the user for input safely, handling keyboard interrupts
    and quit commands.

    Args:
        prompt (str): The input prompt to display.

    Raises:
        ExitGame: If the user presses Ctrl+C or enters 'q'/'quit'.

    Returns:
        str: The sanitized user input (stripped of leading/trailing whitespace).
    """
    try:
        inp: str = input(prompt).strip()
    except (KeyboardInterrupt, EOFError):
        raise ExitGame()
    if inp.lower() in ("q", "quit"):
        raise ExitGame()
    return inp


def choose_option(title: str, options: Sequence[Tuple[str, T]]) -> T:
    """
    Show a numbered menu and return the value of the chosen entry.

    Args:
        title (str): Menu heading.
        options (Sequence[Tuple[str, T]]): (label, value) pairs.

    Raises:
        ExitGame: If the user quits.
        ValueError: If there is nothing to choose from.

    Returns:
        T: The value of the selected option.
    """
    if not options:
        raise ValueError("No options to choose from")

    print(f"\n{title}")
    for idx, (label, _) in enumerate(options, 1):
        print(f"{idx}: {label}")

    while True:
        choice: str = safe_input(f"Choice (1-{len(options)}): ")
        if choice.isdigit() and 1 <= int(choice) <= len(options):
            return options[int(choice) - 1][1]
        print(f"Invalid input, enter 1-{len(options)}")


def confirm(prompt: str, default: bool = False) -> bool:
    """
    Ask a yes/no question.

    Args:
        prompt (str): Question text, without the [y/N] suffix.
        default (bool): Answer used for empty input.

    Returns:
        bool: True for yes.
    """
    suffix = "[Y/n]" if default else "[y/N]"
    answer: str = safe_input(f"{prompt} {suffix}: ").lower()
    if not answer:
        return default
    return answer in ("y", "yes")


def interruptible_sleep(seconds: float) -> None:
    """
    Sleep for a given number of seconds in small intervals,
    so Ctrl+C is handled promptly.

    Args:
        seconds (float): Total duration to sleep in seconds.
    """
    start: float = time.time()
    while time.time() - start < seconds:
        time.sleep(0.05)


def clear() -> None:
    """
    Clear the terminal screen.
    Uses 'cls' on Windows and 'clear' on Unix-based systems.
    """
    os.system('cls' if os.name == 'nt' else 'clear')


def format_duration(duration_ms: float) -> str:
    """Format milliseconds as '2m 5s' or '42s'."""
    seconds = int(duration_ms // 1000)
    minutes, remaining = divmod(seconds, 60)
    if minutes > 0:
        return f"{minutes}m {remaining}s"
    return f"{remaining}s"


def plural(count: int, word: str) -> str:
    """Return '1 robot user' / '3 robot users'."""
    return f"{count} {word}" + ("" if count == 1 else "s")
