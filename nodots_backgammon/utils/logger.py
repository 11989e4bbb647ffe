# =========================================================
# --- utils_logger.py ---
# =========================================================

import logging
from typing import Optional

# =========================================================

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

#: Accepted level names; WARN is kept for old NDBG_LOG_LEVEL values
LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def resolve_level(level: Optional[str], quiet: bool = False, default: str = "WARNING") -> int:
    """
    Turn a level name into a logging level.

    Args:
        level (Optional[str]): Level name from a flag or the environment.
        quiet (bool): Force WARNING or higher.
        default (str): Level used for unknown or missing names.

    Returns:
        int: A logging level constant.
    """
    resolved = LEVELS.get((level or default).upper(), LEVELS[default])
    if quiet:
        resolved = max(resolved, logging.WARNING)
    return resolved


def setup_logging(level: int = logging.WARNING) -> None:
    """Configure the root logger once per process; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root.setLevel(level)
