# =========================================================
# --- cli_cliColors.py ---
# =========================================================

from typing import Dict

# =========================================================

class TColor:
    """
    ANSI escape codes for terminal text coloring.

    Attributes:
        BLUE (str): Informational messages.
        RED (str): Errors.
        GREEN (str): Success messages and the active marker.
        YELLOW (str): Warnings and headers.
        PURPLE (str): Dice.
        CYAN (str): Identifiers and status fields.
        GRAY (str): Hints and secondary text.
        RESET (str): Reset color to default terminal color.
        BOLD (str): Bold text formatting.
    """
    BLUE: str    = "\033[94m"   # Info
    RED: str     = "\033[91m"   # Error
    GREEN: str   = "\033[92m"   # Success / active
    YELLOW: str  = "\033[93m"   # Warning / header
    PURPLE: str  = "\033[95m"   # Dice
    CYAN: str    = "\033[96m"   # Ids and fields
    GRAY: str    = "\033[90m"   # Hints
    RESET: str   = "\033[0m"    # Reset formatting
    BOLD: str    = "\033[1m"    # Bold text


def paint(text: str, color: str, use_color: bool = True) -> str:
    """
    Wrap text in an ANSI color.

    Args:
        text (str): Text to color.
        color (str): One of the TColor codes.
        use_color (bool, optional): Return plain text when False. Defaults to True.

    Returns:
        str: Colored or plain text.
    """
    return f"{color}{text}{TColor.RESET}" if use_color else text


#: Checker glyphs; white is hollow, black is filled
GLYPH: Dict[str, str] = {
    "white": "○",
    "black": "●",
}

#: Glyph for a non-empty point whose color is unknown
UNKNOWN_GLYPH: str = "?"

#: Player type icons
ICON: Dict[str, str] = {
    "human": "👤",
    "robot": "🤖",
}
