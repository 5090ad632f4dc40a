# cosmicbuilder/ui/colors.py
"""
ANSI color codes for terminal output.
"""

# Palette
BRIGHT_MAGENTA = "\033[38;5;201m"
ELECTRIC_CYAN = "\033[38;5;51m"
MID_GRAY = "\033[38;5;250m"
GLITCH_RED = "\033[38;5;196m"
GLITCH_GREEN = "\033[38;5;46m"
NEON_YELLOW = "\033[38;5;226m"

BOLD = "\033[1m"
RESET = "\033[0m"

# Semantic roles
ACCENT_FG = ELECTRIC_CYAN
MUTED_FG = MID_GRAY
ERROR_FG = GLITCH_RED
SUCCESS_FG = GLITCH_GREEN
WARNING_FG = NEON_YELLOW

CHAT_LABEL_USER = f"{BOLD}{ELECTRIC_CYAN}"
CHAT_LABEL_AI = f"{BOLD}{BRIGHT_MAGENTA}"
CHAT_LABEL_FIX = f"{BOLD}{NEON_YELLOW}"
CHAT_LABEL_ERROR = f"{BOLD}{GLITCH_RED}"


def colorize(text: str, color: str, style: str = "") -> str:
    """Apply color and optional style to text"""
    return f"{style}{color}{text}{RESET}"
