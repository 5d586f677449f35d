"""Central configuration for runtime-tunable parameters.

All constants can be overridden via environment variables so that an
interactive game paces the bot for a human to follow, while the automated
test-suite can run with no delay and a throw-away data directory.
"""

from __future__ import annotations

import os
from pathlib import Path

# ===========================================================================
# Storage
# ===========================================================================
# SEABATTLE_DATA_DIR: Directory holding player statistics, the saved game and
#   end-of-game summaries. Created on first write.
#   Defaults to ~/.seabattle
#   Example: export SEABATTLE_DATA_DIR=/tmp/seabattle
DATA_DIR: Path = Path(os.getenv("SEABATTLE_DATA_DIR", str(Path.home() / ".seabattle"))).expanduser()

# SEABATTLE_LOG_FILE: Append-only, human-readable log. One session header is
#   written per process start.
#   Defaults to <DATA_DIR>/seabattle.log
LOG_FILE: Path = Path(os.getenv("SEABATTLE_LOG_FILE", str(DATA_DIR / "seabattle.log"))).expanduser()


# ===========================================================================
# Game Constants
# ===========================================================================
# SEABATTLE_BOARD_SIZE: Default board dimension offered by the CLI.
#   Must be one of SUPPORTED_SIZES. Defaults to 10.
#   Example: export SEABATTLE_BOARD_SIZE=14
BOARD_SIZE: int = int(os.getenv("SEABATTLE_BOARD_SIZE", "10"))

# Fleet roster per board dimension: list of (name, length) tuples, placed in
# this order. Not overridden by env vars.
SHIP_TEMPLATES: dict[int, list[tuple[str, int]]] = {
    10: [
        ("Carrier", 5),
        ("Battleship", 4),
        ("Cruiser", 3),
        ("Destroyer", 3),
        ("Submarine", 2),
    ],
    14: [
        ("Carrier", 5),
        ("Battleship", 4),
        ("Cruiser", 3),
        ("Cruiser", 3),
        ("Destroyer", 2),
        ("Destroyer", 2),
        ("Submarine", 2),
    ],
    16: [
        ("Carrier", 5),
        ("Battleship", 4),
        ("Battleship", 4),
        ("Cruiser", 3),
        ("Cruiser", 3),
        ("Destroyer", 2),
        ("Destroyer", 2),
        ("Submarine", 2),
        ("Submarine", 2),
    ],
}

SUPPORTED_SIZES: tuple[int, ...] = tuple(sorted(SHIP_TEMPLATES))


# ===========================================================================
# Bot Controls
# ===========================================================================
# SEABATTLE_BOT_DELAY: Pause (in seconds) between two successive bot shots
#   within one turn so the console output stays readable.
#   Defaults to 0.8. Tests pass 0 explicitly.
#   Example: export SEABATTLE_BOT_DELAY=0
BOT_SHOT_DELAY: float = float(os.getenv("SEABATTLE_BOT_DELAY", "0.8"))

# SEABATTLE_BOT_CANDIDATES: Upper bound on the ranked move list the bot
#   worker returns per request.
#   Defaults to 10.
BOT_MAX_CANDIDATES: int = int(os.getenv("SEABATTLE_BOT_CANDIDATES", "10"))


# ===========================================================================
# Debugging and Logging
# ===========================================================================
# SEABATTLE_DEBUG: If "1", enables detailed debug logging across modules.
#   Defaults to "0" (disabled).
#   Example: export SEABATTLE_DEBUG=1
DEBUG: bool = os.getenv("SEABATTLE_DEBUG", "0") == "1"
