import random
import sys
from pathlib import Path

import pytest

# Ensure local `src` directory is importable before project is installed.
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from seabattle.battleship import Board, Ship
from seabattle.persistence import GameStateStore, PlayerStore, StatsWriter


@pytest.fixture
def rng() -> random.Random:
    """Seeded RNG so placements and bot shuffles repeat between runs."""
    return random.Random(1234)


@pytest.fixture
def carrier_board() -> Board:
    """10x10 board with a single length-5 ship on row 0, columns 0–4."""
    board = Board(10)
    assert board.place_ship(Ship("Carrier", 5), 0, 0, True)
    return board


@pytest.fixture
def stores(tmp_path: Path) -> dict:
    """Player/game/stats stores rooted in a throw-away directory."""
    return {
        "player_store": PlayerStore(tmp_path),
        "game_store": GameStateStore(tmp_path),
        "stats_writer": StatsWriter(tmp_path),
    }


def scripted(coords):
    """Coordinate provider that yields *coords* in order."""
    it = iter(coords)
    return lambda: next(it)
