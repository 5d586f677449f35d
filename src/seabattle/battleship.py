"""
battleship.py

Contains core data structures and logic for Seabattle, including:
 - Ship class holding an ordered cell list and a parallel hit mask
 - Board class owning the cell grid and the ships placed on it
 - ships_template() for looking up the fleet of a supported board size

Each player owns exactly one Board. The opponent fires at it through
Board.attack(), which is the only way a Board changes once play begins.
"""

from __future__ import annotations

import enum
import random
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

import numpy as np

from . import config as _cfg

Coord = Tuple[int, int]


class PlacementRejected(ValueError):
    """Raised when a ship run leaves the board or overlaps another ship."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class UnsupportedBoardSize(ValueError):
    """Raised when no fleet is defined for the requested board dimension."""


class CellState(enum.Enum):
    """State of a single board cell."""

    WATER = "water"
    OCCUPIED = "ship"
    HIT = "hit"
    MISS = "miss"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @property
    def code(self) -> int:
        """Small integer used in the numpy snapshot handed to the bot worker."""
        return _CODES[self]


_SYMBOLS = {
    CellState.WATER: "~",
    CellState.OCCUPIED: "O",
    CellState.HIT: "X",
    CellState.MISS: "•",
}

_CODES = {
    CellState.WATER: 0,
    CellState.OCCUPIED: 1,
    CellState.HIT: 2,
    CellState.MISS: 3,
}


class Outcome(enum.Enum):
    """Result of a single shot."""

    HIT = "hit"
    SUNK = "sunk"
    MISS = "miss"
    ALREADY_TARGETED = "already"

    @property
    def continues_turn(self) -> bool:
        """A hit (sinking or not) keeps the turn with the shooter."""
        return self in (Outcome.HIT, Outcome.SUNK)


def ships_template(size: int) -> List[Tuple[str, int]]:
    """Return a copy of the (name, length) fleet for a *size*×*size* board."""
    try:
        return list(_cfg.SHIP_TEMPLATES[size])
    except KeyError:
        raise UnsupportedBoardSize(
            f"Unsupported board size {size}; expected one of {_cfg.SUPPORTED_SIZES}"
        ) from None


class Ship:
    """A fleet unit with ordered cells and a parallel hit mask."""

    def __init__(self, name: str, length: int) -> None:
        if length < 1:
            raise ValueError(f"Ship length must be >= 1, got {length}")
        self.name = name
        self.length = length
        self.cells: List[Coord] = []
        self.hits: List[bool] = [False] * length

    def __repr__(self) -> str:
        return f"Ship({self.name!r}, {self.length}, cells={self.cells}, hits={self.hits})"

    @property
    def is_placed(self) -> bool:
        return len(self.cells) == self.length

    @property
    def is_sunk(self) -> bool:
        return self.is_placed and all(self.hits)

    @property
    def is_damaged(self) -> bool:
        return any(self.hits) and not all(self.hits)

    def occupies(self, row: int, col: int) -> bool:
        return (row, col) in self.cells

    def register_hit(self, row: int, col: int) -> bool:
        """Mark the cell at (*row*,*col*) hit; False if not ours or already marked."""
        for i, cell in enumerate(self.cells):
            if cell == (row, col):
                if self.hits[i]:
                    return False
                self.hits[i] = True
                return True
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "length": self.length,
            "cells": [list(cell) for cell in self.cells],
            "hits": list(self.hits),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Ship":
        ship = cls(str(data["name"]), int(data["length"]))
        ship.cells = [(int(r), int(c)) for r, c in data["cells"]]
        hits = [bool(h) for h in data["hits"]]
        if len(ship.cells) != ship.length or len(hits) != ship.length:
            raise ValueError(f"Ship {ship.name!r} cell/hit count does not match length {ship.length}")
        ship.hits = hits
        return ship


@dataclass(frozen=True)
class BoardStats:
    """End-of-game summary counters for one board."""

    hits: int
    misses: int
    ships_intact: int
    ships_damaged: int
    ships_sunk: int
    total_ships: int

    def to_dict(self) -> dict[str, int]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "shipsIntact": self.ships_intact,
            "shipsDamaged": self.ships_damaged,
            "shipsSunk": self.ships_sunk,
            "totalShips": self.total_ships,
        }


class Board:
    """
    Represents a single Seabattle board with hidden ships.
    We store:
      - self.grid: one CellState per coordinate (WATER, OCCUPIED, HIT, MISS)
      - self.ships: the Ship objects placed on this board, each knowing its
        own cells and which of them have been hit

    Every OCCUPIED or HIT cell belongs to exactly one ship; placement refuses
    any run that would overlap, so the owner of a cell is never ambiguous.
    """

    def __init__(self, size: int = _cfg.BOARD_SIZE):
        """Initialise an empty *size*×*size* board with no ships placed."""
        self.size = size
        self.grid: List[List[CellState]] = [[CellState.WATER for _ in range(size)] for _ in range(size)]
        self.ships: List[Ship] = []

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def _run(self, length: int, row: int, col: int, horizontal: bool) -> List[Coord]:
        if horizontal:
            return [(row, col + i) for i in range(length)]
        return [(row + i, col) for i in range(length)]

    # ------------------------------------------------------------------ #
    # Placement
    # ------------------------------------------------------------------ #
    def _rejection(self, length: int, row: int, col: int, horizontal: bool) -> Optional[str]:
        run = self._run(length, row, col, horizontal)
        if not all(self.in_bounds(r, c) for r, c in run):
            return "out of bounds"
        if any(self.grid[r][c] is not CellState.WATER for r, c in run):
            return "overlap"
        return None

    def can_place_ship(self, length: int, row: int, col: int, horizontal: bool) -> bool:
        """Return `True` if a ship of *length* fits at (*row*,*col*)."""
        return self._rejection(length, row, col, horizontal) is None

    def place_ship_strict(self, ship: Ship, row: int, col: int, horizontal: bool) -> None:
        """Like place_ship() but raises PlacementRejected instead of returning False."""
        if ship.cells:
            raise PlacementRejected("already placed")
        reason = self._rejection(ship.length, row, col, horizontal)
        if reason is not None:
            raise PlacementRejected(reason)
        for r, c in self._run(ship.length, row, col, horizontal):
            self.grid[r][c] = CellState.OCCUPIED
            ship.cells.append((r, c))
        self.ships.append(ship)

    def place_ship(self, ship: Ship, row: int, col: int, horizontal: bool) -> bool:
        """All-or-nothing placement; the board is untouched when this returns False."""
        try:
            self.place_ship_strict(ship, row, col, horizontal)
        except PlacementRejected:
            return False
        return True

    def place_ships_randomly(
        self,
        template: Optional[Iterable[Tuple[str, int]]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Randomly position every ship of *template*, in order, without collisions."""
        rnd = rng or random.Random()
        if template is None:
            template = ships_template(self.size)
        for name, length in template:
            ship = Ship(name, length)
            placed = False
            while not placed:
                horizontal = rnd.random() < 0.5
                row = rnd.randrange(self.size)
                col = rnd.randrange(self.size)
                placed = self.place_ship(ship, row, col, horizontal)

    # ------------------------------------------------------------------ #
    # Attack
    # ------------------------------------------------------------------ #
    def attack(self, row: int, col: int) -> Outcome:
        """Process a shot at (*row*,*col*). Repeat shots return ALREADY_TARGETED."""
        if not self.in_bounds(row, col):
            raise ValueError(f"Coordinate {(row, col)} outside {self.size}x{self.size} board")
        state = self.grid[row][col]
        if state in (CellState.HIT, CellState.MISS):
            return Outcome.ALREADY_TARGETED
        if state is CellState.OCCUPIED:
            ship = self.ship_at(row, col)
            if ship is None:
                raise LookupError(f"No ship owns occupied cell {(row, col)}")
            ship.register_hit(row, col)
            self.grid[row][col] = CellState.HIT
            return Outcome.SUNK if ship.is_sunk else Outcome.HIT
        self.grid[row][col] = CellState.MISS
        return Outcome.MISS

    def ship_at(self, row: int, col: int) -> Optional[Ship]:
        for ship in self.ships:
            if ship.occupies(row, col):
                return ship
        return None

    def all_ships_sunk(self) -> bool:
        """Return True if the board has a fleet and every ship in it has been sunk."""
        return bool(self.ships) and all(ship.is_sunk for ship in self.ships)

    # ------------------------------------------------------------------ #
    # Views
    # ------------------------------------------------------------------ #
    def untried_cells(self) -> List[Coord]:
        """Row-major list of coordinates not yet fired at."""
        return [
            (r, c)
            for r in range(self.size)
            for c in range(self.size)
            if self.grid[r][c] not in (CellState.HIT, CellState.MISS)
        ]

    def state_matrix(self) -> np.ndarray:
        """By-value int8 copy of the grid (see CellState.code)."""
        return np.array([[cell.code for cell in row] for row in self.grid], dtype=np.int8)

    def stats(self) -> BoardStats:
        flat = [cell for row in self.grid for cell in row]
        return BoardStats(
            hits=flat.count(CellState.HIT),
            misses=flat.count(CellState.MISS),
            ships_intact=sum(1 for s in self.ships if not any(s.hits)),
            ships_damaged=sum(1 for s in self.ships if s.is_damaged),
            ships_sunk=sum(1 for s in self.ships if s.is_sunk),
            total_ships=len(self.ships),
        )

    def rows(self, *, reveal: bool = False) -> List[str]:
        """Board → ["~ ~ O …", …]; ships show as water unless *reveal*."""
        out: list[str] = []
        for row in self.grid:
            cells = []
            for cell in row:
                if cell is CellState.OCCUPIED and not reveal:
                    cells.append(CellState.WATER.symbol)
                else:
                    cells.append(cell.symbol)
            out.append(" ".join(cells))
        return out

    # ------------------------------------------------------------------ #
    # Snapshots
    # ------------------------------------------------------------------ #
    def to_dict(self) -> dict[str, Any]:
        return {
            "size": self.size,
            "grid": [[cell.value for cell in row] for row in self.grid],
            "ships": [ship.to_dict() for ship in self.ships],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Board":
        """Rebuild a board, checking that grid and ships agree cell by cell."""
        board = cls(int(data["size"]))
        grid = data["grid"]
        if len(grid) != board.size or any(len(row) != board.size for row in grid):
            raise ValueError("Grid dimensions do not match board size")
        board.grid = [[CellState(value) for value in row] for row in grid]
        board.ships = [Ship.from_dict(s) for s in data["ships"]]

        claimed: dict[Coord, bool] = {}
        for ship in board.ships:
            for cell, hit in zip(ship.cells, ship.hits):
                if cell in claimed or not board.in_bounds(*cell):
                    raise ValueError(f"Ship cell {cell} overlaps or leaves the board")
                claimed[cell] = hit
        for r in range(board.size):
            for c in range(board.size):
                state = board.grid[r][c]
                if state is CellState.OCCUPIED and claimed.get((r, c)) is not False:
                    raise ValueError(f"Occupied cell {(r, c)} has no intact ship part")
                if state is CellState.HIT and claimed.get((r, c)) is not True:
                    raise ValueError(f"Hit cell {(r, c)} has no hit ship part")
                if state in (CellState.WATER, CellState.MISS) and (r, c) in claimed:
                    raise ValueError(f"Ship part at {(r, c)} is not marked on the grid")
        return board
