from __future__ import annotations

import logging
import queue
import random
import threading
from typing import List, Optional, Sequence, Set, Tuple

import numpy as np

from . import config as _cfg
from .battleship import Board, CellState

Coord = Tuple[int, int]

logger = logging.getLogger(__name__)

_HIT = CellState.HIT.code
_MISS = CellState.MISS.code


# ---------------------------------------------------------------------- #
# Pure ranking
# ---------------------------------------------------------------------- #
def hunt_set(cells: np.ndarray) -> Set[Coord]:
    """In-bounds orthogonal neighbours of HIT cells that have not been fired at."""
    hits = cells == _HIT
    near = np.zeros_like(hits)
    near[1:, :] |= hits[:-1, :]  # below a hit
    near[:-1, :] |= hits[1:, :]  # above a hit
    near[:, 1:] |= hits[:, :-1]  # right of a hit
    near[:, :-1] |= hits[:, 1:]  # left of a hit
    near &= ~hits & (cells != _MISS)
    return {(int(r), int(c)) for r, c in zip(*np.nonzero(near))}


def rank_moves(
    cells: np.ndarray,
    untried: Sequence[Coord],
    *,
    rng: Optional[random.Random] = None,
    limit: int = _cfg.BOT_MAX_CANDIDATES,
) -> List[Coord]:
    """
    Target mode first, hunt mode second.

    1. Untried cells next to a known hit keep their order from *untried*.
    2. Every other untried cell follows in uniformly random order.
    3. The list is cut to ``min(limit, len(untried))`` entries.
    """
    rnd = rng or random.Random()
    targets = hunt_set(cells)
    hunt_candidates = [rc for rc in untried if rc in targets]
    random_candidates = [rc for rc in untried if rc not in targets]
    rnd.shuffle(random_candidates)
    return (hunt_candidates + random_candidates)[: min(limit, len(untried))]


# ---------------------------------------------------------------------- #
# Worker
# ---------------------------------------------------------------------- #
class BotWorker:
    """
    Runs rank_moves() on its own thread.

    The worker gets a by-value copy of the board (numpy matrix + tuple of
    untried cells) and hands back a plain list through a one-slot queue.
    The caller blocks on result() exactly once per request; there is no
    timeout and no cancellation.
    """

    def __init__(self, *, rng: Optional[random.Random] = None, limit: int = _cfg.BOT_MAX_CANDIDATES) -> None:
        self._rng = rng or random.Random()
        self._limit = limit
        self._channel: "queue.Queue[tuple[bool, object]]" = queue.Queue(maxsize=1)
        self._thread: Optional[threading.Thread] = None

    def request(self, board: Board) -> None:
        """Snapshot *board* and start ranking in the background."""
        if self._thread is not None:
            raise RuntimeError("Previous request has not been collected")
        cells = board.state_matrix()
        untried = tuple(board.untried_cells())
        # Seed per request so the worker never touches the shared Random.
        seed = self._rng.getrandbits(64)
        self._thread = threading.Thread(
            target=self._work,
            args=(cells, untried, seed),
            name="bot-ranker",
            daemon=True,
        )
        self._thread.start()

    def _work(self, cells: np.ndarray, untried: Tuple[Coord, ...], seed: int) -> None:
        try:
            moves = rank_moves(cells, untried, rng=random.Random(seed), limit=self._limit)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Bot ranking failed")
            self._channel.put((False, exc))
        else:
            self._channel.put((True, moves))

    def result(self) -> List[Coord]:
        """Block until the pending request finishes and return its ranked list."""
        if self._thread is None:
            raise RuntimeError("No ranking has been requested")
        ok, value = self._channel.get()
        self._thread.join()
        self._thread = None
        if not ok:
            raise value  # type: ignore[misc]
        return value  # type: ignore[return-value]


class BotLogic:
    """Facade the turn loop talks to: one call, one ranked list."""

    def __init__(self, *, seed: Optional[int] = None, limit: int = _cfg.BOT_MAX_CANDIDATES) -> None:
        self.worker = BotWorker(rng=random.Random(seed), limit=limit)

    def choose_moves(self, board: Board) -> List[Coord]:
        self.worker.request(board)
        moves = self.worker.result()
        logger.debug("Bot ranked %d candidate(s): %s", len(moves), moves)
        return moves
