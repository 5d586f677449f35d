from __future__ import annotations

import random

import numpy as np
import pytest

from seabattle.battleship import Board, CellState, Ship
from seabattle.bot_logic import BotLogic, BotWorker, hunt_set, rank_moves


def _cells(size: int, hits=(), misses=()) -> np.ndarray:
    cells = np.zeros((size, size), dtype=np.int8)
    for r, c in hits:
        cells[r, c] = CellState.HIT.code
    for r, c in misses:
        cells[r, c] = CellState.MISS.code
    return cells


def _untried(cells: np.ndarray) -> list[tuple[int, int]]:
    size = cells.shape[0]
    return [
        (r, c)
        for r in range(size)
        for c in range(size)
        if cells[r, c] not in (CellState.HIT.code, CellState.MISS.code)
    ]


def test_hunt_set_empty_without_hits():
    assert hunt_set(_cells(10, misses=[(1, 1), (4, 4)])) == set()


def test_hunt_set_orthogonal_neighbours():
    assert hunt_set(_cells(10, hits=[(5, 5)])) == {(4, 5), (6, 5), (5, 4), (5, 6)}


def test_hunt_set_clips_to_board_and_skips_fired_cells():
    cells = _cells(10, hits=[(0, 0), (0, 1)], misses=[(1, 0)])
    # (0,1) is a hit itself and (1,0) already missed
    assert hunt_set(cells) == {(1, 1), (0, 2)}


def test_rank_moves_puts_targets_first(rng: random.Random):
    cells = _cells(10, hits=[(5, 5)], misses=[(4, 5)])
    untried = _untried(cells)
    moves = rank_moves(cells, untried, rng=rng)

    assert len(moves) == 10
    assert moves[:3] == [(5, 4), (5, 6), (6, 5)]  # untried order is row-major
    assert len(set(moves)) == len(moves)
    assert set(moves) <= set(untried)


def test_rank_moves_random_pool_without_hits(rng: random.Random):
    cells = _cells(10, misses=[(0, 0)])
    untried = _untried(cells)
    moves = rank_moves(cells, untried, rng=rng)
    assert len(moves) == 10
    assert (0, 0) not in moves
    assert set(moves) <= set(untried)


def test_rank_moves_is_shuffled():
    cells = _cells(16)
    untried = _untried(cells)
    orders = {tuple(rank_moves(cells, untried, rng=random.Random(seed))) for seed in range(5)}
    assert len(orders) > 1


@pytest.mark.parametrize("remaining, expected", [(3, 3), (10, 10), (40, 10)])
def test_rank_moves_capped(remaining: int, expected: int, rng: random.Random):
    cells = _cells(10)
    untried = _untried(cells)[:remaining]
    assert len(rank_moves(cells, untried, rng=rng)) == expected


def test_rank_moves_honours_custom_limit(rng: random.Random):
    cells = _cells(10, hits=[(5, 5)])
    moves = rank_moves(cells, _untried(cells), rng=rng, limit=2)
    assert moves == [(4, 5), (5, 4)]


@pytest.mark.timeout(5)
def test_worker_returns_ranked_list_from_snapshot():
    board = Board(10)
    board.place_ship(Ship("Destroyer", 2), 5, 5, True)
    board.attack(5, 5)

    worker = BotWorker(rng=random.Random(7))
    worker.request(board)
    moves = worker.result()
    assert moves[0] in {(4, 5), (6, 5), (5, 4), (5, 6)}
    assert set(moves[:4]) == {(4, 5), (6, 5), (5, 4), (5, 6)}


@pytest.mark.timeout(5)
def test_worker_requires_collecting_before_next_request():
    board = Board(10)
    worker = BotWorker(rng=random.Random(1))
    with pytest.raises(RuntimeError):
        worker.result()
    worker.request(board)
    with pytest.raises(RuntimeError):
        worker.request(board)
    assert len(worker.result()) == 10


@pytest.mark.timeout(5)
def test_worker_reraises_ranking_failure(monkeypatch):
    import seabattle.bot_logic as bot_logic

    def _boom(*_args, **_kwargs):
        raise ValueError("broken ranking")

    monkeypatch.setattr(bot_logic, "rank_moves", _boom)
    worker = BotWorker(rng=random.Random(1))
    worker.request(Board(10))
    with pytest.raises(ValueError, match="broken ranking"):
        worker.result()


@pytest.mark.timeout(5)
def test_bot_logic_is_reproducible_with_seed():
    board = Board(16)
    assert BotLogic(seed=3).choose_moves(board) == BotLogic(seed=3).choose_moves(board)


@pytest.mark.timeout(5)
def test_bot_logic_on_exhausted_board():
    board = Board(10)
    for r in range(10):
        for c in range(10):
            board.attack(r, c)
    assert BotLogic(seed=1).choose_moves(board) == []
