# placement_wizard.py
"""
Fleet placement helper, independent of where the input comes from.
Usage:
    run(board, template, recv_fn, notify)            # manual
    run(board, template, recv_fn, notify, auto=True) # random
recv_fn returns one placement answer per call as ``(row, col, horizontal)``
and notify receives human-readable progress / error lines.
"""

import logging
import random
from typing import Callable, Iterable, Optional, Tuple

from .battleship import Board, PlacementRejected, Ship
from .coord_utils import format_coord

logger = logging.getLogger(__name__)

Placement = Tuple[int, int, bool]


def run(
    board: Board,
    template: Iterable[Tuple[str, int]],
    recv_fn: Callable[[Ship], Placement],
    notify: Callable[[str], None],
    *,
    auto: bool = False,
    rng: Optional[random.Random] = None,
) -> None:
    template = list(template)
    if auto:
        board.place_ships_randomly(template, rng=rng)
        logger.debug("Placed %d ship(s) automatically", len(template))
        return

    for name, length in template:
        ship = Ship(name, length)
        while True:
            notify(f"Place {name} (length {length})")
            row, col, horizontal = recv_fn(ship)
            try:
                board.place_ship_strict(ship, row, col, horizontal)
            except PlacementRejected as exc:
                notify(f"Cannot place {name} at {format_coord(row, col)}: {exc.reason}")
                continue
            break

    notify("All ships placed")
