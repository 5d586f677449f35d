"""One player's turn: fire, and keep firing while the shots land.

A turn is a loop over single shots against the opponent's board:

* HIT / SUNK      – the same player fires again
* MISS            – the turn ends, control passes to the opponent
* ALREADY_TARGETED – nothing is consumed; a human is asked again, the bot
                    moves on to its next candidate
* after every resolved shot the opponent fleet is checked and the turn
  stops at once when it is gone

Both entry points return ``True`` when the game is over.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Tuple

from . import config as _cfg
from .battleship import Board, Outcome
from .bot_logic import BotLogic
from .coord_utils import format_coord
from .events import Category, Event, Subscriber

Coord = Tuple[int, int]
CoordinateProvider = Callable[[], Coord]

logger = logging.getLogger(__name__)


class TurnController:
    """Drives the turn of *attacker* against *target_board*."""

    def __init__(
        self,
        attacker: str,
        target_board: Board,
        *,
        bot: Optional[BotLogic] = None,
        shot_delay: float = _cfg.BOT_SHOT_DELAY,
        sleep: Callable[[float], None] = time.sleep,
        emit: Optional[Subscriber] = None,
    ) -> None:
        self.attacker = attacker
        self.target_board = target_board
        self.bot = bot
        self.shot_delay = shot_delay
        self._sleep = sleep
        self._emit_cb = emit
        # Resolved shots of the current turn, in firing order
        self.results: List[Tuple[Coord, Outcome]] = []

    @property
    def shots(self) -> int:
        return len(self.results)

    # -------------------- helpers --------------------
    def _emit(self, type_: str, **payload) -> None:
        if self._emit_cb is None:
            return
        payload.setdefault("attacker", self.attacker)
        self._emit_cb(Event(Category.TURN, type_, payload))

    def _fire(self, row: int, col: int) -> Outcome:
        outcome = self.target_board.attack(row, col)
        coord_txt = format_coord(row, col)
        if outcome is Outcome.ALREADY_TARGETED:
            logger.debug("%s re-fired at %s – ignored", self.attacker, coord_txt)
            self._emit("already", coord=(row, col))
            return outcome
        self.results.append(((row, col), outcome))
        logger.info("%s fired at %s: %s", self.attacker, coord_txt, outcome.value)
        self._emit("shot", coord=(row, col), result=outcome)
        return outcome

    def _finish(self, game_over: bool) -> bool:
        self._emit("end", shots=self.shots, game_over=game_over)
        return game_over

    # -------------------- human --------------------
    def take_human_turn(self, coordinate_provider: CoordinateProvider) -> bool:
        """Ask *coordinate_provider* for shots until a miss or the end of the game."""
        self.results.clear()
        self._emit("start", bot=False)
        while True:
            row, col = coordinate_provider()
            outcome = self._fire(row, col)
            if outcome is Outcome.ALREADY_TARGETED:
                continue
            if self.target_board.all_ships_sunk():
                return self._finish(True)
            if not outcome.continues_turn:
                return self._finish(False)

    # -------------------- bot --------------------
    def take_bot_turn(self) -> bool:
        """Fire the bot's ranked candidates in order under the same rules."""
        if self.bot is None:
            raise RuntimeError(f"{self.attacker} has no bot strategy attached")
        self.results.clear()
        self._emit("start", bot=True)
        while True:
            # Blocks until the worker hands back its list
            candidates = self.bot.choose_moves(self.target_board)
            if not candidates:
                return self._finish(self.target_board.all_ships_sunk())
            for row, col in candidates:
                if self.results:
                    self._sleep(self.shot_delay)
                outcome = self._fire(row, col)
                if outcome is Outcome.ALREADY_TARGETED:
                    continue
                if self.target_board.all_ships_sunk():
                    return self._finish(True)
                if not outcome.continues_turn:
                    return self._finish(False)
            # Every candidate hit: rank again from the updated board
            logger.debug("%s exhausted %d candidate(s) while still on target", self.attacker, len(candidates))
