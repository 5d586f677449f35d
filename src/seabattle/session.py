"""Two-player game session.

The class in this module manages a *single* game between exactly two
players, either of whom may be a bot. It alternates TurnController turns,
saves a snapshot of the whole game after every turn, and when a fleet is
destroyed it records the result, writes the end-of-game stats and removes
the save.

Stores are handed in by the caller; the session never builds its own, so
one set of store objects serves the whole process.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from . import config as _cfg
from .battleship import Board, ships_template
from .bot_logic import BotLogic
from .events import Category, Event, Subscriber
from .persistence import (
    GameSnapshot,
    GameStateStore,
    PlayerRecord,
    PlayerSnapshot,
    PlayerStore,
    StatsWriter,
)
from .turn import CoordinateProvider, TurnController

logger = logging.getLogger(__name__)

Template = List[Tuple[str, int]]


@dataclass
class Player:
    name: str
    is_bot: bool
    board: Board
    record: PlayerRecord
    bot: Optional[BotLogic] = field(default=None, repr=False)


# Places *player*'s fleet on their board (manual or automatic, caller decides)
FleetPlacer = Callable[[Player, Template], None]


class GameSession:
    """Runs a single two-player game from first shot to result."""

    def __init__(
        self,
        players: Sequence[Player],
        template: Template,
        *,
        player_store: PlayerStore,
        game_store: GameStateStore,
        stats_writer: Optional[StatsWriter] = None,
        shot_delay: float = _cfg.BOT_SHOT_DELAY,
        sleep: Callable[[float], None] = time.sleep,
        current: int = 0,
        bot_seed: Optional[int] = None,
    ) -> None:
        if len(players) != 2:
            raise ValueError(f"A game needs exactly 2 players, got {len(players)}")
        self.players: List[Player] = list(players)
        self.template = list(template)
        self.board_size = self.players[0].board.size
        self.player_store = player_store
        self.game_store = game_store
        self.stats_writer = stats_writer
        self.shot_delay = shot_delay
        self._sleep = sleep
        self.current = current
        for i, player in enumerate(self.players):
            if player.is_bot and player.bot is None:
                player.bot = BotLogic(seed=None if bot_seed is None else bot_seed + i)

        self.winner: Optional[Player] = None
        self.turns = 0
        # Event subscribers
        self._subs: List[Subscriber] = []

    # -------------------- construction --------------------
    @classmethod
    def new(
        cls,
        board_size: int,
        entrants: Sequence[Tuple[str, bool]],
        *,
        player_store: PlayerStore,
        game_store: GameStateStore,
        placer: Optional[FleetPlacer] = None,
        rng: Optional[random.Random] = None,
        **kwargs,
    ) -> "GameSession":
        """Fresh game: load records, place fleets, save the opening snapshot.

        *entrants* is a pair of ``(name, is_bot)``. Bots always place
        automatically; humans go through *placer* when one is given.
        """
        template = ships_template(board_size)
        rnd = rng or random.Random()
        players = []
        for name, is_bot in entrants:
            player = Player(name, is_bot, Board(board_size), player_store.load_player_data(name))
            if is_bot or placer is None:
                player.board.place_ships_randomly(template, rng=rnd)
            else:
                placer(player, template)
            players.append(player)
        session = cls(players, template, player_store=player_store, game_store=game_store, **kwargs)
        logger.info(
            "New %dx%d game: %s vs %s", board_size, board_size, players[0].name, players[1].name
        )
        session.persist_snapshot()
        return session

    @classmethod
    def resume(
        cls,
        snapshot: GameSnapshot,
        *,
        player_store: PlayerStore,
        game_store: GameStateStore,
        **kwargs,
    ) -> "GameSession":
        players = [Player(p.name, p.is_bot, p.board, p.player_data) for p in snapshot.players]
        logger.info("Resuming game saved at %s", snapshot.save_time)
        return cls(
            players,
            snapshot.ships_template,
            player_store=player_store,
            game_store=game_store,
            current=snapshot.current_player,
            **kwargs,
        )

    # -------------------- state --------------------
    @property
    def current_player(self) -> Player:
        return self.players[self.current]

    @property
    def opponent(self) -> Player:
        return self.players[1 - self.current]

    @property
    def finished(self) -> bool:
        return self.winner is not None

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            board_size=self.board_size,
            players=[PlayerSnapshot(p.name, p.is_bot, p.board, p.record) for p in self.players],
            ships_template=list(self.template),
            current_player=self.current,
        )

    def persist_snapshot(self) -> bool:
        ok = self.game_store.save_game_state(self.snapshot())
        self._emit(Event(Category.GAME, "saved", {"ok": ok, "turns": self.turns}))
        return ok

    # -------------------- gameplay --------------------
    def play_turn(self, coordinate_provider: Optional[CoordinateProvider] = None) -> bool:
        """Play one full turn of the current player. Returns True when the game is over."""
        if self.finished:
            raise RuntimeError("Game is already over")
        attacker, defender = self.current_player, self.opponent
        controller = TurnController(
            attacker.name,
            defender.board,
            bot=attacker.bot,
            shot_delay=self.shot_delay,
            sleep=self._sleep,
            emit=self._emit,
        )
        if attacker.is_bot:
            game_over = controller.take_bot_turn()
        else:
            if coordinate_provider is None:
                raise ValueError(f"{attacker.name} is human and needs a coordinate provider")
            game_over = controller.take_human_turn(coordinate_provider)
        self.turns += 1

        if game_over:
            self._conclude(attacker, defender)
            return True
        self.current = 1 - self.current
        self.persist_snapshot()
        return False

    def run(self, provider_for: Callable[[Player], Optional[CoordinateProvider]]) -> Player:
        """Alternate turns until one fleet is gone; returns the winner."""
        while not self.play_turn(provider_for(self.current_player)):
            pass
        return self.winner

    def _conclude(self, winner: Player, loser: Player) -> None:
        logger.info("%s won after %d turn(s)", winner.name, self.turns)
        self.winner = winner
        winner.record, loser.record = self.player_store.update_game_result(winner.name, loser.name)
        if self.stats_writer is not None:
            self.stats_writer.write_game_stats((winner.name, winner.board), (loser.name, loser.board))
        self.game_store.clear_game_state()
        self._emit(Event(Category.GAME, "over", {"winner": winner.name, "loser": loser.name, "turns": self.turns}))

    # -------------------- event bus --------------------
    def subscribe(self, cb: Subscriber) -> None:
        """Allow external components (CLI/logger) to receive game events."""
        self._subs.append(cb)

    def _emit(self, ev: Event) -> None:
        for cb in tuple(self._subs):
            try:
                cb(ev)
            except Exception:  # noqa: BLE001
                # A misbehaving subscriber must not end the game
                logger.exception("Event subscriber failed for %s", ev)
