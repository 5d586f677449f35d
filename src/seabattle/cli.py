"""Console front-end: argument parsing, prompts and board printing.

Everything here is I/O glue around GameSession; the rules live elsewhere.
Type ``exit`` at any prompt to leave; the last completed turn stays saved
and ``--resume`` picks it up again.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Optional, Tuple

from . import config as _cfg
from . import placement_wizard
from .battleship import Board, Outcome, Ship
from .coord_utils import InvalidCoordinate, format_coord, parse_coordinate
from .events import Category, Event
from .log_setup import configure_logging
from .persistence import GameStateStore, PlayerStore, StatsWriter
from .session import GameSession, Player

logger = logging.getLogger(__name__)

_RESULT_TEXT = {
    Outcome.HIT: "Hit!",
    Outcome.SUNK: "Ship sunk!",
    Outcome.MISS: "Miss.",
}


def _ask(prompt: str, input_fn: Callable[[str], str] = input) -> str:
    line = input_fn(prompt).strip()
    if line.lower() == "exit":
        raise SystemExit(0)
    return line


def print_boards(own: Board, enemy: Board) -> None:
    header = " ".join(chr(ord("A") + i) for i in range(own.size))
    print(f"    {header}        {header}")
    for i, (mine, theirs) in enumerate(zip(own.rows(reveal=True), enemy.rows(reveal=False)), start=1):
        print(f"{i:>2}  {mine}    {i:>2}  {theirs}")


def coordinate_provider(board_size: int) -> Callable[[], Tuple[int, int]]:
    def _next() -> Tuple[int, int]:
        while True:
            try:
                return parse_coordinate(_ask("Target (e.g. A1): "), board_size)
            except InvalidCoordinate as exc:
                print(f"[!] {exc}")

    return _next


def _manual_placement(player: Player, template) -> None:
    answer = _ask(f"{player.name}: place ships automatically? [Y/n] ")
    auto = not answer.upper().startswith("N")

    def _recv(ship: Ship) -> Tuple[int, int, bool]:
        print("\n".join(player.board.rows(reveal=True)))
        while True:
            try:
                row, col = parse_coordinate(_ask(f"  Start of {ship.name}: "), player.board.size)
            except InvalidCoordinate as exc:
                print(f"[!] {exc}")
                continue
            horizontal = _ask("  Horizontal? [Y/n] ").upper() != "N"
            return row, col, horizontal

    placement_wizard.run(player.board, template, _recv, print, auto=auto)


def _printer(ev: Event) -> None:
    if ev.category is Category.TURN:
        if ev.type == "shot":
            row, col = ev.payload["coord"]
            print(f"{ev.payload['attacker']} fires at {format_coord(row, col)} – {_RESULT_TEXT[ev.payload['result']]}")
        elif ev.type == "already":
            print("[!] Already fired there, pick again.")
        elif ev.type == "start":
            print(f"\n=== {ev.payload['attacker']}'s turn ===")
    elif ev.category is Category.GAME and ev.type == "over":
        print(f"\n*** {ev.payload['winner']} wins! ***")


def main(argv: Optional[list[str]] = None) -> None:  # pragma: no cover – CLI entry
    parser = argparse.ArgumentParser(description="Seabattle console game")
    parser.add_argument("--size", type=int, choices=_cfg.SUPPORTED_SIZES, default=_cfg.BOARD_SIZE)
    parser.add_argument("--bot", action="store_true", help="Play against the computer.")
    parser.add_argument("--resume", action="store_true", help="Continue the saved game if there is one.")
    parser.add_argument("--data-dir", type=Path, default=_cfg.DATA_DIR)
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity.")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only report errors.")
    args = parser.parse_args(argv)

    log_file = _cfg.LOG_FILE if args.data_dir == _cfg.DATA_DIR else args.data_dir / "seabattle.log"
    configure_logging(log_file, debug=args.debug or _cfg.DEBUG, verbose=args.verbose, quiet=args.quiet)

    player_store = PlayerStore(args.data_dir)
    game_store = GameStateStore(args.data_dir)
    stores = dict(player_store=player_store, game_store=game_store, stats_writer=StatsWriter(args.data_dir))

    try:
        snapshot = game_store.load_game_state() if args.resume else None
        if snapshot is not None:
            session = GameSession.resume(snapshot, **stores)
        else:
            first = _ask("Name of player 1: ") or "Player 1"
            second = ("Bot", True) if args.bot else (_ask("Name of player 2: ") or "Player 2", False)
            session = GameSession.new(args.size, [(first, False), second], placer=_manual_placement, **stores)
        session.subscribe(_printer)

        provider = coordinate_provider(session.board_size)

        def _provider_for(player: Player):
            if player.is_bot:
                return None
            print_boards(player.board, session.opponent.board)
            return provider

        winner = session.run(_provider_for)
        rec = winner.record
        print(f"{winner.name}: {rec.wins} win(s), {rec.losses} loss(es) in {rec.total_games} game(s)")
    except (KeyboardInterrupt, EOFError):
        logger.info("Interrupted – saved game kept")
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
