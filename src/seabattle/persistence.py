"""JSON-on-disk persistence: player statistics, the saved game, end-of-game stats.

File layout inside the data directory
-------------------------------------
player_<sanitized-name>.json   PlayerRecord, one file per player
current_game.json              GameSnapshot of the game in progress; empty ⇔ no save
game_stats_<epoch-ms>.json     one-shot summary of both boards when a game ends

None of the public store methods raise on I/O trouble. Failures are logged
and the caller gets a safe default (a fresh record, ``None`` for "no saved
game", ``False`` for "not written") so that play always continues.
"""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Tuple

from .battleship import Board

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

PLAYER_FILE_FMT = "player_{}.json"
GAME_FILE = "current_game.json"
STATS_FILE_FMT = "game_stats_{}.json"

# Latin letters, digits and the Cyrillic alphabet survive; everything else is "_".
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9А-Яа-яЁё]")


class PersistenceError(OSError):
    """Reading or writing a store file failed."""


class CorruptSaveError(ValueError):
    """A store file exists but does not hold a valid document."""


def sanitize_name(name: str) -> str:
    """Filesystem-safe key for *name*. Distinct names may share a key."""
    return _UNSAFE_CHARS.sub("_", name)


def _now() -> str:
    return datetime.now().isoformat(timespec="seconds")


# ---------------------------------------------------------------------- #
# Schemas
# ---------------------------------------------------------------------- #
@dataclass
class PlayerRecord:
    """Aggregate statistics of one player across sessions."""

    name: str
    total_games: int = 0
    wins: int = 0
    losses: int = 0
    created: str = field(default_factory=_now)
    last_played: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": SCHEMA_VERSION,
            "name": self.name,
            "totalGames": self.total_games,
            "wins": self.wins,
            "losses": self.losses,
            "created": self.created,
            "lastPlayed": self.last_played,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "PlayerRecord":
        if not isinstance(data, dict):
            raise CorruptSaveError("player record is not an object")
        try:
            return cls(
                name=str(data["name"]),
                total_games=int(data.get("totalGames", 0)),
                wins=int(data.get("wins", 0)),
                losses=int(data.get("losses", 0)),
                created=str(data.get("created") or _now()),
                last_played=data.get("lastPlayed"),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise CorruptSaveError(f"invalid player record: {exc}") from exc


@dataclass
class PlayerSnapshot:
    name: str
    is_bot: bool
    board: Board
    player_data: PlayerRecord

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "isBot": self.is_bot,
            "board": self.board.to_dict(),
            "playerData": self.player_data.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlayerSnapshot":
        return cls(
            name=str(data["name"]),
            is_bot=bool(data["isBot"]),
            board=Board.from_dict(data["board"]),
            player_data=PlayerRecord.from_dict(data["playerData"]),
        )


@dataclass
class GameSnapshot:
    """Everything needed to resume a game exactly where it stopped."""

    board_size: int
    players: List[PlayerSnapshot]
    ships_template: List[Tuple[str, int]]
    save_time: str = field(default_factory=_now)
    # Index of the player to move next
    current_player: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": SCHEMA_VERSION,
            "boardSize": self.board_size,
            "players": [p.to_dict() for p in self.players],
            "shipsTemplate": [{"name": name, "length": length} for name, length in self.ships_template],
            "saveTime": self.save_time,
            "currentPlayer": self.current_player,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "GameSnapshot":
        if not isinstance(data, dict):
            raise CorruptSaveError("snapshot is not an object")
        try:
            if int(data.get("version", SCHEMA_VERSION)) > SCHEMA_VERSION:
                raise CorruptSaveError(f"snapshot version {data['version']} is newer than {SCHEMA_VERSION}")
            snapshot = cls(
                board_size=int(data["boardSize"]),
                players=[PlayerSnapshot.from_dict(p) for p in data["players"]],
                ships_template=[(str(s["name"]), int(s["length"])) for s in data["shipsTemplate"]],
                save_time=str(data.get("saveTime") or _now()),
                current_player=int(data.get("currentPlayer", 0)),
            )
        except CorruptSaveError:
            raise
        except (KeyError, TypeError, ValueError, LookupError) as exc:
            raise CorruptSaveError(f"invalid snapshot: {exc}") from exc
        if len(snapshot.players) != 2:
            raise CorruptSaveError(f"expected 2 players, found {len(snapshot.players)}")
        if any(p.board.size != snapshot.board_size for p in snapshot.players):
            raise CorruptSaveError("player board size does not match boardSize")
        if snapshot.current_player not in (0, 1):
            raise CorruptSaveError(f"currentPlayer out of range: {snapshot.current_player}")
        return snapshot


# ---------------------------------------------------------------------- #
# File helpers
# ---------------------------------------------------------------------- #
def _read_json(path: Path) -> Optional[Any]:
    """Decoded document at *path*; ``None`` when the file is missing or empty."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise PersistenceError(f"cannot read {path}: {exc}") from exc
    if not text.strip():
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise CorruptSaveError(f"{path} is not valid JSON: {exc}") from exc


def _write_json(path: Path, obj: Any) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(f"cannot write {path}: {exc}") from exc


# ---------------------------------------------------------------------- #
# Stores
# ---------------------------------------------------------------------- #
class PlayerStore:
    """Per-player aggregate statistics, one JSON file per sanitized name."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)

    def player_path(self, name: str) -> Path:
        return self.data_dir / PLAYER_FILE_FMT.format(sanitize_name(name))

    def load_player_data(self, name: str) -> PlayerRecord:
        """Stored record for *name*, or a freshly created (and saved) zeroed one."""
        path = self.player_path(name)
        try:
            data = _read_json(path)
            if data is not None:
                return PlayerRecord.from_dict(data)
            record = PlayerRecord(name=name)
            _write_json(path, record.to_dict())
            logger.info("Created player record for %r at %s", name, path)
            return record
        except (PersistenceError, CorruptSaveError) as exc:
            logger.error("Falling back to a blank record for %r: %s", name, exc)
            return PlayerRecord(name=name)

    def save_player_data(self, name: str, record: PlayerRecord) -> bool:
        """Stamp lastPlayed and overwrite the player's file. False if the write failed."""
        record.last_played = _now()
        try:
            _write_json(self.player_path(name), record.to_dict())
        except PersistenceError as exc:
            logger.error("Could not save player record for %r: %s", name, exc)
            return False
        return True

    def update_game_result(self, winner: str, loser: str) -> Tuple[PlayerRecord, PlayerRecord]:
        """Count a finished game for both players.

        The two files are written one after the other; a crash in between
        leaves the winner updated and the loser not.
        """
        won = self.load_player_data(winner)
        won.total_games += 1
        won.wins += 1
        self.save_player_data(winner, won)

        lost = self.load_player_data(loser)
        lost.total_games += 1
        lost.losses += 1
        self.save_player_data(loser, lost)
        logger.info("Recorded result: %s beat %s", winner, loser)
        return won, lost


class GameStateStore:
    """Single-slot store for the game in progress."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)

    @property
    def path(self) -> Path:
        return self.data_dir / GAME_FILE

    def save_game_state(self, snapshot: GameSnapshot) -> bool:
        snapshot.save_time = _now()
        try:
            _write_json(self.path, snapshot.to_dict())
        except PersistenceError as exc:
            logger.error("Could not save game state: %s", exc)
            return False
        logger.debug("Game state saved to %s", self.path)
        return True

    def load_game_state(self) -> Optional[GameSnapshot]:
        """The saved snapshot, or None when there is none or it cannot be used."""
        try:
            data = _read_json(self.path)
            if data is None:
                return None
            return GameSnapshot.from_dict(data)
        except CorruptSaveError as exc:
            logger.warning("Ignoring unusable save %s: %s", self.path, exc)
        except PersistenceError as exc:
            logger.error("Could not read game state: %s", exc)
        return None

    def has_saved_game(self) -> bool:
        return self.load_game_state() is not None

    def clear_game_state(self) -> bool:
        """Truncate the save file; an empty file means "no saved game"."""
        try:
            if self.path.exists():
                self.path.write_text("", encoding="utf-8")
        except OSError as exc:
            logger.error("Could not clear game state: %s", exc)
            return False
        return True


class StatsWriter:
    """Writes the one-shot end-of-game summary file."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)

    def write_game_stats(self, winner: Tuple[str, Board], loser: Tuple[str, Board]) -> Optional[Path]:
        stamp_ms = int(time.time() * 1000)
        timestamp = _now()
        doc = {}
        for role, (name, board) in (("winner", winner), ("loser", loser)):
            doc[role] = {"name": name, **board.stats().to_dict(), "timestamp": timestamp}
        path = self.data_dir / STATS_FILE_FMT.format(stamp_ms)
        try:
            _write_json(path, doc)
        except PersistenceError as exc:
            logger.error("Could not write game stats: %s", exc)
            return None
        logger.info("Game stats written to %s", path)
        return path
