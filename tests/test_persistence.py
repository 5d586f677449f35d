from __future__ import annotations

import json
import random
from pathlib import Path

import pytest

from seabattle.battleship import Board, Ship, ships_template
from seabattle.persistence import (
    GameSnapshot,
    GameStateStore,
    PlayerRecord,
    PlayerSnapshot,
    PlayerStore,
    StatsWriter,
    sanitize_name,
)


@pytest.mark.parametrize(
    "name, key",
    [
        ("alice", "alice"),
        ("Bob 2", "Bob_2"),
        ("Иван", "Иван"),
        ("Jörg", "J_rg"),
        ("a/../b", "a____b"),
    ],
)
def test_sanitize_name(name: str, key: str) -> None:
    assert sanitize_name(name) == key


def test_load_creates_and_saves_default_record(tmp_path: Path) -> None:
    store = PlayerStore(tmp_path)
    record = store.load_player_data("Alice")
    assert (record.total_games, record.wins, record.losses) == (0, 0, 0)
    assert record.created
    data = json.loads((tmp_path / "player_Alice.json").read_text(encoding="utf-8"))
    assert data["name"] == "Alice"
    assert data["totalGames"] == 0


def test_save_stamps_last_played(tmp_path: Path) -> None:
    store = PlayerStore(tmp_path)
    record = PlayerRecord(name="Alice", total_games=3, wins=2, losses=1)
    assert store.save_player_data("Alice", record)
    assert record.last_played is not None
    loaded = store.load_player_data("Alice")
    assert loaded == record


def test_update_game_result(tmp_path: Path) -> None:
    store = PlayerStore(tmp_path)
    store.update_game_result("Alice", "Bob")
    won, lost = store.update_game_result("Alice", "Bob")
    assert (won.total_games, won.wins, won.losses) == (2, 2, 0)
    assert (lost.total_games, lost.wins, lost.losses) == (2, 0, 2)
    assert store.load_player_data("Bob").losses == 2


def test_sanitized_names_share_a_record(tmp_path: Path) -> None:
    store = PlayerStore(tmp_path)
    store.update_game_result("Bob 1", "Carol")
    assert store.player_path("Bob 1") == store.player_path("Bob?1")
    assert store.load_player_data("Bob?1").wins == 1


def test_unreadable_record_falls_back_to_default(tmp_path: Path) -> None:
    store = PlayerStore(tmp_path)
    store.player_path("Alice").write_text("{not json", encoding="utf-8")
    record = store.load_player_data("Alice")
    assert record.name == "Alice" and record.total_games == 0


def test_write_failure_is_not_fatal(tmp_path: Path, monkeypatch) -> None:
    def _deny(*_args, **_kwargs):
        raise PermissionError("read-only")

    monkeypatch.setattr(Path, "write_text", _deny)
    store = PlayerStore(tmp_path)
    record = store.load_player_data("Alice")
    assert record.total_games == 0
    assert store.save_player_data("Alice", record) is False
    assert GameStateStore(tmp_path).save_game_state(_snapshot()) is False
    assert StatsWriter(tmp_path).write_game_stats(("A", Board(10)), ("B", Board(10))) is None


def _snapshot(seed: int = 5) -> GameSnapshot:
    rng = random.Random(seed)
    players = []
    for name, is_bot in (("Alice", False), ("Bot", True)):
        board = Board(10)
        board.place_ships_randomly(rng=rng)
        players.append(PlayerSnapshot(name, is_bot, board, PlayerRecord(name=name, wins=1, total_games=1)))
    for r, c in [(0, 0), (1, 1), (2, 2), (9, 9)]:
        players[1].board.attack(r, c)
    return GameSnapshot(10, players, ships_template(10), current_player=1)


def test_snapshot_round_trip(tmp_path: Path) -> None:
    store = GameStateStore(tmp_path)
    original = _snapshot()
    assert store.save_game_state(original)
    assert store.has_saved_game()

    loaded = store.load_game_state()
    assert loaded is not None
    assert loaded.board_size == 10
    assert loaded.current_player == 1
    assert loaded.ships_template == ships_template(10)
    for before, after in zip(original.players, loaded.players):
        assert (after.name, after.is_bot) == (before.name, before.is_bot)
        assert after.board.grid == before.board.grid
        assert [s.hits for s in after.board.ships] == [s.hits for s in before.board.ships]
        assert after.player_data == before.player_data


def test_snapshot_file_layout(tmp_path: Path) -> None:
    GameStateStore(tmp_path).save_game_state(_snapshot())
    data = json.loads((tmp_path / "current_game.json").read_text(encoding="utf-8"))
    assert set(data) >= {"boardSize", "players", "shipsTemplate", "saveTime"}
    assert set(data["players"][0]) == {"name", "isBot", "board", "playerData"}


@pytest.mark.parametrize(
    "content",
    [
        "",
        "   \n",
        "{broken",
        "[]",
        json.dumps({"boardSize": 10}),
        json.dumps({"boardSize": 10, "players": [], "shipsTemplate": []}),
    ],
)
def test_empty_or_corrupt_save_means_no_game(tmp_path: Path, content: str) -> None:
    store = GameStateStore(tmp_path)
    store.path.write_text(content, encoding="utf-8")
    assert store.load_game_state() is None
    assert not store.has_saved_game()


def test_missing_save_means_no_game(tmp_path: Path) -> None:
    assert GameStateStore(tmp_path / "nowhere").load_game_state() is None


def test_clear_game_state_empties_file(tmp_path: Path) -> None:
    store = GameStateStore(tmp_path)
    store.save_game_state(_snapshot())
    assert store.clear_game_state()
    assert store.path.read_text(encoding="utf-8") == ""
    assert not store.has_saved_game()


def test_game_stats_file(tmp_path: Path) -> None:
    winner = Board(10)
    winner.place_ship(Ship("Destroyer", 2), 0, 0, True)
    loser = Board(10)
    loser.place_ship(Ship("Destroyer", 2), 0, 0, True)
    winner.attack(5, 5)
    loser.attack(0, 0)
    loser.attack(0, 1)

    path = StatsWriter(tmp_path).write_game_stats(("Alice", winner), ("Bob", loser))
    assert path is not None and path.name.startswith("game_stats_")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["winner"]["misses"] == 1
    assert data["winner"]["shipsIntact"] == 1
    assert data["loser"]["hits"] == 2
    assert data["loser"]["shipsSunk"] == data["loser"]["totalShips"] == 1
    assert "timestamp" in data["loser"]
