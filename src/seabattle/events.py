"""Lightweight event model used by GameSession to decouple game logic from output.

The turn loop emits strongly-typed events that the CLI renders and other
subscribers (e.g. logging or tests) can consume without parsing free-text
strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Dict


class Category(Enum):
    """High-level event categories."""

    TURN = auto()  # per-turn lifecycle (start, shot, already, end)
    GAME = auto()  # whole-game lifecycle (saved, over)


@dataclass(slots=True)
class Event:
    """Immutable event emitted by TurnController and GameSession."""

    category: Category
    type: str  # finer-grained identifier, e.g. "shot", "already", "over"
    payload: Dict[str, Any]


Subscriber = Callable[[Event], None]
