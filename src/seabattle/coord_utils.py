import re
from typing import Tuple

# Column letter followed by a 1-based row number, e.g. "A1" or "p16"
COORD_RE = re.compile(r"^([A-Za-z])(\d{1,2})$")


class InvalidCoordinate(ValueError):
    """Raised when input cannot be read as an on-board coordinate."""


def parse_coordinate(coord: str, size: int) -> Tuple[int, int]:
    """
    Convert a coordinate like 'A1' through 'P16' to a zero-based (row, col) tuple.

    The letter selects the column and the number the row, matching the
    header printed above each board.
    """
    match = COORD_RE.match(coord.strip())
    if not match:
        raise InvalidCoordinate(f"Invalid coordinate: {coord!r}")
    col = ord(match.group(1).upper()) - ord("A")
    row = int(match.group(2)) - 1
    if not (0 <= row < size and 0 <= col < size):
        raise InvalidCoordinate(f"Coordinate {coord.strip().upper()} is off the {size}x{size} board")
    return row, col


def format_coord(row: int, col: int) -> str:
    """
    Convert zero-based (row, col) to coordinate string like 'A1'.
    """
    return f"{chr(ord('A') + col)}{row + 1}"
