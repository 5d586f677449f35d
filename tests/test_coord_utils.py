import pytest

from seabattle.coord_utils import InvalidCoordinate, format_coord, parse_coordinate


def test_parse_coordinate_basic():
    assert parse_coordinate("A1", 10) == (0, 0)
    assert parse_coordinate("C10", 10) == (9, 2)


def test_parse_whitespace_and_case():
    assert parse_coordinate("  j10 ", 10) == (9, 9)


def test_parse_large_board():
    assert parse_coordinate("P16", 16) == (15, 15)


@pytest.mark.parametrize("coord", ["K1", "A11", "A0", "", "11", "AA1", "A-1"])
def test_parse_rejects_off_board_or_garbage(coord):
    with pytest.raises(InvalidCoordinate):
        parse_coordinate(coord, 10)


def test_format_round_trips_parse():
    assert format_coord(*parse_coordinate("N14", 14)) == "N14"
