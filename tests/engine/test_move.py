from __future__ import annotations

import pytest

from src.engine.move import Move, parse_uci, square_to_str, str_to_square
from src.engine.pieces import PieceKind


def test_square_orientation() -> None:
    assert str_to_square("a8") == (0, 0)
    assert str_to_square("h8") == (0, 7)
    assert str_to_square("a1") == (7, 0)
    assert str_to_square("e4") == (4, 4)


def test_square_conversion_is_invertible() -> None:
    for rank in range(8):
        for file in range(8):
            name = square_to_str((rank, file))
            assert str_to_square(name) == (rank, file)


@pytest.mark.parametrize("name", ["", "e", "e44", "i1", "a0", "a9", "E4", "4e"])
def test_invalid_square_names(name: str) -> None:
    with pytest.raises(ValueError):
        str_to_square(name)


@pytest.mark.parametrize("sq", [(8, 0), (0, 8), (-1, 3), (3, -1)])
def test_square_to_str_rejects_off_board(sq) -> None:
    with pytest.raises(ValueError):
        square_to_str(sq)


def test_parse_coordinate_moves() -> None:
    mv = parse_uci("e2e4")
    assert mv == Move(str_to_square("e2"), str_to_square("e4"))
    assert mv.to_uci() == "e2e4"

    promo = parse_uci("e7e8N")
    assert promo.promotion is PieceKind.KNIGHT
    assert promo.to_uci() == "e7e8n"


@pytest.mark.parametrize("uci", ["e2", "e2e4qq", "e7e8x", "z2e4"])
def test_parse_rejects_malformed_moves(uci: str) -> None:
    with pytest.raises(ValueError):
        parse_uci(uci)
