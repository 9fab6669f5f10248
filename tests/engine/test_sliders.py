from __future__ import annotations

from src.engine.board import Board
from src.engine.move import square_to_str, str_to_square


def moves_set(b: Board) -> set[str]:
    return {
        square_to_str(fr) + square_to_str(to)
        for fr, dests in b.all_legal_moves().items()
        for to in dests
    }


def test_rook_basic_moves() -> None:
    fen = "4k3/8/8/8/8/8/8/R3K3 w - - 0 1"
    b = Board.from_fen(fen)
    ms = moves_set(b)
    assert {"a1a2", "a1b1", "a1a8", "a1d1"}.issubset(ms)
    assert "a1e1" not in ms


def test_bishop_basic_moves() -> None:
    fen = "4k3/8/8/8/8/8/8/2B1K3 w - - 0 1"
    b = Board.from_fen(fen)
    ms = moves_set(b)
    assert {"c1b2", "c1d2", "c1h6", "c1a3"}.issubset(ms)


def test_queen_basic_moves() -> None:
    fen = "4k3/8/8/8/8/8/8/3QK3 w - - 0 1"
    b = Board.from_fen(fen)
    ms = moves_set(b)
    assert {"d1d2", "d1c1", "d1c2", "d1d8", "d1h5"}.issubset(ms)


def test_pinned_rook_move_filtered() -> None:
    # Black rook e8 pins the white rook on e2 against the king on e1
    fen = "k3r3/8/8/8/8/8/4R3/4K3 w - - 0 1"
    b = Board.from_fen(fen)
    ms = moves_set(b)
    assert "e2d2" not in ms and "e2f2" not in ms
    # Moving along the pin line, or capturing the pinner, stays legal
    assert {"e2e3", "e2e7", "e2e8"}.issubset(ms)
    assert b.legal_moves(str_to_square("e2")) == {str_to_square(s) for s in
                                                  ("e3", "e4", "e5", "e6", "e7", "e8")}
