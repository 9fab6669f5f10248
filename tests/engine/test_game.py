from __future__ import annotations

import pytest

from src.engine.board import STARTPOS_FEN
from src.engine.game import Game
from src.engine.move import str_to_square
from src.engine.pieces import Piece, PieceKind, Side


def test_new_game_exposes_start_position() -> None:
    g = Game.new()
    assert g.to_fen() == STARTPOS_FEN
    assert g.side_to_move is Side.WHITE
    assert g.piece_at("e1") == Piece(PieceKind.KING, Side.WHITE)
    assert g.piece_at((0, 3)) == Piece(PieceKind.QUEEN, Side.BLACK)
    assert g.piece_at("e4") is None


def test_squares_accept_both_forms() -> None:
    g = Game.new()
    assert g.legal_moves("g1") == g.legal_moves(str_to_square("g1"))
    assert g.apply_move((6, 4), "e4")
    assert g.move_history_uci() == ["e2e4"]


@pytest.mark.parametrize("bad", ["z9", "e", "e10", (8, 8), (-1, 0)])
def test_malformed_squares_raise(bad) -> None:
    g = Game.new()
    with pytest.raises(ValueError):
        g.legal_moves(bad)
    with pytest.raises(ValueError):
        g.apply_move(bad, "e4")


def test_captures_are_reported_per_side() -> None:
    g = Game.new()
    for a, z in (("e2", "e4"), ("d7", "d5"), ("e4", "d5")):
        assert g.apply_move(a, z)
    assert g.captures(Side.WHITE) == [Piece(PieceKind.PAWN, Side.BLACK)]
    assert g.captures(Side.BLACK) == []

    assert g.apply_move("d8", "d5")
    assert g.captures(Side.BLACK) == [Piece(PieceKind.PAWN, Side.WHITE)]

    g.undo_move()
    assert g.captures(Side.BLACK) == []
    assert g.move_history_uci() == ["e2e4", "d7d5", "e4d5"]


def test_undo_restores_side_clocks_and_rights() -> None:
    g = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 5 12")
    before = g.to_fen()
    assert g.apply_move("e1", "g1")
    assert g.to_fen() != before
    g.undo_move()
    assert g.to_fen() == before
    assert g.side_to_move is Side.WHITE


def test_apply_uci_plays_coordinate_moves() -> None:
    g = Game.from_fen("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
    assert g.apply_uci("e7e8n")
    assert g.to_fen() == "k3N3/8/8/8/8/8/8/4K3 b - - 0 1"
    assert g.move_history_uci() == ["e7e8n"]
    assert not g.apply_uci("a8a6")
    assert g.move_history_uci() == ["e7e8n"]


@pytest.mark.parametrize("uci", ["e2", "e2e9", "e7e8x", "e2e4e5"])
def test_apply_uci_rejects_malformed_notation(uci: str) -> None:
    g = Game.new()
    with pytest.raises(ValueError):
        g.apply_uci(uci)
    assert g.to_fen() == STARTPOS_FEN
