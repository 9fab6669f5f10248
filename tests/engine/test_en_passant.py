from __future__ import annotations

from src.engine.board import Board
from src.engine.game import Game
from src.engine.move import Move, str_to_square
from src.engine.pieces import Piece, PieceKind, Side


def sq(name: str) -> tuple[int, int]:
    return str_to_square(name)


def test_white_en_passant_generation_and_apply() -> None:
    # Black just played e7e5, so e6 is the target; the pawn on d5 may take it
    b = Board.from_fen("4k3/8/8/3Pp3/8/8/8/4K3 w - e6 0 1")
    assert sq("e6") in b.legal_moves(sq("d5"))

    assert b.make_move(Move(sq("d5"), sq("e6")))
    assert b.piece_at(sq("e6")) == Piece(PieceKind.PAWN, Side.WHITE)
    assert b.piece_at(sq("d5")) is None
    # The captured pawn disappears from behind the target square
    assert b.piece_at(sq("e5")) is None
    assert b.captured_by(Side.WHITE) == [Piece(PieceKind.PAWN, Side.BLACK)]
    assert b.to_fen() == "4k3/8/4P3/8/8/8/8/4K3 b - - 0 1"


def test_black_en_passant_generation_and_apply() -> None:
    b = Board.from_fen("4k3/8/8/8/3pP3/8/8/4K3 b - e3 0 1")
    assert sq("e3") in b.legal_moves(sq("d4"))

    assert b.make_move(Move(sq("d4"), sq("e3")))
    assert b.piece_at(sq("e4")) is None
    assert b.to_fen() == "4k3/8/8/8/8/4p3/8/4K3 w - - 0 2"


def test_en_passant_expires_after_one_move() -> None:
    g = Game.new()
    for a, z in (("e2", "e4"), ("a7", "a6"), ("e4", "e5"), ("d7", "d5")):
        assert g.apply_move(a, z)
    assert g.board.ep_square == sq("d6")
    assert g.legal_moves("e5") == {sq("e6"), sq("d6")}
    # Only the pawn beside the target may use it
    assert sq("d6") not in g.legal_moves("c2")

    assert g.apply_move("h2", "h3")
    assert g.apply_move("a6", "a5")
    assert g.board.ep_square is None
    assert g.legal_moves("e5") == {sq("e6")}


def test_en_passant_that_exposes_king_is_illegal() -> None:
    # Removing both pawns from the fifth rank would open the rook's line to a5
    b = Board.from_fen("8/8/8/K2Pp2r/8/8/8/7k w - e6 0 1")
    assert b.legal_moves(sq("d5")) == {sq("d6")}
