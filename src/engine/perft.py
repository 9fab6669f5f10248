from __future__ import annotations

from .board import Board
from .move import Move
from .pieces import PAWN_LAST_RANK, PieceKind


PROMOTION_KINDS = (PieceKind.QUEEN, PieceKind.ROOK, PieceKind.BISHOP, PieceKind.KNIGHT)


def perft(board: Board, depth: int) -> int:
    """Compute perft node count for `board` at `depth`.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Each promotion counts once per promotion kind (queen, rook, bishop,
    knight) so results match published perft tables. The board is restored
    after every child via ``undo``.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    nodes = 0
    for from_sq, dests in board.all_legal_moves().items():
        piece = board.piece_at(from_sq)
        assert piece is not None
        for to_sq in dests:
            promotes = (
                piece.kind is PieceKind.PAWN and to_sq[0] == PAWN_LAST_RANK[piece.side]
            )
            for promo in PROMOTION_KINDS if promotes else (None,):
                if depth == 1:
                    nodes += 1
                    continue
                board.make_move(Move(from_sq, to_sq, promo), validate=False)
                try:
                    nodes += perft(board, depth - 1)
                finally:
                    board.undo()
    return nodes
