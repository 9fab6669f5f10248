from __future__ import annotations

from typing import TYPE_CHECKING, Set

from .move import Square, is_valid_square
from .pieces import (
    EP_TARGET_RANK,
    HOME_RANK,
    KING_START_FILE,
    KINGSIDE_ROOK_FILE,
    MOVEMENT,
    PAWN_DIRECTION,
    PAWN_START_RANK,
    QUEENSIDE_ROOK_FILE,
    Piece,
    PieceKind,
    Side,
)

if TYPE_CHECKING:  # pragma: no cover
    from .board import Board


def pseudo_legal_moves(board: "Board", sq: Square, attack_only: bool = False) -> Set[Square]:
    """Return destination squares for the piece on ``sq``.

    Moves are geometrically possible but may leave the mover's own king
    attacked. In ``attack_only`` mode pawns report only their diagonals,
    squares holding friendly pieces count as attacked, and castling is
    never produced.

    Raises:
        ValueError: If ``sq`` lies outside the board.
    """
    if not is_valid_square(sq):
        raise ValueError(f"cannot generate moves for square {sq}")
    piece = board.piece_at(sq)
    if piece is None:
        return set()
    if piece.kind is PieceKind.PAWN:
        return _pawn_moves(board, sq, piece, attack_only)
    directions, max_steps = MOVEMENT[piece.kind]
    moves = _directional_moves(board, sq, piece, directions, max_steps, attack_only)
    if piece.kind is PieceKind.KING and not attack_only:
        moves |= _castling_moves(board, sq, piece.side)
    return moves


def attacked_squares(board: "Board", side: Side) -> Set[Square]:
    """Union of attack-mode destinations over every piece of ``side``."""
    attacked: Set[Square] = set()
    for sq, piece in board.pieces():
        if piece.side is side:
            attacked |= pseudo_legal_moves(board, sq, attack_only=True)
    return attacked


def _directional_moves(
    board: "Board",
    sq: Square,
    piece: Piece,
    directions,
    max_steps: int,
    attack_only: bool,
) -> Set[Square]:
    moves: Set[Square] = set()
    for d_rank, d_file in directions:
        rank, file = sq
        for _ in range(max_steps):
            rank += d_rank
            file += d_file
            if not (0 <= rank < 8 and 0 <= file < 8):
                break
            target = board.grid[rank][file]
            if target is None:
                moves.add((rank, file))
                continue
            # First blocker ends the ray; enemies are capturable, friends are defended
            if attack_only or target.side is not piece.side:
                moves.add((rank, file))
            break
    return moves


def _pawn_moves(board: "Board", sq: Square, piece: Piece, attack_only: bool) -> Set[Square]:
    rank, file = sq
    side = piece.side
    step = PAWN_DIRECTION[side]
    ahead = rank + step
    moves: Set[Square] = set()
    if not (0 <= ahead < 8):
        return moves

    diagonals = [(ahead, file + df) for df in (-1, 1) if 0 <= file + df < 8]
    if attack_only:
        return set(diagonals)

    if board.grid[ahead][file] is None:
        moves.add((ahead, file))
        two_ahead = rank + 2 * step
        if rank == PAWN_START_RANK[side] and board.grid[two_ahead][file] is None:
            moves.add((two_ahead, file))

    for target_sq in diagonals:
        target = board.piece_at(target_sq)
        if target is not None:
            if target.side is not side:
                moves.add(target_sq)
        elif target_sq == board.ep_square and target_sq[0] == EP_TARGET_RANK[side]:
            moves.add(target_sq)
    return moves


def _castling_moves(board: "Board", sq: Square, side: Side) -> Set[Square]:
    home = HOME_RANK[side]
    if sq != (home, KING_START_FILE):
        return set()
    rights = board.castling[side]
    if not (rights.kingside or rights.queenside):
        return set()

    rook = Piece(PieceKind.ROOK, side)
    enemy_attacks = board.attacked[side.opponent]
    moves: Set[Square] = set()
    if (
        rights.kingside
        and board.grid[home][KINGSIDE_ROOK_FILE] == rook
        and all(board.grid[home][f] is None for f in (5, 6))
        and not any((home, f) in enemy_attacks for f in (4, 5, 6))
    ):
        moves.add((home, 6))
    if (
        rights.queenside
        and board.grid[home][QUEENSIDE_ROOK_FILE] == rook
        and all(board.grid[home][f] is None for f in (1, 2, 3))
        and not any((home, f) in enemy_attacks for f in (2, 3, 4))
    ):
        moves.add((home, 2))
    return moves
