from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class Side(str, Enum):
    WHITE = "w"
    BLACK = "b"

    @property
    def opponent(self) -> "Side":
        return Side.BLACK if self is Side.WHITE else Side.WHITE


class PieceKind(str, Enum):
    PAWN = "p"
    KNIGHT = "n"
    BISHOP = "b"
    ROOK = "r"
    QUEEN = "q"
    KING = "k"


@dataclass(frozen=True)
class Piece:
    """A piece value; two pieces of the same kind and side are equal."""

    kind: PieceKind
    side: Side

    @property
    def symbol(self) -> str:
        """FEN letter: uppercase for White, lowercase for Black."""
        return self.kind.value.upper() if self.side is Side.WHITE else self.kind.value

    @classmethod
    def from_symbol(cls, ch: str) -> "Piece":
        """Create a piece from its FEN letter.

        Raises:
            ValueError: If ``ch`` is not one of ``PNBRQKpnbrqk``.
        """
        if len(ch) != 1 or ch.lower() not in "pnbrqk":
            raise ValueError(f"invalid piece in FEN: {ch!r}")
        side = Side.WHITE if ch.isupper() else Side.BLACK
        return cls(PieceKind(ch.lower()), side)


@dataclass(frozen=True)
class CastlingRights:
    kingside: bool = False
    queenside: bool = False


ORTHOGONAL = ((1, 0), (-1, 0), (0, 1), (0, -1))
DIAGONAL = ((1, 1), (1, -1), (-1, 1), (-1, -1))
KNIGHT_OFFSETS = ((2, 1), (2, -1), (-2, 1), (-2, -1), (1, 2), (-1, 2), (1, -2), (-1, -2))

# kind -> (direction vectors as (d_rank, d_file), max steps per direction)
MOVEMENT: Dict[PieceKind, Tuple[Tuple[Tuple[int, int], ...], int]] = {
    PieceKind.ROOK: (ORTHOGONAL, 7),
    PieceKind.BISHOP: (DIAGONAL, 7),
    PieceKind.QUEEN: (ORTHOGONAL + DIAGONAL, 7),
    PieceKind.KNIGHT: (KNIGHT_OFFSETS, 1),
    PieceKind.KING: (ORTHOGONAL + DIAGONAL, 1),
}

# Rank index a pawn moves toward, starts on, and promotes on
PAWN_DIRECTION = {Side.WHITE: -1, Side.BLACK: 1}
PAWN_START_RANK = {Side.WHITE: 6, Side.BLACK: 1}
PAWN_LAST_RANK = {Side.WHITE: 0, Side.BLACK: 7}
# Rank of an en-passant target each side may capture onto
EP_TARGET_RANK = {Side.WHITE: 2, Side.BLACK: 5}

HOME_RANK = {Side.WHITE: 7, Side.BLACK: 0}
KING_START_FILE = 4
KINGSIDE_ROOK_FILE = 7
QUEENSIDE_ROOK_FILE = 0
