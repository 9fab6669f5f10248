from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .pieces import PieceKind


# (rank_idx, file_idx); rank_idx 0 is rank 8, file_idx 0 is file a
Square = Tuple[int, int]

PROMOTION_LETTERS = {"q", "r", "b", "n", "p", "k"}


@dataclass(frozen=True)
class Move:
    """Engine-internal move representation.

    Attributes:
        from_sq (Square): Origin square.
        to_sq (Square): Destination square.
        promotion (Optional[PieceKind]): Explicit promotion kind, if any.
    """

    from_sq: Square
    to_sq: Square
    promotion: Optional[PieceKind] = None

    def to_uci(self) -> str:
        """Serialize the move into coordinate notation.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        promo = self.promotion.value if self.promotion is not None else ""
        return square_to_str(self.from_sq) + square_to_str(self.to_sq) + promo


def parse_uci(uci: str) -> Move:
    """Parse a coordinate-notation move string.

    Args:
        uci (str): Move such as ``"e2e4"`` or ``"a7a8n"``.

    Returns:
        Move: Parsed move.

    Raises:
        ValueError: If the string has an invalid length, squares, or promotion
            piece.
    """
    if len(uci) not in (4, 5):
        raise ValueError(f"invalid move length: {uci!r}")
    from_sq = str_to_square(uci[0:2])
    to_sq = str_to_square(uci[2:4])
    promo: Optional[PieceKind] = None
    if len(uci) == 5:
        letter = uci[4].lower()
        if letter not in PROMOTION_LETTERS:
            raise ValueError(f"invalid promotion piece: {letter!r}")
        promo = PieceKind(letter)
    return Move(from_sq, to_sq, promo)


def is_valid_square(sq: Square) -> bool:
    rank, file = sq
    return 0 <= rank <= 7 and 0 <= file <= 7


def str_to_square(s: str) -> Square:
    """Convert algebraic notation into a ``(rank_idx, file_idx)`` pair.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        Square: ``(8 - rank, file)``; ``"a8"`` maps to ``(0, 0)``.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if not isinstance(s, str) or len(s) != 2:
        raise ValueError(f"invalid square: {s!r}")
    if s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    file = ord(s[0]) - ord("a")
    rank = 8 - int(s[1])
    return (rank, file)


def square_to_str(sq: Square) -> str:
    """Convert a ``(rank_idx, file_idx)`` pair into algebraic notation.

    Raises:
        ValueError: If ``sq`` lies outside the board.
    """
    if not is_valid_square(sq):
        raise ValueError(f"invalid square index: {sq}")
    rank, file = sq
    return chr(ord("a") + file) + str(8 - rank)
