from __future__ import annotations

from typing import Iterable

from .board import Board
from .move import Square


def render_board(board: Board, highlights: Iterable[Square] = ()) -> str:
    """Render the board as text, rank 8 first.

    Pieces print as FEN letters, empty squares as ``.`` and highlighted
    squares as ``*`` regardless of occupancy.
    """
    marked = set(highlights)
    lines = []
    for rank, row in enumerate(board.grid):
        cells = []
        for file, piece in enumerate(row):
            if (rank, file) in marked:
                cells.append("*")
            elif piece is None:
                cells.append(".")
            else:
                cells.append(piece.symbol)
        lines.append(" ".join(cells))
    return "\n".join(lines)
