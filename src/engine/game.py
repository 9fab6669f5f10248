from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Union

from .board import Board
from .move import Move, Square, parse_uci, str_to_square
from .pieces import Piece, PieceKind, Side


logger = logging.getLogger(__name__)

SquareLike = Union[str, Square]


class StateKind(str, Enum):
    IN_PROGRESS = "in_progress"
    AWAITING_PROMOTION = "awaiting_promotion"
    WIN = "win"
    DRAW = "draw"


class DrawReason(str, Enum):
    STALEMATE = "stalemate"
    INSUFFICIENT_MATERIAL = "insufficient_material"
    FIFTY_MOVE_RULE = "fifty_move_rule"


@dataclass(frozen=True)
class GameState:
    kind: StateKind
    winner: Optional[Side] = None
    reason: Optional[DrawReason] = None

    @property
    def is_over(self) -> bool:
        return self.kind in (StateKind.WIN, StateKind.DRAW)


IN_PROGRESS = GameState(StateKind.IN_PROGRESS)
AWAITING_PROMOTION = GameState(StateKind.AWAITING_PROMOTION)

# Non-king material with which one side cannot force mate
INSUFFICIENT_MATERIAL = (
    Counter(),
    Counter({PieceKind.KNIGHT: 1}),
    Counter({PieceKind.BISHOP: 1}),
    Counter({PieceKind.KNIGHT: 2}),
)


def insufficient_material(board: Board, side: Side) -> bool:
    material = Counter(
        p.kind for _, p in board.pieces() if p.side is side and p.kind is not PieceKind.KING
    )
    return material in INSUFFICIENT_MATERIAL


def classify(board: Board) -> GameState:
    """Classify ``board`` by strict priority.

    Pending promotion masks everything; then no legal moves means checkmate
    or stalemate; then the fifty-move rule; then insufficient material on
    both sides.
    """
    if board.pending_promotion is not None:
        return AWAITING_PROMOTION
    stm = board.side_to_move
    if not board.has_legal_moves():
        if board.in_check(stm):
            return GameState(StateKind.WIN, winner=stm.opponent)
        return GameState(StateKind.DRAW, reason=DrawReason.STALEMATE)
    if board.halfmove_clock >= 100:
        return GameState(StateKind.DRAW, reason=DrawReason.FIFTY_MOVE_RULE)
    if insufficient_material(board, Side.WHITE) and insufficient_material(board, Side.BLACK):
        return GameState(StateKind.DRAW, reason=DrawReason.INSUFFICIENT_MATERIAL)
    return IN_PROGRESS


def _square(sq: SquareLike) -> Square:
    return str_to_square(sq) if isinstance(sq, str) else sq


@dataclass
class Game:
    """Game wrapper around a board with the caller-facing operations.

    Responsibility: accept squares in algebraic or index form, apply and
    undo moves, expose legal moves, captures, and the current state.
    """

    board: Board
    move_stack: List[Move] = field(default_factory=list)

    @classmethod
    def new(cls, auto_promotion: PieceKind = PieceKind.QUEEN) -> "Game":
        board = Board.startpos()
        board.auto_promotion = auto_promotion
        return cls(board=board)

    @classmethod
    def from_fen(cls, fen: str, auto_promotion: PieceKind = PieceKind.QUEEN) -> "Game":
        board = Board.from_fen(fen)
        board.auto_promotion = auto_promotion
        return cls(board=board)

    def to_fen(self) -> str:
        return self.board.to_fen()

    @property
    def side_to_move(self) -> Side:
        return self.board.side_to_move

    def piece_at(self, sq: SquareLike) -> Optional[Piece]:
        return self.board.piece_at(_square(sq))

    def legal_moves(self, sq: SquareLike) -> Set[Square]:
        return self.board.legal_moves(_square(sq))

    def all_legal_moves(self, side: Optional[Side] = None) -> Dict[Square, Set[Square]]:
        return self.board.all_legal_moves(side)

    def apply_move(
        self,
        from_sq: SquareLike,
        to_sq: SquareLike,
        auto_promote: bool = True,
        promotion: Optional[PieceKind] = None,
    ) -> bool:
        """Apply a move if legal.

        Returns:
            bool: False when the move is rejected; the position is unchanged.

        Raises:
            ValueError: If a square is malformed or off the board.
        """
        move = Move(_square(from_sq), _square(to_sq), promotion)
        if not self.board.make_move(move, auto_promote=auto_promote):
            logger.debug("rejected move %s in %s", move.to_uci(), self.board.to_fen())
            return False
        self.move_stack.append(move)
        logger.debug("applied move %s", move.to_uci())
        return True

    def apply_uci(self, uci: str, auto_promote: bool = True) -> bool:
        """Apply a move given in coordinate notation such as ``"e7e8q"``."""
        move = parse_uci(uci)
        return self.apply_move(move.from_sq, move.to_sq, auto_promote, move.promotion)

    def promote(self, kind: Union[PieceKind, str]) -> None:
        """Resolve the pending promotion; any piece kind is accepted."""
        kind = PieceKind(kind.lower() if isinstance(kind, str) else kind)
        self.board.promote(kind)
        if self.move_stack:
            last = self.move_stack[-1]
            self.move_stack[-1] = Move(last.from_sq, last.to_sq, kind)
        logger.debug("promoted to %s", kind.value)

    def undo_move(self) -> None:
        if not self.move_stack:
            raise ValueError("no moves to undo")
        self.board.undo()
        last = self.move_stack.pop()
        logger.debug("undid move %s", last.to_uci())

    def captures(self, side: Side) -> List[Piece]:
        return self.board.captured_by(side)

    def state(self) -> GameState:
        return classify(self.board)

    def in_check(self) -> bool:
        return self.board.in_check()

    def move_history_uci(self) -> List[str]:
        return [m.to_uci() for m in self.move_stack]
