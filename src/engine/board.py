from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, Iterator, List, Optional, Set, Tuple

from .move import Move, Square, is_valid_square, square_to_str, str_to_square
from .movegen import attacked_squares, pseudo_legal_moves
from .pieces import (
    HOME_RANK,
    KINGSIDE_ROOK_FILE,
    PAWN_LAST_RANK,
    QUEENSIDE_ROOK_FILE,
    CastlingRights,
    Piece,
    PieceKind,
    Side,
)


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

Grid = List[List[Optional[Piece]]]

CASTLING_LETTERS = (
    ("K", Side.WHITE, "kingside"),
    ("Q", Side.WHITE, "queenside"),
    ("k", Side.BLACK, "kingside"),
    ("q", Side.BLACK, "queenside"),
)


@dataclass(frozen=True)
class Snapshot:
    """Immutable copy of everything a move application can change."""

    grid: Tuple[Tuple[Optional[Piece], ...], ...]
    side_to_move: Side
    castling: Tuple[Tuple[Side, CastlingRights], ...]
    ep_square: Optional[Square]
    halfmove_clock: int
    fullmove_number: int
    pending_promotion: Optional[Square]
    captures: Tuple[Piece, ...]
    attacked: Tuple[Tuple[Side, FrozenSet[Square]], ...]


@dataclass
class Board:
    """Position as an 8x8 grid of optional pieces plus game bookkeeping.

    Notes:
    - Squares are ``(rank_idx, file_idx)`` with ``(0, 0) == a8``.
    - ``attacked`` is derived state, recomputed after every mutation.
    - Each applied move pushes a ``Snapshot`` onto ``_history``; ``undo``
      pops it. Snapshots never refer to one another.
    """

    grid: Grid
    side_to_move: Side
    castling: Dict[Side, CastlingRights]
    ep_square: Optional[Square]
    halfmove_clock: int
    fullmove_number: int
    pending_promotion: Optional[Square] = None
    captures: List[Piece] = field(default_factory=list)
    # kind used when a pawn reaches the last rank with auto-promotion enabled
    auto_promotion: PieceKind = PieceKind.QUEEN
    attacked: Dict[Side, FrozenSet[Square]] = field(default_factory=dict, repr=False)
    _history: List[Snapshot] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        self._refresh_attacks()

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board initialized to the standard chess starting position."""
        return cls.from_fen(STARTPOS_FEN)

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a Forsyth–Edwards Notation (FEN) string.

        Args:
            fen (str): FEN string describing the position to load.

        Returns:
            Board: Board instance initialized with state encoded in ``fen``.

        Raises:
            ValueError: If ``fen`` is empty, has the wrong number of fields, or
                contains invalid piece placement, castling rights, en passant
                square, or move counters, or does not hold exactly one king
                per side.

        Notes:
            Castling rights are normalized to ``KQkq`` order so that
            ``to_fen`` reproduces canonical input exactly.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) != 6:
            raise ValueError("FEN must have 6 fields")
        placement, stm, castling_field, ep, halfmove, fullmove = parts

        # Piece placement, first rank listed is rank 8 (rank_idx 0)
        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ValueError("FEN board must have 8 ranks")
        grid: Grid = [[None] * 8 for _ in range(8)]
        kings = {Side.WHITE: 0, Side.BLACK: 0}
        for rank_idx, rank in enumerate(ranks):
            file_idx = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    file_idx += n
                else:
                    piece = Piece.from_symbol(ch)
                    if file_idx >= 8:
                        raise ValueError("too many squares in FEN rank")
                    grid[rank_idx][file_idx] = piece
                    if piece.kind is PieceKind.KING:
                        kings[piece.side] += 1
                    file_idx += 1
            if file_idx != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")
        if kings[Side.WHITE] != 1 or kings[Side.BLACK] != 1:
            raise ValueError("FEN must contain exactly one king per side")

        if stm not in ("w", "b"):
            raise ValueError("side to move must be 'w' or 'b'")

        castling = {Side.WHITE: CastlingRights(), Side.BLACK: CastlingRights()}
        if castling_field != "-":
            if len(set(castling_field)) != len(castling_field):
                raise ValueError("repeated castling rights")
            for ch in castling_field:
                if ch not in "KQkq":
                    raise ValueError("invalid castling rights")
            for letter, side, wing in CASTLING_LETTERS:
                if letter in castling_field:
                    castling[side] = replace(castling[side], **{wing: True})

        ep_square: Optional[Square]
        if ep == "-":
            ep_square = None
        else:
            try:
                ep_square = str_to_square(ep)
            except ValueError as e:
                raise ValueError("invalid en passant square") from e
            # rank 6 or rank 3
            if ep_square[0] not in (2, 5):
                raise ValueError("invalid en passant square rank")

        for counter in (halfmove, fullmove):
            if not (counter.isascii() and counter.isdecimal()):
                raise ValueError("invalid move counters in FEN")
        halfmove_clock = int(halfmove)
        fullmove_number = int(fullmove)

        return cls(
            grid=grid,
            side_to_move=Side(stm),
            castling=castling,
            ep_square=ep_square,
            halfmove_clock=halfmove_clock,
            fullmove_number=fullmove_number,
        )

    def to_fen(self) -> str:
        """Serialize the current position into a normalized FEN string."""
        ranks_str: List[str] = []
        for row in self.grid:
            run = 0
            out = []
            for piece in row:
                if piece is None:
                    run += 1
                    continue
                if run > 0:
                    out.append(str(run))
                    run = 0
                out.append(piece.symbol)
            if run > 0:
                out.append(str(run))
            ranks_str.append("".join(out))
        placement = "/".join(ranks_str)

        castling = "".join(
            letter
            for letter, side, wing in CASTLING_LETTERS
            if getattr(self.castling[side], wing)
        )
        ep = square_to_str(self.ep_square) if self.ep_square is not None else "-"
        return (
            f"{placement} {self.side_to_move.value} {castling or '-'} {ep} "
            f"{self.halfmove_clock} {self.fullmove_number}"
        )

    # --- Queries ---
    def piece_at(self, sq: Square) -> Optional[Piece]:
        if not is_valid_square(sq):
            raise ValueError(f"invalid square index: {sq}")
        rank, file = sq
        return self.grid[rank][file]

    def pieces(self) -> Iterator[Tuple[Square, Piece]]:
        """Yield ``(square, piece)`` for every occupied square, rank 8 first."""
        for rank, row in enumerate(self.grid):
            for file, piece in enumerate(row):
                if piece is not None:
                    yield (rank, file), piece

    def king_square(self, side: Side) -> Optional[Square]:
        king = Piece(PieceKind.KING, side)
        for sq, piece in self.pieces():
            if piece == king:
                return sq
        return None

    def in_check(self, side: Optional[Side] = None) -> bool:
        """Return True if ``side`` (default: side to move) has its king attacked."""
        s = self.side_to_move if side is None else side
        ks = self.king_square(s)
        return ks is not None and ks in self.attacked[s.opponent]

    def captured_by(self, side: Side) -> List[Piece]:
        """Pieces ``side`` has captured, in capture order."""
        return [p for p in self.captures if p.side is not side]

    # --- Legality filter ---
    def is_legal(self, from_sq: Square, to_sq: Square) -> bool:
        """Return True if moving ``from_sq`` -> ``to_sq`` is strictly legal."""
        if self.pending_promotion is not None:
            return False
        piece = self.piece_at(from_sq)
        if piece is None or piece.side is not self.side_to_move:
            return False
        if to_sq not in pseudo_legal_moves(self, from_sq):
            return False
        return self._leaves_king_safe(from_sq, to_sq, piece.side)

    def legal_moves(self, sq: Square) -> Set[Square]:
        """Legal destinations for the piece on ``sq``.

        Empty for an empty square, a piece of the side not to move, or while
        a promotion is pending.

        Raises:
            ValueError: If ``sq`` lies outside the board.
        """
        piece = self.piece_at(sq)
        if piece is None or piece.side is not self.side_to_move:
            return set()
        if self.pending_promotion is not None:
            return set()
        return {
            to_sq
            for to_sq in pseudo_legal_moves(self, sq)
            if self._leaves_king_safe(sq, to_sq, piece.side)
        }

    def all_legal_moves(self, side: Optional[Side] = None) -> Dict[Square, Set[Square]]:
        """Map every square holding a piece of ``side`` to its legal destinations."""
        s = self.side_to_move if side is None else side
        owned = [sq for sq, piece in self.pieces() if piece.side is s]
        return {sq: self.legal_moves(sq) for sq in owned}

    def has_legal_moves(self) -> bool:
        """Return True if the side to move has at least one legal move."""
        owned = [sq for sq, p in self.pieces() if p.side is self.side_to_move]
        return any(self.legal_moves(sq) for sq in owned)

    def _leaves_king_safe(self, from_sq: Square, to_sq: Square, side: Side) -> bool:
        # Simulate, then roll back
        self.make_move(Move(from_sq, to_sq), validate=False)
        try:
            ks = self.king_square(side)
            return ks is None or ks not in self.attacked[side.opponent]
        finally:
            self.undo()

    # --- State transitions ---
    def make_move(self, move: Move, *, auto_promote: bool = True, validate: bool = True) -> bool:
        """Apply ``move`` in place and record a snapshot for ``undo``.

        Args:
            move (Move): Move to apply. ``move.promotion`` overrides the
                auto-promotion choice when the pawn reaches the last rank.
            auto_promote (bool): Promote immediately to ``auto_promotion``;
                when False a pending promotion is recorded instead.
            validate (bool): Reject moves that are not legal for the side to
                move. Internal simulation passes False.

        Returns:
            bool: True if the move was applied, False if it was rejected.

        Raises:
            ValueError: If a square lies outside the board, or ``validate`` is
                False and the origin square is empty.
        """
        from_sq, to_sq = move.from_sq, move.to_sq
        piece = self.piece_at(from_sq)
        target = self.piece_at(to_sq)
        if validate:
            if not self.is_legal(from_sq, to_sq):
                return False
        elif piece is None:
            raise ValueError("no piece to move from from_sq")
        assert piece is not None
        side = piece.side

        self._history.append(self.snapshot())

        self.halfmove_clock += 1
        if piece.kind is PieceKind.PAWN or (target is not None and target.side is not side):
            self.halfmove_clock = 0

        if target is not None:
            self.captures.append(target)

        prev_ep = self.ep_square
        self.ep_square = None
        from_rank, from_file = from_sq
        to_rank, to_file = to_sq
        placed = piece

        if piece.kind is PieceKind.KING:
            self.castling[side] = CastlingRights()
            if abs(to_file - from_file) == 2:
                if to_file > from_file:
                    rook_from, rook_to = KINGSIDE_ROOK_FILE, to_file - 1
                else:
                    rook_from, rook_to = QUEENSIDE_ROOK_FILE, to_file + 1
                self.grid[from_rank][rook_to] = self.grid[from_rank][rook_from]
                self.grid[from_rank][rook_from] = None
        elif piece.kind is PieceKind.ROOK:
            self._clear_rook_right(side, from_sq)
        elif piece.kind is PieceKind.PAWN:
            if abs(to_rank - from_rank) == 2:
                self.ep_square = ((from_rank + to_rank) // 2, from_file)
            elif to_sq == prev_ep and target is None and to_file != from_file:
                # Victim sits beside the origin, behind the target square
                victim = self.grid[from_rank][to_file]
                if victim is not None:
                    self.captures.append(victim)
                self.grid[from_rank][to_file] = None
            if to_rank == PAWN_LAST_RANK[side]:
                kind = move.promotion or (self.auto_promotion if auto_promote else None)
                if kind is None:
                    self.pending_promotion = to_sq
                else:
                    placed = Piece(kind, side)

        if target is not None and target.kind is PieceKind.ROOK:
            self._clear_rook_right(target.side, to_sq)

        self.grid[to_rank][to_file] = placed
        self.grid[from_rank][from_file] = None

        if side is Side.BLACK:
            self.fullmove_number += 1
        self.side_to_move = self.side_to_move.opponent
        self._refresh_attacks()
        return True

    def promote(self, kind: PieceKind) -> None:
        """Resolve a pending promotion by replacing the pawn with ``kind``.

        Any kind is accepted, pawn and king included.

        Raises:
            ValueError: If no promotion is pending.
        """
        if self.pending_promotion is None:
            raise ValueError("no promotion pending")
        rank, file = self.pending_promotion
        pawn = self.grid[rank][file]
        assert pawn is not None
        self.grid[rank][file] = Piece(PieceKind(kind), pawn.side)
        self.pending_promotion = None
        self._refresh_attacks()

    def undo(self) -> None:
        """Restore the position before the last applied move.

        Raises:
            ValueError: If there is no move to undo.
        """
        if not self._history:
            raise ValueError("no moves to undo")
        self.restore(self._history.pop())

    def snapshot(self) -> Snapshot:
        return Snapshot(
            grid=tuple(tuple(row) for row in self.grid),
            side_to_move=self.side_to_move,
            castling=tuple(self.castling.items()),
            ep_square=self.ep_square,
            halfmove_clock=self.halfmove_clock,
            fullmove_number=self.fullmove_number,
            pending_promotion=self.pending_promotion,
            captures=tuple(self.captures),
            attacked=tuple(self.attacked.items()),
        )

    def restore(self, snap: Snapshot) -> None:
        # rows are rewritten in place; iterators over the grid must stay valid
        for row, snap_row in zip(self.grid, snap.grid):
            row[:] = snap_row
        self.side_to_move = snap.side_to_move
        self.castling = dict(snap.castling)
        self.ep_square = snap.ep_square
        self.halfmove_clock = snap.halfmove_clock
        self.fullmove_number = snap.fullmove_number
        self.pending_promotion = snap.pending_promotion
        self.captures = list(snap.captures)
        self.attacked = dict(snap.attacked)

    @property
    def history_depth(self) -> int:
        return len(self._history)

    def truncate_history(self, keep: int) -> None:
        """Drop all but the ``keep`` most recent undo snapshots."""
        if keep < 0:
            raise ValueError("keep must be >= 0")
        del self._history[: max(0, len(self._history) - keep)]

    def _clear_rook_right(self, side: Side, sq: Square) -> None:
        """Drop the castling right tied to a rook corner square, if ``sq`` is one."""
        home = HOME_RANK[side]
        if sq == (home, KINGSIDE_ROOK_FILE):
            self.castling[side] = replace(self.castling[side], kingside=False)
        elif sq == (home, QUEENSIDE_ROOK_FILE):
            self.castling[side] = replace(self.castling[side], queenside=False)

    def _refresh_attacks(self) -> None:
        self.attacked = {
            Side.WHITE: frozenset(attacked_squares(self, Side.WHITE)),
            Side.BLACK: frozenset(attacked_squares(self, Side.BLACK)),
        }
