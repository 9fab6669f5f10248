#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import os
import sys

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from src.engine.board import STARTPOS_FEN
from src.engine.game import Game
from src.engine.move import square_to_str
from src.engine.render import render_board


def main() -> None:
    parser = argparse.ArgumentParser(description="Show the legal moves of one piece")
    parser.add_argument("square", type=str, help="Square holding the piece, e.g. g1")
    parser.add_argument(
        "--fen", type=str, default=STARTPOS_FEN, help="FEN string (default: startpos)"
    )
    parser.add_argument(
        "--moves", nargs="*", default=[], help="Coordinate moves to play first, e.g. e2e4 e7e5"
    )
    args = parser.parse_args()

    try:
        game = Game.from_fen(args.fen)
        for uci in args.moves:
            if not game.apply_uci(uci):
                parser.error(f"illegal move: {uci}")
        dests = game.legal_moves(args.square)
    except ValueError as e:
        parser.error(str(e))

    print(render_board(game.board, dests))
    print(" ".join(sorted(square_to_str(d) for d in dests)) or "(no legal moves)")
    print(f"state: {game.state().kind.value}")


if __name__ == "__main__":
    main()
