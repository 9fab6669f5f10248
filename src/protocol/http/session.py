from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

from ...engine.game import Game


@dataclass
class Session:
    """A game plus the lock callers must hold while touching it.

    The engine assumes a single owner per position, so every request that
    reads or mutates ``game`` runs under ``lock``.
    """

    game: Game
    lock: threading.RLock = field(default_factory=threading.RLock)


class InMemorySessionStore:
    """Thread-safe in-memory game session store.

    Responsibilities:
    - Create new sessions with unique `game_id`s
    - Retrieve existing sessions by `game_id`
    - Replace a session's game (e.g. after loading a FEN)
    - Delete sessions
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._sessions: Dict[str, Session] = {}

    def create(self, game: Optional[Game] = None) -> str:
        """Create a new game session and return its `game_id`."""
        gid = str(uuid.uuid4())
        if game is None:
            game = Game.new()
        with self._lock:
            self._sessions[gid] = Session(game)
        return gid

    def get(self, game_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(game_id)

    def replace_game(self, game_id: str, game: Game) -> None:
        with self._lock:
            session = self._sessions.get(game_id)
            if session is None:
                raise KeyError(game_id)
        with session.lock:
            session.game = game

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(game_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
