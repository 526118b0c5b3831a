from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timedelta
from threading import Lock
from typing import Callable, Dict, List, Optional

from models import GameStatus, PlayerColor, Session, utcnow


logger = logging.getLogger(__name__)


class SessionStore:
    """In-memory registry of the game each chat is playing.

    ``_sessions`` is the authoritative table keyed by chat id; ``_by_game``
    is derived from it and maps a game id to the chat that most recently
    started a session for it.  Both are only touched while ``_lock`` is held,
    so a reader never sees one updated without the other.  Sessions handed out
    are copies; mutate them through :meth:`update`.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock
        self._lock = Lock()
        self._sessions: Dict[int, Session] = {}
        self._by_game: Dict[str, int] = {}

    # -- internal helpers, caller holds the lock -----------------------------

    def _drop(self, chat_id: int) -> Optional[Session]:
        session = self._sessions.pop(chat_id, None)
        if session is None:
            return None
        if self._by_game.get(session.game_id) == chat_id:
            # another chat may still play the same game; keep the index on it
            heir = next(
                (cid for cid, s in self._sessions.items() if s.game_id == session.game_id),
                None,
            )
            if heir is None:
                del self._by_game[session.game_id]
            else:
                self._by_game[session.game_id] = heir
        return session

    # -- public API ----------------------------------------------------------

    def create(self, game_id: str, chat_id: int, player_id: int) -> Session:
        session = Session(
            game_id=game_id,
            chat_id=chat_id,
            player_id=player_id,
            last_activity=self._clock(),
        )
        with self._lock:
            self._drop(chat_id)
            self._sessions[chat_id] = session
            self._by_game[game_id] = chat_id
        logger.info("Session created: game_id=%s chat_id=%s", game_id, chat_id)
        return replace(session)

    def get(self, chat_id: int) -> Optional[Session]:
        """Return the chat's session, treating the lookup as activity."""
        with self._lock:
            session = self._sessions.get(chat_id)
            if session is None:
                return None
            session.last_activity = self._clock()
            return replace(session)

    def get_by_game_id(self, game_id: str) -> Optional[Session]:
        with self._lock:
            chat_id = self._by_game.get(game_id)
        if chat_id is None:
            return None
        return self.get(chat_id)

    def update(
        self,
        chat_id: int,
        player_color: PlayerColor,
        game_status: GameStatus,
    ) -> None:
        with self._lock:
            session = self._sessions.get(chat_id)
            if session is None:
                return
            session.player_color = PlayerColor.parse(player_color)
            session.game_status = GameStatus.parse(game_status)
            session.last_activity = self._clock()
        logger.debug(
            "Session updated: chat_id=%s color=%s status=%s",
            chat_id,
            player_color,
            game_status,
        )

    def set_opponent(self, chat_id: int, name: Optional[str]) -> None:
        with self._lock:
            session = self._sessions.get(chat_id)
            if session is not None:
                session.opponent_name = name

    def others_in_game(self, game_id: str, chat_id: int) -> List[Session]:
        """Sessions of every other chat playing ``game_id``."""
        with self._lock:
            return [
                replace(s)
                for cid, s in self._sessions.items()
                if s.game_id == game_id and cid != chat_id
            ]

    def remove(self, chat_id: int) -> None:
        with self._lock:
            session = self._drop(chat_id)
        if session is not None:
            logger.info("Session removed: chat_id=%s game_id=%s", chat_id, session.game_id)

    def has_active_game(self, chat_id: int) -> bool:
        with self._lock:
            session = self._sessions.get(chat_id)
            return session is not None and session.active

    def expire_older_than(self, duration: timedelta) -> List[Session]:
        """Drop every session idle for longer than ``duration``."""
        with self._lock:
            cutoff = self._clock() - duration
            stale = [cid for cid, s in self._sessions.items() if s.last_activity < cutoff]
            removed = [s for s in (self._drop(cid) for cid in stale) if s is not None]
        for session in removed:
            logger.info(
                "Session expired: chat_id=%s game_id=%s",
                session.chat_id,
                session.game_id,
            )
        return removed

    def count(self) -> int:
        with self._lock:
            return len(self._sessions)


async def run_expiry_sweeper(
    store: SessionStore,
    ttl: timedelta,
    interval: float,
) -> None:
    """Periodically expire idle sessions until cancelled."""
    logger.info("Session sweeper started: ttl=%s interval=%ss", ttl, interval)
    while True:
        await asyncio.sleep(interval)
        try:
            removed = store.expire_older_than(ttl)
        except Exception:
            logger.exception("Session sweep failed")
            continue
        if removed:
            logger.info("Session sweep removed %d session(s)", len(removed))
