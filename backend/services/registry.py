"""Per-connection session state. Lives only in memory; a restart drops it."""

from __future__ import annotations

import itertools
import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field

from models import PlayerIdentity
from services.broadcast import Connection
from services.store import Store

logger = logging.getLogger(__name__)


@dataclass
class ConnectionSession:
    connection_id: str
    player_id: int
    room_ids: set[int] = field(default_factory=set)
    game_id: int | None = None
    player: PlayerIdentity | None = None  # set once `reg` succeeds


class SessionRegistry:
    def __init__(self, store: Store) -> None:
        self._store = store
        self._sessions: dict[Connection, ConnectionSession] = {}
        self._player_ids = itertools.count(1)

    def seed(self, next_player_id: int) -> None:
        """Continue player ids from `next_player_id` (after a surviving snapshot)."""
        self._player_ids = itertools.count(max(1, next_player_id))

    def mint_player_id(self) -> int:
        return next(self._player_ids)

    async def register(self, connection: Connection) -> ConnectionSession:
        player_id = self.mint_player_id()
        room_ids = await self._store.list_room_ids_for_player(player_id)
        session = ConnectionSession(
            connection_id=uuid.uuid4().hex,
            player_id=player_id,
            room_ids=set(room_ids),
        )
        self._sessions[connection] = session
        logger.info("[registry] Connection %s registered as player %s", session.connection_id, player_id)
        return session

    def get(self, connection: Connection) -> ConnectionSession | None:
        return self._sessions.get(connection)

    def bind_identity(self, connection: Connection, player: PlayerIdentity, room_ids: Iterable[int]) -> None:
        session = self._sessions.get(connection)
        if session is None:
            return
        session.player_id = player.index
        session.player = PlayerIdentity(index=player.index, name=player.name)
        session.room_ids = set(room_ids)
        logger.info("[registry] Connection %s bound to player %s (%s)", session.connection_id, player.index, player.name)

    def update_rooms(self, connection: Connection, room_ids: Iterable[int]) -> None:
        session = self._sessions.get(connection)
        if session is not None:
            session.room_ids = set(room_ids)

    def set_game(self, connection: Connection, game_id: int) -> None:
        session = self._sessions.get(connection)
        if session is not None:
            session.game_id = game_id

    def lookup_by_room(self, room_id: int) -> set[Connection]:
        return {conn for conn, session in self._sessions.items() if room_id in session.room_ids}

    def lookup_by_game(self, game_id: int) -> set[Connection]:
        return {conn for conn, session in self._sessions.items() if session.game_id == game_id}

    def connections(self) -> list[Connection]:
        return list(self._sessions)

    def unregister(self, connection: Connection) -> ConnectionSession | None:
        session = self._sessions.pop(connection, None)
        if session is not None:
            name = session.player.name if session.player else None
            logger.info("[registry] Player %s %s left", name, session.player_id)
        return session

    def __len__(self) -> int:
        return len(self._sessions)
