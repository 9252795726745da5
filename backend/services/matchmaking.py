from __future__ import annotations

import itertools
import logging

from models import FleetBoard, PlayerIdentity, Room, Winner
from services.store import Store

logger = logging.getLogger(__name__)


class RoomOrchestrator:
    """
    Rooms, pairing and fleet submission on top of the Store.

    Owns the room and game id generators. A room gets its game id the moment
    its second occupant joins; the game starts once both fleets are attached.
    """

    def __init__(self, store: Store) -> None:
        self._store = store
        self._room_ids = itertools.count(1)
        self._game_ids = itertools.count(1)

    def seed(self, next_room_id: int, next_game_id: int) -> None:
        self._room_ids = itertools.count(max(1, next_room_id))
        self._game_ids = itertools.count(max(1, next_game_id))

    def _next_game_id(self) -> int:
        return next(self._game_ids)

    async def create_room(self, identity: PlayerIdentity | None) -> Room | None:
        if identity is None:
            logger.info("[matchmaking] create_room without a registered player; ignored")
            return None
        return await self._store.create_room(next(self._room_ids), identity)

    async def join_room(self, room_id: int, identity: PlayerIdentity | None) -> Room | None:
        if identity is None:
            logger.info("[matchmaking] add_user_to_room without a registered player; ignored")
            return None
        room = await self._store.join_room(room_id, identity, self._next_game_id)
        if room is not None:
            logger.info("[matchmaking] Created game with gameId %s in room %s", room.game_id, room.room_id)
        return room

    async def list_open_rooms(self) -> list[Room]:
        return await self._store.list_open_rooms()

    async def submit_fleet(self, board: FleetBoard) -> bool:
        """Attach `board`; True when this submission completed the game's pair of fleets."""
        return await self._store.attach_fleet_board(board)

    async def both_fleets_submitted(self, game_id: int) -> bool:
        return await self._store.both_fleets_submitted(game_id)

    async def record_win(self, player_id: int) -> Winner | None:
        winner = await self._store.increment_or_create_winner(player_id)
        if winner is not None:
            logger.info("[matchmaking] Game over, winner %s, wins: %s", winner.name, winner.wins)
        return winner

    async def list_winners(self) -> list[Winner]:
        return await self._store.list_winners()
