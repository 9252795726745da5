from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .board import FleetBoard
from .player import Player, PlayerIdentity, Winner

ROOM_CAPACITY = 2


class RoomUser(PlayerIdentity):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    game_board: FleetBoard | None = None


class Room(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    room_id: int
    room_users: list[RoomUser] = Field(default_factory=list)
    game_id: int | None = None

    @property
    def is_full(self) -> bool:
        return len(self.room_users) >= ROOM_CAPACITY

    def has_player(self, player_id: int) -> bool:
        return any(user.index == player_id for user in self.room_users)

    def board_of(self, player_id: int) -> FleetBoard | None:
        for user in self.room_users:
            if user.game_board and user.game_board.index_player == player_id:
                return user.game_board
        return None

    def opponent_board_of(self, player_id: int) -> FleetBoard | None:
        for user in self.room_users:
            if user.game_board and user.game_board.index_player != player_id:
                return user.game_board
        return None

    def other_player_id(self, player_id: int) -> int | None:
        for user in self.room_users:
            if user.index != player_id:
                return user.index
        return None

    def fleets_complete(self) -> bool:
        return self.is_full and all(user.game_board for user in self.room_users)

    def lobby_view(self) -> dict[str, Any]:
        """Room as shown in the lobby list: no boards, no game id."""
        return {
            "roomId": self.room_id,
            "roomUsers": [{"name": user.name, "index": user.index} for user in self.room_users],
        }


class Snapshot(BaseModel):
    """Everything the Store persists, written whole on every mutation."""

    players: list[Player] = Field(default_factory=list)
    rooms: list[Room] = Field(default_factory=list)
    winners: list[Winner] = Field(default_factory=list)

    def find_room(self, room_id: int) -> Room | None:
        return next((room for room in self.rooms if room.room_id == room_id), None)

    def find_room_by_game(self, game_id: int) -> Room | None:
        return next(
            (room for room in self.rooms if room.game_id is not None and room.game_id == game_id),
            None,
        )
