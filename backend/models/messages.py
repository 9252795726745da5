"""Wire models for the game WebSocket.

Every frame is an envelope `{"type": str, "data": str, "id": int}` where
`data` is itself a JSON-encoded payload.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .board import Coordinate, Ship


class InboundType(StrEnum):
    REG = "reg"
    CREATE_ROOM = "create_room"
    ADD_USER_TO_ROOM = "add_user_to_room"
    ADD_SHIPS = "add_ships"
    ATTACK = "attack"
    RANDOM_ATTACK = "randomAttack"


class OutboundType(StrEnum):
    REG = "reg"
    UPDATE_ROOM = "update_room"
    UPDATE_WINNERS = "update_winners"
    CREATE_GAME = "create_game"
    START_GAME = "start_game"
    ATTACK = "attack"
    TURN = "turn"
    FINISH = "finish"


class AttackStatus(StrEnum):
    MISS = "miss"
    SHOT = "shot"
    KILLED = "killed"


class Envelope(BaseModel):
    type: str
    data: str = ""
    id: int = 0


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- inbound ---


class RegRequest(_Payload):
    name: str
    password: str


class AddToRoomRequest(_Payload):
    index_room: int


class AttackRequest(_Payload):
    game_id: int
    x: int
    y: int
    index_player: int


class RandomAttackRequest(_Payload):
    game_id: int
    index_player: int


# --- outbound ---


class RegResponse(_Payload):
    name: str
    index: int
    error: bool = False
    error_text: str = ""


class CreateGameData(_Payload):
    id_game: int
    id_player: int


class StartGameData(_Payload):
    ships: list[Ship]
    current_player_index: int


class TurnData(_Payload):
    current_player: int


class AttackFeedback(_Payload):
    position: Coordinate
    current_player: int
    status: AttackStatus


class FinishData(_Payload):
    win_player: int
