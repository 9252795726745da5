"""Read-only lobby views: open rooms and the winners table."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from models import Winner
from services.game_server import GameServer

router = APIRouter(tags=["lobby"])


class LobbyUser(BaseModel):
    name: str
    index: int


class LobbyRoom(BaseModel):
    roomId: int
    roomUsers: list[LobbyUser]


def _game_server(request: Request) -> GameServer:
    return request.app.state.game_server


@router.get("/rooms", response_model=list[LobbyRoom])
async def list_rooms(request: Request) -> list[LobbyRoom]:
    """Rooms waiting for a second player."""
    rooms = await _game_server(request).rooms.list_open_rooms()
    return [LobbyRoom.model_validate(room.lobby_view()) for room in rooms]


@router.get("/winners", response_model=list[Winner])
async def list_winners(request: Request) -> list[Winner]:
    return await _game_server(request).rooms.list_winners()
