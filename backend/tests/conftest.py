from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from starlette.websockets import WebSocketState

from models import Coordinate, FleetBoard, Ship, ShipKind
from services.store import Store

KIND_BY_LENGTH = {1: ShipKind.SMALL, 2: ShipKind.MEDIUM, 3: ShipKind.LARGE, 4: ShipKind.HUGE}


class FakeConnection:
    """Stands in for a WebSocket: records every envelope sent to it."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED

    async def send_text(self, data: str) -> None:
        self.sent.append(json.loads(data))

    def close(self) -> None:
        self.client_state = WebSocketState.DISCONNECTED

    def messages(self, message_type: str | None = None) -> list[tuple[str, Any]]:
        return [
            (envelope["type"], json.loads(envelope["data"]))
            for envelope in self.sent
            if message_type is None or envelope["type"] == message_type
        ]

    def types(self) -> list[str]:
        return [envelope["type"] for envelope in self.sent]

    def clear(self) -> None:
        self.sent.clear()


def make_ship(x: int, y: int, length: int = 1, *, vertical: bool = False) -> Ship:
    return Ship(
        origin=Coordinate(x=x, y=y),
        vertical=vertical,
        length=length,
        kind=KIND_BY_LENGTH[length],
    )


def make_board(game_id: int, player_id: int, *ships: Ship) -> FleetBoard:
    return FleetBoard(game_id=game_id, index_player=player_id, ships=list(ships))


def frame(message_type: str, data: Any = "", message_id: int = 0) -> str:
    encoded = data if isinstance(data, str) else json.dumps(data)
    return json.dumps({"type": message_type, "data": encoded, "id": message_id})


@pytest.fixture
def storage_path(tmp_path: Path) -> Path:
    return tmp_path / "storage.json"


@pytest.fixture
def store(storage_path: Path) -> Store:
    return Store(storage_path)
