from __future__ import annotations

import json

import pytest

from conftest import FakeConnection
from models import OutboundType, Winner
from models.messages import TurnData
from services.broadcast import encode, fan_out, send


class _BrokenConnection(FakeConnection):
    async def send_text(self, data: str) -> None:
        raise RuntimeError("socket gone")


def test_encode_wraps_payload_as_json_string() -> None:
    envelope = json.loads(encode(OutboundType.TURN, TurnData(current_player=3)))

    assert envelope["type"] == "turn"
    assert envelope["id"] == 0
    assert json.loads(envelope["data"]) == {"currentPlayer": 3}


def test_encode_handles_lists_and_echoed_ids() -> None:
    envelope = json.loads(encode(OutboundType.UPDATE_WINNERS, [Winner(name="alice", wins=2)], 5))

    assert envelope["id"] == 5
    assert json.loads(envelope["data"]) == [{"name": "alice", "wins": 2}]


@pytest.mark.asyncio
async def test_fan_out_skips_closed_and_failing_connections() -> None:
    open_conn = FakeConnection()
    closed = FakeConnection()
    closed.close()
    broken = _BrokenConnection()

    await fan_out([closed, broken, open_conn], OutboundType.TURN, TurnData(current_player=1))

    assert closed.sent == []
    assert open_conn.types() == ["turn"]


@pytest.mark.asyncio
async def test_send_echoes_message_id() -> None:
    conn = FakeConnection()
    await send(conn, OutboundType.REG, {"name": "alice"}, 9)
    assert conn.sent[0]["id"] == 9
