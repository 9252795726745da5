from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any, Protocol

from pydantic_core import to_jsonable_python
from starlette.websockets import WebSocketState

from models import Envelope, OutboundType

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """The slice of a WebSocket the game server talks to."""

    client_state: WebSocketState
    application_state: WebSocketState

    async def send_text(self, data: str) -> None: ...


def encode(message_type: OutboundType, payload: Any, message_id: int = 0) -> str:
    """Wrap `payload` (models, lists of models, dicts) in a wire envelope."""
    data = json.dumps(to_jsonable_python(payload, by_alias=True))
    return Envelope(type=str(message_type), data=data, id=message_id).model_dump_json()


def is_open(connection: Connection) -> bool:
    return (
        getattr(connection, "client_state", WebSocketState.CONNECTED) == WebSocketState.CONNECTED
        and getattr(connection, "application_state", WebSocketState.CONNECTED) == WebSocketState.CONNECTED
    )


async def send(connection: Connection, message_type: OutboundType, payload: Any, message_id: int = 0) -> None:
    """Fire-and-forget send; closed or failing connections are skipped."""
    if not is_open(connection):
        logger.debug("[broadcast] Skipping closed connection for %s", message_type)
        return
    try:
        await connection.send_text(encode(message_type, payload, message_id))
    except Exception as exc:  # noqa: BLE001
        logger.warning("[broadcast] Send of %s failed: %s", message_type, exc)


async def fan_out(connections: Iterable[Connection], message_type: OutboundType, payload: Any) -> None:
    for connection in list(connections):
        await send(connection, message_type, payload)
