"""Command dispatcher wiring the session, room, turn and attack components together.

One inbound WebSocket frame is handled to completion per call. Malformed
frames and commands whose preconditions are not met produce no response;
the only client-visible error is the `reg` acknowledgement's error field.
"""

from __future__ import annotations

import json
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError

from app.settings import Settings
from models import AttackStatus, Coordinate, Envelope, FleetBoard, InboundType, OutboundType, Player, PlayerIdentity
from models.messages import (
    AddToRoomRequest,
    AttackFeedback,
    AttackRequest,
    CreateGameData,
    FinishData,
    RandomAttackRequest,
    RegRequest,
    RegResponse,
    StartGameData,
    TurnData,
)
from services.attacks import AttackResolver
from services.broadcast import Connection, fan_out, send
from services.matchmaking import RoomOrchestrator
from services.registry import SessionRegistry
from services.store import Store
from services.targeting import RandomTargetSelector
from services.turns import TurnCoordinator

logger = logging.getLogger(__name__)

Handler = Callable[[Connection, dict[str, Any], int], Awaitable[None]]


def _decode_data(data: str) -> dict[str, Any]:
    if not data.strip():
        return {}
    decoded = json.loads(data)
    if not isinstance(decoded, dict):
        raise ValueError(f"expected a JSON object, got {type(decoded).__name__}")
    return decoded


class GameServer:
    def __init__(
        self,
        store: Store,
        *,
        enforce_turns: bool = False,
        reset_storage: bool = True,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.registry = SessionRegistry(store)
        self.rooms = RoomOrchestrator(store)
        self.turns = TurnCoordinator(enforce=enforce_turns)
        self.attacks = AttackResolver(store)
        self.targets = RandomTargetSelector(store, rng=rng)
        self._reset_storage = reset_storage
        self._handlers: dict[str, Handler] = {
            InboundType.REG: self._on_reg,
            InboundType.CREATE_ROOM: self._on_create_room,
            InboundType.ADD_USER_TO_ROOM: self._on_add_user_to_room,
            InboundType.ADD_SHIPS: self._on_add_ships,
            InboundType.ATTACK: self._on_attack,
            InboundType.RANDOM_ATTACK: self._on_random_attack,
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> GameServer:
        return cls(
            Store(settings.storage_path),
            enforce_turns=settings.enforce_turns,
            reset_storage=settings.reset_storage,
        )

    async def start(self) -> None:
        ids = await self.store.load(reset=self._reset_storage)
        self.registry.seed(ids.player_id + 1)
        self.rooms.seed(ids.room_id + 1, ids.game_id + 1)

    # --- connection lifecycle ---

    async def connect(self, connection: Connection) -> None:
        await self.registry.register(connection)

    def disconnect(self, connection: Connection) -> None:
        self.registry.unregister(connection)

    async def handle_message(self, connection: Connection, raw: str) -> None:
        logger.info("[game] Received: %s", raw)
        try:
            envelope = Envelope.model_validate_json(raw)
            data = _decode_data(envelope.data)
        except (ValidationError, ValueError) as exc:
            logger.debug("[game] Ignoring malformed frame: %s", exc)
            return

        handler = self._handlers.get(envelope.type)
        if handler is None:
            logger.debug("[game] Ignoring unknown message type %r", envelope.type)
            return
        try:
            await handler(connection, data, envelope.id)
        except ValidationError as exc:
            logger.debug("[game] Ignoring invalid %s payload: %s", envelope.type, exc)

    # --- broadcasts ---

    async def _send_rooms(self, connections: list[Connection] | set[Connection]) -> None:
        rooms = await self.rooms.list_open_rooms()
        await fan_out(connections, OutboundType.UPDATE_ROOM, [room.lobby_view() for room in rooms])

    async def _send_winners(self, connections: list[Connection] | set[Connection]) -> None:
        winners = await self.rooms.list_winners()
        await fan_out(connections, OutboundType.UPDATE_WINNERS, winners)

    async def _send_turn(self, connections: set[Connection], player_id: int) -> None:
        await fan_out(connections, OutboundType.TURN, TurnData(current_player=player_id))

    # --- handlers ---

    async def _on_reg(self, connection: Connection, data: dict[str, Any], message_id: int) -> None:
        session = self.registry.get(connection)
        if session is None:
            return
        request = RegRequest.model_validate(data)
        index = session.player_id
        if session.player is not None and session.player.name != request.name:
            # the bound index belongs to the name already logged in here
            index = self.registry.mint_player_id()
        stored = await self.store.upsert_player(Player(index=index, name=request.name, password=request.password))
        response = RegResponse(name=request.name, index=stored.index)
        if stored.password != request.password:
            response.error = True
            response.error_text = "Wrong password"
            logger.info("[game] Player %s entered wrong password", request.name)
        else:
            room_ids = await self.store.list_room_ids_for_player(stored.index)
            self.registry.bind_identity(connection, PlayerIdentity(index=stored.index, name=stored.name), room_ids)
            logger.info("[game] Logged in player, name: %s, index: %s", stored.name, stored.index)

        await send(connection, OutboundType.REG, response, message_id)
        everyone = self.registry.connections()
        await self._send_rooms(everyone)
        await self._send_winners(everyone)

    async def _on_create_room(self, connection: Connection, data: dict[str, Any], message_id: int) -> None:
        session = self.registry.get(connection)
        if session is None:
            return
        room = await self.rooms.create_room(session.player)
        if room is None:
            return
        self.registry.update_rooms(connection, await self.store.list_room_ids_for_player(session.player_id))
        await self._send_rooms([connection])

    async def _on_add_user_to_room(self, connection: Connection, data: dict[str, Any], message_id: int) -> None:
        session = self.registry.get(connection)
        if session is None:
            return
        request = AddToRoomRequest.model_validate(data)
        room = await self.rooms.join_room(request.index_room, session.player)
        if room is None or room.game_id is None:
            return
        self.registry.update_rooms(connection, await self.store.list_room_ids_for_player(session.player_id))

        members = self.registry.lookup_by_room(room.room_id)
        await self._send_rooms(members)
        for member in members:
            member_session = self.registry.get(member)
            if member_session is None:
                continue
            self.registry.set_game(member, room.game_id)
            await send(
                member,
                OutboundType.CREATE_GAME,
                CreateGameData(id_game=room.game_id, id_player=member_session.player_id),
            )

    async def _on_add_ships(self, connection: Connection, data: dict[str, Any], message_id: int) -> None:
        board = FleetBoard.model_validate(data)
        session = self.registry.get(connection)
        logger.info(
            "[game] Received ships data for: %s, index: %s",
            session.player.name if session and session.player else None,
            board.index_player,
        )
        if not await self.rooms.submit_fleet(board):
            return

        room = await self.store.find_room_by_game(board.game_id)
        if room is None:
            return
        members = self.registry.lookup_by_game(board.game_id)
        for member in members:
            member_session = self.registry.get(member)
            own_board = room.board_of(member_session.player_id) if member_session else None
            if own_board is None:
                continue
            await send(
                member,
                OutboundType.START_GAME,
                StartGameData(ships=own_board.ships, current_player_index=own_board.index_player),
            )
        logger.info("[game] Started game with gameId %s", board.game_id)
        await self._send_turn(members, self.turns.start(board.game_id, board.index_player))

    async def _on_attack(self, connection: Connection, data: dict[str, Any], message_id: int) -> None:
        request = AttackRequest.model_validate(data)
        await self._attack(connection, request.game_id, request.index_player, Coordinate(x=request.x, y=request.y))

    async def _on_random_attack(self, connection: Connection, data: dict[str, Any], message_id: int) -> None:
        request = RandomAttackRequest.model_validate(data)
        session = self.registry.get(connection)
        if session is None or session.game_id is None or self.turns.is_finished(session.game_id):
            return
        target = await self.targets.pick(session.game_id, request.index_player)
        if target is None:
            return
        await self._attack(connection, request.game_id, request.index_player, target)

    async def _attack(self, connection: Connection, requested_game_id: int, attacker_id: int, target: Coordinate) -> None:
        session = self.registry.get(connection)
        if session is None or session.game_id is None:
            logger.info("[game] Attack from a connection without an active game; ignored")
            return
        game_id = session.game_id
        if requested_game_id != game_id:
            logger.debug("[game] Attack names game %s but connection plays %s", requested_game_id, game_id)
        if not self.turns.may_attack(game_id, attacker_id):
            return

        outcome = await self.attacks.resolve_attack(game_id, attacker_id, target)
        if outcome is None:
            return

        members = self.registry.lookup_by_game(game_id)
        await fan_out(
            members,
            OutboundType.ATTACK,
            AttackFeedback(position=target, current_player=attacker_id, status=outcome.status),
        )
        for cell in outcome.missed_cells:
            await fan_out(
                members,
                OutboundType.ATTACK,
                AttackFeedback(position=cell, current_player=attacker_id, status=AttackStatus.MISS),
            )

        next_player = self.turns.advance(game_id, attacker_id, outcome.status, outcome.opponent_id)
        if next_player is not None:
            await self._send_turn(members, next_player)

        if outcome.is_game_over:
            await fan_out(members, OutboundType.FINISH, FinishData(win_player=attacker_id))
            self.turns.finish(game_id)
            await self.rooms.record_win(attacker_id)
            await self._send_winners(self.registry.connections())
