"""JSON-file snapshot store for players, rooms and winners.

Every mutation reads the whole snapshot, changes it in memory and writes it
back. All read-modify-write cycles go through `transaction()`, which holds a
single asyncio.Lock so concurrent handlers cannot lose each other's updates.
The store is best-effort: I/O and decoding failures are logged and degrade to
an empty snapshot (reads) or a dropped write, never raised to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from models import FleetBoard, Player, PlayerIdentity, Room, RoomUser, Snapshot, Winner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredIds:
    """Highest ids already present in a loaded snapshot (0 when none)."""

    player_id: int = 0
    room_id: int = 0
    game_id: int = 0


class Store:
    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def load(self, *, reset: bool = True) -> StoredIds:
        """
        Prepare the snapshot file. With `reset` the file is overwritten with an
        empty snapshot; otherwise existing data is kept and its highest ids are
        returned so id generators can continue past them.
        """
        async with self._lock:
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                logger.error("[store] Cannot create directory for %s: %s", self._path, exc)
            if reset or not self._path.exists():
                await self._write(Snapshot())
                logger.info("[store] Initialised empty snapshot at %s", self._path)
                return StoredIds()
            snapshot = await self._read()
        ids = StoredIds(
            player_id=max((p.index for p in snapshot.players), default=0),
            room_id=max((r.room_id for r in snapshot.rooms), default=0),
            game_id=max((r.game_id for r in snapshot.rooms if r.game_id is not None), default=0),
        )
        logger.info("[store] Loaded snapshot from %s (%s)", self._path, ids)
        return ids

    async def _read(self) -> Snapshot:
        try:
            contents = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
            return Snapshot.model_validate_json(contents) if contents.strip() else Snapshot()
        except (OSError, ValidationError) as exc:
            logger.error("[store] Failed to read snapshot %s: %s", self._path, exc)
            return Snapshot()

    async def _write(self, snapshot: Snapshot) -> None:
        payload = snapshot.model_dump_json(by_alias=True)
        try:
            await asyncio.to_thread(self._path.write_text, payload, encoding="utf-8")
        except OSError as exc:
            logger.error("[store] Failed to write snapshot %s: %s", self._path, exc)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Snapshot]:
        """Hold the store lock, yield the current snapshot and persist it on exit."""
        async with self._lock:
            snapshot = await self._read()
            yield snapshot
            await self._write(snapshot)

    async def snapshot(self) -> Snapshot:
        async with self._lock:
            return await self._read()

    # --- players ---

    async def find_player_by_name(self, name: str) -> Player | None:
        snapshot = await self.snapshot()
        return next((p for p in snapshot.players if p.name == name), None)

    async def find_player_by_id(self, player_id: int) -> Player | None:
        snapshot = await self.snapshot()
        return next((p for p in snapshot.players if p.index == player_id), None)

    async def upsert_player(self, candidate: Player) -> Player:
        """Store `candidate` unless its name is taken; return the stored record."""
        async with self.transaction() as snapshot:
            existing = next((p for p in snapshot.players if p.name == candidate.name), None)
            if existing is not None:
                logger.info("[store] Player already exists, name=%s index=%s", existing.name, existing.index)
                return existing
            snapshot.players.append(candidate)
            logger.info("[store] Registered player, name=%s index=%s", candidate.name, candidate.index)
            return candidate

    # --- rooms ---

    async def list_room_ids_for_player(self, player_id: int) -> list[int]:
        snapshot = await self.snapshot()
        return [room.room_id for room in snapshot.rooms if room.has_player(player_id)]

    async def create_room(self, room_id: int, identity: PlayerIdentity) -> Room:
        room = Room(room_id=room_id, room_users=[RoomUser(index=identity.index, name=identity.name)])
        async with self.transaction() as snapshot:
            snapshot.rooms.append(room)
        logger.info("[store] Created room with roomId %s", room_id)
        return room

    async def join_room(
        self,
        room_id: int,
        identity: PlayerIdentity,
        game_id_factory: Callable[[], int],
    ) -> Room | None:
        """
        Add `identity` as the second occupant of `room_id` and stamp a fresh
        game id from `game_id_factory`. Returns None (room untouched) when the
        room is missing, full, or already holds this player.
        """
        async with self.transaction() as snapshot:
            room = snapshot.find_room(room_id)
            if room is None:
                logger.info("[store] No room found with index %s", room_id)
                return None
            if room.is_full:
                logger.info("[store] The room %s is already full", room_id)
                return None
            if room.has_player(identity.index):
                logger.info("[store] Player %s is already in room %s", identity.index, room_id)
                return None
            room.room_users.append(RoomUser(index=identity.index, name=identity.name))
            room.game_id = game_id_factory()
            logger.info("[store] Added player %s to the room %s", identity.name, room_id)
            return room.model_copy(deep=True)

    async def attach_fleet_board(self, board: FleetBoard) -> bool:
        """
        Attach `board` (with no shots fired) to its owner's slot in the room of
        `board.game_id`. Returns True only when this submission completes the
        pair, so exactly one submission per game observes the transition.
        """
        async with self.transaction() as snapshot:
            room = snapshot.find_room_by_game(board.game_id)
            if room is None:
                logger.info("[store] No room found for gameId %s", board.game_id)
                return False
            slot = next((user for user in room.room_users if user.index == board.index_player), None)
            if slot is None:
                logger.info("[store] Player %s is not seated in game %s", board.index_player, board.game_id)
                return False
            was_complete = room.fleets_complete()
            slot.game_board = board.model_copy(update={"shots_fired": []}, deep=True)
            logger.info("[store] Added game board for the player with playerId %s", board.index_player)
            return room.fleets_complete() and not was_complete

    async def both_fleets_submitted(self, game_id: int) -> bool:
        room = await self.find_room_by_game(game_id)
        return room.fleets_complete() if room else False

    async def list_open_rooms(self) -> list[Room]:
        snapshot = await self.snapshot()
        return [room for room in snapshot.rooms if len(room.room_users) == 1]

    async def find_room_by_game(self, game_id: int) -> Room | None:
        snapshot = await self.snapshot()
        return snapshot.find_room_by_game(game_id)

    # --- winners ---

    async def list_winners(self) -> list[Winner]:
        snapshot = await self.snapshot()
        return snapshot.winners

    async def increment_or_create_winner(self, player_id: int) -> Winner | None:
        async with self.transaction() as snapshot:
            player = next((p for p in snapshot.players if p.index == player_id), None)
            if player is None:
                logger.info("[store] No player %s to credit with a win", player_id)
                return None
            winner = next((w for w in snapshot.winners if w.name == player.name), None)
            if winner is None:
                winner = Winner(name=player.name, wins=0)
                snapshot.winners.append(winner)
            winner.wins += 1
            return winner.model_copy()
