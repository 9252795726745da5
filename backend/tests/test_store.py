from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from conftest import make_board, make_ship
from models import Player, PlayerIdentity
from services.store import StoredIds, Store

ALICE = PlayerIdentity(index=1, name="alice")
BOB = PlayerIdentity(index=2, name="bob")
CAROL = PlayerIdentity(index=3, name="carol")


@pytest.mark.asyncio
async def test_load_writes_an_empty_snapshot(store: Store, storage_path: Path) -> None:
    ids = await store.load()

    assert ids == StoredIds()
    assert json.loads(storage_path.read_text()) == {"players": [], "rooms": [], "winners": []}


@pytest.mark.asyncio
async def test_first_registration_of_a_name_wins(store: Store) -> None:
    await store.load()

    created = await store.upsert_player(Player(index=1, name="alice", password="secret"))
    again = await store.upsert_player(Player(index=5, name="alice", password="other"))

    assert created.index == 1
    assert again.index == 1
    assert again.password == "secret"
    assert (await store.find_player_by_name("alice")) == created
    assert (await store.find_player_by_id(1)) == created
    assert await store.find_player_by_id(5) is None


@pytest.mark.asyncio
async def test_third_join_is_rejected_and_room_unchanged(store: Store) -> None:
    await store.load()
    await store.create_room(1, ALICE)

    joined = await store.join_room(1, BOB, lambda: 10)
    rejected = await store.join_room(1, CAROL, lambda: 11)

    assert joined is not None
    assert joined.game_id == 10
    assert rejected is None
    room = await store.find_room_by_game(10)
    assert room is not None
    assert [user.index for user in room.room_users] == [1, 2]


@pytest.mark.asyncio
async def test_join_missing_room_or_own_room_is_rejected(store: Store) -> None:
    await store.load()
    await store.create_room(1, ALICE)
    minted: list[int] = []

    def factory() -> int:
        minted.append(1)
        return 1

    assert await store.join_room(2, BOB, factory) is None
    assert await store.join_room(1, ALICE, factory) is None
    assert minted == []


@pytest.mark.asyncio
async def test_open_rooms_and_room_ids_for_player(store: Store) -> None:
    await store.load()
    await store.create_room(1, ALICE)
    await store.create_room(2, CAROL)
    await store.join_room(1, BOB, lambda: 1)

    open_rooms = await store.list_open_rooms()

    assert [room.room_id for room in open_rooms] == [2]
    assert await store.list_room_ids_for_player(2) == [1]
    assert await store.list_room_ids_for_player(99) == []


@pytest.mark.asyncio
async def test_attach_reports_completion_once(store: Store) -> None:
    await store.load()
    await store.create_room(1, ALICE)
    await store.join_room(1, BOB, lambda: 3)

    first = make_board(3, 1, make_ship(0, 0))
    first.shots_fired.append(make_ship(5, 5).origin)

    assert await store.attach_fleet_board(first) is False
    assert await store.both_fleets_submitted(3) is False
    assert await store.attach_fleet_board(make_board(3, 2, make_ship(1, 1))) is True
    assert await store.both_fleets_submitted(3) is True
    # resubmitting after the game is complete does not start it again
    assert await store.attach_fleet_board(make_board(3, 2, make_ship(2, 2))) is False

    room = await store.find_room_by_game(3)
    assert room is not None
    assert room.board_of(1).shots_fired == []


@pytest.mark.asyncio
async def test_attach_to_unknown_game_or_player_is_ignored(store: Store) -> None:
    await store.load()
    await store.create_room(1, ALICE)
    await store.join_room(1, BOB, lambda: 3)

    assert await store.attach_fleet_board(make_board(8, 1)) is False
    assert await store.attach_fleet_board(make_board(3, 7)) is False
    assert await store.both_fleets_submitted(8) is False


@pytest.mark.asyncio
async def test_wins_accumulate_per_name(store: Store) -> None:
    await store.load()
    await store.upsert_player(Player(index=1, name="alice", password="x"))

    await store.increment_or_create_winner(1)
    tally = await store.increment_or_create_winner(1)

    assert tally is not None
    assert tally.wins == 2
    winners = await store.list_winners()
    assert [(w.name, w.wins) for w in winners] == [("alice", 2)]
    assert await store.increment_or_create_winner(42) is None


@pytest.mark.asyncio
async def test_unreadable_snapshot_degrades_to_empty(store: Store, storage_path: Path) -> None:
    await store.load()
    storage_path.write_text("{not json", encoding="utf-8")

    assert await store.list_open_rooms() == []
    assert await store.find_player_by_name("alice") is None


@pytest.mark.asyncio
async def test_failed_write_is_swallowed(tmp_path: Path) -> None:
    # the storage path is a directory, so every read and write fails
    store = Store(tmp_path)

    room = await store.create_room(1, ALICE)

    assert room.room_id == 1
    assert await store.list_open_rooms() == []


@pytest.mark.asyncio
async def test_load_without_reset_keeps_data_and_reports_ids(storage_path: Path) -> None:
    first = Store(storage_path)
    await first.load()
    await first.upsert_player(Player(index=4, name="alice", password="x"))
    await first.create_room(6, ALICE)
    await first.join_room(6, BOB, lambda: 9)

    ids = await Store(storage_path).load(reset=False)

    assert ids == StoredIds(player_id=4, room_id=6, game_id=9)


@pytest.mark.asyncio
async def test_concurrent_fleet_submissions_complete_exactly_once(store: Store) -> None:
    await store.load()
    await store.create_room(1, ALICE)
    await store.join_room(1, BOB, lambda: 7)
    boards = [make_board(7, player_id, make_ship(player_id, player_id)) for player_id in (1, 2, 1, 2, 2, 1)]

    results = await asyncio.gather(*(store.attach_fleet_board(board) for board in boards))

    assert results.count(True) == 1
    assert await store.both_fleets_submitted(7) is True


@pytest.mark.asyncio
async def test_concurrent_registrations_are_all_kept(store: Store) -> None:
    await store.load()
    players = [Player(index=i, name=f"player-{i}", password="pw") for i in range(1, 21)]

    await asyncio.gather(*(store.upsert_player(player) for player in players))

    snapshot = await store.snapshot()
    assert sorted(p.index for p in snapshot.players) == list(range(1, 21))
