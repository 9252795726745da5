from __future__ import annotations

import random

import pytest

from conftest import make_board, make_ship
from models import Coordinate, PlayerIdentity
from services.store import Store
from services.targeting import RandomTargetSelector, choose_free_cell


def _all_cells() -> list[Coordinate]:
    return [Coordinate(x=x, y=y) for x in range(10) for y in range(10)]


def test_never_picks_a_cell_already_fired_at() -> None:
    rng = random.Random(3)
    fired: list[Coordinate] = []
    for _ in range(100):
        cell = choose_free_cell(fired, rng=rng)
        assert cell is not None
        assert cell not in fired
        fired.append(cell)
    assert len(set(fired)) == 100


def test_returns_none_once_the_board_is_exhausted() -> None:
    assert choose_free_cell(_all_cells()) is None


def test_finds_the_last_free_cell() -> None:
    free = Coordinate(x=7, y=2)
    fired = [cell for cell in _all_cells() if cell != free]
    for seed in range(5):
        assert choose_free_cell(fired, rng=random.Random(seed)) == free


def test_off_board_cells_do_not_count_towards_exhaustion() -> None:
    fired = [cell for cell in _all_cells() if cell != Coordinate(x=0, y=0)]
    fired.append(Coordinate(x=-1, y=-1))
    assert choose_free_cell(fired) == Coordinate(x=0, y=0)


@pytest.mark.asyncio
async def test_selector_reads_the_attackers_board(store: Store) -> None:
    await store.load()
    await store.create_room(1, PlayerIdentity(index=1, name="alice"))
    await store.join_room(1, PlayerIdentity(index=2, name="bob"), lambda: 1)
    await store.attach_fleet_board(make_board(1, 1, make_ship(0, 0)))

    selector = RandomTargetSelector(store, rng=random.Random(0))

    target = await selector.pick(1, 1)
    assert target is not None
    assert target.on_board()
    assert await selector.pick(1, 2) is None
    assert await selector.pick(42, 1) is None
