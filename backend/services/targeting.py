from __future__ import annotations

import logging
import random
from collections.abc import Iterable

from models import BOARD_SIZE, Coordinate
from services.store import Store

logger = logging.getLogger(__name__)

# Rejection draws before falling back to choosing among the free cells directly.
MAX_DRAWS = 64


def choose_free_cell(
    fired: Iterable[Coordinate],
    *,
    board_size: int = BOARD_SIZE,
    rng: random.Random | None = None,
    max_draws: int = MAX_DRAWS,
) -> Coordinate | None:
    """
    Pick a cell not in `fired`, uniformly at random; None when every cell of
    the board has been fired at.
    """
    rng = rng or random.Random()
    taken = {(cell.x, cell.y) for cell in fired if cell.on_board(board_size)}
    if len(taken) >= board_size * board_size:
        return None

    for _ in range(max_draws):
        x = rng.randrange(board_size)
        y = rng.randrange(board_size)
        if (x, y) not in taken:
            return Coordinate(x=x, y=y)

    free = [(x, y) for y in range(board_size) for x in range(board_size) if (x, y) not in taken]
    x, y = rng.choice(free)
    return Coordinate(x=x, y=y)


class RandomTargetSelector:
    def __init__(self, store: Store, *, board_size: int = BOARD_SIZE, rng: random.Random | None = None) -> None:
        self._store = store
        self._board_size = board_size
        self._rng = rng or random.Random()

    async def pick(self, game_id: int, player_id: int) -> Coordinate | None:
        room = await self._store.find_room_by_game(game_id)
        board = room.board_of(player_id) if room else None
        if board is None:
            logger.info("[targeting] No fleet board for player %s in game %s", player_id, game_id)
            return None
        target = choose_free_cell(board.shots_fired, board_size=self._board_size, rng=self._rng)
        logger.info("[targeting] Random hit coordinates for player %s: %s", player_id, target)
        return target
