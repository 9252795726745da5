"""Attack resolution: miss / shot / killed, perimeter reveal and game-over."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from models import BOARD_SIZE, AttackStatus, Coordinate, FleetBoard
from services.store import Store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttackOutcome:
    status: AttackStatus
    is_game_over: bool
    missed_cells: list[Coordinate] = field(default_factory=list)
    opponent_id: int | None = None


def resolve_shot(
    attacker: FleetBoard,
    opponent: FleetBoard,
    target: Coordinate,
    *,
    board_size: int = BOARD_SIZE,
) -> AttackOutcome:
    """
    Resolve `target` fired by `attacker` against `opponent`'s fleet, mutating
    `attacker.shots_fired`.

    Ships are checked in placement order against the cells the attacker has
    not fired at yet. Hitting the last such cell of a ship kills it and marks
    the ship's perimeter as fired-at misses. A repeated shot at a resolved
    cell matches nothing and comes back as a miss.
    """
    for ship in opponent.ships:
        remaining = attacker.remaining_cells(ship)
        if target not in remaining:
            continue
        if len(remaining) == 1:
            missed = ship.perimeter(board_size)
            attacker.record_shots(missed)
            attacker.record_shot(target)
            return AttackOutcome(
                status=AttackStatus.KILLED,
                is_game_over=attacker.has_destroyed(opponent.ships),
                missed_cells=missed,
                opponent_id=opponent.index_player,
            )
        attacker.record_shot(target)
        return AttackOutcome(
            status=AttackStatus.SHOT,
            is_game_over=attacker.has_destroyed(opponent.ships),
            opponent_id=opponent.index_player,
        )

    attacker.record_shot(target)
    return AttackOutcome(
        status=AttackStatus.MISS,
        is_game_over=attacker.has_destroyed(opponent.ships),
        opponent_id=opponent.index_player,
    )


class AttackResolver:
    def __init__(self, store: Store, *, board_size: int = BOARD_SIZE) -> None:
        self._store = store
        self._board_size = board_size

    async def resolve_attack(self, game_id: int, attacker_id: int, target: Coordinate) -> AttackOutcome | None:
        """Resolve and persist one attack; None if the game has not started."""
        async with self._store.transaction() as snapshot:
            room = snapshot.find_room_by_game(game_id)
            if room is None:
                logger.info("[attacks] No room for gameId %s", game_id)
                return None
            attacker = room.board_of(attacker_id)
            opponent = room.opponent_board_of(attacker_id)
            if attacker is None or opponent is None:
                logger.info("[attacks] Game %s is missing a fleet board for player %s", game_id, attacker_id)
                return None
            outcome = resolve_shot(attacker, opponent, target, board_size=self._board_size)

        logger.info(
            "[attacks] Attack result: game=%s player=%s at (%s, %s) -> %s%s",
            game_id,
            attacker_id,
            target.x,
            target.y,
            outcome.status,
            " (game over)" if outcome.is_game_over else "",
        )
        return outcome
