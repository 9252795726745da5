from __future__ import annotations

import logging

from models import AttackStatus

logger = logging.getLogger(__name__)


class TurnCoordinator:
    """
    Tracks whose turn it is in each active game.

    The first turn goes to the player whose fleet submission completed the
    pair. A miss hands the turn to the opponent; a hit or kill keeps it.
    With `enforce` off, `may_attack` always allows the shot.
    A finished game accepts no further attacks.
    """

    def __init__(self, *, enforce: bool = False) -> None:
        self._enforce = enforce
        self._current: dict[int, int] = {}
        self._finished: set[int] = set()

    def start(self, game_id: int, player_id: int) -> int:
        self._current[game_id] = player_id
        logger.info("[turns] Game %s starts with player %s", game_id, player_id)
        return player_id

    def current(self, game_id: int) -> int | None:
        return self._current.get(game_id)

    def may_attack(self, game_id: int, player_id: int) -> bool:
        if game_id in self._finished:
            logger.info("[turns] Ignoring attack by %s on finished game %s", player_id, game_id)
            return False
        expected = self._current.get(game_id)
        if expected is None or expected == player_id:
            return True
        if self._enforce:
            logger.info("[turns] Ignoring out-of-turn attack by %s in game %s", player_id, game_id)
            return False
        logger.warning("[turns] Player %s attacked out of turn in game %s", player_id, game_id)
        return True

    def advance(self, game_id: int, attacker_id: int, status: AttackStatus, opponent_id: int | None) -> int | None:
        next_player = opponent_id if status == AttackStatus.MISS else attacker_id
        if next_player is None:
            return None
        self._current[game_id] = next_player
        logger.info("[turns] Player %s turn in game %s", next_player, game_id)
        return next_player

    def finish(self, game_id: int) -> None:
        self._current.pop(game_id, None)
        self._finished.add(game_id)
        logger.info("[turns] Game %s finished", game_id)

    def is_finished(self, game_id: int) -> bool:
        return game_id in self._finished
