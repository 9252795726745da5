"""Fleet layout and shot bookkeeping for one side of a game."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

BOARD_SIZE = 10


class ShipKind(StrEnum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    HUGE = "huge"


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: int
    y: int

    def on_board(self, size: int = BOARD_SIZE) -> bool:
        return 0 <= self.x < size and 0 <= self.y < size


class Ship(BaseModel):
    """
    One ship placement as sent by the client.

    `vertical` ships extend along y from `origin`, horizontal ones along x.
    Placements are trusted: overlapping or off-board ships are stored as-is.
    """

    model_config = ConfigDict(populate_by_name=True)

    origin: Coordinate = Field(alias="position")
    vertical: bool = Field(alias="direction")
    length: int
    kind: ShipKind = Field(alias="type")

    def cells(self) -> list[Coordinate]:
        if self.vertical:
            return [Coordinate(x=self.origin.x, y=self.origin.y + i) for i in range(self.length)]
        return [Coordinate(x=self.origin.x + i, y=self.origin.y) for i in range(self.length)]

    def perimeter(self, size: int = BOARD_SIZE) -> list[Coordinate]:
        """
        Water surrounding the ship: both parallel lines (one cell longer than
        the ship at each end) plus the cell beyond each end. 2 * length + 6
        cells before clipping to the board.
        """
        x, y = self.origin.x, self.origin.y
        raw: list[tuple[int, int]] = []
        if self.vertical:
            for i in range(-1, self.length + 1):
                raw.append((x - 1, y + i))
                raw.append((x + 1, y + i))
            raw.append((x, y - 1))
            raw.append((x, y + self.length))
        else:
            for i in range(-1, self.length + 1):
                raw.append((x + i, y - 1))
                raw.append((x + i, y + 1))
            raw.append((x - 1, y))
            raw.append((x + self.length, y))

        cells: list[Coordinate] = []
        for cx, cy in raw:
            cell = Coordinate(x=cx, y=cy)
            if cell.on_board(size) and cell not in cells:
                cells.append(cell)
        return cells


class FleetBoard(BaseModel):
    """
    A player's submitted fleet plus every cell that player has fired at the
    opponent (`hits` on the wire, including perimeter cells revealed by kills).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    game_id: int
    index_player: int
    ships: list[Ship] = Field(default_factory=list)
    shots_fired: list[Coordinate] = Field(default_factory=list, alias="hits")

    def has_fired_at(self, cell: Coordinate) -> bool:
        return cell in self.shots_fired

    def record_shot(self, cell: Coordinate) -> None:
        if cell not in self.shots_fired:
            self.shots_fired.append(cell)

    def record_shots(self, cells: list[Coordinate]) -> None:
        for cell in cells:
            self.record_shot(cell)

    def remaining_cells(self, ship: Ship) -> list[Coordinate]:
        """Cells of an opposing ship this player has not fired at yet."""
        fired = set(self.shots_fired)
        return [cell for cell in ship.cells() if cell not in fired]

    def is_sunk(self, ship: Ship) -> bool:
        return not self.remaining_cells(ship)

    def has_destroyed(self, ships: list[Ship]) -> bool:
        return all(self.is_sunk(ship) for ship in ships)
