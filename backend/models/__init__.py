from .board import BOARD_SIZE, Coordinate, FleetBoard, Ship, ShipKind
from .messages import AttackStatus, Envelope, InboundType, OutboundType
from .player import Player, PlayerIdentity, Winner
from .room import ROOM_CAPACITY, Room, RoomUser, Snapshot

__all__ = [
    "BOARD_SIZE",
    "Coordinate",
    "FleetBoard",
    "Ship",
    "ShipKind",
    "AttackStatus",
    "Envelope",
    "InboundType",
    "OutboundType",
    "Player",
    "PlayerIdentity",
    "Winner",
    "ROOM_CAPACITY",
    "Room",
    "RoomUser",
    "Snapshot",
]
