from .game_server import GameServer
from .store import Store

__all__ = ["GameServer", "Store"]
