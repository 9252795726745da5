from pydantic import BaseModel


class PlayerIdentity(BaseModel):
    index: int
    name: str


class Player(PlayerIdentity):
    password: str


class Winner(BaseModel):
    name: str
    wins: int = 0
