from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.settings import Settings
from routes.game_ws import router as game_ws_router
from routes.lobby import router as lobby_router
from services.game_server import GameServer


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    game_server = GameServer.from_settings(settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        await game_server.start()
        yield

    app = FastAPI(title="SeaBattle API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.game_server = game_server

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(lobby_router, prefix="/api")
    app.include_router(game_ws_router)
    return app


app = create_app()
