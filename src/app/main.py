from __future__ import annotations

from dotenv import load_dotenv
from fastapi import FastAPI

from src.app.routes.positions import router as positions_router
from src.app.routes.summary import router as summary_router
from src.app.routes.universe import router as universe_router
from src.db.init_db import init_db


load_dotenv()


def create_app() -> FastAPI:
    app = FastAPI(title="Distribution Management", version="0.1.0")

    @app.on_event("startup")
    def _startup() -> None:
        init_db()

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(universe_router)
    app.include_router(positions_router)
    app.include_router(summary_router)
    return app


app = create_app()
