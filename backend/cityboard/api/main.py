from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError

from cityboard.api.routers import events
from cityboard.config import Settings, load_settings

logger = logging.getLogger("uvicorn.error")


def create_app(engine=None, settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    app = FastAPI(title="City Event Board API", version="0.1.0")
    if engine is None and settings.database_url:
        engine = create_engine(settings.database_url, future=True)
    app.state.db_engine = engine
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.frontend_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(OperationalError)
    async def operational_error_handler(request: Request, exc: OperationalError):
        raw = str(exc.orig) if getattr(exc, "orig", None) else str(exc)
        logger.error(
            "Event store unavailable on %s %s: %s",
            request.method,
            request.url.path,
            raw,
        )
        return JSONResponse({"detail": "Event store unavailable"}, status_code=503)

    @app.get("/health", tags=["health"])
    def health():
        return {"status": "ok"}

    app.include_router(events.router, prefix="/api")
    return app


app = create_app()
