from __future__ import annotations

import logging
import time
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.core.config import settings
from app.core.errors import RoomsError
from app.core.logging_config import configure_logging
from app.db.base import Base
from app.db.session import engine

import app.models

from app.routers import auth, users, rooms, reviews, favorites
from app.services.storage import URL_PREFIX, uploads_root

configure_logging(log_dir=settings.log_dir, level=settings.log_level, filename=settings.log_file)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="Room Listings", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def on_startup() -> None:
        Base.metadata.create_all(bind=engine)
        logger.info("DB ready")

    @app.exception_handler(RoomsError)
    async def rooms_error_handler(request: Request, exc: RoomsError) -> JSONResponse:
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.detail)
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled error")
            return JSONResponse(status_code=500, content={"detail": "Internal server error"})
        duration_ms = int((time.time() - start) * 1000)
        logger.info("%s %s -> %s (%sms)", request.method, request.url.path, response.status_code, duration_ms)
        return response

    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(rooms.router)
    app.include_router(reviews.router)
    app.include_router(favorites.router)

    uploads_dir: Path = uploads_root()
    uploads_dir.mkdir(parents=True, exist_ok=True)
    app.mount(URL_PREFIX, StaticFiles(directory=str(uploads_dir)), name="uploads")

    return app


app = create_app()
