# sealpad/main.py

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from sealpad.api import live, notes
from sealpad.config import CORS_ORIGINS, SWEEP_INTERVAL_SECONDS
from sealpad.core.errors import NoteError
from sealpad.core.note import NoteService
from sealpad.core.rate_limit import limiter
from sealpad.core.rooms import RoomBroadcaster
from sealpad.core.sweeper import ExpirySweeper
from sealpad.infra.note_store import NoteStore, SqlNoteStore
from sealpad.utils.logger import setup_logger


def create_app(store: Optional[NoteStore] = None, sweep_interval: float = SWEEP_INTERVAL_SECONDS) -> FastAPI:
    logger = setup_logger()
    store = store if store is not None else SqlNoteStore()
    sweeper = ExpirySweeper(store, interval=sweep_interval)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store.create_tables()
        sweeper.start()
        logger.info("Server started, sweeping every %ss", sweep_interval)
        yield
        await sweeper.stop()

    app = FastAPI(
        title="Sealpad",
        version="1.0.0",
        description="Zero-knowledge encrypted notes and one-time secrets",
        lifespan=lifespan,
    )

    app.state.store = store
    app.state.notes = NoteService(store)
    app.state.rooms = RoomBroadcaster(app.state.notes)
    app.state.sweeper = sweeper
    app.state.limiter = limiter

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["Referrer-Policy"] = "no-referrer"
        if request.url.path.startswith("/api/notes"):
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
        return response

    @app.exception_handler(NoteError)
    async def note_error_handler(request: Request, exc: NoteError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code.message, "code": exc.code.value},
        )

    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Register routers
    app.include_router(notes.router, tags=["Notes"])
    app.include_router(live.router, tags=["Live"])

    @app.get("/health")
    def health_check():
        return {"status": "ok", "rooms": len(app.state.rooms.active_rooms())}

    return app


app = create_app()
