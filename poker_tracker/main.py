from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from poker_tracker.api.calculator import router as calculator_router
from poker_tracker.api.sessions import router as sessions_router
from poker_tracker.config import settings
from poker_tracker.storage.database import init_db

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    init_db()
    yield


app = FastAPI(title="Poker Night Tracker API", lifespan=lifespan)
app.include_router(sessions_router)
app.include_router(calculator_router)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
