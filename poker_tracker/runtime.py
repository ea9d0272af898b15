from __future__ import annotations

from poker_tracker.service import SessionService
from poker_tracker.storage.database import SessionLocal
from poker_tracker.storage.repository import SessionRepository

repo = SessionRepository(SessionLocal)
service = SessionService(repo)


def get_service() -> SessionService:
    return service
