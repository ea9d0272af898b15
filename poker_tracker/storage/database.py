from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from poker_tracker.config import settings

DATABASE_URL = settings.database_url

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, future=True, connect_args=connect_args)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)

Base = declarative_base()


def init_db() -> None:
    from poker_tracker.storage import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
