from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from poker_tracker.storage.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PokerSession(Base):
    __tablename__ = "poker_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    stage: Mapped[str] = mapped_column(String(32), default="buyin", nullable=False, index=True)
    buy_in_amount: Mapped[float] = mapped_column(Float, nullable=False)
    starting_stack: Mapped[int] = mapped_column(Integer, nullable=False)
    currency_symbol: Mapped[str] = mapped_column(String(5), nullable=False, default="$")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    players: Mapped[list["SessionPlayer"]] = relationship(
        back_populates="session", cascade="all, delete-orphan", order_by="SessionPlayer.seat"
    )


class SessionPlayer(Base):
    __tablename__ = "session_players"
    __table_args__ = (UniqueConstraint("session_id", "seat", name="uq_session_players_session_seat"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    session_id: Mapped[int] = mapped_column(ForeignKey("poker_sessions.id"), nullable=False, index=True)
    seat: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    buy_ins: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    final_chips: Mapped[int | None] = mapped_column(Integer, nullable=True)

    session: Mapped[PokerSession] = relationship(back_populates="players")
