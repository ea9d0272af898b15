from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from poker_tracker.domain import DomainValidationError, SessionNotFoundError, SessionStage
from poker_tracker.storage.models import PokerSession, SessionPlayer


@dataclass(slots=True)
class PlayerRow:
    name: str
    buy_ins: int
    final_chips: int | None = None


@dataclass(slots=True)
class SessionRow:
    id: int
    stage: SessionStage
    buy_in_amount: float
    starting_stack: int
    currency_symbol: str
    players: list[PlayerRow] = field(default_factory=list)
    updated_at: str | None = None

    @property
    def player_names(self) -> list[str]:
        return [player.name for player in self.players]


class SessionRepository:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def create_session(
        self,
        players: list[str],
        buy_in_amount: float,
        starting_stack: int,
        currency_symbol: str,
    ) -> int:
        with self._session_factory() as db:
            poker_session = PokerSession(
                stage=SessionStage.BUY_IN.value,
                buy_in_amount=buy_in_amount,
                starting_stack=starting_stack,
                currency_symbol=currency_symbol,
            )
            db.add(poker_session)
            db.flush()
            db.add_all(
                [
                    SessionPlayer(session_id=poker_session.id, seat=seat, name=player, buy_ins=1)
                    for seat, player in enumerate(players)
                ]
            )
            db.commit()
            return poker_session.id

    def get_session(self, session_id: int) -> SessionRow | None:
        with self._session_factory() as db:
            poker_session = db.get(PokerSession, session_id)
            if poker_session is None:
                return None

            players = db.scalars(
                select(SessionPlayer).where(SessionPlayer.session_id == session_id).order_by(SessionPlayer.seat)
            ).all()
            updated_at = poker_session.updated_at
            if updated_at.tzinfo is None:
                updated_at = updated_at.replace(tzinfo=timezone.utc)
            return SessionRow(
                id=poker_session.id,
                stage=SessionStage(poker_session.stage),
                buy_in_amount=poker_session.buy_in_amount,
                starting_stack=poker_session.starting_stack,
                currency_symbol=poker_session.currency_symbol,
                players=[
                    PlayerRow(name=player.name, buy_ins=player.buy_ins, final_chips=player.final_chips)
                    for player in players
                ],
                updated_at=updated_at.isoformat(),
            )

    def set_buy_in_amount(self, session_id: int, amount: float) -> None:
        with self._session_factory() as db:
            poker_session = self._load(db, session_id)
            poker_session.buy_in_amount = amount
            db.commit()

    def set_buy_ins(self, session_id: int, player_name: str, buy_ins: int) -> None:
        with self._session_factory() as db:
            player = self._load_player(db, session_id, player_name)
            player.buy_ins = buy_ins
            self._touch(db, session_id)
            db.commit()

    def add_player(self, session_id: int, player_name: str) -> None:
        with self._session_factory() as db:
            self._load(db, session_id)
            next_seat = db.execute(
                select(func.coalesce(func.max(SessionPlayer.seat), -1) + 1).where(SessionPlayer.session_id == session_id)
            ).scalar_one()
            db.add(SessionPlayer(session_id=session_id, seat=int(next_seat), name=player_name, buy_ins=1))
            self._touch(db, session_id)
            db.commit()

    def set_final_chips(self, session_id: int, chips: dict[str, int]) -> None:
        with self._session_factory() as db:
            for player_name, count in chips.items():
                self._load_player(db, session_id, player_name).final_chips = count
            self._touch(db, session_id)
            db.commit()

    def set_stage(self, session_id: int, stage: SessionStage) -> None:
        with self._session_factory() as db:
            poker_session = self._load(db, session_id)
            poker_session.stage = stage.value
            db.commit()

    def delete_session(self, session_id: int) -> None:
        with self._session_factory() as db:
            db.delete(self._load(db, session_id))
            db.commit()

    @staticmethod
    def _load(db: Session, session_id: int) -> PokerSession:
        poker_session = db.get(PokerSession, session_id)
        if poker_session is None:
            raise SessionNotFoundError(f"session {session_id} not found")
        return poker_session

    @staticmethod
    def _load_player(db: Session, session_id: int, player_name: str) -> SessionPlayer:
        player = db.scalars(
            select(SessionPlayer).where(SessionPlayer.session_id == session_id, SessionPlayer.name == player_name)
        ).one_or_none()
        if player is None:
            raise DomainValidationError(f"unknown player: {player_name}")
        return player

    @classmethod
    def _touch(cls, db: Session, session_id: int) -> None:
        cls._load(db, session_id).updated_at = datetime.now(timezone.utc)
