from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Literal

from poker_tracker.config import settings
from poker_tracker.domain import (
    DomainValidationError,
    PlayerPosition,
    PlayerStake,
    PricingContext,
    SessionNotFoundError,
    SessionSettings,
    SessionStage,
    SettlementResult,
    StageConflictError,
    advance_stage,
    chip_count_difference,
    chip_value,
    compute_net_positions,
    ensure_can_join,
    ensure_stage,
    ensure_unique_players,
    player_key,
    settle,
    total_chips,
    total_pot,
)
from poker_tracker.services.share_text import ShareContext, build_share_text
from poker_tracker.storage.repository import PlayerRow, SessionRepository, SessionRow

logger = logging.getLogger("poker_tracker.service")

BuyInAction = Literal["increment", "decrement"]


class ChipCountMismatchError(StageConflictError):
    def __init__(self, difference: int) -> None:
        self.difference = difference
        direction = "too many" if difference > 0 else "too few"
        super().__init__(f"chip count does not match: {abs(difference)} chips {direction}")


@dataclass(frozen=True)
class Standing:
    total_pot: float
    total_chips: int
    chip_value: float
    positions: list[PlayerPosition]
    chip_difference: int

    @property
    def ready(self) -> bool:
        return self.chip_difference == 0


@dataclass(frozen=True)
class SessionSettlement:
    session_id: int
    standing: Standing
    result: SettlementResult


class SessionService:
    def __init__(self, repo: SessionRepository) -> None:
        self.repo = repo

    def start_session(
        self,
        players: list[str],
        buy_in_amount: float | None = None,
        starting_stack: int | None = None,
        currency_symbol: str | None = None,
    ) -> int:
        names = ensure_unique_players(players)
        session_settings = SessionSettings(
            buy_in_amount=settings.default_buy_in_amount if buy_in_amount is None else buy_in_amount,
            starting_stack=settings.default_starting_stack if starting_stack is None else starting_stack,
            currency_symbol=currency_symbol or settings.default_currency_symbol,
        )
        session_id = self.repo.create_session(
            names,
            session_settings.buy_in_amount,
            session_settings.starting_stack,
            session_settings.currency_symbol,
        )
        logger.info("session %s started with %d players", session_id, len(names))
        return session_id

    def get_session(self, session_id: int) -> SessionRow:
        session = self.repo.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(f"session {session_id} not found")
        return session

    def change_buy_in_amount(self, session_id: int, amount: float) -> SessionRow:
        session = self.get_session(session_id)
        ensure_stage(session.stage, SessionStage.BUY_IN)
        if amount <= 0:
            raise DomainValidationError("buy_in_amount must be positive")
        self.repo.set_buy_in_amount(session_id, amount)
        return self.get_session(session_id)

    def record_buy_in(self, session_id: int, player: str, action: BuyInAction) -> SessionRow:
        session = self.get_session(session_id)
        ensure_stage(session.stage, SessionStage.BUY_IN)
        row = self._find_player(session, player)

        if action == "increment":
            buy_ins = row.buy_ins + 1
        elif action == "decrement":
            buy_ins = max(row.buy_ins - 1, 0)
        else:
            raise DomainValidationError(f"unsupported buy-in action: {action}")

        if buy_ins != row.buy_ins:
            self.repo.set_buy_ins(session_id, row.name, buy_ins)
        return self.get_session(session_id)

    def add_player(self, session_id: int, name: str) -> SessionRow:
        session = self.get_session(session_id)
        ensure_stage(session.stage, SessionStage.BUY_IN)
        normalized = ensure_can_join(session.player_names, name)
        self.repo.add_player(session_id, normalized)
        logger.info("player %s joined session %s", normalized, session_id)
        return self.get_session(session_id)

    def return_to_buy_ins(self, session_id: int) -> SessionRow:
        session = self.get_session(session_id)
        self._move(session, SessionStage.BUY_IN)
        return self.get_session(session_id)

    def record_final_chips(self, session_id: int, chips: dict[str, int]) -> Standing:
        session = self.get_session(session_id)
        ensure_stage(session.stage, SessionStage.BUY_IN, SessionStage.STANDING)

        resolved: dict[str, int] = {}
        for name, count in chips.items():
            if count < 0:
                raise DomainValidationError(f"final chips must be non-negative: {name}")
            resolved[self._find_player(session, name).name] = count

        self.repo.set_final_chips(session_id, resolved)
        standing = self.get_standing(session_id)
        self._move(session, SessionStage.STANDING)
        return standing

    def get_standing(self, session_id: int) -> Standing:
        return self._standing(self.get_session(session_id))

    def settle_session(self, session_id: int) -> SessionSettlement:
        session = self.get_session(session_id)
        ensure_stage(session.stage, SessionStage.STANDING)
        standing = self._standing(session)
        if not standing.ready:
            raise ChipCountMismatchError(standing.chip_difference)

        result = settle(standing.positions)
        self._move(session, SessionStage.SETTLEMENT)
        return SessionSettlement(session_id=session_id, standing=standing, result=result)

    def get_settlement(self, session_id: int) -> SessionSettlement:
        session = self.get_session(session_id)
        ensure_stage(session.stage, SessionStage.SETTLEMENT)
        standing = self._standing(session)
        return SessionSettlement(session_id=session_id, standing=standing, result=settle(standing.positions))

    def share_text(self, session_id: int, on: date | None = None) -> str:
        settlement = self.get_settlement(session_id)
        session = self.get_session(session_id)
        standing = settlement.standing
        context = ShareContext(
            currency_symbol=session.currency_symbol,
            buy_in_amount=session.buy_in_amount,
            starting_stack=session.starting_stack,
            total_pot=standing.total_pot,
            total_chips=standing.total_chips,
            chip_value=standing.chip_value,
        )
        return build_share_text(context, standing.positions, settlement.result.transactions, on or date.today())

    def new_session(self, session_id: int) -> int:
        session = self.get_session(session_id)
        self.repo.delete_session(session_id)
        logger.info("session %s cleared, starting over with the same players", session_id)
        return self.start_session(session.player_names, currency_symbol=session.currency_symbol)

    def _move(self, session: SessionRow, target: SessionStage) -> None:
        advance_stage(session.stage, target)
        if session.stage != target:
            self.repo.set_stage(session.id, target)
            logger.info("session %s moved from %s to %s", session.id, session.stage.value, target.value)

    @staticmethod
    def _find_player(session: SessionRow, name: str) -> PlayerRow:
        key = player_key(name)
        for player in session.players:
            if player.name.casefold() == key:
                return player
        raise DomainValidationError(f"unknown player: {name.strip()}")

    @staticmethod
    def _standing(session: SessionRow) -> Standing:
        stakes = [
            PlayerStake(name=player.name, buy_ins=player.buy_ins, final_chips=player.final_chips)
            for player in session.players
        ]
        pricing = PricingContext(buy_in_amount=session.buy_in_amount, starting_stack=session.starting_stack)
        return Standing(
            total_pot=total_pot(stakes, pricing),
            total_chips=total_chips(stakes, pricing),
            chip_value=chip_value(stakes, pricing),
            positions=compute_net_positions(stakes, pricing),
            chip_difference=chip_count_difference(stakes, pricing),
        )
