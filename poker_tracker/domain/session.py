"""Session rules: player names, table limits, settings and stage transitions."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

MIN_PLAYERS = 1
MAX_PLAYERS = 9


class DomainValidationError(ValueError):
    """Raised when a session rule is violated."""


class DivisionUndefined(DomainValidationError):
    """Raised when chips are converted to money while no chips are in play."""


class SessionNotFoundError(DomainValidationError):
    pass


class StageConflictError(DomainValidationError):
    pass


class SessionStage(str, Enum):
    BUY_IN = "buyin"
    STANDING = "standing"
    SETTLEMENT = "settlement"


_TRANSITIONS: dict[SessionStage, frozenset[SessionStage]] = {
    SessionStage.BUY_IN: frozenset({SessionStage.STANDING}),
    SessionStage.STANDING: frozenset({SessionStage.BUY_IN, SessionStage.STANDING, SessionStage.SETTLEMENT}),
    SessionStage.SETTLEMENT: frozenset(),
}


@dataclass(frozen=True)
class SessionSettings:
    buy_in_amount: float
    starting_stack: int
    currency_symbol: str = "$"

    def __post_init__(self) -> None:
        if not math.isfinite(self.buy_in_amount) or self.buy_in_amount <= 0:
            raise DomainValidationError("buy_in_amount must be a positive finite amount")
        if self.starting_stack <= 0:
            raise DomainValidationError("starting_stack must be positive")
        symbol = self.currency_symbol.strip()
        if not symbol or len(symbol) > 5:
            raise DomainValidationError("currency_symbol must be 1-5 characters")
        object.__setattr__(self, "currency_symbol", symbol)


def normalize_player(name: str) -> str:
    value = name.strip()
    if not value:
        raise DomainValidationError("player name must be non-empty")
    return value


def player_key(name: str) -> str:
    return normalize_player(name).casefold()


def ensure_unique_players(players: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for player in players:
        normalized = normalize_player(player)
        key = normalized.casefold()
        if key in seen:
            raise DomainValidationError(f"player name already in use: {normalized}")
        seen.add(key)
        result.append(normalized)

    if len(result) < MIN_PLAYERS:
        raise DomainValidationError(f"at least {MIN_PLAYERS} player required")
    if len(result) > MAX_PLAYERS:
        raise DomainValidationError(f"maximum {MAX_PLAYERS} players allowed")
    return result


def ensure_can_join(existing: Iterable[str], name: str) -> str:
    """Validate a mid-game join against the current table."""
    existing = list(existing)
    normalized = normalize_player(name)
    if len(existing) >= MAX_PLAYERS:
        raise DomainValidationError(f"maximum {MAX_PLAYERS} players allowed")
    if normalized.casefold() in {player.casefold() for player in existing}:
        raise DomainValidationError(f"player name already in use: {normalized}")
    return normalized


def ensure_stage(current: SessionStage, *allowed: SessionStage) -> None:
    if current not in allowed:
        expected = ", ".join(stage.value for stage in allowed)
        raise StageConflictError(f"session is in stage {current.value}, expected: {expected}")


def advance_stage(current: SessionStage, target: SessionStage) -> SessionStage:
    if target not in _TRANSITIONS[current]:
        raise StageConflictError(f"cannot move session from {current.value} to {target.value}")
    return target
