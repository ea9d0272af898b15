"""Net position calculation from buy-ins and final holdings."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from .session import DivisionUndefined, DomainValidationError, normalize_player

STANDINGS_TOLERANCE = 0.01


@dataclass(frozen=True)
class PlayerStake:
    name: str
    buy_ins: int
    final_chips: int | None = None
    final_cash: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", normalize_player(self.name))
        if self.buy_ins < 0:
            raise DomainValidationError(f"buy_ins must be non-negative: {self.name}")
        if self.final_chips is not None and self.final_chips < 0:
            raise DomainValidationError(f"final_chips must be non-negative: {self.name}")
        if self.final_cash is not None and (not math.isfinite(self.final_cash) or self.final_cash < 0):
            raise DomainValidationError(f"final_cash must be a non-negative finite amount: {self.name}")


@dataclass(frozen=True)
class PricingContext:
    buy_in_amount: float
    starting_stack: int | None = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.buy_in_amount) or self.buy_in_amount <= 0:
            raise DomainValidationError("buy_in_amount must be a positive finite amount")
        if self.starting_stack is not None and self.starting_stack <= 0:
            raise DomainValidationError("starting_stack must be positive")

    @property
    def chip_mode(self) -> bool:
        return self.starting_stack is not None


@dataclass(frozen=True)
class PlayerPosition:
    name: str
    buy_ins: int
    total_buy_in: float
    final_value: float
    net_position: float
    starting_chips: int | None = None
    final_chips: int | None = None


def total_pot(players: Sequence[PlayerStake], pricing: PricingContext) -> float:
    return sum(player.buy_ins * pricing.buy_in_amount for player in players)


def total_chips(players: Sequence[PlayerStake], pricing: PricingContext) -> int:
    if not pricing.chip_mode:
        raise DomainValidationError("starting_stack is required to count chips")
    return sum(player.buy_ins * pricing.starting_stack for player in players)


def chip_value(players: Sequence[PlayerStake], pricing: PricingContext) -> float:
    """Money per chip: total pot divided by total chips in play."""
    chips = total_chips(players, pricing)
    if chips == 0:
        raise DivisionUndefined("no chips in play: record at least one buy-in first")
    return total_pot(players, pricing) / chips


def chip_count_difference(players: Sequence[PlayerStake], pricing: PricingContext) -> int:
    declared = sum(player.final_chips or 0 for player in players)
    return declared - total_chips(players, pricing)


def compute_net_positions(players: Sequence[PlayerStake], pricing: PricingContext) -> list[PlayerPosition]:
    """Derive every player's net position.

    In chip mode the final chip count is converted with the session chip value;
    in cash mode ``final_cash`` is used as is. No rounding is applied.
    """
    rate = chip_value(players, pricing) if pricing.chip_mode else None

    positions: list[PlayerPosition] = []
    for player in players:
        total_buy_in = player.buy_ins * pricing.buy_in_amount
        if rate is not None:
            final_chips = player.final_chips or 0
            final_value = final_chips * rate
            starting_chips: int | None = player.buy_ins * pricing.starting_stack
        else:
            final_chips = None
            final_value = float(player.final_cash or 0)
            starting_chips = None

        positions.append(
            PlayerPosition(
                name=player.name,
                buy_ins=player.buy_ins,
                total_buy_in=total_buy_in,
                final_value=final_value,
                net_position=final_value - total_buy_in,
                starting_chips=starting_chips,
                final_chips=final_chips,
            )
        )
    return positions


def validate_final_standings(positions: Sequence[PlayerPosition], pot: float) -> bool:
    total_final = sum(position.final_value for position in positions)
    return abs(total_final - pot) < STANDINGS_TOLERANCE
