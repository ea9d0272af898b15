from __future__ import annotations

from fastapi import APIRouter

from poker_tracker.api.errors import domain_error
from poker_tracker.api.schemas import (
    PositionResponse,
    PositionsRequest,
    PositionsResponse,
    SettlementRequest,
    SettlementResponse,
)
from poker_tracker.domain import (
    DomainValidationError,
    PlayerStake,
    PricingContext,
    chip_value,
    compute_net_positions,
    ensure_unique_players,
    settle,
    total_chips,
    total_pot,
    validate_final_standings,
)

router = APIRouter(prefix="/calculate", tags=["calculator"])


@router.post("/positions", response_model=PositionsResponse, summary="Net positions from buy-ins and final holdings")
def calculate_positions(payload: PositionsRequest) -> PositionsResponse:
    try:
        ensure_unique_players(player.name for player in payload.players)
        stakes = [
            PlayerStake(
                name=player.name,
                buy_ins=player.buy_ins,
                final_chips=player.final_chips,
                final_cash=player.final_cash,
            )
            for player in payload.players
        ]
        pricing = PricingContext(buy_in_amount=payload.buy_in_amount, starting_stack=payload.starting_stack)
        positions = compute_net_positions(stakes, pricing)
        pot = total_pot(stakes, pricing)
        return PositionsResponse(
            total_pot=pot,
            total_chips=total_chips(stakes, pricing) if pricing.chip_mode else None,
            chip_value=chip_value(stakes, pricing) if pricing.chip_mode else None,
            balanced=validate_final_standings(positions, pot),
            positions=[PositionResponse.from_position(p) for p in positions],
        )
    except DomainValidationError as exc:
        raise domain_error(exc) from exc


@router.post("/settlement", response_model=SettlementResponse, summary="Payments that settle the given net positions")
def calculate_settlement(payload: SettlementRequest) -> SettlementResponse:
    try:
        if payload.positions:
            ensure_unique_players(position.name for position in payload.positions)
        return SettlementResponse.from_result(settle({p.name.strip(): p.net_position for p in payload.positions}))
    except DomainValidationError as exc:
        raise domain_error(exc) from exc
