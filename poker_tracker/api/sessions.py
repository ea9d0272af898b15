from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import PlainTextResponse

from poker_tracker.api.errors import domain_error
from poker_tracker.api.schemas import (
    AddPlayerRequest,
    BuyInActionRequest,
    BuyInAmountRequest,
    CreateSessionRequest,
    FinalChipsRequest,
    PositionResponse,
    SessionResponse,
    SessionSettlementResponse,
    SettlementResponse,
    StandingResponse,
)
from poker_tracker.domain import DomainValidationError
from poker_tracker.runtime import get_service
from poker_tracker.service import SessionService, SessionSettlement, Standing

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _standing_response(session_id: int, standing: Standing) -> StandingResponse:
    return StandingResponse(
        session_id=session_id,
        total_pot=standing.total_pot,
        total_chips=standing.total_chips,
        chip_value=standing.chip_value,
        chip_difference=standing.chip_difference,
        ready=standing.ready,
        positions=[PositionResponse.from_position(p) for p in standing.positions],
    )


def _settlement_response(settlement: SessionSettlement) -> SessionSettlementResponse:
    base = SettlementResponse.from_result(settlement.result)
    return SessionSettlementResponse(
        session_id=settlement.session_id,
        positions=[PositionResponse.from_position(p) for p in settlement.standing.positions],
        **base.model_dump(),
    )


@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a new session",
)
def create_session(payload: CreateSessionRequest, service: SessionService = Depends(get_service)) -> SessionResponse:
    try:
        session_id = service.start_session(
            payload.players,
            buy_in_amount=payload.buy_in_amount,
            starting_stack=payload.starting_stack,
            currency_symbol=payload.currency_symbol,
        )
        return SessionResponse.from_row(service.get_session(session_id))
    except DomainValidationError as exc:
        raise domain_error(exc) from exc


@router.get("/{session_id}", response_model=SessionResponse, summary="Load a saved session")
def get_session(session_id: int, service: SessionService = Depends(get_service)) -> SessionResponse:
    try:
        return SessionResponse.from_row(service.get_session(session_id))
    except DomainValidationError as exc:
        raise domain_error(exc) from exc


@router.put("/{session_id}/buy-in-amount", response_model=SessionResponse, summary="Change the buy-in amount")
def change_buy_in_amount(
    session_id: int,
    payload: BuyInAmountRequest,
    service: SessionService = Depends(get_service),
) -> SessionResponse:
    try:
        return SessionResponse.from_row(service.change_buy_in_amount(session_id, payload.amount))
    except DomainValidationError as exc:
        raise domain_error(exc) from exc


@router.post("/{session_id}/players", response_model=SessionResponse, summary="Add a player mid-game")
def add_player(
    session_id: int,
    payload: AddPlayerRequest,
    service: SessionService = Depends(get_service),
) -> SessionResponse:
    try:
        return SessionResponse.from_row(service.add_player(session_id, payload.name))
    except DomainValidationError as exc:
        raise domain_error(exc) from exc


@router.post(
    "/{session_id}/players/{name}/buy-ins",
    response_model=SessionResponse,
    summary="Add or remove one buy-in for a player",
)
def record_buy_in(
    session_id: int,
    name: str,
    payload: BuyInActionRequest,
    service: SessionService = Depends(get_service),
) -> SessionResponse:
    try:
        return SessionResponse.from_row(service.record_buy_in(session_id, name, payload.action))
    except DomainValidationError as exc:
        raise domain_error(exc) from exc


@router.post("/{session_id}/back-to-buy-ins", response_model=SessionResponse, summary="Return to buy-in tracking")
def back_to_buy_ins(session_id: int, service: SessionService = Depends(get_service)) -> SessionResponse:
    try:
        return SessionResponse.from_row(service.return_to_buy_ins(session_id))
    except DomainValidationError as exc:
        raise domain_error(exc) from exc


@router.put("/{session_id}/final-chips", response_model=StandingResponse, summary="Record final chip counts")
def record_final_chips(
    session_id: int,
    payload: FinalChipsRequest,
    service: SessionService = Depends(get_service),
) -> StandingResponse:
    try:
        return _standing_response(session_id, service.record_final_chips(session_id, payload.chips))
    except DomainValidationError as exc:
        raise domain_error(exc) from exc


@router.get("/{session_id}/standing", response_model=StandingResponse, summary="Current net positions")
def get_standing(session_id: int, service: SessionService = Depends(get_service)) -> StandingResponse:
    try:
        return _standing_response(session_id, service.get_standing(session_id))
    except DomainValidationError as exc:
        raise domain_error(exc) from exc


@router.post("/{session_id}/settlement", response_model=SessionSettlementResponse, summary="Settle the session")
def settle_session(session_id: int, service: SessionService = Depends(get_service)) -> SessionSettlementResponse:
    try:
        return _settlement_response(service.settle_session(session_id))
    except DomainValidationError as exc:
        raise domain_error(exc) from exc


@router.get("/{session_id}/settlement", response_model=SessionSettlementResponse, summary="Settled payments")
def get_settlement(session_id: int, service: SessionService = Depends(get_service)) -> SessionSettlementResponse:
    try:
        return _settlement_response(service.get_settlement(session_id))
    except DomainValidationError as exc:
        raise domain_error(exc) from exc


@router.get("/{session_id}/share", response_class=PlainTextResponse, summary="Shareable settlement text")
def share(
    session_id: int,
    on: date | None = Query(default=None),
    service: SessionService = Depends(get_service),
) -> str:
    try:
        return service.share_text(session_id, on=on)
    except DomainValidationError as exc:
        raise domain_error(exc) from exc


@router.post(
    "/{session_id}/new",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Clear the session and start over with the same players",
)
def new_session(session_id: int, service: SessionService = Depends(get_service)) -> SessionResponse:
    try:
        return SessionResponse.from_row(service.get_session(service.new_session(session_id)))
    except DomainValidationError as exc:
        raise domain_error(exc) from exc
