from datetime import date
from decimal import Decimal

import pytest

from poker_tracker.domain import (
    DivisionUndefined,
    DomainValidationError,
    SessionNotFoundError,
    SessionStage,
    StageConflictError,
)
from poker_tracker.service import ChipCountMismatchError, SessionService


def _start(service: SessionService) -> int:
    return service.start_session(["first", "second", "third"], buy_in_amount=200, starting_stack=400)


def test_full_session_flow(service: SessionService) -> None:
    session_id = _start(service)
    service.record_buy_in(session_id, "FIRST", "increment")

    standing = service.record_final_chips(session_id, {"first": 1000, "second": 400, "third": 200})

    assert standing.total_pot == 800
    assert standing.total_chips == 1600
    assert standing.chip_value == 0.5
    assert standing.ready
    assert service.get_session(session_id).stage == SessionStage.STANDING

    settlement = service.settle_session(session_id)

    assert settlement.result.balanced
    assert [t.as_dict() for t in settlement.result.transactions] == [
        {"from": "third", "to": "first", "amount": Decimal("100.00")}
    ]
    assert service.get_session(session_id).stage == SessionStage.SETTLEMENT
    assert service.get_settlement(session_id).result.transactions == settlement.result.transactions


def test_new_players_start_with_one_buy_in(service: SessionService) -> None:
    session_id = service.start_session(["Alice", "Bob"])

    session = service.get_session(session_id)

    assert [(p.name, p.buy_ins) for p in session.players] == [("Alice", 1), ("Bob", 1)]
    assert session.buy_in_amount == 200
    assert session.starting_stack == 400
    assert session.currency_symbol == "$"
    assert session.updated_at is not None


def test_decrement_stops_at_zero(service: SessionService) -> None:
    session_id = _start(service)

    service.record_buy_in(session_id, "second", "decrement")
    session = service.record_buy_in(session_id, "second", "decrement")

    assert session.players[1].buy_ins == 0


def test_zero_buy_ins_refuse_standing(service: SessionService) -> None:
    session_id = service.start_session(["solo"])
    service.record_buy_in(session_id, "solo", "decrement")

    with pytest.raises(DivisionUndefined):
        service.record_final_chips(session_id, {"solo": 0})

    assert service.get_session(session_id).stage == SessionStage.BUY_IN


def test_chip_mismatch_blocks_settlement(service: SessionService) -> None:
    session_id = _start(service)
    standing = service.record_final_chips(session_id, {"first": 700, "second": 400})

    assert standing.chip_difference == -100
    assert not standing.ready

    with pytest.raises(ChipCountMismatchError) as exc_info:
        service.settle_session(session_id)
    assert exc_info.value.difference == -100
    assert "too few" in str(exc_info.value)


def test_mid_game_join_and_limits(service: SessionService) -> None:
    session_id = _start(service)

    session = service.add_player(session_id, " Dave ")
    assert session.player_names == ["first", "second", "third", "Dave"]
    assert session.players[-1].buy_ins == 1

    with pytest.raises(DomainValidationError, match="already in use"):
        service.add_player(session_id, "dave")

    for idx in range(5):
        service.add_player(session_id, f"late{idx}")
    with pytest.raises(DomainValidationError, match="maximum"):
        service.add_player(session_id, "one-too-many")


def test_buy_ins_are_locked_after_settlement(service: SessionService) -> None:
    session_id = _start(service)
    service.record_final_chips(session_id, {"first": 400, "second": 400, "third": 400})
    service.settle_session(session_id)

    with pytest.raises(StageConflictError):
        service.record_buy_in(session_id, "first", "increment")
    with pytest.raises(StageConflictError):
        service.record_final_chips(session_id, {"first": 0})


def test_back_to_buy_ins_from_standing(service: SessionService) -> None:
    session_id = _start(service)
    service.record_final_chips(session_id, {"first": 400, "second": 400, "third": 400})

    session = service.return_to_buy_ins(session_id)
    assert session.stage == SessionStage.BUY_IN

    session = service.change_buy_in_amount(session_id, 50)
    assert session.buy_in_amount == 50


def test_unknown_player_and_session(service: SessionService) -> None:
    session_id = _start(service)

    with pytest.raises(DomainValidationError, match="unknown player"):
        service.record_final_chips(session_id, {"nobody": 10})
    with pytest.raises(SessionNotFoundError):
        service.get_session(9999)


def test_new_session_keeps_names_and_currency(service: SessionService) -> None:
    session_id = service.start_session(["a", "b"], buy_in_amount=25, starting_stack=100, currency_symbol="€")

    new_id = service.new_session(session_id)

    with pytest.raises(SessionNotFoundError):
        service.get_session(session_id)
    session = service.get_session(new_id)
    assert session.player_names == ["a", "b"]
    assert session.currency_symbol == "€"
    assert session.buy_in_amount == 200
    assert session.starting_stack == 400
    assert session.stage == SessionStage.BUY_IN


def test_share_text_requires_settlement(service: SessionService) -> None:
    session_id = _start(service)
    service.record_final_chips(session_id, {"first": 600, "second": 400, "third": 200})

    with pytest.raises(StageConflictError):
        service.share_text(session_id)

    service.settle_session(session_id)
    text = service.share_text(session_id, on=date(2026, 1, 31))

    assert text.startswith("Poker Night Settlement - 2026-01-31\n")
    assert "1. third pays first $100.00" in text
