import logging
import math
from decimal import Decimal

import pytest

from poker_tracker.domain import (
    DomainValidationError,
    PlayerPosition,
    Transaction,
    calculate_settlement,
    settle,
    to_cents,
)


def _position(name: str, net: float) -> PlayerPosition:
    return PlayerPosition(name=name, buy_ins=1, total_buy_in=0.0, final_value=net, net_position=net)


def _pairs(transactions: list[Transaction]) -> list[tuple[str, str, Decimal]]:
    return [(t.from_player, t.to_player, t.amount) for t in transactions]


def test_largest_debt_is_paid_first() -> None:
    transactions = calculate_settlement({"A": 30.0, "B": -10.0, "C": -20.0})

    assert _pairs(transactions) == [
        ("C", "A", Decimal("20.00")),
        ("B", "A", Decimal("10.00")),
    ]


def test_single_debtor_pays_largest_creditor_first() -> None:
    transactions = calculate_settlement({"A": 50.0, "B": 20.0, "C": -70.0})

    assert _pairs(transactions) == [
        ("C", "A", Decimal("50.00")),
        ("C", "B", Decimal("20.00")),
    ]


@pytest.mark.parametrize(
    "net",
    [
        {},
        {"A": 0.0, "B": 0.0},
        {"A": 0.005, "B": -0.005},
    ],
    ids=["no_players", "all_even", "below_tolerance"],
)
def test_nothing_to_settle(net: dict[str, float]) -> None:
    result = settle(net)

    assert result.transactions == []
    assert result.balanced
    assert result.unsettled == {}


def test_player_within_tolerance_is_left_out() -> None:
    transactions = calculate_settlement({"A": 10.0, "Even": 0.005, "B": -10.005})

    assert _pairs(transactions) == [("B", "A", Decimal("10.00"))]
    assert all("Even" not in (t.from_player, t.to_player) for t in transactions)


def test_ties_keep_input_order() -> None:
    transactions = calculate_settlement({"A": 10.0, "B": 10.0, "C": -10.0, "D": -10.0})

    assert _pairs(transactions) == [
        ("C", "A", Decimal("10.00")),
        ("D", "B", Decimal("10.00")),
    ]


def test_conservation_and_transaction_bound() -> None:
    net = {"A": 123.45, "B": 80.0, "C": 0.55, "D": -50.0, "E": -99.99, "F": -54.01}

    transactions = calculate_settlement(net)

    creditors = [amount for amount in net.values() if amount > 0.01]
    debtors = [amount for amount in net.values() if amount < -0.01]
    paid = sum(t.amount for t in transactions)
    assert paid == Decimal("204.00")
    assert len(transactions) <= len(creditors) + len(debtors) - 1

    received: dict[str, Decimal] = {}
    for t in transactions:
        received[t.to_player] = received.get(t.to_player, Decimal("0")) + t.amount
    assert received == {"A": Decimal("123.45"), "B": Decimal("80.00"), "C": Decimal("0.55")}


def test_amounts_are_rounded_to_cents() -> None:
    transactions = calculate_settlement({"A": 100 / 3, "B": -100 / 3})

    assert transactions[0].amount == Decimal("33.33")
    assert transactions[0].as_dict() == {"from": "B", "to": "A", "amount": Decimal("33.33")}


def test_positions_are_not_mutated_and_result_is_repeatable() -> None:
    positions = [_position("A", 30.0), _position("B", -10.0), _position("C", -20.0)]
    snapshot = list(positions)

    first = calculate_settlement(positions)
    second = calculate_settlement(positions)

    assert first == second
    assert positions == snapshot
    assert [p.net_position for p in positions] == [30.0, -10.0, -20.0]


def test_mapping_input_is_not_mutated() -> None:
    net = {"A": 30.0, "B": -30.0}

    calculate_settlement(net)

    assert net == {"A": 30.0, "B": -30.0}


def test_imbalanced_positions_leave_residual_and_warn(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="poker_tracker.domain.settlement"):
        result = settle({"A": 50.0, "B": -20.0})

    assert _pairs(result.transactions) == [("B", "A", Decimal("20.00"))]
    assert not result.balanced
    assert result.imbalance == pytest.approx(30.0)
    assert result.unsettled == {"A": pytest.approx(30.0)}
    assert "do not sum to zero" in caplog.text


def test_excess_debt_is_reported_as_unsettled() -> None:
    result = settle({"A": 10.0, "B": -15.0, "C": -5.0})

    assert _pairs(result.transactions) == [("B", "A", Decimal("10.00"))]
    assert result.unsettled == {"B": pytest.approx(-5.0), "C": pytest.approx(-5.0)}


def test_large_amounts_round_to_cents() -> None:
    cents = to_cents(1e30)

    assert cents == Decimal(1e30)
    assert cents.as_tuple().exponent == -2
    assert to_cents(-1e30) == cents.copy_negate()

    transactions = calculate_settlement({"A": 1e30, "B": -1e30})

    assert _pairs(transactions) == [("B", "A", to_cents(1e30))]


@pytest.mark.parametrize(
    "net",
    [
        pytest.param({"A": math.inf, "B": -math.inf}, id="infinite"),
        pytest.param({"A": math.nan, "B": 0.0}, id="nan"),
    ],
)
def test_non_finite_positions_are_rejected(net: dict[str, float]) -> None:
    with pytest.raises(DomainValidationError):
        settle(net)


def test_to_cents_rejects_non_finite_amounts() -> None:
    for amount in (math.inf, -math.inf, math.nan):
        with pytest.raises(DomainValidationError):
            to_cents(amount)
