"""Settlement of net positions into pairwise payments."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Protocol

from .session import DomainValidationError

logger = logging.getLogger("poker_tracker.domain.settlement")

SETTLEMENT_EPSILON = 0.01
CENT = Decimal("0.01")


class HasNetPosition(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def net_position(self) -> float: ...


@dataclass(frozen=True)
class Transaction:
    from_player: str
    to_player: str
    amount: Decimal

    def as_dict(self) -> dict[str, str | Decimal]:
        return {"from": self.from_player, "to": self.to_player, "amount": self.amount}


@dataclass
class SettlementResult:
    transactions: list[Transaction]
    imbalance: float = 0.0
    unsettled: dict[str, float] = field(default_factory=dict)

    @property
    def balanced(self) -> bool:
        return abs(self.imbalance) < SETTLEMENT_EPSILON


@dataclass
class _Balance:
    name: str
    net: float


def to_cents(amount: float) -> Decimal:
    if not math.isfinite(amount):
        raise DomainValidationError(f"amount must be finite: {amount}")
    value = Decimal(amount)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 4)
        return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _balances(positions: Iterable[HasNetPosition] | Mapping[str, float]) -> list[_Balance]:
    if isinstance(positions, Mapping):
        balances = [_Balance(name=name, net=float(net)) for name, net in positions.items()]
    else:
        balances = [_Balance(name=position.name, net=float(position.net_position)) for position in positions]
    for balance in balances:
        if not math.isfinite(balance.net):
            raise DomainValidationError(f"net position must be finite: {balance.name}")
    return balances


def settle(positions: Iterable[HasNetPosition] | Mapping[str, float]) -> SettlementResult:
    """Match debtors to creditors, largest amounts first.

    Players within ``SETTLEMENT_EPSILON`` of zero take no part. Ties keep
    their input order. Running balances live on private copies, so the
    caller's records are never touched.
    """
    balances = _balances(positions)
    imbalance = sum(balance.net for balance in balances)

    creditors = sorted(
        (balance for balance in balances if balance.net > SETTLEMENT_EPSILON),
        key=lambda balance: -balance.net,
    )
    debtors = sorted(
        (balance for balance in balances if balance.net < -SETTLEMENT_EPSILON),
        key=lambda balance: balance.net,
    )

    transactions: list[Transaction] = []
    creditor_idx = 0
    debtor_idx = 0
    while creditor_idx < len(creditors) and debtor_idx < len(debtors):
        creditor = creditors[creditor_idx]
        debtor = debtors[debtor_idx]

        amount = min(creditor.net, -debtor.net)
        transactions.append(Transaction(from_player=debtor.name, to_player=creditor.name, amount=to_cents(amount)))

        creditor.net -= amount
        debtor.net += amount

        if abs(creditor.net) < SETTLEMENT_EPSILON:
            creditor_idx += 1
        if abs(debtor.net) < SETTLEMENT_EPSILON:
            debtor_idx += 1

    unsettled = {
        balance.name: balance.net
        for balance in [*creditors[creditor_idx:], *debtors[debtor_idx:]]
        if abs(balance.net) >= SETTLEMENT_EPSILON
    }
    result = SettlementResult(transactions=transactions, imbalance=imbalance, unsettled=unsettled)
    if not result.balanced:
        logger.warning(
            "net positions do not sum to zero (imbalance %.4f); %d player(s) left unsettled",
            imbalance,
            len(unsettled),
        )
    return result


def calculate_settlement(positions: Iterable[HasNetPosition] | Mapping[str, float]) -> list[Transaction]:
    return settle(positions).transactions
