from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from poker_tracker.domain import PlayerPosition, Transaction, to_cents

NO_PAYMENTS_MESSAGE = "Everyone is even! No payments needed."


@dataclass(frozen=True)
class ShareContext:
    currency_symbol: str
    buy_in_amount: float
    starting_stack: int
    total_pot: float
    total_chips: int
    chip_value: float


def format_money(amount: float | Decimal) -> str:
    """Two decimals, or a bare integer when there are no cents."""
    cents = to_cents(float(amount))
    if cents == cents.to_integral_value():
        return str(int(cents))
    return f"{cents:.2f}"


def build_share_text(
    context: ShareContext,
    positions: Sequence[PlayerPosition],
    transactions: Sequence[Transaction],
    on: date,
) -> str:
    symbol = context.currency_symbol
    lines = [
        f"Poker Night Settlement - {on.isoformat()}",
        f"Buy-in: {symbol}{format_money(context.buy_in_amount)} = {context.starting_stack} chips"
        f" | Chip Value: {symbol}{context.chip_value:.4f}/chip",
        "",
    ]

    if not transactions:
        lines += [NO_PAYMENTS_MESSAGE, "", ""]
    else:
        lines.append("Payment Instructions:")
        for idx, transaction in enumerate(transactions, start=1):
            lines.append(f"{idx}. {transaction.from_player} pays {transaction.to_player} {symbol}{transaction.amount:.2f}")
        lines += ["", ""]

    lines.append("Player Summary:")
    for position in positions:
        if position.net_position > 0:
            sign = "+"
        elif position.net_position < 0:
            sign = "-"
        else:
            sign = ""
        lines.append(f"{position.name}: Chips → Final | Buy-in → Final | Net")
        lines.append(
            f"{position.starting_chips} → {position.final_chips}"
            f" | {symbol}{format_money(position.total_buy_in)} → {symbol}{format_money(position.final_value)}"
            f" | {sign}{symbol}{format_money(abs(position.net_position))}"
        )
        lines.append("")

    lines.append(f"Total Pot: {symbol}{format_money(context.total_pot)} ({context.total_chips} chips)")
    return "\n".join(lines) + "\n"
