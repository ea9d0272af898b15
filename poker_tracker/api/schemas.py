from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from poker_tracker.domain import MAX_PLAYERS, PlayerPosition, SettlementResult, Transaction
from poker_tracker.storage.repository import SessionRow

MAX_AMOUNT = 1_000_000_000


class CreateSessionRequest(BaseModel):
    players: list[str] = Field(
        ...,
        min_length=1,
        max_length=MAX_PLAYERS,
        description="Player names, unique ignoring case",
        examples=[["Alice", "Bob", "Carol"]],
    )
    buy_in_amount: float | None = Field(default=None, gt=0, le=MAX_AMOUNT, allow_inf_nan=False, examples=[200])
    starting_stack: int | None = Field(default=None, gt=0, description="Chips per buy-in", examples=[400])
    currency_symbol: str | None = Field(default=None, min_length=1, max_length=5, examples=["$"])

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "players": ["Alice", "Bob", "Carol"],
                    "buy_in_amount": 200,
                    "starting_stack": 400,
                    "currency_symbol": "$",
                }
            ]
        }
    }


class BuyInAmountRequest(BaseModel):
    amount: float = Field(..., gt=0, le=MAX_AMOUNT, allow_inf_nan=False, examples=[200])


class AddPlayerRequest(BaseModel):
    name: str = Field(..., examples=["Dave"])


class BuyInActionRequest(BaseModel):
    action: Literal["increment", "decrement"]


class FinalChipsRequest(BaseModel):
    chips: dict[str, int] = Field(..., examples=[{"Alice": 1000, "Bob": 400, "Carol": 200}])

    @model_validator(mode="after")
    def validate_chips(self) -> "FinalChipsRequest":
        negative = [name for name, count in self.chips.items() if count < 0]
        if negative:
            raise ValueError(f"final chips must be non-negative: {', '.join(negative)}")
        return self


class PlayerResponse(BaseModel):
    name: str
    buy_ins: int
    total_buy_in: float
    chips: int
    final_chips: int | None = None


class SessionResponse(BaseModel):
    id: int
    stage: str
    buy_in_amount: float
    starting_stack: int
    currency_symbol: str
    players: list[PlayerResponse]
    total_pot: float
    total_chips: int
    updated_at: str | None = None

    @classmethod
    def from_row(cls, row: SessionRow) -> "SessionResponse":
        players = [
            PlayerResponse(
                name=player.name,
                buy_ins=player.buy_ins,
                total_buy_in=player.buy_ins * row.buy_in_amount,
                chips=player.buy_ins * row.starting_stack,
                final_chips=player.final_chips,
            )
            for player in row.players
        ]
        return cls(
            id=row.id,
            stage=row.stage.value,
            buy_in_amount=row.buy_in_amount,
            starting_stack=row.starting_stack,
            currency_symbol=row.currency_symbol,
            players=players,
            total_pot=sum(player.total_buy_in for player in players),
            total_chips=sum(player.chips for player in players),
            updated_at=row.updated_at,
        )


class PositionResponse(BaseModel):
    name: str
    buy_ins: int
    total_buy_in: float
    final_value: float
    net_position: float
    starting_chips: int | None = None
    final_chips: int | None = None

    @classmethod
    def from_position(cls, position: PlayerPosition) -> "PositionResponse":
        return cls(
            name=position.name,
            buy_ins=position.buy_ins,
            total_buy_in=position.total_buy_in,
            final_value=position.final_value,
            net_position=position.net_position,
            starting_chips=position.starting_chips,
            final_chips=position.final_chips,
        )


class StandingResponse(BaseModel):
    session_id: int
    total_pot: float
    total_chips: int
    chip_value: float
    chip_difference: int
    ready: bool
    positions: list[PositionResponse]


class TransactionResponse(BaseModel):
    from_player: str = Field(..., serialization_alias="from")
    to_player: str = Field(..., serialization_alias="to")
    amount: Decimal

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "TransactionResponse":
        return cls(from_player=transaction.from_player, to_player=transaction.to_player, amount=transaction.amount)


class SettlementResponse(BaseModel):
    transactions: list[TransactionResponse]
    balanced: bool
    imbalance: float
    unsettled: dict[str, float]

    @classmethod
    def from_result(cls, result: SettlementResult) -> "SettlementResponse":
        return cls(
            transactions=[TransactionResponse.from_transaction(t) for t in result.transactions],
            balanced=result.balanced,
            imbalance=result.imbalance,
            unsettled=result.unsettled,
        )


class SessionSettlementResponse(SettlementResponse):
    session_id: int
    positions: list[PositionResponse]


class NetPositionInput(BaseModel):
    name: str = Field(..., min_length=1)
    net_position: float = Field(..., ge=-MAX_AMOUNT, le=MAX_AMOUNT, allow_inf_nan=False)


class SettlementRequest(BaseModel):
    positions: list[NetPositionInput] = Field(..., examples=[[{"name": "A", "net_position": 30}]])


class StakeInput(BaseModel):
    name: str = Field(..., min_length=1)
    buy_ins: int = Field(..., ge=0)
    final_chips: int | None = Field(default=None, ge=0)
    final_cash: float | None = Field(default=None, ge=0, le=MAX_AMOUNT, allow_inf_nan=False)


class PositionsRequest(BaseModel):
    players: list[StakeInput] = Field(..., min_length=1, max_length=MAX_PLAYERS)
    buy_in_amount: float = Field(..., gt=0, le=MAX_AMOUNT, allow_inf_nan=False)
    starting_stack: int | None = Field(default=None, gt=0, description="Set for chip mode")


class PositionsResponse(BaseModel):
    total_pot: float
    total_chips: int | None = None
    chip_value: float | None = None
    balanced: bool
    positions: list[PositionResponse]
