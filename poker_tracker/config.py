from __future__ import annotations

import os
from dataclasses import dataclass


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    return default if raw is None else float(raw)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    return default if raw is None else int(raw)


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str
    default_buy_in_amount: float
    default_starting_stack: int
    default_currency_symbol: str


def load_settings() -> Settings:
    return Settings(
        database_url=os.environ.get("DATABASE_URL", "sqlite:///./poker_tracker.db"),
        log_level=os.environ.get("LOG_LEVEL", "INFO").strip().upper(),
        default_buy_in_amount=_env_float("DEFAULT_BUY_IN_AMOUNT", 200.0),
        default_starting_stack=_env_int("DEFAULT_STARTING_STACK", 400),
        default_currency_symbol=os.environ.get("DEFAULT_CURRENCY_SYMBOL", "$").strip() or "$",
    )


settings = load_settings()
