from .positions import (
    PlayerPosition,
    PlayerStake,
    PricingContext,
    chip_count_difference,
    chip_value,
    compute_net_positions,
    total_chips,
    total_pot,
    validate_final_standings,
)
from .session import (
    MAX_PLAYERS,
    MIN_PLAYERS,
    DivisionUndefined,
    DomainValidationError,
    SessionNotFoundError,
    SessionSettings,
    SessionStage,
    StageConflictError,
    advance_stage,
    ensure_can_join,
    ensure_stage,
    ensure_unique_players,
    normalize_player,
    player_key,
)
from .settlement import (
    SETTLEMENT_EPSILON,
    SettlementResult,
    Transaction,
    calculate_settlement,
    settle,
    to_cents,
)

__all__ = [
    "MAX_PLAYERS",
    "MIN_PLAYERS",
    "SETTLEMENT_EPSILON",
    "DivisionUndefined",
    "DomainValidationError",
    "PlayerPosition",
    "PlayerStake",
    "PricingContext",
    "SessionNotFoundError",
    "SessionSettings",
    "SessionStage",
    "SettlementResult",
    "StageConflictError",
    "Transaction",
    "advance_stage",
    "calculate_settlement",
    "chip_count_difference",
    "chip_value",
    "compute_net_positions",
    "ensure_can_join",
    "ensure_stage",
    "ensure_unique_players",
    "normalize_player",
    "player_key",
    "settle",
    "to_cents",
    "total_chips",
    "total_pot",
    "validate_final_standings",
]
