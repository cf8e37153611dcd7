"""Core keeper components."""

from .models import (
    Match,
    RiskState,
    ExposureState,
    EPSState,
    OracleState,
    SequencerState,
    create_match,
)

from .store import (
    KeyValueStore,
    InMemoryKeyValueStore,
    PostgresKeyValueStore,
    store_from_payload,
)

from .checks import (
    is_strategy_at_risk,
    is_strategy_overexposed,
    equity_per_share,
    has_eps_decreased,
    update_eps,
    is_oracle_out,
    is_sequencer_out,
)

from .evaluators import (
    DispatchContext,
    handle_withdraw_or_deposit,
    handle_price_update,
    handle_pool_action,
)

from .dispatcher import EvaluationError, dispatch_events, reason_type

__all__ = [
    # Models
    "Match",
    "RiskState",
    "ExposureState",
    "EPSState",
    "OracleState",
    "SequencerState",
    "create_match",
    # Store
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "PostgresKeyValueStore",
    "store_from_payload",
    # Checks
    "is_strategy_at_risk",
    "is_strategy_overexposed",
    "equity_per_share",
    "has_eps_decreased",
    "update_eps",
    "is_oracle_out",
    "is_sequencer_out",
    # Evaluators
    "DispatchContext",
    "handle_withdraw_or_deposit",
    "handle_price_update",
    "handle_pool_action",
    # Dispatcher
    "EvaluationError",
    "dispatch_events",
    "reason_type",
]
