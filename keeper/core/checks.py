"""
Strategy, oracle and sequencer checks.

Each check reads live contract state through a typed client and returns a
frozen state object. Read failures are logged with the name of the check
and re-raised; no check turns a failed read into a "safe" result.
"""

import logging
import time
from typing import Optional

from keeper.core.models import EPSState, ExposureState, OracleState, RiskState, SequencerState
from keeper.core.store import KeyValueStore, get_eps, get_last_round, set_eps, set_last_round
from keeper.fetchers.oracle import SEQUENCER_DOWN, OracleClient, SequencerFeedClient
from keeper.fetchers.strategy import StrategyClient
from keeper.units import EPS_SCALE, HEALTH_FACTOR_SCALE, MAX_UINT256

logger = logging.getLogger(__name__)


def health_factor(collateral: int, debt: int) -> int:
    """collateral / debt in 8 decimals, the scale of the health factor threshold."""
    if debt == 0:
        return MAX_UINT256
    return collateral * HEALTH_FACTOR_SCALE // debt


def is_strategy_at_risk(strategy: StrategyClient, threshold: int) -> RiskState:
    """
    Compare the strategy's health factor against the threshold.

    Args:
        strategy: Strategy client
        threshold: Health factor floor, 8 decimals (1.1 -> 110_000_000)

    Returns:
        RiskState with is_at_risk = health_factor < threshold
    """
    try:
        debt = strategy.debt_usd()
        collateral = strategy.collateral_usd()
    except Exception as err:
        logger.error("An error has occurred during health factor check: %s (%s)", err, strategy)
        raise

    hf = health_factor(collateral, debt)
    return RiskState(is_at_risk=hf < threshold, health_factor=hf)


def is_strategy_overexposed(strategy: StrategyClient) -> ExposureState:
    """
    Compare the live collateral ratio against the rebalance floor
    (index 1 of getCollateralRatioTargets).
    """
    try:
        current = strategy.current_collateral_ratio()
        targets = strategy.collateral_ratio_targets()
    except Exception as err:
        logger.error("An error has occurred during collateral ratio check: %s (%s)", err, strategy)
        raise

    minimum = targets.min_for_rebalance
    return ExposureState(is_over_exposed=current < minimum, current=current, min=minimum)


def equity_per_share(strategy: StrategyClient) -> int:
    """equity / totalSupply in 18 decimals. A strategy with no shares has 0."""
    try:
        equity = strategy.equity()
        total_supply = strategy.total_supply()
    except Exception as err:
        logger.error("An error has occurred during equity per share check: %s (%s)", err, strategy)
        raise

    if total_supply == 0:
        return 0
    return equity * EPS_SCALE // total_supply


def update_eps(store: KeyValueStore, strategy_address: str, eps: int) -> None:
    set_eps(store, strategy_address, eps)


def has_eps_decreased(store: KeyValueStore, strategy: StrategyClient) -> EPSState:
    """
    Compare fresh equity per share with the last persisted value, then persist
    the fresh one. The first observation of a strategy is never a decrease.
    """
    current = equity_per_share(strategy)
    try:
        previous = get_eps(store, strategy.address)
        update_eps(store, strategy.address, current)
    except Exception as err:
        logger.error("An error has occurred during equity per share check: %s (%s)", err, strategy)
        raise

    decreased = previous is not None and current < previous
    return EPSState(has_eps_decreased=decreased, previous=previous, current=current)


def is_oracle_out(store: KeyValueStore, oracle: OracleClient, max_staleness: int,
                  now: Optional[int] = None) -> OracleState:
    """
    Decide whether a price feed can no longer be trusted.

    The feed is out when its last update is older than max_staleness seconds,
    its answer is not positive, or the latest round was answered in an
    earlier round (carried-over answer).
    """
    try:
        round_data = oracle.latest_round_data()
        previous_round = get_last_round(store, oracle.address)
        set_last_round(store, oracle.address, round_data.round_id)
    except Exception as err:
        logger.error("An error has occurred during oracle check: %s (%s)", err, oracle)
        raise

    now = int(time.time()) if now is None else now
    age = max(now - round_data.updated_at, 0)

    reason = None
    if age > max_staleness:
        reason = "stale"
    elif round_data.answer <= 0:
        reason = "non-positive answer"
    elif round_data.answered_in_round < round_data.round_id:
        reason = "incomplete round"

    return OracleState(
        is_out=reason is not None,
        round_id=round_data.round_id,
        answer=round_data.answer,
        updated_at=round_data.updated_at,
        seconds_since_update=age,
        max_staleness=max_staleness,
        previous_round_id=previous_round,
        reason=reason,
    )


def is_sequencer_out(feed: Optional[SequencerFeedClient], grace_period: int,
                     now: Optional[int] = None) -> SequencerState:
    """
    Read the L2 sequencer uptime feed.

    The sequencer counts as out while it is down and for grace_period
    seconds after it comes back up. Chains without a feed are always up.
    """
    if feed is None:
        return SequencerState(is_out=False)

    try:
        status = feed.status()
    except Exception as err:
        logger.error("An error has occurred during sequencer check: %s (%s)", err, feed)
        raise

    now = int(time.time()) if now is None else now
    is_down = status.answer == SEQUENCER_DOWN
    in_grace = not is_down and now - status.started_at <= grace_period

    return SequencerState(
        is_out=is_down or in_grace,
        is_down=is_down,
        in_grace_period=in_grace,
        started_at=status.started_at,
        feed=feed.address,
    )
