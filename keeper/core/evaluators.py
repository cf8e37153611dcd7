"""
Evaluators - one per kind of matched event.

Each evaluator reads the contracts involved, runs the relevant checks and
appends a Match to the caller's list for every adverse finding.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from web3 import Web3

from keeper.config.deployment import DeploymentConfig
from keeper.config.settings import EXECUTOR_MAX_WORKERS
from keeper.core.checks import (
    equity_per_share,
    has_eps_decreased,
    is_oracle_out,
    is_sequencer_out,
    is_strategy_at_risk,
    is_strategy_overexposed,
    update_eps,
)
from keeper.core.models import Match, create_match
from keeper.core.store import KeyValueStore
from keeper.fetchers.oracle import OracleClient, SequencerFeedClient
from keeper.fetchers.pool import PoolClient
from keeper.fetchers.strategy import StrategyClient

logger = logging.getLogger(__name__)

# LiquidationCall(collateralAsset, debtAsset, ...) carries the borrowed reserve second
POOL_LIQUIDATION_SIG = "LiquidationCall(address,address,address,uint256,uint256,address,bool)"


@dataclass
class DispatchContext:
    """Collaborators shared by every evaluator of one invocation."""

    w3: Web3
    deployment: DeploymentConfig
    store: KeyValueStore
    max_workers: int = EXECUTOR_MAX_WORKERS

    def strategy(self, address: str) -> StrategyClient:
        return StrategyClient(address, self.w3)

    def oracle(self, address: str) -> OracleClient:
        return OracleClient(address, self.w3)

    def pool(self, address: str) -> PoolClient:
        return PoolClient(address, self.w3)

    def sequencer_feed(self) -> Optional[SequencerFeedClient]:
        if not self.deployment.sequencer_uptime_feed:
            return None
        return SequencerFeedClient(self.deployment.sequencer_uptime_feed, self.w3)


def handle_withdraw_or_deposit(reason_type: str, reason: Dict[str, Any], event_hash: str,
                               matches: List[Match], ctx: DispatchContext) -> None:
    """
    Check health factor, exposure and equity per share of the strategy that
    emitted the Deposit/Withdraw event. Up to three matches, one per finding.
    """
    strategy = ctx.strategy(reason["address"])

    with ThreadPoolExecutor(max_workers=ctx.max_workers) as executor:
        risk_future = executor.submit(
            is_strategy_at_risk, strategy, ctx.deployment.health_factor_threshold
        )
        exposure_future = executor.submit(is_strategy_overexposed, strategy)
        eps_future = executor.submit(has_eps_decreased, ctx.store, strategy)

        risk_state = risk_future.result()
        exposure_state = exposure_future.result()
        eps_state = eps_future.result()

    logger.info("riskState: %s", risk_state)
    logger.info("exposureState: %s", exposure_state)
    logger.info("EPSState: %s", eps_state)

    if risk_state.is_at_risk:
        matches.append(create_match(event_hash, reason_type, {
            "strategy": strategy.address, "riskState": risk_state
        }))
    if exposure_state.is_over_exposed:
        matches.append(create_match(event_hash, reason_type, {
            "strategy": strategy.address, "exposureState": exposure_state
        }))
    if eps_state.has_eps_decreased:
        matches.append(create_match(event_hash, reason_type, {
            "strategy": strategy.address, "EPSState": eps_state
        }))


def handle_price_update(reason: Dict[str, Any], event_hash: str,
                        matches: List[Match], ctx: DispatchContext) -> None:
    """
    Re-price every strategy tied to the updated oracle and check the oracle
    and the L2 sequencer. One consolidated match when anything needs attention.
    """
    oracle = ctx.oracle(reason["address"])
    latest_answer = oracle.latest_answer()
    strategies_to_rebalance = []

    for address in ctx.deployment.strategies_for_oracle(oracle.address):
        strategy = ctx.strategy(address)

        # price moves change equity per share organically, so re-baseline it
        update_eps(ctx.store, strategy.address, equity_per_share(strategy))

        if strategy.rebalance_needed():
            strategies_to_rebalance.append(strategy.address)

    with ThreadPoolExecutor(max_workers=ctx.max_workers) as executor:
        oracle_future = executor.submit(
            is_oracle_out, ctx.store, oracle, ctx.deployment.max_staleness_for(oracle.address)
        )
        sequencer_future = executor.submit(
            is_sequencer_out, ctx.sequencer_feed(), ctx.deployment.sequencer_grace_period
        )
        oracle_state = oracle_future.result()
        sequencer_state = sequencer_future.result()

    logger.info("strategiesToRebalance: %s", strategies_to_rebalance)
    logger.info("oracleState: %s", oracle_state)
    logger.info("sequencerState: %s", sequencer_state)

    if strategies_to_rebalance or oracle_state.is_out or sequencer_state.is_out:
        matches.append(create_match(event_hash, "priceUpdate", {
            "oracle": oracle.address,
            "latestAnswer": latest_answer,
            "strategiesToRebalance": strategies_to_rebalance,
            "oracleState": oracle_state,
            "isSequencerOut": sequencer_state.is_out,
            "sequencerState": sequencer_state,
        }))


def handle_pool_action(reason: Dict[str, Any], event_hash: str,
                       matches: List[Match], ctx: DispatchContext) -> None:
    """
    Compare the reserve's variable borrow rate with the interest ceiling of
    every strategy borrowing it. Reserves outside the deployment are ignored.
    """
    reserve_index = 1 if reason["signature"] == POOL_LIQUIDATION_SIG else 0
    reserve = Web3.to_checksum_address(reason["args"][reserve_index])
    logger.info("reserveAddress: %s", reserve)

    if not ctx.deployment.is_monitored_reserve(reserve):
        return

    pool = ctx.pool(reason["address"])
    reserve_data = pool.get_reserve_data(reserve)
    variable_borrow_rate = reserve_data.current_variable_borrow_rate

    affected_strategies = []
    for strategy in ctx.deployment.strategies_for_debt_token(reserve):
        threshold = ctx.deployment.interest_threshold(strategy)
        if threshold is None:
            logger.warning("No interest rate threshold configured for %s, skipping", strategy)
            continue
        if threshold < variable_borrow_rate:
            affected_strategies.append(strategy)

    logger.info("variableBorrowRate: %s", variable_borrow_rate)
    logger.info("affectedStrategies: %s", affected_strategies)

    if affected_strategies:
        matches.append(create_match(event_hash, "borrowRate", {
            "reserve": reserve,
            "currBorrowRate": variable_borrow_rate,
            "affectedStrategies": affected_strategies,
        }))
