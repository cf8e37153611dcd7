"""
Pytest configuration and fixtures for the loop strategy keeper.

Contract reads are replaced by MagicMock clients so every evaluator can be
driven without an RPC connection. Addresses are digit-only so their
checksummed form equals the literal.
"""

import sys
import time
from pathlib import Path
from typing import Any, Dict
from unittest.mock import MagicMock

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from keeper.config.deployment import parse_deployment
from keeper.core.evaluators import DispatchContext
from keeper.core.store import InMemoryKeyValueStore
from keeper.fetchers.oracle import OracleClient, RoundData, SequencerFeedClient
from keeper.fetchers.pool import PoolClient, ReserveData
from keeper.fetchers.strategy import CollateralRatioTargets, StrategyClient
from keeper.units import RAY


STRATEGY_A = "0x" + "1" * 40      # 3% borrow rate ceiling
STRATEGY_B = "0x" + "2" * 40      # 5% borrow rate ceiling
ORACLE = "0x" + "3" * 40          # prices both strategies
ORACLE_SINGLE = "0x" + "4" * 40   # prices STRATEGY_B only
RESERVE = "0x" + "5" * 40         # borrowed by both strategies
RESERVE_B = "0x" + "6" * 40       # borrowed by STRATEGY_B only
UNMAPPED = "0x" + "7" * 40
POOL = "0x" + "8" * 40
SEQUENCER_FEED = "0x" + "9" * 40

EVENT_HASH = "0x" + "ab" * 32

# RAY-scaled yearly rates
RATE_3_PCT = 3 * RAY // 100
RATE_4_PCT = 4 * RAY // 100
RATE_5_PCT = 5 * RAY // 100


# =============================================================================
# DEPLOYMENT FIXTURES
# =============================================================================

@pytest.fixture
def raw_deployment() -> Dict[str, Any]:
    """Deployment tables as they appear in a deployment JSON file."""
    return {
        "name": "test-deployment",
        "health_factor_threshold": "1.1",
        "default_oracle_max_staleness_seconds": 86400,
        "strategies": {
            STRATEGY_A: {"label": "3x wstETH/WETH", "interest_rate_threshold_pct": "3.0"},
            STRATEGY_B: {"label": "1.5x WETH/USDC", "interest_rate_threshold_pct": "5.0"},
        },
        "oracles": {
            ORACLE: {"label": "ETH-USD", "max_staleness_seconds": 1200,
                     "strategies": [STRATEGY_A, STRATEGY_B]},
            ORACLE_SINGLE: {"label": "USDC-USD", "strategies": [STRATEGY_B]},
        },
        "debt_tokens": {
            RESERVE: {"label": "WETH", "strategies": [STRATEGY_A, STRATEGY_B]},
            RESERVE_B: {"label": "USDC", "strategies": [STRATEGY_B]},
        },
        "sequencer": {"uptime_feed": SEQUENCER_FEED, "grace_period_seconds": 3600},
    }


@pytest.fixture
def deployment(raw_deployment):
    return parse_deployment(raw_deployment)


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


# =============================================================================
# CONTRACT CLIENT MOCKS
# =============================================================================

@pytest.fixture
def mock_web3():
    """Mock Web3 instance for testing without blockchain connection."""
    mock = MagicMock()
    mock.eth.contract.return_value = MagicMock()
    mock.is_connected.return_value = True
    return mock


def make_strategy(address: str, **overrides) -> MagicMock:
    """
    Healthy strategy: health factor 3.0, collateral ratio inside its band,
    equity per share 1.0, no rebalance needed.
    """
    values = {
        "debt_usd": 100 * 10 ** 8,
        "collateral_usd": 300 * 10 ** 8,
        "current_collateral_ratio": 3 * 10 ** 8,
        "collateral_ratio_targets": CollateralRatioTargets(
            3 * 10 ** 8, 28 * 10 ** 7, 32 * 10 ** 7, 27 * 10 ** 7, 33 * 10 ** 7
        ),
        "equity": 1000 * 10 ** 18,
        "total_supply": 1000 * 10 ** 18,
        "rebalance_needed": False,
    }
    values.update(overrides)

    mock = MagicMock(spec=StrategyClient)
    mock.address = address
    for name, value in values.items():
        getattr(mock, name).return_value = value
    return mock


def make_oracle(address: str, answer: int = 2000 * 10 ** 8, age: int = 60,
                round_id: int = 10, answered_in_round: int = None) -> MagicMock:
    now = int(time.time())
    mock = MagicMock(spec=OracleClient)
    mock.address = address
    mock.latest_answer.return_value = answer
    mock.latest_round_data.return_value = RoundData(
        round_id, answer, now - age, now - age,
        round_id if answered_in_round is None else answered_in_round,
    )
    return mock


def make_sequencer_feed(answer: int = 0, started_ago: int = 7 * 86400) -> MagicMock:
    now = int(time.time())
    mock = MagicMock(spec=SequencerFeedClient)
    mock.address = SEQUENCER_FEED
    mock.status.return_value = RoundData(1, answer, now - started_ago, now - started_ago, 1)
    return mock


def make_reserve_data(variable_borrow_rate: int) -> ReserveData:
    return ReserveData(
        0, RAY, 2 * RAY // 100, RAY, variable_borrow_rate, 0,
        int(time.time()), 1,
        "0x" + "a" * 40, "0x" + "b" * 40, "0x" + "c" * 40, "0x" + "d" * 40,
        0, 0, 0,
    )


def make_pool(variable_borrow_rate: int = RATE_4_PCT) -> MagicMock:
    mock = MagicMock(spec=PoolClient)
    mock.address = POOL
    mock.get_reserve_data.return_value = make_reserve_data(variable_borrow_rate)
    return mock


class FakeChain:
    """Mock clients keyed by address, served through DispatchContext factories."""

    def __init__(self):
        self.strategies = {
            STRATEGY_A: make_strategy(STRATEGY_A),
            STRATEGY_B: make_strategy(STRATEGY_B),
        }
        self.oracles = {
            ORACLE: make_oracle(ORACLE),
            ORACLE_SINGLE: make_oracle(ORACLE_SINGLE, answer=10 ** 8),
            UNMAPPED: make_oracle(UNMAPPED),
        }
        self.pool = make_pool()
        self.sequencer_feed = make_sequencer_feed()


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def ctx(chain, deployment, store) -> DispatchContext:
    """
    DispatchContext whose client factories return the FakeChain mocks.

    Usage:
        def test_something(ctx, chain):
            chain.strategies[STRATEGY_A].debt_usd.return_value = ...
    """
    context = DispatchContext(w3=MagicMock(), deployment=deployment, store=store, max_workers=2)
    context.strategy = lambda address: chain.strategies[address]
    context.oracle = lambda address: chain.oracles[address]
    context.pool = lambda address: chain.pool
    context.sequencer_feed = lambda: chain.sequencer_feed
    return context


def match_reason(signature: str, address: str, args=None) -> Dict[str, Any]:
    return {"signature": signature, "address": address, "args": list(args or [])}


def event(reasons, event_hash: str = EVENT_HASH) -> Dict[str, Any]:
    return {"hash": event_hash, "matchReasons": list(reasons)}
