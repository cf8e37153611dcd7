"""
Contract read clients.

Each client is built from an address and a shared Web3 connection:
- strategy: loop strategy health, exposure and equity views
- oracle: Chainlink price feeds and L2 sequencer uptime feeds
- pool: Aave v3 reserve data
"""

from .strategy import StrategyClient, CollateralRatioTargets
from .oracle import OracleClient, SequencerFeedClient, RoundData, SEQUENCER_UP, SEQUENCER_DOWN
from .pool import PoolClient, ReserveData

__all__ = [
    "StrategyClient",
    "CollateralRatioTargets",
    "OracleClient",
    "SequencerFeedClient",
    "RoundData",
    "SEQUENCER_UP",
    "SEQUENCER_DOWN",
    "PoolClient",
    "ReserveData",
]
