"""
Strategy Fetcher - typed read client for a loop strategy contract.
"""

from dataclasses import dataclass

from web3 import Web3

from keeper.fetchers.abis import STRATEGY_ABI


@dataclass(frozen=True)
class CollateralRatioTargets:
    """getCollateralRatioTargets() result. Index 1 is the rebalance floor."""

    target: int
    min_for_rebalance: int
    max_for_rebalance: int
    min_for_withdraw_rebalance: int
    max_for_deposit_rebalance: int


class StrategyClient:
    """
    Read-only view of a strategy.

    Args:
        address: Strategy address (any case, stored checksummed)
        w3: Shared Web3 connection
    """

    def __init__(self, address: str, w3: Web3):
        self.address = Web3.to_checksum_address(address)
        self.contract = w3.eth.contract(address=self.address, abi=STRATEGY_ABI)

    def __repr__(self) -> str:
        return f"StrategyClient({self.address})"

    def rebalance_needed(self) -> bool:
        return bool(self.contract.functions.rebalanceNeeded().call())

    def debt_usd(self) -> int:
        return int(self.contract.functions.debtUSD().call())

    def collateral_usd(self) -> int:
        return int(self.contract.functions.collateralUSD().call())

    def current_collateral_ratio(self) -> int:
        return int(self.contract.functions.currentCollateralRatio().call())

    def collateral_ratio_targets(self) -> CollateralRatioTargets:
        raw = self.contract.functions.getCollateralRatioTargets().call()
        return CollateralRatioTargets(*(int(v) for v in raw))

    def equity(self) -> int:
        return int(self.contract.functions.equity().call())

    def total_supply(self) -> int:
        return int(self.contract.functions.totalSupply().call())
