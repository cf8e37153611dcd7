"""
Pool Fetcher - typed read client for an Aave v3 lending pool.
"""

from dataclasses import dataclass

from web3 import Web3

from keeper.fetchers.abis import POOL_ABI


@dataclass(frozen=True)
class ReserveData:
    """IPool.getReserveData() result, in struct order. Rates are RAY."""

    configuration: int
    liquidity_index: int
    current_liquidity_rate: int
    variable_borrow_index: int
    current_variable_borrow_rate: int
    current_stable_borrow_rate: int
    last_update_timestamp: int
    id: int
    a_token_address: str
    stable_debt_token_address: str
    variable_debt_token_address: str
    interest_rate_strategy_address: str
    accrued_to_treasury: int
    unbacked: int
    isolation_mode_total_debt: int


class PoolClient:

    def __init__(self, address: str, w3: Web3):
        self.address = Web3.to_checksum_address(address)
        self.contract = w3.eth.contract(address=self.address, abi=POOL_ABI)

    def __repr__(self) -> str:
        return f"PoolClient({self.address})"

    def get_reserve_data(self, asset: str) -> ReserveData:
        raw = self.contract.functions.getReserveData(Web3.to_checksum_address(asset)).call()
        return ReserveData(*raw)
