"""
Oracle Fetcher - typed read clients for Chainlink-style aggregators.

Price feeds and L2 sequencer uptime feeds share the AggregatorV3 interface;
they differ only in how the answer is read.
"""

from dataclasses import dataclass

from web3 import Web3

from keeper.fetchers.abis import ORACLE_ABI

# Sequencer uptime feed answers
SEQUENCER_UP = 0
SEQUENCER_DOWN = 1


@dataclass(frozen=True)
class RoundData:
    round_id: int
    answer: int
    started_at: int
    updated_at: int
    answered_in_round: int


class OracleClient:
    """Price feed (8-decimal USD feeds or 18-decimal ratio feeds)."""

    def __init__(self, address: str, w3: Web3):
        self.address = Web3.to_checksum_address(address)
        self.contract = w3.eth.contract(address=self.address, abi=ORACLE_ABI)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.address})"

    def latest_answer(self) -> int:
        return int(self.contract.functions.latestAnswer().call())

    def latest_round_data(self) -> RoundData:
        raw = self.contract.functions.latestRoundData().call()
        return RoundData(*(int(v) for v in raw))


class SequencerFeedClient(OracleClient):
    """
    L2 sequencer uptime feed.

    answer == 1 means the sequencer is down; started_at is when the current
    status began.
    """

    def status(self) -> RoundData:
        return self.latest_round_data()
