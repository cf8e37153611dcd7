"""
Check results and match records - all frozen (immutable).

to_dict() renders the camelCase shape the monitoring platform expects, with
integers as decimal strings (uint256 values overflow JSON numbers).
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Optional

MATCH_TYPES = ("withdraw", "deposit", "priceUpdate", "borrowRate")


def serialize(value: Any) -> Any:
    """Recursively convert states, tuples and big ints to JSON-safe values."""
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, int):
        return str(value)
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {k: serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize(v) for v in value]
    return value


@dataclass(frozen=True)
class RiskState:
    """healthFactor = collateral / debt in 8 decimals."""

    is_at_risk: bool
    health_factor: int

    def to_dict(self) -> Dict[str, Any]:
        return {"isAtRisk": self.is_at_risk, "healthFactor": serialize(self.health_factor)}


@dataclass(frozen=True)
class ExposureState:
    """current = live collateral ratio, min = rebalance floor."""

    is_over_exposed: bool
    current: int
    min: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isOverExposed": self.is_over_exposed,
            "current": serialize(self.current),
            "min": serialize(self.min),
        }


@dataclass(frozen=True)
class EPSState:
    """previous is None on the first observation of a strategy."""

    has_eps_decreased: bool
    previous: Optional[int]
    current: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasEPSDecreased": self.has_eps_decreased,
            "previous": serialize(self.previous),
            "current": serialize(self.current),
        }


@dataclass(frozen=True)
class OracleState:
    is_out: bool
    round_id: int
    answer: int
    updated_at: int
    seconds_since_update: int
    max_staleness: int
    previous_round_id: Optional[int] = None
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isOut": self.is_out,
            "roundId": serialize(self.round_id),
            "answer": serialize(self.answer),
            "updatedAt": serialize(self.updated_at),
            "secondsSinceUpdate": serialize(self.seconds_since_update),
            "maxStaleness": serialize(self.max_staleness),
            "previousRoundId": serialize(self.previous_round_id),
            "reason": self.reason,
        }


@dataclass(frozen=True)
class SequencerState:
    """is_out covers both a down sequencer and one still inside its grace period."""

    is_out: bool
    is_down: bool = False
    in_grace_period: bool = False
    started_at: Optional[int] = None
    feed: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isOut": self.is_out,
            "isDown": self.is_down,
            "inGracePeriod": self.in_grace_period,
            "startedAt": serialize(self.started_at),
            "feed": self.feed,
        }


@dataclass(frozen=True)
class Match:
    """One adverse finding tied to the event that triggered it."""

    event_hash: str
    type: str
    metadata: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        if self.type not in MATCH_TYPES:
            raise ValueError(f"Unknown match type: {self.type}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hash": self.event_hash,
            "metadata": {"type": self.type, **serialize(self.metadata)},
        }


def create_match(event_hash: str, match_type: str, metadata: Dict[str, Any]) -> Match:
    """Snapshot metadata read-only; lists become tuples."""
    frozen = {k: tuple(v) if isinstance(v, list) else v for k, v in metadata.items()}
    return Match(event_hash=event_hash, type=match_type, metadata=MappingProxyType(frozen))
