"""
Deployment tables - which strategies, oracles and debt tokens the keeper watches.

Loaded from a JSON file so each protocol deployment can override them without
code changes. Thresholds are written as human decimals and converted to the
fixed-point scale they are compared in:

- health_factor_threshold: "1.1" -> 8 decimals
- interest_rate_threshold_pct: "3.0" (percent) -> RAY
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from web3 import Web3

from keeper.config.settings import DEPLOYMENT_FILE
from keeper.units import HEALTH_FACTOR_DECIMALS, RAY_DECIMALS, parse_units

DEFAULT_ORACLE_MAX_STALENESS = 86400
DEFAULT_SEQUENCER_GRACE_PERIOD = 3600


class DeploymentConfigError(ValueError):
    """Raised when a deployment file cannot be turned into a DeploymentConfig."""

    def __init__(self, issues: List[str]):
        self.issues = issues
        super().__init__("Invalid deployment config: " + "; ".join(issues))


@dataclass(frozen=True)
class DeploymentConfig:
    """
    Per-deployment monitoring tables. All addresses are checksummed.

    Attributes:
        oracle_to_strategies: oracle -> strategies priced by it
        debt_token_to_strategies: lending pool reserve -> strategies borrowing it
        strategy_interest_threshold: strategy -> max variable borrow rate (RAY)
        health_factor_threshold: global health factor floor (8 decimals)
        oracle_max_staleness: oracle -> seconds before its answer counts as stale
        sequencer_uptime_feed: L2 sequencer uptime feed, if the chain has one
    """

    name: str
    health_factor_threshold: int
    oracle_to_strategies: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    debt_token_to_strategies: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    strategy_interest_threshold: Dict[str, int] = field(default_factory=dict)
    oracle_max_staleness: Dict[str, int] = field(default_factory=dict)
    default_oracle_max_staleness: int = DEFAULT_ORACLE_MAX_STALENESS
    sequencer_uptime_feed: Optional[str] = None
    sequencer_grace_period: int = DEFAULT_SEQUENCER_GRACE_PERIOD
    labels: Dict[str, str] = field(default_factory=dict)

    def strategies_for_oracle(self, oracle: str) -> Tuple[str, ...]:
        return self.oracle_to_strategies.get(Web3.to_checksum_address(oracle), ())

    def strategies_for_debt_token(self, token: str) -> Tuple[str, ...]:
        return self.debt_token_to_strategies.get(Web3.to_checksum_address(token), ())

    def is_monitored_reserve(self, token: str) -> bool:
        return Web3.to_checksum_address(token) in self.debt_token_to_strategies

    def interest_threshold(self, strategy: str) -> Optional[int]:
        return self.strategy_interest_threshold.get(Web3.to_checksum_address(strategy))

    def max_staleness_for(self, oracle: str) -> int:
        return self.oracle_max_staleness.get(
            Web3.to_checksum_address(oracle), self.default_oracle_max_staleness
        )

    def label(self, address: str) -> str:
        checksummed = Web3.to_checksum_address(address)
        return self.labels.get(checksummed, checksummed)


def _checksum(address: Any, where: str, issues: List[str]) -> Optional[str]:
    if not isinstance(address, str) or not Web3.is_address(address):
        issues.append(f"{where}: invalid address {address!r}")
        return None
    return Web3.to_checksum_address(address)


def _parse_threshold(value: Any, decimals: int, where: str, issues: List[str]) -> Optional[int]:
    try:
        return parse_units(str(value), decimals)
    except (ArithmeticError, ValueError) as e:
        issues.append(f"{where}: invalid threshold {value!r} ({e})")
        return None


def validate_deployment(raw: Dict[str, Any]) -> List[str]:
    """
    Check a raw deployment dict for problems.

    Returns:
        List of human-readable issues (empty if the config is usable)
    """
    try:
        _build(raw)
    except DeploymentConfigError as e:
        return e.issues
    return []


def parse_deployment(raw: Dict[str, Any]) -> DeploymentConfig:
    """Build a DeploymentConfig from a raw dict, raising on any issue."""
    return _build(raw)


def _build(raw: Dict[str, Any]) -> DeploymentConfig:
    issues: List[str] = []
    labels: Dict[str, str] = {}

    if "health_factor_threshold" not in raw:
        issues.append("health_factor_threshold: missing")
        hf_threshold = None
    else:
        hf_threshold = _parse_threshold(
            raw["health_factor_threshold"], HEALTH_FACTOR_DECIMALS, "health_factor_threshold", issues
        )

    # Strategies and their borrow rate ceilings
    interest_thresholds: Dict[str, int] = {}
    known_strategies = set()
    for address, entry in (raw.get("strategies") or {}).items():
        strategy = _checksum(address, "strategies", issues)
        if strategy is None:
            continue
        known_strategies.add(strategy)
        if entry.get("label"):
            labels[strategy] = entry["label"]
        if "interest_rate_threshold_pct" in entry:
            # percent -> fraction in RAY
            ray_pct = _parse_threshold(
                entry["interest_rate_threshold_pct"], RAY_DECIMALS, f"strategies.{strategy}", issues
            )
            if ray_pct is not None:
                interest_thresholds[strategy] = ray_pct // 100

    def _strategy_list(values: Any, where: str) -> Tuple[str, ...]:
        result = []
        for value in values or []:
            strategy = _checksum(value, where, issues)
            if strategy is None:
                continue
            if strategy not in known_strategies:
                issues.append(f"{where}: strategy {strategy} is not declared under 'strategies'")
            result.append(strategy)
        return tuple(result)

    default_staleness = int(raw.get("default_oracle_max_staleness_seconds", DEFAULT_ORACLE_MAX_STALENESS))

    oracle_to_strategies: Dict[str, Tuple[str, ...]] = {}
    oracle_staleness: Dict[str, int] = {}
    for address, entry in (raw.get("oracles") or {}).items():
        oracle = _checksum(address, "oracles", issues)
        if oracle is None:
            continue
        if entry.get("label"):
            labels[oracle] = entry["label"]
        oracle_to_strategies[oracle] = _strategy_list(entry.get("strategies"), f"oracles.{oracle}")
        if "max_staleness_seconds" in entry:
            oracle_staleness[oracle] = int(entry["max_staleness_seconds"])

    debt_token_to_strategies: Dict[str, Tuple[str, ...]] = {}
    for address, entry in (raw.get("debt_tokens") or {}).items():
        token = _checksum(address, "debt_tokens", issues)
        if token is None:
            continue
        if entry.get("label"):
            labels[token] = entry["label"]
        strategies = _strategy_list(entry.get("strategies"), f"debt_tokens.{token}")
        for strategy in strategies:
            if strategy not in interest_thresholds:
                issues.append(
                    f"debt_tokens.{token}: strategy {strategy} has no interest_rate_threshold_pct"
                )
        debt_token_to_strategies[token] = strategies

    sequencer = raw.get("sequencer") or {}
    uptime_feed = None
    if sequencer.get("uptime_feed"):
        uptime_feed = _checksum(sequencer["uptime_feed"], "sequencer.uptime_feed", issues)

    if issues:
        raise DeploymentConfigError(issues)

    return DeploymentConfig(
        name=raw.get("name", "unnamed"),
        health_factor_threshold=hf_threshold,
        oracle_to_strategies=oracle_to_strategies,
        debt_token_to_strategies=debt_token_to_strategies,
        strategy_interest_threshold=interest_thresholds,
        oracle_max_staleness=oracle_staleness,
        default_oracle_max_staleness=default_staleness,
        sequencer_uptime_feed=uptime_feed,
        sequencer_grace_period=int(sequencer.get("grace_period_seconds", DEFAULT_SEQUENCER_GRACE_PERIOD)),
        labels=labels,
    )


def load_deployment(file_path: str = None) -> DeploymentConfig:
    """
    Load a deployment from a JSON file.

    Args:
        file_path: Path to JSON deployment file (defaults to KEEPER_DEPLOYMENT_FILE)

    Returns:
        Parsed DeploymentConfig
    """
    path = Path(file_path or DEPLOYMENT_FILE)
    with open(path, 'r') as f:
        raw = json.load(f)
    raw.setdefault("name", path.stem)
    return parse_deployment(raw)
