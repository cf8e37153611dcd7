"""
Keeper alerts - turn adverse check results into channel notifications.

send_*_alert helpers run their check, send only when the result is adverse
and return the state so callers can also report it. notify_matches sends
alerts for matches that were already evaluated.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from web3 import Web3

from keeper.config.deployment import DeploymentConfig
from keeper.config.settings import ALERT_CONFIG
from keeper.core.checks import (
    has_eps_decreased,
    is_oracle_out,
    is_sequencer_out,
    is_strategy_at_risk,
    is_strategy_overexposed,
)
from keeper.core.models import (
    EPSState,
    ExposureState,
    Match,
    OracleState,
    RiskState,
    SequencerState,
)
from keeper.core.store import KeyValueStore
from keeper.fetchers.oracle import OracleClient, SequencerFeedClient
from keeper.fetchers.strategy import StrategyClient
from keeper.notifications.slack import send_slack_alert
from keeper.notifications.telegram import send_telegram_alert
from keeper.units import EPS_DECIMALS, HEALTH_FACTOR_DECIMALS, MAX_UINT256, RAY_DECIMALS, format_units

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationClient:
    """Configured alert channels. Unset channels are skipped."""

    slack_webhook: Optional[str] = None
    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None

    @classmethod
    def from_settings(cls) -> "NotificationClient":
        return cls(
            slack_webhook=ALERT_CONFIG.get("slack_webhook"),
            telegram_bot_token=ALERT_CONFIG.get("telegram_bot_token"),
            telegram_chat_id=ALERT_CONFIG.get("telegram_chat_id"),
        )

    def channels(self) -> List[str]:
        channels = []
        if self.telegram_bot_token and self.telegram_chat_id:
            channels.append("telegram")
        if self.slack_webhook:
            channels.append("slack")
        return channels

    def send(self, alert: Dict[str, Any]) -> bool:
        """Send to every configured channel. True if at least one accepted it."""
        sent = False
        for channel in self.channels():
            if channel == "telegram":
                ok = send_telegram_alert(alert, self.telegram_bot_token, self.telegram_chat_id)
            else:
                ok = send_slack_alert(alert, self.slack_webhook)
            sent = sent or ok
        return sent


def check_alert_channels_exist(client: NotificationClient,
                               required_channel: Optional[str] = None) -> bool:
    required_channel = required_channel or ALERT_CONFIG.get("required_channel")
    channels = client.channels()
    if not channels:
        logger.error("No alert notification channels exist.")
        return False
    if required_channel and required_channel not in channels:
        logger.error("No alert notification channels exist.")
        return False
    return True


# =============================================================================
# ALERT BUILDERS
# =============================================================================

def _health_factor_text(value: int) -> str:
    return "no debt" if value == MAX_UINT256 else format_units(value, HEALTH_FACTOR_DECIMALS)


def health_factor_alert(strategy: str, state: RiskState, threshold: int) -> Dict[str, Any]:
    return {
        "severity": "critical",
        "title": "Strategy health factor below threshold",
        "subject": strategy,
        "fields": {
            "health_factor": _health_factor_text(state.health_factor),
            "threshold": format_units(threshold, HEALTH_FACTOR_DECIMALS),
        },
    }


def exposure_alert(strategy: str, state: ExposureState) -> Dict[str, Any]:
    return {
        "severity": "warning",
        "title": "Strategy collateral ratio below rebalance floor",
        "subject": strategy,
        "fields": {"current_ratio": state.current, "min_for_rebalance": state.min},
    }


def eps_alert(strategy: str, state: EPSState) -> Dict[str, Any]:
    return {
        "severity": "warning",
        "title": "Strategy equity per share decreased",
        "subject": strategy,
        "fields": {
            "previous": format_units(state.previous, EPS_DECIMALS) if state.previous is not None else "n/a",
            "current": format_units(state.current, EPS_DECIMALS),
        },
    }


def oracle_outage_alert(oracle: str, state: OracleState) -> Dict[str, Any]:
    return {
        "severity": "critical",
        "title": f"Oracle out ({state.reason})",
        "subject": oracle,
        "fields": {
            "round_id": state.round_id,
            "seconds_since_update": state.seconds_since_update,
            "max_staleness": state.max_staleness,
        },
    }


def sequencer_outage_alert(state: SequencerState) -> Dict[str, Any]:
    return {
        "severity": "critical",
        "title": "Sequencer down" if state.is_down else "Sequencer in grace period",
        "subject": state.feed or "sequencer",
        "fields": {"started_at": state.started_at},
    }


def rebalance_alert(oracle: str, strategies: List[str]) -> Dict[str, Any]:
    return {
        "severity": "warning",
        "title": "Strategies need rebalance",
        "subject": oracle,
        "fields": {"strategies": ", ".join(strategies)},
    }


def borrow_rate_alert(reserve: str, rate: int, strategies: List[str]) -> Dict[str, Any]:
    return {
        "severity": "warning",
        "title": "Variable borrow rate above strategy threshold",
        "subject": reserve,
        "fields": {
            "variable_borrow_rate_pct": format_units(rate * 100, RAY_DECIMALS),
            "strategies": ", ".join(strategies),
        },
    }


# =============================================================================
# CHECK-AND-SEND HELPERS
# =============================================================================

def send_health_factor_alert(client: NotificationClient, strategy: StrategyClient,
                             threshold: int) -> RiskState:
    state = is_strategy_at_risk(strategy, threshold)
    if state.is_at_risk:
        client.send(health_factor_alert(strategy.address, state, threshold))
    return state


def send_exposure_alert(client: NotificationClient, strategy: StrategyClient) -> ExposureState:
    state = is_strategy_overexposed(strategy)
    if state.is_over_exposed:
        client.send(exposure_alert(strategy.address, state))
    return state


def send_eps_alert(client: NotificationClient, store: KeyValueStore,
                   strategy: StrategyClient) -> EPSState:
    state = has_eps_decreased(store, strategy)
    if state.has_eps_decreased:
        client.send(eps_alert(strategy.address, state))
    return state


def send_oracle_outage_alert(client: NotificationClient, store: KeyValueStore,
                             oracle: OracleClient, max_staleness: int) -> OracleState:
    state = is_oracle_out(store, oracle, max_staleness)
    if state.is_out:
        client.send(oracle_outage_alert(oracle.address, state))
    return state


def send_sequencer_outage_alert(client: NotificationClient, feed: Optional[SequencerFeedClient],
                                grace_period: int) -> SequencerState:
    state = is_sequencer_out(feed, grace_period)
    if state.is_out:
        client.send(sequencer_outage_alert(state))
    return state


# =============================================================================
# MATCH ROUTING
# =============================================================================

def alerts_for_match(match: Match, health_factor_threshold: int) -> List[Dict[str, Any]]:
    """Alerts describing one match. Strategy matches carry exactly one state."""
    metadata = match.metadata
    alerts = []

    if match.type in ("withdraw", "deposit"):
        subject = metadata.get("strategy", "strategy")
        if "riskState" in metadata:
            alerts.append(health_factor_alert(subject, metadata["riskState"], health_factor_threshold))
        if "exposureState" in metadata:
            alerts.append(exposure_alert(subject, metadata["exposureState"]))
        if "EPSState" in metadata:
            alerts.append(eps_alert(subject, metadata["EPSState"]))

    elif match.type == "priceUpdate":
        oracle = metadata.get("oracle", "oracle")
        if metadata.get("strategiesToRebalance"):
            alerts.append(rebalance_alert(oracle, metadata["strategiesToRebalance"]))
        if metadata["oracleState"].is_out:
            alerts.append(oracle_outage_alert(oracle, metadata["oracleState"]))
        if metadata["sequencerState"].is_out:
            alerts.append(sequencer_outage_alert(metadata["sequencerState"]))

    elif match.type == "borrowRate":
        alerts.append(borrow_rate_alert(
            metadata["reserve"], metadata["currBorrowRate"], metadata["affectedStrategies"]
        ))

    return alerts


def _labelled(deployment: DeploymentConfig, subject: str) -> str:
    if not Web3.is_address(subject):
        return subject
    label = deployment.label(subject)
    return subject if label == Web3.to_checksum_address(subject) else f"{label} ({subject})"


def notify_matches(client: NotificationClient, matches: Iterable[Match],
                   health_factor_threshold: int,
                   deployment: Optional[DeploymentConfig] = None) -> int:
    """
    Send alerts for every match. With a deployment, subjects are prefixed
    with their configured label.

    Returns:
        Number of alerts accepted by at least one channel
    """
    if not check_alert_channels_exist(client):
        return 0

    sent = 0
    for match in matches:
        for alert in alerts_for_match(match, health_factor_threshold):
            alert["message"] = f"{match.type} event {match.event_hash}"
            if deployment is not None:
                alert["subject"] = _labelled(deployment, alert["subject"])
            if client.send(alert):
                sent += 1
    return sent
