"""
Notification modules for alerting.

Supports:
- Telegram
- Slack
"""

from .telegram import send_telegram_alert, send_telegram_message
from .slack import send_slack_alert, send_slack_message
from .alerts import (
    NotificationClient,
    check_alert_channels_exist,
    notify_matches,
    send_eps_alert,
    send_exposure_alert,
    send_health_factor_alert,
    send_oracle_outage_alert,
    send_sequencer_outage_alert,
)

__all__ = [
    # Channels
    "send_telegram_alert",
    "send_telegram_message",
    "send_slack_alert",
    "send_slack_message",
    # Alerts
    "NotificationClient",
    "check_alert_channels_exist",
    "notify_matches",
    "send_eps_alert",
    "send_exposure_alert",
    "send_health_factor_alert",
    "send_oracle_outage_alert",
    "send_sequencer_outage_alert",
]
