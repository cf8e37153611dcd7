"""
Slack Notification Module - Send keeper alerts to a Slack webhook.

Attachments colored by severity.
"""

import logging
from datetime import datetime, timezone
from typing import Dict

import requests

logger = logging.getLogger(__name__)

# Severity colors for Slack
SEVERITY_COLORS = {
    "critical": "#FF0000",  # Red
    "warning": "#FFA500",   # Orange
    "info": "#0000FF"       # Blue
}

# Severity emojis
SEVERITY_EMOJIS = {
    "critical": ":rotating_light:",
    "warning": ":warning:",
    "info": ":information_source:"
}


def format_alert(alert: Dict) -> Dict:
    """
    Format a keeper alert as a Slack attachment.

    Args:
        alert: Alert dict (severity, title, subject, fields, message)

    Returns:
        Slack attachment dict
    """
    severity = alert.get("severity", "info")
    color = SEVERITY_COLORS.get(severity, "#808080")
    emoji = SEVERITY_EMOJIS.get(severity, ":bell:")

    fields = [
        {
            "title": "Subject",
            "value": alert.get("subject", "Unknown"),
            "short": False
        }
    ]
    for name, value in alert.get("fields", {}).items():
        fields.append({"title": name, "value": str(value), "short": True})

    return {
        "color": color,
        "title": f"{emoji} {severity.upper()}: {alert.get('title', 'Keeper alert')}",
        "text": alert.get("message", ""),
        "fields": fields,
        "footer": "Loop Strategy Keeper",
        "ts": int(datetime.now(timezone.utc).timestamp())
    }


def send_slack_message(payload: Dict, webhook_url: str) -> bool:
    """
    Send a message to Slack webhook.

    Returns:
        True if successful
    """
    if not webhook_url:
        logger.warning("Slack webhook URL not configured")
        return False

    try:
        response = requests.post(
            webhook_url,
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=10
        )
        response.raise_for_status()
        return True
    except requests.exceptions.RequestException as e:
        logger.error("Slack send error: %s", e)
        return False


def send_slack_alert(alert: Dict, webhook_url: str) -> bool:
    return send_slack_message({"attachments": [format_alert(alert)]}, webhook_url)
