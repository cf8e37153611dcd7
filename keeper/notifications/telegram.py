"""
Telegram Notification Module - Send keeper alerts to Telegram.

Markdown formatting with severity indicators.
"""

import logging
from typing import Dict

import requests

logger = logging.getLogger(__name__)

# Telegram API base URL
TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/sendMessage"

# Severity emojis
SEVERITY_EMOJIS = {
    "critical": "🚨",
    "warning": "⚠️",
    "info": "ℹ️"
}


def escape_markdown(text: str) -> str:
    """Escape underscores, the only Markdown character common in field names."""
    if text is None:
        return ""
    return str(text).replace("_", "\\_")


def format_alert(alert: Dict) -> str:
    """
    Format a keeper alert as Telegram message.

    Args:
        alert: Alert dict (severity, title, subject, fields)

    Returns:
        Formatted message string (Markdown)
    """
    severity = alert.get("severity", "info")
    emoji = SEVERITY_EMOJIS.get(severity, "🔔")

    lines = [
        f"{emoji} *{severity.upper()}: {escape_markdown(alert.get('title', 'Keeper alert'))}*",
        "",
        f"*Subject:* {escape_markdown(alert.get('subject', 'Unknown'))}",
    ]
    for name, value in alert.get("fields", {}).items():
        lines.append(f"*{escape_markdown(name)}:* {escape_markdown(value)}")

    return "\n".join(lines)


def send_telegram_message(text: str, bot_token: str, chat_id: str,
                          parse_mode: str = "Markdown") -> bool:
    """
    Send a message to Telegram.

    Returns:
        True if successful
    """
    if not bot_token or not chat_id:
        logger.warning("Telegram bot token or chat id not configured")
        return False

    url = TELEGRAM_API_URL.format(token=bot_token)

    payload = {
        "chat_id": chat_id,
        "text": text,
        "parse_mode": parse_mode
    }

    try:
        response = requests.post(url, json=payload, timeout=10)
        response.raise_for_status()

        result = response.json()
        if not result.get("ok"):
            logger.error("Telegram API error: %s", result.get("description", "Unknown error"))
            return False

        return True
    except requests.exceptions.RequestException as e:
        logger.error("Telegram send error: %s", e)
        return False


def send_telegram_alert(alert: Dict, bot_token: str, chat_id: str) -> bool:
    return send_telegram_message(format_alert(alert), bot_token, chat_id)
