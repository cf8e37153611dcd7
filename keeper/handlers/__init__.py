"""
Platform entry points.

- match_handler: returns matches for the platform to alert on
- notify_handler: returns matches and sends alerts through Telegram/Slack
"""

from .match_handler import handler as match_handler
from .notify_handler import handler as notify_handler

__all__ = [
    "match_handler",
    "notify_handler",
]
