"""
Notify Handler - evaluates the event batch and sends alerts itself.

For deployments where the keeper owns alert delivery instead of handing
matches back to the platform. The notification client comes from the
platform context when it provides one, otherwise from ALERT_CONFIG.
"""

import logging

from keeper.core.dispatcher import dispatch_events
from keeper.handlers.context import build_context, configure_logging, request_events
from keeper.notifications.alerts import NotificationClient, notify_matches

logger = logging.getLogger(__name__)


def _notification_client(context) -> NotificationClient:
    if isinstance(context, dict) and context.get("notification_client"):
        return context["notification_client"]
    if getattr(context, "notification_client", None):
        return context.notification_client
    return NotificationClient.from_settings()


def handler(payload, context=None, **overrides):
    """
    Returns:
        {"matches": [...], "notified": number of alerts delivered}
    """
    configure_logging()

    events = request_events(payload)
    ctx = build_context(payload, **overrides)
    client = _notification_client(context)

    matches = dispatch_events(events, ctx)
    notified = notify_matches(client, matches, ctx.deployment.health_factor_threshold, ctx.deployment)
    logger.info("Sent %d alerts for %d matches", notified, len(matches))

    return {
        "matches": [m.to_dict() for m in matches],
        "notified": notified,
    }
