"""
Match Handler - entry point invoked by the monitoring platform.

Receives a batch of matched on-chain events and returns the adverse
findings as {"matches": [...]}; the platform turns those into alerts.
"""

import argparse
import json
import logging
from datetime import datetime, timezone

from keeper.core.dispatcher import dispatch_events
from keeper.handlers.context import build_context, configure_logging, request_events

logger = logging.getLogger(__name__)


def handler(payload, context=None, **overrides):
    """
    Evaluate a batch of matched events.

    Args:
        payload: Platform payload; events under payload["request"]["body"]["events"]
        context: Platform context (unused)
        overrides: w3, deployment or store to use instead of the configured ones

    Returns:
        {"matches": [serialised Match, ...]}

    Raises:
        EvaluationError: an evaluator failed; no partial result is returned
    """
    configure_logging()
    start_time = datetime.now(timezone.utc)

    events = request_events(payload)
    ctx = build_context(payload, **overrides)

    logger.info("Evaluating %d events for deployment %s", len(events), ctx.deployment.name)
    matches = dispatch_events(events, ctx)

    duration_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
    logger.info("Found %d matches in %.0fms", len(matches), duration_ms)

    return {"matches": [m.to_dict() for m in matches]}


# For local testing
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the keeper against a saved event payload")
    parser.add_argument("payload", help="Path to a JSON payload ({request: {body: {events: [...]}}})")
    args = parser.parse_args()

    with open(args.payload, "r") as f:
        result = handler(json.load(f))
    print(json.dumps(result, indent=2))
