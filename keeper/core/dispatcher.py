"""
Match Dispatcher - Routes each match reason of an event batch to its evaluator.

Routes:
- Deposit / Withdraw (strategy): health factor, exposure, equity per share
- AnswerUpdated (oracle): rebalance need, oracle staleness, sequencer status
- Borrow / Repay / Supply / Withdraw / LiquidationCall (pool): borrow rate
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from keeper.core.evaluators import (
    POOL_LIQUIDATION_SIG,
    DispatchContext,
    handle_pool_action,
    handle_price_update,
    handle_withdraw_or_deposit,
)
from keeper.core.models import Match

logger = logging.getLogger(__name__)

DEPOSIT_SIG = "Deposit(address,address,uint256,uint256)"
WITHDRAW_SIG = "Withdraw(address,address,address,uint256,uint256)"
PRICE_UPDATE_SIG = "AnswerUpdated(int256,uint256,uint256)"
POOL_BORROW_SIG = "Borrow(address,address,address,uint256,uint8,uint256,uint16)"
POOL_REPAY_SIG = "Repay(address,address,address,uint256,bool)"
POOL_WITHDRAW_SIG = "Withdraw(address,address,address,uint256)"
POOL_SUPPLY_SIG = "Supply(address,address,address,uint256,uint16)"

POOL_ACTION_SIGS = (
    POOL_BORROW_SIG,
    POOL_REPAY_SIG,
    POOL_WITHDRAW_SIG,
    POOL_SUPPLY_SIG,
    POOL_LIQUIDATION_SIG,
)

# route -> flow name used in error logs
FLOW_NAMES = {
    "withdraw": "withdraw or deposit",
    "deposit": "withdraw or deposit",
    "priceUpdate": "priceUpdate",
    "poolAction": "pool action",
}


class EvaluationError(RuntimeError):
    """An evaluator failed; the rest of the batch was not processed."""

    def __init__(self, flow: str, event_hash: str, signature: str):
        self.flow = flow
        self.event_hash = event_hash
        self.signature = signature
        super().__init__(f"Error during {flow} check flow (event {event_hash}, {signature})")


def reason_type(signature: str) -> Optional[str]:
    """Route for a match-reason signature, None when the keeper ignores it."""
    if signature == WITHDRAW_SIG:
        return "withdraw"
    if signature == DEPOSIT_SIG:
        return "deposit"
    if signature == PRICE_UPDATE_SIG:
        return "priceUpdate"
    if signature in POOL_ACTION_SIGS:
        return "poolAction"
    return None


def dispatch_reason(reason: Dict[str, Any], event_hash: str,
                    matches: List[Match], ctx: DispatchContext) -> None:
    """Run the evaluator for a single match reason."""
    signature = reason.get("signature")
    route = reason_type(signature)
    logger.info("current match reason signature: %s", signature)

    if route is None:
        logger.debug("No evaluator for %s, skipping", signature)
        return

    try:
        if route in ("withdraw", "deposit"):
            handle_withdraw_or_deposit(route, reason, event_hash, matches, ctx)
        elif route == "priceUpdate":
            handle_price_update(reason, event_hash, matches, ctx)
        else:
            handle_pool_action(reason, event_hash, matches, ctx)
    except Exception as err:
        flow = FLOW_NAMES[route]
        logger.error("There was an error during %s check flow (event %s): %s",
                     flow, event_hash, err)
        raise EvaluationError(flow, event_hash, signature) from err


def dispatch_events(events: Iterable[Dict[str, Any]], ctx: DispatchContext) -> List[Match]:
    """
    Evaluate every match reason of every event, in order.

    Args:
        events: Platform event batch (each with "hash" and "matchReasons")
        ctx: Shared collaborators for this invocation

    Returns:
        Matches found across the batch

    Raises:
        EvaluationError: first evaluator failure; later reasons are not evaluated
    """
    matches: List[Match] = []

    for event in events:
        for reason in event.get("matchReasons", []):
            dispatch_reason(reason, event.get("hash"), matches, ctx)

    logger.info("matches: %d", len(matches))
    return matches
