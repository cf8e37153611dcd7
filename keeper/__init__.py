"""
Loop Strategy Keeper

Alert handlers for leveraged loop strategies. A monitoring platform hands
the keeper batches of matched on-chain events; the keeper reads the
strategies, oracles and lending pool involved and reports what needs
attention.

Quick Start:
    from keeper import match_handler

    result = match_handler(payload)
    # {"matches": [{"hash": "0x...", "metadata": {"type": "withdraw", ...}}]}

Local run against a saved payload:
    python -m keeper.handlers.match_handler payload.json
"""

__version__ = "1.0.0"

from .config import DeploymentConfig, DeploymentConfigError, load_deployment
from .core import DispatchContext, EvaluationError, InMemoryKeyValueStore, Match, dispatch_events
from .handlers import match_handler, notify_handler

__all__ = [
    "DeploymentConfig",
    "DeploymentConfigError",
    "load_deployment",
    "DispatchContext",
    "EvaluationError",
    "InMemoryKeyValueStore",
    "Match",
    "dispatch_events",
    "match_handler",
    "notify_handler",
]
