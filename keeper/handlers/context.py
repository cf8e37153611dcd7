"""
Per-invocation setup shared by the handlers.
"""

import logging
from typing import Any, Dict, Optional

from web3 import Web3

from keeper.config.deployment import DeploymentConfig, load_deployment
from keeper.config.settings import LOG_FORMAT, LOG_LEVEL, RPC_TIMEOUT_SECONDS, RPC_URL
from keeper.core.evaluators import DispatchContext
from keeper.core.store import KeyValueStore, store_from_payload


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def connect(rpc_url: str = RPC_URL) -> Web3:
    return Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": RPC_TIMEOUT_SECONDS}))


def build_context(payload: Dict[str, Any], w3: Optional[Web3] = None,
                  deployment: Optional[DeploymentConfig] = None,
                  store: Optional[KeyValueStore] = None) -> DispatchContext:
    """
    Assemble the collaborators for one invocation.

    Anything not injected is built from settings: Web3 over RPC_URL (or
    payload["secrets"]["RPC_URL"]), the deployment file and a Postgres
    store using the payload's credentials.
    """
    secrets = (payload or {}).get("secrets") or {}
    if w3 is None:
        w3 = connect(secrets.get("RPC_URL") or RPC_URL)
    if deployment is None:
        deployment = load_deployment()
    if store is None:
        store = store_from_payload(payload)
    return DispatchContext(w3=w3, deployment=deployment, store=store)


def request_events(payload: Dict[str, Any]):
    """payload.request.body.events"""
    return payload["request"]["body"]["events"]
