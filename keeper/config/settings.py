"""
Keeper configuration.

RPC endpoint, key-value store database, alert channels and runtime knobs.
Deployment-specific tables (which strategies, oracles and reserves exist)
live in the deployment JSON, see keeper.config.deployment.
"""

import os
from pathlib import Path

# Chain RPC used for every read call in an invocation
RPC_URL = os.getenv("RPC_URL", "https://mainnet.base.org")
RPC_TIMEOUT_SECONDS = int(os.getenv("RPC_TIMEOUT_SECONDS", 20))

# Key-value store database (last-seen equity per share, oracle rounds)
DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "database": os.getenv("DB_NAME", "keeper"),
    "user": os.getenv("DB_USER", "keeper"),
    "password": os.getenv("DB_PASSWORD", ""),
    "port": int(os.getenv("DB_PORT", 5432))
}

SCHEMA_NAME = os.getenv("DB_SCHEMA", "public")
TABLE_PREFIX = "keeper_"

# Alert notification settings
ALERT_CONFIG = {
    "slack_webhook": os.getenv("SLACK_WEBHOOK_URL"),
    "telegram_bot_token": os.getenv("TELEGRAM_BOT_TOKEN"),
    "telegram_chat_id": os.getenv("TELEGRAM_CHAT_ID"),
    # channel that must be configured, e.g. "slack"; unset accepts any
    "required_channel": os.getenv("KEEPER_REQUIRED_ALERT_CHANNEL"),
}

# Deployment tables (oracle -> strategies, thresholds, ...)
DEFAULT_DEPLOYMENT_FILE = Path(__file__).resolve().parent.parent / "deployments" / "base_mainnet.json"
DEPLOYMENT_FILE = os.getenv("KEEPER_DEPLOYMENT_FILE", str(DEFAULT_DEPLOYMENT_FILE))

# Concurrent read calls per evaluation
EXECUTOR_MAX_WORKERS = int(os.getenv("EXECUTOR_MAX_WORKERS", 4))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
