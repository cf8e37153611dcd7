"""
Key-value store for state that must survive between invocations.

Only two kinds of keys are written:
- eps:<strategy>            last seen equity per share (18 decimals)
- oracle:<oracle>:round     last observed round id
"""

import logging
from typing import Any, Dict, Optional

from web3 import Web3

from keeper.config.settings import DB_CONFIG
from keeper.core.db import ensure_kv_table, execute_query, table_name

logger = logging.getLogger(__name__)


class KeyValueStore:
    """String keys to string values."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def put(self, key: str, value: str) -> None:
        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store for local runs and tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        self._data[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self._data


class PostgresKeyValueStore(KeyValueStore):
    """Store backed by the <prefix>kv_store table."""

    def __init__(self, db_config: Optional[Dict[str, Any]] = None, create_table: bool = False):
        self.db_config = db_config or DB_CONFIG
        if create_table:
            ensure_kv_table(self.db_config)

    def get(self, key: str) -> Optional[str]:
        query = f"SELECT value FROM {table_name('kv_store')} WHERE key = %s"
        rows = execute_query(query, (key,), db_config=self.db_config)
        return rows[0]["value"] if rows else None

    def put(self, key: str, value: str) -> None:
        query = f"""
            INSERT INTO {table_name('kv_store')} (key, value)
            VALUES (%s, %s)
            ON CONFLICT (key) DO UPDATE SET
                value = EXCLUDED.value,
                updated_at = NOW()
        """
        execute_query(query, (key, value), fetch=False, db_config=self.db_config)


# Payload secret names -> psycopg2 connect() kwargs
PAYLOAD_DB_KEYS = {
    "DB_HOST": "host",
    "DB_NAME": "database",
    "DB_USER": "user",
    "DB_PASSWORD": "password",
    "DB_PORT": "port",
}


def store_from_payload(payload: Dict[str, Any]) -> KeyValueStore:
    """
    Build the invocation's store from credentials carried in the payload.

    payload["secrets"] may override any of DB_HOST, DB_NAME, DB_USER,
    DB_PASSWORD, DB_PORT; missing keys fall back to DB_CONFIG. The kv_store
    table is created when missing.
    """
    secrets = (payload or {}).get("secrets") or {}
    db_config = dict(DB_CONFIG)
    for secret_key, conn_key in PAYLOAD_DB_KEYS.items():
        if secrets.get(secret_key):
            db_config[conn_key] = secrets[secret_key]
    db_config["port"] = int(db_config["port"])
    return PostgresKeyValueStore(db_config, create_table=True)


def eps_key(strategy: str) -> str:
    return f"eps:{Web3.to_checksum_address(strategy)}"


def oracle_round_key(oracle: str) -> str:
    return f"oracle:{Web3.to_checksum_address(oracle)}:round"


def get_eps(store: KeyValueStore, strategy: str) -> Optional[int]:
    value = store.get(eps_key(strategy))
    return int(value) if value is not None else None


def set_eps(store: KeyValueStore, strategy: str, eps: int) -> None:
    store.put(eps_key(strategy), str(int(eps)))


def get_last_round(store: KeyValueStore, oracle: str) -> Optional[int]:
    value = store.get(oracle_round_key(oracle))
    return int(value) if value is not None else None


def set_last_round(store: KeyValueStore, oracle: str, round_id: int) -> None:
    store.put(oracle_round_key(oracle), str(int(round_id)))
