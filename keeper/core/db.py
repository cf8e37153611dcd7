"""
Database connection and utilities for the keeper's key-value store.

Connection parameters default to DB_CONFIG; handlers may pass per-invocation
credentials taken from the platform payload.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import psycopg2
from psycopg2.extras import RealDictCursor

from keeper.config.settings import DB_CONFIG, SCHEMA_NAME, TABLE_PREFIX

logger = logging.getLogger(__name__)


def table_name(name: str) -> str:
    """Get full table name with schema and prefix."""
    return f"{SCHEMA_NAME}.{TABLE_PREFIX}{name}"


@contextmanager
def get_connection(db_config: Optional[Dict[str, Any]] = None):
    """
    Get a database connection as a context manager.

    Usage:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1")
    """
    conn = None
    try:
        conn = psycopg2.connect(**(db_config or DB_CONFIG))
        yield conn
    finally:
        if conn:
            conn.close()


def execute_query(query: str, params: tuple = None, fetch: bool = True,
                  db_config: Optional[Dict[str, Any]] = None) -> Optional[List[Dict]]:
    """
    Execute a query and optionally fetch results.

    Args:
        query: SQL query string
        params: Query parameters (tuple)
        fetch: If True, return results as list of dicts
        db_config: Optional connection parameters overriding DB_CONFIG

    Returns:
        List of dicts if fetch=True, else None
    """
    with get_connection(db_config) as conn:
        with conn.cursor(cursor_factory=RealDictCursor) as cur:
            cur.execute(query, params)
            if fetch:
                return [dict(row) for row in cur.fetchall()]
            conn.commit()
            return None


def ensure_kv_table(db_config: Optional[Dict[str, Any]] = None) -> None:
    """Create the key-value table if it does not exist yet."""
    execute_query(f"CREATE SCHEMA IF NOT EXISTS {SCHEMA_NAME}", fetch=False, db_config=db_config)
    query = f"""
        CREATE TABLE IF NOT EXISTS {table_name('kv_store')} (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """
    execute_query(query, fetch=False, db_config=db_config)

