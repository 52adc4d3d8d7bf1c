"""PostgreSQL implementation of DocumentStore: one jsonb document per key in relay_documents."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import psycopg2
from psycopg2 import pool, sql
from psycopg2.extras import Json

from colorrelay.exceptions import StoreError
from colorrelay.store.base import DocumentStore

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "relay_documents"


class StorePool:
    """Explicit connection pool (psycopg2 ThreadedConnectionPool) with scoped acquisition.

    connection() hands out one pooled connection, commits on success, rolls back on error and
    always returns the connection to the pool. Broken connections are discarded instead of reused.
    """

    def __init__(self, dsn: str, minconn: int = 1, maxconn: int = 5, connect_timeout: int = 10) -> None:
        try:
            self._pool = pool.ThreadedConnectionPool(
                minconn,
                maxconn,
                dsn=dsn,
                connect_timeout=connect_timeout,
            )
        except psycopg2.Error as e:
            raise StoreError(f"connect failed: {e}") from e
        logger.info("StorePool opened (minconn=%s maxconn=%s)", minconn, maxconn)

    @contextmanager
    def connection(self) -> Iterator[Any]:
        try:
            conn = self._pool.getconn()
        except (pool.PoolError, psycopg2.Error) as e:
            raise StoreError(f"no connection available: {e}") from e
        try:
            yield conn
            conn.commit()
        except Exception:
            if not conn.closed:
                conn.rollback()
            raise
        finally:
            self._pool.putconn(conn, close=bool(conn.closed))

    def close(self) -> None:
        if not self._pool.closed:
            self._pool.closeall()
            logger.info("StorePool closed")


def ensure_table(conn, table: str = DEFAULT_TABLE) -> None:
    """Create the documents table if not exists (key text PRIMARY KEY, doc jsonb, updated_at)."""
    with conn.cursor() as cur:
        cur.execute(
            sql.SQL(
                """
                CREATE TABLE IF NOT EXISTS {} (
                    key text PRIMARY KEY,
                    doc jsonb NOT NULL DEFAULT '{{}}'::jsonb,
                    updated_at timestamptz NOT NULL DEFAULT now()
                )
                """
            ).format(sql.Identifier(table))
        )


class PostgresStore(DocumentStore):
    """Document store on a PostgreSQL table. Every operation is one statement on a pooled connection."""

    backend = "postgres"

    def __init__(self, store_pool: StorePool, table: Optional[str] = None) -> None:
        self._pool = store_pool
        self._table = sql.Identifier(table or DEFAULT_TABLE)
        self._table_name = table or DEFAULT_TABLE

    def ensure_table(self) -> None:
        try:
            with self._pool.connection() as conn:
                ensure_table(conn, self._table_name)
        except psycopg2.Error as e:
            logger.warning("PostgresStore ensure_table failed: %s", e)
            raise StoreError(str(e)) from e

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        sql.SQL("SELECT doc FROM {} WHERE key = %s").format(self._table),
                        (key,),
                    )
                    row = cur.fetchone()
        except psycopg2.Error as e:
            logger.warning("PostgresStore get(%s) failed: %s", key, e)
            raise StoreError(str(e), key=key) from e
        if row is None:
            return None
        # jsonb comes back as dict
        return dict(row[0] or {})

    def upsert(self, key: str, fields: Dict[str, Any]) -> None:
        try:
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        sql.SQL(
                            """
                            INSERT INTO {table} (key, doc, updated_at) VALUES (%s, %s, now())
                            ON CONFLICT (key) DO UPDATE SET doc = {table}.doc || EXCLUDED.doc, updated_at = now()
                            """
                        ).format(table=self._table),
                        (key, Json(fields)),
                    )
        except psycopg2.Error as e:
            logger.warning("PostgresStore upsert(%s) failed: %s", key, e)
            raise StoreError(str(e), key=key) from e

    def consume_flag(self, key: str, field: str, timestamp: str) -> bool:
        # Single conditional UPDATE: the row lock makes a concurrent consumer re-check the WHERE and miss.
        try:
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        sql.SQL(
                            """
                            UPDATE {} SET doc = doc || %s, updated_at = now()
                            WHERE key = %s AND doc ->> %s = 'true'
                            RETURNING key
                            """
                        ).format(self._table),
                        (Json({field: False, "timestamp": timestamp}), key, field),
                    )
                    row = cur.fetchone()
        except psycopg2.Error as e:
            logger.warning("PostgresStore consume_flag(%s.%s) failed: %s", key, field, e)
            raise StoreError(str(e), key=key) from e
        return row is not None

    def ping(self) -> None:
        try:
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT 1")
                    cur.fetchone()
        except psycopg2.Error as e:
            raise StoreError(str(e)) from e

    def close(self) -> None:
        self._pool.close()
